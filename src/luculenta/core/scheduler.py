"""Multithreaded tile scheduler: the render entry point.

render() validates its inputs, splits the image into tiles and starts a fixed
pool of worker threads that share one TileQueue. Each worker owns its
Sampler and repeatedly

    1. takes a tile from the queue (the only point where it blocks),
    2. traces `samples_per_pass` samples for every pixel of the tile,
    3. merges the tile into the shared Film,
    4. puts the tile back, or marks it DONE once it reached the target.

An exception inside a tile is logged and marks only that tile FAILED; its
partial results are dropped and the other workers carry on. stop() closes
the queue, so workers exit at their next dequeue and the film keeps every
pass merged so far.

Example:
    >>> handle = render(scene, scene.camera, 320, 240, samples_per_pixel=64)
    >>> handle.wait()
    True
    >>> rgb = handle.snapshot().linear_srgb()

    >>> with render(scene, None, 320, 240, samples_per_pixel=None) as handle:
    ...     time.sleep(10.0)      # continuous mode, refine for ten seconds
    ...     image = handle.snapshot()
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from luculenta.core.film import Film, FilmSnapshot
from luculenta.core.integrator import DEFAULT_SETTINGS, IntegratorSettings, render_sample
from luculenta.core.sampler import Sampler, worker_sampler
from luculenta.core.tiles import Tile, TileState, make_tiles

if TYPE_CHECKING:
    from luculenta.camera.pinhole import PinholeCamera
    from luculenta.scene.scene import Scene

logger = logging.getLogger(__name__)

# Tile edge length in pixels
DEFAULT_TILE_SIZE = 16

# Samples per pixel traced for a tile before it is merged and requeued
DEFAULT_SAMPLES_PER_PASS = 4

DEFAULT_SAMPLES_PER_PIXEL = 16


def default_thread_count() -> int:
    return os.cpu_count() or 1


# =============================================================================
# Work Queue
# =============================================================================


class TileQueue:
    """FIFO of tiles shared by the worker pool.

    get() blocks while the queue is open and empty, and returns None once the
    queue is closed and has nothing left to hand out.
    """

    def __init__(self) -> None:
        self._items: deque[Tile] = deque()
        self._closed = False
        self._cond = threading.Condition()

    def put(self, tile: Tile) -> bool:
        """Append a tile. Returns False if the queue was already closed."""
        with self._cond:
            if self._closed:
                return False
            self._items.append(tile)
            self._cond.notify()
            return True

    def get(self, timeout: float | None = None) -> Tile | None:
        with self._cond:
            deadline = None if timeout is None else time.monotonic() + timeout
            while not self._items and not self._closed:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0.0:
                    return None
                self._cond.wait(remaining)
            if self._items:
                return self._items.popleft()
            return None

    def close(self, drain: bool = False) -> None:
        """Close the queue; with drain=True also discard queued tiles."""
        with self._cond:
            self._closed = True
            if drain:
                self._items.clear()
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class RenderOptions:
    """Parameters of one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Target samples per pixel. None renders
            continuously until stopped.
        threads: Number of worker threads.
        tile_size: Tile edge length in pixels.
        samples_per_pass: Samples per pixel traced before a tile is merged.
        seed: Base seed; worker i uses seed ^ i.
        integrator: Path tracer settings.
    """

    width: int
    height: int
    samples_per_pixel: int | None = DEFAULT_SAMPLES_PER_PIXEL
    threads: int = field(default_factory=default_thread_count)
    tile_size: int = DEFAULT_TILE_SIZE
    samples_per_pass: int = DEFAULT_SAMPLES_PER_PASS
    seed: int = 0
    integrator: IntegratorSettings = DEFAULT_SETTINGS

    @property
    def continuous(self) -> bool:
        return self.samples_per_pixel is None

    def validate(self) -> None:
        """Raise ValueError for options that cannot start a render."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel is not None and self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive or None, got {self.samples_per_pixel}"
            )
        if self.threads < 1:
            raise ValueError(f"At least one worker thread is required, got {self.threads}")
        if self.tile_size <= 0:
            raise ValueError(f"Tile size must be positive, got {self.tile_size}")
        if self.samples_per_pass <= 0:
            raise ValueError(f"samples_per_pass must be positive, got {self.samples_per_pass}")
        self.integrator.validate()


@dataclass(frozen=True)
class RenderStats:
    """Counters describing a render's progress.

    Attributes:
        samples: Camera samples traced and merged.
        discarded: Samples whose estimate was NaN, infinite or negative.
        passes: Tile passes merged into the film.
        tiles_done: Tiles that reached the target sample count.
        tiles_failed: Tiles dropped after an exception.
        tiles_active: Tiles a worker is rendering right now.
        elapsed: Seconds since the render started (until it finished).
    """

    samples: int
    discarded: int
    passes: int
    tiles_done: int
    tiles_failed: int
    tiles_active: int
    elapsed: float

    @property
    def samples_per_second(self) -> float:
        return self.samples / self.elapsed if self.elapsed > 0.0 else 0.0


# =============================================================================
# Render Handle
# =============================================================================


class RenderHandle:
    """A running (or finished) render.

    The film can be read at any time through snapshot(); the handle stops
    the render when used as a context manager and the block exits.

    Attributes:
        scene: The scene being rendered (read-only while running).
        camera: The camera generating primary rays.
        options: The validated render options.
        film: The shared accumulation buffer.
        tiles: All tiles of the image, in row-major order.
    """

    def __init__(
        self,
        scene: Scene,
        camera: PinholeCamera,
        options: RenderOptions,
        film: Film | None = None,
    ) -> None:
        if film is None:
            film = Film(options.width, options.height)
        elif (film.width, film.height) != (options.width, options.height):
            raise ValueError(
                f"Film is {film.width}x{film.height} but the render is "
                f"{options.width}x{options.height}"
            )
        self.scene = scene
        self.camera = camera
        self.options = options
        self.film = film
        self.tiles = make_tiles(options.width, options.height, options.tile_size)

        self._queue = TileQueue()
        self._lock = threading.Lock()
        self._stop_requested = threading.Event()
        self._finished = threading.Event()
        self._threads: list[threading.Thread] = []
        self._outstanding = len(self.tiles)
        self._live_workers = 0
        self._samples = 0
        self._discarded = 0
        self._passes = 0
        self._started_at: float | None = None
        self._finished_at: float | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Queue every tile and start the worker pool.

        Raises:
            RuntimeError: If the render was already started.
        """
        if self._started_at is not None:
            raise RuntimeError("Render has already been started")

        self._started_at = time.perf_counter()
        self.scene.begin_render()
        for tile in self.tiles:
            self._queue.put(tile)

        mode = (
            "continuous"
            if self.options.continuous
            else f"{self.options.samples_per_pixel} spp"
        )
        logger.info(
            "Render started: %dx%d, %s, %d tiles, %d threads",
            self.options.width,
            self.options.height,
            mode,
            len(self.tiles),
            self.options.threads,
        )

        self._live_workers = self.options.threads
        for index in range(self.options.threads):
            thread = threading.Thread(
                target=self._worker,
                args=(index,),
                name=f"luculenta-worker-{index}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()

    def stop(self) -> None:
        """Request cancellation; workers exit at their next dequeue."""
        self._stop_requested.set()
        self._queue.close(drain=True)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until all workers exited. Returns False on timeout."""
        if self._started_at is None:
            raise RuntimeError("Render has not been started")
        return self._finished.wait(timeout)

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    @property
    def stopped(self) -> bool:
        return self._stop_requested.is_set()

    def __enter__(self) -> RenderHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
        if self._started_at is not None:
            self.wait()

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def snapshot(self) -> FilmSnapshot:
        """Return a consistent copy of the film.

        Raises:
            RuntimeError: If the render has not been started.
        """
        if self._started_at is None:
            raise RuntimeError("Render has not been started; the film is empty")
        return self.film.snapshot()

    @property
    def failed_tiles(self) -> list[Tile]:
        with self._lock:
            return [tile for tile in self.tiles if tile.state is TileState.FAILED]

    def stats(self) -> RenderStats:
        with self._lock:
            if self._started_at is None:
                elapsed = 0.0
            else:
                end = self._finished_at if self._finished_at is not None else time.perf_counter()
                elapsed = end - self._started_at
            return RenderStats(
                samples=self._samples,
                discarded=self._discarded,
                passes=self._passes,
                tiles_done=sum(1 for t in self.tiles if t.state is TileState.DONE),
                tiles_failed=sum(1 for t in self.tiles if t.state is TileState.FAILED),
                tiles_active=sum(1 for t in self.tiles if t.state is TileState.ACTIVE),
                elapsed=elapsed,
            )

    def __repr__(self) -> str:
        status = "done" if self.done else ("stopping" if self.stopped else "running")
        return (
            f"RenderHandle({self.options.width}x{self.options.height}, "
            f"tiles={len(self.tiles)}, {status})"
        )

    # -------------------------------------------------------------------------
    # Workers
    # -------------------------------------------------------------------------

    def _worker(self, worker_index: int) -> None:
        sampler = worker_sampler(self.options.seed, worker_index)
        try:
            while True:
                tile = self._queue.get()
                if tile is None:
                    break
                self._process_tile(tile, sampler)
        finally:
            self._worker_exited()

    def _pass_samples(self, tile: Tile) -> int:
        target = self.options.samples_per_pixel
        if target is None:
            return self.options.samples_per_pass
        return min(self.options.samples_per_pass, target - tile.samples_per_pixel)

    def _process_tile(self, tile: Tile, sampler: Sampler) -> None:
        with self._lock:
            tile.state = TileState.ACTIVE
        spp = self._pass_samples(tile)
        try:
            discarded = self._render_tile(tile, sampler, spp)
            self.film.merge(tile)
        except Exception:
            logger.exception(
                "Tile %d (%d,%d)-(%d,%d) failed; dropping its partial results",
                tile.index,
                tile.x0,
                tile.y0,
                tile.x1,
                tile.y1,
            )
            tile.clear_local()
            with self._lock:
                tile.state = TileState.FAILED
                self._retire_locked()
            return

        tile.clear_local()
        tile.passes += 1
        tile.samples_per_pixel += spp
        logger.debug(
            "Tile %d pass %d merged (%d spp)", tile.index, tile.passes, tile.samples_per_pixel
        )

        target = self.options.samples_per_pixel
        with self._lock:
            self._samples += tile.area * spp
            self._discarded += discarded
            self._passes += 1
            if target is not None and tile.samples_per_pixel >= target:
                tile.state = TileState.DONE
                self._retire_locked()
                return
            tile.state = TileState.PENDING

        # A closed queue means the render was stopped; the tile stays pending
        self._queue.put(tile)

    def _render_tile(self, tile: Tile, sampler: Sampler, spp: int) -> int:
        """Trace spp samples for every pixel into the tile's local buffers.

        Returns:
            The number of discarded samples.
        """
        scene = self.scene
        camera = self.camera
        settings = self.options.integrator
        width = self.options.width
        height = self.options.height
        discarded = 0

        for x, y in tile.pixels():
            sx = sy = sz = 0.0
            for _ in range(spp):
                sample = render_sample(scene, camera, x, y, width, height, sampler, settings)
                sx += sample.xyz[0]
                sy += sample.xyz[1]
                sz += sample.xyz[2]
                if sample.discarded:
                    discarded += 1
            tile.record_pixel(x, y, (sx, sy, sz), spp)

        return discarded

    def _retire_locked(self) -> None:
        """Account for a tile that left the rotation; caller holds the lock."""
        self._outstanding -= 1
        if self._outstanding == 0:
            self._queue.close()

    def _worker_exited(self) -> None:
        with self._lock:
            self._live_workers -= 1
            if self._live_workers > 0:
                return
            self._finished_at = time.perf_counter()

        self.scene.end_render()
        stats = self.stats()
        logger.info(
            "Render finished in %.2fs: %d samples (%.0f/s), %d discarded%s",
            stats.elapsed,
            stats.samples,
            stats.samples_per_second,
            stats.discarded,
            ", stopped" if self.stopped else "",
        )
        if stats.tiles_failed:
            logger.warning(
                "%d of %d tiles failed; their pixels hold only earlier passes",
                stats.tiles_failed,
                len(self.tiles),
            )
        self._finished.set()


# =============================================================================
# Entry Point
# =============================================================================


def render(
    scene: Scene,
    camera: PinholeCamera | None,
    width: int,
    height: int,
    samples_per_pixel: int | None = DEFAULT_SAMPLES_PER_PIXEL,
    threads: int | None = None,
    tile_size: int = DEFAULT_TILE_SIZE,
    samples_per_pass: int = DEFAULT_SAMPLES_PER_PASS,
    seed: int = 0,
    settings: IntegratorSettings = DEFAULT_SETTINGS,
    film: Film | None = None,
) -> RenderHandle:
    """Start rendering a scene and return immediately.

    Args:
        scene: The scene to render. It must not be modified until the
            render finishes.
        camera: Camera for primary rays. None uses scene.camera.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Target samples per pixel, or None to render
            until stop() is called.
        threads: Worker thread count. None uses one per CPU.
        tile_size: Tile edge length in pixels.
        samples_per_pass: Samples per pixel traced before each merge.
        seed: Base seed of the worker samplers.
        settings: Integrator parameters.
        film: Existing film to accumulate into. Must match width x height.

    Returns:
        The RenderHandle of the running render.

    Raises:
        ValueError: If the options, the scene or the camera are invalid.
    """
    options = RenderOptions(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        threads=default_thread_count() if threads is None else threads,
        tile_size=tile_size,
        samples_per_pass=samples_per_pass,
        seed=seed,
        integrator=settings,
    )
    options.validate()
    scene.validate(camera)
    if camera is None:
        camera = scene.camera

    handle = RenderHandle(scene, camera, options, film)
    handle.start()
    return handle
