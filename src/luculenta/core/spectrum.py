"""Spectral power distributions and colour conversion.

Radiance, reflectance and emission are all functions of wavelength. This
module represents them as Spectrum instances tabulated on a fixed grid
covering the visible range (380-780 nm at 5 nm spacing), and converts them
to CIE 1931 XYZ tristimulus values.

Colour matching functions:
    The CIE 1931 2-degree standard observer is evaluated from the
    multi-lobe piecewise Gaussian fit of Wyman, Sloan and Shirley,
    "Simple Analytic Approximations to the CIE XYZ Color Matching
    Functions" (JCGT 2013). The fit stays within a few percent of the
    tabulated CIE data over the whole visible range, which only affects
    output colour fidelity, never the radiance estimator itself.

Single-wavelength samples:
    The path tracer carries one wavelength per path. wavelength_to_xyz()
    turns one such sample into its XYZ contribution for a uniform
    wavelength pdf, normalised so that an equal-energy spectrum of
    magnitude 1 averages to Y = 1.

Example:
    >>> red = Spectrum.gaussian(peak=0.9, center=700.0, width=60.0)
    >>> light = Spectrum.blackbody(6504.0)
    >>> reflected = red * light
    >>> x, y, z = reflected.to_tristimulus()
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

# =============================================================================
# Wavelength Grid
# =============================================================================

LAMBDA_MIN = 380.0
LAMBDA_MAX = 780.0
LAMBDA_STEP = 5.0
NUM_SAMPLES = int((LAMBDA_MAX - LAMBDA_MIN) / LAMBDA_STEP) + 1

WAVELENGTHS = np.linspace(LAMBDA_MIN, LAMBDA_MAX, NUM_SAMPLES)

# Physical constants for Planck's law (SI units)
PLANCK_H = 6.62607015e-34
SPEED_OF_LIGHT = 2.99792458e8
BOLTZMANN_K = 1.380649e-23
WIEN_B = 2.897771955e-3


# =============================================================================
# CIE 1931 Colour Matching Functions
# =============================================================================

# (weight, mean, sigma below mean, sigma above mean) per lobe
_X_LOBES = ((1.056, 599.8, 37.9, 31.0), (0.362, 442.0, 16.0, 26.7), (-0.065, 501.1, 20.4, 26.2))
_Y_LOBES = ((0.821, 568.8, 46.9, 40.5), (0.286, 530.9, 16.3, 31.1))
_Z_LOBES = ((1.217, 437.0, 11.8, 36.0), (0.681, 459.0, 26.0, 13.8))


def _lobes(wavelength: float, lobes: Sequence[tuple[float, float, float, float]]) -> float:
    total = 0.0
    for weight, mean, sigma_lo, sigma_hi in lobes:
        sigma = sigma_lo if wavelength < mean else sigma_hi
        t = (wavelength - mean) / sigma
        total += weight * math.exp(-0.5 * t * t)
    return total


def color_matching(wavelength: float) -> tuple[float, float, float]:
    """Evaluate the CIE 1931 colour matching functions at one wavelength.

    Args:
        wavelength: Wavelength in nanometres.

    Returns:
        (x_bar, y_bar, z_bar). Zero outside the supported range.
    """
    if wavelength < LAMBDA_MIN or wavelength > LAMBDA_MAX:
        return (0.0, 0.0, 0.0)
    return (
        _lobes(wavelength, _X_LOBES),
        _lobes(wavelength, _Y_LOBES),
        _lobes(wavelength, _Z_LOBES),
    )


CMF_TABLE = np.array([color_matching(float(w)) for w in WAVELENGTHS])

# Integral of y_bar over the grid, used to normalise luminance
Y_INTEGRAL = float(CMF_TABLE[:, 1].sum() * LAMBDA_STEP)

# Linear sRGB (D65) from XYZ
XYZ_TO_SRGB = np.array(
    [
        [3.2404542, -1.5371385, -0.4985314],
        [-0.9692660, 1.8760108, 0.0415560],
        [0.0556434, -0.2040259, 1.0572252],
    ]
)


def wavelength_to_xyz(wavelength: float, radiance: float) -> tuple[float, float, float]:
    """Convert a single-wavelength radiance sample to an XYZ contribution.

    Assumes the wavelength was drawn uniformly from [LAMBDA_MIN, LAMBDA_MAX].
    Averaging the returned values over many samples gives an unbiased
    estimate of the tristimulus value of the underlying spectrum.
    """
    x_bar, y_bar, z_bar = color_matching(wavelength)
    weight = radiance * (LAMBDA_MAX - LAMBDA_MIN) / Y_INTEGRAL
    return (x_bar * weight, y_bar * weight, z_bar * weight)


def xyz_to_linear_srgb(xyz: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Convert XYZ values (..., 3) to linear sRGB (..., 3).

    The result is not clamped; out-of-gamut colours produce negative
    components.
    """
    return np.asarray(xyz, dtype=np.float64) @ XYZ_TO_SRGB.T


def planck(wavelength: float, temperature: float) -> float:
    """Spectral radiance of a black body (W / sr / m^3)."""
    lam = wavelength * 1e-9
    exponent = PLANCK_H * SPEED_OF_LIGHT / (lam * BOLTZMANN_K * temperature)
    return 2.0 * PLANCK_H * SPEED_OF_LIGHT**2 / (lam**5 * math.expm1(exponent))


# =============================================================================
# Spectrum
# =============================================================================


class Spectrum:
    """An immutable spectral distribution tabulated over the visible range.

    Arithmetic returns new instances: ``a + b`` accumulates independent
    contributions, ``a * b`` models wavelength-dependent attenuation (for
    example light passing through coloured glass) and ``a * 2.0`` scales.

    Attributes:
        values: Read-only array of NUM_SAMPLES magnitudes on WAVELENGTHS.
    """

    __slots__ = ("_table", "values")

    def __init__(self, values: npt.ArrayLike) -> None:
        arr = np.array(values, dtype=np.float64)
        if arr.shape != (NUM_SAMPLES,):
            raise ValueError(
                f"Spectrum needs {NUM_SAMPLES} samples on the {LAMBDA_MIN:g}-"
                f"{LAMBDA_MAX:g} nm grid, got shape {arr.shape}"
            )
        arr.setflags(write=False)
        self.values = arr
        self._table = tuple(arr.tolist())

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def constant(cls, value: float) -> Spectrum:
        """A flat spectrum (grey reflector or equal-energy emitter)."""
        return cls(np.full(NUM_SAMPLES, float(value)))

    @classmethod
    def zero(cls) -> Spectrum:
        return cls.constant(0.0)

    @classmethod
    def gaussian(cls, peak: float, center: float, width: float) -> Spectrum:
        """A Gaussian bump, e.g. a coloured diffuse reflectance.

        Args:
            peak: Magnitude at the center wavelength.
            center: Center wavelength in nm.
            width: Standard deviation in nm.
        """
        if width <= 0.0:
            raise ValueError(f"Gaussian width must be positive, got {width}")
        t = (WAVELENGTHS - center) / width
        return cls(peak * np.exp(-0.5 * t * t))

    @classmethod
    def blackbody(cls, temperature: float, intensity: float = 1.0) -> Spectrum:
        """Emission of a black body, normalised so its peak equals intensity.

        Args:
            temperature: Temperature in kelvin.
            intensity: Scale applied after normalising to the Wien peak.
        """
        if temperature <= 0.0:
            raise ValueError(f"Black body temperature must be positive, got {temperature}")
        peak = planck(WIEN_B / temperature * 1e9, temperature)
        values = [planck(float(w), temperature) / peak for w in WAVELENGTHS]
        return cls(np.asarray(values) * intensity)

    @classmethod
    def from_samples(
        cls, wavelengths: Sequence[float], values: Sequence[float]
    ) -> Spectrum:
        """Resample measured data onto the grid.

        Wavelengths outside the measured interval are set to zero.
        """
        wl = np.asarray(wavelengths, dtype=np.float64)
        vals = np.asarray(values, dtype=np.float64)
        if wl.shape != vals.shape or wl.ndim != 1 or wl.size < 2:
            raise ValueError("from_samples needs two matching 1-D sequences of length >= 2")
        if np.any(np.diff(wl) <= 0.0):
            raise ValueError("Sample wavelengths must be strictly increasing")
        return cls(np.interp(WAVELENGTHS, wl, vals, left=0.0, right=0.0))

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def sample(self, wavelength: float) -> float:
        """Magnitude at a wavelength (linear interpolation, zero outside the range)."""
        if wavelength < LAMBDA_MIN or wavelength > LAMBDA_MAX:
            return 0.0
        pos = (wavelength - LAMBDA_MIN) / LAMBDA_STEP
        i = int(pos)
        if i >= NUM_SAMPLES - 1:
            return self._table[-1]
        f = pos - i
        return self._table[i] * (1.0 - f) + self._table[i + 1] * f

    __call__ = sample

    def to_tristimulus(self) -> tuple[float, float, float]:
        """Integrate against the colour matching functions.

        Returns:
            (X, Y, Z), normalised so that Spectrum.constant(1.0) has Y = 1.
        """
        xyz = self.values @ CMF_TABLE * LAMBDA_STEP / Y_INTEGRAL
        return float(xyz[0]), float(xyz[1]), float(xyz[2])

    def max_value(self) -> float:
        return float(self.values.max())

    def is_black(self) -> bool:
        return not np.any(self.values)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def __add__(self, other: Spectrum) -> Spectrum:
        if not isinstance(other, Spectrum):
            return NotImplemented
        return Spectrum(self.values + other.values)

    def __mul__(self, other: Spectrum | float) -> Spectrum:
        if isinstance(other, Spectrum):
            return Spectrum(self.values * other.values)
        if isinstance(other, (int, float)):
            return Spectrum(self.values * float(other))
        return NotImplemented

    __rmul__ = __mul__

    def scaled(self, factor: float) -> Spectrum:
        return Spectrum(self.values * factor)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Spectrum):
            return NotImplemented
        return bool(np.array_equal(self.values, other.values))

    def __hash__(self) -> int:
        return hash(self._table)

    def __repr__(self) -> str:
        return (
            f"Spectrum(min={self.values.min():.4g}, max={self.values.max():.4g}, "
            f"Y={self.to_tristimulus()[1]:.4g})"
        )
