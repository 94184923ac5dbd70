"""
Global configuration and numerical constants for the fast nonlinear
Fourier transform of the vanishing nonlinear Schroedinger equation.

Reference: Wahls and Poor, "Fast numerical nonlinear Fourier transforms",
IEEE Trans. Inform. Theory 61(12), 2015.
"""

from enum import Enum

import numpy as np


# =============================================================================
# Machine Constants
# =============================================================================

EPSILON = float(np.finfo(np.float64).eps)
"""Machine precision of float64."""


# =============================================================================
# Discretization
# =============================================================================

DEFAULT_DISCRETIZATION = "2SPLIT4A"
"""Discretization used by the fast scattering step unless overridden."""

REFINEMENT_DISCRETIZATION = "BO"
"""Exact-exponential discretization used for Newton refinement and amplitudes."""


# =============================================================================
# Fast Scattering (polynomial assembly)
# =============================================================================

FFT_CROSSOVER_LENGTH = 64
"""Convolutions whose output is shorter than this are summed directly."""

OVERFLOW_EXPONENT = 500
"""Coefficients are rescaled once their maximum leaves [2^-E, 2^E]."""


# =============================================================================
# Bound State Localization
# =============================================================================

DEFAULT_NITER = 10
"""Default number of Newton iterations."""

SUBSAMPLING_MIN_LENGTH = 128
"""Subsampled signals keep at least this many samples (or all of them)."""

DEFLATION_TOLERANCE = 1e2 * EPSILON
"""Outer coefficients below this times the largest one are treated as zero."""


# =============================================================================
# Bound State Filtering
# =============================================================================

DEFAULT_MERGE_TOLERANCE = float(np.sqrt(EPSILON))
"""Candidates closer than this are merged into one bound state."""

DEFAULT_NONREAL_TOLERANCE = float(np.sqrt(EPSILON))
"""Candidates with |Im λ| below this are treated as real-axis noise."""

ALIASING_SAFETY_FACTOR = 0.9
"""Fraction of the resolved band |Re λ| < π/(2ε) that is trusted."""

IM_BOUND_FACTOR = 0.5
"""Im λ of a plausible bound state is at most this factor times ||q||²."""


# =============================================================================
# Amplitudes
# =============================================================================

SINGULAR_DERIVATIVE_TOLERANCE = 1e2 * EPSILON
"""A residue is singular when |a'(λ)| <= tol * max(1, |b(λ)|)."""

SMALL_ARGUMENT = 1e-3
"""Below this |k ε| the exact-exponential entries use Taylor series."""


# =============================================================================
# Test Cases
# =============================================================================

MPMATH_PRECISION = 30
"""Number of decimal digits for mpmath reference values."""

SECH_INTERVAL = (-16.0, 16.0)
"""Default (T0, T1) of the sampled sech test signal."""


# =============================================================================
# Utility Functions
# =============================================================================

def is_power_of_two(n: int) -> bool:
    """
    Check whether n is a positive power of two.

    >>> is_power_of_two(1024)
    True
    >>> is_power_of_two(1000)
    False
    """
    return n > 0 and (n & (n - 1)) == 0


class Option(str, Enum):
    """String-valued option; lookup by value is case-insensitive."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None
