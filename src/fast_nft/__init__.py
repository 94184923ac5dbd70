"""
fast_nft: Fast nonlinear Fourier transform, discrete spectrum part

Bound states and norming constants/residues of the nonlinear Schroedinger
equation with vanishing boundary conditions, computed from samples with
fast polynomial transfer-matrix methods.
"""

from . import config
from .errors import (
    NFTError,
    InvalidInputError,
    UnsupportedDiscretizationError,
    ScratchAllocationError,
    NonConvergenceError,
    CapacityExceededWarning,
    SingularDerivativeWarning,
)
from .discrete import (
    BoundStateFiltering,
    BoundStateLocalization,
    DiscreteSpectrumType,
)
from .nsev import (
    ContinuousSpectrumType,
    NsevOptions,
    NsevResult,
    default_options,
    max_bound_states,
    discspec_array,
    nsev,
)

__version__ = "0.1.0"
__all__ = [
    "config",
    # Errors
    "NFTError",
    "InvalidInputError",
    "UnsupportedDiscretizationError",
    "ScratchAllocationError",
    "NonConvergenceError",
    "CapacityExceededWarning",
    "SingularDerivativeWarning",
    # Options
    "BoundStateFiltering",
    "BoundStateLocalization",
    "DiscreteSpectrumType",
    "ContinuousSpectrumType",
    # Pipeline
    "NsevOptions",
    "NsevResult",
    "default_options",
    "max_bound_states",
    "discspec_array",
    "nsev",
]
