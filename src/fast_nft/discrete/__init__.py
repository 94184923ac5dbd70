"""
Discrete spectrum module.

Implements:
- Bound state localization (fast eigenvalue, Newton, subsample and refine)
- Filtering of candidates (bounding box, non-reality, merging)
- Norming constants and residues of bound states

Main entry points:
- `localize_bound_states(q, T, kappa, strategy)`: Candidate bound states
- `apply_filtering(vals, level)`: In-place filtering of candidates
- `compute_amplitudes(bound_states, q, T, kappa)`: Spectral amplitudes
"""

from .filters import (
    Box,
    Region,
    UPPER_HALF_PLANE,
    BoundStateFiltering,
    FilterConfig,
    in_box,
    filter_bounding_box,
    filter_bounding_box_inv,
    filter_nonreal,
    filter_region,
    merge_close,
    plausible_region,
    apply_filtering,
)

from .roots import (
    BoundStateLocalization,
    Localization,
    deflate,
    poly_roots,
    fast_eigenvalue_roots,
    newton_refine,
    subsampled_length,
    subsample_and_refine,
    localize_bound_states,
)

from .amplitudes import (
    DiscreteSpectrumType,
    AmplitudeResult,
    singular_derivative_mask,
    compute_amplitudes,
)

__all__ = [
    # Filters
    "Box",
    "Region",
    "UPPER_HALF_PLANE",
    "BoundStateFiltering",
    "FilterConfig",
    "in_box",
    "filter_bounding_box",
    "filter_bounding_box_inv",
    "filter_nonreal",
    "filter_region",
    "merge_close",
    "plausible_region",
    "apply_filtering",
    # Localization
    "BoundStateLocalization",
    "Localization",
    "deflate",
    "poly_roots",
    "fast_eigenvalue_roots",
    "newton_refine",
    "subsampled_length",
    "subsample_and_refine",
    "localize_bound_states",
    # Amplitudes
    "DiscreteSpectrumType",
    "AmplitudeResult",
    "singular_derivative_mask",
    "compute_amplitudes",
]
