"""
Filtering of numerically found bound state candidates.

All filters work in place: survivors are moved, in their original order,
to a contiguous prefix of the candidate array and the number of survivors
is returned. Entries past that count are left unspecified. An optional
companion array (e.g. the initial guess each candidate came from) is
rearranged in exactly the same way.

Filtering levels:
- NONE: every candidate survives
- BASIC: candidates in the closed upper half plane, close candidates merged
- FULL: additionally rejects candidates next to the real axis and outside
  a plausibility region (see `plausible_region`)
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

import numpy as np

from ..config import (
    ALIASING_SAFETY_FACTOR,
    DEFAULT_MERGE_TOLERANCE,
    DEFAULT_NONREAL_TOLERANCE,
    IM_BOUND_FACTOR,
    Option,
)
from ..errors import InvalidInputError
from ..misc import l2norm2, step_size
from ..scattering.discretization import get_discretization


Box = Tuple[float, float, float, float]
"""Bounding box (re_min, re_max, im_min, im_max), all bounds inclusive."""

Region = Union[Box, Callable[[np.ndarray], np.ndarray]]
"""A box, or a predicate returning a boolean mask of admissible values."""

UPPER_HALF_PLANE: Box = (-np.inf, np.inf, 0.0, np.inf)


class BoundStateFiltering(Option):
    """How candidate roots of a(λ) are accepted as bound states."""
    NONE = "none"
    BASIC = "basic"
    FULL = "full"


@dataclass
class FilterConfig:
    """
    Parameters of the filtering stage.

    Attributes
    ----------
    merge_tol : float
        Candidates closer than this are merged.
    nonreal_tol : float
        FULL filtering rejects candidates with |Im λ| below this.
    plausible : Region, optional
        Overrides the default plausibility region of FULL filtering.
    """
    merge_tol: float = DEFAULT_MERGE_TOLERANCE
    nonreal_tol: float = DEFAULT_NONREAL_TOLERANCE
    plausible: Optional[Region] = None


def _prefix(vals: np.ndarray, n: Optional[int]) -> int:
    if n is None:
        return len(vals)
    if not 0 <= n <= len(vals):
        raise InvalidInputError(f"Count {n} out of range for {len(vals)} values")
    return int(n)


def _compact(vals: np.ndarray, keep: np.ndarray,
             companion: Optional[np.ndarray]) -> int:
    """Move vals[:len(keep)][keep] to the front, in order."""
    n = len(keep)
    k = int(np.count_nonzero(keep))
    vals[:k] = vals[:n][keep]
    if companion is not None:
        companion[:k] = companion[:n][keep]
    return k


def in_box(vals: np.ndarray, box: Box) -> np.ndarray:
    """Boolean mask of the values lying inside the closed box."""
    re_min, re_max, im_min, im_max = box
    return ((vals.real >= re_min) & (vals.real <= re_max)
            & (vals.imag >= im_min) & (vals.imag <= im_max))


def filter_bounding_box(vals: np.ndarray, box: Box,
                        companion: Optional[np.ndarray] = None,
                        n: Optional[int] = None) -> int:
    """
    Keep the values inside the bounding box.

    Parameters
    ----------
    vals : np.ndarray
        Candidates; modified in place.
    box : tuple of float
        (re_min, re_max, im_min, im_max).
    companion : np.ndarray, optional
        Rearranged together with vals.
    n : int, optional
        Only the first n values are considered. Default: all.

    Returns
    -------
    int
        Number of survivors, now stored in vals[:count].
    """
    n = _prefix(vals, n)
    return _compact(vals, in_box(vals[:n], box), companion)


def filter_bounding_box_inv(vals: np.ndarray, box: Box,
                            companion: Optional[np.ndarray] = None,
                            n: Optional[int] = None) -> int:
    """Keep the values outside the bounding box (see `filter_bounding_box`)."""
    n = _prefix(vals, n)
    return _compact(vals, ~in_box(vals[:n], box), companion)


def filter_nonreal(vals: np.ndarray, tol_im: float,
                   companion: Optional[np.ndarray] = None,
                   n: Optional[int] = None) -> int:
    """Reject the values with |Im| < tol_im."""
    n = _prefix(vals, n)
    return _compact(vals, np.abs(vals[:n].imag) >= tol_im, companion)


def filter_region(vals: np.ndarray, region: Region,
                  companion: Optional[np.ndarray] = None,
                  n: Optional[int] = None) -> int:
    """Keep the values in a region given as a box or as a predicate."""
    n = _prefix(vals, n)
    if callable(region):
        keep = np.asarray(region(vals[:n].copy()), dtype=bool)
        if keep.shape != (n,):
            raise InvalidInputError(
                f"Region predicate returned shape {keep.shape}, expected ({n},)"
            )
    else:
        keep = in_box(vals[:n], region)
    return _compact(vals, keep, companion)


def merge_close(vals: np.ndarray, tol: float,
                companion: Optional[np.ndarray] = None,
                n: Optional[int] = None) -> int:
    """
    Merge values that are closer than tol.

    Tie-break: first seen wins. Values are visited in order and every later
    value within tol of a surviving one is dropped, so the survivors are
    pairwise at least tol apart and a second pass removes nothing.

    Returns
    -------
    int
        Number of survivors.
    """
    n = _prefix(vals, n)
    keep = np.ones(n, dtype=bool)
    for i in range(n):
        if keep[i]:
            keep[i + 1:] &= np.abs(vals[i + 1:n] - vals[i]) >= tol
    return _compact(vals, keep, companion)


def plausible_region(q, T: Tuple[float, float], discretization) -> Box:
    """
    Default region in which FULL filtering accepts bound states.

    - |Re λ| <= 0.9 π / (2ε): inside the band resolved by samples ε apart.
      The bound depends on the step only; the splitting schemes place
      spurious roots near |Re λ| = π/ε whatever their degree.
    - 0 <= Im λ <= ||q||² / 2: each bound state contributes 4 Im λ to
      the signal energy by the trace formula

    Parameters
    ----------
    q : array_like
        Samples.
    T : tuple of float
        (T0, T1).
    discretization : str
        Discretization used for localization (validated only).
    """
    get_discretization(discretization)
    eps = step_size(len(q), T)
    re_bound = ALIASING_SAFETY_FACTOR * np.pi / (2 * eps)
    im_bound = IM_BOUND_FACTOR * l2norm2(q, T)
    return (-re_bound, re_bound, 0.0, im_bound)


def apply_filtering(vals: np.ndarray, level,
                    config: Optional[FilterConfig] = None,
                    region: Optional[Region] = None,
                    companion: Optional[np.ndarray] = None,
                    n: Optional[int] = None) -> int:
    """
    Apply the filters of a filtering level in sequence.

    Parameters
    ----------
    vals : np.ndarray
        Candidates; compacted in place.
    level : BoundStateFiltering or str
        NONE, BASIC or FULL.
    config : FilterConfig, optional
        Tolerances. Default FilterConfig().
    region : box or callable, optional
        Plausibility region for FULL filtering. If None, only the
        non-reality filter is applied on top of BASIC.
    companion : np.ndarray, optional
        Rearranged together with vals.
    n : int, optional
        Number of leading candidates to consider.

    Returns
    -------
    int
        Number of survivors.
    """
    level = BoundStateFiltering(level)
    if config is None:
        config = FilterConfig()
    n = _prefix(vals, n)

    if level == BoundStateFiltering.NONE:
        return n

    n = filter_bounding_box(vals, UPPER_HALF_PLANE, companion, n)
    if level == BoundStateFiltering.FULL:
        n = filter_nonreal(vals, config.nonreal_tol, companion, n)
        if region is not None:
            n = filter_region(vals, region, companion, n)
    return merge_close(vals, config.merge_tol, companion, n)
