"""
Discrete spectrum of the nonlinear Schroedinger equation with vanishing
boundary conditions.

    i q_x + q_tt ± 2 q|q|² = 0

Pipeline: samples -> candidate bound states (one localization strategy)
-> filtering -> truncation to the caller's capacity -> norming constants
and/or residues.

Main entry point:
- `nsev(q, T, kappa, ...)`: Bound states and their spectral amplitudes

Reference: Wahls and Poor, IEEE Trans. Inform. Theory 61(12), 2015.
"""

import warnings
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import (
    DEFAULT_DISCRETIZATION,
    DEFAULT_MERGE_TOLERANCE,
    DEFAULT_NITER,
    DEFAULT_NONREAL_TOLERANCE,
    Option,
)
from .discrete.amplitudes import DiscreteSpectrumType, compute_amplitudes
from .discrete.filters import (
    BoundStateFiltering,
    FilterConfig,
    Region,
    apply_filtering,
    plausible_region,
)
from .discrete.roots import BoundStateLocalization, localize_bound_states
from .errors import CapacityExceededWarning, InvalidInputError
from .misc import check_kappa, step_size
from .scattering.discretization import get_discretization, require_polynomial


class ContinuousSpectrumType(Option):
    """Continuous spectrum representation requested from grid evaluators."""
    REFLECTION_COEFFICIENT = "reflection_coefficient"
    AB = "ab"
    BOTH = "both"


# =============================================================================
# Options and results
# =============================================================================

@dataclass
class NsevOptions:
    """
    Options of `nsev`. Defaults match `default_options()`.

    Attributes
    ----------
    bound_state_filtering : BoundStateFiltering
        NONE, BASIC or FULL.
    bound_state_localization : BoundStateLocalization
        FAST_EIGENVALUE, NEWTON or SUBSAMPLE_AND_REFINE.
    niter : int
        Newton iterations.
    discspec_type : DiscreteSpectrumType
        NORMING_CONSTANTS, RESIDUES or BOTH.
    contspec_type : ContinuousSpectrumType
        Passed through for continuous spectrum evaluators.
    normalization_flag : bool
        Normalise intermediate products of the fast scattering step.
    discretization : str
        Polynomial discretization of the fast scattering step.
    merge_tol : float
        Merge tolerance of the filters.
    nonreal_tol : float
        Non-reality tolerance of FULL filtering.
    plausible : box or callable, optional
        Replaces the default plausibility region of FULL filtering.
    bidirectional : bool
        Evaluate b(λ_k) from both ends of the signal.
    quiet : bool
        Suppress warnings; diagnostics are still recorded in the result.
    verbose : bool
        Print progress.
    """
    bound_state_filtering: BoundStateFiltering = BoundStateFiltering.FULL
    bound_state_localization: BoundStateLocalization = (
        BoundStateLocalization.SUBSAMPLE_AND_REFINE
    )
    niter: int = DEFAULT_NITER
    discspec_type: DiscreteSpectrumType = DiscreteSpectrumType.NORMING_CONSTANTS
    contspec_type: ContinuousSpectrumType = ContinuousSpectrumType.REFLECTION_COEFFICIENT
    normalization_flag: bool = True
    discretization: str = DEFAULT_DISCRETIZATION
    merge_tol: float = DEFAULT_MERGE_TOLERANCE
    nonreal_tol: float = DEFAULT_NONREAL_TOLERANCE
    plausible: Optional[Region] = None
    bidirectional: bool = True
    quiet: bool = False
    verbose: bool = False

    def __post_init__(self):
        self.bound_state_filtering = BoundStateFiltering(self.bound_state_filtering)
        self.bound_state_localization = BoundStateLocalization(
            self.bound_state_localization
        )
        self.discspec_type = DiscreteSpectrumType(self.discspec_type)
        self.contspec_type = ContinuousSpectrumType(self.contspec_type)
        self.discretization = get_discretization(self.discretization).name
        if int(self.niter) != self.niter or self.niter < 0:
            raise InvalidInputError(
                f"niter must be a non-negative integer, got {self.niter}"
            )

    def filter_config(self) -> FilterConfig:
        """Tolerances and region override as a FilterConfig."""
        return FilterConfig(merge_tol=self.merge_tol,
                            nonreal_tol=self.nonreal_tol,
                            plausible=self.plausible)


def default_options() -> NsevOptions:
    """
    Default options.

    bound_state_filtering = FULL, bound_state_localization =
    SUBSAMPLE_AND_REFINE, niter = 10, discspec_type = NORMING_CONSTANTS,
    contspec_type = REFLECTION_COEFFICIENT, normalization_flag = True,
    discretization = 2SPLIT4A.
    """
    return NsevOptions()


@dataclass
class NsevResult:
    """
    Discrete spectrum returned by `nsev`.

    Attributes
    ----------
    bound_states : np.ndarray
        Validated bound states, at most `capacity` of them.
    normconsts : np.ndarray, optional
        Norming constants, index-aligned with bound_states.
    residues : np.ndarray, optional
        Residues, index-aligned with bound_states (nan where singular).
    guesses : np.ndarray
        Initial guess each bound state was refined from.
    found : int
        Number of bound states found before truncation.
    truncated : bool
        True if the capacity was smaller than `found`.
    singular : list of int
        Indices whose residue is undefined.
    diagnostics : list of str
        Warning-level messages emitted during the call.
    """
    bound_states: np.ndarray
    normconsts: Optional[np.ndarray] = None
    residues: Optional[np.ndarray] = None
    guesses: Optional[np.ndarray] = None
    found: int = 0
    truncated: bool = False
    singular: List[int] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @property
    def K(self) -> int:
        """Number of bound states returned."""
        return len(self.bound_states)


def max_bound_states(D: int, options: Optional[NsevOptions] = None) -> int:
    """
    Maximum number of bound states `nsev` can return for D samples.

    Equal to the degree of a(z), i.e. D times the discretization degree.
    Returns 0 for D < 2.
    """
    if options is None:
        options = default_options()
    if D < 2:
        return 0
    return D * require_polynomial(options.discretization).degree


def discspec_array(result: NsevResult, dstype=None) -> np.ndarray:
    """
    Pack the amplitudes into one flat array.

    BOTH yields the norming constants followed by the residues, i.e. twice
    the number of bound states.
    """
    if dstype is None:
        dstype = (DiscreteSpectrumType.BOTH
                  if result.normconsts is not None and result.residues is not None
                  else DiscreteSpectrumType.RESIDUES if result.residues is not None
                  else DiscreteSpectrumType.NORMING_CONSTANTS)
    dstype = DiscreteSpectrumType(dstype)

    parts = []
    if dstype in (DiscreteSpectrumType.NORMING_CONSTANTS, DiscreteSpectrumType.BOTH):
        if result.normconsts is None:
            raise InvalidInputError("Result holds no norming constants")
        parts.append(result.normconsts)
    if dstype in (DiscreteSpectrumType.RESIDUES, DiscreteSpectrumType.BOTH):
        if result.residues is None:
            raise InvalidInputError("Result holds no residues")
        parts.append(result.residues)
    return np.concatenate(parts)


# =============================================================================
# Pipeline
# =============================================================================

def _validate(q, T, kappa, capacity) -> Tuple[np.ndarray, Tuple[float, float]]:
    q = np.asarray(q)
    if q.ndim != 1:
        raise InvalidInputError(f"Samples must be a 1-D array, got shape {q.shape}")
    q = q.astype(complex)
    if not np.all(np.isfinite(q)):
        raise InvalidInputError("Samples must be finite")
    T = tuple(float(t) for t in T)
    step_size(len(q), T)
    check_kappa(kappa)
    if capacity is not None and (int(capacity) != capacity or capacity < 0):
        raise InvalidInputError(f"capacity must be a non-negative integer, got {capacity}")
    return q, T


def nsev(q, T, kappa: int,
         capacity: Optional[int] = None,
         initial_guesses=None,
         options: Optional[NsevOptions] = None) -> NsevResult:
    """
    Compute the discrete spectrum of a sampled signal.

    Parameters
    ----------
    q : array_like
        Samples q(t_n), t_n = T0 + n (T1 - T0)/(D - 1), D >= 2.
    T : tuple of float
        Positions (T0, T1) of the first and last sample, T0 < T1.
    kappa : int
        +1 for the focusing, -1 for the defocusing equation.
    capacity : int, optional
        Maximum number of bound states to return. Default
        `max_bound_states(D, options)`, or the number of initial guesses
        for NEWTON.
    initial_guesses : array_like, optional
        Initial guesses, required for NEWTON localization.
    options : NsevOptions, optional
        Default `default_options()`.

    Returns
    -------
    NsevResult

    Raises
    ------
    InvalidInputError
        For malformed samples, interval, kappa, capacity or guesses.
    UnsupportedDiscretizationError
        If the discretization cannot be used for fast scattering.
    NonConvergenceError
        If the eigenvalue solve fails.
    ScratchAllocationError
        If scratch buffers cannot be allocated.
    """
    if options is None:
        options = default_options()
    q, T = _validate(q, T, kappa, capacity)
    D = len(q)
    strategy = options.bound_state_localization

    if strategy != BoundStateLocalization.NEWTON:
        require_polynomial(options.discretization)
    if capacity is None:
        if strategy == BoundStateLocalization.NEWTON and initial_guesses is not None:
            capacity = len(np.atleast_1d(initial_guesses))
        else:
            capacity = max_bound_states(D, options)

    if kappa == -1:
        # Self-adjoint problem: no bound states
        empty = np.zeros(0, dtype=complex)
        amplitudes = compute_amplitudes(empty, q, T, kappa, options.discspec_type)
        return NsevResult(bound_states=empty, normconsts=amplitudes.normconsts,
                          residues=amplitudes.residues, guesses=empty.copy())

    if options.verbose:
        print(f"nsev: D={D}, T={T}, {strategy.value}, "
              f"{options.bound_state_filtering.value} filtering")

    filter_config = options.filter_config()
    loc = localize_bound_states(
        q, T, kappa,
        strategy=strategy,
        initial_guesses=initial_guesses,
        niter=options.niter,
        discretization=options.discretization,
        normalize=options.normalization_flag,
        filtering=options.bound_state_filtering,
        filter_config=filter_config,
        verbose=options.verbose,
    )

    roots = loc.roots.copy()
    guesses = loc.guesses.copy()
    region = filter_config.plausible
    if region is None:
        region = plausible_region(q, T, options.discretization)
    K = apply_filtering(roots, options.bound_state_filtering, filter_config,
                        region=region, companion=guesses)

    diagnostics = []
    found = K
    truncated = K > capacity
    if truncated:
        msg = (f"Found {found} bound states but capacity is {capacity}; "
               f"returning the first {capacity}")
        diagnostics.append(msg)
        if not options.quiet:
            warnings.warn(msg, CapacityExceededWarning)
        K = capacity

    bound_states = roots[:K].copy()
    amplitudes = compute_amplitudes(bound_states, q, T, kappa,
                                    options.discspec_type,
                                    bidirectional=options.bidirectional,
                                    quiet=options.quiet)
    if amplitudes.singular:
        diagnostics.append(
            f"Residues undefined at indices {amplitudes.singular} (a'(λ) singular)"
        )

    if options.verbose:
        print(f"nsev: {found} bound states found, {K} returned")

    return NsevResult(
        bound_states=bound_states,
        normconsts=amplitudes.normconsts,
        residues=amplitudes.residues,
        guesses=guesses[:K].copy(),
        found=found,
        truncated=truncated,
        singular=amplitudes.singular,
        diagnostics=diagnostics,
    )
