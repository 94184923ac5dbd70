"""
Localization of bound states, i.e. zeros of a(λ) in the upper half plane.

Three interchangeable strategies:

- FAST_EIGENVALUE: all roots of the polynomial a = S11(z) of the combined
  transfer polynomial, as eigenvalues of its companion matrix. Global,
  deterministic, no initial guesses; the slowest method.
- NEWTON: a fixed number of Newton steps from caller-supplied guesses,
  evaluating a(λ) and a'(λ) by exact sample-by-sample propagation.
  O(niter K D); only as good as the guesses.
- SUBSAMPLE_AND_REFINE: FAST_EIGENVALUE on a subsampled signal, filtering,
  then NEWTON on the full signal seeded with the survivors.

Reference: Wahls and Poor, IEEE Trans. Inform. Theory 61(12), 2015;
Aurentz et al., arXiv:1611.02435.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import scipy.linalg

from ..config import (
    DEFAULT_DISCRETIZATION,
    DEFAULT_NITER,
    DEFLATION_TOLERANCE,
    EPSILON,
    SUBSAMPLING_MIN_LENGTH,
    Option,
)
from ..errors import InvalidInputError, NonConvergenceError
from ..misc import downsample, step_size
from ..scattering.discretization import require_polynomial, z_to_lambda
from ..scattering.fscatter import fscatter
from ..scattering.propagation import evaluate_scattering
from .filters import (
    BoundStateFiltering,
    FilterConfig,
    apply_filtering,
    plausible_region,
)


class BoundStateLocalization(Option):
    """Strategy used to find the zeros of a(λ)."""
    FAST_EIGENVALUE = "fast_eigenvalue"
    NEWTON = "newton"
    SUBSAMPLE_AND_REFINE = "subsample_and_refine"


@dataclass
class Localization:
    """
    Candidate bound states produced by a localization strategy.

    Attributes
    ----------
    roots : np.ndarray
        Candidate bound states.
    guesses : np.ndarray
        The initial guess each candidate was refined from (equal to roots
        for FAST_EIGENVALUE).
    strategy : BoundStateLocalization
        The strategy that produced the candidates.
    """
    roots: np.ndarray
    guesses: np.ndarray
    strategy: BoundStateLocalization


# =============================================================================
# Polynomial roots
# =============================================================================

def deflate(coeffs, rtol: float = DEFLATION_TOLERANCE) -> Tuple[np.ndarray, int, int]:
    """
    Strip negligible outer coefficients of a polynomial.

    Parameters
    ----------
    coeffs : array_like
        Coefficients in ascending powers.
    rtol : float
        Coefficients with |c| <= rtol * max|c| at either end are dropped.

    Returns
    -------
    core : np.ndarray
        Remaining coefficients, nonzero at both ends (empty if all vanish).
    n_zero : int
        Number of dropped low-order coefficients (roots at z = 0).
    n_inf : int
        Number of dropped high-order coefficients (roots at infinity).
    """
    c = np.asarray(coeffs, dtype=complex).ravel()
    if len(c) == 0:
        return c, 0, 0
    mag = np.abs(c)
    significant = np.flatnonzero(mag > rtol * np.max(mag))
    if len(significant) == 0:
        return c[:0], 0, 0
    lo, hi = significant[0], significant[-1]
    return c[lo:hi + 1], int(lo), int(len(c) - 1 - hi)


def poly_roots(coeffs, rtol: float = DEFLATION_TOLERANCE) -> Tuple[np.ndarray, int, int]:
    """
    All finite nonzero roots of a polynomial via its companion matrix.

    Parameters
    ----------
    coeffs : array_like
        Coefficients in ascending powers.
    rtol : float
        Deflation tolerance, see `deflate`.

    Returns
    -------
    roots : np.ndarray
        Roots of the deflated polynomial (empty for degree zero).
    n_zero : int
        Multiplicity of the root at z = 0 (not included in roots).
    n_inf : int
        Number of roots at infinity (not included in roots).

    Raises
    ------
    NonConvergenceError
        If the eigenvalue iteration fails.
    """
    core, n_zero, n_inf = deflate(coeffs, rtol)
    if len(core) < 2:
        return np.zeros(0, dtype=complex), n_zero, n_inf

    C = scipy.linalg.companion(core[::-1])
    try:
        roots = scipy.linalg.eigvals(C, overwrite_a=True, check_finite=False)
    except scipy.linalg.LinAlgError as exc:
        raise NonConvergenceError(
            f"Companion eigenvalue solve failed for degree {len(core) - 1}"
        ) from exc
    if not np.all(np.isfinite(roots)):
        raise NonConvergenceError("Companion eigenvalue solve returned non-finite roots")
    return roots.astype(complex), n_zero, n_inf


def fast_eigenvalue_roots(q, T: Tuple[float, float], kappa: int,
                          discretization=DEFAULT_DISCRETIZATION,
                          normalize: bool = True,
                          verbose: bool = False) -> np.ndarray:
    """
    Roots of a(λ) from the combined transfer polynomial.

    Parameters
    ----------
    q : array_like
        Samples, D >= 2.
    T : tuple of float
        (T0, T1).
    kappa : int
        +1 or -1.
    discretization : str
        Polynomial discretization.
    normalize : bool
        Normalise intermediate products during assembly.
    verbose : bool
        If True, print progress.

    Returns
    -------
    np.ndarray
        All candidate λ (both half planes), unfiltered.
    """
    q = np.asarray(q, dtype=complex).ravel()
    eps = step_size(len(q), T)
    disc = require_polynomial(discretization)

    poly = fscatter(q, eps, kappa, disc, normalize=normalize, verbose=verbose)
    z, n_zero, n_inf = poly_roots(poly.a_coeffs)

    if verbose:
        print(f"fast eigenvalue: {len(z)} roots, {n_zero} at z=0 and "
              f"{n_inf} at infinity discarded")

    return z_to_lambda(z, eps, disc.degree)


# =============================================================================
# Newton refinement
# =============================================================================

def newton_refine(guesses, q, T: Tuple[float, float], kappa: int,
                  niter: int = DEFAULT_NITER,
                  verbose: bool = False) -> np.ndarray:
    """
    Refine guesses for zeros of a(λ) with Newton's method.

    Each guess is iterated independently for at most niter steps. A guess
    stops early once the step is negligible, when a'(λ) vanishes, or when
    it leaves the upper half plane; it is otherwise left at its last
    iterate for the filters to judge.

    Parameters
    ----------
    guesses : array_like
        Initial guesses.
    q : array_like
        Samples, D >= 2.
    T : tuple of float
        (T0, T1).
    kappa : int
        +1 or -1.
    niter : int
        Maximum number of iterations per guess.
    verbose : bool
        If True, print progress.

    Returns
    -------
    np.ndarray
        Refined values, in the order of the guesses.
    """
    if int(niter) != niter or niter < 0:
        raise InvalidInputError(f"niter must be a non-negative integer, got {niter}")
    lam = np.array(np.atleast_1d(guesses), dtype=complex).ravel()
    active = np.isfinite(lam)

    for it in range(int(niter)):
        idx = np.flatnonzero(active)
        if len(idx) == 0:
            break
        a, _, da = evaluate_scattering(q, T, kappa, lam[idx], derivative=True)

        with np.errstate(divide="ignore", invalid="ignore"):
            step = a / da
        bad = ~np.isfinite(step)
        active[idx[bad]] = False
        idx, step = idx[~bad], step[~bad]

        lam[idx] -= step
        done = (np.abs(step) <= EPSILON * np.abs(lam[idx])) | (lam[idx].imag < 0)
        active[idx[done]] = False

        if verbose:
            print(f"newton: iteration {it + 1}, {int(np.count_nonzero(active))} active")

    return lam


# =============================================================================
# Subsample and refine
# =============================================================================

def subsampled_length(D: int, degree: int = 1) -> int:
    """
    Target length of the subsampled signal.

    The companion matrix of the subsampled a(z) has size n = degree * D_sub
    and its dense eigenvalue solve costs O(n³). Choosing
    D_sub = (D log² D)^(1/3) / degree keeps that at O(D log² D). The
    result is never below SUBSAMPLING_MIN_LENGTH so that the subsampled
    signal still resolves the pulse; this adds a constant cost only.
    """
    log_d = np.log2(max(D, 2))
    scaled = int((D * log_d ** 2) ** (1.0 / 3.0) / max(int(degree), 1))
    return max(SUBSAMPLING_MIN_LENGTH, scaled)


def subsample_and_refine(q, T: Tuple[float, float], kappa: int,
                         niter: int = DEFAULT_NITER,
                         discretization=DEFAULT_DISCRETIZATION,
                         normalize: bool = True,
                         filtering=BoundStateFiltering.FULL,
                         filter_config: Optional[FilterConfig] = None,
                         verbose: bool = False) -> Localization:
    """
    Find guesses on a subsampled signal, then refine them on the full one.

    The subsampled length comes from `subsampled_length`, so the dense
    eigenvalue step costs O(D log² D) and the Newton step O(niter K D).

    Returns
    -------
    Localization
        Refined candidates and the subsampled guesses they came from.
    """
    q = np.asarray(q, dtype=complex).ravel()
    if filter_config is None:
        filter_config = FilterConfig()
    degree = require_polynomial(discretization).degree

    qsub, Tsub, factor = downsample(q, T, subsampled_length(len(q), degree))
    if verbose:
        print(f"subsample: D={len(q)} -> {len(qsub)} (factor {factor})")

    guesses = fast_eigenvalue_roots(qsub, Tsub, kappa, discretization,
                                    normalize=normalize, verbose=verbose)
    region = filter_config.plausible
    if region is None:
        region = plausible_region(qsub, Tsub, discretization)
    K = apply_filtering(guesses, filtering, filter_config, region=region)
    guesses = guesses[:K].copy()

    if verbose:
        print(f"subsample: {K} guesses survived filtering")

    roots = newton_refine(guesses, q, T, kappa, niter, verbose=verbose)
    return Localization(roots=roots, guesses=guesses,
                        strategy=BoundStateLocalization.SUBSAMPLE_AND_REFINE)


# =============================================================================
# Dispatch
# =============================================================================

def localize_bound_states(q, T: Tuple[float, float], kappa: int,
                          strategy=BoundStateLocalization.SUBSAMPLE_AND_REFINE,
                          initial_guesses=None,
                          niter: int = DEFAULT_NITER,
                          discretization=DEFAULT_DISCRETIZATION,
                          normalize: bool = True,
                          filtering=BoundStateFiltering.FULL,
                          filter_config: Optional[FilterConfig] = None,
                          verbose: bool = False) -> Localization:
    """
    Run one localization strategy.

    Parameters
    ----------
    q : array_like
        Samples, D >= 2.
    T : tuple of float
        (T0, T1).
    kappa : int
        +1 or -1.
    strategy : BoundStateLocalization or str
        Which strategy to use.
    initial_guesses : array_like, optional
        Required for NEWTON, ignored otherwise.
    niter : int
        Newton iterations (NEWTON and SUBSAMPLE_AND_REFINE).
    discretization : str
        Polynomial discretization (FAST_EIGENVALUE and SUBSAMPLE_AND_REFINE).
    normalize : bool
        Normalise intermediate products during assembly.
    filtering : BoundStateFiltering or str
        Level used on the subsampled guesses of SUBSAMPLE_AND_REFINE.
    filter_config : FilterConfig, optional
        Tolerances for that filtering pass.
    verbose : bool
        If True, print progress.

    Returns
    -------
    Localization
        Unfiltered candidates.
    """
    strategy = BoundStateLocalization(strategy)

    if strategy == BoundStateLocalization.FAST_EIGENVALUE:
        roots = fast_eigenvalue_roots(q, T, kappa, discretization,
                                      normalize=normalize, verbose=verbose)
        return Localization(roots=roots, guesses=roots.copy(), strategy=strategy)

    if strategy == BoundStateLocalization.NEWTON:
        if initial_guesses is None:
            raise InvalidInputError("NEWTON localization requires initial guesses")
        guesses = np.array(np.atleast_1d(initial_guesses), dtype=complex).ravel()
        roots = newton_refine(guesses, q, T, kappa, niter, verbose=verbose)
        return Localization(roots=roots, guesses=guesses, strategy=strategy)

    return subsample_and_refine(q, T, kappa, niter=niter,
                                discretization=discretization,
                                normalize=normalize, filtering=filtering,
                                filter_config=filter_config, verbose=verbose)
