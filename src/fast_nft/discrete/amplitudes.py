"""
Spectral amplitudes of bound states.

For a bound state λ_k the norming constant is b(λ_k) and the residue is
b(λ_k) / a'(λ_k). Both are evaluated by exact sample-by-sample
propagation, the same machinery used for Newton refinement.

A residue whose derivative vanishes is undefined. Such an entry is set to
nan and reported with a SingularDerivativeWarning; the other bound states
are unaffected.
"""

import warnings
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..config import SINGULAR_DERIVATIVE_TOLERANCE, Option
from ..errors import SingularDerivativeWarning
from ..scattering.propagation import bidirectional_b, evaluate_scattering


class DiscreteSpectrumType(Option):
    """Which amplitudes are computed for each bound state."""
    NORMING_CONSTANTS = "norming_constants"
    RESIDUES = "residues"
    BOTH = "both"


@dataclass
class AmplitudeResult:
    """
    Amplitudes of a list of bound states.

    Attributes
    ----------
    normconsts : np.ndarray, optional
        b(λ_k), if requested.
    residues : np.ndarray, optional
        b(λ_k) / a'(λ_k), if requested; nan where a' is singular.
    singular : list of int
        Indices whose residue could not be computed.
    """
    normconsts: Optional[np.ndarray] = None
    residues: Optional[np.ndarray] = None
    singular: List[int] = field(default_factory=list)


def singular_derivative_mask(b: np.ndarray, da: np.ndarray,
                             tol: float = SINGULAR_DERIVATIVE_TOLERANCE) -> np.ndarray:
    """True where |a'| <= tol * max(1, |b|) or a' is not finite."""
    return ~np.isfinite(da) | (np.abs(da) <= tol * np.maximum(1.0, np.abs(b)))


def compute_amplitudes(bound_states, q, T: Tuple[float, float], kappa: int,
                       dstype=DiscreteSpectrumType.NORMING_CONSTANTS,
                       bidirectional: bool = True,
                       quiet: bool = False) -> AmplitudeResult:
    """
    Compute norming constants and/or residues.

    Parameters
    ----------
    bound_states : array_like
        Validated bound states.
    q : array_like
        Samples, D >= 2.
    T : tuple of float
        (T0, T1).
    kappa : int
        +1 or -1.
    dstype : DiscreteSpectrumType or str
        NORMING_CONSTANTS, RESIDUES or BOTH.
    bidirectional : bool
        Evaluate b from both ends of the signal instead of by forward
        propagation only.
    quiet : bool
        Do not emit warnings; singular entries are still reported in the
        result.

    Returns
    -------
    AmplitudeResult
    """
    dstype = DiscreteSpectrumType(dstype)
    lam = np.array(np.atleast_1d(bound_states), dtype=complex).ravel()
    want_residues = dstype in (DiscreteSpectrumType.RESIDUES, DiscreteSpectrumType.BOTH)
    want_normconsts = dstype in (DiscreteSpectrumType.NORMING_CONSTANTS,
                                 DiscreteSpectrumType.BOTH)

    if len(lam) == 0:
        empty = np.zeros(0, dtype=complex)
        return AmplitudeResult(normconsts=empty if want_normconsts else None,
                               residues=empty.copy() if want_residues else None)

    b = da = None
    if want_residues or not bidirectional:
        _, b, da = evaluate_scattering(q, T, kappa, lam, derivative=want_residues)
    if bidirectional:
        b = bidirectional_b(q, T, kappa, lam)

    result = AmplitudeResult()
    if want_normconsts:
        result.normconsts = b
    if want_residues:
        singular = singular_derivative_mask(b, da)
        with np.errstate(divide="ignore", invalid="ignore"):
            residues = np.where(singular, np.nan + 0j, b / da)
        result.residues = residues
        result.singular = [int(i) for i in np.flatnonzero(singular)]
        if result.singular and not quiet:
            warnings.warn(
                f"a'(λ) is singular at {len(result.singular)} bound state(s) "
                f"{[complex(lam[i]) for i in result.singular]}; residues set to nan",
                SingularDerivativeWarning,
            )
    return result
