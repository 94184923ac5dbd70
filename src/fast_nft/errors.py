"""
Errors and warnings raised by the fast nonlinear Fourier transform.

Fatal conditions abort the whole call and are exceptions. Conditions that
only affect part of the result (truncation to the caller's capacity, a
singular residue) are warnings and are also recorded in the result.
"""


class NFTError(Exception):
    """Base class for all errors raised by fast_nft."""


class InvalidInputError(NFTError, ValueError):
    """Raised for malformed samples, intervals or parameters."""


class UnsupportedDiscretizationError(NFTError, ValueError):
    """Raised when a discretization is unknown or unusable for an operation."""


class ScratchAllocationError(NFTError, MemoryError):
    """Raised when scratch or output buffers cannot be allocated."""


class NonConvergenceError(NFTError, RuntimeError):
    """Raised when the companion eigenvalue solve does not converge."""


class CapacityExceededWarning(UserWarning):
    """More bound states were found than the caller's capacity."""


class SingularDerivativeWarning(RuntimeWarning):
    """a'(λ) vanished at a bound state, so its residue is undefined."""
