"""
Scattering module.

Implements:
- Discretizations of the Zakharov-Shabat problem (elementary matrices)
- Polynomial convolution kernels (direct and FFT-based)
- Fast assembly of the combined transfer polynomial by recursive halving
- Exact sample-by-sample propagation of a(λ), a'(λ), b(λ)

Main entry points:
- `fscatter(q, eps, kappa, discretization)`: Combined transfer polynomial
- `evaluate_scattering(q, T, kappa, lam)`: Direct evaluation of a and b
"""

from .discretization import (
    Discretization,
    DISCRETIZATIONS,
    get_discretization,
    require_polynomial,
    discretization_degree,
    elementary_matrices,
    lambda_to_z,
    z_to_lambda,
    boundary_phase,
    cosh_sinhc,
)

from .poly import (
    poly_conv,
    poly_matmul2x2,
    poly_eval,
)

from .fscatter import (
    CombinedPolynomial,
    assemble,
    fscatter,
    fscatter_numel,
)

from .propagation import (
    transfer_matrices,
    evaluate_scattering,
    bidirectional_b,
    energy_midpoint,
)

__all__ = [
    # Discretization
    "Discretization",
    "DISCRETIZATIONS",
    "get_discretization",
    "require_polynomial",
    "discretization_degree",
    "elementary_matrices",
    "lambda_to_z",
    "z_to_lambda",
    "boundary_phase",
    "cosh_sinhc",
    # Polynomials
    "poly_conv",
    "poly_matmul2x2",
    "poly_eval",
    # Fast scattering
    "CombinedPolynomial",
    "assemble",
    "fscatter",
    "fscatter_numel",
    # Propagation
    "transfer_matrices",
    "evaluate_scattering",
    "bidirectional_b",
    "energy_midpoint",
]
