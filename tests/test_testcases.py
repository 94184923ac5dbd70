"""
Tests for the analytic sech test case.
"""

import numpy as np
import pytest

from fast_nft.errors import InvalidInputError
from fast_nft.testcases import (
    sech_a,
    sech_a_prime,
    sech_bound_states,
    sech_residue_magnitudes,
    sech_signal,
)


class TestSechSignal:
    """Test sampling of A sech(t)."""

    def test_grid(self):
        """Samples sit at T0 + n (T1 - T0)/(D - 1)."""
        q, T = sech_signal(5, 2.0, (-2.0, 2.0))
        np.testing.assert_allclose(q, 2.0 / np.cosh(np.linspace(-2.0, 2.0, 5)))
        assert T == (-2.0, 2.0)

    def test_complex_dtype(self):
        """Samples are complex."""
        q, _ = sech_signal(4, 1.0)
        assert np.iscomplexobj(q)

    def test_too_few_samples(self):
        """D < 2 is rejected."""
        with pytest.raises(InvalidInputError):
            sech_signal(1, 1.0)


class TestSechSpectrum:
    """Test the closed-form scattering data."""

    @pytest.mark.parametrize("A,K", [(0.4, 0), (1.0, 1), (2.2, 2), (5.2, 5)])
    def test_bound_state_count(self, A, K):
        """There are ceil(A - 1/2) bound states."""
        assert len(sech_bound_states(A)) == K

    def test_bound_states_values(self):
        """2.2 sech(t) has bound states 1.7j and 0.7j."""
        np.testing.assert_allclose(sech_bound_states(2.2), [1.7j, 0.7j])

    def test_a_vanishes_at_bound_states(self):
        """a(λ_k) = 0."""
        lam = sech_bound_states(2.2)
        np.testing.assert_allclose(sech_a(lam, 2.2), 0.0, atol=1e-12)

    def test_zero_amplitude(self):
        """a = 1 for A = 0."""
        np.testing.assert_allclose(sech_a(np.array([0.3 + 0.2j]), 0.0), 1.0)

    def test_bounded_on_real_axis(self):
        """|a|² + |b|² = 1 on the real axis, so |a| <= 1 when focusing."""
        a = sech_a(np.linspace(-2.0, 2.0, 5), 2.2)
        assert np.all(np.abs(a) <= 1.0 + 1e-12)
        # a(0) = cos(π A) up to a phase
        assert np.abs(a[2]) == pytest.approx(abs(np.cos(np.pi * 2.2)), rel=1e-10)

    def test_derivative_nonzero(self):
        """Bound states are simple zeros."""
        assert np.all(np.abs(sech_a_prime(sech_bound_states(2.2), 2.2)) > 1e-3)

    def test_residue_magnitudes_shape(self):
        """One residue per bound state."""
        assert sech_residue_magnitudes(5.2).shape == (5,)
