"""
Tests for the numerical helpers.
"""

import numpy as np
import pytest

from fast_nft.errors import InvalidInputError
from fast_nft.misc import (
    check_kappa,
    downsample,
    hausdorff_dist,
    l2norm2,
    rel_err,
    sech,
    step_size,
)


class TestStepSize:
    """Test ε = (T1 - T0)/(D - 1)."""

    def test_value(self):
        """11 samples on [0, 1] are 0.1 apart."""
        assert step_size(11, (0.0, 1.0)) == pytest.approx(0.1)

    def test_too_few_samples(self):
        """D < 2 is rejected."""
        with pytest.raises(InvalidInputError):
            step_size(1, (0.0, 1.0))

    def test_empty_interval(self):
        """T0 = T1 is rejected."""
        with pytest.raises(InvalidInputError):
            step_size(4, (1.0, 1.0))


class TestCheckKappa:
    """Test validation of the nonlinearity sign."""

    def test_accepts_integers(self):
        """Python and numpy integers ±1 pass."""
        assert check_kappa(1) == 1
        assert check_kappa(np.int32(-1)) == -1

    @pytest.mark.parametrize("kappa", [True, False, 1.0, 0, 2, None])
    def test_rejects(self, kappa):
        """bool, float and other integers are rejected."""
        with pytest.raises(InvalidInputError):
            check_kappa(kappa)


class TestErrors:
    """Test error measures."""

    def test_rel_err(self):
        """Relative l1 error."""
        assert rel_err([1.1, 2.0], [1.0, 2.0]) == pytest.approx(0.1 / 3.0)

    def test_rel_err_zero_reference(self):
        """Falls back to the absolute error for a zero reference."""
        assert rel_err([0.5], [0.0]) == pytest.approx(0.5)

    def test_hausdorff_symmetric(self):
        """The distance is symmetric and sees unmatched points."""
        A = [0.0, 1.0j]
        B = [0.0, 1.0j, 3.0]
        assert hausdorff_dist(A, B) == pytest.approx(3.0)
        assert hausdorff_dist(B, A) == hausdorff_dist(A, B)

    def test_hausdorff_empty(self):
        """Two empty sets are at distance zero, one empty set at infinity."""
        assert hausdorff_dist([], []) == 0.0
        assert hausdorff_dist([], [1j]) == np.inf


class TestSignal:
    """Test signal helpers."""

    def test_sech(self):
        """sech(0) = 1 and sech is even."""
        assert sech(0.0) == 1.0
        assert sech(1.3) == pytest.approx(sech(-1.3))

    def test_l2norm2_sech(self):
        """||A sech||² = 2A² for a wide enough interval."""
        t = np.linspace(-20.0, 20.0, 801)
        assert l2norm2(1.5 * sech(t), (-20.0, 20.0)) == pytest.approx(4.5, rel=1e-6)

    def test_l2norm2_trapezoid_ends(self):
        """End samples get half weight."""
        assert l2norm2(np.ones(3), (0.0, 2.0)) == pytest.approx(2.0)

    def test_downsample(self):
        """Every s-th sample is kept and the interval shrinks accordingly."""
        q = np.arange(10, dtype=complex)
        qsub, Tsub, factor = downsample(q, (0.0, 9.0), 5)
        assert factor == 2
        np.testing.assert_array_equal(qsub, [0, 2, 4, 6, 8])
        assert Tsub == (0.0, 8.0)

    def test_downsample_keeps_two_samples(self):
        """Even an extreme factor leaves two samples."""
        qsub, Tsub, factor = downsample(np.ones(8), (0.0, 7.0), 1)
        assert len(qsub) >= 2
        assert Tsub[1] > Tsub[0]

    def test_downsample_no_op(self):
        """A target above D keeps every sample."""
        qsub, Tsub, factor = downsample(np.ones(8), (0.0, 7.0), 100)
        assert factor == 1
        assert len(qsub) == 8
        assert Tsub == (0.0, 7.0)
