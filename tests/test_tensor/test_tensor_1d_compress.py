import pytest
import numpy as np
from numpy.testing import assert_allclose

from mpskit.tensor import (
    MatrixProductState,
    MPS_rand_state,
    MPS_computational_state,
    mps_direct_sum,
    mps_add_compress,
    MPS_sum,
    overlap,
    check_ortho,
    DimensionMismatchError,
)


class TestDirectSum:

    @pytest.mark.parametrize('dtype', ['float64', 'complex128'])
    def test_exact(self, dtype):
        a = MPS_rand_state(5, 3, dtype=dtype, seed=1)
        b = MPS_rand_state(5, 2, dtype=dtype, seed=2)
        a_bonds = a.bond_sizes()
        c = mps_direct_sum(a, b)
        assert c.bond_sizes() == [
            x + y for x, y in zip(a.bond_sizes(), b.bond_sizes())]
        assert c.left_lim == -1
        assert c.right_lim == 5
        assert_allclose(c.to_dense(), a.to_dense() + b.to_dense(),
                        atol=1e-12)
        # inputs untouched
        assert a.bond_sizes() == a_bonds

    def test_single_site(self):
        a = MatrixProductState([np.array([1.0, 0.0])])
        b = MatrixProductState([np.array([0.0, 1.0])])
        c = mps_direct_sum(a, b)
        assert_allclose(c.to_dense(), [1.0, 1.0])

    def test_self(self):
        a = MPS_rand_state(4, 2, seed=3)
        assert_allclose(mps_direct_sum(a, a).to_dense(), 2 * a.to_dense(),
                        atol=1e-12)

    def test_length_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            mps_direct_sum(MPS_rand_state(3, 2), MPS_rand_state(4, 2))


class TestAddCompress:

    def test_add_compress(self):
        a = MPS_computational_state('0101')
        b = MPS_computational_state('0101')
        c = mps_add_compress(a, b)
        # both terms are the same product state
        assert c.max_bond_dim() == 1
        assert c.ortho_center() == 3
        assert check_ortho(c)
        assert c.norm() == pytest.approx(2.0)

    def test_operator_and_plus_eq(self):
        a = MPS_rand_state(5, 2, seed=4)
        b = MPS_rand_state(5, 2, seed=5)
        expected = a.to_dense() + b.to_dense()
        c = a + b
        assert_allclose(c.to_dense(), expected, atol=1e-10)
        a.plus_eq(b, cutoff=0.0)
        assert_allclose(a.to_dense(), expected, atol=1e-10)
        assert a.is_ortho()

    def test_cutoff_truncates(self):
        a = MPS_computational_state('000')
        b = MPS_computational_state('111')
        b *= 1e-4
        c = mps_add_compress(a, b, cutoff=1e-6)
        assert c.max_bond_dim() == 1
        assert overlap(c, a) == pytest.approx(1.0)


class TestMPSSum:

    def test_empty(self):
        psi = MPS_sum([])
        assert isinstance(psi, MatrixProductState)
        assert psi.L == 0

    def test_single(self):
        a = MPS_rand_state(4, 2, seed=6)
        assert MPS_sum([a]) is a

    def test_two(self):
        a = MPS_rand_state(4, 2, seed=7)
        b = MPS_rand_state(4, 2, seed=8)
        assert_allclose(MPS_sum([a, b]).to_dense(),
                        mps_add_compress(a, b).to_dense(), atol=1e-12)

    @pytest.mark.parametrize('n', [3, 4, 5, 7])
    def test_many(self, n):
        terms = [MPS_rand_state(5, 2, seed=10 + i) for i in range(n)]
        expected = sum(t.to_dense() for t in terms)
        psi = MPS_sum(terms, cutoff=0.0)
        assert_allclose(psi.to_dense(), expected, atol=1e-10)
        assert check_ortho(psi)

    def test_three_matches_nested(self):
        a, b, c = (MPS_rand_state(4, 2, seed=20 + i) for i in range(3))
        psi = MPS_sum([a, b, c], cutoff=0.0)
        nested = mps_add_compress(mps_add_compress(a, b, cutoff=0.0), c,
                                  cutoff=0.0)
        assert_allclose(psi.to_dense(), nested.to_dense(), atol=1e-10)

    def test_computational_basis(self):
        terms = [MPS_computational_state(s) for s in ('00', '01', '10', '11')]
        psi = MPS_sum(terms, progbar=True)
        assert psi.max_bond_dim() == 1
        assert overlap(psi, MPS_computational_state('++')) == (
            pytest.approx(2.0))
