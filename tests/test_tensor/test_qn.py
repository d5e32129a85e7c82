import itertools

import pytest

from mpskit.tensor.qn import (
    QN,
    QNVal,
    Arrow,
    MalformedQNError,
    is_active,
    is_fermionic,
    parity_sign,
    spin,
    boson,
    spinboson,
    fermion,
    fparity,
    electron,
    elparity,
    clock,
)


class TestQNVal:

    def test_inactive_default(self):
        qv = QNVal()
        assert qv.val == 0
        assert qv.mod == 0
        assert not qv.is_active()
        assert not qv.is_fermionic()

    def test_inactive_with_value_raises(self):
        with pytest.raises(MalformedQNError):
            QNVal(1, 0)

    @pytest.mark.parametrize("val,mod,expected", [
        (5, 1, 5),
        (-7, 1, -7),
        (2, 3, -1),
        (5, 3, -1),
        (1, 4, 1),
        (2, 4, -2),
        (3, -1, 3),
        (1, -2, -1),
        (2, -2, 0),
    ])
    def test_canonical_values(self, val, mod, expected):
        assert QNVal(val, mod).val == expected

    def test_fermionic(self):
        assert QNVal(1, -1).is_fermionic()
        assert QNVal(1, -2).is_fermionic()
        assert not QNVal(1, 2).is_fermionic()

    def test_add_adopts_active_rule(self):
        assert (QNVal(2, 3) + QNVal()).mod == 3
        assert (QNVal() + QNVal(2, 3)).mod == 3

    def test_add_mismatched_mods_raises(self):
        with pytest.raises(MalformedQNError):
            QNVal(1, 1) + QNVal(1, 2)

    def test_arrow(self):
        assert QNVal(1, 1) * Arrow.In == QNVal(-1, 1)
        assert QNVal(1, 1) * Arrow.Out == QNVal(1, 1)


class TestQN:

    def test_construct(self):
        q = QN((1, 1), (0, -2))
        assert q.vals() == (1, 0, 0, 0)
        assert q.mods() == (1, -2, 0, 0)
        assert len(q) == 4
        assert is_active(q, 0)
        assert is_active(q, 1)
        assert not is_active(q, 2)

    def test_construct_from_ints(self):
        assert QN(3, 2).mods() == (1, 1, 0, 0)
        assert QN(3, 2)[1] == 2

    def test_too_many_sectors(self):
        with pytest.raises(MalformedQNError):
            QN(1, 2, 3, 4, 5)

    def test_bad_pair(self):
        with pytest.raises(MalformedQNError):
            QN((1, 2, 3))
        with pytest.raises(MalformedQNError):
            QN(None)

    def test_repr(self):
        assert repr(QN()) == "QN()"
        assert repr(QN((1, 1), (0, -2))) == "QN({1,1},{0,-2})"

    def test_bool(self):
        assert not QN()
        assert spin(0)

    def test_spin_identity(self):
        assert spin(1) + spin(-1) == QN()
        assert spin(1) - spin(1) == QN()

    @pytest.mark.parametrize("q", [
        spin(3),
        fermion(2),
        electron(-1, 3),
        elparity(1, 1),
        clock(2, 5),
        QN((2, 3), (1, -2), 4),
    ])
    def test_inverse(self, q):
        assert q + (-q) == QN()
        assert -(-q) == q

    def test_addition_commutes_and_associates(self):
        qs = [electron(1, 2), electron(-3, 1), electron(2, 5)]
        for a, b in itertools.permutations(qs, 2):
            assert a + b == b + a
        a, b, c = qs
        assert (a + b) + c == a + (b + c)
        assert a + b + c == electron(0, 8)

    def test_modular_addition(self):
        assert clock(2, 3) + clock(2, 3) == clock(1, 3)
        assert clock(1, 3) + clock(2, 3) == QN()
        assert fparity(1) + fparity(1) == fparity(0)

    def test_mismatched_mods_raise(self):
        with pytest.raises(MalformedQNError):
            spin(1) + clock(1, 3)

    def test_arrow_flips(self):
        q = spinboson(2, -1)
        assert q * Arrow.In == -q
        assert Arrow.In * q == -q
        assert q * Arrow.Out == q

    def test_equality_and_hash(self):
        assert spin(1) == spin(1)
        assert spin(1) != spin(-1)
        assert boson(1) != fermion(1)
        assert len({spin(1) + spin(-1), QN(), spin(0)}) == 1
        assert spin(1) != "spin"

    def test_ordering(self):
        qs = [spin(2), spin(-2), spin(0)]
        assert sorted(qs) == [spin(-2), spin(0), spin(2)]
        assert spin(-1) < spin(1)

    def test_ordering_separates_rules(self):
        a, b = boson(1), fermion(1)
        assert a != b
        assert (a < b) != (b < a)
        assert sorted([a, b]) == sorted([b, a])
        assert sorted([a, b, spin(0)]) == sorted([b, spin(0), a])

    def test_ordering_ignores_rule_of_zero_sectors(self):
        a, b = QN((0, 1)), QN((0, -1))
        assert a == b == QN()
        assert QNVal(0, 2) == QNVal(0, -1) == QNVal()
        assert sorted([a, b]) == sorted([b, a])
        assert not a < b
        assert not b < a
        assert a <= b and b <= a


class TestFermionic:

    def test_fermion_three(self):
        q = fermion(3)
        assert is_fermionic(q)
        assert is_fermionic(q, 0)
        assert not is_fermionic(q, 1)
        assert parity_sign(q) == -1

    def test_bosonic(self):
        assert not is_fermionic(spin(1))
        assert parity_sign(spin(1)) == 1

    @pytest.mark.parametrize("n", range(-3, 5))
    def test_parity_sign_fermion(self, n):
        assert parity_sign(fermion(n)) == (-1)**n

    @pytest.mark.parametrize("n1,n2", [(0, 1), (1, 1), (2, 3), (-1, 4)])
    def test_parity_sign_multiplicative(self, n1, n2):
        q1, q2 = electron(1, n1), electron(-1, n2)
        assert parity_sign(q1 + q2) == parity_sign(q1) * parity_sign(q2)

    def test_fparity(self):
        assert parity_sign(fparity(1)) == -1
        assert parity_sign(fparity(0)) == 1
        assert parity_sign(elparity(3, 1)) == -1
