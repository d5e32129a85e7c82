import io

import pytest

from mpskit.utils import (
    check_opt,
    frequencies,
    partition_all,
    progbar,
    oset,
)


class TestCheckOpt:

    def test_valid(self):
        check_opt('method', 'svd', ('svd', 'qr'))

    def test_invalid(self):
        with pytest.raises(ValueError, match="method"):
            check_opt('method', 'lu', ('svd', 'qr'))


def test_cytoolz_reexports():
    assert list(partition_all(2, range(5))) == [(0, 1), (2, 3), (4,)]
    assert frequencies('abca') == {'a': 2, 'b': 1, 'c': 1}


def test_progbar():
    pbar = progbar(total=3, file=io.StringIO())
    for _ in range(3):
        pbar.update()
    assert pbar.n == 3
    pbar.close()


class TestOset:

    def test_basic(self):
        xs = oset([3, 1, 2])
        assert tuple(xs) == (3, 1, 2)
        xs.add(0)
        xs.add(1)
        assert tuple(xs) == (3, 1, 2, 0)
        xs.discard(1)
        xs.discard(9)
        assert tuple(xs) == (3, 2, 0)
        assert 2 in xs
        assert 1 not in xs
        assert len(xs) == 3
        assert repr(xs) == "oset([3, 2, 0])"

    def test_union(self):
        xs = oset([1, 2])
        ys = xs | oset([3, 1])
        assert tuple(ys) == (1, 2, 3)
        assert tuple(xs) == (1, 2)
        xs.update([5], [4, 1])
        assert tuple(xs) == (1, 2, 5, 4)

    def test_intersection(self):
        xs = oset([4, 3, 2, 1])
        assert tuple(xs & oset([1, 3])) == (3, 1)
        assert tuple(xs.intersection([1, 2], [2, 3])) == (2,)
        assert xs.intersection() == xs

    def test_difference(self):
        xs = oset([4, 3, 2, 1])
        assert tuple(xs - oset([1, 3])) == (4, 2)
        assert tuple(xs.difference([4], [2])) == (3, 1)

    def test_eq_and_copy(self):
        xs = oset('abc')
        ys = xs.copy()
        assert xs == ys
        ys.add('d')
        assert xs != ys
        assert xs != {'a', 'b', 'c'}
