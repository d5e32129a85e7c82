"""Misc utility functions.
"""
import cytoolz
from tqdm.auto import tqdm

frequencies = cytoolz.frequencies
partition_all = cytoolz.partition_all


def check_opt(name, value, valid):
    """Raise an informative ``ValueError`` if ``value`` is not one of
    ``valid``.
    """
    if value not in valid:
        raise ValueError(
            f"Option `{name}` should be one of {valid}, but got {value!r}.")


def progbar(*args, **kwargs):
    """A ``tqdm`` progress bar, drawn with ascii characters by default.
    """
    kwargs.setdefault('ascii', True)
    return tqdm(*args, **kwargs)


class oset:
    """Insertion ordered set, backed by the keys of a ``dict``. Used for
    tags and index groups so that iteration order, and thus index order, is
    deterministic.
    """

    __slots__ = ('_d',)

    def __init__(self, it=()):
        self._d = dict.fromkeys(it)

    @classmethod
    def _wrap(cls, keys):
        new = object.__new__(cls)
        new._d = dict.fromkeys(keys)
        return new

    def copy(self):
        return self._wrap(self._d)

    def __deepcopy__(self, memo):
        new = memo[id(self)] = self.copy()
        return new

    def add(self, k):
        self._d[k] = None

    def discard(self, k):
        self._d.pop(k, None)

    def update(self, *others):
        for other in others:
            self._d.update(dict.fromkeys(other))

    def union(self, *others):
        new = self.copy()
        new.update(*others)
        return new

    def intersection(self, *others):
        if not others:
            return self.copy()
        common = set.intersection(*map(set, others))
        return self._wrap(k for k in self._d if k in common)

    def difference(self, *others):
        excluded = set().union(*others)
        return self._wrap(k for k in self._d if k not in excluded)

    __or__ = union
    __and__ = intersection
    __sub__ = difference

    def __eq__(self, other):
        return isinstance(other, oset) and self._d == other._d

    def __len__(self):
        return len(self._d)

    def __iter__(self):
        return iter(self._d)

    def __contains__(self, k):
        return k in self._d

    def __repr__(self):
        return f"oset({list(self._d)})"
