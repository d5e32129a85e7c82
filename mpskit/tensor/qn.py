"""Quantum number labels for symmetry-conserving decompositions.

A quantum number, :class:`QN`, is a fixed-size record of four sectors. Each
sector, :class:`QNVal`, is a value together with a ``mod`` factor describing
how it adds:

    - ``mod == 1``: integer (Z) addition,
    - ``mod > 1``: addition modulo ``mod`` (Z_mod), e.g. clock models,
    - ``mod < 0``: as above with ``abs(mod)``, but the sector is fermionic,
    - ``mod == 0``: the sector is inactive.

Examples
--------

    >>> spin(1) + spin(-1) == QN()
    True

    >>> parity_sign(fermion(3))
    -1

"""
import enum
import functools
from numbers import Integral


QN_SIZE = 4


class MalformedQNError(ValueError):
    pass


class Arrow(enum.IntEnum):
    """The direction of an index, the charge it carries flips sign with it.
    """
    In = -1
    Out = 1


def _canonical_val(val, mod):
    """Reduce ``val`` to the canonical representative of its sector, for
    modular sectors this is the symmetric range ``[-m // 2, m - m // 2)``.
    """
    m = abs(mod)
    if m > 1:
        return (val + m // 2) % m - m // 2
    return val


class QNVal:
    """A single quantum number sector.

    Parameters
    ----------
    val : int, optional
        The charge held in this sector.
    mod : int, optional
        The addition rule, see the module docstring. The default ``0`` marks
        the sector inactive, in which case ``val`` must be zero.
    """

    __slots__ = ('_val', '_mod')

    def __init__(self, val=0, mod=0):
        val, mod = int(val), int(mod)
        if mod == 0 and val != 0:
            raise MalformedQNError(
                f"Inactive sector (mod=0) can't hold a value, got {val}.")
        self._mod = mod
        self._val = _canonical_val(val, mod)

    @property
    def val(self):
        return self._val

    @property
    def mod(self):
        return self._mod

    def is_active(self):
        return self._mod != 0

    def is_fermionic(self):
        return self._mod < 0

    def __add__(self, other):
        if not other._mod:
            return self
        if not self._mod:
            return other
        if self._mod != other._mod:
            raise MalformedQNError(
                f"Can't combine sectors with mismatched mod factors "
                f"{self._mod} and {other._mod}.")
        return QNVal(self._val + other._val, self._mod)

    def __neg__(self):
        return QNVal(-self._val, self._mod)

    def __sub__(self, other):
        return self + (-other)

    def __mul__(self, arrow):
        if Arrow(arrow) is Arrow.In:
            return -self
        return self

    __rmul__ = __mul__

    def __eq__(self, other):
        if not isinstance(other, QNVal):
            return NotImplemented
        if self._val != other._val:
            return False
        # a zero charge is indistinguishable from an unused sector
        return self._val == 0 or self._mod == other._mod

    def __hash__(self):
        return hash(self._val)

    def __repr__(self):
        return f"QNVal({self._val}, {self._mod})"


def _parse_qnval(x):
    if isinstance(x, QNVal):
        return x
    if isinstance(x, Integral):
        return QNVal(x, 1)
    try:
        pair = tuple(x)
    except TypeError:
        raise MalformedQNError(f"Can't interpret {x!r} as a QN sector.")
    if len(pair) != 2:
        raise MalformedQNError(
            f"A QN sector should be given as a (val, mod) pair, got {x!r}.")
    return QNVal(*pair)


@functools.total_ordering
class QN:
    """Quantum number label, holding four sectors.

    Parameters
    ----------
    vals : sequence of QNVal, int or (int, int)
        Up to four sectors. Plain integers are Z sectors (``mod=1``), pairs
        are ``(val, mod)``. Unspecified sectors are inactive.

    Examples
    --------

        >>> QN((1, 1), (0, -2))
        QN({1,1},{0,-2})

    """

    __slots__ = ('_qn',)

    def __init__(self, *vals):
        if len(vals) > QN_SIZE:
            raise MalformedQNError(
                f"A QN has at most {QN_SIZE} sectors, got {len(vals)}.")
        qn = [_parse_qnval(v) for v in vals]
        qn.extend(QNVal() for _ in range(QN_SIZE - len(qn)))
        self._qn = tuple(qn)

    @classmethod
    def _from_qnvals(cls, qnvals):
        new = object.__new__(cls)
        new._qn = tuple(qnvals)
        return new

    def __getitem__(self, n):
        """The value of sector ``n`` (0-indexed).
        """
        return self._qn[n].val

    def val0(self, n):
        return self._qn[n]

    def mod(self, n):
        return self._qn[n].mod

    def vals(self):
        return tuple(qv.val for qv in self._qn)

    def mods(self):
        return tuple(qv.mod for qv in self._qn)

    def __len__(self):
        return QN_SIZE

    def __iter__(self):
        return iter(self._qn)

    def __bool__(self):
        return self._qn[0].is_active()

    def __add__(self, other):
        return QN._from_qnvals(a + b for a, b in zip(self._qn, other._qn))

    def __sub__(self, other):
        return QN._from_qnvals(a - b for a, b in zip(self._qn, other._qn))

    def __neg__(self):
        return QN._from_qnvals(-a for a in self._qn)

    def __mul__(self, arrow):
        arrow = Arrow(arrow)
        return QN._from_qnvals(a * arrow for a in self._qn)

    __rmul__ = __mul__

    def __eq__(self, other):
        if not isinstance(other, QN):
            return NotImplemented
        return all(a == b for a, b in zip(self._qn, other._qn))

    def _sort_key(self):
        # zero valued sectors compare equal whatever their rule
        return tuple((qv.val, qv.mod if qv.val != 0 else 0) for qv in self._qn)

    def __lt__(self, other):
        if not isinstance(other, QN):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self):
        return hash(self.vals())

    def __repr__(self):
        active = [qv for qv in self._qn if qv.is_active()]
        if not active:
            return "QN()"
        sectors = ",".join(
            f"{{{qv.val},{qv.mod}}}"
            for qv in self._qn[:self._last_active() + 1]
        )
        return f"QN({sectors})"

    def _last_active(self):
        return max(n for n, qv in enumerate(self._qn) if qv.is_active())


def is_active(q, n):
    """Whether sector ``n`` of ``q`` is in use.
    """
    return q.val0(n).is_active()


def is_fermionic(q, n=None):
    """Whether sector ``n`` of ``q`` is fermionic, or, if ``n`` is not given,
    whether any sector is.
    """
    if n is None:
        return any(qv.is_fermionic() for qv in q)
    return q.val0(n).is_fermionic()


def parity_sign(q):
    """The fermionic parity of ``q``: ``-1`` if the fermionic sectors hold an
    odd total charge, else ``+1``.
    """
    sign = 1
    for qv in q:
        if qv.is_fermionic() and (qv.val % 2):
            sign = -sign
    return sign


# ---------------------------- convenience QNs ------------------------------ #

def spin(Sz):
    """Spin label, ``Sz`` in units of spin 1/2."""
    return QN((Sz, 1))


def boson(Nb):
    """Spinless (hard-core) boson number."""
    return QN((Nb, 1))


def spinboson(Sz, Nb):
    """Hard-core boson with spin, ``Sz`` in units of spin 1/2."""
    return QN((Sz, 1), (Nb, 1))


def fermion(Nf):
    """Spinless fermion number."""
    return QN((Nf, -1))


def fparity(Pf):
    """Spinless fermion, only the parity is conserved."""
    return QN((Pf, -2))


def electron(Sz, Nf):
    """Fermion with spin, ``Sz`` in units of spin 1/2."""
    return QN((Sz, 1), (Nf, -1))


def elparity(Sz, Pf):
    """Electron spin and parity, but not total charge."""
    return QN((Sz, 1), (Pf, -2))


def clock(n, N):
    """Z_N clock degree of freedom."""
    return QN((n, N))
