"""Labelled tensors, and the contractions and decompositions of them that
matrix product state routines are built from.
"""
import copy
import uuid
import string
import operator
import functools
import itertools
from numbers import Integral

import numpy as np
from autoray import do, conj, astype, get_dtype_name, shape

from ..core import prod, realify_scalar
from ..utils import check_opt, oset, frequencies
from . import decomp
from .array_ops import iscomplex, norm_fro, ndim, asarray
from .contraction import array_contract, get_contract_backend


PRIME = "'"


def tags_to_oset(tags):
    """Turn a single tag, a sequence of them or ``None`` into an ``oset``.
    """
    if tags is None:
        return oset()
    if isinstance(tags, (str, int)):
        return oset((tags,))
    if isinstance(tags, oset):
        return tags.copy()
    return oset(tags)


def _gen_output_inds(all_inds):
    """Yield the indices appearing exactly once in ``all_inds``, in order.
    """
    for ind, freq in frequencies(all_inds).items():
        if freq == 1:
            yield ind
        elif freq > 2:
            raise ValueError(
                f"Index {ind!r} appears {freq} times, supply `output_inds` "
                "explicitly to contract hyper indices.")


def _maybe_scalar(data):
    if isinstance(data, np.ndarray):
        return realify_scalar(data.item())
    return data


def tensor_contract(*tensors, output_inds=None, optimize=None, backend=None,
                    preserve_tensor=False):
    """Contract any number of tensors, summing every index that appears
    twice.

    Parameters
    ----------
    tensors : sequence of Tensor
        The tensors to contract.
    output_inds : sequence of str, optional
        Indices of the result, by default those appearing only once, in
        order of appearance.
    optimize : str or path optimizer, optional
        Contraction path strategy, passed to ``cotengra``.
    backend : str, optional
        Array backend to perform the contraction with.
    preserve_tensor : bool, optional
        Return a scalar ``Tensor`` rather than a number when the result has
        no indices.

    Returns
    -------
    scalar or Tensor
        The result, carrying the union of the input tags.
    """
    inputs = tuple(t.inds for t in tensors)

    if output_inds is None:
        output_inds = tuple(_gen_output_inds(itertools.chain(*inputs)))
    else:
        output_inds = tuple(output_inds)

    data_out = array_contract(
        tuple(t.data for t in tensors), inputs, output_inds,
        optimize=optimize, backend=backend)

    if not output_inds and not preserve_tensor:
        return _maybe_scalar(data_out)

    tags = oset().union(*(t.tags for t in tensors))
    return Tensor(data=data_out, inds=output_inds, tags=tags)


# a per-process prefix, followed by an orderable counter
_RAND_PREFIX = str(uuid.uuid4())[:6]
_RAND_ALPHABET = string.ascii_uppercase + string.ascii_lowercase


def _rand_names(min_len=5):
    """Every string over ``_RAND_ALPHABET``, shortest first, never running out.
    """
    return map("".join, itertools.chain.from_iterable(
        itertools.product(_RAND_ALPHABET, repeat=repeat)
        for repeat in itertools.count(min_len)))


_RAND_UUIDS = _rand_names()


def rand_uuid(base=""):
    """A new, unique index name, optionally starting with ``base``.

    Examples
    --------
    >>> rand_uuid()
    '_3f9c1dAAAAB'

    >>> rand_uuid('link')
    'link_3f9c1dAAAAC'
    """
    return f"{base}_{_RAND_PREFIX}{next(_RAND_UUIDS)}"


_VALID_SPLIT_GET = {'arrays', 'tensors', 'values'}
_SPLIT_METHODS = {'svd', 'dm', 'qr', 'lq'}
_CUTOFF_MODES = {'abs': 1, 'rel': 2, 'sum2': 3,
                 'rsum2': 4, 'sum1': 5, 'rsum1': 6}


def _fuse_to_matrix(T, left_inds):
    """Reshape ``T`` into a matrix with ``left_inds`` as its rows, returning
    the matrix and the grouped index names and dimensions.
    """
    left_inds = tuple(tags_to_oset(left_inds))
    right_inds = tuple(ix for ix in T.inds if ix not in left_inds)
    TT = T.transpose(*left_inds, *right_inds)
    left_dims = TT.shape[:len(left_inds)]
    right_dims = TT.shape[len(left_inds):]
    x = do("reshape", TT.data, (prod(left_dims), prod(right_dims)))
    return x, (left_inds, left_dims), (right_inds, right_dims)


def tensor_split(
    T,
    left_inds,
    method='svd',
    get='tensors',
    absorb='both',
    max_bond=None,
    cutoff=1e-10,
    cutoff_mode='rsum2',
    noise=0.0,
    projected=None,
    bond_ind=None,
    info=None,
):
    """Split ``T`` in two across ``left_inds`` versus the remaining indices,
    joining the pieces with a new bond.

    Parameters
    ----------
    T : Tensor
        The tensor to split.
    left_inds : str or sequence of str
        The indices of ``T`` to put on the left piece.
    method : {'svd', 'dm', 'qr', 'lq'}, optional
        How to split the tensor:

            - ``'svd'``: truncated singular value decomposition.
            - ``'dm'``: diagonalize the reduced density matrix of the side
              that becomes the isometry, with optional ``noise``. ``absorb``
              must be ``'left'`` or ``'right'``.
            - ``'qr'``, ``'lq'``: untruncated QR or LQ decomposition.

    get : {'tensors', 'arrays', 'values'}, optional
        Return the new tensors, their raw arrays, or only the singular values.
    absorb : {'both', 'left', 'right', None}, optional
        Where the weights of the bond end up, ``None`` returning them as a
        separate vector.
    max_bond : int, optional
        Keep at most this many states on the new bond.
    cutoff : float, optional
        Truncation threshold, ignored by ``'qr'`` and ``'lq'``.
    cutoff_mode : {'rsum2', 'sum2', 'rel', 'abs', 'rsum1', 'sum1'}, optional
        How ``cutoff`` is applied by ``'svd'``, see
        :func:`~mpskit.tensor.decomp.svd_truncated`. ``'dm'`` always uses
        ``'rsum1'`` on the density matrix eigenvalues.
    noise : float, optional
        Density matrix perturbation, ``'dm'`` only.
    projected : Tensor, optional
        ``T`` acted on by an effective operator, shaping the ``'dm'`` noise.
    bond_ind : str, optional
        Name of the new bond, a fresh one by default.
    info : dict, optional
        If given, the :class:`~mpskit.tensor.decomp.Spectrum` of a truncating
        method is stored under ``'spectrum'``.

    Returns
    -------
    (Tl, Tr) or (Tl, Ts, Tr)
        ``Ts`` is only present when ``absorb=None``.
    """
    check_opt('get', get, _VALID_SPLIT_GET)
    check_opt('method', method, _SPLIT_METHODS)

    x, (left_inds, left_dims), (right_inds, right_dims) = \
        _fuse_to_matrix(T, left_inds)

    if get == 'values':
        return decomp.svd_truncated(x, absorb=None)[1]

    cutoff = -1.0 if cutoff is None else cutoff
    max_bond = -1 if max_bond is None else max_bond
    s = None

    if method in ('qr', 'lq'):
        if absorb is None:
            raise ValueError(
                f"`method='{method}'` can't return the bond weights "
                "separately.")
        fn = decomp.qr_stabilized if method == 'qr' else decomp.lq_stabilized
        left, _, right = fn(x)

    elif method == 'dm':
        check_opt('absorb', absorb, ('left', 'right'))
        x_proj = None
        if projected is not None:
            PT = projected.transpose(*left_inds, *right_inds)
            x_proj = do("reshape", PT.data, x.shape)
        left, right = decomp.denmat_truncated(
            x, which='left' if absorb == 'right' else 'right',
            cutoff=cutoff, max_bond=max_bond, noise=noise, x_proj=x_proj,
            info=info)

    else:
        left, s, right = decomp.svd_truncated(
            x, cutoff=cutoff, cutoff_mode=_CUTOFF_MODES[cutoff_mode],
            max_bond=max_bond, absorb=absorb, info=info)

    left = do("reshape", left, (*left_dims, -1))
    right = do("reshape", right, (-1, *right_dims))

    if get == 'arrays':
        return (left, right) if absorb is not None else (left, s, right)

    if bond_ind is None:
        bond_ind = rand_uuid()
    Tl = Tensor(left, inds=(*left_inds, bond_ind), tags=T.tags)
    Tr = Tensor(right, inds=(bond_ind, *right_inds), tags=T.tags)

    if absorb is None:
        return Tl, Tensor(s, inds=(bond_ind,), tags=T.tags), Tr
    return Tl, Tr


def tensor_canonize_bond(T1, T2, absorb='right', **split_opts):
    r"""Gauge the single bond between ``T1`` and ``T2`` inplace, so that one
    of them becomes an isometry and the other takes the remainder::

          |   |          |   |
        --1---2--  =>  -->---O--     (absorb='right')

    The bond keeps its name, though its size may shrink.

    Parameters
    ----------
    T1, T2 : Tensor
        The neighbouring tensors, sharing exactly one index.
    absorb : {'right', 'left'}, optional
        Which tensor takes the non-isometric factor, ``T2`` or ``T1``.
    split_opts
        Supplied to :func:`tensor_split`, ``method='qr'`` by default.
    """
    check_opt('absorb', absorb, ('left', 'right'))
    split_opts.setdefault('method', 'qr')

    iso, rem = (T1, T2) if absorb == 'right' else (T2, T1)

    outer, shared, _ = group_inds(iso, rem)
    if len(shared) != 1:
        raise ValueError(
            f"Can only canonize across a single bond, found {shared}.")
    bix, = shared

    tmp = rand_uuid()
    new_iso, factor = iso.split(outer, bond_ind=tmp, **split_opts)
    new_rem = factor @ rem

    for old, new in ((iso, new_iso), (rem, new_rem)):
        new.reindex_({tmp: bix})
        new.transpose_like_(old)
        old.modify(data=new.data)


def array_direct_product(X, Y, sum_axes=()):
    """Block diagonal combination of the arrays ``X`` and ``Y``: every axis
    has size ``dX + dY``, ``X`` filling the leading corner and ``Y`` the
    trailing one. Axes in ``sum_axes`` must match in size and are added
    instead.
    """
    if isinstance(sum_axes, Integral):
        sum_axes = (sum_axes,)

    padX, padY = [], []
    for ax, (dx, dy) in enumerate(zip(X.shape, Y.shape)):
        if ax in sum_axes:
            if dx != dy:
                raise ValueError(
                    f"Summed axis {ax} has sizes {dx} and {dy}, which "
                    "should match.")
            padX.append((0, 0))
            padY.append((0, 0))
        else:
            padX.append((0, dy))
            padY.append((dx, 0))

    return (do('pad', X, padX, mode='constant') +
            do('pad', Y, padY, mode='constant'))


def tensor_direct_product(T1, T2, sum_inds=(), inplace=False):
    """Direct product of two tensors with the same indices, any in
    ``sum_inds`` being added rather than stacked. A chain of such products
    contracts to the sum of the two chains,
    ``(a1 @ b1) + (a2 @ b2) == (a1 (+) a2) @ (b1 (+) b2)``, as long as the
    chain's open indices are all in ``sum_inds``.

    Parameters
    ----------
    T1 : Tensor
        The first tensor, whose index order the result keeps.
    T2 : Tensor
        The second tensor.
    sum_inds : str or sequence of str, optional
        Indices to add over, typically physical site indices.
    inplace : bool, optional
        Whether to overwrite ``T1``.

    Returns
    -------
    Tensor
    """
    if isinstance(sum_inds, (str, Integral)):
        sum_inds = (sum_inds,)

    if T2.inds != T1.inds:
        T2 = T2.transpose(*T1.inds)

    sum_axes = tuple(map(T1.inds.index, sum_inds))
    new = T1 if inplace else T1.copy()
    new.modify(data=array_direct_product(T1.data, T2.data, sum_axes))
    return new


def bonds(t1, t2):
    """The indices shared by ``t1`` and ``t2``.
    """
    return oset(t1.inds) & oset(t2.inds)


def group_inds(t1, t2):
    """Partition the indices of two tensors into those only on ``t1``, those
    shared, and those only on ``t2``, each as a list in order of appearance.
    """
    shared = [ix for ix in t1.inds if ix in t2.inds]
    left = [ix for ix in t1.inds if ix not in shared]
    right = [ix for ix in t2.inds if ix not in shared]
    return left, shared, right


def prime_ind(ind, n=1):
    return f"{ind}{PRIME * n}"


def noprime_ind(ind):
    return ind.rstrip(PRIME)


def _as_ind_tuple(inds, default):
    if inds is None:
        return default
    if isinstance(inds, str):
        return (inds,)
    return tuple(inds)


class Tensor:
    """An array whose axes are addressed by index name rather than position,
    together with a set of tags. Contraction with ``@`` sums over the
    indices two tensors share.

    Parameters
    ----------
    data : array_like
        The array.
    inds : sequence of str
        One name per axis of ``data``.
    tags : str or sequence of str, optional
        Labels, such as the site a tensor belongs to.

    Examples
    --------

        >>> import numpy as np
        >>> A = Tensor(np.ones((2, 3)), inds=['k0', 'l0'], tags='I0')
        >>> B = Tensor(np.ones((3, 2)), inds=['l0', 'k1'], tags='I1')
        >>> A @ B
        Tensor(shape=(2, 2), inds=('k0', 'k1'), tags=oset(['I0', 'I1']))

    """

    __slots__ = ('_data', '_inds', '_tags')

    def __init__(self, data=1.0, inds=(), tags=None):
        if isinstance(data, Tensor):
            self._data = data.data
            self._inds = data.inds
            self._tags = data.tags.copy()
            return

        self._data = asarray(data)
        self._inds = tuple(inds)
        self._tags = tags_to_oset(tags)

        if ndim(self._data) != len(self._inds):
            raise ValueError(
                f"Got {len(self._inds)} inds, {self._inds}, for an array of "
                f"shape {shape(self._data)}.")

    def copy(self, deep=False):
        """Copy this tensor, sharing the underlying array unless ``deep``.
        """
        if deep:
            return copy.deepcopy(self)
        return self.__class__(self)

    __copy__ = copy

    @property
    def data(self):
        return self._data

    @property
    def inds(self):
        return self._inds

    @property
    def tags(self):
        return self._tags

    def modify(self, **kwargs):
        """Update this tensor in place.

        Parameters
        ----------
        data : array, optional
            New array.
        apply : callable, optional
            Function mapping the current array to a new one, applied after
            ``data``.
        inds : sequence of str, optional
            New index names.
        tags : sequence of str, optional
            New tags.
        """
        if 'data' in kwargs:
            self._data = asarray(kwargs.pop('data'))
        if 'apply' in kwargs:
            self._data = asarray(kwargs.pop('apply')(self._data))
        if 'inds' in kwargs:
            self._inds = tuple(kwargs.pop('inds'))
        if 'tags' in kwargs:
            self._tags = tags_to_oset(kwargs.pop('tags'))

        if kwargs:
            raise ValueError(f"Option(s) {kwargs} not valid.")

        if len(self._inds) != ndim(self._data):
            raise ValueError(
                f"Tensor now has {len(self._inds)} inds but its array has "
                f"{ndim(self._data)} dimensions.")

    def conj(self, inplace=False):
        """Complex conjugate the array, leaving the indices alone.
        """
        t = self if inplace else self.copy()
        t.modify(apply=conj)
        return t

    conj_ = functools.partialmethod(conj, inplace=True)

    @property
    def H(self):
        return self.conj()

    @property
    def shape(self):
        return shape(self._data)

    @property
    def ndim(self):
        return len(self._inds)

    @property
    def size(self):
        return prod(self.shape)

    @property
    def dtype(self):
        return getattr(self._data, "dtype", None)

    def iscomplex(self):
        return iscomplex(self._data)

    def astype(self, dtype, inplace=False):
        t = self if inplace else self.copy()
        if t.dtype != dtype:
            t.modify(apply=lambda x: astype(x, dtype))
        return t

    def ind_size(self, ind):
        """The dimension of index ``ind``.
        """
        return int(self.shape[self._inds.index(ind)])

    def inds_size(self, inds):
        """The combined dimension of ``inds``.
        """
        return prod(map(self.ind_size, inds))

    def transpose(self, *output_inds, inplace=False):
        """Reorder the axes (and indices) of this tensor to ``output_inds``.
        """
        t = self if inplace else self.copy()

        output_inds = tuple(output_inds)
        if t.inds == output_inds:
            return t

        if set(t.inds) != set(output_inds):
            raise ValueError(
                f"Can't transpose {t.inds} to {output_inds}, which is not a "
                "permutation of them.")

        perm = tuple(map(t.inds.index, output_inds))
        t.modify(apply=lambda x: do("transpose", x, perm), inds=output_inds)
        return t

    transpose_ = functools.partialmethod(transpose, inplace=True)

    def transpose_like(self, other, inplace=False):
        """Match the index order of ``other``.
        """
        return self.transpose(*other.inds, inplace=inplace)

    transpose_like_ = functools.partialmethod(transpose_like, inplace=True)

    def item(self):
        return self._data.reshape(()).item()

    def reindex(self, index_map, inplace=False):
        """Rename indices according to ``index_map``, ``{old: new}``. All
        renames happen at once, so names can be swapped.
        """
        t = self if inplace else self.copy()
        t.modify(inds=(index_map.get(ix, ix) for ix in t.inds))
        return t

    reindex_ = functools.partialmethod(reindex, inplace=True)

    def prime(self, inds=None, n=1, inplace=False):
        """Append ``n`` primes to each of ``inds``, all indices by default.
        """
        inds = _as_ind_tuple(inds, self._inds)
        return self.reindex({ix: prime_ind(ix, n) for ix in inds},
                            inplace=inplace)

    prime_ = functools.partialmethod(prime, inplace=True)

    def noprime(self, inds=None, inplace=False):
        """Strip every prime from each of ``inds``, all indices by default.
        """
        inds = _as_ind_tuple(inds, self._inds)
        return self.reindex({ix: noprime_ind(ix) for ix in inds},
                            inplace=inplace)

    noprime_ = functools.partialmethod(noprime, inplace=True)

    def to_dense(self, *inds_seq):
        """The array with axes fused in groups, one group per element of
        ``inds_seq``, e.g. ``T.to_dense(['a', 'b'], ['c'])`` is a matrix.
        """
        t = self.transpose(*itertools.chain(*inds_seq))
        return do("reshape", t.data, [self.inds_size(g) for g in inds_seq])

    def norm(self):
        """The Frobenius norm.
        """
        return norm_fro(self._data)

    def normalize(self, inplace=False):
        t = self if inplace else self.copy()
        t.modify(data=t.data / t.norm())
        return t

    normalize_ = functools.partialmethod(normalize, inplace=True)

    def split(self, *args, **kwargs):
        return tensor_split(self, *args, **kwargs)

    def bonds(self, other):
        return bonds(self, other)

    def almost_equals(self, other, **kwargs):
        """Whether ``other`` has the same indices and, after aligning them,
        close data. ``kwargs`` go to ``allclose``.
        """
        if set(self._inds) != set(other.inds):
            return False
        return bool(do('allclose', self._data,
                       other.transpose_like(self).data, **kwargs))

    def __imul__(self, other):
        self.modify(apply=lambda x: x * other)
        return self

    def __itruediv__(self, other):
        self.modify(apply=lambda x: x / other)
        return self

    def __neg__(self):
        return Tensor(-self._data, inds=self._inds, tags=self._tags)

    def __matmul__(self, other):
        """Contract with ``other`` over all shared indices, returning a
        number if none remain.
        """
        lix, bix, rix = group_inds(self, other)
        axes = (tuple(map(self._inds.index, bix)),
                tuple(map(other.inds.index, bix)))
        data_out = do('tensordot', self._data, other.data, axes=axes,
                      like=get_contract_backend())
        if not (lix or rix):
            return _maybe_scalar(data_out)
        return self.__class__(data_out, inds=lix + rix,
                              tags=self._tags | other.tags)

    def __repr__(self):
        return (f"{self.__class__.__name__}(shape={self.shape}, "
                f"inds={self._inds}, tags={self._tags})")

    def __str__(self):
        return (f"{self.__class__.__name__}(shape={self.shape}, "
                f"inds={self._inds}, tags={self._tags}, "
                f"dtype='{get_dtype_name(self._data)}')")


def _make_promote_array_func(op, meth_name):

    @functools.wraps(getattr(np.ndarray, meth_name))
    def _promote_array_func(self, other):
        """Elementwise ``op``, aligning indices if ``other`` is a tensor.
        """
        if not isinstance(other, Tensor):
            return Tensor(op(self.data, other), inds=self.inds,
                          tags=self.tags)

        if set(self.inds) != set(other.inds):
            raise ValueError(
                f"Can't combine tensors with indices {self.inds} and "
                f"{other.inds}.")
        return Tensor(op(self.data, other.transpose_like(self).data),
                      inds=self.inds, tags=self.tags | other.tags)

    return _promote_array_func


def _make_rhand_array_promote_func(op, meth_name):

    @functools.wraps(getattr(np.ndarray, meth_name))
    def _rhand_array_promote_func(self, other):
        return Tensor(op(other, self.data), inds=self.inds, tags=self.tags)

    return _rhand_array_promote_func


for meth_name, op in [('__add__', operator.__add__),
                      ('__sub__', operator.__sub__),
                      ('__mul__', operator.__mul__),
                      ('__truediv__', operator.__truediv__)]:
    setattr(Tensor, meth_name, _make_promote_array_func(op, meth_name))

for meth_name, op in [('__radd__', operator.__add__),
                      ('__rsub__', operator.__sub__),
                      ('__rmul__', operator.__mul__),
                      ('__rtruediv__', operator.__truediv__)]:
    setattr(Tensor, meth_name, _make_rhand_array_promote_func(op, meth_name))
