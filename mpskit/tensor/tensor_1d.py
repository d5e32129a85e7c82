"""Matrix product states with explicit orthogonality bookkeeping.

The state keeps track of an 'orthogonality window' ``(left_lim, right_lim)``:
every site ``i <= left_lim`` is a left isometry and every site
``i >= right_lim`` is a right isometry. When ``left_lim + 1 == right_lim - 1``
the single site in between is the orthogonality center, which then carries
the whole norm of the state.
"""
import warnings

from autoray import do

from ..utils import check_opt
from .array_ops import asarray
from .tensor_core import (
    Tensor,
    bonds,
    rand_uuid,
    prime_ind,
    tensor_contract,
    tensor_canonize_bond,
)


MIN_CUT = 1e-15
"""Default truncation cutoff for bond updates."""

_SVD_CUTOFF_THRESH = 1e-12
_NORMALIZE_TOL = 1e-16
_ZERO_NORM_TOL = 1e-20
_ORTHO_TOL = 1e-13
_IMAG_TOL = 1e-12


class UninitializedError(ValueError):
    pass


class GaugeConsistencyError(ValueError):
    pass


class OrthogonalityError(ValueError):
    pass


class DimensionMismatchError(ValueError):
    pass


class NumericDegeneracyError(ValueError):
    pass


def get_default_opts():
    """Get the default options for bond updates.

    Returns
    -------
    default_sweep_opts : dict

        noise : float
            Magnitude of the density matrix perturbation, relative to its
            trace. Any non-zero value selects the density matrix route.
        cutoff : float
            Discard singular values (or density matrix eigenvalues) whose
            total relative weight is below this.
        use_svd : bool
            Always use an explicit SVD rather than a density matrix.
        normalize : bool
            Rescale the new orthogonality center to unit norm.
        max_bond : int or None
            Hard limit on the new bond dimension.
        fromleft : bool
            For gate application, whether to leave the center to the right
            (``True``) or left of the updated bond.
    """
    return {
        'noise': 0.0,
        'cutoff': MIN_CUT,
        'use_svd': False,
        'normalize': False,
        'max_bond': None,
        'fromleft': True,
    }


def _parse_opts(opts):
    defaults = get_default_opts()
    bad = set(opts) - set(defaults)
    if bad:
        raise ValueError(f"Option(s) {bad} not valid, valid options are "
                         f"{tuple(defaults)}.")
    defaults.update(opts)
    return defaults


_DIRECTION_MAP = {
    'right': 'right',
    'fromleft': 'right',
    'left': 'left',
    'fromright': 'left',
}


def _parse_shape(shape, present):
    """The axes of an array specified with ``shape`` (e.g. ``'lrp'``), given
    only the dimensions ``present`` exist, that put it in order ``present``.
    """
    sub = "".join(c for c in shape if c in present)
    return tuple(sub.find(c) for c in present)


class MatrixProductState:
    """Initialise a matrix product state, with auto labelling and tagging.

    Parameters
    ----------
    arrays : sequence of arrays
        The tensor arrays to form into a MPS. The first and last arrays lack
        the left and right bond dimension respectively.
    sites : SiteSet, optional
        The local basis, only needed for quantum number aware routines.
    shape : str, optional
        String specifying layout of the tensors. E.g. 'lrp' (the default)
        indicates the shape corresponds left-bond, right-bond, physical index.
        End tensors have either 'l' or 'r' dropped from the string.
    site_ind_id : str
        A string specifiying how to label the physical site indices. Should
        contain a ``'{}'`` placeholder. It is used to generate the actual
        indices like: ``map(site_ind_id.format, range(len(arrays)))``.
    site_tag_id : str
        A string specifiying how to tag the tensors at each site. Should
        contain a ``'{}'`` placeholder. It is used to generate the actual tags
        like: ``map(site_tag_id.format, range(len(arrays)))``.
    left_lim : int, optional
        Every site up to and including this one is a left isometry, ``-1``
        meaning none.
    right_lim : int, optional
        Every site from this one onwards is a right isometry, defaults to
        ``L`` meaning none.
    """

    def __init__(self, arrays=(), *, sites=None, shape='lrp',
                 site_ind_id='k{}', site_tag_id='I{}', left_lim=-1,
                 right_lim=None):

        arrays = tuple(arrays)
        L = len(arrays)
        self.site_ind_id = site_ind_id
        self.site_tag_id = site_tag_id

        links = [rand_uuid() for _ in range(L - 1)]
        tensors = []
        for i, array in enumerate(arrays):
            present = ('l' if i > 0 else '') + ('r' if i < L - 1 else '') + 'p'
            data = do('transpose', asarray(array),
                      _parse_shape(shape, present))
            inds = ((links[i - 1],) if i > 0 else ()) + \
                   ((links[i],) if i < L - 1 else ()) + \
                   (self.site_ind(i),)
            tensors.append(Tensor(data, inds=inds, tags=self.site_tag(i)))

        self._tensors = tensors
        self._left_lim = left_lim
        self._right_lim = L if right_lim is None else right_lim
        self._sites = None
        self._bond = None
        if sites is not None:
            self.sites = sites

    # ----------------------------- container ------------------------------ #

    @property
    def L(self):
        """The number of sites.
        """
        return len(self._tensors)

    def __len__(self):
        return self.L

    def __iter__(self):
        return iter(self._tensors)

    def __getitem__(self, i):
        return self._tensors[i]

    def __setitem__(self, i, T):
        """Replace the tensor at site ``i``, shrinking the orthogonality window
        so that it no longer claims anything about that site.
        """
        if not isinstance(T, Tensor):
            raise TypeError(f"Can only set sites to a Tensor, got {type(T)}.")
        i = range(self.L)[i]
        self._tensors[i] = T
        if i <= self._left_lim:
            self._left_lim = i - 1
        if i >= self._right_lim:
            self._right_lim = i + 1

    def copy(self, deep=False):
        """Copy this state. By default the tensor objects are new but share
        their (never mutated in place) underlying arrays.
        """
        new = object.__new__(self.__class__)
        new._tensors = [t.copy(deep=deep) for t in self._tensors]
        new.site_ind_id = self.site_ind_id
        new.site_tag_id = self.site_tag_id
        new._left_lim = self._left_lim
        new._right_lim = self._right_lim
        new._sites = self._sites
        new._bond = self._bond
        return new

    __copy__ = copy

    def site_ind(self, i):
        return self.site_ind_id.format(i)

    @property
    def site_inds(self):
        return tuple(map(self.site_ind, range(self.L)))

    def site_tag(self, i):
        return self.site_tag_id.format(i)

    def phys_dim(self, i=0):
        return self[i].ind_size(self.site_ind(i))

    @property
    def sites(self):
        """The local basis of this state.
        """
        if self._sites is None:
            raise UninitializedError(
                "This state has no site basis, supply one with ``sites=``.")
        return self._sites

    @sites.setter
    def sites(self, sites):
        if len(sites) != self.L:
            raise DimensionMismatchError(
                f"SiteSet has {len(sites)} sites but the state has {self.L}.")
        for i in range(self.L):
            if self.phys_dim(i) != sites.phys_dim(i):
                raise DimensionMismatchError(
                    f"Site {i} has dimension {self.phys_dim(i)} but the "
                    f"SiteSet says {sites.phys_dim(i)}.")
        self._sites = sites

    # ------------------------------- links -------------------------------- #

    def link_ind(self, b):
        """The index joining sites ``b`` and ``b + 1``, or ``None``.
        """
        if not 0 <= b < self.L - 1:
            return None
        shared = bonds(self[b], self[b + 1])
        if not shared:
            return None
        ix, = shared
        return ix

    bond_ind = link_ind

    def right_link_ind(self, i):
        return self.link_ind(i)

    def left_link_ind(self, i):
        return self.link_ind(i - 1)

    def bond_size(self, b):
        ix = self.link_ind(b)
        if ix is None:
            return 1
        return self[b].ind_size(ix)

    def bond_sizes(self):
        return [self.bond_size(b) for b in range(self.L - 1)]

    def max_bond_dim(self):
        """The largest bond dimension of this state.
        """
        return max(self.bond_sizes(), default=0)

    max_bond = max_bond_dim

    def average_bond_dim(self):
        """The mean bond dimension of this state.
        """
        sizes = self.bond_sizes()
        if not sizes:
            return 0.0
        return sum(sizes) / len(sizes)

    def iscomplex(self):
        return any(t.iscomplex() for t in self)

    # --------------------------- orthogonality ---------------------------- #

    @property
    def left_lim(self):
        return self._left_lim

    @property
    def right_lim(self):
        return self._right_lim

    def is_ortho(self):
        """Whether there is a single, well defined, orthogonality center.
        """
        return self._left_lim + 1 == self._right_lim - 1

    def ortho_center(self):
        """The site of the orthogonality center.
        """
        if not self.is_ortho():
            raise OrthogonalityError(
                "Orthogonality center not well defined, the window is "
                f"({self._left_lim}, {self._right_lim}). Call ``position`` "
                "or ``orthogonalize`` first.")
        return self._left_lim + 1

    def set_bond(self, b):
        """Mark bond ``b`` as the one about to be updated.
        """
        if not 0 <= b < self.L - 1:
            raise ValueError(f"Bond {b} out of range for {self.L} sites.")
        self._bond = b

    def left_canonize_site(self, i):
        r"""Left canonize the tensor at site ``i``, absorbing the remainder
        into site ``i + 1``::

                          i              i
            -o-o-o-o-  ->  -o-o->-o-
             | | | |        | | | |
        """
        tensor_canonize_bond(self[i], self[i + 1], absorb='right')

    def right_canonize_site(self, i):
        r"""Right canonize the tensor at site ``i``, absorbing the remainder
        into site ``i - 1``::

                i              i
            -o-o-o-o-  ->  -o-<-o-o-
             | | | |        | | | |
        """
        tensor_canonize_bond(self[i - 1], self[i], absorb='left')

    def position(self, i):
        """Move the orthogonality center to site ``i``, using QR
        decompositions only where the current window requires it.
        """
        i = range(self.L)[i]
        for j in range(self._left_lim + 1, i):
            self.left_canonize_site(j)
        for j in range(self._right_lim - 1, i, -1):
            self.right_canonize_site(j)
        self._left_lim = i - 1
        self._right_lim = i + 1
        return self

    def orthogonalize(self, **opts):
        """Bring this state into canonical form, truncating every bond with
        the bond update options ``opts`` (see :func:`get_default_opts`). The
        orthogonality center ends up at the last site.
        """
        if self.L == 0:
            return self
        self.position(0)
        for b in range(self.L - 1):
            AA = self[b] @ self[b + 1]
            self.svd_bond(b, AA, 'right', **opts)
        return self

    # ------------------------------- norms -------------------------------- #

    def norm(self):
        """The norm of this state, read off from the orthogonality center.
        """
        if not self.is_ortho():
            raise OrthogonalityError(
                "State must have a well defined orthogonality center to "
                "compute the norm, call ``position`` or ``orthogonalize`` "
                "first.")
        return self[self.ortho_center()].norm()

    def normalize(self):
        """Normalize this state inplace, returning the old norm.
        """
        nrm = self.norm()
        if abs(nrm) < _ZERO_NORM_TOL:
            raise NumericDegeneracyError(
                f"Can't normalize a state with norm {nrm}.")
        self /= nrm
        return nrm

    def _scale_site(self):
        if self.L == 0:
            raise UninitializedError("Can't scale an empty state.")
        return min(max(self._left_lim + 1, 0), self.L - 1)

    def __imul__(self, x):
        self[self._scale_site()].modify(apply=lambda data: data * x)
        return self

    def __itruediv__(self, x):
        self[self._scale_site()].modify(apply=lambda data: data / x)
        return self

    def __mul__(self, x):
        new = self.copy()
        new *= x
        return new

    __rmul__ = __mul__

    def __truediv__(self, x):
        new = self.copy()
        new /= x
        return new

    # ---------------------------- bond updates ---------------------------- #

    def svd_bond(self, b, AA, direction='right', projector=None, **opts):
        """Split the two-site tensor ``AA`` back into sites ``b`` and
        ``b + 1``, truncating the new bond, and update the orthogonality
        window.

        Parameters
        ----------
        b : int
            The bond, joining sites ``b`` and ``b + 1``.
        AA : Tensor
            The combined two-site tensor, with the outer links and site
            indices of sites ``b`` and ``b + 1``.
        direction : {'right', 'left'}, optional
            Which way the orthogonality center moves. ``'right'`` leaves site
            ``b`` a left isometry and the center at ``b + 1``, ``'left'``
            leaves site ``b + 1`` a right isometry and the center at ``b``.
            ``'fromleft'`` and ``'fromright'`` are aliases.
        projector : BondProjector, optional
            Effective operator biasing the density matrix noise term.
        opts
            Supplied to :func:`get_default_opts`.

        Returns
        -------
        Spectrum
        """
        check_opt('direction', direction, _DIRECTION_MAP)
        direction = _DIRECTION_MAP[direction]
        opts = _parse_opts(opts)

        self.set_bond(b)
        if direction == 'right' and b - 1 > self._left_lim:
            raise GaugeConsistencyError(
                f"Can't update bond {b} from the left, sites up to {b - 1} "
                f"must be left canonical but ``left_lim={self._left_lim}``.")
        if direction == 'left' and b + 2 < self._right_lim:
            raise GaugeConsistencyError(
                f"Can't update bond {b} from the right, sites from {b + 2} "
                f"must be right canonical but ``right_lim={self._right_lim}``.")

        bix = self.link_ind(b)
        if bix is None:
            bix = rand_uuid()
        left_inds = [ix for ix in AA.inds
                     if ix in self[b].inds and ix != bix]

        split_opts = {
            'absorb': 'right' if direction == 'right' else 'left',
            'cutoff': opts['cutoff'],
            'max_bond': opts['max_bond'],
            'bond_ind': bix,
            'info': {},
        }
        noise = opts['noise']
        if opts['use_svd'] or (noise == 0.0 and
                               opts['cutoff'] < _SVD_CUTOFF_THRESH):
            split_opts['method'] = 'svd'
            split_opts['cutoff_mode'] = 'rsum2'
        else:
            split_opts['method'] = 'dm'
            split_opts['noise'] = noise
            if projector is not None and noise > 0.0:
                split_opts['projected'] = projector.apply(AA)

        Tl, Tr = AA.split(left_inds, **split_opts)

        for T, old in ((Tl, self[b]), (Tr, self[b + 1])):
            T.modify(tags=old.tags)
            if set(T.inds) == set(old.inds):
                T.transpose_like_(old)

        if opts['normalize']:
            oc = Tr if direction == 'right' else Tl
            nrm = oc.norm()
            if nrm > _NORMALIZE_TOL:
                oc /= nrm
            else:
                warnings.warn(
                    f"Not normalizing the new center at bond {b}, its norm "
                    f"({nrm:.3e}) is too close to zero.")

        self._tensors[b] = Tl
        self._tensors[b + 1] = Tr

        if direction == 'right':
            self._left_lim = b
            self._right_lim = max(self._right_lim, b + 2)
        else:
            self._left_lim = min(self._left_lim, b - 1)
            self._right_lim = b + 1

        return split_opts['info']['spectrum']

    def apply_gate(self, gate, fromleft=True, **opts):
        """Apply a two-site ``gate`` at the orthogonality center ``c`` and
        the site after it, then split the result with :meth:`svd_bond`.

        Parameters
        ----------
        gate : Tensor or array
            If a tensor, it should have the primed site indices of sites
            ``c`` and ``c + 1`` as outputs, and the unprimed ones as inputs.
            An array may be shaped ``(d * d, d * d)`` or ``(d, d, d, d)``.
        fromleft : bool, optional
            Leave the center at ``c + 1`` (the default) or at ``c``.
        opts
            Supplied to :meth:`svd_bond`.

        Returns
        -------
        Spectrum
        """
        c = self.ortho_center()
        if c >= self.L - 1:
            raise GaugeConsistencyError(
                f"The orthogonality center is at the last site ({c}), there "
                "is no bond to its right to apply a gate on.")
        kc, kd = self.site_ind(c), self.site_ind(c + 1)
        out_inds = (prime_ind(kc), prime_ind(kd))

        if not isinstance(gate, Tensor):
            dc, dd = self.phys_dim(c), self.phys_dim(c + 1)
            gate = Tensor(do('reshape', gate, (dc, dd, dc, dd)),
                          inds=(*out_inds, kc, kd))

        AA = (self[c] @ self[c + 1]) @ gate
        AA.noprime_(out_inds)

        opts['fromleft'] = fromleft
        return self.svd_bond(c, AA, 'right' if fromleft else 'left', **opts)

    # ----------------------------- combining ------------------------------ #

    def plus_eq(self, other, **opts):
        """Add ``other`` to this state inplace, compressing the result with
        the bond update options ``opts``.
        """
        from .tensor_1d_compress import mps_add_compress

        new = mps_add_compress(self, other, **opts)
        self._tensors = new._tensors
        self._left_lim = new._left_lim
        self._right_lim = new._right_lim
        return self

    def __add__(self, other):
        from .tensor_1d_compress import mps_add_compress
        return mps_add_compress(self, other)

    def to_dense(self):
        """Contract this state into a dense vector.
        """
        if self.L == 0:
            raise UninitializedError("Can't densify an empty state.")
        T = tensor_contract(*self, output_inds=self.site_inds,
                            preserve_tensor=True)
        return T.to_dense(self.site_inds)

    def __repr__(self):
        return (f"{self.__class__.__name__}(L={self.L}, "
                f"max_bond={self.max_bond_dim()}, "
                f"window=({self._left_lim}, {self._right_lim}))")


def _conj_primed_links(psi):
    """The conjugate tensors of ``psi`` with every link index primed.
    """
    links = [psi.link_ind(b) for b in range(psi.L - 1)]
    links = [ix for ix in links if ix is not None]
    return [t.conj().prime([ix for ix in links if ix in t.inds])
            for t in psi]


def overlap_complex(psi, phi):
    """The inner product ``<psi|phi>``, contracted site by site from the
    left.

    Parameters
    ----------
    psi : MatrixProductState
        The bra state, conjugated.
    phi : MatrixProductState
        The ket state.

    Returns
    -------
    complex
    """
    if psi.L != phi.L:
        raise DimensionMismatchError(
            f"Can't take the overlap of states with {psi.L} and {phi.L} "
            "sites.")
    if psi.L == 0:
        raise UninitializedError("Can't take the overlap of empty states.")

    bra = _conj_primed_links(psi)
    bra = [t.reindex({psi.site_ind(i): phi.site_ind(i)})
           for i, t in enumerate(bra)]

    if phi.L == 1:
        return complex(phi[0] @ bra[0])

    E = phi[0] @ bra[0]
    for i in range(1, phi.L - 1):
        E = (E @ phi[i]) @ bra[i]
    return complex((E @ phi[-1]) @ bra[-1])


def overlap(psi, phi):
    """The real part of ``<psi|phi>``, warning if a non-negligible imaginary
    part is dropped.
    """
    z = overlap_complex(psi, phi)
    if abs(z.imag) > _IMAG_TOL * abs(z.real):
        warnings.warn("Dropping non-zero imaginary part "
                      f"({z.imag:.5e}) of overlap.")
    return z.real


psiphi = overlap
psiphi_complex = overlap_complex


def _check_ortho_site(psi, i, left):
    link = psi.right_link_ind(i) if left else psi.left_link_ind(i)
    A = psi[i]

    if link is None:
        diff = abs(A.norm()**2 - 1.0)
    else:
        Ac = A.conj().prime(link)
        rho = (A @ Ac).transpose(link, prime_ind(link))
        eye = do('eye', A.ind_size(link), dtype=rho.dtype)
        diff = float(do('linalg.norm', rho.data - eye))

    if diff < _ORTHO_TOL:
        return True

    warnings.warn(
        f"Tensor at site {i} failed to be {'left' if left else 'right'} "
        f"orthogonal, norm of difference from identity is {diff:.3e} "
        f"(threshold {_ORTHO_TOL:.0e}).")
    return False


def check_ortho(psi, i=None, left=True):
    """Check the isometry of sites of ``psi``.

    Parameters
    ----------
    psi : MatrixProductState
        The state to check.
    i : int, optional
        A single site to check, with ``left`` specifying which kind of
        isometry. If not given, every site the orthogonality window claims
        is left or right canonical is checked.
    left : bool, optional
        Whether to check site ``i`` is a left (or else right) isometry.

    Returns
    -------
    bool
    """
    if i is not None:
        return _check_ortho_site(psi, range(psi.L)[i], left)

    for j in range(0, psi.left_lim + 1):
        if not _check_ortho_site(psi, j, True):
            return False
    for j in range(psi.L - 1, psi.right_lim - 1, -1):
        if not _check_ortho_site(psi, j, False):
            return False
    return True


MPS = MatrixProductState
