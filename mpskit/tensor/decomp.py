"""Functions for decomposing and truncating matrices.
"""
import warnings

import numpy as np
import scipy.linalg as scla
from autoray import do, dag

from ..core import njit


@njit  # pragma: no cover
def rdmul_numba(x, d):
    return x * d[None, :]


@njit  # pragma: no cover
def ldmul_numba(d, x):
    return x * d[:, None]


@njit  # pragma: no cover
def sgn_numba(x):
    """Get the 'sign' of ``x``, such that ``x / sgn(x)`` is real and
    non-negative.
    """
    x0 = x == 0.0
    return (x + x0) / (np.abs(x) + x0)


_CUTOFF_MODE_NAMES = ('abs', 'rel', 'sum2', 'rsum2', 'sum1', 'rsum1')
_CUTOFF_MODE_MAP = {
    **{name: i for i, name in enumerate(_CUTOFF_MODE_NAMES, 1)},
    **{i: i for i in range(1, 7)},
}

_ABSORB_MAP = {
    None: None, 'left': -1, 'both': 0, 'right': 1, -1: -1, 0: 0, 1: 1,
}


class Spectrum:
    """Diagnostics of a single truncated decomposition.

    Parameters
    ----------
    eigs : array_like
        The retained weights, i.e. the normalized density matrix eigenvalues
        or equivalently squared singular values, largest first.
    truncerr : float
        The total normalized weight that was discarded.
    """

    __slots__ = ('_eigs', '_truncerr')

    def __init__(self, eigs=(), truncerr=0.0):
        self._eigs = np.asarray(eigs, dtype=float)
        self._truncerr = float(truncerr)

    @classmethod
    def from_weights(cls, p, n_keep):
        """Build from the full set of (unnormalized, descending) weights ``p``
        of which the first ``n_keep`` are retained.
        """
        p = np.asarray(p, dtype=float)
        total = p.sum()
        if total > 0.0:
            p = p / total
        return cls(p[:n_keep], p[n_keep:].sum())

    @property
    def eigs(self):
        return self._eigs

    @property
    def truncerr(self):
        return self._truncerr

    @property
    def bond_dim(self):
        return self._eigs.size

    def __repr__(self):
        return (f"Spectrum(bond_dim={self.bond_dim}, "
                f"truncerr={self._truncerr:.3e})")


@njit  # pragma: no cover
def _compute_number_svals_to_keep_numba(s, cutoff, cutoff_mode):
    """How many of the descending values ``s`` survive ``cutoff`` applied
    in mode ``cutoff_mode`` (an integer code, see :func:`svd_truncated`).
    At least one is always kept.
    """
    if cutoff_mode == 1:
        n_chi = np.sum(s > cutoff)
    elif cutoff_mode == 2:
        n_chi = np.sum(s > cutoff * s[0])
    else:
        p = 2 if cutoff_mode <= 4 else 1
        target = cutoff
        if cutoff_mode == 4 or cutoff_mode == 6:
            target *= np.sum(s**p)

        # drop from the tail while the discarded weight stays within target
        n_chi = s.size
        discarded = 0.0
        while n_chi > 0:
            w = s[n_chi - 1]**p
            if not np.isnan(w):
                discarded += w
            if discarded > target:
                break
            n_chi -= 1

    return max(n_chi, 1)


def _compute_number_to_keep(s, cutoff, cutoff_mode, max_bond):
    """Combine the ``cutoff`` rule with the hard limit ``max_bond``, either
    being disabled by a non-positive value.
    """
    n_chi = s.size
    if cutoff > 0.0:
        n_chi = int(_compute_number_svals_to_keep_numba(
            np.ascontiguousarray(s, dtype=np.float64),
            float(cutoff), int(cutoff_mode)))
    if max_bond > 0:
        n_chi = min(n_chi, max_bond)
    return n_chi


def _trim_and_renorm_svd_result(
    U, s, VH, cutoff, cutoff_mode, max_bond, absorb, renorm, info=None,
):
    """Truncate a full SVD, optionally rescale what is kept, then absorb the
    singular values into the factors as ``absorb`` asks.
    """
    n_chi = _compute_number_to_keep(s, cutoff, cutoff_mode, max_bond)

    if info is not None:
        info['spectrum'] = Spectrum.from_weights(s**2, n_chi)

    if n_chi < s.size:
        kept = s[:n_chi]
        if renorm > 0:
            kept = kept * (np.sum(s**renorm) /
                           np.sum(kept**renorm))**(1 / renorm)
        s, U, VH = kept, U[:, :n_chi], VH[:n_chi, :]

    s = np.ascontiguousarray(s).astype(U.dtype)

    if absorb is None:
        return U, s, VH

    if absorb == 0:
        s = s**0.5
    if absorb <= 0:
        U = rdmul_numba(U, s)
    if absorb >= 0:
        VH = ldmul_numba(s, VH)
    return U, None, VH


def _svd_numpy(x):
    try:
        return np.linalg.svd(x, full_matrices=False)
    except np.linalg.LinAlgError as e:  # pragma: no cover
        warnings.warn(f"Got: {e}, falling back to scipy gesvd driver.")
        return scla.svd(x, full_matrices=False, lapack_driver="gesvd")


def svd_truncated(
    x,
    cutoff=-1.0,
    cutoff_mode=4,
    max_bond=-1,
    absorb=0,
    renorm=0,
    info=None,
):
    """Singular value decomposition of the matrix ``x``, truncated.

    Parameters
    ----------
    x : array
        The matrix.
    cutoff : float, optional
        Truncation threshold. Non-positive values disable it, leaving only
        ``max_bond``.
    cutoff_mode : int or str, optional
        How ``cutoff`` is compared with the singular values ``s``. The
        discarded tail ``t`` of ``s`` is as long as possible such that:

            - 1, ``'abs'``: ``t < cutoff``
            - 2, ``'rel'``: ``t < cutoff * s[0]``
            - 3, ``'sum2'``: ``sum(t**2) <= cutoff``
            - 4, ``'rsum2'``: ``sum(t**2) <= cutoff * sum(s**2)``
            - 5, ``'sum1'``: ``sum(t) <= cutoff``
            - 6, ``'rsum1'``: ``sum(t) <= cutoff * sum(s)``

    max_bond : int, optional
        Keep at most this many singular values, -1 for no limit.
    absorb : {'left', 'both', 'right', None} or {-1, 0, 1}, optional
        Multiply the singular values into ``U``, the square root of them into
        both factors, or into ``VH``. ``None`` returns them separately.
    renorm : {0, 1, 2}, optional
        If positive, scale the kept singular values to restore the sum of
        their ``renorm``-th powers.
    info : dict, optional
        If given, the :class:`Spectrum` is stored under ``'spectrum'``.

    Returns
    -------
    U, s, VH : array
        ``s`` is ``None`` unless ``absorb is None``.
    """
    absorb = _ABSORB_MAP[absorb]
    cutoff_mode = _CUTOFF_MODE_MAP[cutoff_mode]
    U, s, VH = _svd_numpy(x)
    return _trim_and_renorm_svd_result(
        U, s, VH, cutoff, cutoff_mode, max_bond, absorb, renorm, info=info)


def eigh_truncated(
    x,
    cutoff=-1.0,
    cutoff_mode=6,
    max_bond=-1,
    info=None,
):
    """Truncated eigen-decomposition of the hermitian, positive semi-definite
    array ``x``, e.g. a density matrix.

    Returns
    -------
    U : array
        The retained eigenvectors as columns, largest eigenvalue first.
    w : array
        The retained eigenvalues.
    """
    cutoff_mode = _CUTOFF_MODE_MAP[cutoff_mode]
    w, U = np.linalg.eigh(x)

    # largest first, small negative eigenvalues are numerical noise
    w, U = w[::-1], U[:, ::-1]
    w = np.clip(w, 0.0, None)

    n_chi = _compute_number_to_keep(w, cutoff, cutoff_mode, max_bond)

    if info is not None:
        info['spectrum'] = Spectrum.from_weights(w, n_chi)

    return np.ascontiguousarray(U[:, :n_chi]), w[:n_chi]


def denmat_truncated(
    x,
    which='left',
    cutoff=-1.0,
    max_bond=-1,
    noise=0.0,
    x_proj=None,
    info=None,
):
    """Split matrix ``x`` by diagonalizing one of its reduced density
    matrices, optionally perturbed by a noise term.

    Parameters
    ----------
    x : array
        The matrix to split, ``x ~ left @ right``.
    which : {'left', 'right'}, optional
        Which reduced density matrix to diagonalize, and thus which factor is
        returned as the isometry. For ``'left'``, ``left`` has orthonormal
        columns, for ``'right'``, ``right`` has orthonormal rows.
    cutoff : float, optional
        Discard eigenvalues whose total relative weight is below this.
    max_bond : int, optional
        An explicit maximum number of eigenvalues to keep, -1 for none.
    noise : float, optional
        Magnitude of the perturbation added to the density matrix, relative
        to its trace.
    x_proj : array, optional
        ``x`` with an effective operator applied. If given (and ``noise > 0``)
        the perturbation is the reduced density matrix of ``x_proj``,
        otherwise it is proportional to the identity.
    info : dict, optional
        If given, the :class:`Spectrum` is stored under ``'spectrum'``.

    Returns
    -------
    left, right : array
    """
    if which == 'left':
        rho = x @ dag(x)
    else:
        rho = dag(x) @ x

    if noise > 0.0:
        tr_rho = do('real', do('trace', rho))
        if x_proj is not None:
            if which == 'left':
                drho = x_proj @ dag(x_proj)
            else:
                drho = dag(x_proj) @ x_proj
            tr_drho = do('real', do('trace', drho))
        else:
            drho = None
            tr_drho = 0.0

        if tr_drho > 0.0:
            rho = rho + (noise * tr_rho / tr_drho) * drho
        else:
            d = rho.shape[0]
            rho = rho + (noise * tr_rho / d) * np.eye(d, dtype=rho.dtype)

    # explicitly symmetrize to hermitian
    rho = (rho + dag(rho)) / 2

    U, _ = eigh_truncated(
        rho, cutoff=cutoff, cutoff_mode=6, max_bond=max_bond, info=info)

    if which == 'left':
        return U, dag(U) @ x

    return x @ U, dag(U)


@njit  # pragma: no cover
def qr_stabilized_numba(x):
    Q, R = np.linalg.qr(x)
    # rotate each column of Q so the diagonal of R is real and non-negative
    for i in range(R.shape[0]):
        si = sgn_numba(R[i, i])
        if si != 1.0:
            Q[:, i] *= si
            R[i, i:] *= np.conj(si)
    return Q, None, R


def qr_stabilized(x):
    """Reduced QR decomposition ``x = Q @ R``, made unique by requiring a
    non-negative diagonal of ``R``. Returns ``(Q, None, R)``.
    """
    return qr_stabilized_numba(np.ascontiguousarray(x))


def lq_stabilized(x):
    """Reduced LQ decomposition ``x = L @ Q``, the transpose of
    :func:`qr_stabilized`. Returns ``(L, None, Q)``.
    """
    Q, _, L = qr_stabilized(x.T)
    return L.T, None, Q.T
