# mini_frame/kernel/backend.py
"""
MATRIX BACKENDS: Dense Now, Sparse Later
========================================

The assembler, restraint enforcer and solver only ever need a handful of
matrix operations:

    zeros(ndof)                     empty global K
    scatter_add(K, dof_map, ke)     K[map, map] += ke
    finalize(K)                     freeze into the form used for solving
    constrain(K, fixed)             zero rows/cols of fixed DOFs, unit diagonal
    submatrix(K, rows)              K[rows, rows] (free-DOF partition)
    inert_dofs(K)                   rows left as unit rows by constrain
    factor_solve(K, b, cond_limit)  direct solve, SingularSystemError on failure
    matvec(K, x)                    K @ x

DenseBackend keeps everything in numpy arrays and factors with LU from
scipy.linalg. SparseBackend assembles into a LIL matrix, converts to CSR
once assembly is done and factors with scipy.sparse.linalg.splu.
Frame stiffness matrices are banded and very sparse for large models,
so the sparse backend is the one to pick beyond a few hundred joints.
"""

import logging
import warnings
from typing import Sequence

import numpy as np
import scipy.linalg
import scipy.sparse as sp
import scipy.sparse.linalg as spla

from .errors import SingularSystemError


logger = logging.getLogger(__name__)


class MatrixBackend:
    """Interface shared by the dense and sparse backends."""

    name = "abstract"

    def zeros(self, ndof: int):
        raise NotImplementedError

    def scatter_add(self, K, dof_map: Sequence[int], ke: np.ndarray) -> None:
        raise NotImplementedError

    def finalize(self, K):
        return K

    def copy(self, K):
        return K.copy()

    def constrain(self, K, fixed: Sequence[int]):
        raise NotImplementedError

    def submatrix(self, K, rows: np.ndarray):
        raise NotImplementedError

    def factor_solve(self, K, b: np.ndarray, cond_limit: float) -> np.ndarray:
        raise NotImplementedError

    def matvec(self, K, x: np.ndarray) -> np.ndarray:
        return np.asarray(K @ x, dtype=float).ravel()

    def inert_dofs(self, K) -> np.ndarray:
        raise NotImplementedError

    def to_dense(self, K) -> np.ndarray:
        return np.asarray(K, dtype=float)


class DenseBackend(MatrixBackend):
    """numpy arrays + LU factorization (fine for small and medium frames)."""

    name = "dense"

    def zeros(self, ndof: int) -> np.ndarray:
        return np.zeros((ndof, ndof), dtype=float)

    def scatter_add(self, K: np.ndarray, dof_map: Sequence[int], ke: np.ndarray) -> None:
        idx = np.asarray(dof_map, dtype=int)
        # np.add.at accumulates correctly even if an index repeats
        np.add.at(K, np.ix_(idx, idx), ke)

    def constrain(self, K: np.ndarray, fixed: Sequence[int]) -> np.ndarray:
        Kc = K.copy()
        for d in fixed:
            Kc[d, :] = 0.0
            Kc[:, d] = 0.0
            Kc[d, d] = 1.0
        return Kc

    def submatrix(self, K: np.ndarray, rows: np.ndarray) -> np.ndarray:
        return K[np.ix_(rows, rows)]

    def inert_dofs(self, K: np.ndarray) -> np.ndarray:
        diag = np.diag(K)
        row_nnz = np.count_nonzero(K, axis=1)
        col_nnz = np.count_nonzero(K, axis=0)
        return np.flatnonzero((diag == 1.0) & (row_nnz == 1) & (col_nnz == 1))

    def factor_solve(self, K: np.ndarray, b: np.ndarray, cond_limit: float) -> np.ndarray:
        if K.shape[0] == 0:
            return np.zeros(0, dtype=float)

        if not np.all(np.isfinite(K)):
            raise SingularSystemError(
                "Stiffness matrix contains non-finite entries. Check element properties."
            )

        # Mechanism / ill-conditioning check
        cond = np.linalg.cond(K)
        if not np.isfinite(cond) or cond > cond_limit:
            raise SingularSystemError(
                f"Singular or ill-conditioned stiffness matrix (cond={cond:.2e}, "
                f"limit {cond_limit:.0e}). Check restraints and connectivity."
            )

        with warnings.catch_warnings():
            warnings.simplefilter("error", scipy.linalg.LinAlgWarning)
            try:
                lu, piv = scipy.linalg.lu_factor(K)
            except (scipy.linalg.LinAlgError, scipy.linalg.LinAlgWarning) as exc:
                raise SingularSystemError(f"LU factorization failed: {exc}") from exc
        return scipy.linalg.lu_solve((lu, piv), b)


class SparseBackend(MatrixBackend):
    """scipy.sparse storage + sparse LU (large frames)."""

    name = "sparse"

    def zeros(self, ndof: int) -> sp.lil_matrix:
        return sp.lil_matrix((ndof, ndof), dtype=float)

    def scatter_add(self, K: sp.lil_matrix, dof_map: Sequence[int], ke: np.ndarray) -> None:
        for a, ia in enumerate(dof_map):
            for b, ib in enumerate(dof_map):
                if ke[a, b] != 0.0:
                    K[ia, ib] += ke[a, b]

    def finalize(self, K) -> sp.csr_matrix:
        return K.tocsr()

    def constrain(self, K, fixed: Sequence[int]) -> sp.csr_matrix:
        # K' = P K P + I_fixed with P = diag(free mask)
        ndof = K.shape[0]
        free_mask = np.ones(ndof, dtype=float)
        free_mask[list(fixed)] = 0.0
        P = sp.diags(free_mask)
        I_fixed = sp.diags(1.0 - free_mask)
        Kc = (P @ K.tocsr() @ P + I_fixed).tocsr()
        Kc.eliminate_zeros()
        return Kc

    def submatrix(self, K, rows: np.ndarray) -> sp.csc_matrix:
        return K.tocsr()[rows, :][:, rows].tocsc()

    def inert_dofs(self, K) -> np.ndarray:
        Kr = K.tocsr(copy=True)
        Kr.eliminate_zeros()
        row_nnz = np.diff(Kr.indptr)
        col_nnz = Kr.getnnz(axis=0)
        diag = Kr.diagonal()
        return np.flatnonzero((diag == 1.0) & (row_nnz == 1) & (col_nnz == 1))

    def factor_solve(self, K, b: np.ndarray, cond_limit: float) -> np.ndarray:
        if K.shape[0] == 0:
            return np.zeros(0, dtype=float)

        if not np.all(np.isfinite(K.data)):
            raise SingularSystemError(
                "Stiffness matrix contains non-finite entries. Check element properties."
            )

        try:
            lu = spla.splu(K.tocsc())
        except RuntimeError as exc:
            # splu reports "Factor is exactly singular"
            raise SingularSystemError(f"Sparse LU factorization failed: {exc}") from exc

        # Cheap conditioning proxy: ratio of extreme pivots of U
        pivots = np.abs(lu.U.diagonal())
        if pivots.size and (pivots.min() == 0.0 or pivots.max() / pivots.min() > cond_limit):
            ratio = np.inf if pivots.min() == 0.0 else pivots.max() / pivots.min()
            raise SingularSystemError(
                f"Singular or ill-conditioned stiffness matrix (pivot ratio={ratio:.2e}, "
                f"limit {cond_limit:.0e}). Check restraints and connectivity."
            )
        return lu.solve(np.asarray(b, dtype=float))

    def to_dense(self, K) -> np.ndarray:
        return K.toarray()


_BACKENDS = {
    DenseBackend.name: DenseBackend,
    SparseBackend.name: SparseBackend,
}


def get_backend(name: str) -> MatrixBackend:
    try:
        return _BACKENDS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown matrix backend {name!r}. Expected one of {sorted(_BACKENDS)}."
        ) from None


def backend_for(K) -> MatrixBackend:
    """Backend matching the storage of an already assembled matrix."""
    return SparseBackend() if sp.issparse(K) else DenseBackend()
