# mini_frame/kernel/solve.py
"""Linear solve of the constrained system and reaction recovery."""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from ..config import CONFIG, AnalysisConfig
from .backend import backend_for
from .constraints import free_dofs
from .errors import SingularSystemError


logger = logging.getLogger(__name__)


def solve_displacements(
    K_c,
    F_c: np.ndarray,
    fixed_dofs: Optional[Sequence[int]] = None,
    config: AnalysisConfig = CONFIG,
) -> np.ndarray:
    """
    Solve K'·U = F' for the full displacement vector.

    K' comes from apply_restraints, so the rows of fixed DOFs are unit rows
    with zero right-hand side and U is zero there. Only the free-DOF
    partition is factored; the conditioning check therefore measures the
    structure and not the unit diagonal of the inert rows.

    Args:
        K_c: Constrained stiffness matrix (6n × 6n, dense or sparse)
        F_c: Constrained load vector (6n,)
        fixed_dofs: Restrained DOF indices. If None, they are read off K'
            as the rows/columns that hold only a unit diagonal.
        config: cond_limit and residual check settings

    Returns:
        U: Displacement vector (6n,), zero at fixed DOFs

    Raises:
        SingularSystemError: rigid-body modes left, disconnected joints,
            or a non-finite / inaccurate solution
    """
    backend = backend_for(K_c)
    F_c = np.asarray(F_c, dtype=float)
    ndof = F_c.shape[0]
    if K_c.shape != (ndof, ndof):
        raise ValueError(f"K shape {K_c.shape} doesn't match F length {ndof}")

    if fixed_dofs is None:
        fixed = backend.inert_dofs(K_c).tolist()
    else:
        fixed = sorted(set(fixed_dofs))
    free = free_dofs(ndof, fixed)

    Kff = backend.submatrix(K_c, free)
    Ff = F_c[free]

    try:
        Uf = backend.factor_solve(Kff, Ff, config.cond_limit)
    except SingularSystemError:
        logger.warning(
            "Singular system: %d free DOFs, %d restrained", free.size, len(fixed)
        )
        raise

    if not np.all(np.isfinite(Uf)):
        raise SingularSystemError("Solve produced non-finite displacements")

    U = np.zeros(ndof, dtype=float)
    U[free] = Uf

    if config.check_residual:
        res = np.linalg.norm(backend.matvec(K_c, U) - F_c)
        scale = max(np.linalg.norm(F_c), 1.0)
        if res > config.residual_tol * scale:
            raise SingularSystemError(
                f"Solution residual {res:.2e} exceeds tolerance "
                f"{config.residual_tol * scale:.2e}; system is numerically singular"
            )

    logger.debug("Solved %d free DOFs (max |U| = %.3e)", free.size,
                 float(np.max(np.abs(U))) if ndof else 0.0)
    return U


def recover_reactions(
    K,
    F: np.ndarray,
    U: np.ndarray,
    fixed_dofs: Sequence[int],
) -> np.ndarray:
    """
    Support reactions R = K·U − F at restrained DOFs.

    K and F must be the ORIGINAL (unconstrained) system. Entries at free
    DOFs are zero by convention.
    """
    backend = backend_for(K)
    residual = backend.matvec(K, U) - np.asarray(F, dtype=float)
    R = np.zeros_like(residual)
    fixed = list(fixed_dofs)
    R[fixed] = residual[fixed]
    return R


def solve_linear(
    K,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    config: AnalysisConfig = CONFIG,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Solve K·d = F with the given DOFs fixed at zero.

    Convenience wrapper for callers that already hold the fixed DOF list
    and the unconstrained system.

    Returns:
        d: Displacement vector (ndof,)
        R: Reaction vector (ndof,), zero at free DOFs
        free: Array of free DOF indices
    """
    backend = backend_for(K)
    F = np.asarray(F, dtype=float)
    fixed = sorted(set(fixed_dofs))

    K_c = backend.constrain(K, fixed) if fixed else backend.copy(K)
    F_c = F.copy()
    F_c[fixed] = 0.0

    d = solve_displacements(K_c, F_c, fixed, config)
    R = recover_reactions(K, F, d, fixed)
    return d, R, free_dofs(F.shape[0], fixed)
