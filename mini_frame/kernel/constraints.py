# mini_frame/kernel/constraints.py
"""
RESTRAINTS: Enforcing Zero Displacement at Fixed DOFs
=====================================================

For every fixed DOF d:

    K'[d, :] = 0,  K'[:, d] = 0,  K'[d, d] = 1,  F'[d] = 0

This is row/column elimination. The solution of K'U = F' has U[d] = 0 and
the remaining equations are exactly the free-DOF partition Kff·Uf = Ff, but
K' keeps its 6n × 6n size so every index still means the same joint/DOF.
"""

import logging
from typing import Hashable, List, Mapping, Tuple

import numpy as np

from .backend import backend_for
from .dof import DOFManager


logger = logging.getLogger(__name__)


def fixed_dofs(restraints: Mapping[Hashable, object], dof: DOFManager) -> List[int]:
    """
    Sorted global indices of every restrained DOF.

    ``restraints`` maps joint id → Restraint. Joints without a record are
    free. An unknown joint id raises UnknownJointError.
    """
    fixed = set()
    for joint_id, restraint in restraints.items():
        base_dofs = dof.node_dofs(joint_id)
        for local in restraint.fixed_local_dofs():
            fixed.add(base_dofs[local])
    return sorted(fixed)


def free_dofs(ndof: int, fixed: List[int]) -> np.ndarray:
    mask = np.ones(ndof, dtype=bool)
    mask[list(fixed)] = False
    return np.flatnonzero(mask)


def apply_restraints(
    K,
    F: np.ndarray,
    restraints: Mapping[Hashable, object],
    dof: DOFManager,
) -> Tuple[object, np.ndarray, List[int]]:
    """
    Return the constrained system (K', F') and the fixed DOF list.

    K and F are left untouched; K' and F' are new objects. With no
    restraints at all, K' and F' are plain copies (a model like that still
    has rigid-body modes and the solver will reject it).
    """
    backend = backend_for(K)
    fixed = fixed_dofs(restraints, dof)

    F_c = np.array(F, dtype=float, copy=True)
    if not fixed:
        logger.debug("No restraints: system left unconstrained")
        return backend.copy(K), F_c, fixed

    K_c = backend.constrain(K, fixed)
    F_c[fixed] = 0.0

    logger.debug("Constrained %d of %d DOFs", len(fixed), F_c.shape[0])
    return K_c, F_c, fixed
