# member end forces, nodal displacement / reaction tables

import numpy as np
import pandas as pd
from typing import Dict, Hashable

from .config import CONFIG
from .elements import element_local_stiffness, element_transform
from .kernel.dof import DOF_LABELS, DOFManager
from .model import FrameElement, ModelSnapshot


END_FORCE_LABELS = (
    "N_i", "Vy_i", "Vz_i", "T_i", "My_i", "Mz_i",
    "N_j", "Vy_j", "Vz_j", "T_j", "My_j", "Mz_j",
)
REACTION_LABELS = ("Rx", "Ry", "Rz", "RMx", "RMy", "RMz")


def element_end_forces_local(
    joints: Dict[Hashable, object],
    element: FrameElement,
    dof: DOFManager,
    d_global: np.ndarray,
    tol: float = CONFIG.geometry_tol,
) -> np.ndarray:
    """
    Compute element end forces in LOCAL coordinates from global displacements.

    The process:
    1. Extract the element's 12 global displacements
    2. Transform to local coordinates: d_local = T · d_elem
    3. f_local = k_local · d_local

    Returns:
    --------
    np.ndarray
        Shape (12,): [N, Vy, Vz, T, My, Mz] at end i, then at end j, acting
        ON the element in its local axes.
    """
    dof_map = dof.element_dof_map([element.ni, element.nj])
    d_elem_global = np.asarray(d_global, dtype=float)[dof_map]

    T = element_transform(joints, element, tol)
    k_local = element_local_stiffness(joints, element, tol)
    return k_local @ (T @ d_elem_global)


def member_end_forces(
    snapshot: ModelSnapshot,
    d_global: np.ndarray,
    tol: float = CONFIG.geometry_tol,
) -> Dict[Hashable, np.ndarray]:
    """Local end forces of every element, keyed by element id."""
    return {
        e.id: element_end_forces_local(snapshot.joint_map, e, snapshot.dof, d_global, tol)
        for e in snapshot.elements
    }


def compute_nodal_displacements(
    snapshot: ModelSnapshot,
    d_global: np.ndarray,
) -> Dict[Hashable, Dict[str, float]]:
    """
    Extract nodal displacements from the global displacement vector.

    Returns:
    --------
    Dict[Hashable, Dict[str, float]]
        joint id → {'ux', 'uy', 'uz', 'rx', 'ry', 'rz', 'magnitude'}
        where magnitude is the translational norm
    """
    result = {}
    for joint in snapshot.joints:
        values = np.asarray(d_global, dtype=float)[snapshot.dof.node_dofs(joint.id)]
        entry = {label: float(v) for label, v in zip(DOF_LABELS, values)}
        entry['magnitude'] = float(np.linalg.norm(values[:3]))
        result[joint.id] = entry
    return result


def compute_nodal_reactions(
    snapshot: ModelSnapshot,
    R: np.ndarray,
) -> Dict[Hashable, np.ndarray]:
    """Reaction 6-vectors at restrained joints (zero in unrestrained DOFs)."""
    return {
        joint_id: np.asarray(R, dtype=float)[snapshot.dof.node_dofs(joint_id)]
        for joint_id in snapshot.restraints
        if snapshot.restraints[joint_id].fixed_local_dofs()
    }


def displacement_table(snapshot: ModelSnapshot, d_global: np.ndarray) -> pd.DataFrame:
    """One row per joint, columns ux..rz."""
    data = compute_nodal_displacements(snapshot, d_global)
    df = pd.DataFrame.from_dict(data, orient='index')
    df.index.name = 'joint'
    return df


def reaction_table(snapshot: ModelSnapshot, R: np.ndarray) -> pd.DataFrame:
    """One row per restrained joint, columns Rx..RMz."""
    reactions = compute_nodal_reactions(snapshot, R)
    df = pd.DataFrame(
        [r for r in reactions.values()],
        index=list(reactions.keys()),
        columns=list(REACTION_LABELS),
    )
    df.index.name = 'joint'
    return df


def end_force_table(forces: Dict[Hashable, np.ndarray]) -> pd.DataFrame:
    """One row per element, local end forces N_i..Mz_j."""
    df = pd.DataFrame(
        [f for f in forces.values()],
        index=list(forces.keys()),
        columns=list(END_FORCE_LABELS),
    )
    df.index.name = 'element'
    return df


def matrix_table(M, dof: DOFManager) -> pd.DataFrame:
    """
    Label a global matrix or vector with joint:DOF names for display.

    Accepts dense arrays, scipy sparse matrices and 1-D vectors.
    """
    if hasattr(M, 'toarray'):
        M = M.toarray()
    M = np.asarray(M, dtype=float)
    labels = [dof.label(i) for i in range(dof.ndof())]
    if M.ndim == 1:
        return pd.DataFrame({'value': M}, index=labels)
    return pd.DataFrame(M, index=labels, columns=labels)
