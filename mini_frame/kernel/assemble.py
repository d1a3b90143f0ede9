# mini_frame/kernel/assemble.py
"""
ASSEMBLY: Global Stiffness Matrix and Load Vector
=================================================

PURPOSE:
--------
Scatter-add element and nodal contributions into the global system.

    K = zeros(ndof × ndof)
    for each element:
        K[dof_map, dof_map] += ke_global

    F = zeros(ndof)
    for each load:
        F[node_dofs(load.node)] += [Fx, Fy, Fz, Mx, My, Mz]

Always accumulate, never assign: several elements share a joint's DOFs and
several loads may act on one joint.

The assembler knows nothing about restraints. It produces the free
(unconstrained) system; see constraints.py for the next step.
"""

import logging
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from ..config import CONFIG, AnalysisConfig
from .backend import MatrixBackend, get_backend
from .dof import DOFManager


logger = logging.getLogger(__name__)


def assemble_global_K(
    ndof: int,
    contributions: Iterable[Tuple[Sequence[int], np.ndarray]],
    backend: MatrixBackend = None,
):
    """
    Assemble the global stiffness matrix from element contributions.

    Parameters:
    -----------
    ndof : int
        Total number of DOFs (6 × number of joints)
    contributions : Iterable[Tuple[Sequence[int], np.ndarray]]
        (dof_map, ke) per element; ke in GLOBAL coordinates, shape
        (len(dof_map), len(dof_map))
    backend : MatrixBackend, optional
        Storage backend, dense numpy by default

    Returns:
    --------
    Global K (numpy array or scipy CSR matrix depending on backend)
    """
    backend = backend or get_backend("dense")
    K = backend.zeros(ndof)

    for dof_map, ke in contributions:
        n = len(dof_map)
        if ke.shape != (n, n):
            raise ValueError(
                f"Element ke shape {ke.shape} doesn't match dof_map length {n}"
            )
        backend.scatter_add(K, dof_map, ke)

    return backend.finalize(K)


def assemble_global_F(
    ndof: int,
    contributions: Iterable[Tuple[Sequence[int], np.ndarray]],
) -> np.ndarray:
    """
    Assemble the global load vector from (dof_map, fe) pairs.

    Same scatter-add logic as assemble_global_K.
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        fe = np.asarray(fe, dtype=float)
        if fe.shape != (len(dof_map),):
            raise ValueError(
                f"Load vector shape {fe.shape} doesn't match dof_map length {len(dof_map)}"
            )
        np.add.at(F, np.asarray(dof_map, dtype=int), fe)

    return F


def add_nodal_load(F: np.ndarray, dof: DOFManager, joint_id, load_vector: np.ndarray) -> None:
    """
    Add a 6-component nodal load to F in place.

    >>> F = np.zeros(12)
    >>> add_nodal_load(F, DOFManager.from_joint_ids(["a", "b"]), "b", np.array([0, 5, 0, 0, 0, 0]))
    >>> F[7]
    5.0
    """
    F[dof.node_dofs(joint_id)] += load_vector


def element_contributions(snapshot, tol: float = CONFIG.geometry_tol) -> List[Tuple[List[int], np.ndarray]]:
    """
    (dof_map, ke_global) for every element of a snapshot.

    Raises UnknownJointError / DegenerateGeometryError on the first bad
    element, before anything is assembled.
    """
    # Local import: elements depends on model, which depends on the kernel
    from ..elements import frame3d_global_stiffness

    dof = snapshot.dof
    contributions = []
    for e in snapshot.elements:
        dof_map = dof.element_dof_map([e.ni, e.nj])
        ke = frame3d_global_stiffness(snapshot.joint_map, e, tol)
        contributions.append((dof_map, ke))
    return contributions


def load_contributions(snapshot) -> List[Tuple[List[int], np.ndarray]]:
    """(dof_map, load_vector) for every nodal load of a snapshot."""
    dof = snapshot.dof
    return [(dof.node_dofs(ld.node), ld.vector()) for ld in snapshot.loads]


def assemble_system(snapshot, config: AnalysisConfig = CONFIG):
    """
    Build the unconstrained global system (K, F) of a model snapshot.

    Every element and load is resolved first, so an unknown joint or a
    degenerate element aborts the run before any matrix is returned.

    Returns:
    --------
    (K, F)
        K: 6n × 6n stiffness in the configured backend's storage
        F: length-6n load vector
    """
    backend = get_backend(config.backend)
    ndof = snapshot.dof.ndof()

    k_parts = element_contributions(snapshot, config.geometry_tol)
    f_parts = load_contributions(snapshot)

    K = assemble_global_K(ndof, k_parts, backend)
    F = assemble_global_F(ndof, f_parts)

    logger.debug(
        "Assembled %d DOFs from %d elements and %d loads (backend=%s)",
        ndof, len(k_parts), len(f_parts), backend.name,
    )
    return K, F
