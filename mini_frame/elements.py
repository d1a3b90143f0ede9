# mini_frame/elements.py
"""
3D FRAME ELEMENT: Local Stiffness, Transformation, Global Stiffness
===================================================================

PURPOSE:
--------
This module computes the 12×12 matrices of a 3D Euler–Bernoulli beam.
This is THE core engineering calculation of the frame engine.

DOF ORDER (per element, local or global):
-----------------------------------------
    [u_i, v_i, w_i, θx_i, θy_i, θz_i,  u_j, v_j, w_j, θx_j, θy_j, θz_j]

In LOCAL coordinates x' runs along the member from joint i (``ni``) to
joint j (``nj``). Four independent behaviours are superposed:

    axial        u, u           EA/L
    torsion      θx, θx         GJ/L
    bending xy   v, θz          uses Iz: 12EIz/L³, 6EIz/L², 4EIz/L, 2EIz/L
    bending xz   w, θy          uses Iy: 12EIy/L³, 6EIy/L², 4EIy/L, 2EIy/L

The xz-plane terms coupling w and θy carry the opposite sign to the xy-plane
ones because a positive θy rotates +z' towards -x' (right-hand rule).

TRANSFORMATION:
---------------
The local triad is built from the member axis:

    x' = (p_j - p_i) / L
    y' = normalize(Z × x')      (reference Z; X if the member is vertical)
    z' = x' × y'

R = [x'; y'; z'] (rows) maps global components to local ones, and the
12×12 T repeats R on its four diagonal 3×3 blocks. Then

    d_local   = T · d_global
    ke_global = Tᵀ · k_local · T
"""

import logging
from typing import Mapping, Tuple

import numpy as np

from .config import CONFIG
from .kernel.errors import DegenerateGeometryError, UnknownJointError
from .model import FrameElement, Joint


logger = logging.getLogger(__name__)

GLOBAL_X = np.array([1.0, 0.0, 0.0])
GLOBAL_Z = np.array([0.0, 0.0, 1.0])


def _end_joints(joints: Mapping, element: FrameElement) -> Tuple[Joint, Joint]:
    try:
        ji = joints[element.ni]
    except KeyError:
        raise UnknownJointError(element.ni, f"element {element.id!r} from-joint") from None
    try:
        jj = joints[element.nj]
    except KeyError:
        raise UnknownJointError(element.nj, f"element {element.id!r} to-joint") from None
    return ji, jj


def element_geometry(
    ji: Joint,
    jj: Joint,
    element_id=None,
    tol: float = CONFIG.geometry_tol,
) -> Tuple[float, np.ndarray]:
    """
    Length and unit axis vector of a member running from ``ji`` to ``jj``.

    Raises:
    -------
    DegenerateGeometryError
        If the length is zero (coincident joints) or not finite.
    """
    delta = jj.position - ji.position
    L = float(np.linalg.norm(delta))

    if not np.isfinite(L) or L <= tol:
        raise DegenerateGeometryError(
            f"Element {element_id!r} has degenerate length L={L} "
            f"(joints {ji.id!r} at ({ji.x}, {ji.y}, {ji.z}) and {jj.id!r} at ({jj.x}, {jj.y}, {jj.z}))"
        )
    return L, delta / L


def frame3d_local_stiffness(
    E: float, G: float, A: float, Iy: float, Iz: float, J: float, L: float
) -> np.ndarray:
    """
    12×12 Euler–Bernoulli stiffness matrix in element local coordinates.

    Symmetric by construction: only the upper triangle is written and then
    mirrored.
    """
    EA_L = E * A / L
    GJ_L = G * J / L

    L2 = L * L
    L3 = L2 * L

    # xy-plane bending (v, θz)
    z12 = 12.0 * E * Iz / L3
    z6 = 6.0 * E * Iz / L2
    z4 = 4.0 * E * Iz / L
    z2 = 2.0 * E * Iz / L

    # xz-plane bending (w, θy)
    y12 = 12.0 * E * Iy / L3
    y6 = 6.0 * E * Iy / L2
    y4 = 4.0 * E * Iy / L
    y2 = 2.0 * E * Iy / L

    upper = [
        # axial
        (0, 0, EA_L), (0, 6, -EA_L), (6, 6, EA_L),
        # torsion
        (3, 3, GJ_L), (3, 9, -GJ_L), (9, 9, GJ_L),
        # bending in xy-plane
        (1, 1, z12), (1, 5, z6), (1, 7, -z12), (1, 11, z6),
        (5, 5, z4), (5, 7, -z6), (5, 11, z2),
        (7, 7, z12), (7, 11, -z6),
        (11, 11, z4),
        # bending in xz-plane
        (2, 2, y12), (2, 4, -y6), (2, 8, -y12), (2, 10, -y6),
        (4, 4, y4), (4, 8, y6), (4, 10, y2),
        (8, 8, y12), (8, 10, y6),
        (10, 10, y4),
    ]

    k = np.zeros((12, 12), dtype=float)
    for i, j, val in upper:
        k[i, j] = val
        k[j, i] = val
    return k


def frame3d_rotation(
    ji: Joint,
    jj: Joint,
    element_id=None,
    tol: float = CONFIG.geometry_tol,
) -> np.ndarray:
    """
    3×3 rotation whose rows are the local axes x', y', z' in global components.

    Raises:
    -------
    DegenerateGeometryError
        If the member has no length or an orthonormal triad cannot be formed.
    """
    _, x_axis = element_geometry(ji, jj, element_id, tol)

    y_raw = np.cross(GLOBAL_Z, x_axis)
    if np.linalg.norm(y_raw) <= tol:
        # Member parallel to global Z
        logger.debug("Element %r is vertical; using global X as reference axis", element_id)
        y_raw = np.cross(GLOBAL_X, x_axis)

    y_norm = np.linalg.norm(y_raw)
    if not np.isfinite(y_norm) or y_norm <= tol:
        raise DegenerateGeometryError(
            f"Element {element_id!r}: cannot build local y-axis (|y|={y_norm})"
        )
    y_axis = y_raw / y_norm

    z_axis = np.cross(x_axis, y_axis)
    z_norm = np.linalg.norm(z_axis)
    if not np.isfinite(z_norm) or z_norm <= tol:
        raise DegenerateGeometryError(
            f"Element {element_id!r}: cannot build local z-axis (|z|={z_norm})"
        )
    z_axis = z_axis / z_norm

    return np.vstack([x_axis, y_axis, z_axis])


def frame3d_transform(
    ji: Joint,
    jj: Joint,
    element_id=None,
    tol: float = CONFIG.geometry_tol,
) -> np.ndarray:
    """
    12×12 transform from global DOFs to local DOFs.

    The same 3×3 rotation acts on the translations and rotations of both ends.
    """
    R = frame3d_rotation(ji, jj, element_id, tol)
    T = np.zeros((12, 12), dtype=float)
    for block in range(4):
        s = 3 * block
        T[s:s + 3, s:s + 3] = R
    return T


def element_local_stiffness(
    joints: Mapping, element: FrameElement, tol: float = CONFIG.geometry_tol
) -> np.ndarray:
    """Local 12×12 stiffness of ``element`` using its end joints from ``joints``."""
    ji, jj = _end_joints(joints, element)
    L, _ = element_geometry(ji, jj, element.id, tol)
    return frame3d_local_stiffness(
        element.E, element.G, element.A, element.Iy, element.Iz, element.J, L
    )


def element_transform(
    joints: Mapping, element: FrameElement, tol: float = CONFIG.geometry_tol
) -> np.ndarray:
    """12×12 transformation of ``element`` using its end joints from ``joints``."""
    ji, jj = _end_joints(joints, element)
    return frame3d_transform(ji, jj, element.id, tol)


def frame3d_global_stiffness(
    joints: Mapping, element: FrameElement, tol: float = CONFIG.geometry_tol
) -> np.ndarray:
    """
    Compute the 12×12 global stiffness matrix for a 3D frame element.

        ke_global = Tᵀ · k_local · T

    Parameters:
    -----------
    joints : Mapping
        Joint id → Joint
    element : FrameElement
        The beam with its section/material properties

    Returns:
    --------
    np.ndarray
        12×12 symmetric matrix in global coordinates,
        DOF order [from-joint 6 DOFs, to-joint 6 DOFs]
    """
    k_local = element_local_stiffness(joints, element, tol)
    T = element_transform(joints, element, tol)
    ke = T.T @ k_local @ T
    # Remove round-off asymmetry from the triple product
    return 0.5 * (ke + ke.T)
