# mini_frame/model.py
"""
3D FRAME MODEL: Joints, Elements, Loads, Restraints and Snapshots
=================================================================

PURPOSE:
--------
Plain data describing a 3D frame, plus the two containers the rest of the
package works with:

- ModelSnapshot: an immutable, versioned picture of the whole model.
  Every analysis run consumes exactly one snapshot, so K, F and U are
  always built from joints/elements/loads/restraints read together.
  The snapshot owns the joint-id → DOF index table.

- Model: the editable model an interactive front end mutates. It keeps
  referential integrity (no element, load or restraint can point at a
  joint that does not exist) and hands out snapshots on demand.

COORDINATES & UNITS:
--------------------
Global right-handed x, y, z. Any consistent unit system works
(N, m, Pa or kN, mm, MPa, ...); the engine never converts.
"""

from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from .kernel.dof import DOFManager
from .kernel.errors import DegenerateGeometryError, JointInUseError, UnknownJointError


@dataclass(frozen=True)
class Joint:
    """
    A joint (node) in 3D space with 6 DOFs: ux, uy, uz, rx, ry, rz.

    Examples:
    ---------
    >>> Joint(0, 0.0, 0.0, 0.0)
    >>> Joint("apex", 0.0, 0.0, 3.0)
    """
    id: Hashable
    x: float
    y: float
    z: float

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass(frozen=True)
class FrameElement:
    """
    A 3D Euler–Bernoulli beam connecting joint ``ni`` (from) to ``nj`` (to).

    Parameters:
    -----------
    E : float   Young's modulus
    G : float   Shear modulus
    A : float   Cross-sectional area
    Iy : float  Second moment of area about local y (bending in local xz-plane)
    Iz : float  Second moment of area about local z (bending in local xy-plane)
    J : float   Torsional constant
    """
    id: Hashable
    ni: Hashable
    nj: Hashable
    E: float
    G: float
    A: float
    Iy: float
    Iz: float
    J: float


@dataclass(frozen=True)
class NodalLoad:
    """
    Generalized force at a joint, in global coordinates.

    Several loads may target the same joint; they superpose.
    """
    id: Hashable
    node: Hashable
    Fx: float = 0.0
    Fy: float = 0.0
    Fz: float = 0.0
    Mx: float = 0.0
    My: float = 0.0
    Mz: float = 0.0

    def vector(self) -> np.ndarray:
        """Components in DOF order [Fx, Fy, Fz, Mx, My, Mz]."""
        return np.array(
            [self.Fx, self.Fy, self.Fz, self.Mx, self.My, self.Mz], dtype=float
        )


@dataclass(frozen=True)
class Restraint:
    """
    Support conditions of one joint: True = fixed (zero displacement).

    A joint without a Restraint record is free in all 6 DOFs.
    """
    node: Hashable
    ux: bool = False
    uy: bool = False
    uz: bool = False
    rx: bool = False
    ry: bool = False
    rz: bool = False

    @classmethod
    def fixed(cls, node) -> "Restraint":
        return cls(node, True, True, True, True, True, True)

    @classmethod
    def pinned(cls, node) -> "Restraint":
        return cls(node, True, True, True, False, False, False)

    @property
    def flags(self) -> Tuple[bool, ...]:
        return (self.ux, self.uy, self.uz, self.rx, self.ry, self.rz)

    def fixed_local_dofs(self) -> List[int]:
        return [i for i, flag in enumerate(self.flags) if flag]


@dataclass(frozen=True)
class ModelSnapshot:
    """
    Immutable model state consumed by one analysis run.

    ``joints`` order is the canonical DOF ordering: joint ``joints[i]`` owns
    global rows ``[6*i, 6*i + 6)``. ``dof`` is built from it once.
    """
    joints: Tuple[Joint, ...] = ()
    elements: Tuple[FrameElement, ...] = ()
    loads: Tuple[NodalLoad, ...] = ()
    restraints: Mapping[Hashable, Restraint] = field(default_factory=dict)
    version: int = 0
    dof: DOFManager = field(init=False, repr=False, compare=False)
    joint_map: Dict[Hashable, Joint] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "joints", tuple(self.joints))
        object.__setattr__(self, "elements", tuple(self.elements))
        object.__setattr__(self, "loads", tuple(self.loads))
        object.__setattr__(self, "restraints", dict(self.restraints))
        # Raises ValueError on duplicate joint ids
        object.__setattr__(self, "dof", DOFManager.from_joint_ids(j.id for j in self.joints))
        object.__setattr__(self, "joint_map", {j.id: j for j in self.joints})

    @property
    def n_joints(self) -> int:
        return len(self.joints)

    def validate(self) -> None:
        """
        Check referential integrity before any matrix is built.

        Raises:
        -------
        ValueError
            Duplicate element or load ids.
        UnknownJointError
            An element, load or restraint references a missing joint.
        DegenerateGeometryError
            An element connects a joint to itself.
        """
        _check_unique((e.id for e in self.elements), "element")
        _check_unique((ld.id for ld in self.loads), "load")

        for e in self.elements:
            for end, joint_id in (("from", e.ni), ("to", e.nj)):
                if joint_id not in self.dof:
                    raise UnknownJointError(joint_id, f"element {e.id!r} {end}-joint")
            if e.ni == e.nj:
                raise DegenerateGeometryError(
                    f"Element {e.id!r} starts and ends at joint {e.ni!r}"
                )

        for ld in self.loads:
            if ld.node not in self.dof:
                raise UnknownJointError(ld.node, f"load {ld.id!r}")

        for joint_id, r in self.restraints.items():
            if joint_id != r.node:
                raise ValueError(
                    f"Restraint stored under joint {joint_id!r} targets joint {r.node!r}"
                )
            if joint_id not in self.dof:
                raise UnknownJointError(joint_id, "restraint")


def _check_unique(ids: Iterable[Hashable], kind: str) -> None:
    seen = set()
    for i in ids:
        if i in seen:
            raise ValueError(f"Duplicate {kind} id {i!r}")
        seen.add(i)


class Model:
    """
    Editable frame model.

    Ids are optional on every ``add_*`` call; when omitted the next free
    integer is used. Every edit bumps ``version`` so consumers can tell
    whether a cached analysis is stale.

    Example:
    --------
    >>> m = Model()
    >>> a = m.add_joint(0.0, 0.0, 0.0)
    >>> b = m.add_joint(3.0, 0.0, 0.0)
    >>> m.add_element(a, b, E=210e9, G=81e9, A=0.01, Iy=8e-6, Iz=8e-6, J=1e-5)
    >>> m.set_restraint(Restraint.fixed(a))
    >>> m.add_load(b, Fy=-1000.0)
    >>> snap = m.snapshot()
    """

    def __init__(self):
        self._joints: Dict[Hashable, Joint] = {}
        self._elements: Dict[Hashable, FrameElement] = {}
        self._loads: Dict[Hashable, NodalLoad] = {}
        self._restraints: Dict[Hashable, Restraint] = {}
        self._next_id = {"joint": 1, "element": 1, "load": 1}
        self.version = 0

    # -- ids -------------------------------------------------------------

    def _new_id(self, kind: str, existing: Mapping) -> int:
        i = self._next_id[kind]
        while i in existing:
            i += 1
        self._next_id[kind] = i + 1
        return i

    def _touch(self) -> None:
        self.version += 1

    def _require_joint(self, joint_id, context: str) -> None:
        if joint_id not in self._joints:
            raise UnknownJointError(joint_id, context)

    # -- joints ----------------------------------------------------------

    @property
    def joints(self) -> List[Joint]:
        return list(self._joints.values())

    @property
    def elements(self) -> List[FrameElement]:
        return list(self._elements.values())

    @property
    def loads(self) -> List[NodalLoad]:
        return list(self._loads.values())

    @property
    def restraints(self) -> Dict[Hashable, Restraint]:
        return dict(self._restraints)

    def add_joint(self, x: float, y: float, z: float, id: Optional[Hashable] = None) -> Hashable:
        if id is None:
            id = self._new_id("joint", self._joints)
        elif id in self._joints:
            raise ValueError(f"Duplicate joint id {id!r}")
        self._joints[id] = Joint(id, float(x), float(y), float(z))
        self._touch()
        return id

    def joint_references(self, joint_id: Hashable) -> List[str]:
        """Descriptions of everything that still points at ``joint_id``."""
        refs = [f"element {e.id!r}" for e in self._elements.values()
                if joint_id in (e.ni, e.nj)]
        refs += [f"load {ld.id!r}" for ld in self._loads.values() if ld.node == joint_id]
        if joint_id in self._restraints:
            refs.append("restraint")
        return refs

    def remove_joint(self, joint_id: Hashable) -> None:
        """
        Delete a joint.

        Raises:
        -------
        UnknownJointError
            If the joint does not exist.
        JointInUseError
            If any element, load or restraint references it.
        """
        self._require_joint(joint_id, "remove_joint")
        refs = self.joint_references(joint_id)
        if refs:
            raise JointInUseError(
                f"Joint {joint_id!r} is still referenced by: {', '.join(refs)}"
            )
        del self._joints[joint_id]
        self._touch()

    # -- elements --------------------------------------------------------

    def add_element(
        self,
        ni: Hashable,
        nj: Hashable,
        E: float,
        G: float,
        A: float,
        Iy: float,
        Iz: float,
        J: float,
        id: Optional[Hashable] = None,
    ) -> Hashable:
        self._require_joint(ni, "element from-joint")
        self._require_joint(nj, "element to-joint")
        if ni == nj:
            raise DegenerateGeometryError(f"Element cannot start and end at joint {ni!r}")
        if id is None:
            id = self._new_id("element", self._elements)
        elif id in self._elements:
            raise ValueError(f"Duplicate element id {id!r}")
        self._elements[id] = FrameElement(id, ni, nj, E, G, A, Iy, Iz, J)
        self._touch()
        return id

    def remove_element(self, element_id: Hashable) -> None:
        del self._elements[element_id]
        self._touch()

    # -- loads -----------------------------------------------------------

    def add_load(
        self,
        node: Hashable,
        Fx: float = 0.0,
        Fy: float = 0.0,
        Fz: float = 0.0,
        Mx: float = 0.0,
        My: float = 0.0,
        Mz: float = 0.0,
        id: Optional[Hashable] = None,
    ) -> Hashable:
        self._require_joint(node, "load")
        if id is None:
            id = self._new_id("load", self._loads)
        elif id in self._loads:
            raise ValueError(f"Duplicate load id {id!r}")
        self._loads[id] = NodalLoad(id, node, Fx, Fy, Fz, Mx, My, Mz)
        self._touch()
        return id

    def remove_load(self, load_id: Hashable) -> None:
        del self._loads[load_id]
        self._touch()

    # -- restraints ------------------------------------------------------

    def set_restraint(self, restraint: Restraint) -> None:
        """Add or replace the single restraint record of a joint."""
        self._require_joint(restraint.node, "restraint")
        self._restraints[restraint.node] = restraint
        self._touch()

    def clear_restraint(self, joint_id: Hashable) -> None:
        self._restraints.pop(joint_id, None)
        self._touch()

    # -- snapshots -------------------------------------------------------

    def snapshot(self) -> ModelSnapshot:
        """Freeze the current state (joint insertion order = DOF order)."""
        return ModelSnapshot(
            joints=tuple(self._joints.values()),
            elements=tuple(self._elements.values()),
            loads=tuple(self._loads.values()),
            restraints=dict(self._restraints),
            version=self.version,
        )
