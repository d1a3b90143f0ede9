# mini_frame/kernel/dof.py
"""
DOF MANAGER: Joint-Id Based Degree of Freedom Indexing
======================================================

PURPOSE:
--------
This module maps (joint_id, local_dof) to a row/column of the global system.

Every joint in a 3D frame carries 6 DOFs, always in this order:

    0=ux, 1=uy, 2=uz, 3=rx, 4=ry, 5=rz

Joint ids are arbitrary hashables (ints, strings) supplied by whoever
edits the model, so the position of a joint in the global system cannot be
derived from its id. Instead, a DOFManager is built ONCE per model snapshot
from the canonical joint ordering and then shared by the assembler, the
restraint enforcer, the solver and post-processing. K, F and U of one
analysis run therefore always agree on what row 17 means.

USAGE:
------
    dof = DOFManager.from_joint_ids(["A", "B", "C"])

    dof.idx("B", 1)                 # → 7  (joint B, uy)
    dof.node_dofs("C")              # → [12, 13, 14, 15, 16, 17]
    dof.element_dof_map(["A", "C"]) # → [0..5, 12..17]
    dof.ndof()                      # → 18
"""

from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Sequence, Tuple

from .errors import UnknownJointError


DOF_PER_NODE = 6  # ux, uy, uz, rx, ry, rz
DOF_LABELS = ("ux", "uy", "uz", "rx", "ry", "rz")


@dataclass(frozen=True)
class DOFManager:
    """
    Manages degree-of-freedom indexing for one model snapshot.

    Attributes:
    -----------
    joint_ids : Tuple[Hashable, ...]
        Canonical joint ordering. Joint ``joint_ids[i]`` owns the global
        rows ``[6*i, 6*i + 6)``.

    Examples:
    ---------
    >>> dof = DOFManager.from_joint_ids([10, 20])
    >>> dof.idx(20, 0)
    6
    >>> dof.ndof()
    12
    """
    joint_ids: Tuple[Hashable, ...]
    _index: Dict[Hashable, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        index = {}
        for position, joint_id in enumerate(self.joint_ids):
            if joint_id in index:
                raise ValueError(f"Duplicate joint id {joint_id!r} in DOF ordering")
            index[joint_id] = position
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_joint_ids(cls, joint_ids: Iterable[Hashable]) -> "DOFManager":
        return cls(tuple(joint_ids))

    @property
    def dof_per_node(self) -> int:
        return DOF_PER_NODE

    def __contains__(self, joint_id) -> bool:
        return joint_id in self._index

    def __len__(self) -> int:
        return len(self.joint_ids)

    def position(self, joint_id: Hashable) -> int:
        """
        Position of a joint in the canonical ordering.

        Raises:
        -------
        UnknownJointError
            If the joint is not part of this snapshot.
        """
        try:
            return self._index[joint_id]
        except KeyError:
            raise UnknownJointError(joint_id, "not in the joint set") from None

    def idx(self, joint_id: Hashable, local_dof: int) -> int:
        """
        Get the global DOF index for a joint's local DOF.

        Parameters:
        -----------
        joint_id : Hashable
            The joint identifier
        local_dof : int
            0=ux, 1=uy, 2=uz, 3=rx, 4=ry, 5=rz

        Returns:
        --------
        int
            Global DOF index in the system matrices
        """
        if not 0 <= local_dof < DOF_PER_NODE:
            raise ValueError(f"local_dof must be in [0, {DOF_PER_NODE}), got {local_dof}")
        return DOF_PER_NODE * self.position(joint_id) + local_dof

    def ndof(self) -> int:
        """Total number of DOFs (size of K)."""
        return DOF_PER_NODE * len(self.joint_ids)

    def node_dofs(self, joint_id: Hashable) -> List[int]:
        """
        Get all 6 global DOF indices for a single joint.

        Examples:
        ---------
        >>> DOFManager.from_joint_ids(["a", "b"]).node_dofs("b")
        [6, 7, 8, 9, 10, 11]
        """
        base = DOF_PER_NODE * self.position(joint_id)
        return list(range(base, base + DOF_PER_NODE))

    def element_dof_map(self, joint_ids: Sequence[Hashable]) -> List[int]:
        """
        Get the DOF map for an element connecting several joints.

        For a beam this is 12 indices: 6 for the from-joint, then 6 for
        the to-joint, matching the row order of the element matrices.
        """
        result = []
        for joint_id in joint_ids:
            result.extend(self.node_dofs(joint_id))
        return result

    def locate(self, global_dof: int) -> Tuple[Hashable, int]:
        """Inverse of idx(): global index → (joint_id, local_dof)."""
        if not 0 <= global_dof < self.ndof():
            raise IndexError(f"Global DOF {global_dof} out of range [0, {self.ndof()})")
        position, local_dof = divmod(global_dof, DOF_PER_NODE)
        return self.joint_ids[position], local_dof

    def label(self, global_dof: int) -> str:
        """Human readable name of a global DOF, e.g. ``'B:uy'``."""
        joint_id, local_dof = self.locate(global_dof)
        return f"{joint_id}:{DOF_LABELS[local_dof]}"
