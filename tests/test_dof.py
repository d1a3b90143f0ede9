"""
TEST: DOF Manager
=================

Global DOF indices come from the snapshot's canonical joint ordering,
not from the joint ids themselves.
"""

import pytest

from mini_frame.kernel.dof import DOFManager, DOF_PER_NODE
from mini_frame.kernel.errors import UnknownJointError
from mini_frame.model import Joint, ModelSnapshot


def test_indices_follow_joint_order():
    dof = DOFManager.from_joint_ids(["A", "B", "C"])

    assert DOF_PER_NODE == 6
    assert dof.ndof() == 18
    assert dof.idx("A", 0) == 0
    assert dof.idx("B", 1) == 7
    assert dof.node_dofs("C") == [12, 13, 14, 15, 16, 17]


def test_element_dof_map_is_from_then_to():
    dof = DOFManager.from_joint_ids([10, 20, 30])

    assert dof.element_dof_map([30, 10]) == list(range(12, 18)) + list(range(0, 6))


def test_ids_are_not_positions():
    """Joint id 5 sitting first in the list owns rows 0..5."""
    dof = DOFManager.from_joint_ids([5, 0])

    assert dof.node_dofs(5) == [0, 1, 2, 3, 4, 5]
    assert dof.node_dofs(0) == [6, 7, 8, 9, 10, 11]


def test_unknown_joint_raises():
    dof = DOFManager.from_joint_ids(["A"])

    with pytest.raises(UnknownJointError):
        dof.node_dofs("Z")
    with pytest.raises(UnknownJointError):
        dof.element_dof_map(["A", "Z"])


def test_duplicate_joint_ids_rejected():
    with pytest.raises(ValueError):
        DOFManager.from_joint_ids([1, 2, 1])


def test_invalid_local_dof_rejected():
    dof = DOFManager.from_joint_ids([1])
    with pytest.raises(ValueError):
        dof.idx(1, 6)


def test_locate_and_label_invert_idx():
    dof = DOFManager.from_joint_ids(["A", "B"])

    assert dof.locate(10) == ("B", 4)
    assert dof.label(10) == "B:ry"
    with pytest.raises(IndexError):
        dof.locate(12)


def test_snapshot_owns_its_dof_table():
    snap = ModelSnapshot(joints=[Joint("b", 1.0, 0.0, 0.0), Joint("a", 0.0, 0.0, 0.0)])

    assert snap.dof.joint_ids == ("b", "a")
    assert snap.dof.idx("a", 0) == 6
