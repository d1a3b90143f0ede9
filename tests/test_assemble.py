"""
TEST: Global Assembly
=====================

1. K is the scatter-add of every element's Tᵀ·k·T
2. Duplicate elements double their contribution (accumulate, not assign)
3. Loads on one joint superpose
4. Unknown joints abort the whole assembly
"""

import numpy as np
import pytest

from mini_frame.config import AnalysisConfig
from mini_frame.elements import frame3d_global_stiffness
from mini_frame.kernel.assemble import (
    assemble_global_F,
    assemble_global_K,
    assemble_system,
    add_nodal_load,
)
from mini_frame.kernel.dof import DOFManager
from mini_frame.kernel.errors import UnknownJointError, DegenerateGeometryError
from mini_frame.model import Joint, FrameElement, NodalLoad, ModelSnapshot


SECTION = dict(E=210e9, G=81e9, A=0.01, Iy=6.0e-6, Iz=8.0e-6, J=1.2e-5)


def make_two_bar_snapshot(elements=None, loads=()):
    joints = [
        Joint(0, 0.0, 0.0, 0.0),
        Joint(1, 3.0, 0.0, 0.0),
        Joint(2, 3.0, 2.0, 1.0),
    ]
    if elements is None:
        elements = [
            FrameElement(0, 0, 1, **SECTION),
            FrameElement(1, 1, 2, **SECTION),
        ]
    return ModelSnapshot(joints=joints, elements=elements, loads=loads)


def test_global_K_size_and_symmetry():
    snap = make_two_bar_snapshot()
    K, F = assemble_system(snap)

    assert K.shape == (18, 18)
    assert F.shape == (18,)
    np.testing.assert_allclose(K, K.T, rtol=1e-12, atol=1e-6)


def test_shared_joint_block_is_sum_of_elements():
    """Joint 1 is shared: its 6×6 block = end-j block of bar 0 + end-i block of bar 1."""
    snap = make_two_bar_snapshot()
    K, _ = assemble_system(snap)

    ke0 = frame3d_global_stiffness(snap.joint_map, snap.elements[0])
    ke1 = frame3d_global_stiffness(snap.joint_map, snap.elements[1])

    np.testing.assert_allclose(K[6:12, 6:12], ke0[6:, 6:] + ke1[:6, :6])
    # Joints 0 and 2 are not connected
    assert np.count_nonzero(K[0:6, 12:18]) == 0


def test_duplicate_element_doubles_contribution():
    single = make_two_bar_snapshot(elements=[FrameElement("a", 0, 1, **SECTION)])
    double = make_two_bar_snapshot(elements=[
        FrameElement("a", 0, 1, **SECTION),
        FrameElement("b", 0, 1, **SECTION),
    ])

    K1, _ = assemble_system(single)
    K2, _ = assemble_system(double)

    np.testing.assert_array_equal(K2, 2.0 * K1)


def test_loads_on_same_joint_superpose():
    loads = [
        NodalLoad(0, 1, Fx=1.0, Fy=2.0, Mz=3.0),
        NodalLoad(1, 1, Fx=10.0, Fz=-4.0),
        NodalLoad(2, 2, My=7.0),
    ]
    snap = make_two_bar_snapshot(loads=loads)
    _, F = assemble_system(snap)

    np.testing.assert_array_equal(F[6:12], [11.0, 2.0, -4.0, 0.0, 0.0, 3.0])
    np.testing.assert_array_equal(F[12:18], [0.0, 0.0, 0.0, 0.0, 7.0, 0.0])
    np.testing.assert_array_equal(F[0:6], np.zeros(6))


def test_element_with_unknown_joint_aborts():
    snap = make_two_bar_snapshot(elements=[
        FrameElement(0, 0, 1, **SECTION),
        FrameElement(1, 1, 99, **SECTION),
    ])

    with pytest.raises(UnknownJointError):
        assemble_system(snap)


def test_load_on_unknown_joint_aborts():
    snap = make_two_bar_snapshot(loads=[NodalLoad(0, "nowhere", Fx=1.0)])

    with pytest.raises(UnknownJointError):
        assemble_system(snap)


def test_zero_length_element_aborts():
    joints = [Joint(0, 0.0, 0.0, 0.0), Joint(1, 0.0, 0.0, 0.0)]
    snap = ModelSnapshot(joints=joints, elements=[FrameElement(0, 0, 1, **SECTION)])

    with pytest.raises(DegenerateGeometryError):
        assemble_system(snap)


def test_sparse_backend_matches_dense():
    snap = make_two_bar_snapshot(loads=[NodalLoad(0, 2, Fz=-5.0)])

    K_dense, F_dense = assemble_system(snap, AnalysisConfig(backend="dense"))
    K_sparse, F_sparse = assemble_system(snap, AnalysisConfig(backend="sparse"))

    np.testing.assert_allclose(K_sparse.toarray(), K_dense, rtol=1e-12, atol=1e-6)
    np.testing.assert_array_equal(F_sparse, F_dense)


def test_low_level_scatter_helpers():
    dof = DOFManager.from_joint_ids(["a", "b"])
    ke = np.arange(144, dtype=float).reshape(12, 12)

    K = assemble_global_K(dof.ndof(), [(dof.element_dof_map(["b", "a"]), ke)])
    # Row 0 of ke belongs to joint b → global row 6
    np.testing.assert_array_equal(K[6, 6:12], ke[0, :6])
    np.testing.assert_array_equal(K[6, 0:6], ke[0, 6:])

    F = assemble_global_F(dof.ndof(), [(dof.node_dofs("a"), np.ones(6))])
    add_nodal_load(F, dof, "a", np.ones(6))
    np.testing.assert_array_equal(F[:6], 2.0 * np.ones(6))

    with pytest.raises(ValueError):
        assemble_global_K(dof.ndof(), [(dof.node_dofs("a"), ke)])
