"""
TEST: Model Editing and Snapshots
=================================

The editable Model must never let a reference dangle, and every snapshot
must be an independent, versioned copy.
"""

import numpy as np
import pytest

from mini_frame import Model, Restraint, run_analysis
from mini_frame.kernel.errors import (
    DegenerateGeometryError,
    JointInUseError,
    UnknownJointError,
)
from mini_frame.model import Joint, FrameElement, NodalLoad, ModelSnapshot


SECTION = dict(E=210e9, G=81e9, A=0.01, Iy=6.0e-6, Iz=8.0e-6, J=1.2e-5)


def make_cantilever_model():
    m = Model()
    a = m.add_joint(0.0, 0.0, 0.0)
    b = m.add_joint(2.0, 0.0, 0.0)
    m.add_element(a, b, **SECTION)
    m.set_restraint(Restraint.fixed(a))
    m.add_load(b, Fy=-100.0)
    return m, a, b


def test_auto_ids_are_sequential():
    m, a, b = make_cantilever_model()

    assert (a, b) == (1, 2)
    assert [e.id for e in m.elements] == [1]
    assert m.add_joint(0.0, 1.0, 0.0) == 3


def test_explicit_ids_and_duplicates():
    m = Model()
    m.add_joint(0.0, 0.0, 0.0, id="A")

    with pytest.raises(ValueError):
        m.add_joint(1.0, 0.0, 0.0, id="A")


def test_references_to_missing_joints_are_refused():
    m = Model()
    a = m.add_joint(0.0, 0.0, 0.0)

    with pytest.raises(UnknownJointError):
        m.add_element(a, 42, **SECTION)
    with pytest.raises(UnknownJointError):
        m.add_load(42, Fx=1.0)
    with pytest.raises(UnknownJointError):
        m.set_restraint(Restraint.fixed(42))


def test_element_to_itself_is_refused():
    m = Model()
    a = m.add_joint(0.0, 0.0, 0.0)

    with pytest.raises(DegenerateGeometryError):
        m.add_element(a, a, **SECTION)


def test_referenced_joint_cannot_be_removed():
    m, a, b = make_cantilever_model()

    with pytest.raises(JointInUseError):
        m.remove_joint(b)

    # Detach everything, then removal succeeds
    m.remove_load(1)
    m.remove_element(1)
    m.remove_joint(b)
    assert [j.id for j in m.joints] == [a]


def test_unreferenced_joint_removal():
    m, a, b = make_cantilever_model()
    c = m.add_joint(5.0, 5.0, 5.0)

    m.remove_joint(c)

    assert c not in [j.id for j in m.joints]
    with pytest.raises(UnknownJointError):
        m.remove_joint(c)


def test_restraint_is_replaced_not_duplicated():
    m, a, b = make_cantilever_model()
    m.set_restraint(Restraint.pinned(a))

    assert m.restraints[a] == Restraint.pinned(a)
    assert len(m.restraints) == 1

    m.clear_restraint(a)
    assert m.restraints == {}


def test_versions_increase_with_edits():
    m, a, b = make_cantilever_model()
    v1 = m.snapshot().version
    m.add_load(b, Fz=5.0)
    v2 = m.snapshot().version

    assert v2 > v1


def test_snapshot_is_isolated_from_later_edits():
    m, a, b = make_cantilever_model()
    snap = m.snapshot()

    m.add_load(b, Fy=-100.0)
    c = m.add_joint(4.0, 0.0, 0.0)
    m.add_element(b, c, **SECTION)

    assert len(snap.loads) == 1
    assert len(snap.joints) == 2
    assert snap.dof.ndof() == 12


def test_run_analysis_accepts_model_and_snapshot():
    m, a, b = make_cantilever_model()

    from_model = run_analysis(m)
    from_snapshot = run_analysis(m.snapshot())

    np.testing.assert_array_equal(from_model.U, from_snapshot.U)
    assert from_model.displacement(b)[1] < 0.0


def test_reanalysis_after_edit_doubles_response():
    """Linear system: twice the load, twice the displacement."""
    m, a, b = make_cantilever_model()
    u1 = run_analysis(m).displacement(b)[1]

    m.add_load(b, Fy=-100.0)
    u2 = run_analysis(m).displacement(b)[1]

    assert np.isclose(u2, 2.0 * u1, rtol=1e-12)


def test_snapshot_validation():
    joints = [Joint(0, 0.0, 0.0, 0.0), Joint(1, 1.0, 0.0, 0.0)]

    with pytest.raises(ValueError):
        ModelSnapshot(joints=joints + [Joint(0, 5.0, 0.0, 0.0)])

    bad_load = ModelSnapshot(joints=joints, loads=[NodalLoad(0, 7, Fx=1.0)])
    with pytest.raises(UnknownJointError):
        bad_load.validate()

    self_loop = ModelSnapshot(joints=joints, elements=[FrameElement(0, 1, 1, **SECTION)])
    with pytest.raises(DegenerateGeometryError):
        self_loop.validate()

    dup_elements = ModelSnapshot(joints=joints, elements=[
        FrameElement(0, 0, 1, **SECTION), FrameElement(0, 0, 1, **SECTION),
    ])
    with pytest.raises(ValueError):
        dup_elements.validate()


def test_restraint_flags():
    r = Restraint("n", uy=True, rz=True)

    assert r.flags == (False, True, False, False, False, True)
    assert r.fixed_local_dofs() == [1, 5]
    assert Restraint.fixed("n").fixed_local_dofs() == [0, 1, 2, 3, 4, 5]
    assert Restraint.pinned("n").fixed_local_dofs() == [0, 1, 2]


def test_load_vector_order():
    ld = NodalLoad(0, "n", Fx=1.0, Fy=2.0, Fz=3.0, Mx=4.0, My=5.0, Mz=6.0)
    np.testing.assert_array_equal(ld.vector(), [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
