# mini_frame/kernel - Direct stiffness plumbing
"""
KERNEL: DOF INDEXING, ASSEMBLY, RESTRAINTS, SOLVE
=================================================

The kernel never looks at beam mechanics. It needs:
- A way to map (joint_id, local_dof) → global DOF index (DOFManager)
- Element stiffness matrices in global coordinates
- Restraint records
- Nodal load vectors

Element mechanics live in mini_frame.elements; the end-to-end pipeline
is mini_frame.analysis.run_analysis.
"""

from .errors import (
    AnalysisError,
    DegenerateGeometryError,
    UnknownJointError,
    SingularSystemError,
    JointInUseError,
)
from .dof import DOFManager, DOF_PER_NODE, DOF_LABELS
from .backend import DenseBackend, SparseBackend, get_backend
from .assemble import assemble_global_K, assemble_global_F, assemble_system
from .constraints import apply_restraints, fixed_dofs
from .solve import solve_displacements, recover_reactions, solve_linear

__all__ = [
    'AnalysisError', 'DegenerateGeometryError', 'UnknownJointError',
    'SingularSystemError', 'JointInUseError',
    'DOFManager', 'DOF_PER_NODE', 'DOF_LABELS',
    'DenseBackend', 'SparseBackend', 'get_backend',
    'assemble_global_K', 'assemble_global_F', 'assemble_system',
    'apply_restraints', 'fixed_dofs',
    'solve_displacements', 'recover_reactions', 'solve_linear',
]
