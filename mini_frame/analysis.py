# mini_frame/analysis.py
"""
ANALYSIS PIPELINE: Snapshot → K, F → K', F' → U → R, member forces
==================================================================

    snapshot.validate()                   referential integrity
    K, F   = assemble_system(snapshot)    element + load scatter-add
    K', F' = apply_restraints(K, F, ...)  row/column elimination
    U      = solve_displacements(K', F')  direct LU on free DOFs
    R      = K·U − F at fixed DOFs
    f      = k_local · T · U_e per element

One call, one snapshot. Nothing is cached between runs: when the model
changes, take a new snapshot and call run_analysis again. Any failure
raises before a result object exists, so callers never see a zero
displacement vector standing in for an error.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Union

import numpy as np

from .config import CONFIG, AnalysisConfig
from .kernel.assemble import assemble_system
from .kernel.backend import backend_for
from .kernel.constraints import apply_restraints
from .kernel.solve import recover_reactions, solve_displacements
from .model import Model, ModelSnapshot
from . import post


logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Everything one analysis run produces, indexed by ``snapshot.dof``."""
    snapshot: ModelSnapshot
    K: object
    F: np.ndarray
    K_constrained: object
    F_constrained: np.ndarray
    U: np.ndarray
    R: np.ndarray
    fixed_dofs: List[int]
    member_forces: Dict[Hashable, np.ndarray] = field(default_factory=dict)

    @property
    def dof(self):
        return self.snapshot.dof

    def displacement(self, joint_id: Hashable) -> np.ndarray:
        """[ux, uy, uz, rx, ry, rz] of one joint."""
        return self.U[self.dof.node_dofs(joint_id)]

    def displacements(self) -> Dict[Hashable, np.ndarray]:
        return {j.id: self.displacement(j.id) for j in self.snapshot.joints}

    def reactions(self) -> Dict[Hashable, np.ndarray]:
        """Restrained joint id → [Rx, Ry, Rz, RMx, RMy, RMz]."""
        return post.compute_nodal_reactions(self.snapshot, self.R)

    def residual(self) -> np.ndarray:
        """K'·U − F' (zero up to round-off)."""
        return backend_for(self.K_constrained).matvec(self.K_constrained, self.U) - self.F_constrained

    def displacement_table(self):
        return post.displacement_table(self.snapshot, self.U)

    def reaction_table(self):
        return post.reaction_table(self.snapshot, self.R)

    def end_force_table(self):
        return post.end_force_table(self.member_forces)


def run_analysis(
    model: Union[Model, ModelSnapshot],
    config: AnalysisConfig = CONFIG,
) -> AnalysisResult:
    """
    Linear static analysis of a 3D frame.

    Parameters:
    -----------
    model : Model or ModelSnapshot
        A Model is snapshotted first, so later edits cannot leak into the run.
    config : AnalysisConfig
        Backend, conditioning and tolerance settings

    Returns:
    --------
    AnalysisResult

    Raises:
    -------
    UnknownJointError, DegenerateGeometryError, SingularSystemError
    """
    snapshot = model.snapshot() if isinstance(model, Model) else model
    logger.debug(
        "Analysis of snapshot v%d: %d joints, %d elements, %d loads, %d restraints",
        snapshot.version, len(snapshot.joints), len(snapshot.elements),
        len(snapshot.loads), len(snapshot.restraints),
    )

    snapshot.validate()

    K, F = assemble_system(snapshot, config)
    K_c, F_c, fixed = apply_restraints(K, F, snapshot.restraints, snapshot.dof)
    U = solve_displacements(K_c, F_c, fixed, config)
    R = recover_reactions(K, F, U, fixed)
    forces = post.member_end_forces(snapshot, U, config.geometry_tol)

    return AnalysisResult(
        snapshot=snapshot,
        K=K,
        F=F,
        K_constrained=K_c,
        F_constrained=F_c,
        U=U,
        R=R,
        fixed_dofs=fixed,
        member_forces=forces,
    )
