# mini_frame/kernel/errors.py
"""Typed failures raised by the analysis pipeline."""


class AnalysisError(RuntimeError):
    """Base class for every failure the analysis pipeline can raise."""
    pass


class DegenerateGeometryError(AnalysisError):
    """Raised when an element has zero/non-finite length or no valid local axes."""
    pass


class UnknownJointError(AnalysisError):
    """Raised when an element, load or restraint references a missing joint."""

    def __init__(self, joint_id, context: str = ""):
        self.joint_id = joint_id
        self.context = context
        msg = f"Unknown joint {joint_id!r}"
        if context:
            msg += f" ({context})"
        super().__init__(msg)


class SingularSystemError(AnalysisError):
    """Raised when the constrained stiffness matrix has no unique solution."""
    pass


class JointInUseError(AnalysisError):
    """Raised when removing a joint that elements, loads or restraints still reference."""
    pass
