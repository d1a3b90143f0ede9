# mini_frame - 3D Frame Analysis (Direct Stiffness Method)
"""
MINI-FRAME: Linear Static Analysis of 3D Frames
================================================

This package provides:
- 3D Euler–Bernoulli frame elements (12×12 stiffness, 6 DOF/joint)
- Global assembly, restraint enforcement and a direct linear solve
- Support reactions and member end forces

ARCHITECTURE:
-------------
    kernel/         DOF indexing, assembly, restraints, solve, matrix backends
    model.py        Joint, FrameElement, NodalLoad, Restraint, ModelSnapshot, Model
    elements.py     Element local stiffness + transformation
    post.py         Member end forces, result tables
    analysis.py     run_analysis(): the whole pipeline on one snapshot
    config.py       AnalysisConfig / CONFIG
"""

import logging

from .config import AnalysisConfig, CONFIG
from .model import Joint, FrameElement, NodalLoad, Restraint, ModelSnapshot, Model
from .kernel import (
    AnalysisError,
    DegenerateGeometryError,
    UnknownJointError,
    SingularSystemError,
    JointInUseError,
    DOFManager,
)
from .analysis import run_analysis, AnalysisResult
from .log import enable_debug_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
