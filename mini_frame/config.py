# mini_frame/config.py
"""
Analysis configuration and defaults.
"""

from dataclasses import dataclass


BACKENDS = ('dense', 'sparse')


@dataclass
class AnalysisConfig:
    """Global analysis configuration."""

    # Matrix storage: 'dense' (numpy) or 'sparse' (scipy.sparse)
    backend: str = "dense"

    # Max condition number of the free-DOF partition before the
    # system is reported as singular
    cond_limit: float = 1e12

    # Below this, a length or cross-product norm counts as zero
    geometry_tol: float = 1e-12

    # Post-solve check: ||K'U - F'|| <= residual_tol * max(||F'||, 1)
    check_residual: bool = True
    residual_tol: float = 1e-6

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unknown matrix backend {self.backend!r}. Expected one of {BACKENDS}."
            )


# Global config instance
CONFIG = AnalysisConfig()
