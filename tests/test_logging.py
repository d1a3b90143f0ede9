"""TEST: pipeline stages are logged under the ``mini_frame`` logger."""

import logging

import pytest

from mini_frame import enable_debug_logging, run_analysis
from mini_frame.kernel.errors import SingularSystemError
from mini_frame.model import Joint, FrameElement, NodalLoad, Restraint, ModelSnapshot


SECTION = dict(E=210e9, G=81e9, A=0.01, Iy=6.0e-6, Iz=8.0e-6, J=1.2e-5)


def make_beam(restraints):
    return ModelSnapshot(
        joints=[Joint(0, 0.0, 0.0, 0.0), Joint(1, 0.0, 0.0, 2.0)],
        elements=[FrameElement(0, 0, 1, **SECTION)],
        loads=[NodalLoad(0, 1, Fx=10.0)],
        restraints=restraints,
    )


def test_debug_messages(caplog):
    with caplog.at_level(logging.DEBUG, logger="mini_frame"):
        run_analysis(make_beam({0: Restraint.fixed(0)}))

    assert "Assembled 12 DOFs from 1 elements and 1 loads" in caplog.text
    assert "Constrained 6 of 12 DOFs" in caplog.text
    assert "is vertical" in caplog.text


def test_singular_system_is_warned(caplog):
    with caplog.at_level(logging.WARNING, logger="mini_frame"):
        with pytest.raises(SingularSystemError):
            run_analysis(make_beam({}))

    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_enable_debug_logging_is_idempotent():
    logger = enable_debug_logging()
    n_handlers = len(logger.handlers)
    enable_debug_logging()

    assert len(logger.handlers) == n_handlers
    assert logger.level == logging.DEBUG
    logger.setLevel(logging.NOTSET)
