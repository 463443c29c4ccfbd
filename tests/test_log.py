import io
import logging
import sys

import pytest

from certctl.common.config import IssuanceConfig
from certctl.common.log import ROOT_LOGGER, attach_handler, get_logger
from certctl.crypto import pki


@pytest.fixture
def library_logging(monkeypatch):
    """certctl logger as a library caller sees it: no handler, no level, propagating."""
    logger = logging.getLogger(ROOT_LOGGER)
    monkeypatch.setattr(logger, "handlers", [])
    monkeypatch.setattr(logger, "propagate", True)
    monkeypatch.setattr(logger, "level", logging.NOTSET)
    return logger


def test_debug_config_emits_without_cli_setup(library_logging, caplog):
    pki.cert_template(True, ["127.0.0.1"], IssuanceConfig(debug=True))
    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
    assert any(m.startswith("addr: ") for m in messages)


def test_default_config_suppresses_debug(library_logging, caplog):
    pki.cert_template(True, ["127.0.0.1"], IssuanceConfig())
    assert [r for r in caplog.records if r.levelno == logging.DEBUG] == []


def test_warnings_pass_regardless_of_debug(library_logging, caplog):
    pki.cert_template(True, ["not-an-ip"], IssuanceConfig())
    assert any("not-an-ip" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)


def test_logger_level_does_not_gate_output(library_logging, caplog):
    library_logging.level = logging.CRITICAL
    get_logger("certctl.test", IssuanceConfig(debug=True)).debug("visible")
    assert [r.getMessage() for r in caplog.records] == ["visible"]


def test_attach_handler_swaps_stream_in_place():
    buf = io.StringIO()
    logger = attach_handler(buf)
    assert len(logger.handlers) == 1
    assert logger.handlers[0].stream is buf

    get_logger("certctl.test", IssuanceConfig(debug=True)).debug("to buffer")
    assert "DEBUG certctl.test to buffer" in buf.getvalue()

    attach_handler()
    assert len(logger.handlers) == 1
    assert logger.handlers[0].stream is sys.stderr
