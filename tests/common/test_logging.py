import logging

import pytest

from x402_evm.logging_config import get_logger, resolve_level, setup_logging


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(logging.ERROR) == logging.ERROR
    assert resolve_level("nonsense") == logging.INFO


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("web3").setLevel(logging.NOTSET)


def test_setup_logging_installs_single_handler(restore_root_logger):
    setup_logging("DEBUG")
    setup_logging("DEBUG")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.DEBUG
    assert logging.getLogger("web3").level == logging.WARNING


def test_get_logger():
    assert get_logger("x402_evm.test").name == "x402_evm.test"
