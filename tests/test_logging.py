"""Tests for the shared logger configuration."""

import logging

from batchode.core.errors import (
    BatchODEError,
    ConfigError,
    FieldContractError,
    InvalidArgumentError,
    NonFiniteStateError,
    StepError,
    UnknownSchemeError,
    RegistryError,
    configure_logging,
    get_logger,
)


def test_get_logger_singleton():
    assert get_logger() is get_logger()
    assert get_logger().name == "batchode"


def test_configure_logging_levels_and_file(tmp_path):
    log_file = tmp_path / "out.log"
    configure_logging(verbose=True, log_file=str(log_file))
    log = get_logger()
    assert log.level == logging.DEBUG
    log.debug("hello file")
    for h in log.handlers:
        h.flush()
    assert "hello file" in log_file.read_text(encoding="utf-8")
    configure_logging()
    assert log.level == logging.INFO
    assert len(log.handlers) == 1


def test_unusable_log_file_is_reported(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="batchode"):
        configure_logging(log_file=str(tmp_path / "missing_dir" / "x.log"))
    assert "[104]" in caplog.text
    assert len(get_logger().handlers) == 1


def test_error_hierarchy():
    assert issubclass(InvalidArgumentError, BatchODEError)
    assert issubclass(UnknownSchemeError, RegistryError)
    assert issubclass(ConfigError, BatchODEError)
    err = NonFiniteStateError(step=2, batch_index=5, scheme="rk4")
    assert (err.step, err.batch_index, err.scheme) == (2, 5, "rk4")
    assert str(err) == "[310] Non-finite state"
    contract = FieldContractError(step=1, batch_index=0, scheme="euler")
    assert isinstance(contract, StepError) and isinstance(err, StepError)
    assert (contract.step, contract.batch_index, contract.scheme) == (1, 0, "euler")
    assert str(contract) == "[311] Field contract violated"
