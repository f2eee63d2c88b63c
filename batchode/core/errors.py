"""batchode: Error Taxonomy and Logging
-------------------------------------
Unified exception types and a shared logger for the package. This
module centralizes error categorization and provides the logging
configuration helper used by the CLI.

Error Hierarchy
---------------
- BatchODEError: Base exception for all batchode errors
- BatchODEIOError: Result persistence errors (100-199)
- BackendError: Backend resolution and array errors (200-299)
- IntegratorError: Integration errors (300-399)
    - InvalidArgumentError (300-309)
    - StepError (310-319)
        - NonFiniteStateError (310)
        - FieldContractError (311)
    - DeadlineExceededError (320)
- RegistryError: Registry errors (400-499)
    - UnknownSchemeError (404)
- ConfigError: Configuration errors (500-599)

Behavior
--------
- The shared logger is named "batchode" and can be configured to console and
  file with optional JSON formatting.
- Python warnings are captured into logging with adjustable levels.
"""

import logging
import os

__all__ = [
    "BatchODEError",
    "BatchODEIOError",
    "BackendError",
    "IntegratorError",
    "InvalidArgumentError",
    "NonFiniteStateError",
    "FieldContractError",
    "DeadlineExceededError",
    "RegistryError",
    "UnknownSchemeError",
    "ConfigError",
    "StepError",
    "get_logger",
    "configure_logging",
]


# Exception hierarchy
class BatchODEError(Exception):
    """Base exception for all batchode errors.

    Examples
    --------
    >>> try:
    ...     raise InvalidArgumentError("[300] dt must be positive")
    ... except BatchODEError as e:
    ...     print(e)
    [300] dt must be positive
    """

    pass


class BatchODEIOError(BatchODEError):  # Code Numbering: 1xx
    pass


class BackendError(BatchODEError):  # Code Numbering: 2xx
    pass


class IntegratorError(BatchODEError):  # Code Numbering: 3xx
    pass


class InvalidArgumentError(IntegratorError):
    """Invalid ``dt``, ``steps``, batch shape or guidance (codes 300-309).

    Always raised before the first field evaluation of a solve call.
    """

    pass


class StepError(IntegratorError):
    """A stepper failed while advancing the batch (codes 310-319).

    Attributes
    ----------
    step : int or None
        Zero-based index of the failing step.
    batch_index : int or None
        Row of the first offending trajectory in the batch.
    scheme : str or None
        Name of the scheme that was running.
    """

    def __init__(
        self,
        message: str,
        *,
        step: int | None = None,
        batch_index: int | None = None,
        scheme: str | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.batch_index = batch_index
        self.scheme = scheme


class NonFiniteStateError(StepError):
    """A derivative or produced state has a NaN or infinite component (code 310)."""

    def __init__(self, message: str = "[310] Non-finite state", **context) -> None:
        super().__init__(message, **context)


class FieldContractError(StepError):
    """The vector field returned a derivative with the wrong shape (code 311)."""

    def __init__(self, message: str = "[311] Field contract violated", **context) -> None:
        super().__init__(message, **context)


class DeadlineExceededError(IntegratorError):
    """The wall-clock deadline elapsed between two steps (code 320).

    Attributes
    ----------
    step : int
        Number of steps that were committed before the abort.
    """

    def __init__(self, message: str, *, step: int) -> None:
        super().__init__(message)
        self.step = step


class RegistryError(BatchODEError):  # Code Numbering: 4xx
    pass


class UnknownSchemeError(RegistryError):
    """No stepper is registered under the requested scheme name (code 404)."""

    pass


class ConfigError(BatchODEError):  # Code Numbering: 5xx
    pass


# Logger
_logger: logging.Logger | None = None

_PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_JSON_FORMAT = '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","msg":"%(message)s"}'


def get_logger() -> logging.Logger:
    """Get the shared batchode logger instance.

    Returns
    -------
    logging.Logger
        The singleton logger named ``"batchode"`` configured at INFO level by
        default with a console handler. Handlers are created lazily on first use.

    Examples
    --------
    >>> logger = get_logger()
    >>> logger.name
    'batchode'
    """
    global _logger
    if _logger is None:
        _logger = logging.getLogger("batchode")
        _logger.setLevel(logging.INFO)
        if not _logger.handlers:
            h = logging.StreamHandler()
            h.setFormatter(logging.Formatter(_PLAIN_FORMAT))
            _logger.addHandler(h)
    return _logger


def configure_logging(
    verbose: bool = False,
    log_file: str | None = None,
    as_json: bool = False,
    suppress_warnings: bool = False,
) -> None:
    """Configure the shared logger outputs and warning capture.

    Parameters
    ----------
    verbose : bool, default False
        When True, set logger level to DEBUG; otherwise INFO.
    log_file : str or None, default None
        Optional file path to append logs. A path that cannot be opened is
        reported through the logger and skipped.
    as_json : bool, default False
        Emit logs in a compact JSON line format when True; otherwise plain text.
    suppress_warnings : bool, default False
        Route Python warnings into logging and raise their level to ERROR when
        True; otherwise capture warnings at WARNING level.
    """
    logger = get_logger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    fmt = logging.Formatter(_JSON_FORMAT if as_json else _PLAIN_FORMAT)
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:
        try:
            fh = logging.FileHandler(os.fspath(log_file), encoding="utf-8")
        except OSError as e:
            logger.warning(f"[104] Cannot open log file '{log_file}': {e}")
        else:
            fh.setFormatter(fmt)
            logger.addHandler(fh)

    logging.captureWarnings(True)
    logging.getLogger("py.warnings").setLevel(
        logging.ERROR if suppress_warnings else logging.WARNING
    )
