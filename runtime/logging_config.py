import logging
from typing import IO, Optional

LOGGER_NAME = "mesh_embedding"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def setup_logging(
    log_file: Optional[str] = None,
    *,
    quiet: bool = False,
    debug: bool = False,
    file_debug: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Configure and return the shared `mesh_embedding` logger.

    The console handler writes to `stream` (stderr by default) unless
    `quiet`. With `log_file` the records also go to that file; `file_debug`
    keeps per-term debug records in the file while the console stays at INFO.
    Calling this again replaces the previous handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    # Propagate so pytest's caplog still sees records when the console is quiet.
    logger.propagate = True

    console_level = logging.DEBUG if debug else logging.INFO
    file_level = logging.DEBUG if (debug or file_debug) else logging.INFO
    logger.setLevel(min(console_level, file_level) if log_file else console_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="w")
        except OSError as exc:
            logger.warning("Could not open log file '%s': %s", log_file, exc)
        else:
            _attach(logger, file_handler, file_level)

    if not quiet:
        _attach(logger, logging.StreamHandler(stream), console_level)

    return logger
