import logging
import sys


class Log:
    """Centralized logging for the literature pipeline."""

    _logger: logging.Logger = logging.getLogger("literature")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stderr handler.

        Records go to stderr so they never mix with events written to stdout.
        The thread name is part of the format: classification runs on
        background threads and its records would otherwise be anonymous.
        """
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(threadName)s %(message)s"
                )
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error message together with the active exception traceback."""
        cls._logger.exception(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
