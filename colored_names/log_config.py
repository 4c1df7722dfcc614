"""
Centralized logging configuration for colored player names.

Controls log verbosity across the engine, the sync adapter and the CLI.
Set VERBOSE_LOGGING=true in environment to see detailed debug logs.
"""
import logging
import os
from typing import Any, Optional

ROOT_LOGGER_NAME = "colored_names"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _is_verbose() -> bool:
    """
    Check if verbose logging is enabled.

    Lazy evaluation to avoid circular import with settings module.

    :return: True if verbose logging is enabled
    """
    try:
        from colored_names.config.settings import peek_settings
        settings = peek_settings()
        if settings is not None:
            return settings.logging.verbose_logging
    except (ImportError, AttributeError):
        pass

    # Fallback to environment variable during initialization
    return os.environ.get("VERBOSE_LOGGING", "false").lower() in (
        "true",
        "1",
        "yes",
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return a logger below the package root logger.

    :param name: Dotted logger name; the package root logger when omitted
    :return: The logger instance
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(verbose: Optional[bool] = None) -> None:
    """
    Install a stream handler on the package root logger.

    Safe to call more than once; only the level changes on later calls.

    :param verbose: Force DEBUG output; defaults to VERBOSE_LOGGING
    """
    if verbose is None:
        verbose = _is_verbose()
    root = get_logger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


def log_info(message: str, *args: Any) -> None:
    """Log informational messages (always shown)."""
    get_logger().info(message, *args)


def log_warning(message: str, *args: Any) -> None:
    """Log warning messages (always shown)."""
    get_logger().warning(message, *args)


def log_error(message: str, *args: Any) -> None:
    """Log error messages (always shown)."""
    get_logger().error(message, *args)


def log_debug(message: str, *args: Any) -> None:
    """Log debug messages (only shown when VERBOSE_LOGGING=true)."""
    if _is_verbose():
        get_logger().debug(message, *args)
