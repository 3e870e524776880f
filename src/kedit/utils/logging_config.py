# kedit/utils/logging_config.py
"""kedit.utils.logging_config
===========================

Logging setup for the kedit editor.

The editor owns the whole terminal while it runs, so the main log goes to a
rotating file and console output is off unless the configuration asks for it.

Features:
    - Rotating file logging for general editor events (editor.log).
    - Optional console logging to stderr with a configurable level.
    - Optional separate error log file (error.log) for ERROR and CRITICAL events.
    - Optional key event tracing (keytrace.log) enabled via the KEDIT_KEYTRACE
      environment variable.
    - Fallback to the system temp directory when the log directory cannot be created.
    - Safe reconfiguration: existing handlers are replaced, so repeated calls
      (as in tests) do not duplicate records.

Usage:
    >>> from kedit.utils import logging_config
    >>> logging_config.setup_logging({"logging": {"file_level": "INFO"}})

Globals:
    logger: Main application logger ("kedit").
    KEY_LOGGER: Logger for decoded key events ("kedit.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


# ======================== Global loggers ========================
logger = logging.getLogger("kedit")
KEY_LOGGER = logging.getLogger("kedit.keyevents")

KEYTRACE_ENV = "KEDIT_KEYTRACE"
FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"


def _ensure_log_dir(path: str) -> str:
    """Creates the directory of *path*, or returns a temp-dir path on failure."""
    log_dir = os.path.dirname(path)
    if log_dir and not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError as e_mkdir:
            print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
            path = os.path.join(tempfile.gettempdir(), os.path.basename(path) or "kedit.log")
            print(f"Logging to temporary file: '{path}'", file=sys.stderr)
    return path


def _rotating_handler(
    path: str, max_bytes: int, backup_count: int, level: int, formatter: logging.Formatter
) -> Optional[logging.Handler]:
    try:
        handler = logging.handlers.RotatingFileHandler(
            _ensure_log_dir(path), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    except OSError as e_fh:
        print(f"Error setting up file logger for '{path}': {e_fh}. File logging may be impaired.", file=sys.stderr)
        return None
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


# --- Logging Setup Function ---
def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures the root logger and the key-trace logger.

    Up to four independent handlers are set up:

    1. File handler: rotating ``editor.log`` (2 MiB x 5) from ``file_level``
       (default DEBUG) upward.
    2. Console handler: optional ``stderr`` output at ``console_level``
       (default WARNING); off unless ``log_to_console`` is true.
    3. Error-file handler: optional rotating ``error.log`` with ERROR and
       CRITICAL records only.
    4. Key-event handler: rotating ``keytrace.log`` attached to
       ``kedit.keyevents`` when ``KEDIT_KEYTRACE`` is ``1/true/yes``.

    Args:
        config (dict | None): Application configuration; only the
            ``["logging"]`` section is consulted (``file_level``,
            ``console_level``, ``log_to_console``, ``separate_error_log``,
            ``file``).

    Notes:
        Never raises; handler setup failures are reported on stderr and the
        remaining handlers are still installed.
    """
    logging_config = (config or {}).get("logging", {})
    log_filename = logging_config.get("file", "editor.log")
    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    file_formatter = logging.Formatter(FILE_FORMAT)
    file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5, log_file_level, file_formatter)

    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s"))
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_log_filename = os.path.join(os.path.dirname(log_filename), "error.log")
        error_file_handler = _rotating_handler(
            error_log_filename, 1 * 1024 * 1024, 3, logging.ERROR, file_formatter
        )

    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing root handlers to avoid duplicates
    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)
    root_logger.setLevel(log_file_level)

    # Key Event Logger
    key_event_logger = logging.getLogger("kedit.keyevents")
    key_event_logger.propagate = False
    key_event_logger.setLevel(logging.DEBUG)
    key_event_logger.handlers = []

    if os.environ.get(KEYTRACE_ENV, "").lower() in {"1", "true", "yes"}:
        key_trace_filename = os.path.join(os.path.dirname(log_filename), "keytrace.log")
        key_trace_handler = _rotating_handler(
            key_trace_filename, 1 * 1024 * 1024, 3, logging.DEBUG, logging.Formatter("%(asctime)s - %(message)s")
        )
        if key_trace_handler:
            key_event_logger.addHandler(key_trace_handler)
            key_event_logger.disabled = False
            logging.info("Key event tracing enabled, logging to '%s'.", key_trace_filename)
        else:
            key_event_logger.disabled = True
    else:
        key_event_logger.addHandler(logging.NullHandler())
        key_event_logger.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info("Logging setup complete. Root logger level: %s.", logging.getLevelName(root_logger.level))
    if file_handler:
        logging.info(f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}.")
    if console_handler:
        logging.info(f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}.")
    if error_file_handler:
        logging.info("Error logging to 'error.log' at level: ERROR.")
