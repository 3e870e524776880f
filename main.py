#!/usr/bin/env python3
# /kedit/main.py
"""
kedit Main Entry Point
======================

This script launches the kedit editor. It performs:
1) Environment Loading: reads ~/.config/kedit/.env early (KEDIT_KEYTRACE, ...).
2) Path Setup: ensures the kedit package under src/ is importable.
3) Configuration & Logging: loads config and initializes logging ASAP.
4) Core Import: imports the Kedit session after logging is ready.
5) Terminal Mode: raw mode + alternate screen, always restored in `finally`.
6) Application Run: opens the file named on the command line and runs the loop.

Usage:
    python main.py [FILE]
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

# --- Step 1: Load Environment Variables from the User's Config Directory ---
try:
    load_dotenv(dotenv_path=Path.home() / ".config" / "kedit" / ".env")
except (OSError, RuntimeError):
    # No usable HOME; the environment stays as inherited.
    pass

# --- Step 2: Set up the Python Path ---
project_src = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if os.path.isdir(project_src) and project_src not in sys.path:
    sys.path.insert(0, project_src)

# --- Step 3: Immediate Logging and Configuration Setup ---
try:
    from kedit.utils.logging_config import setup_logging
    from kedit.utils.utils import load_config

    config: dict[str, Any] = load_config()
    setup_logging(config)
    logger = logging.getLogger("kedit")
except Exception as e:
    print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
    import traceback
    traceback.print_exc()
    sys.exit(1)

# --- Step 4: Import the Core Application ---
try:
    from kedit.core.Kedit import Kedit
    from kedit.ui.TerminalAppMode import TerminalAppMode
except ImportError as e:
    logger.critical("Failed to import a critical application component: %s", e, exc_info=True)
    sys.exit(1)


def _resolve_cli_path(argv: list[str]) -> Optional[str]:
    """Returns the file argument expanded to a user path, or None."""
    if len(argv) <= 1:
        return None
    raw = argv[1].strip()
    if not raw:
        return None
    return str(Path(raw).expanduser())


def main_app_runner(terminal: TerminalAppMode, config: dict[str, Any], file_to_open: Optional[str]) -> None:
    """Builds the session on top of an entered terminal and runs it.

    Raises:
        OSError: *file_to_open* exists but cannot be read.
    """
    editor = Kedit(
        config,
        read_byte=terminal.read_byte,
        write=terminal.write,
        screen_size=terminal.get_window_size(),
        on_idle=lambda: terminal.get_window_size() if terminal.take_resize() else None,
    )
    if file_to_open:
        editor.open_file(file_to_open)
    editor.run()


def start() -> int:
    """Runs the editor and returns the process exit status."""
    logger.info("kedit starting up...")
    file_to_open = _resolve_cli_path(sys.argv)

    terminal = TerminalAppMode()
    try:
        terminal.enter()
    except OSError as e:
        logger.critical("Could not enter raw terminal mode: %s", e)
        print(f"kedit: {e}", file=sys.stderr)
        return 1

    status = 0
    error: Optional[str] = None
    try:
        main_app_runner(terminal, config, file_to_open)
        logger.info("kedit shut down gracefully.")
    except MemoryError:
        logger.critical("Out of memory, terminating.", exc_info=True)
        error = "out of memory"
        status = 1
    except OSError as e:
        logger.critical("Could not open '%s': %s", file_to_open, e, exc_info=True)
        error = f"{file_to_open}: {e.strerror or e}"
        status = 1
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        error = "unexpected error, see editor.log"
        status = 1
    finally:
        terminal.exit()

    if error:
        print(f"kedit: {error}", file=sys.stderr)
    return status


if __name__ == "__main__":
    sys.exit(start())
