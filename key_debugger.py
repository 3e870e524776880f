# key_debugger.py
"""Key debugger: shows how kedit decodes each key press.

Runs the terminal in the same raw mode as the editor and prints, for every
key, the raw bytes received, the decoded key event and the action it is
bound to. Press 'q' to quit.
"""
import os
import sys
from typing import Optional

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))

from kedit.core.Kedit import Kedit  # noqa: E402
from kedit.ui.KeyBinder import Key  # noqa: E402
from kedit.ui.TerminalAppMode import TerminalAppMode  # noqa: E402
from kedit.utils.utils import load_config  # noqa: E402


def describe(key, raw: bytes, editor: Kedit) -> list[str]:
    """Returns the report lines for one decoded key."""
    lines = [
        f"{'Bytes (raw):':<20} {raw!r}",
        f"{'Decoded:':<20} {key!r}",
    ]
    if isinstance(key, Key):
        lines.append(f"{'Key name:':<20} {key.name}")
    elif 32 <= key <= 126:
        lines.append(f"{'As char:':<20} '{chr(key)}'")
    action = editor.keybinder.lookup(int(key))
    if action:
        lines.append(f"{'Bound action:':<20} {action}")
    elif editor.keybinder.is_insertable(key):
        lines.append(f"{'Bound action:':<20} (insert)")
    else:
        lines.append(f"{'Bound action:':<20} (ignored)")
    return lines


def main(terminal: TerminalAppMode) -> None:
    received = bytearray()

    def read_byte(timeout: Optional[float]) -> Optional[int]:
        byte = terminal.read_byte(timeout)
        if byte is not None:
            received.append(byte)
        return byte

    editor = Kedit(load_config(), read_byte=read_byte, write=lambda data: None)
    terminal.write(b"kedit key debugger. Press any key to see its code. Press 'q' to quit.\r\n")

    while True:
        received.clear()
        key = editor.keybinder.get_key_input()
        if key is None:
            continue
        if key == ord("q"):
            break
        report = describe(key, bytes(received), editor)
        terminal.write(("\r\n".join(report) + "\r\n" + "-" * 40 + "\r\n").encode("utf-8"))


if __name__ == "__main__":
    terminal = TerminalAppMode()
    try:
        terminal.enter()
        main(terminal)
    except OSError as e:
        print(f"An error occurred: {e}", file=sys.stderr)
    finally:
        terminal.exit()
    print("Debugger finished.")
