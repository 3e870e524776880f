# kedit/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
The KeyBinder class turns the raw bytes arriving from the terminal into key
events and key events into editor actions.

Key Features:
- `Key`: the logical key events (arrows, Home/End, PageUp/PageDown, Delete,
  plus named values for Backspace, Escape and Enter).
- A small escape-sequence state machine (`get_key_input`) that reads the
  bytes following ESC with a short timeout and degrades to `Key.ESCAPE` on a
  lone ESC or an unknown sequence.
- Keybindings loaded from built-in defaults overridden by the ``[keybindings]``
  section of the configuration, decoded from key specs such as ``"ctrl+s"``.
- An action map from decoded keys to methods of the `Kedit` session, with
  printable bytes falling through to character insertion.

Main Methods:
1. get_key_input: Reads one key event from the byte source.
2. handle_input: Dispatches one key event to the bound editor action.
3. _load_keybindings: Merges default and configured bindings.
4. _decode_keystring: Decodes a key spec into a key code.
5. _setup_action_map: Builds the key -> editor method map.
6. lookup: Reverse lookup of the action bound to a key spec.
"""

import enum
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from kedit.utils.logging_config import KEY_LOGGER

if TYPE_CHECKING:
    from kedit.core.Kedit import Kedit

DEFAULT_ESCAPE_TIMEOUT = 0.05


def ctrl_key(ch: str) -> int:
    """Returns the byte sent for Ctrl + *ch* (``ctrl_key("q") == 17``)."""
    return ord(ch) & 0x1F


class Key(enum.IntEnum):
    """Logical key events that do not map to a single plain byte."""

    ENTER = 13
    ESCAPE = 27
    BACKSPACE = 127
    ARROW_LEFT = 1000
    ARROW_RIGHT = 1001
    ARROW_UP = 1002
    ARROW_DOWN = 1003
    DEL = 1004
    HOME = 1005
    END = 1006
    PAGE_UP = 1007
    PAGE_DOWN = 1008


KeyEvent = Union[int, Key]


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    KeyBinder owns the key decoding and the key -> action mapping of a
    `Kedit` session.

    Attributes:
        editor (Kedit): Session whose actions are bound.
        config (dict): Editor configuration.
        read_byte (Callable): Byte source ``read_byte(timeout) -> int | None``.
        escape_timeout (float): Seconds to wait for each byte after ESC.
        keybindings (dict): Action name -> list of decoded key codes.
        action_map (dict): Key code -> bound editor method.
    """

    # Keys do NOT include the leading ESC, get_key_input() consumes it first.
    ESCAPE_SEQUENCE_MAP: dict[bytes, str] = {
        b"[A": "up", b"[B": "down", b"[C": "right", b"[D": "left",
        b"[H": "home", b"[F": "end", b"OH": "home", b"OF": "end",
        b"[1~": "home", b"[7~": "home", b"[4~": "end", b"[8~": "end",
        b"[3~": "del", b"[5~": "pageup", b"[6~": "pagedown",
    }

    NAMED_KEYS: dict[str, int] = {
        "left": Key.ARROW_LEFT,
        "right": Key.ARROW_RIGHT,
        "up": Key.ARROW_UP,
        "down": Key.ARROW_DOWN,
        "home": Key.HOME,
        "end": Key.END,
        "pageup": Key.PAGE_UP,
        "pgup": Key.PAGE_UP,
        "pagedown": Key.PAGE_DOWN,
        "pgdn": Key.PAGE_DOWN,
        "del": Key.DEL,
        "delete": Key.DEL,
        "backspace": Key.BACKSPACE,
        "enter": Key.ENTER,
        "return": Key.ENTER,
        "esc": Key.ESCAPE,
        "escape": Key.ESCAPE,
        "tab": 9,
        "space": ord(" "),
    }

    def __init__(self, editor: "Kedit") -> None:
        logging.debug("KeyBinder initialized with editor: %s", editor)
        self.editor = editor
        self.config = editor.config
        self.read_byte = editor.read_byte
        self.escape_timeout: float = float(
            self.config.get("editor", {}).get("escape_timeout", DEFAULT_ESCAPE_TIMEOUT)
        )

        self.keybindings = self._load_keybindings()
        self.action_map = self._setup_action_map()

    # ---------------------- Key decoding --------------------
    def get_key_input(self) -> Optional[KeyEvent]:
        """Reads one key event.

        Blocks for the first byte. After an ESC the next bytes are read with
        ``escape_timeout``; a missing byte or an unrecognised sequence yields
        `Key.ESCAPE`.

        Returns:
            A `Key` member, a plain byte value, or None when the blocking read
            was interrupted without data (e.g. by a resize signal).
        """
        c = self.read_byte(None)
        if c is None:
            return None
        if c != Key.ESCAPE:
            key = self._as_key(c)
            KEY_LOGGER.debug(f"byte {c!r} -> {key!r}")
            return key

        seq = bytearray()
        for _ in range(2):
            nxt = self.read_byte(self.escape_timeout)
            if nxt is None:
                KEY_LOGGER.debug(f"ESC + {bytes(seq)!r} -> ESCAPE (timeout)")
                return Key.ESCAPE
            seq.append(nxt)

        if seq[0] == ord("[") and seq[1] in b"0123456789":
            nxt = self.read_byte(self.escape_timeout)
            if nxt is None:
                return Key.ESCAPE
            seq.append(nxt)

        mapped = self.ESCAPE_SEQUENCE_MAP.get(bytes(seq))
        if mapped is None:
            logging.warning(f"get_key_input: unknown escape sequence: ESC + {bytes(seq)!r}")
            return Key.ESCAPE

        key = self._as_key(self._decode_keystring(mapped))
        KEY_LOGGER.debug(f"ESC + {bytes(seq)!r} -> {key!r}")
        return key

    @staticmethod
    def _as_key(code: int) -> KeyEvent:
        try:
            return Key(code)
        except ValueError:
            return code

    def _decode_keystring(self, key_input: Union[str, int]) -> int:
        """Decodes a key specification into a key code.

        Args:
            key_input: A key code, a named key (``"pageup"``), a single
                character, or a ``ctrl+`` chord (``"ctrl+q"``).

        Returns:
            The key code.

        Raises:
            ValueError: The spec is empty, unknown or uses an unknown modifier.
        """
        if isinstance(key_input, bool) or not isinstance(key_input, (int, str)):
            raise ValueError(f"Invalid key_input type: {type(key_input)}. Expected str or int.")
        if isinstance(key_input, int):
            return key_input

        s = key_input.strip().lower()
        if not s:
            raise ValueError("Key string cannot be empty.")
        if s in self.NAMED_KEYS:
            return int(self.NAMED_KEYS[s])
        if len(s) == 1:
            return ord(s)

        parts = s.split("+")
        base = parts[-1].strip()
        modifiers = set(p.strip() for p in parts[:-1])
        if modifiers != {"ctrl"}:
            raise ValueError(f"Unknown or unhandled modifiers {sorted(modifiers)} in '{key_input}'")
        if len(base) == 1 and ("a" <= base <= "z" or base in "[\\]^_"):
            return ctrl_key(base)
        raise ValueError(f"Unknown base key '{base}' in '{key_input}'")

    # ---------------------- Bindings --------------------
    def _load_keybindings(self) -> dict[str, list[int]]:
        """Merges the default bindings with the ``[keybindings]`` config table.

        A configured value replaces the default for that action; it may be a
        single spec, a list of specs or a ``|``-separated string. Unparsable
        specs are logged and skipped.
        """
        default_keybindings: dict[str, list[Union[int, str]]] = {
            "find": ["ctrl+f"],
            "save_file": ["ctrl+s"],
            "quit": ["ctrl+q"],
            "redraw": ["ctrl+l"],
            "handle_backspace": ["backspace", "ctrl+h"],
            "handle_delete": ["del"],
            "handle_enter": ["enter"],
            "handle_home": ["home"],
            "handle_end": ["end"],
            "handle_page_up": ["pageup"],
            "handle_page_down": ["pagedown"],
            "handle_up": ["up"],
            "handle_down": ["down"],
            "handle_left": ["left"],
            "handle_right": ["right"],
            "cancel_operation": ["esc"],
        }

        user_keybindings: dict[str, Any] = self.config.get("keybindings", {}) or {}
        parsed: dict[str, list[int]] = {}

        for action, default_spec in default_keybindings.items():
            spec = user_keybindings.get(action, default_spec)
            if not spec:
                logging.debug("Keybinding for action %r is disabled or empty.", action)
                continue

            if isinstance(spec, list):
                specs = spec
            elif isinstance(spec, str) and "|" in spec:
                specs = [s.strip() for s in spec.split("|")]
            else:
                specs = [spec]

            codes: list[int] = []
            for item in specs:
                try:
                    code = self._decode_keystring(item)
                except ValueError as e:
                    logging.error(
                        "Error parsing keybinding item %r for action %r: %s. "
                        "This specific binding for the action will be ignored.",
                        item, action, e,
                    )
                    continue
                if code not in codes:
                    codes.append(code)

            if codes:
                parsed[action] = codes
            else:
                logging.warning("No valid key codes found for action %r. It will not be bound.", action)

        logging.debug("Loaded and parsed keybindings: %s", parsed)
        return parsed

    def _setup_action_map(self) -> dict[int, Callable[[], Any]]:
        """Builds the key code -> editor method map from `keybindings`."""
        action_to_method_map: dict[str, Callable[[], Any]] = {
            "find": self.editor.find,
            "save_file": self.editor.save_file,
            "quit": self.editor.quit,
            "redraw": self.editor.redraw,
            "handle_backspace": self.editor.handle_backspace,
            "handle_delete": self.editor.handle_delete,
            "handle_enter": self.editor.handle_enter,
            "handle_home": self.editor.handle_home,
            "handle_end": self.editor.handle_end,
            "handle_page_up": self.editor.handle_page_up,
            "handle_page_down": self.editor.handle_page_down,
            "handle_up": self.editor.handle_up,
            "handle_down": self.editor.handle_down,
            "handle_left": self.editor.handle_left,
            "handle_right": self.editor.handle_right,
            "cancel_operation": self.editor.handle_escape,
        }

        final_key_action_map: dict[int, Callable[[], Any]] = {}
        for action_name, key_codes in self.keybindings.items():
            method = action_to_method_map[action_name]
            for key_code in key_codes:
                existing = final_key_action_map.get(key_code)
                if existing is not None and existing.__name__ != method.__name__:
                    logging.warning(
                        f"Keybinding for action '{action_name}' (key: {key_code}) is overwriting "
                        f"an existing mapping for method '{existing.__name__}'."
                    )
                final_key_action_map[key_code] = method

        final_map_log_str = {k: v.__name__ for k, v in final_key_action_map.items()}
        logging.debug(f"Final constructed action map: {final_map_log_str}")
        return final_key_action_map

    # ---------------------- Handle Input --------------------
    @staticmethod
    def is_insertable(key: KeyEvent) -> bool:
        """True for printable ASCII, tab and bytes >= 128."""
        return key == 9 or 32 <= key <= 126 or 128 <= key <= 255

    def handle_input(self, key: KeyEvent) -> bool:
        """Processes one key event.

        Bound keys call their action, insertable bytes are inserted and
        anything else is ignored with a status message. Errors raised by an
        action are logged and reported in the status bar; `MemoryError`
        propagates.

        Returns:
            True when the key was bound or inserted.
        """
        logging.debug("handle_input: Received key event -> %r", key)
        try:
            action = self.action_map.get(int(key))
            if action is not None:
                logging.debug(f"handle_input: Key {key!r} bound to {action.__name__}")
                action()
                return True
            if self.is_insertable(key):
                self.editor.insert_char(int(key))
                return True
            self.editor._set_status_message(f"Ignored unhandled input: {key!r}")
            return False
        except MemoryError:
            raise
        except Exception as e_handler:
            logging.exception("Input handler error while processing %r", key)
            self.editor._set_status_message(f"Input handler error: {str(e_handler)[:50]}")
            return False

    def lookup(self, key_spec: Union[str, int]) -> Optional[str]:
        """Returns the action bound to *key_spec*, or None."""
        try:
            decoded_key = self._decode_keystring(key_spec)
        except ValueError:
            return None
        for action_name, key_list in self.keybindings.items():
            if decoded_key in key_list:
                return action_name
        return None
