import logging
import string
from dataclasses import dataclass, field
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

# Grid columns per row, also the step for up/down navigation
BYTES_PER_ROW = 8

SAVE_OK_MESSAGE = "Save was successful"
SAVE_FAILED_MESSAGE = "Save was unsuccessful"

HEX_DIGITS = frozenset(string.hexdigits)


class EditorError(Exception):
    """Base class for errors raised by the editor core."""


class LoadError(EditorError):
    """The file could not be opened for editing. Fatal at startup."""


class DecodeError(EditorError):
    """A buffer token does not decode as exactly two hex digits."""

    def __init__(self, index: int, token: str) -> None:
        super().__init__(f"Token {token!r} at index {index} is not a hex byte")
        self.index = index
        self.token = token


def is_hex_byte(text: str) -> bool:
    return len(text) == 2 and all(c in HEX_DIGITS for c in text)


class ByteBuffer:
    """
    The bytes being edited, held as two-character uppercase hex tokens so
    they can be drawn directly. The length is fixed once loaded.
    """

    def __init__(self, tokens: Iterable[str]) -> None:
        self._tokens = list(tokens)

    @classmethod
    def load(cls, raw: bytes) -> "ByteBuffer":
        return cls(f"{b:02X}" for b in raw)

    def __len__(self) -> int:
        return len(self._tokens)

    def __getitem__(self, index: int) -> str:
        return self._tokens[index]

    @property
    def tokens(self) -> tuple:
        return tuple(self._tokens)

    def overwrite(self, index: int, hex_text: str) -> None:
        # Callers only ever hand over a complete accumulator
        assert is_hex_byte(hex_text), hex_text
        self._tokens[index] = hex_text.upper()

    def to_bytes(self) -> bytes:
        """
        Decodes every token back into a byte value.

        Raises:
            DecodeError: if a token is not exactly two hex digits.
        """
        out = bytearray()
        for index, token in enumerate(self._tokens):
            if not is_hex_byte(token):
                raise DecodeError(index, token)
            out.append(int(token, 16))
        return bytes(out)


class Cursor:
    """Selected byte index, clamped to the buffer and never wrapping."""

    def __init__(self, size: int, row_width: int = BYTES_PER_ROW) -> None:
        if size < 1:
            raise ValueError("Cursor needs a buffer of at least one byte")
        self.size = size
        self.row_width = row_width
        self.index = 0

    def _clamp(self, index: int) -> None:
        self.index = max(0, min(index, self.size - 1))

    def move_left(self) -> None:
        self._clamp(self.index - 1)

    def move_right(self) -> None:
        self._clamp(self.index + 1)

    def move_up(self) -> None:
        self._clamp(self.index - self.row_width)

    def move_down(self) -> None:
        self._clamp(self.index + self.row_width)


class HexInput:
    """
    Holds the 0-2 hex digits typed for the selected byte.

    With auto_commit the byte is written as soon as the second digit
    arrives, otherwise it waits for an explicit commit.
    """

    def __init__(self, auto_commit: bool = False) -> None:
        self.auto_commit = auto_commit
        self.digits = ""

    @property
    def is_complete(self) -> bool:
        return len(self.digits) == 2

    def push(self, char: str) -> bool:
        """Appends a hex digit. Returns False if it was dropped."""
        if len(char) != 1 or char not in HEX_DIGITS or self.is_complete:
            return False
        self.digits += char.upper()
        return True

    def backspace(self) -> None:
        self.digits = self.digits[:-1]

    def take(self) -> str:
        digits, self.digits = self.digits, ""
        return digits


@dataclass
class EditorState:
    """Stores the entire state of an editing session."""
    filepath: str
    buffer: ByteBuffer
    cursor: Cursor
    hex_input: HexInput = field(default_factory=HexInput)

    # Outcome of the last save, cleared on every keypress
    status_message: str = ""


@dataclass(frozen=True)
class Frame:
    """Read-only view of the state handed to the display for one redraw."""
    filepath: str
    tokens: tuple
    cursor_index: int
    input_digits: str
    status_message: str
    row_width: int = BYTES_PER_ROW


def snapshot(state: EditorState) -> Frame:
    return Frame(
        filepath=state.filepath,
        tokens=state.buffer.tokens,
        cursor_index=state.cursor.index,
        input_digits=state.hex_input.digits,
        status_message=state.status_message,
        row_width=state.cursor.row_width,
    )


def load_file(filepath: str, row_width: int = BYTES_PER_ROW,
              auto_commit: bool = False) -> EditorState:
    """
    Loads the contents of the file into a fresh EditorState.

    Raises:
        LoadError: if the file is missing, unreadable or empty.
    """
    try:
        with open(filepath, 'rb') as f:
            raw = f.read()
    except FileNotFoundError as exc:
        raise LoadError(f"File not found at '{filepath}'") from exc
    except OSError as exc:
        raise LoadError(f"Cannot read '{filepath}': {exc.strerror or exc}") from exc

    if not raw:
        raise LoadError(f"File '{filepath}' is empty, nothing to edit")

    logger.debug("Loaded %d bytes from %s", len(raw), filepath)
    return EditorState(
        filepath=filepath,
        buffer=ByteBuffer.load(raw),
        cursor=Cursor(len(raw), row_width),
        hex_input=HexInput(auto_commit),
    )


def save_file(state: EditorState) -> bool:
    """
    Writes the buffer back over state.filepath and records the outcome in
    state.status_message. The buffer itself is never touched, so a failed
    save leaves every edit in place.

    Returns:
        True if the whole file was written.
    """
    try:
        data = state.buffer.to_bytes()
        # 'wb' truncates, so the file is fully replaced
        with open(state.filepath, 'wb') as f:
            f.write(data)
    except (DecodeError, OSError) as exc:
        logger.warning("Error saving file '%s': %s", state.filepath, exc)
        state.status_message = SAVE_FAILED_MESSAGE
        return False

    logger.debug("Saved %d bytes to %s", len(data), state.filepath)
    state.status_message = SAVE_OK_MESSAGE
    return True


def commit_input(state: EditorState) -> bool:
    """
    Writes the pending digits to the selected byte.

    Returns:
        True if the buffer changed, False when fewer than two digits are held.
    """
    if not state.hex_input.is_complete:
        return False
    index = state.cursor.index
    state.buffer.overwrite(index, state.hex_input.take())
    logger.debug("Byte %d set to %s", index, state.buffer[index])
    return True


def enter_digit(state: EditorState, char: str) -> Optional[bool]:
    """
    Feeds one typed character to the accumulator.

    Returns:
        None if the character was ignored, True if it completed and wrote a
        byte (auto-commit only), False if it was only accumulated.
    """
    if not state.hex_input.push(char):
        return None
    if state.hex_input.auto_commit:
        return commit_input(state)
    return False
