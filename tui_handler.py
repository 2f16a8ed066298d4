import curses
from editor_state import EditorState, Frame, commit_input, enter_digit

QUIT_KEY = ord('q')
SAVE_KEY = ord('w')

ENTER_KEYS = (curses.KEY_ENTER, ord('\n'), ord('\r'))
DELETE_KEYS = (curses.KEY_BACKSPACE, curses.KEY_DC, 127, 8)

# Column layout of a grid row
OFFSET_WIDTH = 10
CELL_WIDTH = 3

# Status line field widths
CURSOR_FIELD = 20
BUFFER_FIELD = 20

# --- Display Functions ---

def init_tui(stdscr: 'curses._CursesWindow') -> None:
    """
    Initializes the curses environment: cursor visibility and color pairs.

    Args:
        stdscr: The main screen object provided by curses.wrapper.
    """
    # The selected byte is highlighted, the hardware cursor only gets in the way
    try:
        curses.curs_set(0)
    except curses.error:
        pass

    if curses.has_colors():
        curses.start_color()
        # Pair 1: Normal text (White on Black)
        curses.init_pair(1, curses.COLOR_WHITE, curses.COLOR_BLACK)
        # Pair 2: Header / status line (Black on Cyan)
        curses.init_pair(2, curses.COLOR_BLACK, curses.COLOR_CYAN)
        # Pair 3: Selected byte (Black on White)
        curses.init_pair(3, curses.COLOR_BLACK, curses.COLOR_WHITE)
        # Pair 4: Pending hex input over the selected byte (White on Blue)
        curses.init_pair(4, curses.COLOR_WHITE, curses.COLOR_BLUE)


def _put(stdscr: 'curses._CursesWindow', y: int, x: int, text: str, attr: int = 0) -> None:
    # Writing into the bottom-right cell or past the edge raises on small terminals
    try:
        stdscr.addstr(y, x, text, attr)
    except curses.error:
        pass


def _ascii_char(token: str) -> str:
    value = int(token, 16)
    return chr(value) if 32 <= value <= 126 else '.'


def visible_scroll_row(frame: Frame, scroll_row: int, display_rows: int) -> int:
    """
    Returns the first grid row to draw so the cursor row stays on screen.
    """
    display_rows = max(1, display_rows)
    total_rows = (len(frame.tokens) + frame.row_width - 1) // frame.row_width
    cursor_row = frame.cursor_index // frame.row_width

    if cursor_row < scroll_row:
        scroll_row = cursor_row
    elif cursor_row >= scroll_row + display_rows:
        scroll_row = cursor_row - display_rows + 1

    return max(0, min(scroll_row, max(0, total_rows - display_rows)))


def draw_screen(stdscr: 'curses._CursesWindow', frame: Frame, scroll_row: int = 0) -> int:
    """
    Redraws the header, the hex grid and the status line from a frame.

    Args:
        stdscr: The main screen object.
        frame: Snapshot of the editor state. Not kept after the call.
        scroll_row: First grid row shown by the previous redraw.

    Returns:
        The first grid row shown by this redraw.
    """
    stdscr.erase()
    max_y, max_x = stdscr.getmaxyx()
    display_rows = max_y - 2  # header and status line

    size = len(frame.tokens)
    width = frame.row_width

    # --- Header ---
    header = f" {frame.filepath} | Size: {size} bytes "
    _put(stdscr, 0, 0, header.ljust(max_x)[:max_x], curses.color_pair(2) | curses.A_BOLD)

    scroll_row = visible_scroll_row(frame, scroll_row, display_rows)
    ascii_x = OFFSET_WIDTH + width * CELL_WIDTH + 2

    # --- Grid ---
    for screen_row in range(1, max_y - 1):
        row_start = (scroll_row + screen_row - 1) * width
        if row_start >= size:
            break

        _put(stdscr, screen_row, 0, f"{row_start:08X}:", curses.A_DIM)

        # The last row may be short
        row = frame.tokens[row_start:min(row_start + width, size)]
        for i, token in enumerate(row):
            index = row_start + i
            attr = curses.color_pair(1)
            text = token
            if index == frame.cursor_index:
                attr = curses.color_pair(3) | curses.A_BOLD
                if frame.input_digits:
                    # Typed digits over whatever is still left of the old value
                    text = frame.input_digits + token[len(frame.input_digits):]
                    attr = curses.color_pair(4) | curses.A_BOLD
            _put(stdscr, screen_row, OFFSET_WIDTH + i * CELL_WIDTH, text, attr)
            _put(stdscr, screen_row, ascii_x + i, _ascii_char(token), attr)

    # --- Status line ---
    status_y = max_y - 1
    cursor_info = f"Cursor: {frame.cursor_index:08X}".ljust(CURSOR_FIELD)
    buffer_info = f"Buffer: {frame.input_digits}".ljust(BUFFER_FIELD)
    status_line = (cursor_info + buffer_info + frame.status_message).ljust(max_x)
    # The last column of the last row cannot be written without an error
    _put(stdscr, status_y, 0, status_line[:max_x - 1], curses.color_pair(2))

    stdscr.refresh()
    return scroll_row


# --- Input Functions ---

def handle_keypress(key: int, state: EditorState) -> str:
    """
    Applies one keypress to the state.

    The status message is cleared first. Saving and quitting are left to
    the caller; everything else is done here.

    Returns:
        One of 'QUIT', 'SAVE', 'MOVE', 'DELETE', 'COMMIT', 'DIGIT', 'NO_OP'.
    """
    state.status_message = ""

    if key == QUIT_KEY:
        return 'QUIT'

    if key == SAVE_KEY:
        return 'SAVE'

    cursor = state.cursor
    moves = {
        curses.KEY_LEFT: cursor.move_left,
        curses.KEY_RIGHT: cursor.move_right,
        curses.KEY_UP: cursor.move_up,
        curses.KEY_DOWN: cursor.move_down,
    }
    if key in moves:
        moves[key]()
        return 'MOVE'

    if key in DELETE_KEYS:
        state.hex_input.backspace()
        return 'DELETE'

    if key in ENTER_KEYS:
        commit_input(state)
        return 'COMMIT'

    if 0 <= key < 128 and enter_digit(state, chr(key)) is not None:
        return 'DIGIT'

    return 'NO_OP'
