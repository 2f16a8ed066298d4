import argparse
import curses
import logging
import sys
from typing import List, Optional
from editor_state import BYTES_PER_ROW, EditorState, LoadError, load_file, save_file, snapshot
from tui_handler import init_tui, draw_screen, handle_keypress

logger = logging.getLogger(__name__)


def main(stdscr: 'curses._CursesWindow', state: EditorState) -> None:
    """
    The main application loop for the hex editor.

    Args:
        stdscr: The curses window object.
        state: The loaded editing session.
    """
    # 1. Initialization
    init_tui(stdscr)
    scroll_row = draw_screen(stdscr, snapshot(state))

    # 2. Main Loop
    while True:
        # Block until a key arrives
        key = stdscr.getch()
        if key == -1:
            continue

        if key == curses.KEY_RESIZE:
            scroll_row = draw_screen(stdscr, snapshot(state), scroll_row)
            continue

        command = handle_keypress(key, state)

        if command == 'QUIT':
            break

        if command == 'SAVE':
            save_file(state)

        scroll_row = draw_screen(stdscr, snapshot(state), scroll_row)


# --- Entry Point ---

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hexedit',
        description='Edit the bytes of a file in the terminal. '
                    'Arrows move, hex digits type, Enter writes the byte, '
                    'w saves, q quits.')
    parser.add_argument('file', help='the file to edit')
    parser.add_argument('--row-width', type=int, default=BYTES_PER_ROW, metavar='N',
                        help='bytes per grid row (default: %(default)s)')
    parser.add_argument('--auto-commit', action='store_true',
                        help='write the byte as soon as two digits are typed')
    parser.add_argument('--log-file', metavar='PATH',
                        help='write debug logging to PATH')
    return parser


def setup_logging(log_file: Optional[str]) -> None:
    # Anything printed while curses owns the screen corrupts it
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG,
            format='%(asctime)s %(name)s %(levelname)s: %(message)s')
    else:
        logging.getLogger().addHandler(logging.NullHandler())


def run_editor(argv: Optional[List[str]] = None) -> None:
    """
    Parses the command line, loads the file and runs the editor inside
    curses.wrapper, which restores the terminal on every exit path.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.row_width < 1:
        parser.error('--row-width must be at least 1')

    setup_logging(args.log_file)

    # Load before touching the terminal so failures never show a partial UI
    try:
        state = load_file(args.file, row_width=args.row_width, auto_commit=args.auto_commit)
    except LoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    curses.wrapper(main, state)
    logger.debug("Session for %s ended", args.file)


if __name__ == "__main__":
    run_editor()
