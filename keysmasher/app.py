"""Application entry point for the keysmasher typing test."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from keysmasher.core.keys import KeystrokeInterpreter
from keysmasher.core.session import TypingSession
from keysmasher.core.words import WORDS_PER_TEST, PassageQueue

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Configure application-wide logging.

    The terminal belongs to the UI while a test runs, so records go to
    ``log_file`` when one is given; otherwise only warnings reach stderr.
    """
    if log_file:
        level = logging.DEBUG if verbose else logging.INFO
        logging.basicConfig(level=level, format=LOG_FORMAT, filename=log_file, encoding="utf-8")
    else:
        level = logging.DEBUG if verbose else logging.WARNING
        logging.basicConfig(level=level, format=LOG_FORMAT)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="keysmasher",
        description="Terminal typing test. Pass custom text to type it instead of random words.",
    )
    parser.add_argument("text", nargs="?", help="Custom text to type (split into passages of %d words)" % WORDS_PER_TEST)
    parser.add_argument("-f", "--file", help="Read the custom text from a file", type=str)
    parser.add_argument("--log-file", help="Write logs to this file", type=str)
    parser.add_argument("-v", "--verbose", help="Debug logging", action="store_true")
    args = parser.parse_args(argv)
    if args.text is not None and args.file:
        parser.error("give either TEXT or --file, not both")
    return args


def read_text_file(path: str) -> Optional[str]:
    """Return the file's contents, or None when it cannot be read."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read custom text from %s: %s", path, e)
        return None


def build_interpreter(text: Optional[str]) -> KeystrokeInterpreter:
    """Create the session, seeded from custom text when it has usable words."""
    passages = PassageQueue.from_text(text)
    session = TypingSession(passages.next_passage())
    return KeystrokeInterpreter(session, passages)


def run(argv: Optional[List[str]] = None) -> None:
    """Parse arguments, build the session and run the terminal UI until quit."""
    args = parse_args(argv)
    configure_logging(args.log_file, args.verbose)

    text = args.text
    if args.file:
        text = read_text_file(args.file)

    try:
        interpreter = build_interpreter(text)

        from keysmasher.ui.main_window import TypingApp

        app = TypingApp(interpreter)
        app.run()
    except Exception:
        logger.exception("Error starting keysmasher")
        print("Error starting keysmasher; see the log for details.", file=sys.stderr)
        sys.exit(1)

    sys.exit(app.return_code or 0)


if __name__ == "__main__":
    run()
