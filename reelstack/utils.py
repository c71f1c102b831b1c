"""
utils.py: console output helpers shared by the command line and the
synthesis executor
"""
import logging
import sys


def _color(code):
    """
    _color: returns an ANSI color sequence, empty when stdout is not a terminal
    """
    return f"\033[{code}m" if sys.stdout.isatty() else ""

RED = _color("31")
GREEN = _color("32")
YELLOW = _color("33")
BLUE = _color("34")
BOLD = _color("1")
RESET = _color("0")


def configure_logging(level: str = "INFO"):
    """
    configure_logging: sets up the root logger once for command line use
    """
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def info(msg):
    """
    info: prints message with formatting for INFO
    """
    print(f"{BLUE}[INFO] {msg}{RESET}")

def success(msg):
    """
    success: prints message with formatting for SUCCEEDED event
    """
    print(f"{GREEN}[OK] {msg}{RESET}")

def warning(msg):
    """
    warning: prints message with formatting for WARNING
    """
    print(f"{YELLOW}[WARNING] {msg}{RESET}")

def error(msg):
    """
    error: prints message with formatting for FAILED/ERROR event
    """
    print(f"{RED}[ERROR] {msg}{RESET}", file=sys.stderr)

def heading(msg):
    """
    heading: prints message with formatting for heading for more results
    """
    print(f"\n{BOLD}{msg}{RESET}")
