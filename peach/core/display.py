# peach/core/display.py

from __future__ import annotations

import re
from datetime import datetime

# ============================================================================
# TERMINAL SEQUENCES
# ============================================================================

CLEAR = "\x1b[2J\x1b[H"
RESET = "\x1b[0m"
RED = "\x1b[31m"
GREEN = "\x1b[32m"

NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
TIMESTAMP_FORMAT = "%d-%m-%Y_%H:%M:%S"

# ============================================================================
# SERVER TEXT
# ============================================================================

WELCOME_PROMPT = (
    "[Server] Welcome to Peach!\n"
    "This is an anonymous chat server, use '/join <channel>' to join a channel\n"
    "Please enter your name: "
)
INVALID_NAME_NOTICE = f"{CLEAR}\n[Server] Name you entered is invalid!\n"
CLIENT_PROMPT = f"{CLEAR}\n[Server] Which client are you using?\n\t1). Netcat\nSelect (default=1): "
COMMAND_NOT_FOUND = "[Server] Command not found!\n"
JOIN_USAGE = "[Server] Usage: /join <channel>\n"


def now() -> str:
    """Local wall-clock time as shown in transcript lines."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def is_valid_name(name: str) -> bool:
    return NAME_PATTERN.fullmatch(name) is not None


def joined_line(name: str, timestamp: str | None = None) -> str:
    return f"{GREEN}[{timestamp or now()}][{name}] joined!{RESET}\n"


def left_line(name: str, timestamp: str | None = None) -> str:
    return f"{RED}[{timestamp or now()}][{name}] Left{RESET}\n"


def message_line(name: str, text: str, timestamp: str | None = None) -> str:
    return f"[{timestamp or now()}][{name}]: {text}\n"


def render_delivery(message: str, room: str) -> str:
    """
    Redraw a client's screen for one broadcast delivery.

    The screen is cleared, the delivered text is shown, and the input
    prompt for the client's current room is printed again.
    """
    return f"{CLEAR}\n{message}\n#[{room}] Type your message: "
