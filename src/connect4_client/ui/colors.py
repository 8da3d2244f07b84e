from __future__ import annotations
from connect4_client.config import USE_COLOR

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"

# What each part of the screen is drawn in
PLAYER = "\033[31m"
CPU = "\033[34m"
EMPTY = "\033[90m"
WINNING_RUN = "\033[32m\033[7m"  # green, reversed
STATUS = "\033[36m"


def c(s: str, code: str) -> str:
    if not USE_COLOR:
        return s
    return f"{code}{s}{RESET}"
