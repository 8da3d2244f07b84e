# src/connect4_client/config.py

from __future__ import annotations

import os

ROWS = 6
COLS = 7
CONNECT_N = 4

# UI toggles
USE_COLOR = True
CLEAR_SCREEN = True

# Pauses between replayed events so piece drops aren't instant
DROP_DELAY_SEC = 0.10
HIGHLIGHT_BLINKS = 5
HIGHLIGHT_DELAY_SEC = 0.30

# Game server
API_BASE_URL = os.environ.get("CONNECT4_API_URL", "http://localhost:5000")
API_TIMEOUT_SEC = float(os.environ.get("CONNECT4_API_TIMEOUT", "10"))

# Local store for finished games
SAVE_FILE = os.environ.get("CONNECT4_SAVE_FILE", os.path.join("data", "saved_games.csv"))

LOG_LEVEL = os.environ.get("CONNECT4_LOG_LEVEL", "WARNING")
