# src/daifugo_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Roster / phase errors
ROOM_FULL = "ROOM_FULL"
INVALID_PLAYER_COUNT = "INVALID_PLAYER_COUNT"
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
WRONG_PHASE = "WRONG_PHASE"

# Turn errors
NOT_YOUR_TURN = "NOT_YOUR_TURN"
EFFECT_PENDING = "EFFECT_PENDING"
NO_PENDING_EFFECT = "NO_PENDING_EFFECT"
CANNOT_PASS = "CANNOT_PASS"
ACTION_NOT_ALLOWED = "ACTION_NOT_ALLOWED"

# Selection errors
OWNERSHIP_MISMATCH = "OWNERSHIP_MISMATCH"
DUPLICATE_CARDS = "DUPLICATE_CARDS"
OBLIGATION_COUNT_MISMATCH = "OBLIGATION_COUNT_MISMATCH"

# Play legality errors
EMPTY_SELECTION = "EMPTY_SELECTION"
PATTERN_MISMATCH = "PATTERN_MISMATCH"
COUNT_MISMATCH = "COUNT_MISMATCH"
SUIT_LOCK_VIOLATION = "SUIT_LOCK_VIOLATION"
SEQUENCE_LOCK_VIOLATION = "SEQUENCE_LOCK_VIOLATION"
RANK_TOO_LOW = "RANK_TOO_LOW"

INTERNAL_ERROR = "INTERNAL_ERROR"

# Helper function to raise common errors
def raise_error(code: str, message: str):
    raise GameError(code, message)
