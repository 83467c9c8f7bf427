"""Game constants and utilities"""

from typing import Dict, List

# Rank values: 3 is the weakest and 2 (15) the strongest in normal order
RANK_THREE = 3
RANK_FIVE = 5
RANK_SEVEN = 7
RANK_EIGHT = 8
RANK_TEN = 10
RANK_JACK = 11
RANK_QUEEN = 12
RANK_KING = 13
RANK_ACE = 14
RANK_TWO = 15
JOKER_RANK = 99

NORMAL_ORDER = list(range(RANK_THREE, RANK_TWO + 1))
SUITS = ['S', 'H', 'D', 'C']
JOKER_SUIT = 'JOKER'
JOKER_ID = 'JOKER'

RANK_LABELS: Dict[int, str] = {
    3: '3', 4: '4', 5: '5', 6: '6', 7: '7', 8: '8', 9: '9', 10: '10',
    11: 'J', 12: 'Q', 13: 'K', 14: 'A', 15: '2', JOKER_RANK: 'JOKER',
}
SUIT_SYMBOLS = {'S': '♠', 'H': '♥', 'D': '♦', 'C': '♣', JOKER_SUIT: '🃏'}

DECK_SIZE = 53
MIN_PLAYERS = 3
MAX_PLAYERS = 5

# Revolution needs at least this many cards of one rank
REVOLUTION_COUNT = 4

# Phases
PHASE_LOBBY = 'lobby'
PHASE_DEALING = 'dealing'
PHASE_PLAYING = 'playing'
PHASE_WOLF_ACTION = 'wolf_action'
PHASE_VOTING = 'voting'
PHASE_RESULT = 'result'

# Roles (reserved for the wolf sub-game)
ROLE_CITIZEN = 'citizen'
ROLE_WOLF = 'wolf'

# Pending obligations
PENDING_TRANSFER = 'transfer'
PENDING_DISCARD = 'discard'


def card_id_for(rank: int, suit: str) -> str:
    if rank == JOKER_RANK:
        return JOKER_ID
    return f"{RANK_LABELS[rank]}{suit}"


def rank_label(rank: int) -> str:
    return RANK_LABELS.get(rank, str(rank))
