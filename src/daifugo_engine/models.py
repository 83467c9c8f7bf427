"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import (
    JOKER_ID, JOKER_RANK, JOKER_SUIT, PHASE_LOBBY, ROLE_CITIZEN,
    SUIT_SYMBOLS, card_id_for, rank_label,
)


@dataclass(frozen=True)
class Card:
    id: str
    suit: str  # S|H|D|C|JOKER
    rank: int  # 3..15, or JOKER_RANK

    @classmethod
    def of(cls, rank: int, suit: str) -> 'Card':
        return cls(id=card_id_for(rank, suit), suit=suit, rank=rank)

    @classmethod
    def joker(cls) -> 'Card':
        return cls(id=JOKER_ID, suit=JOKER_SUIT, rank=JOKER_RANK)

    @property
    def is_joker(self) -> bool:
        return self.suit == JOKER_SUIT and self.rank == JOKER_RANK

    def __str__(self) -> str:
        if self.is_joker:
            return SUIT_SYMBOLS[JOKER_SUIT]
        return f"{rank_label(self.rank)}{SUIT_SYMBOLS.get(self.suit, self.suit)}"


@dataclass(frozen=True)
class SequenceLock:
    anchor_rank: int
    required_count: int
    ascending: bool


@dataclass
class Player:
    id: str
    name: str
    seat: int
    hand: List[Card] = field(default_factory=list)
    finished: bool = False
    role: str = ROLE_CITIZEN  # citizen|wolf, unused by the card rules

    @property
    def hand_count(self) -> int:
        return len(self.hand)


@dataclass
class FieldState:
    last_played_cards: List[Card] = field(default_factory=list)
    is_revolution: bool = False  # survives reset()
    is_reversal: bool = False    # eleven-back, cleared on reset()
    suit_lock: Optional[str] = None
    sequence_lock: Optional[SequenceLock] = None
    last_played_player_index: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not self.last_played_cards

    @property
    def last_played_count(self) -> int:
        return len(self.last_played_cards)

    @property
    def is_reversed(self) -> bool:
        return self.is_revolution != self.is_reversal

    def reset(self) -> List[Card]:
        """Clear the trick and return the cards that were on the field."""
        cleared = self.last_played_cards
        self.last_played_cards = []
        self.is_reversal = False
        self.suit_lock = None
        self.sequence_lock = None
        self.last_played_player_index = None
        return cleared


@dataclass
class PendingEffect:
    kind: str  # transfer|discard
    count: int
    player_index: int


@dataclass
class MatchState:
    players: List[Player] = field(default_factory=list)
    current_player_index: int = 0
    phase: str = PHASE_LOBBY  # lobby|dealing|playing|wolf_action|voting|result
    field_state: FieldState = field(default_factory=FieldState)
    pass_count: int = 0
    pending_effect: Optional[PendingEffect] = None
    last_card_player_index: Optional[int] = None
    finish_order: List[str] = field(default_factory=list)
    discard_pile: List[Card] = field(default_factory=list)
    deck: List[Card] = field(default_factory=list)
    version: int = 0
    game_log: List[str] = field(default_factory=list)

    @property
    def active_players(self) -> List[Player]:
        return [p for p in self.players if not p.finished]

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    def player_index(self, player_id: str) -> Optional[int]:
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return None
