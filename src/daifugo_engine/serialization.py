"""
Immutable state snapshots and their serialization.
"""

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

import orjson

from .models import Card, MatchState, SequenceLock

RECENT_LOG_SIZE = 5


@dataclass(frozen=True)
class PlayerSnapshot:
    id: str
    name: str
    seat: int
    hand: Tuple[Card, ...]
    finished: bool
    role: str

    @property
    def hand_count(self) -> int:
        return len(self.hand)


@dataclass(frozen=True)
class FieldSnapshot:
    last_played_cards: Tuple[Card, ...]
    is_revolution: bool
    is_reversal: bool
    suit_lock: Optional[str]
    sequence_lock: Optional[SequenceLock]
    last_played_player_index: Optional[int]

    @property
    def is_empty(self) -> bool:
        return not self.last_played_cards


@dataclass(frozen=True)
class PendingSnapshot:
    kind: str
    count: int
    player_index: int


@dataclass(frozen=True)
class MatchSnapshot:
    version: int
    phase: str
    players: Tuple[PlayerSnapshot, ...]
    current_player_index: int
    field: FieldSnapshot
    pass_count: int
    pending_effect: Optional[PendingSnapshot]
    last_card_player_index: Optional[int]
    finish_order: Tuple[str, ...]
    discard_count: int
    playable_card_ids: FrozenSet[str]
    recent_log: Tuple[str, ...]

    @property
    def current_player(self) -> Optional[PlayerSnapshot]:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None


def build_snapshot(state: MatchState, playable_card_ids: Iterable[str] = ()) -> MatchSnapshot:
    """Copy the mutable match state into an immutable snapshot."""
    field_state = state.field_state
    pending = state.pending_effect

    return MatchSnapshot(
        version=state.version,
        phase=state.phase,
        players=tuple(
            PlayerSnapshot(
                id=player.id,
                name=player.name,
                seat=player.seat,
                hand=tuple(player.hand),
                finished=player.finished,
                role=player.role
            )
            for player in state.players
        ),
        current_player_index=state.current_player_index,
        field=FieldSnapshot(
            last_played_cards=tuple(field_state.last_played_cards),
            is_revolution=field_state.is_revolution,
            is_reversal=field_state.is_reversal,
            suit_lock=field_state.suit_lock,
            sequence_lock=field_state.sequence_lock,
            last_played_player_index=field_state.last_played_player_index
        ),
        pass_count=state.pass_count,
        pending_effect=(
            PendingSnapshot(kind=pending.kind, count=pending.count, player_index=pending.player_index)
            if pending else None
        ),
        last_card_player_index=state.last_card_player_index,
        finish_order=tuple(state.finish_order),
        discard_count=len(state.discard_pile),
        playable_card_ids=frozenset(playable_card_ids),
        recent_log=tuple(state.game_log[-RECENT_LOG_SIZE:])
    )


def _card_dict(card: Card) -> Dict[str, Any]:
    return {"id": card.id, "suit": card.suit, "rank": card.rank}


def snapshot_to_dict(snapshot: MatchSnapshot, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Render a snapshot as a plain dictionary.

    Args:
        snapshot: Snapshot to render
        viewer_id: When given, only this player's hand is revealed

    Returns:
        Dictionary safe for JSON transmission
    """
    players = []
    for player in snapshot.players:
        rendered = {
            "id": player.id,
            "name": player.name,
            "seat": player.seat,
            "finished": player.finished,
            "role": player.role,
            "hand_count": player.hand_count
        }
        if viewer_id is None or player.id == viewer_id:
            rendered["hand"] = [_card_dict(card) for card in player.hand]
        players.append(rendered)

    field = snapshot.field
    sequence_lock = None
    if field.sequence_lock is not None:
        sequence_lock = {
            "anchor_rank": field.sequence_lock.anchor_rank,
            "required_count": field.sequence_lock.required_count,
            "ascending": field.sequence_lock.ascending
        }

    pending = None
    if snapshot.pending_effect is not None:
        pending = {
            "kind": snapshot.pending_effect.kind,
            "count": snapshot.pending_effect.count,
            "player_index": snapshot.pending_effect.player_index
        }

    # Hints describe the current player's hand, so keep them private too
    playable = sorted(snapshot.playable_card_ids)
    current = snapshot.current_player
    if viewer_id is not None and (current is None or current.id != viewer_id):
        playable = []

    return {
        "version": snapshot.version,
        "phase": snapshot.phase,
        "current_player_index": snapshot.current_player_index,
        "players": players,
        "field": {
            "last_played_cards": [_card_dict(card) for card in field.last_played_cards],
            "is_revolution": field.is_revolution,
            "is_reversal": field.is_reversal,
            "suit_lock": field.suit_lock,
            "sequence_lock": sequence_lock,
            "last_played_player_index": field.last_played_player_index
        },
        "pass_count": snapshot.pass_count,
        "pending_effect": pending,
        "last_card_player_index": snapshot.last_card_player_index,
        "finish_order": list(snapshot.finish_order),
        "discard_count": snapshot.discard_count,
        "playable_card_ids": playable,
        "recent_log": list(snapshot.recent_log)
    }


def dumps_snapshot(snapshot: MatchSnapshot, viewer_id: Optional[str] = None) -> bytes:
    """Encode a snapshot as JSON bytes."""
    return orjson.dumps(snapshot_to_dict(snapshot, viewer_id))
