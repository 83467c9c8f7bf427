"""Match engine: roster, phases, plays, passes and special effects"""

import logging
import random
import uuid
from typing import List, Optional, Sequence, Set, Union

from . import errors
from .constants import (
    PENDING_DISCARD, PENDING_TRANSFER, PHASE_DEALING, PHASE_LOBBY,
    PHASE_PLAYING, PHASE_RESULT, PHASE_VOTING, PHASE_WOLF_ACTION,
)
from .effects import Effect, EffectKind, classify_effect
from .errors import GameError, raise_error
from .models import Card, FieldState, MatchState, PendingEffect, Player
from .rules import RuleConfig, default_rules
from .serialization import MatchSnapshot, build_snapshot
from .shuffle import Deck, deal_cards, sort_hand
from .validate import (
    check_play, detect_sequence_lock, detect_suit_lock,
    playable_card_ids as hand_playable_card_ids,
)

logger = logging.getLogger(__name__)

CardSelection = Sequence[Union[Card, str]]


class DaifugoEngine:
    """
    Owns a single match and applies actions to it.

    Every public action either applies completely and returns the new
    snapshot, or raises GameError and leaves the match untouched.
    """

    def __init__(self, rules: Optional[RuleConfig] = None, rng: Optional[random.Random] = None):
        self.rules = rules or default_rules
        self.rng = rng if rng is not None else random.Random(self.rules.seed)
        self.state = MatchState()

    # ----- read side -----

    @property
    def phase(self) -> str:
        return self.state.phase

    @property
    def current_player(self) -> Optional[Player]:
        return self.state.current_player

    @property
    def can_start_game(self) -> bool:
        return self.state.phase == PHASE_LOBBY and self.rules.validate_player_count(len(self.state.players))

    def snapshot(self) -> MatchSnapshot:
        return build_snapshot(self.state, self.playable_card_ids())

    def playable_card_ids(self, player_id: Optional[str] = None) -> Set[str]:
        """Hint set of cards the player could play on the current field."""
        if self.state.phase != PHASE_PLAYING or self.state.pending_effect is not None:
            return set()
        if player_id is None:
            player = self.state.current_player
        else:
            player = self._get_player(player_id)
        if player is None or player.finished:
            return set()
        return hand_playable_card_ids(player.hand, self.state.field_state)

    # ----- lobby -----

    def add_player(self, name: str) -> str:
        """Add a player to the lobby and return their id."""
        state = self.state
        self._require_phase(PHASE_LOBBY)
        if len(state.players) >= self.rules.max_players:
            self._reject(errors.ROOM_FULL, f"Room is full ({self.rules.max_players} players)")

        player_id = str(uuid.uuid4())[:8]
        while state.player_index(player_id) is not None:
            player_id = str(uuid.uuid4())[:8]

        state.players.append(Player(id=player_id, name=name, seat=len(state.players)))
        state.game_log.append(f"{name} joined")
        state.version += 1
        logger.info(f"Player {name} ({player_id}) joined at seat {len(state.players) - 1}")
        return player_id

    def remove_player(self, player_id: str) -> MatchSnapshot:
        state = self.state
        self._require_phase(PHASE_LOBBY)
        index = state.player_index(player_id)
        if index is None:
            self._reject(errors.PLAYER_NOT_FOUND, f"Unknown player {player_id}")

        removed = state.players.pop(index)
        for seat, player in enumerate(state.players):
            player.seat = seat
        state.game_log.append(f"{removed.name} left")
        state.version += 1
        logger.info(f"Player {removed.name} ({player_id}) left")
        return self.snapshot()

    def start_game(self) -> MatchSnapshot:
        """Deal a fresh deck and move lobby -> dealing -> playing."""
        state = self.state
        self._require_phase(PHASE_LOBBY)
        player_count = len(state.players)
        if not self.rules.validate_player_count(player_count):
            self._reject(
                errors.INVALID_PLAYER_COUNT,
                f"Need {self.rules.min_players}-{self.rules.max_players} players (have {player_count})"
            )

        deck = Deck()
        deck.shuffle(self.rng)
        # Deal before touching state so a failed deal changes nothing
        hands = deal_cards(deck, state.players, self.rng)

        state.phase = PHASE_DEALING
        state.field_state = FieldState()
        state.pass_count = 0
        state.pending_effect = None
        state.last_card_player_index = None
        state.finish_order = []
        state.discard_pile = []
        state.deck = list(deck.cards)
        state.game_log = []

        for player in state.players:
            player.hand = sort_hand(hands[player.id])
            player.finished = False

        state.current_player_index = 0
        state.phase = PHASE_PLAYING
        state.version += 1
        state.game_log.append(f"Game started! {state.players[0].name} goes first")
        logger.info(
            f"Game started with {player_count} players, hands: "
            f"{[len(p.hand) for p in state.players]}"
        )
        return self.snapshot()

    # ----- play -----

    def play_cards(self, cards: CardSelection, player_id: Optional[str] = None) -> MatchSnapshot:
        """Play a rank-homogeneous group from the current player's hand."""
        state = self.state
        player_index = self._require_turn(player_id)
        self._require_no_pending()
        player = state.players[player_index]
        selected = self._resolve_selection(player, cards)

        field_state = state.field_state
        code = check_play(selected, field_state)
        if code is not None:
            self._reject(code, self._illegal_play_message(code, selected))

        # Effects and locks are judged against the field as it was
        effect = classify_effect(selected, self.rules)
        suit_lock = None
        sequence_lock = None
        if self.rules.enable_suit_lock:
            suit_lock = detect_suit_lock(selected, field_state)
        if self.rules.enable_sequence_lock:
            sequence_lock = detect_sequence_lock(
                selected, field_state, field_state.is_revolution, field_state.is_reversal
            )

        self._remove_from_hand(player, selected)
        state.discard_pile.extend(field_state.last_played_cards)
        field_state.last_played_cards = list(selected)
        field_state.last_played_player_index = player_index
        state.last_card_player_index = player_index
        state.pass_count = 0
        state.game_log.append(f"{player.name} played: {', '.join(str(c) for c in selected)}")
        logger.debug(f"{player.name} played {[c.id for c in selected]} ({effect.kind.value})")

        if not player.hand:
            self._finish_player(player)
            if len(state.active_players) <= 1:
                self._end_game()
            else:
                self._advance_turn()
            state.version += 1
            return self.snapshot()

        if effect.kind != EffectKind.CLEAR:
            field_state.suit_lock = suit_lock
            field_state.sequence_lock = sequence_lock
            if suit_lock is not None:
                state.game_log.append(f"Suit lock: {suit_lock}")
            if sequence_lock is not None:
                state.game_log.append(f"Sequence lock at {sequence_lock.anchor_rank}")

        self._resolve_effect(effect, player_index)
        state.version += 1
        return self.snapshot()

    def _resolve_effect(self, effect: Effect, player_index: int):
        state = self.state
        player = state.players[player_index]
        kind = effect.kind

        if effect.is_none:
            self._advance_turn()
        elif kind == EffectKind.CLEAR:
            self._reset_field()
            state.current_player_index = player_index
            state.game_log.append(f"{player.name} cleared the field and leads again")
        elif kind == EffectKind.SKIP:
            # Each skip lands on an active player; finished seats are passed over
            for _ in range(effect.count):
                self._advance_turn()
            self._advance_turn()
            state.game_log.append(f"{effect.count} player(s) skipped")
        elif kind == EffectKind.TRANSFER:
            self._set_obligation(PENDING_TRANSFER, effect.count, player_index)
        elif kind == EffectKind.DISCARD:
            self._set_obligation(PENDING_DISCARD, effect.count, player_index)
        elif kind == EffectKind.REVERSAL:
            state.field_state.is_reversal = True
            self._sort_all_hands()
            self._advance_turn()
            state.game_log.append("Eleven-back! Strength is reversed until the field clears")
        elif kind == EffectKind.REVOLUTION:
            state.field_state.is_revolution = not state.field_state.is_revolution
            self._sort_all_hands()
            self._advance_turn()
            state.game_log.append(
                "Revolution!" if state.field_state.is_revolution else "Counter-revolution!"
            )
            logger.info(f"Revolution toggled to {state.field_state.is_revolution}")
        else:
            raise GameError(errors.INTERNAL_ERROR, f"Unhandled effect {kind}")

    def pass_turn(self, player_id: Optional[str] = None) -> MatchSnapshot:
        state = self.state
        player_index = self._require_turn(player_id)
        self._require_no_pending()
        if state.field_state.is_empty:
            self._reject(errors.CANNOT_PASS, "Cannot pass on an empty field, lead a card")

        player = state.players[player_index]
        state.pass_count += 1
        state.game_log.append(f"{player.name} passed")

        active_count = len(state.active_players)
        if state.pass_count >= active_count - 1:
            self._reset_field()
            last_index = state.last_card_player_index
            if last_index is not None:
                state.current_player_index = last_index
                if state.players[last_index].finished:
                    self._advance_turn()
            state.game_log.append(f"{state.current_player.name} starts new round")
            logger.debug(f"Field cleared after passes, {state.current_player.name} leads")
        else:
            self._advance_turn()

        state.version += 1
        return self.snapshot()

    # ----- pending obligations -----

    def resolve_transfer(self, cards: CardSelection, player_id: Optional[str] = None) -> MatchSnapshot:
        """Hand the owed cards to the next seat."""
        state = self.state
        player_index = self._require_pending(PENDING_TRANSFER, player_id)
        player = state.players[player_index]
        selected = self._resolve_selection(player, cards)
        self._require_obligation_count(selected)

        recipient = state.players[self._next_active_index(player_index)]
        self._remove_from_hand(player, selected)
        recipient.hand = sort_hand(
            recipient.hand + selected,
            state.field_state.is_revolution,
            state.field_state.is_reversal
        )
        state.pending_effect = None
        state.game_log.append(f"{player.name} passed {len(selected)} card(s) to {recipient.name}")
        self._finish_obligation(player)
        state.version += 1
        return self.snapshot()

    def resolve_discard(self, cards: CardSelection, player_id: Optional[str] = None) -> MatchSnapshot:
        """Discard the owed cards."""
        state = self.state
        player_index = self._require_pending(PENDING_DISCARD, player_id)
        player = state.players[player_index]
        selected = self._resolve_selection(player, cards)
        self._require_obligation_count(selected)

        self._remove_from_hand(player, selected)
        state.discard_pile.extend(selected)
        state.pending_effect = None
        state.game_log.append(f"{player.name} discarded {len(selected)} card(s)")
        self._finish_obligation(player)
        state.version += 1
        return self.snapshot()

    def skip_pending_effect(self, player_id: Optional[str] = None) -> MatchSnapshot:
        """Drop the pending obligation without moving cards."""
        state = self.state
        self._require_pending(None, player_id)
        if not self.rules.allow_skip_pending_effect:
            self._reject(errors.ACTION_NOT_ALLOWED, "Pending effects must be resolved")

        pending = state.pending_effect
        state.pending_effect = None
        state.game_log.append(f"{state.current_player.name} skipped the {pending.kind}")
        logger.info(f"Pending {pending.kind} of {pending.count} skipped")
        self._advance_turn()
        state.version += 1
        return self.snapshot()

    # ----- phase transitions -----

    def return_to_lobby(self) -> MatchSnapshot:
        """Reset everything except the roster."""
        state = self.state
        self._require_phase(PHASE_RESULT)
        for player in state.players:
            player.hand = []
            player.finished = False

        self.state = MatchState(players=state.players, version=state.version + 1)
        self.state.game_log.append("Back to lobby")
        logger.info("Returned to lobby")
        return self.snapshot()

    # The wolf sub-game has no rules yet; these hooks only move the phase.

    def move_to_wolf_action(self) -> MatchSnapshot:
        return self._transition(PHASE_PLAYING, PHASE_WOLF_ACTION)

    def move_to_voting(self) -> MatchSnapshot:
        return self._transition(PHASE_WOLF_ACTION, PHASE_VOTING)

    def move_to_result(self) -> MatchSnapshot:
        return self._transition(PHASE_VOTING, PHASE_RESULT)

    def _transition(self, source: str, target: str) -> MatchSnapshot:
        self._require_phase(source)
        self.state.phase = target
        self.state.version += 1
        logger.info(f"Phase {source} -> {target}")
        return self.snapshot()

    # ----- internals -----

    def _reject(self, code: str, message: str):
        logger.info(f"Rejected [{code}]: {message}")
        raise_error(code, message)

    def _get_player(self, player_id: str) -> Player:
        index = self.state.player_index(player_id)
        if index is None:
            self._reject(errors.PLAYER_NOT_FOUND, f"Unknown player {player_id}")
        return self.state.players[index]

    def _require_phase(self, phase: str):
        if self.state.phase != phase:
            self._reject(
                errors.WRONG_PHASE,
                f"Action requires phase {phase} (current: {self.state.phase})"
            )

    def _require_turn(self, player_id: Optional[str]) -> int:
        self._require_phase(PHASE_PLAYING)
        current = self.state.current_player_index
        if player_id is not None:
            self._get_player(player_id)
            if self.state.players[current].id != player_id:
                self._reject(
                    errors.NOT_YOUR_TURN,
                    f"It's not your turn (current turn: {self.state.players[current].name})"
                )
        return current

    def _require_no_pending(self):
        pending = self.state.pending_effect
        if pending is not None:
            self._reject(
                errors.EFFECT_PENDING,
                f"Must resolve pending {pending.kind} of {pending.count} card(s) first"
            )

    def _require_pending(self, kind: Optional[str], player_id: Optional[str]) -> int:
        player_index = self._require_turn(player_id)
        pending = self.state.pending_effect
        if pending is None or (kind is not None and pending.kind != kind):
            self._reject(errors.NO_PENDING_EFFECT, f"No pending {kind or 'effect'}")
        if pending.player_index != player_index:
            self._reject(errors.NOT_YOUR_TURN, "Not your obligation to resolve")
        return player_index

    def _require_obligation_count(self, selected: List[Card]):
        required = self.state.pending_effect.count
        if len(selected) != required:
            self._reject(
                errors.OBLIGATION_COUNT_MISMATCH,
                f"Must select exactly {required} card(s) (selected {len(selected)})"
            )

    def _resolve_selection(self, player: Player, cards: CardSelection) -> List[Card]:
        card_ids = [card.id if isinstance(card, Card) else card for card in cards]
        if len(set(card_ids)) != len(card_ids):
            self._reject(errors.DUPLICATE_CARDS, "The same card was selected twice")

        owned = {card.id: card for card in player.hand}
        missing = [card_id for card_id in card_ids if card_id not in owned]
        if missing:
            self._reject(errors.OWNERSHIP_MISMATCH, f"{player.name} does not own {', '.join(missing)}")
        return [owned[card_id] for card_id in card_ids]

    @staticmethod
    def _illegal_play_message(code: str, cards: List[Card]) -> str:
        messages = {
            errors.EMPTY_SELECTION: "No cards selected",
            errors.PATTERN_MISMATCH: "All cards must share one rank",
            errors.COUNT_MISMATCH: "Must play as many cards as the field holds",
            errors.SUIT_LOCK_VIOLATION: "Suit lock is active",
            errors.SEQUENCE_LOCK_VIOLATION: "Sequence lock requires the next rank",
            errors.RANK_TOO_LOW: "Cards do not beat the field",
        }
        played = ', '.join(str(c) for c in cards)
        return f"{messages.get(code, 'Illegal play')}: {played}" if played else messages.get(code, 'Illegal play')

    @staticmethod
    def _remove_from_hand(player: Player, cards: List[Card]):
        removed = {card.id for card in cards}
        player.hand = [card for card in player.hand if card.id not in removed]

    def _finish_player(self, player: Player):
        state = self.state
        player.finished = True
        state.finish_order.append(player.id)
        state.game_log.append(f"{player.name} finished in position {len(state.finish_order)}!")
        logger.info(f"Player {player.name} finished in position {len(state.finish_order)}")

    def _end_game(self):
        state = self.state
        state.phase = PHASE_RESULT
        state.pending_effect = None
        state.game_log.append("Game finished!")
        for i, player_id in enumerate(state.finish_order):
            state.game_log.append(f"{i + 1}. {state.players[state.player_index(player_id)].name}")
        logger.info(f"Game finished, order: {state.finish_order}")

    def _reset_field(self):
        state = self.state
        was_reversal = state.field_state.is_reversal
        state.discard_pile.extend(state.field_state.reset())
        state.pass_count = 0
        if was_reversal:
            self._sort_all_hands()

    def _sort_all_hands(self):
        field_state = self.state.field_state
        for player in self.state.players:
            player.hand = sort_hand(player.hand, field_state.is_revolution, field_state.is_reversal)

    def _set_obligation(self, kind: str, count: int, player_index: int):
        """Record a transfer or discard, owed only up to the cards still in hand."""
        state = self.state
        player = state.players[player_index]
        owed = min(count, len(player.hand))
        if owed == 0:
            self._advance_turn()
            return
        if owed < count:
            logger.debug(f"{player.name} owes {count} card(s) but holds {owed}")

        state.pending_effect = PendingEffect(kind, owed, player_index)
        verb = "pass" if kind == PENDING_TRANSFER else "discard"
        state.game_log.append(f"{player.name} must {verb} {owed} card(s)")

    def _finish_obligation(self, player: Player):
        """Pass the turn on after a transfer or discard, which may empty the hand."""
        if not player.hand:
            self._finish_player(player)
            if len(self.state.active_players) <= 1:
                self._end_game()
                return
        self._advance_turn()

    def _next_active_index(self, index: int) -> int:
        state = self.state
        count = len(state.players)
        for _ in range(count):
            index = (index + 1) % count
            if not state.players[index].finished:
                return index
        raise GameError(errors.INTERNAL_ERROR, "No active player left to take the turn")

    def _advance_turn(self):
        """Move to the next seat whose player has not finished."""
        self.state.current_player_index = self._next_active_index(self.state.current_player_index)
