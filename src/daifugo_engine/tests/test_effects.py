"""
Special card effects: skip, transfer, clear, discard, eleven-back, revolution and locks.
"""

import pytest

from daifugo_engine import errors
from daifugo_engine.constants import PENDING_DISCARD, PENDING_TRANSFER, PHASE_PLAYING
from daifugo_engine.effects import Effect, EffectKind, classify_effect
from daifugo_engine.errors import GameError
from daifugo_engine.models import SequenceLock
from daifugo_engine.rules import create_rules
from daifugo_engine.shuffle import create_deck

DECK = {card.id: card for card in create_deck()}


def cards(*card_ids):
    return [DECK[card_id] for card_id in card_ids]


def hand_ids(engine, seat):
    return [card.id for card in engine.state.players[seat].hand]


def test_classify_effect():
    assert classify_effect(cards("8S")) == Effect(EffectKind.CLEAR)
    assert classify_effect(cards("5S", "5H")) == Effect(EffectKind.SKIP, 2)
    assert classify_effect(cards("7S")) == Effect(EffectKind.TRANSFER, 1)
    assert classify_effect(cards("10S", "10H", "10D")) == Effect(EffectKind.DISCARD, 3)
    assert classify_effect(cards("JS")) == Effect(EffectKind.REVERSAL)
    assert classify_effect(cards("9S", "9H", "9D", "9C")) == Effect(EffectKind.REVOLUTION)
    assert classify_effect(cards("9S", "9H", "9D")).is_none
    assert classify_effect(cards("JOKER")).is_none


def test_dedicated_ranks_take_precedence_over_revolution():
    for rank in ("8", "5", "7", "10", "J"):
        effect = classify_effect(cards(*(rank + suit for suit in "SHDC")))
        assert effect.kind != EffectKind.REVOLUTION


def test_disabled_effects_classify_as_none():
    rules = create_rules(enable_clear=False, enable_revolution=False)

    assert classify_effect(cards("8S"), rules).is_none
    assert classify_effect(cards("9S", "9H", "9D", "9C"), rules).is_none


def test_skip_single_five_four_players(make_engine, rig):
    engine = rig(make_engine(player_count=4), ["5S", "9S"], ["3H"], ["4H"], ["6H"])

    snapshot = engine.play_cards(["5S"])

    assert snapshot.current_player_index == 2
    assert snapshot.pass_count == 0
    assert snapshot.pending_effect is None


def test_skip_passes_over_finished_players(make_engine, rig):
    engine = rig(make_engine(player_count=4), ["5S", "9S"], [], ["4H"], ["6H"])
    engine.state.players[1].finished = True

    snapshot = engine.play_cards(["5S"])

    assert snapshot.current_player_index == 3


def test_skip_two(make_engine, rig):
    engine = rig(make_engine(player_count=5), ["5S", "5H", "9S"], ["3H"], ["4H"], ["6H"], ["7D"])

    assert engine.play_cards(["5S", "5H"]).current_player_index == 3


def test_skip_resets_pass_count(make_engine, rig):
    engine = rig(
        make_engine(player_count=4),
        ["4S", "9S"], ["3H", "QH"], ["5H", "KH"], ["6H", "7D"]
    )
    engine.play_cards(["4S"])
    assert engine.pass_turn().pass_count == 1

    snapshot = engine.play_cards(["5H"])

    assert snapshot.pass_count == 0
    assert snapshot.current_player_index == 0


def test_clear_keeps_turn_and_revolution(make_engine, rig):
    engine = rig(make_engine(), ["8S", "9S"], ["3H"], ["4H"])
    field_state = engine.state.field_state
    field_state.last_played_cards = cards("7S")
    field_state.is_revolution = True
    field_state.is_reversal = True
    field_state.suit_lock = "S"
    field_state.sequence_lock = SequenceLock(7, 1, True)

    snapshot = engine.play_cards(["8S"])

    assert snapshot.current_player_index == 0
    assert snapshot.field.is_empty
    assert snapshot.field.is_revolution
    assert not snapshot.field.is_reversal
    assert snapshot.field.suit_lock is None
    assert snapshot.field.sequence_lock is None
    assert snapshot.discard_count == 2


def test_revolution_persists_through_clears(make_engine, rig):
    engine = rig(make_engine(), ["9S", "9H", "9D", "9C", "8S", "3S"], ["KH"], ["QH"])

    snapshot = engine.play_cards(["9S", "9H", "9D", "9C"])
    assert snapshot.field.is_revolution
    assert snapshot.current_player_index == 1
    assert hand_ids(engine, 0) == ["3S", "8S"]

    engine.pass_turn()
    snapshot = engine.pass_turn()
    assert snapshot.field.is_empty
    assert snapshot.field.is_revolution
    assert snapshot.current_player_index == 0

    snapshot = engine.play_cards(["8S"])
    assert snapshot.field.is_revolution
    assert snapshot.current_player_index == 0


def test_four_eights_clear_instead_of_revolution(make_engine, rig):
    engine = rig(make_engine(), ["8S", "8H", "8D", "8C", "3S"], ["KH"], ["QH"])

    snapshot = engine.play_cards(["8S", "8H", "8D", "8C"])

    assert not snapshot.field.is_revolution
    assert snapshot.field.is_empty
    assert snapshot.current_player_index == 0


def test_revolution_toggles_back(make_engine, rig):
    engine = rig(make_engine(), ["6S", "6H", "6D", "6C", "3S"], ["KH"], ["QH"])
    engine.state.field_state.is_revolution = True

    assert not engine.play_cards(["6S", "6H", "6D", "6C"]).field.is_revolution


def test_eleven_back_until_field_clears(make_engine, rig):
    engine = rig(make_engine(), ["JS", "9S"], ["9H", "QH", "3H"], ["4D"])

    snapshot = engine.play_cards(["JS"])
    assert snapshot.field.is_reversal
    assert snapshot.current_player_index == 1
    assert hand_ids(engine, 1) == ["3H", "9H", "QH"]

    with pytest.raises(GameError) as exc:
        engine.play_cards(["QH"])
    assert exc.value.code == errors.RANK_TOO_LOW

    engine.play_cards(["9H"])
    engine.pass_turn()
    snapshot = engine.pass_turn()

    assert not snapshot.field.is_reversal
    assert snapshot.field.is_empty
    assert snapshot.current_player_index == 1
    assert hand_ids(engine, 1) == ["QH", "3H"]


def test_transfer_obligation(make_engine, rig):
    engine = rig(make_engine(), ["7S", "7H", "3S", "4S", "QS"], ["9D"], ["KD"])
    p1 = engine.state.players[1].id

    snapshot = engine.play_cards(["7S", "7H"])
    assert snapshot.current_player_index == 0
    assert snapshot.pending_effect.kind == PENDING_TRANSFER
    assert snapshot.pending_effect.count == 2

    rejections = [
        (lambda: engine.play_cards(["3S"]), errors.EFFECT_PENDING),
        (lambda: engine.pass_turn(), errors.EFFECT_PENDING),
        (lambda: engine.resolve_discard(["3S", "4S"]), errors.NO_PENDING_EFFECT),
        (lambda: engine.resolve_transfer(["3S"]), errors.OBLIGATION_COUNT_MISMATCH),
        (lambda: engine.resolve_transfer(["3S", "KD"]), errors.OWNERSHIP_MISMATCH),
        (lambda: engine.resolve_transfer(["3S", "3S"]), errors.DUPLICATE_CARDS),
        (lambda: engine.resolve_transfer(["3S", "4S"], player_id=p1), errors.NOT_YOUR_TURN),
    ]
    for action, code in rejections:
        with pytest.raises(GameError) as exc:
            action()
        assert exc.value.code == code
        assert engine.snapshot() == snapshot

    snapshot = engine.resolve_transfer(["3S", "4S"])

    assert snapshot.pending_effect is None
    assert snapshot.current_player_index == 1
    assert hand_ids(engine, 0) == ["QS"]
    assert hand_ids(engine, 1) == ["9D", "4S", "3S"]


def test_transfer_emptying_hand_finishes_player(make_engine, rig):
    engine = rig(make_engine(), ["7S", "3S"], ["9D", "10D"], ["KD"])
    p0 = engine.state.players[0].id

    engine.play_cards(["7S"])
    snapshot = engine.resolve_transfer(["3S"])

    assert snapshot.players[0].finished
    assert snapshot.finish_order == (p0,)
    assert snapshot.phase == PHASE_PLAYING
    assert snapshot.current_player_index == 1
    assert "3S" in hand_ids(engine, 1)


def test_discard_obligation(make_engine, rig):
    engine = rig(make_engine(), ["10S", "3S", "4S"], ["9D"], ["KD"])

    snapshot = engine.play_cards(["10S"])
    assert snapshot.pending_effect.kind == PENDING_DISCARD
    assert snapshot.current_player_index == 0

    snapshot = engine.resolve_discard(["3S"])

    assert hand_ids(engine, 0) == ["4S"]
    assert snapshot.discard_count == 1
    assert snapshot.pending_effect is None
    assert snapshot.current_player_index == 1


def test_skip_pending_effect(make_engine, rig):
    engine = rig(make_engine(), ["10S", "3S"], ["9D"], ["KD"])
    engine.play_cards(["10S"])

    snapshot = engine.skip_pending_effect()

    assert hand_ids(engine, 0) == ["3S"]
    assert snapshot.pending_effect is None
    assert snapshot.current_player_index == 1


def test_skip_pending_effect_requires_pending(make_engine, rig):
    engine = rig(make_engine(), ["10S", "3S"], ["9D"], ["KD"])

    with pytest.raises(GameError) as exc:
        engine.skip_pending_effect()
    assert exc.value.code == errors.NO_PENDING_EFFECT


def test_skip_pending_effect_can_be_disabled(make_engine, rig):
    rules = create_rules(allow_skip_pending_effect=False)
    engine = rig(make_engine(rules=rules), ["7S", "3S"], ["9D"], ["KD"])
    engine.play_cards(["7S"])

    with pytest.raises(GameError) as exc:
        engine.skip_pending_effect()
    assert exc.value.code == errors.ACTION_NOT_ALLOWED
    assert engine.snapshot().pending_effect.kind == PENDING_TRANSFER


def test_suit_and_sequence_locks(make_engine, rig):
    engine = rig(make_engine(), ["QC", "3S"], ["KC", "3H"], ["AH", "2C", "AC", "JOKER"])

    snapshot = engine.play_cards(["QC"])
    assert snapshot.field.suit_lock is None
    assert snapshot.field.sequence_lock is None

    snapshot = engine.play_cards(["KC"])
    assert snapshot.field.suit_lock == "C"
    assert snapshot.field.sequence_lock == SequenceLock(13, 1, True)

    with pytest.raises(GameError) as exc:
        engine.play_cards(["AH"])
    assert exc.value.code == errors.SUIT_LOCK_VIOLATION

    with pytest.raises(GameError) as exc:
        engine.play_cards(["2C"])
    assert exc.value.code == errors.SEQUENCE_LOCK_VIOLATION

    snapshot = engine.play_cards(["AC"])
    assert snapshot.field.suit_lock == "C"
    assert snapshot.field.sequence_lock == SequenceLock(14, 1, True)
    assert snapshot.current_player_index == 0


def test_joker_play_replaces_locks(make_engine, rig):
    engine = rig(make_engine(), ["QC", "3S"], ["KC", "3H"], ["AH", "JOKER"])
    engine.play_cards(["QC"])
    engine.play_cards(["KC"])

    snapshot = engine.play_cards(["JOKER"])

    assert snapshot.field.suit_lock is None
    assert snapshot.field.sequence_lock is None


def test_locks_can_be_disabled(make_engine, rig):
    rules = create_rules(enable_suit_lock=False, enable_sequence_lock=False)
    engine = rig(make_engine(rules=rules), ["QC", "3S"], ["KC", "3H"], ["AH"])
    engine.play_cards(["QC"])

    snapshot = engine.play_cards(["KC"])

    assert snapshot.field.suit_lock is None
    assert snapshot.field.sequence_lock is None


def test_winning_play_skips_effect(make_engine, rig):
    engine = rig(make_engine(), ["5S"], ["3H", "4H"], ["6H", "9H"])

    snapshot = engine.play_cards(["5S"])

    assert snapshot.players[0].finished
    assert snapshot.current_player_index == 1
    assert snapshot.phase == PHASE_PLAYING


def test_transfer_owed_is_capped_to_remaining_hand(make_engine, rig):
    rules = create_rules(allow_skip_pending_effect=False)
    engine = rig(make_engine(rules=rules), ["7S", "7H", "3S"], ["9D"], ["KD"])
    p0 = engine.state.players[0].id

    snapshot = engine.play_cards(["7S", "7H"])
    assert snapshot.pending_effect.kind == PENDING_TRANSFER
    assert snapshot.pending_effect.count == 1

    snapshot = engine.resolve_transfer(["3S"])

    assert snapshot.finish_order == (p0,)
    assert snapshot.pending_effect is None
    assert hand_ids(engine, 1) == ["9D", "3S"]


def test_discard_owed_is_capped_to_remaining_hand(make_engine, rig):
    engine = rig(make_engine(), ["10S", "10H", "10D", "4S"], ["9D"], ["KD"])

    snapshot = engine.play_cards(["10S", "10H", "10D"])

    assert snapshot.pending_effect.kind == PENDING_DISCARD
    assert snapshot.pending_effect.count == 1
    assert snapshot.recent_log[-1] == "P0 must discard 1 card(s)"


def test_transfer_passes_over_finished_seat(make_engine, rig):
    engine = rig(make_engine(player_count=4), ["7S", "3S", "QS"], [], ["9D"], ["KD"])
    engine.state.players[1].finished = True

    engine.play_cards(["7S"])
    snapshot = engine.resolve_transfer(["3S"])

    assert hand_ids(engine, 1) == []
    assert hand_ids(engine, 2) == ["9D", "3S"]
    assert hand_ids(engine, 3) == ["KD"]
    assert snapshot.current_player_index == 2
