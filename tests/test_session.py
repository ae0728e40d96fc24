"""
End-to-end tests driving the engine through GameSession.
"""

import pytest

from monopoly_core import (
    GameFlowState,
    GamePhase,
    GameSession,
    InvalidArgumentError,
    InvalidTransitionError,
    PreconditionFailedError,
    TurnPhase,
)
from monopoly_core.events import GameOver, TurnStarted


@pytest.fixture
def make_session(game_config, event_bus, loaded_dice):
    def _make(*rolls, players=("Alice", "Bob")):
        session = GameSession(game_config, event_bus, loaded_dice(*rolls))
        session.new_game()
        for name in players:
            session.add_player(name)
        session.start_game()
        return session

    return _make


def test_start_game_enters_playing(make_session, record):
    recorder = record(TurnStarted)
    session = make_session()

    assert session.flow_state == GameFlowState.PLAYING
    assert session.turn_phase == TurnPhase.ROLL_DICE
    assert session.game.phase == GamePhase.PLAYING
    assert session.current_player.name == "Alice"
    assert recorder.events == [TurnStarted("player_0", 0)]


def test_buy_then_opponent_pays_rent(make_session):
    session = make_session((2, 4), (1, 5))
    alice, bob = session.game.players

    result = session.roll_dice()
    assert result.success
    assert result.data["new_position"] == 6
    assert session.turn_phase == TurnPhase.TAKE_TURN_ACTION

    assert session.buy_current_property().success
    assert alice.money == 1400
    session.end_turn()

    assert session.current_player is bob
    assert session.turn_phase == TurnPhase.ROLL_DICE
    session.roll_dice()
    result = session.pay_rent_for_current_space()
    assert result.success
    assert result.data["rent_amount"] == 6
    assert (alice.money, bob.money) == (1406, 1494)

    assert [entry["type"] for entry in session.command_log] == [
        "RollDice",
        "Move",
        "BuyProperty",
        "EndTurn",
        "RollDice",
        "Move",
        "PayRent",
    ]


def test_rent_on_mortgaged_lot_is_not_logged(make_session, give):
    session = make_session((2, 4))
    alice, bob = session.game.players
    give(session.game, bob, 6)
    session.game.board.get_space(6).is_mortgaged = True

    session.roll_dice()
    result = session.pay_rent_for_current_space()

    assert result.success
    assert result.data["rent_amount"] == 0
    assert [entry["type"] for entry in session.command_log] == ["RollDice", "Move"]


def test_buying_non_ownable_space_fails(make_session):
    session = make_session((3, 4))
    session.roll_dice()
    result = session.buy_current_property()
    assert not result.success
    assert "not for sale" in result.error


def test_actions_out_of_phase_raise(make_session):
    session = make_session((3, 4))
    with pytest.raises(PreconditionFailedError):
        session.buy_current_property()
    with pytest.raises(PreconditionFailedError):
        session.end_turn()
    session.roll_dice()
    with pytest.raises(PreconditionFailedError):
        session.roll_dice()


def test_jailed_player_stays_put_without_doubles(make_session):
    session = make_session((1, 2))
    alice = session.current_player
    session.jail_rules.send_to_jail(alice)

    result = session.roll_dice()

    assert result.data["moved"] is False
    assert alice.in_jail
    assert alice.position == 10
    assert alice.jail_turns == 1
    assert session.turn_phase == TurnPhase.TAKE_TURN_ACTION


def test_jailed_player_rolls_doubles_and_moves(make_session):
    session = make_session((3, 3))
    alice = session.current_player
    session.jail_rules.send_to_jail(alice)

    result = session.roll_dice()

    assert result.data["moved"] is True
    assert not alice.in_jail
    assert alice.position == 16


def test_build_and_mortgage_through_session(make_session, give):
    session = make_session()
    alice = session.current_player
    give(session.game, alice, 1, 3, 5)

    assert session.build_house(1).success
    assert session.game.board.get_space(1).houses == 1
    assert session.sell_building(1).success
    assert session.mortgage(5).success
    assert session.unmortgage(5).success
    assert alice.money == 1500 - 50 + 25 + 100 - 110

    assert not session.build_house(5).success
    assert not session.mortgage(0).success


def test_bankruptcy_ends_two_player_game(make_session, record):
    recorder = record(GameOver)
    session = make_session()

    assert session.declare_bankruptcy("player_1")

    assert session.game.phase == GamePhase.GAME_OVER
    assert session.flow_state == GameFlowState.GAME_OVER
    assert recorder.events == [GameOver("player_1", "Bob", 0)]

    session.return_to_main_menu()
    assert session.flow_state == GameFlowState.MAIN_MENU


def test_bankruptcy_passes_turn_in_larger_game(make_session):
    session = make_session(players=("Alice", "Bob", "Carol"))

    assert session.declare_bankruptcy()

    assert session.game.phase == GamePhase.PLAYING
    assert session.current_player.name == "Bob"
    assert session.turn_phase == TurnPhase.ROLL_DICE


def test_unknown_creditor_rejected(make_session):
    session = make_session()
    with pytest.raises(InvalidArgumentError):
        session.declare_bankruptcy("player_9")
    assert not session.current_player.is_bankrupt


def test_new_game_while_playing_rejected(make_session):
    session = make_session()
    with pytest.raises(PreconditionFailedError):
        session.new_game()
    with pytest.raises(InvalidTransitionError):
        session.return_to_main_menu()


def test_new_game_after_game_over_starts_fresh(make_session):
    session = make_session()
    session.declare_bankruptcy()

    session.new_game()

    assert session.flow_state == GameFlowState.GAME_SETUP
    assert session.game.players == []
    assert session.command_log == []


def test_start_needs_two_players(game_config, event_bus):
    session = GameSession(game_config, event_bus)
    session.new_game()
    session.add_player("Alone")
    with pytest.raises(PreconditionFailedError):
        session.start_game()
    assert session.flow_state == GameFlowState.GAME_SETUP


def test_add_player_outside_setup_rejected(game_config):
    session = GameSession(game_config)
    with pytest.raises(PreconditionFailedError):
        session.add_player("Alice")
