"""
Tests for bankruptcy settlement and game end.
"""

import pytest

from monopoly_core import BankruptcyHandler, BuyPropertyCommand, GamePhase, InvalidArgumentError
from monopoly_core.events import GameOver, MoneyTransferred, PlayerBankrupt


@pytest.fixture
def handler(basic_game):
    return BankruptcyHandler(basic_game)


@pytest.fixture
def estate(four_player_game, give):
    """
    Alice holds $500, Boardwalk with 2 houses, a mortgaged Park Place and
    Reading Railroad.
    """
    alice = four_player_game.players[0]
    give(four_player_game, alice, 37, 39, 5)
    four_player_game.board.get_space(39).houses = 2
    four_player_game.board.get_space(37).is_mortgaged = True
    alice.money = 500
    alice.get_out_of_jail_cards = 1
    return alice


def test_alice_bankrupt_to_bob_after_buying_boardwalk(basic_game, handler, record):
    recorder = record(PlayerBankrupt, GameOver)
    alice, bob = basic_game.players

    result = BuyPropertyCommand(basic_game, alice, basic_game.board.get_space(39)).execute()
    assert result.success
    assert alice.money == 1100

    assert handler.declare_bankruptcy(alice, bob)

    assert alice.is_bankrupt
    assert alice.money == 0
    assert alice.properties == []
    assert bob.money == 2600
    assert basic_game.board.get_space(39).owner is bob
    assert recorder.of_type(PlayerBankrupt) == [PlayerBankrupt("player_0", "player_1", 1300)]
    assert basic_game.phase == GamePhase.GAME_OVER
    assert basic_game.winner is bob
    assert recorder.of_type(GameOver) == [GameOver("player_1", "Bob", 0)]


def test_liquidation_value(handler, estate):
    # Boardwalk houses 2 * 200 / 2 + mortgage 200, Reading 100, Park Place mortgaged
    assert handler.liquidation_value(estate) == 500
    assert handler.calculate_total_assets(estate) == 1000


def test_can_pay_debt(handler, estate):
    assert handler.can_pay_debt(estate, 1000)
    assert not handler.can_pay_debt(estate, 1001)
    with pytest.raises(InvalidArgumentError):
        handler.can_pay_debt(estate, -1)


def test_creditor_gains_exactly_the_transferred_assets(four_player_game, estate, record):
    handler = BankruptcyHandler(four_player_game)
    recorder = record(PlayerBankrupt, MoneyTransferred)
    bob = four_player_game.players[1]
    before = handler.calculate_total_assets(bob)

    assert handler.declare_bankruptcy(estate, bob)

    event = recorder.of_type(PlayerBankrupt)[0]
    assert event.assets_transferred == 1000
    assert handler.calculate_total_assets(bob) == before + event.assets_transferred
    assert bob.money == 1500 + 500 + 200
    assert bob.get_out_of_jail_cards == 1
    assert recorder.of_type(MoneyTransferred) == [MoneyTransferred("player_0", "player_1", 700, "Bankruptcy")]


def test_creditor_keeps_mortgage_and_buildings_are_sold(four_player_game, estate):
    handler = BankruptcyHandler(four_player_game)
    bob = four_player_game.players[1]
    handler.declare_bankruptcy(estate, bob)

    board = four_player_game.board
    assert [s.position for s in bob.properties] == [37, 39, 5]
    assert all(s.owner is bob for s in bob.properties)
    assert board.get_space(37).is_mortgaged
    assert board.get_space(39).houses == 0


def test_bankrupt_to_bank_returns_properties(four_player_game, estate, record):
    handler = BankruptcyHandler(four_player_game)
    recorder = record(PlayerBankrupt, MoneyTransferred)

    assert handler.declare_bankruptcy(estate)

    board = four_player_game.board
    for pos in (37, 39, 5):
        space = board.get_space(pos)
        assert space.owner is None
        assert not space.is_mortgaged
    assert board.get_space(39).houses == 0
    assert estate.get_out_of_jail_cards == 0
    assert recorder.of_type(PlayerBankrupt) == [PlayerBankrupt("player_0", None, 1000)]
    assert recorder.of_type(MoneyTransferred)[0].to_player_id is None
    assert four_player_game.phase == GamePhase.PLAYING


def test_second_declaration_returns_false(basic_game, handler):
    alice, bob = basic_game.players
    assert handler.declare_bankruptcy(alice, bob)
    assert not handler.declare_bankruptcy(alice, bob)


def test_self_creditor_rejected(basic_game, handler):
    alice = basic_game.players[0]
    with pytest.raises(InvalidArgumentError):
        handler.declare_bankruptcy(alice, alice)
    assert not alice.is_bankrupt


def test_bankrupt_creditor_rejected(four_player_game):
    handler = BankruptcyHandler(four_player_game)
    alice, bob = four_player_game.players[:2]
    handler.declare_bankruptcy(bob)
    with pytest.raises(InvalidArgumentError):
        handler.declare_bankruptcy(alice, bob)
    assert not alice.is_bankrupt


def test_game_over_only_when_one_left(four_player_game):
    handler = BankruptcyHandler(four_player_game)
    players = four_player_game.players

    handler.declare_bankruptcy(players[0])
    handler.declare_bankruptcy(players[1])
    assert not handler.is_game_over()
    assert handler.active_player_count() == 2

    handler.declare_bankruptcy(players[2], players[3])
    assert handler.is_game_over()
    assert four_player_game.phase == GamePhase.GAME_OVER
    assert four_player_game.winner is players[3]


def test_broke_player_with_nothing_emits_no_money_transfer(basic_game, handler, record):
    recorder = record(MoneyTransferred, PlayerBankrupt)
    alice, bob = basic_game.players
    alice.money = 0
    handler.declare_bankruptcy(alice, bob)
    assert recorder.of_type(MoneyTransferred) == []
    assert recorder.of_type(PlayerBankrupt)[0].assets_transferred == 0
