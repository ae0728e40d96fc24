"""
JSON snapshot serialization of GameState.

The snapshot carries everything mutable about a game: the roster, the
phase and turn counters, and ownership/building/mortgage state per
ownable space. The board layout itself is fixed and is rebuilt rather
than serialized.
"""

from __future__ import annotations

import logging
import re
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from monopoly_core.config import GameConfig
from monopoly_core.events import EventBus
from monopoly_core.exceptions import InvalidArgumentError, SnapshotFormatError
from monopoly_core.game import GamePhase, GameState
from monopoly_core.jail import JAIL_POSITION
from monopoly_core.player import Player, transfer_ownership
from monopoly_core.spaces import BOARD_SIZE, MAX_HOUSES, OwnableSpace, PropertySpace

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

_PLAYER_ID = re.compile(r"player_(\d+)")


class PlayerSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    money: int = Field(ge=0)
    position: int = Field(ge=0, lt=BOARD_SIZE)
    is_bankrupt: bool = False
    in_jail: bool = False
    jail_turns: int = Field(default=0, ge=0)
    jail_free_cards: int = Field(default=0, ge=0)
    properties: List[int] = Field(default_factory=list)


class PropertySnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    index: int = Field(ge=0, lt=BOARD_SIZE)
    houses: int = Field(default=0, ge=0, le=MAX_HOUSES)
    has_hotel: bool = False
    is_mortgaged: bool = False


class GameSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = SNAPSHOT_VERSION
    phase: GamePhase
    turn_number: int = Field(ge=0)
    current_player_id: Optional[str] = None
    next_player_number: int = Field(ge=0)
    players: List[PlayerSnapshot] = Field(default_factory=list)
    properties: List[PropertySnapshot] = Field(default_factory=list)


def build_snapshot(game: GameState) -> GameSnapshot:
    """Capture the mutable state of ``game``."""
    current = game.current_player
    players = [
        PlayerSnapshot(
            id=p.player_id,
            name=p.name,
            money=p.money,
            position=p.position,
            is_bankrupt=p.is_bankrupt,
            in_jail=p.in_jail,
            jail_turns=p.jail_turns,
            jail_free_cards=p.get_out_of_jail_cards,
            properties=[space.position for space in p.properties],
        )
        for p in game.players
    ]

    properties = []
    for space in game.board.ownable_spaces():
        is_property = isinstance(space, PropertySpace)
        properties.append(
            PropertySnapshot(
                index=space.position,
                houses=space.houses if is_property else 0,
                has_hotel=space.has_hotel if is_property else False,
                is_mortgaged=space.is_mortgaged,
            )
        )

    return GameSnapshot(
        phase=game.phase,
        turn_number=game.turn_number,
        current_player_id=current.player_id if current else None,
        next_player_number=game._next_player_number,
        players=players,
        properties=properties,
    )


def serialize_game(game: GameState) -> str:
    """Serialize a GameState into a JSON string."""
    return build_snapshot(game).model_dump_json()


def deserialize_game(
    text: str,
    config: Optional[GameConfig] = None,
    event_bus: Optional[EventBus] = None,
) -> GameState:
    """
    Rebuild a GameState from ``serialize_game`` output.

    No events are published while restoring.

    Raises:
        SnapshotFormatError: the text is not valid JSON, does not match the
            schema, or describes an impossible game
    """
    if not isinstance(text, (str, bytes)):
        raise SnapshotFormatError(f"Snapshot must be a JSON string, got {type(text).__name__}")

    try:
        snapshot = GameSnapshot.model_validate_json(text)
    except ValidationError as e:
        raise SnapshotFormatError(f"Invalid snapshot: {e}") from e

    game = GameState(config=config, event_bus=event_bus)
    _validate(snapshot, game)

    try:
        _apply(snapshot, game)
    except InvalidArgumentError as e:
        raise SnapshotFormatError(f"Invalid snapshot: {e}") from e

    logger.debug(f"Restored game with {len(game.players)} players at turn {game.turn_number}")
    return game


def _validate(snapshot: GameSnapshot, game: GameState) -> None:
    """Reject semantically impossible snapshots before anything is built."""
    ids = [p.id for p in snapshot.players]
    if len(set(ids)) != len(ids):
        raise SnapshotFormatError("Duplicate player ids in snapshot")
    if len(ids) > game.config.max_players:
        raise SnapshotFormatError(f"Snapshot has {len(ids)} players, maximum is {game.config.max_players}")

    if snapshot.current_player_id is not None and snapshot.current_player_id not in ids:
        raise SnapshotFormatError(f"Unknown current player: {snapshot.current_player_id}")
    if snapshot.phase != GamePhase.SETUP and snapshot.players and snapshot.current_player_id is None:
        raise SnapshotFormatError("A started game needs a current player")

    numbers = [int(m.group(1)) for m in map(_PLAYER_ID.fullmatch, ids) if m]
    if numbers and snapshot.next_player_number <= max(numbers):
        raise SnapshotFormatError(
            f"next_player_number {snapshot.next_player_number} would reuse id player_{snapshot.next_player_number}"
        )

    owned = set()
    for p in snapshot.players:
        if p.jail_turns > game.config.max_jail_turns:
            raise SnapshotFormatError(f"Player {p.id} has {p.jail_turns} jail turns")
        if p.jail_turns and not p.in_jail:
            raise SnapshotFormatError(f"Player {p.id} has jail turns but is not in jail")
        if p.in_jail and p.position != JAIL_POSITION:
            raise SnapshotFormatError(f"Player {p.id} is in jail at position {p.position}")
        if p.is_bankrupt and p.properties:
            raise SnapshotFormatError(f"Bankrupt player {p.id} still owns properties")
        for index in p.properties:
            if not 0 <= index < BOARD_SIZE or not isinstance(game.board.get_space(index), OwnableSpace):
                raise SnapshotFormatError(f"Player {p.id} owns non-ownable space {index}")
            if index in owned:
                raise SnapshotFormatError(f"Space {index} is owned more than once")
            owned.add(index)

    seen = set()
    for entry in snapshot.properties:
        space = game.board.get_space(entry.index)
        if not isinstance(space, OwnableSpace):
            raise SnapshotFormatError(f"Space {entry.index} is not ownable")
        if entry.index in seen:
            raise SnapshotFormatError(f"Space {entry.index} listed more than once")
        seen.add(entry.index)

        if entry.houses and entry.has_hotel:
            raise SnapshotFormatError(f"Space {entry.index} has houses and a hotel")
        if (entry.houses or entry.has_hotel) and not isinstance(space, PropertySpace):
            raise SnapshotFormatError(f"Space {entry.index} cannot hold buildings")
        if (entry.houses or entry.has_hotel or entry.is_mortgaged) and entry.index not in owned:
            raise SnapshotFormatError(f"Unowned space {entry.index} has buildings or a mortgage")
        if entry.is_mortgaged and (entry.houses or entry.has_hotel):
            raise SnapshotFormatError(f"Mortgaged space {entry.index} has buildings")


def _apply(snapshot: GameSnapshot, game: GameState) -> None:
    game.phase = snapshot.phase
    game.turn_number = snapshot.turn_number
    game._next_player_number = snapshot.next_player_number

    for i, data in enumerate(snapshot.players):
        player = Player(data.id, data.name, data.money)
        player.position = data.position
        if data.is_bankrupt:
            player.mark_bankrupt()
        player.in_jail = data.in_jail
        player.jail_turns = data.jail_turns
        player.get_out_of_jail_cards = data.jail_free_cards
        game.players.append(player)

        for index in data.properties:
            transfer_ownership(game.board.get_space(index), player)

        if data.id == snapshot.current_player_id:
            game.current_player_index = i

    for entry in snapshot.properties:
        space = game.board.get_space(entry.index)
        space.is_mortgaged = entry.is_mortgaged
        if isinstance(space, PropertySpace):
            space.houses = entry.houses
            space.has_hotel = entry.has_hotel
