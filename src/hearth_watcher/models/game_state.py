"""Game state models for the Hearthstone log watcher.

This module defines the canonical, mutable model of one match as
reconstructed from the client log.

Models:
    TurnRecord: Start time and duration of one turn.
    Card: A card tracked in a player's deck/hand bookkeeping.
    Secret: A secret currently in play.
    Quest: A quest currently in play, with its progress.
    Discovery: A pending or completed discover choice.
    Player: One of the two players of a match.
    GameState: The aggregate root mutated by the parser pipeline.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from hearth_watcher.models.entities import CardEntity, EntityProps, is_empty_name
from hearth_watcher.models.enums import (
    CardClass,
    CardState,
    EntityTag,
    PlayStatus,
    Position,
    Team,
)
from hearth_watcher.models.match_log import MatchLogEntry


DEFAULT_TIMEOUT = 45


# =============================================================================
# Player Sub-State
# =============================================================================


class TurnRecord(BaseModel):
    """Timing of one turn. ``duration`` stays None while the turn is open."""

    start_time: float
    duration: float | None = None

    @property
    def is_open(self) -> bool:
        return self.duration is None


class Card(BaseModel):
    """A card in a player's bookkeeping, keyed by entity id.

    Attributes:
        entity_id: Client entity id (distinguishes copies of the same card).
        card_id: Numeric database id, None while unknown.
        card_name: Display name, None while unknown.
        state: Coarse zone of the card.
        is_spawned_card: False only for cards of the original deck.
        tags: Derived display tags.
    """

    model_config = ConfigDict(extra="forbid")

    entity_id: int
    card_id: int | None = None
    card_name: str | None = None
    state: CardState
    is_spawned_card: bool = Field(frozen=True)
    tags: list[EntityTag] = Field(default_factory=list)


class Secret(BaseModel):
    """A secret occupying a player's secret zone."""

    entity_id: int
    card_id: str
    card_class: CardClass
    card_name: str
    timestamp: float


class Quest(BaseModel):
    """A quest occupying a player's secret zone."""

    entity_id: int
    card_name: str
    card_class: CardClass
    progress: int = 0
    requirement: int
    sidequest: bool = False
    timestamp: float


class Discovery(BaseModel):
    """State of a discover choice offered to a player."""

    enabled: bool = False
    id: str | None = None
    source: EntityProps | None = None
    chosen: EntityProps | None = None
    options: list[EntityProps] = Field(default_factory=list)


class Player(BaseModel):
    """One of the two players of a match.

    Attributes:
        id: Player id assigned by the client.
        name: Display name (may be a placeholder until revealed).
        status: Terminal status, UNSET while the match is running.
        turn: Whether it is currently this player's turn.
        turn_history: Timing of every turn this player has started.
        timeout: Turn timer in seconds.
        card_count: Cards currently in the deck.
        cards: Tracked cards, unique by entity id.
        position: Screen side.
        secrets: Secrets in play.
        quests: Quests in play.
        discovery: Current discover choice.
        discover_history: Completed discover choices.
        cards_replaced_in_mulligan: Cards swapped during the mulligan.
        available_mana: Mana crystals available this turn.
        mana_spent: Mana spent this turn.
    """

    id: int
    name: str
    status: PlayStatus = PlayStatus.UNSET
    turn: bool = False
    turn_history: list[TurnRecord] = Field(default_factory=list)
    timeout: int = DEFAULT_TIMEOUT
    card_count: int = 0
    cards: list[Card] = Field(default_factory=list)
    position: Position = Position.BOTTOM
    secrets: list[Secret] = Field(default_factory=list)
    quests: list[Quest] = Field(default_factory=list)
    discovery: Discovery = Field(default_factory=Discovery)
    discover_history: list[Discovery] = Field(default_factory=list)
    cards_replaced_in_mulligan: int = 0
    available_mana: int = 0
    mana_spent: int = 0

    @property
    def last_turn(self) -> TurnRecord | None:
        return self.turn_history[-1] if self.turn_history else None

    def begin_turn(self, now: float) -> None:
        """Open a new turn unless one is already open."""
        last = self.last_turn
        if last is None or not last.is_open:
            self.turn_history.append(TurnRecord(start_time=now))

    def end_turn(self, now: float) -> None:
        """Close the open turn, if any."""
        last = self.last_turn
        if last is not None and last.is_open:
            last.duration = now - last.start_time

    def get_card(self, entity_id: int) -> Card | None:
        for card in self.cards:
            if card.entity_id == entity_id:
                return card
        return None

    def put_card(
        self,
        entity_id: int,
        *,
        state: CardState | None = None,
        card_id: int | None = None,
        card_name: str | None = None,
        is_spawned_card: bool | None = None,
    ) -> Card | None:
        """Update a card in place, or insert it if it is not tracked yet.

        Known values are only replaced by known values. A card is only
        inserted when both ``state`` and ``is_spawned_card`` are given.

        Returns:
            The updated or inserted card, or None if nothing was stored.
        """
        card = self.get_card(entity_id)
        if card is not None:
            if card_id:
                card.card_id = card_id
            if not is_empty_name(card_name):
                card.card_name = card_name
            if state is not None:
                card.state = state
            return card

        if state is None or is_spawned_card is None:
            return None

        card = Card(
            entity_id=entity_id,
            card_id=card_id,
            card_name=card_name or None,
            state=state,
            is_spawned_card=is_spawned_card,
        )
        self.cards.append(card)
        return card

    def remove_card(self, entity_id: int) -> Card | None:
        """Remove a card from the bookkeeping and return it."""
        card = self.get_card(entity_id)
        if card is not None:
            self.cards.remove(card)
        return card


# =============================================================================
# Game State
# =============================================================================


class GameState:
    """Canonical model of one match.

    The parser pipeline is the only writer. Subscribers receive this
    object by reference and must treat it as read-only.

    Attributes:
        start_time: When the current match started (None before any match).
        match_duration: Set once, when the second terminal status arrives.
        game_over_count: Number of terminal status lines seen (0..2).
        players: Registered players (at most two).
        begin_phase_active: Whether the begin phase is still running.
        mulligan_active: Whether the mulligan is in progress.
        turn_start_time: When the current main phase started.
        match_log: Recorded match actions, in order.
        entities: Last-known facts per entity id, used for name resolution.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize an empty game state.

        Args:
            clock: Time source returning seconds; injectable for tests.
        """
        self.clock = clock
        self.reset()

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def active(self) -> bool:
        """True while a started match has not completed."""
        return self.start_time is not None and not self.complete

    @property
    def complete(self) -> bool:
        """True once both players received a terminal status."""
        return self.game_over_count >= 2

    @property
    def missing_entity_ids(self) -> set[int]:
        """Entity ids referenced by the match log before their name was known."""
        return self._missing_entity_ids

    def now(self) -> float:
        return self.clock()

    def reset(self) -> None:
        """Return the state to empty, before-any-match conditions."""
        self.start_time: float | None = None
        self.match_duration: float | None = None
        self.game_over_count = 0
        self.players: list[Player] = []
        self.begin_phase_active = True
        self.mulligan_active = False
        self.turn_start_time: float | None = None
        self.match_log: list[MatchLogEntry] = []
        self.entities: dict[int, CardEntity] = {}
        self._missing_entity_ids: set[int] = set()

    def start(self) -> None:
        """Reset the state and mark a new match as started."""
        self.reset()
        self.start_time = self.now()

    # -------------------------------------------------------------------------
    # Player lookups
    # -------------------------------------------------------------------------

    def get_player_by_id(self, player_id: int) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def get_player_by_position(self, position: Position) -> Player | None:
        return next((p for p in self.players if p.position == position), None)

    def get_player_by_name(self, name: str) -> Player | None:
        return next((p for p in self.players if p.name == name), None)

    def get_player_by_team(self, team: Team | str | None) -> Player | None:
        """Map a zone-change team token to the player on that side."""
        if not team:
            return None
        return self.get_player_by_position(Team(team).position)

    def get_all_players(self) -> list[Player]:
        return list(self.players)

    def get_opponent_player(self, player: Player) -> Player | None:
        return next((p for p in self.players if p.id != player.id), None)

    def get_current_player(self) -> Player | None:
        """The player whose turn it is, if any."""
        return next((p for p in self.players if p.turn), None)

    # -------------------------------------------------------------------------
    # Entities and match log
    # -------------------------------------------------------------------------

    def get_entity(self, entity_id: int) -> CardEntity | None:
        return self.entities.get(entity_id)

    def add_match_log_entry(self, *entries: MatchLogEntry) -> None:
        """Append entries and remember entities still waiting for a name."""
        for entry in entries:
            for props in entry.participants():
                if is_empty_name(props.card_name):
                    self._missing_entity_ids.add(props.entity_id)
        self.match_log.extend(entries)


__all__ = [
    "DEFAULT_TIMEOUT",
    "TurnRecord",
    "Card",
    "Secret",
    "Quest",
    "Discovery",
    "Player",
    "GameState",
]
