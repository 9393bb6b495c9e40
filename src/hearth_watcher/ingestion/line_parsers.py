"""The recognizers turning client log lines into game state mutations.

``build_line_parsers`` returns them in evaluation order. Every line is
offered to every recognizer; several may act on the same line. Where two
recognizers touch the same piece of state, their relative order is noted
next to their declaration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from hearth_watcher.data.meta import DECK_CARD_COUNT, QUESTS, SECRET_CLASSES
from hearth_watcher.ingestion.entity_parser import parse_card_reference, parse_entity
from hearth_watcher.ingestion.entity_resolver import resolve_entity
from hearth_watcher.ingestion.factory import (
    BlockParser,
    Groups,
    Label,
    LineHandler,
    LineParser,
    Recognizer,
)
from hearth_watcher.models.entities import (
    EntityFact,
    EntityProps,
    GameEntity,
    PlayerEntity,
    identify_special_tags,
)
from hearth_watcher.models.enums import CardState, MatchLogType, PlayStatus, Position, Team, Zone
from hearth_watcher.models.game_state import Discovery, GameState, Player, Quest, Secret
from hearth_watcher.models.match_log import MatchLogEntry


if TYPE_CHECKING:
    import structlog

    from hearth_watcher.data.cards import CardDatabase


UNKNOWN_PLAYER_NAME = "UNKNOWN HUMAN PLAYER"
ENTITY_REFERENCE = r"\[entityName=.*? player=\d+\]"
MAX_PLAYERS = 2


def _to_int(value: str, default: int = 0) -> int:
    try:
        return int(value)
    except ValueError:
        return default


# =============================================================================
# Match lifecycle
# =============================================================================


def handle_game_start(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
    game_state.start()
    logger.info("A new game has started")
    return True


def handle_player_joined(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
    """Register a player, or reveal the name of a placeholder player."""
    player_id = int(groups["id"])
    name = groups["name"]

    existing = game_state.get_player_by_id(player_id)
    if existing is not None:
        if existing.name == UNKNOWN_PLAYER_NAME and name != UNKNOWN_PLAYER_NAME:
            existing.name = name
            logger.info("Player name revealed", player_id=player_id, name=name)
            return True
        return False

    if game_state.num_players >= MAX_PLAYERS:
        logger.warning("Ignoring extra player", player_id=player_id, name=name)
        return False

    game_state.players.append(Player(id=player_id, name=name))
    logger.info("Player has joined", player_id=player_id, name=name)
    return True


def handle_past_begin_phase(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
    game_state.begin_phase_active = False
    return True


def handle_game_over(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
    """Record a terminal status; the second one completes the match."""
    if game_state.complete:
        logger.debug("Match already complete", player=groups["playerName"])
        return False

    player = game_state.get_player_by_name(groups["playerName"])
    if player is not None:
        player.status = PlayStatus(groups["status"])

    game_state.game_over_count += 1
    if game_state.complete:
        now = game_state.now()
        current = game_state.get_current_player()
        if current is not None:
            current.end_turn(now)
        if game_state.start_time is not None:
            game_state.match_duration = now - game_state.start_time
        logger.info("Game has ended", duration=game_state.match_duration)
    return True


# =============================================================================
# Mulligan and turns
# =============================================================================


def handle_mulligan_start(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
    game_state.mulligan_active = True
    logger.info("Mulligan has started")
    return True


def handle_mulligan_result(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
    """Compute how many cards a player replaced during the mulligan."""
    if not game_state.mulligan_active:
        return False

    player = game_state.get_player_by_name(groups["name"])
    if player is None:
        logger.debug("Unknown player in mulligan result", name=groups["name"])
        return False

    cards_left = int(groups["cardsLeft"])
    player.cards_replaced_in_mulligan = DECK_CARD_COUNT - player.card_count - cards_left
    logger.info(
        "Mulligan result",
        player=player.name,
        cards_replaced=player.cards_replaced_in_mulligan,
    )
    return True


def handle_turn_change(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
    """Flip the turn flag and keep both players' turn history consistent."""
    player = game_state.get_player_by_name(groups["playerName"])
    if player is None:
        logger.debug("Unknown player in turn change", name=groups["playerName"])
        return False

    now = game_state.now()
    player.turn = groups["turn"] == "1"
    opponent = game_state.get_opponent_player(player)
    if opponent is not None:
        opponent.turn = not player.turn

    if player.turn:
        if opponent is not None:
            opponent.end_turn(now)
        player.begin_turn(now)
    else:
        player.end_turn(now)

    logger.info("Turn changed", player=player.name, begun=player.turn)
    return True


def handle_game_tag_change(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
    """Route tags of the game and player entities."""
    entity, tag, value = groups["entity"], groups["tag"], groups["value"]
    target = parse_entity(entity, game_state)
    changed = False

    if isinstance(target, GameEntity):
        if tag == "NEXT_STEP" and value == "MAIN_READY":
            game_state.mulligan_active = False
            changed = True
        if tag == "STEP" and value == "MAIN_READY":
            game_state.turn_start_time = game_state.now()
            if not any(player.turn for player in game_state.players):
                bottom = game_state.get_player_by_position(Position.BOTTOM)
                if bottom is not None:
                    bottom.turn = True
            changed = True

    if tag == "MULLIGAN_STATE" and value == "INPUT":
        game_state.mulligan_active = True
        changed = True

    if tag in ("TIMEOUT", "RESOURCES", "RESOURCES_USED") and isinstance(target, PlayerEntity):
        player = game_state.get_player_by_name(target.name)
        if player is not None:
            if tag == "TIMEOUT":
                player.timeout = _to_int(value, player.timeout)
            elif tag == "RESOURCES":
                player.available_mana = _to_int(value)
            else:
                player.mana_spent = _to_int(value)
            changed = True

    if changed:
        logger.debug("Tag changed", entity=entity, tag=tag, value=value)
    return changed


# =============================================================================
# Cards
# =============================================================================


def make_zone_change_handler(cards: CardDatabase) -> LineHandler:
    """Build the zone-change handler bound to a card table."""

    def handle_zone_change(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
        card_code = groups["cardId"]
        card_name = groups["entityName"]
        record = cards.get(card_code)
        if record is None:
            logger.debug("Cannot find card", card_id=card_code)
            return False
        if not groups["entityId"]:
            return False

        entity_id = int(groups["entityId"])
        from_team, from_zone = groups["fromTeam"], groups["fromZone"]
        to_team, to_zone = groups["toTeam"], groups["toZone"]

        player = game_state.get_player_by_id(int(groups["playerId"]))
        if player is None:
            logger.debug("Unknown player in zone change", player_id=groups["playerId"])
            return False
        opponent = game_state.get_opponent_player(player)
        if opponent is None:
            return False

        # Positions are derived from where the mulligan deals each player's cards.
        if game_state.mulligan_active and to_zone in (Zone.HAND, Zone.DECK) and to_team:
            player.position = Team(to_team).position
            opponent.position = Position.TOP if player.position is Position.BOTTOM else Position.BOTTOM

        resolve_entity(
            game_state,
            EntityFact(
                entity_id=entity_id,
                card_id=record.dbf_id,
                card_name=card_name,
                player=player.position,
            ),
        )

        from_player = game_state.get_player_by_team(from_team)
        to_player = game_state.get_player_by_team(to_team)
        moved = None

        if from_player is not None:
            if from_zone in (Zone.DECK, Zone.HAND):
                changes_owner = to_player is not None and to_player is not from_player
                if changes_owner and to_zone in (Zone.DECK, Zone.HAND):
                    moved = from_player.remove_card(entity_id)
                else:
                    from_player.put_card(
                        entity_id,
                        state=CardState.OTHERS,
                        card_id=record.dbf_id,
                        card_name=card_name,
                    )
            if from_zone == Zone.DECK:
                from_player.card_count -= 1
            if from_zone == Zone.SECRET:
                if card_code in QUESTS:
                    from_player.quests = [q for q in from_player.quests if q.entity_id != entity_id]
                if card_code in SECRET_CLASSES:
                    from_player.secrets = [s for s in from_player.secrets if s.entity_id != entity_id]

        if to_player is not None:
            if to_zone in (Zone.DECK, Zone.HAND):
                # A card is tracked by one player only, wherever it was before.
                for other in game_state.players:
                    if other is not to_player:
                        removed = other.remove_card(entity_id)
                        if removed is not None and moved is None:
                            moved = removed
                card = to_player.put_card(
                    entity_id,
                    state=CardState(to_zone),
                    card_id=record.dbf_id,
                    card_name=card_name,
                    is_spawned_card=moved.is_spawned_card if moved is not None else not game_state.mulligan_active,
                )
                if card is not None:
                    card.tags = identify_special_tags(game_state.get_entity(entity_id)) or []
            if to_zone == Zone.DECK:
                to_player.card_count += 1
            if to_zone == Zone.SECRET:
                _enter_secret_zone(game_state, to_player, entity_id, card_code, card_name)

        logger.debug(
            "Card moved",
            card_name=card_name,
            from_team=from_team,
            from_zone=from_zone,
            to_team=to_team,
            to_zone=to_zone,
        )
        return True

    return handle_zone_change


def _enter_secret_zone(
    game_state: GameState,
    player: Player,
    entity_id: int,
    card_code: str,
    card_name: str,
) -> None:
    now = game_state.now()
    quest = QUESTS.get(card_code)
    if quest is not None and not any(q.entity_id == entity_id for q in player.quests):
        player.quests.append(
            Quest(
                entity_id=entity_id,
                card_name=card_name,
                card_class=quest.card_class,
                requirement=quest.requirement,
                sidequest=quest.sidequest,
                timestamp=now,
            )
        )
    secret_class = SECRET_CLASSES.get(card_code)
    if secret_class is not None and not any(s.entity_id == entity_id for s in player.secrets):
        player.secrets.append(
            Secret(
                entity_id=entity_id,
                card_id=card_code,
                card_class=secret_class,
                card_name=card_name,
                timestamp=now,
            )
        )


def make_tag_change_handler(cards: CardDatabase) -> LineHandler:
    """Build the card tag-change handler bound to a card table."""

    def handle_tag_change(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> bool:
        if not groups["entityId"]:
            return False

        entity_id = int(groups["entityId"])
        player_id = int(groups["playerId"])
        tag, value = groups["tag"], groups["value"]
        record = cards.get(groups["cardId"])
        player = game_state.get_player_by_id(player_id)

        changed = resolve_entity(
            game_state,
            EntityFact(
                entity_id=entity_id,
                card_id=record.dbf_id if record else None,
                card_name=groups["cardName"],
                player=player.position if player else None,
                tags={tag: value},
            ),
        )

        if tag == "QUEST_PROGRESS" and player is not None and value.isdigit():
            quest = next((q for q in player.quests if q.entity_id == entity_id), None)
            if quest is not None:
                quest.progress = int(value)
                changed = True

        logger.debug(
            "Card tag changed",
            player_id=player_id,
            card_name=groups["cardName"],
            tag=tag,
            value=value,
        )
        return changed

    return handle_tag_change


# =============================================================================
# Blocks
# =============================================================================


@dataclass
class CardInitBlock:
    entity_id: int
    card_code: str


@dataclass
class MatchLogBlock:
    entry: MatchLogEntry


@dataclass
class DiscoveryBlock:
    player: Player


def make_card_init_parser(cards: CardDatabase) -> BlockParser[CardInitBlock]:
    """Record the initial tags of entities created during the begin phase."""

    def initialize(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> CardInitBlock | None:
        if not game_state.active or not game_state.begin_phase_active:
            return None
        return CardInitBlock(entity_id=int(groups["entityId"]), card_code=groups["cardId"])

    def handle_line(
        groups: Groups,
        game_state: GameState,
        block: CardInitBlock,
        logger: structlog.BoundLogger,
    ) -> bool:
        tag, value = groups["tag"], groups["value"]
        record = cards.get(block.card_code)
        side = None
        if tag == "CONTROLLER":
            controller = game_state.get_player_by_id(_to_int(value, -1))
            side = controller.position if controller else None
        return resolve_entity(
            game_state,
            EntityFact(
                entity_id=block.entity_id,
                card_id=record.dbf_id if record else None,
                card_name=record.name if record else None,
                player=side,
                tags={tag: value},
            ),
        )

    return BlockParser(
        name="card-init",
        label=Label.POWER_GAME_STATE,
        start_regex=r"FULL_ENTITY - Creating ID=(?P<entityId>\d+) CardID=(?P<cardId>\S*)",
        initialize_block_state=initialize,
        line_regex=r"^tag=(?P<tag>\S+) value=(?P<value>\S*)",
        line_handler=handle_line,
        indent_offset=4,
    )


def make_match_log_parser(cards: CardDatabase) -> BlockParser[MatchLogBlock]:
    """Record attacks, plays and secret triggers in the match log."""

    def initialize(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> MatchLogBlock | None:
        source_ref = parse_card_reference(groups["entity"])
        if source_ref is None:
            return None

        log_type = MatchLogType(groups["blockType"].lower())
        if log_type is MatchLogType.TRIGGER and source_ref.zone != Zone.SECRET:
            return None

        resolve_entity(game_state, source_ref.to_fact(game_state, cards))
        source = game_state.get_entity(source_ref.entity_id)
        if source is None:
            return None

        entry = MatchLogEntry.create(log_type, source)
        if log_type is MatchLogType.PLAY:
            entry.mana_spent = _to_int(source.tags.get("COST", "0"))

        target_ref = parse_card_reference(groups["target"])
        if target_ref is not None:
            resolve_entity(game_state, target_ref.to_fact(game_state, cards))
            entry.add_target(game_state.get_entity(target_ref.entity_id))

        game_state.add_match_log_entry(entry)
        logger.debug(
            "Match action recorded",
            type=log_type.value,
            source=source.card_name,
            targets=len(entry.targets),
        )
        return MatchLogBlock(entry=entry)

    def handle_line(
        groups: Groups,
        game_state: GameState,
        block: MatchLogBlock,
        logger: structlog.BoundLogger,
    ) -> bool:
        ref = parse_card_reference(groups["entity"])
        if ref is None:
            return False
        entry = block.entry

        if groups["tag"] == "ZONE":
            if groups["value"] != Zone.GRAVEYARD:
                return False
            return bool(entry.mark_deaths({ref.entity_id}))

        damage = _to_int(groups["value"])
        if damage <= 0:
            return False
        props = entry.source if entry.source.entity_id == ref.entity_id else entry.get_target(ref.entity_id)
        if props is not None:
            props.damage = damage
            return True

        resolve_entity(game_state, ref.to_fact(game_state, cards))
        entity = game_state.get_entity(ref.entity_id)
        entry.add_target(entity, damage=damage)
        return True

    return BlockParser(
        name="match-log",
        label=Label.POWER_TASK_LIST,
        start_regex=(
            r"BLOCK_START BlockType=(?P<blockType>ATTACK|PLAY|TRIGGER) "
            rf"Entity=(?P<entity>{ENTITY_REFERENCE}|\S+) EffectCardId=.*? "
            rf"Target=(?P<target>{ENTITY_REFERENCE}|\S+)"
        ),
        initialize_block_state=initialize,
        line_regex=(
            rf"^TAG_CHANGE Entity=(?P<entity>{ENTITY_REFERENCE}) "
            r"tag=(?P<tag>DAMAGE|ZONE) value=(?P<value>\S+)"
        ),
        line_handler=handle_line,
        indent_offset=4,
        notify_on_start=True,
    )


def make_discovery_parsers(cards: CardDatabase) -> list[BlockParser[DiscoveryBlock]]:
    """Track discover choices: the options offered, then the one chosen."""

    def snapshot(groups: Groups, game_state: GameState) -> EntityProps | None:
        ref = parse_card_reference(groups["entity"])
        if ref is None:
            return None
        resolve_entity(game_state, ref.to_fact(game_state, cards))
        entity = game_state.get_entity(ref.entity_id)
        return EntityProps.from_entity(entity) if entity else None

    def open_choices(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> DiscoveryBlock | None:
        player = game_state.get_player_by_name(groups["playerName"])
        if player is None:
            return None
        player.discovery = Discovery(enabled=True, id=groups["choiceId"])
        logger.debug("Discovery opened", player=player.name, choice_id=groups["choiceId"])
        return DiscoveryBlock(player=player)

    def handle_option(
        groups: Groups,
        game_state: GameState,
        block: DiscoveryBlock,
        logger: structlog.BoundLogger,
    ) -> bool:
        discovery = block.player.discovery
        props = snapshot(groups, game_state)
        if props is None or not discovery.enabled:
            return False
        if groups["kind"] == "Source":
            discovery.source = props
        elif all(option.entity_id != props.entity_id for option in discovery.options):
            discovery.options.append(props)
        return True

    def open_chosen(groups: Groups, game_state: GameState, logger: structlog.BoundLogger) -> DiscoveryBlock | None:
        player = game_state.get_player_by_name(groups["playerName"])
        if player is None or not player.discovery.enabled:
            return None
        if player.discovery.id != groups["choiceId"]:
            return None
        return DiscoveryBlock(player=player)

    def handle_chosen(
        groups: Groups,
        game_state: GameState,
        block: DiscoveryBlock,
        logger: structlog.BoundLogger,
    ) -> bool:
        player = block.player
        if not player.discovery.enabled:
            return False
        props = snapshot(groups, game_state)
        if props is None:
            return False
        player.discovery.chosen = props
        player.discovery.enabled = False
        player.discover_history.append(player.discovery.model_copy(deep=True))
        player.discovery = Discovery()
        logger.info("Discovery resolved", player=player.name, chosen=props.card_name)
        return True

    return [
        BlockParser(
            name="discovery-options",
            label=Label.POWER_ENTITY_CHOICES,
            start_regex=(
                r"id=(?P<choiceId>\d+) Player=(?P<playerName>.+?) TaskList=\d* ChoiceType=GENERAL"
            ),
            initialize_block_state=open_choices,
            line_regex=rf"^(?P<kind>Source|Entities\[\d+\])=(?P<entity>{ENTITY_REFERENCE})",
            line_handler=handle_option,
            indent_offset=2,
            notify_on_start=True,
        ),
        BlockParser(
            name="discovery-chosen",
            label=Label.POWER_ENTITIES_CHOSEN,
            start_regex=r"id=(?P<choiceId>\d+) Player=(?P<playerName>.+?) EntitiesCount=\d+",
            initialize_block_state=open_chosen,
            line_regex=rf"^Entities\[\d+\]=(?P<entity>{ENTITY_REFERENCE})",
            line_handler=handle_chosen,
            indent_offset=2,
        ),
    ]


# =============================================================================
# Ordered collection
# =============================================================================


def build_line_parsers(cards: CardDatabase) -> list[Recognizer]:
    """Build every recognizer, in evaluation order.

    Args:
        cards: Card table consulted by card-related recognizers.
    """
    return [
        # Resets the state, so it must run before anything reading it.
        LineParser(
            name="game-start",
            label=Label.POWER_GAME_STATE,
            regex=r"CREATE_GAME",
            handler=handle_game_start,
        ),
        LineParser(
            name="player-joined",
            label=Label.POWER_GAME_STATE_OR_GAME,
            regex=r"PlayerID=(?P<id>\d+), PlayerName=(?P<name>.+)$",
            handler=handle_player_joined,
        ),
        LineParser(
            name="mulligan-start",
            label=Label.POWER_GAME_STATE,
            regex=r"TAG_CHANGE Entity=.+ tag=MULLIGAN_STATE value=INPUT",
            handler=handle_mulligan_start,
        ),
        LineParser(
            name="mulligan-result",
            label=Label.POWER_ENTITIES_CHOSEN,
            regex=r"id=\d+ Player=(?P<name>.+) EntitiesCount=(?P<cardsLeft>\d+)",
            handler=handle_mulligan_result,
        ),
        LineParser(
            name="turn-change",
            label=Label.POWER_GAME_STATE,
            regex=r"TAG_CHANGE Entity=(?P<playerName>.*) tag=CURRENT_PLAYER value=(?P<turn>\d+)",
            handler=handle_turn_change,
        ),
        LineParser(
            name="game-over",
            label=Label.POWER_TASK_LIST,
            regex=r"TAG_CHANGE Entity=(?P<playerName>.+) tag=PLAYSTATE value=(?P<status>LOST|WON|TIED)",
            handler=handle_game_over,
        ),
        # Assigns player positions, which the tag recognizers read.
        LineParser(
            name="zone-change",
            label=Label.ZONE_PROCESS_CHANGES,
            regex=(
                r"id=\d* local=.* \[entityName=(?P<entityName>.*) id=(?P<entityId>\d*) zone=.* "
                r"zonePos=\d* cardId=(?P<cardId>.*) player=(?P<playerId>\d)\] "
                r"zone from ?(?P<fromTeam>FRIENDLY|OPPOSING)? ?(?P<fromZone>.*)? "
                r"-> ?(?P<toTeam>FRIENDLY|OPPOSING)? ?(?P<toZone>.*)?"
            ),
            handler=make_zone_change_handler(cards),
        ),
        LineParser(
            name="tag-change",
            label=Label.POWER_TASK_LIST,
            regex=(
                r"TAG_CHANGE Entity=\[entityName=(?P<cardName>.*) id=(?P<entityId>\d*) zone=.* "
                r"zonePos=\d* cardId=(?P<cardId>.*) player=(?P<playerId>\d)\] "
                r"tag=(?P<tag>\S*) value=(?P<value>\S*)"
            ),
            handler=make_tag_change_handler(cards),
        ),
        LineParser(
            name="game-tag-change",
            label=Label.POWER_TASK_LIST,
            regex=r"TAG_CHANGE Entity=(?P<entity>.*) tag=(?P<tag>\S*) value=(?P<value>\S*)",
            handler=handle_game_tag_change,
        ),
        LineParser(
            name="past-begin-phase",
            label=Label.LOADING_SCREEN_GAME_START,
            regex=r"IsPastBeginPhase\(\)=False",
            handler=handle_past_begin_phase,
        ),
        make_card_init_parser(cards),
        make_match_log_parser(cards),
        *make_discovery_parsers(cards),
    ]


__all__ = [
    "UNKNOWN_PLAYER_NAME",
    "CardInitBlock",
    "MatchLogBlock",
    "DiscoveryBlock",
    "build_line_parsers",
]
