"""Tests for entity merging and match log backfill."""

from __future__ import annotations

from hearth_watcher.ingestion.entity_resolver import merge_entity, resolve_entity
from hearth_watcher.models.entities import UNKNOWN_CARD_NAME, CardEntity, EntityFact
from hearth_watcher.models.enums import CardState, EntityTag, MatchLogType, Position
from hearth_watcher.models.game_state import GameState, Player
from hearth_watcher.models.match_log import MatchLogEntry


class TestMergeEntity:
    """Tests for merge_entity."""

    def test_first_mention(self) -> None:
        """Test a fact about an unknown entity creates a record."""
        merged = merge_entity(None, EntityFact(entity_id=4, card_name="Fireball", card_id=315))

        assert merged.entity_id == 4
        assert merged.card_name == "Fireball"
        assert merged.card_id == 315
        assert merged.player == Position.BOTTOM

    def test_unset_fields_keep_existing(self) -> None:
        """Test unset fields never overwrite known values."""
        existing = CardEntity(entity_id=4, card_id=315, card_name="Fireball", player=Position.TOP)

        merged = merge_entity(existing, EntityFact(entity_id=4, tags={"COST": "4"}))

        assert merged.card_id == 315
        assert merged.card_name == "Fireball"
        assert merged.player == Position.TOP
        assert merged.tags == {"COST": "4"}

    def test_placeholder_does_not_hide_name(self) -> None:
        """Test a later placeholder name keeps the revealed name."""
        existing = CardEntity(entity_id=4, card_name="Fireball")

        merged = merge_entity(existing, EntityFact(entity_id=4, card_name=UNKNOWN_CARD_NAME))

        assert merged.card_name == "Fireball"

    def test_tags_merge_per_key(self) -> None:
        """Test tags are merged key by key, the newest value winning."""
        existing = CardEntity(entity_id=4, tags={"COST": "4", "ZONE": "DECK"})

        merged = merge_entity(existing, EntityFact(entity_id=4, tags={"ZONE": "HAND"}))

        assert merged.tags == {"COST": "4", "ZONE": "HAND"}
        assert existing.tags["ZONE"] == "DECK"


class TestResolveEntity:
    """Tests for resolve_entity."""

    def test_backfills_placeholder_snapshots(self, game_state: GameState) -> None:
        """Test a revealed name patches every snapshot that lacked it."""
        resolve_entity(game_state, EntityFact(entity_id=61, card_name=UNKNOWN_CARD_NAME))
        hidden = game_state.get_entity(61)
        assert hidden is not None
        attack = MatchLogEntry.create(MatchLogType.ATTACK, hidden)
        play = MatchLogEntry.create(MatchLogType.PLAY, CardEntity(entity_id=4, card_name="Fireball"))
        play.add_target(hidden)
        game_state.add_match_log_entry(attack, play)
        assert 61 in game_state.missing_entity_ids

        changed = resolve_entity(
            game_state,
            EntityFact(entity_id=61, card_name="Boulderfist Ogre", card_id=1686),
        )

        assert changed is True
        assert attack.source.card_name == "Boulderfist Ogre"
        assert attack.source.card_id == 1686
        assert play.targets[0].card_name == "Boulderfist Ogre"
        assert play.source.card_name == "Fireball"
        assert 61 not in game_state.missing_entity_ids

    def test_unnamed_entity_stays_missing(self, game_state: GameState) -> None:
        """Test a fact without a name leaves the entity waiting."""
        changed = resolve_entity(game_state, EntityFact(entity_id=61, tags={"ATK": "6"}))

        assert changed is False
        assert 61 in game_state.missing_entity_ids

    def test_not_missing_means_no_patch(self, game_state: GameState) -> None:
        """Test known entities do not touch the match log."""
        changed = resolve_entity(game_state, EntityFact(entity_id=4, card_name="Fireball"))

        assert changed is False
        assert game_state.get_entity(4) is not None

    def test_refreshes_card_tags(self, game_state: GameState) -> None:
        """Test derived tags of tracked cards follow the entity's tags."""
        player = Player(id=1, name="Alice#1111")
        player.put_card(7, state=CardState.HAND, is_spawned_card=False)
        game_state.players.append(player)

        changed = resolve_entity(game_state, EntityFact(entity_id=7, tags={"CORRUPT": "1"}))
        assert changed is True
        assert player.cards[0].tags == [EntityTag.CAN_CORRUPT]

        resolve_entity(game_state, EntityFact(entity_id=7, tags={"CORRUPTEDCARD": "1"}))
        assert player.cards[0].tags == [EntityTag.CORRUPT]

    def test_repeated_fact_changes_nothing(self, game_state: GameState) -> None:
        """Test resolving the same named fact twice is a no-op the second time."""
        player = Player(id=1, name="Alice#1111")
        player.put_card(61, state=CardState.HAND, is_spawned_card=False)
        game_state.players.append(player)
        resolve_entity(game_state, EntityFact(entity_id=61, card_name=UNKNOWN_CARD_NAME))
        hidden = game_state.get_entity(61)
        assert hidden is not None
        game_state.add_match_log_entry(MatchLogEntry.create(MatchLogType.ATTACK, hidden))
        fact = EntityFact(entity_id=61, card_name="Boulderfist Ogre", card_id=1686, tags={"CORRUPT": "1"})

        assert resolve_entity(game_state, fact) is True
        log_before = [entry.model_copy(deep=True) for entry in game_state.match_log]
        tags_before = list(player.cards[0].tags)

        assert resolve_entity(game_state, fact) is False
        assert game_state.match_log == log_before
        assert player.cards[0].tags == tags_before
        assert game_state.missing_entity_ids == set()
