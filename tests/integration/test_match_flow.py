"""Integration tests: whole matches through the watcher.

These tests feed realistic client log excerpts through LogWatcher, in
batches as the tailer would deliver them, and check the resulting state.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import pytest

from hearth_watcher.core.config import WatcherSettings
from hearth_watcher.engine.notifier import WatcherEvent
from hearth_watcher.engine.watcher import LogWatcher
from hearth_watcher.models.entities import UNKNOWN_CARD_NAME
from hearth_watcher.models.enums import CardState, MatchLogType, PlayStatus, Position


if TYPE_CHECKING:
    from pathlib import Path

    from conftest import FakeClock, LogLines

    from hearth_watcher.data.cards import CardDatabase
    from hearth_watcher.models.game_state import GameState


ALICE = "Alice#1111"
BOB = "Bob#2222"


def opening(log: LogLines) -> list[str]:
    """Game creation, players, starting decks and the mulligan."""
    return [
        *log.create_game(),
        *log.players(),
        log.game_state("FULL_ENTITY - Creating ID=4 CardID=CS2_029", indent=4),
        log.game_state("tag=CONTROLLER value=1", indent=8),
        log.game_state("tag=COST value=4", indent=8),
        log.game_state(f"TAG_CHANGE Entity={ALICE} tag=MULLIGAN_STATE value=INPUT", indent=4),
        log.zone_change("Fireball", 4, "CS2_029", 1, "", "FRIENDLY DECK"),
        log.zone_change("Chillwind Yeti", 5, "CS2_182", 1, "", "FRIENDLY DECK"),
        log.zone_change("Boulderfist Ogre", 41, "CS2_200", 2, "", "OPPOSING DECK"),
        log.zone_change("Noble Sacrifice", 40, "EX1_130", 2, "", "OPPOSING DECK"),
        log.game_tag("GameEntity", "NEXT_STEP", "MAIN_READY"),
        log.game_tag("GameEntity", "STEP", "MAIN_READY"),
        log.current_player(ALICE, 1),
    ]


def alice_turn(log: LogLines) -> list[str]:
    """Alice draws Fireball and throws it at Bob's Ooze."""
    fireball = log.card("Fireball", 4, "CS2_029", 1, zone="HAND")
    ooze = log.card("Acidic Swamp Ooze", 62, "EX1_066", 2, zone="PLAY", zone_pos=1)
    return [
        log.zone_change("Fireball", 4, "CS2_029", 1, "FRIENDLY DECK", "FRIENDLY HAND"),
        log.task_list(
            f"BLOCK_START BlockType=PLAY Entity={fireball} EffectCardId=System.String "
            f"EffectIndex=0 Target={ooze} SubOption=-1",
            indent=4,
        ),
        log.task_list(f"TAG_CHANGE Entity={ooze} tag=DAMAGE value=6", indent=8),
        log.task_list(f"TAG_CHANGE Entity={ooze} tag=ZONE value=GRAVEYARD", indent=8),
        log.task_list("BLOCK_END", indent=4),
        log.zone_change("Fireball", 4, "CS2_029", 1, "FRIENDLY HAND", "FRIENDLY PLAY"),
        log.current_player(ALICE, 0),
        log.current_player(BOB, 1),
    ]


def bob_turn(log: LogLines) -> list[str]:
    """Bob plays a secret and attacks with a minion that is revealed later."""
    hidden = log.card(UNKNOWN_CARD_NAME, 61, "", 2, zone="PLAY")
    yeti = log.card("Chillwind Yeti", 63, "CS2_182", 1, zone="PLAY")
    return [
        log.zone_change("Noble Sacrifice", 40, "EX1_130", 2, "OPPOSING DECK", "OPPOSING SECRET"),
        log.task_list(f"BLOCK_START BlockType=ATTACK Entity={hidden} EffectCardId= EffectIndex=0 Target={yeti}"),
        log.task_list(f"TAG_CHANGE Entity={yeti} tag=DAMAGE value=6", indent=8),
        log.task_list("BLOCK_END", indent=4),
        log.current_player(BOB, 0),
        log.current_player(ALICE, 1),
    ]


def reveal_and_discover(log: LogLines) -> list[str]:
    """The attacker is revealed and Alice discovers a card."""
    revealed = log.card("Boulderfist Ogre", 61, "CS2_200", 2, zone="PLAY")
    source = log.card("Tracking", 70, "DS1_184", 1, zone="SETASIDE")
    first = log.card("Fireball", 71, "CS2_029", 1, zone="SETASIDE")
    second = log.card("Chillwind Yeti", 72, "CS2_182", 1, zone="SETASIDE")
    return [
        log.task_list(f"TAG_CHANGE Entity={revealed} tag=ATK value=6"),
        log.choices(f"id=7 Player={ALICE} TaskList=30 ChoiceType=GENERAL CountMin=1 CountMax=1"),
        log.choices(f"Source={source}", indent=3),
        log.choices(f"Entities[0]={first}", indent=3),
        log.choices(f"Entities[1]={second}", indent=3),
        log.chosen(f"id=7 Player={ALICE} EntitiesCount=1"),
        log.chosen(f"Entities[0]={first}", indent=3),
    ]


def game_over(log: LogLines) -> list[str]:
    return [log.play_state(BOB, "LOST"), log.play_state(ALICE, "WON")]


@pytest.fixture
def watcher(tmp_path: Path, cards: CardDatabase, clock: FakeClock) -> LogWatcher:
    settings = WatcherSettings(log_file=tmp_path / "Player.log", log_directory=tmp_path / "matches")
    return LogWatcher(settings, cards=cards, clock=clock)


class TestFullMatch:
    """A complete match parsed batch by batch."""

    @pytest.fixture
    def final_state(self, watcher: LogWatcher, log: LogLines, clock: FakeClock) -> GameState:
        watcher.parse_lines(opening(log))
        clock.advance(40)
        watcher.parse_lines(alice_turn(log))
        clock.advance(30)
        watcher.parse_lines(bob_turn(log))
        watcher.parse_lines(reveal_and_discover(log))
        clock.advance(20)
        return watcher.parse_lines(game_over(log))

    def test_outcome(self, final_state: GameState) -> None:
        """Test the match completes with statuses and duration."""
        alice, bob = final_state.players

        assert final_state.complete is True
        assert final_state.match_duration == 90
        assert alice.status == PlayStatus.WON
        assert bob.status == PlayStatus.LOST
        assert alice.position == Position.BOTTOM
        assert bob.position == Position.TOP

    def test_turn_history(self, final_state: GameState) -> None:
        """Test every turn is closed with its duration."""
        alice, bob = final_state.players

        assert [t.duration for t in alice.turn_history] == [40, 20]
        assert [t.duration for t in bob.turn_history] == [30]
        assert final_state.turn_start_time == 1000.0

    def test_card_bookkeeping(self, final_state: GameState) -> None:
        """Test deck counts and card states after draws and plays."""
        alice, bob = final_state.players

        assert alice.card_count == 1
        assert alice.get_card(4) is not None
        assert alice.get_card(4).state == CardState.OTHERS
        assert alice.get_card(5) is not None
        assert alice.get_card(5).state == CardState.DECK
        assert not any(card.is_spawned_card for card in alice.cards)
        assert bob.card_count == 1
        assert [secret.card_name for secret in bob.secrets] == ["Noble Sacrifice"]

    def test_match_log(self, final_state: GameState) -> None:
        """Test recorded actions, including the backfilled attacker."""
        play, attack = final_state.match_log

        assert play.type == MatchLogType.PLAY
        assert play.mana_spent == 4
        assert play.get_target(62) is not None
        assert play.get_target(62).dead is True
        assert attack.type == MatchLogType.ATTACK
        assert attack.source.card_name == "Boulderfist Ogre"
        assert attack.targets[0].damage == 6
        assert final_state.missing_entity_ids == set()

    def test_discovery(self, final_state: GameState) -> None:
        """Test the discover choice lands in the history."""
        alice = final_state.players[0]

        assert alice.discovery.enabled is False
        assert len(alice.discover_history) == 1
        assert alice.discover_history[0].chosen is not None
        assert alice.discover_history[0].chosen.card_name == "Fireball"

    def test_match_file(self, watcher: LogWatcher, final_state: GameState, tmp_path: Path) -> None:
        """Test the recorder wrote and closed the match file."""
        assert watcher.recorder is not None
        assert not watcher.recorder.is_open
        (path,) = watcher.recorder.written_paths

        assert path.parent == tmp_path / "matches"
        assert path.name == "1000000_Alice#1111_vs_Bob#2222.log"
        assert len(path.read_text(encoding="utf-8").splitlines()) > 30


class TestLiveTailing:
    """The watcher following a file that is being written."""

    def test_appended_lines_are_published(self, tmp_path: Path, cards: CardDatabase, log: LogLines) -> None:
        """Test lines appended while running reach subscribers."""
        log_file = tmp_path / "Player.log"
        log_file.write_text("", encoding="utf-8")
        settings = WatcherSettings(log_file=log_file, debounce_seconds=0.05, poll_interval=0.02)
        watcher = LogWatcher(settings, cards=cards)
        complete = threading.Event()

        def on_change(state: GameState) -> None:
            if state.complete:
                complete.set()

        watcher.subscribe(WatcherEvent.STATE_CHANGED, on_change)
        watcher.start()
        try:
            with open(log_file, "a", encoding="utf-8") as handle:
                for line in [*opening(log), *game_over(log)]:
                    handle.write(line + "\n")
            assert complete.wait(5.0)
        finally:
            watcher.stop()

        assert [p.name for p in watcher.game_state.players] == [ALICE, BOB]
        assert watcher.tailer.last_read_offset == 0
