"""
Tests for roster state encoding, decoding and reconciliation.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from rankboard.config import MARVEL_RIVALS, OVERWATCH, DEADLOCK
from rankboard.models import PlayerRecord, PlayerUpdate, RosterState
from rankboard.storage.file_store import FileStateStore
from rankboard.storage.state import (
    decode_state,
    decode_state_result,
    encode_state,
    state_marker,
    upsert_player,
)

T0 = datetime(2026, 1, 15, 10, 0, 0, 123000, tzinfo=timezone.utc)


def ow_record(name="Alpha", rank="Master", tier=2, date=T0, role="Tank"):
    return PlayerRecord(
        game=OVERWATCH, player_name=name, role=role,
        rank_current=rank, tier_current=tier, current_value=3500,
        rank_peak="Grandmaster", tier_peak=1, peak_value=3900, date=date,
    )


def ow_update(name="Alpha", rank="Diamond", tier=1, date=T0, role="Tank"):
    return PlayerUpdate(
        game=OVERWATCH, player_name=name, role=role,
        rank_current=rank, tier_current=tier, current_value=3100,
        rank_peak="Master", tier_peak=3, peak_value=3400, date=date,
        date_raw="test",
    )


def dl_record(name="Ghost", date=T0):
    return PlayerRecord(
        game=DEADLOCK, player_name=name, hero="Haze",
        rank_current="Archon", tier_current=4, current_value=1200, date=date,
    )


class TestEncode:
    """Tests for state_marker and encode_state."""

    def test_marker_format(self):
        assert state_marker(MARVEL_RIVALS) == "LB_STATE:MARVEL_RIVALS:"

    def test_contains_marker_and_json(self):
        encoded = encode_state(RosterState(OVERWATCH, [ow_record()]))
        assert encoded.startswith("LB_STATE:OVERWATCH:")
        payload = json.loads(encoded[len("LB_STATE:OVERWATCH:"):])
        assert payload["players"][0]["playerName"] == "Alpha"
        assert payload["players"][0]["rankCurrent"] == "Master"
        assert payload["players"][0]["date"] == "2026-01-15T10:00:00.123Z"

    def test_deadlock_omits_peak_fields(self):
        encoded = encode_state(RosterState(DEADLOCK, [dl_record()]))
        doc = json.loads(encoded[len(state_marker(DEADLOCK)):])["players"][0]
        assert doc["hero"] == "Haze"
        assert "rankPeak" not in doc
        assert "role" not in doc

    def test_empty_roster(self):
        assert encode_state(RosterState(DEADLOCK)) == 'LB_STATE:DEADLOCK:{"players":[]}'


class TestDecode:
    """Tests for decode_state and decode_state_result."""

    def test_round_trip_two_players(self):
        roster = RosterState(OVERWATCH, [
            ow_record("Alpha"),
            ow_record("Bravo", rank="Top 500", tier=42, date=T0 - timedelta(days=3)),
        ])
        assert decode_state(encode_state(roster), OVERWATCH) == roster

    def test_round_trip_deadlock(self):
        roster = RosterState(DEADLOCK, [dl_record("Ghost"), dl_record("Wraith")])
        assert decode_state(encode_state(roster)) == roster

    def test_round_trip_local_timezone_instant(self):
        local = T0.astimezone(timezone(timedelta(hours=-5)))
        roster = RosterState(DEADLOCK, [dl_record(date=local)])
        decoded = decode_state(encode_state(roster), DEADLOCK)
        assert decoded.players[0].date == T0
        assert decoded.players[0].date.tzinfo is not None

    @pytest.mark.parametrize("text", [
        None,
        "",
        "no marker",
        "LB_STATE:DEADLOCK:{invalid",
        "LB_STATE:DEADLOCK:",
        'LB_STATE:DEADLOCK:{"players": 5}',
        'LB_STATE:DEADLOCK:["not", "an", "object"]',
        'LB_STATE:DEADLOCK:{"players":[{"playerName":"X","hero":"Haze","rankCurrent":"Archon","tierCurrent":9,"currentValue":1}]}',
        'LB_STATE:DEADLOCK:{"players":["just a string"]}',
        'LB_STATE:DEADLOCK:{"players":[{"playerName":"X","hero":"Haze","rankCurrent":"Archon","tierCurrent":1,"currentValue":1,"date":"not a date"}]}',
        'LB_STATE:DEADLOCK:{"players":[{"playerName":"X","hero":"Haze","rankCurrent":"Archon","tierCurrent":1,"currentValue":1,"date":0}]}',
        'LB_STATE:DEADLOCK:{"players":[{"playerName":"X","hero":"Haze","rankCurrent":"Archon","tierCurrent":1,"currentValue":1,"date":false}]}',
        'LB_STATE:DEADLOCK:{"players":' + "[" * 200000,
        'LB_STATE:DEADLOCK:{"players":[{"playerName":"X","hero":"Haze","rankCurrent":"Archon","tierCurrent":' + "9" * 5000 + ',"currentValue":1}]}',
    ])
    def test_bad_input_yields_empty_roster(self, text):
        roster = decode_state(text, DEADLOCK)
        assert roster.game == DEADLOCK
        assert roster.players == []

    def test_result_reports_recovery(self):
        result = decode_state_result("LB_STATE:DEADLOCK:{broken json", DEADLOCK)
        assert result.recovered
        assert "invalid state JSON" in result.reason

    def test_result_success(self):
        result = decode_state_result(encode_state(RosterState(DEADLOCK, [dl_record()])))
        assert not result.recovered
        assert result.reason is None
        assert len(result.roster) == 1

    def test_envelope_embedded_in_message(self):
        roster = RosterState(DEADLOCK, [dl_record()])
        text = "## 🔒 Deadlock Leaderboard\n\n🥇 **@Ghost** ...\n" + encode_state(roster) + "\n-# footer"
        assert decode_state(text, DEADLOCK) == roster

    def test_whitespace_after_marker(self):
        roster = RosterState(DEADLOCK, [dl_record()])
        text = encode_state(roster).replace(state_marker(DEADLOCK), state_marker(DEADLOCK) + " \n ")
        assert decode_state(text, DEADLOCK) == roster

    def test_deeply_nested_payload_reports_recovery(self):
        result = decode_state_result('LB_STATE:DEADLOCK:{"players":' + "[" * 200000, DEADLOCK)
        assert result.recovered
        assert result.roster.players == []

    def test_game_read_from_marker(self):
        roster = decode_state(encode_state(RosterState(OVERWATCH, [ow_record()])))
        assert roster.game == OVERWATCH
        assert roster.players[0].player_name == "Alpha"

    def test_other_game_marker_ignored(self):
        text = encode_state(RosterState(OVERWATCH, [ow_record()]))
        assert decode_state(text, DEADLOCK).players == []

    def test_missing_date_defaults_to_now(self):
        text = 'LB_STATE:DEADLOCK:{"players":[{"playerName":"X","hero":"Haze","rankCurrent":"Archon","tierCurrent":1,"currentValue":1}]}'
        before = datetime.now(timezone.utc)
        roster = decode_state(text, DEADLOCK)
        assert roster.players[0].date >= before

    def test_duplicate_names_keep_most_recent(self):
        players = [
            dl_record("Ghost", date=T0).to_document(),
            dl_record("GHOST", date=T0 - timedelta(days=1)).to_document(),
        ]
        text = state_marker(DEADLOCK) + json.dumps({"players": players})
        roster = decode_state(text, DEADLOCK)
        assert len(roster) == 1
        assert roster.players[0].player_name == "Ghost"

    def test_unknown_game_argument(self):
        with pytest.raises(ValueError):
            decode_state("", "CHESS")


class TestUpsert:
    """Tests for upsert_player."""

    def test_inserts_new_player(self):
        roster = RosterState(OVERWATCH, [ow_record("Alpha")])
        assert upsert_player(roster, ow_update("Bravo")) is True
        assert len(roster) == 2
        assert roster.find("bravo").rank_current == "Diamond"

    def test_stored_record_drops_raw_date(self):
        roster = RosterState(OVERWATCH)
        upsert_player(roster, ow_update("Bravo"))
        assert type(roster.players[0]) is PlayerRecord

    def test_stale_update_rejected(self):
        roster = RosterState(OVERWATCH, [ow_record("Alpha", rank="Master", date=T0)])
        before = list(roster.players)
        assert upsert_player(roster, ow_update("Alpha", rank="Diamond", date=T0 - timedelta(days=1))) is False
        assert roster.players == before

    def test_equal_time_replaces(self):
        roster = RosterState(OVERWATCH, [ow_record("Alpha", date=T0)])
        assert upsert_player(roster, ow_update("Alpha", rank="Diamond", date=T0)) is True
        assert roster.players[0].rank_current == "Diamond"

    def test_newer_update_replaces_whole_record(self):
        roster = RosterState(OVERWATCH, [ow_record("Alpha", role="Tank", date=T0)])
        upsert_player(roster, ow_update("alpha", role="Support", date=T0 + timedelta(hours=1)))
        assert len(roster) == 1
        player = roster.players[0]
        assert player.player_name == "alpha"
        assert player.role == "Support"
        assert player.peak_value == 3400

    def test_wrong_game_rejected(self):
        roster = RosterState(DEADLOCK)
        with pytest.raises(ValueError):
            upsert_player(roster, ow_update())


class TestFileStateStore:
    """Tests for the file-backed store."""

    def test_missing_file_loads_none(self, tmp_path):
        assert FileStateStore(tmp_path).load_state(OVERWATCH) is None

    def test_save_and_load(self, tmp_path):
        store = FileStateStore(tmp_path)
        text = encode_state(RosterState(OVERWATCH, [ow_record()]))
        path = store.save_state(OVERWATCH, text)
        assert path == tmp_path / "overwatch_state.txt"
        assert store.load_state(OVERWATCH) == text

    def test_overwrite(self, tmp_path):
        store = FileStateStore(tmp_path / "nested")
        store.save_state(DEADLOCK, "first")
        store.save_state(DEADLOCK, "second")
        assert store.load_state(DEADLOCK) == "second"
        assert [p.name for p in (tmp_path / "nested").iterdir()] == ["deadlock_state.txt"]
