"""
Unit tests for the persisted data models.

Tests serialization tolerance of SessionSnapshot, PointEntry and RosterCache,
and the TimerState invariants.
"""
import json
import unittest

from scorekeeper.models import PointEntry, RosterCache, SessionSnapshot, TimerState


class TestSessionSnapshot(unittest.TestCase):
    """Test cases for SessionSnapshot serialization."""

    def setUp(self) -> None:
        self.snapshot = SessionSnapshot(
            team_a_score=1,
            team_a_name="Hawks",
            team_b_name="Owls",
            team_a_roster="Ann\nBea",
            match_clock_label="Round 1",
            possession_start="F",
            saved_at=1234,
        )
        self.snapshot.point_log.append(
            PointEntry("p1", "Hawks vs Owls", "2024-05-01 10:00:00", "Hawks", "Ann", "Bea", "A")
        )

    def test_json_round_trip(self) -> None:
        data = json.loads(json.dumps(self.snapshot.to_json()))
        restored = SessionSnapshot.from_json(data)
        self.assertEqual(restored, self.snapshot)

    def test_match_id_and_side_lookups(self) -> None:
        self.assertEqual(self.snapshot.match_id, "Hawks vs Owls")
        self.assertEqual(self.snapshot.team_name("B"), "Owls")
        self.assertEqual(self.snapshot.roster("A"), "Ann\nBea")

    def test_malformed_fields_fall_back_to_defaults(self) -> None:
        restored = SessionSnapshot.from_json({
            "team_a_score": "lots",
            "team_b_score": -3,
            "team_a_name": 42,
            "possession_start": "Z",
            "point_log": {"not": "a list"},
        })
        self.assertEqual(restored.team_a_score, 0)
        self.assertEqual(restored.team_b_score, 0)
        self.assertEqual(restored.team_a_name, "")
        self.assertEqual(restored.possession_start, "M")
        self.assertEqual(restored.point_log, [])

    def test_fresh_uses_given_timestamp(self) -> None:
        self.assertEqual(SessionSnapshot.fresh(99).saved_at, 99)


class TestPointEntry(unittest.TestCase):
    """Test cases for PointEntry."""

    def test_legacy_record_without_side(self) -> None:
        entry = PointEntry.from_json({"id": "p9", "team": "Owls", "scorer": "Cal", "assist": "Dee"})
        self.assertIsNone(entry.side)
        self.assertEqual(entry.team, "Owls")

    def test_invalid_side_is_dropped(self) -> None:
        entry = PointEntry.from_json({"id": "p9", "side": "C"})
        self.assertIsNone(entry.side)

    def test_missing_id_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            PointEntry.from_json({"scorer": "Cal"})

    def test_export_record(self) -> None:
        entry = PointEntry("p1", "", "10:00", "Hawks", "Ann", "Bea", "A")
        self.assertEqual(
            entry.export_record("Hawks vs Owls"),
            {"GameID": "Hawks vs Owls", "Time": "10:00", "Team": "Hawks", "Score": "Ann", "Assist": "Bea"},
        )


class TestRosterCache(unittest.TestCase):
    """Test cases for RosterCache."""

    def test_expiry_is_one_day(self) -> None:
        cache = RosterCache.create({"Hawks": ["Ann"]}, 1000)
        self.assertFalse(cache.is_expired(1000 + 24 * 60 * 60 * 1000))
        self.assertTrue(cache.is_expired(1001 + 24 * 60 * 60 * 1000))

    def test_round_trip(self) -> None:
        cache = RosterCache.create({"Hawks": ["Ann"]}, 1000)
        self.assertEqual(RosterCache.from_json(cache.to_json()), cache)

    def test_garbage_is_rejected(self) -> None:
        self.assertIsNone(RosterCache.from_json("nope"))
        self.assertIsNone(RosterCache.from_json({"data": []}))
        self.assertIsNone(RosterCache.from_json({"data": {}, "timestamp": "soon"}))


class TestTimerState(unittest.TestCase):
    """Test cases for TimerState invariants."""

    def test_idle_and_running_states_are_valid(self) -> None:
        TimerState(remaining_ms=5000).validate()
        TimerState(end_timestamp=5000, is_running=True).validate()

    def test_both_or_neither_set_is_invalid(self) -> None:
        with self.assertRaises(ValueError):
            TimerState().validate()
        with self.assertRaises(ValueError):
            TimerState(end_timestamp=1, remaining_ms=1).validate()

    def test_running_without_end_is_invalid(self) -> None:
        with self.assertRaises(ValueError):
            TimerState(remaining_ms=1, is_running=True).validate()


if __name__ == "__main__":
    unittest.main()
