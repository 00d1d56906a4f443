"""Test CSV export and score submission."""
import csv
import io
import unittest
from unittest.mock import Mock

import pytest
import requests

from scorekeeper.models import PointEntry, SessionSnapshot
from scorekeeper.services import ScoreExporter, SubmissionClient, SubmissionError
from scorekeeper.utils import parse_csv, sanitize_filename, to_csv_text


def _snapshot() -> SessionSnapshot:
    snapshot = SessionSnapshot(team_a_name="Hawks", team_b_name="Owls")
    snapshot.point_log = [
        PointEntry("p1", "Hawks vs Owls", "2024-05-01 10:00:00", "Hawks", 'Smith, "Ace"', "Bea", "A"),
        PointEntry("p2", "", "2024-05-01 10:03:10", "Owls", "Cal", "‼️CALLAHAN‼️", "B"),
    ]
    return snapshot


class TestCsvHelpers(unittest.TestCase):
    """Test the CSV text helpers."""

    def test_quotes_commas_and_doubles_quotes(self):
        text = to_csv_text([["Score"], ['Smith, "Ace"']])
        self.assertEqual(text, 'Score\r\n"Smith, ""Ace"""')
        rows = list(csv.reader(io.StringIO(text)))
        self.assertEqual(rows[1], ['Smith, "Ace"'])

    def test_rows_joined_by_crlf_without_trailing_terminator(self):
        text = to_csv_text([["a", "b"], ["c", None]])
        self.assertEqual(text, "a,b\r\nc,")

    def test_newlines_inside_fields_are_quoted(self):
        text = to_csv_text([["line one\nline two"]])
        self.assertEqual(text, '"line one\nline two"')

    def test_parse_skips_blank_rows(self):
        self.assertEqual(parse_csv("a,b\r\n\r\nc,d\r\n"), [["a", "b"], ["c", "d"]])

    def test_sanitize_filename(self):
        self.assertEqual(sanitize_filename('A/B: "x" <y>|z?*'), "A_B_ _x_ _y__z__")
        self.assertEqual(sanitize_filename("   "), "Game")
        self.assertEqual(len(sanitize_filename("x" * 300)), 120)


class TestScoreExporter(unittest.TestCase):
    """Test CSV and payload generation from a snapshot."""

    def setUp(self):
        self.exporter = ScoreExporter()
        self.snapshot = _snapshot()

    def test_csv_has_header_and_one_row_per_point(self):
        rows = list(csv.reader(io.StringIO(self.exporter.to_csv(self.snapshot))))
        self.assertEqual(rows[0], ["GameID", "Time", "Team", "Score", "Assist"])
        self.assertEqual(rows[1], ["Hawks vs Owls", "2024-05-01 10:00:00", "Hawks", 'Smith, "Ace"', "Bea"])
        self.assertEqual(len(rows), 3)

    def test_missing_match_id_falls_back_to_current_teams(self):
        records = self.exporter.records(self.snapshot)
        self.assertEqual(records[1]["GameID"], "Hawks vs Owls")
        self.assertEqual(records[1]["Assist"], "‼️CALLAHAN‼️")

    def test_filename_is_sanitized(self):
        self.snapshot.team_a_name = "Red/Blue"
        self.snapshot.team_b_name = "Green:Gold"
        self.assertEqual(self.exporter.filename(self.snapshot), "Red_Blue vs Green_Gold.csv")

    def test_empty_log_exports_header_only(self):
        self.assertEqual(self.exporter.to_csv(SessionSnapshot()), "GameID,Time,Team,Score,Assist")


def test_payload_shape(clock) -> None:
    payload = ScoreExporter().build_payload(_snapshot())
    assert payload["GameID"] == "Hawks vs Owls"
    assert len(payload["Date"]) == 10
    assert [log["Score"] for log in payload["logs"]] == ['Smith, "Ace"', "Cal"]


def test_write_csv_keeps_crlf(tmp_path) -> None:
    path = ScoreExporter().write_csv(_snapshot(), str(tmp_path / "exports"))

    assert path.endswith("Hawks vs Owls.csv")
    with open(path, "rb") as f:
        raw = f.read()
    assert raw.count(b"\r\n") == 2
    assert not raw.endswith(b"\r\n")


def test_submit_without_url_is_skipped() -> None:
    http = Mock()
    assert SubmissionClient(submit_url=None, http=http).submit({"logs": []}) is False
    http.post.assert_not_called()


def test_submit_posts_json() -> None:
    http = Mock()
    client = SubmissionClient(submit_url="https://example.test/submit", timeout_seconds=3, http=http)

    assert client.submit({"GameID": "x"}) is True
    http.post.assert_called_once_with("https://example.test/submit", json={"GameID": "x"}, timeout=3)


def test_submit_network_failure_raises() -> None:
    http = Mock()
    http.post.side_effect = requests.ConnectionError("offline")
    client = SubmissionClient(submit_url="https://example.test/submit", http=http)

    with pytest.raises(SubmissionError, match="offline"):
        client.submit({"GameID": "x"})
