"""Export helpers: the local CSV record and the remote submission sink."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Protocol

import requests

from .exceptions import SubmissionError
from ..models import SessionSnapshot
from ..utils import local_date_str, now_ms, sanitize_filename, to_csv_text
from ..utils.constants import CSV_HEADER, DEFAULT_HTTP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class SubmissionSinkInterface(Protocol):
    """Interface for the remote score sink - supports DIP."""

    def submit(self, payload: dict) -> bool:
        """Post the payload; True if it was sent."""
        ...


@dataclass
class ExportResult:
    """Outcome of finishing a match."""
    filename: str
    csv_text: str
    path: Optional[str] = None
    submitted: bool = False
    warning: Optional[str] = None

    def to_json(self) -> dict:
        return {
            "filename": self.filename,
            "path": self.path,
            "submitted": self.submitted,
            "warning": self.warning,
        }


class SubmissionClient:
    """Fire-and-forget POST of the score log; no retries."""

    def __init__(
        self,
        submit_url: Optional[str] = None,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.submit_url = submit_url
        self.timeout_seconds = timeout_seconds
        self.http = http or requests.Session()

    def submit(self, payload: dict) -> bool:
        """
        Send the payload to the submission sink.

        Returns:
            False when no sink is configured, True once the POST went out

        Raises:
            SubmissionError: On any network failure
        """
        if not self.submit_url:
            logger.warning("Submit URL is not configured; skipping export")
            return False

        try:
            response = self.http.post(self.submit_url, json=payload, timeout=self.timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SubmissionError(f"Failed to submit scores: {e}") from e
        return True


class ScoreExporter:
    """Builds the CSV export and the submission payload from a snapshot."""

    def match_id(self, snapshot: SessionSnapshot) -> str:
        return snapshot.match_id

    def filename(self, snapshot: SessionSnapshot) -> str:
        return f"{sanitize_filename(self.match_id(snapshot))}.csv"

    def records(self, snapshot: SessionSnapshot) -> List[dict]:
        game_id = self.match_id(snapshot)
        return [entry.export_record(game_id) for entry in snapshot.point_log]

    def to_csv(self, snapshot: SessionSnapshot) -> str:
        """Return the score log as CSV, one row per point in log order."""
        rows = [CSV_HEADER]
        rows.extend(
            [record[column] for column in CSV_HEADER]
            for record in self.records(snapshot)
        )
        return to_csv_text(rows)

    def build_payload(self, snapshot: SessionSnapshot) -> dict:
        return {
            "GameID": self.match_id(snapshot),
            "Date": local_date_str(now_ms()),
            "logs": self.records(snapshot),
        }

    def write_csv(self, snapshot: SessionSnapshot, export_dir: str) -> str:
        """Write the CSV export of ``snapshot`` into ``export_dir``."""
        return self.write_text(self.filename(snapshot), self.to_csv(snapshot), export_dir)

    def write_text(self, filename: str, csv_text: str, export_dir: str) -> str:
        """
        Write already rendered CSV text into ``export_dir``.

        Returns:
            Path of the written file

        Raises:
            OSError: If the file cannot be written
        """
        if export_dir and not os.path.exists(export_dir):
            os.makedirs(export_dir)
        path = os.path.join(export_dir, filename)
        # newline="" keeps the CRLF terminators byte-exact
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(csv_text)
        return path
