"""CSV helpers shared by the roster source and the score export."""

import csv
import io
import re
from typing import Dict, Iterable, List, Sequence

from .constants import CSV_LINE_TERMINATOR, DEFAULT_EXPORT_NAME, MAX_FILENAME_LENGTH

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def to_csv_text(rows: Iterable[Sequence[object]]) -> str:
    """
    Serialize rows as CSV joined by CRLF, without a trailing terminator.

    Fields containing a comma, quote, CR or LF are quoted and inner quotes
    doubled; ``None`` becomes an empty field.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator=CSV_LINE_TERMINATOR)
    for row in rows:
        writer.writerow(["" if value is None else str(value) for value in row])

    csv_text = buffer.getvalue()
    buffer.close()
    if csv_text.endswith(CSV_LINE_TERMINATOR):
        csv_text = csv_text[: -len(CSV_LINE_TERMINATOR)]
    return csv_text


def parse_csv(text: str) -> List[List[str]]:
    """Parse CSV text into rows, skipping blank lines."""
    reader = csv.reader(io.StringIO(text))
    return [row for row in reader if row]


def csv_to_teams_map(rows: List[List[str]]) -> Dict[str, List[str]]:
    """
    Convert column-oriented roster rows into ``{team: [players]}``.

    Row 0 holds team names; each following row holds one player per team
    column. Blank header cells drop their column and blank player cells are
    skipped.
    """
    if not rows:
        return {}

    teams: Dict[str, List[str]] = {}
    for col_idx, raw_name in enumerate(rows[0]):
        team_name = (raw_name or "").strip()
        if not team_name:
            continue
        players = []
        for row in rows[1:]:
            value = row[col_idx].strip() if col_idx < len(row) else ""
            if value:
                players.append(value)
        teams[team_name] = players
    return teams


def sanitize_filename(name: str, fallback: str = DEFAULT_EXPORT_NAME) -> str:
    """Replace filesystem-unsafe characters with ``_`` and cap the length."""
    base = (name or "").strip() or fallback
    return _UNSAFE_FILENAME_CHARS.sub("_", base)[:MAX_FILENAME_LENGTH]
