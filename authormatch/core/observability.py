"""
ObservabilityLogger - Phase-based logging of matching runs.

Records what each matching step saw, what it discarded as ambiguous and
what it matched, as structured rows for later analysis.
"""

import json
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class LogEntry:
    """A log entry from the observability database."""

    id: int
    ts: str
    session: str
    phase: str
    data: Dict[str, Any] = field(default_factory=dict)


class ObservabilityLogger:
    """Phase-based logging for matching runs.

    Phases:
    - input: Pool sizes and step order of a run
    - step: A step starting, with the pool sizes it sees
    - excluded: Candidates discarded by an exclusion predicate
    - match: An accepted match
    - error: Errors and how they were handled
    """

    PHASES = [
        "input",
        "step",
        "excluded",
        "match",
        "error",
    ]

    def __init__(self, db_path: Path):
        """Initialize logger with database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()
        self.session_id = self._new_session()

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    ts TEXT NOT NULL DEFAULT (datetime('now')),
                    session TEXT NOT NULL,
                    phase TEXT NOT NULL,
                    data JSON NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_session ON logs(session);
                CREATE INDEX IF NOT EXISTS idx_phase ON logs(phase);

                CREATE VIEW IF NOT EXISTS errors AS
                SELECT id, ts, session,
                       json_extract(data, '$.error_type') as error_type,
                       json_extract(data, '$.resolution') as resolution,
                       data
                FROM logs WHERE phase = 'error';

                CREATE VIEW IF NOT EXISTS matches AS
                SELECT id, ts, session,
                       json_extract(data, '$.step') as step,
                       json_extract(data, '$.base') as base,
                       json_extract(data, '$.enriching') as enriching,
                       json_extract(data, '$.confidence') as confidence
                FROM logs WHERE phase = 'match';
            """)

    def _new_session(self) -> str:
        return f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"

    def new_session(self) -> str:
        """Start a new session and return its ID."""
        self.session_id = self._new_session()
        return self.session_id

    def log(self, phase: str, data: Dict[str, Any]) -> None:
        """Log a phase with structured data.

        Args:
            phase: One of PHASES
            data: Structured data for the log entry. Non-JSON values are
                  stored as their str()
        """
        if phase not in self.PHASES:
            raise ValueError(f"Invalid phase: {phase}. Must be one of {self.PHASES}")

        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT INTO logs (session, phase, data) VALUES (?, ?, ?)",
                (self.session_id, phase, json.dumps(data, default=str)),
            )

    # Convenience methods

    def log_input(self, base_count: int, enriching_count: int, steps: List[str]) -> None:
        self.log(
            "input",
            {
                "base_count": base_count,
                "enriching_count": enriching_count,
                "steps": steps,
            },
        )

    def log_step(self, step: str, base_pool: int, enriching_pool: int) -> None:
        self.log(
            "step",
            {
                "step": step,
                "base_pool": base_pool,
                "enriching_pool": enriching_pool,
            },
        )

    def log_excluded(self, step: str, enriching: Any, candidates: List[Any]) -> None:
        """Log an enriching author whose candidates were too ambiguous.

        Args:
            step: Step name
            enriching: The enriching author
            candidates: The discarded AuthorMatch candidates
        """
        self.log(
            "excluded",
            {
                "step": step,
                "enriching": enriching,
                "candidates": [
                    {"base": c.base, "confidence": c.confidence} for c in candidates
                ],
                "candidate_count": len(candidates),
            },
        )

    def log_match(self, match: Any) -> None:
        """Log an accepted AuthorMatch."""
        self.log(
            "match",
            {
                "step": match.step_name,
                "base": match.base,
                "enriching": match.enriching,
                "confidence": match.confidence,
            },
        )

    def log_error(
        self,
        error_type: str,
        details: Optional[Dict] = None,
        resolution: Optional[str] = None,
    ) -> None:
        """Log errors and how they were handled."""
        data: Dict[str, Any] = {"error_type": error_type}
        if details:
            data["details"] = details
        if resolution:
            data["resolution"] = resolution

        self.log("error", data)

    # Query methods

    def _fetch(self, query: str, params: tuple) -> List[LogEntry]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(query, params).fetchall()

            return [
                LogEntry(
                    id=row["id"],
                    ts=row["ts"],
                    session=row["session"],
                    phase=row["phase"],
                    data=json.loads(row["data"]),
                )
                for row in rows
            ]

    def get_session(self, session_id: Optional[str] = None) -> List[LogEntry]:
        """Get all logs for a session (defaults to the current one)."""
        session_id = session_id or self.session_id
        return self._fetch(
            "SELECT * FROM logs WHERE session = ? ORDER BY id",
            (session_id,),
        )

    def get_errors(self, since: Optional[str] = None, limit: int = 100) -> List[LogEntry]:
        """Get error logs, newest first.

        Args:
            since: Optional ISO timestamp to filter from
            limit: Maximum results
        """
        if since:
            return self._fetch(
                """
                SELECT * FROM logs
                WHERE phase = 'error' AND ts >= ?
                ORDER BY id DESC LIMIT ?
                """,
                (since, limit),
            )
        return self._fetch(
            "SELECT * FROM logs WHERE phase = 'error' ORDER BY id DESC LIMIT ?",
            (limit,),
        )

    def get_matches(self, step: Optional[str] = None, session_id: Optional[str] = None) -> List[LogEntry]:
        """Get accepted matches of a session in acceptance order.

        Args:
            step: Optional step name filter
            session_id: Session ID (defaults to current session)
        """
        session_id = session_id or self.session_id
        if step:
            return self._fetch(
                """
                SELECT * FROM logs
                WHERE session = ? AND phase = 'match' AND json_extract(data, '$.step') = ?
                ORDER BY id
                """,
                (session_id, step),
            )
        return self._fetch(
            "SELECT * FROM logs WHERE session = ? AND phase = 'match' ORDER BY id",
            (session_id,),
        )

    def get_low_confidence(self, threshold: float = 0.7) -> List[LogEntry]:
        """Get matches below a confidence threshold, lowest first."""
        return self._fetch(
            """
            SELECT * FROM logs
            WHERE phase = 'match'
              AND CAST(json_extract(data, '$.confidence') AS REAL) < ?
            ORDER BY CAST(json_extract(data, '$.confidence') AS REAL)
            """,
            (threshold,),
        )

    def get_session_summary(self, session_id: Optional[str] = None) -> Dict[str, Any]:
        """Get summary statistics for a session.

        Args:
            session_id: Session ID (defaults to current session)

        Returns:
            Dictionary with phase counts, matches per step and error count
        """
        session_id = session_id or self.session_id

        with sqlite3.connect(self.db_path) as conn:
            phase_counts = {}
            for row in conn.execute(
                """
                SELECT phase, COUNT(*) as count
                FROM logs WHERE session = ?
                GROUP BY phase
                """,
                (session_id,),
            ):
                phase_counts[row[0]] = row[1]

            step_counts = {}
            for row in conn.execute(
                """
                SELECT json_extract(data, '$.step') as step, COUNT(*) as count
                FROM logs
                WHERE session = ? AND phase = 'match'
                GROUP BY json_extract(data, '$.step')
                """,
                (session_id,),
            ):
                if row[0] is not None:
                    step_counts[row[0]] = row[1]

            return {
                "session_id": session_id,
                "phase_counts": phase_counts,
                "match_counts": step_counts,
                "error_count": phase_counts.get("error", 0),
                "total_logs": sum(phase_counts.values()),
            }
