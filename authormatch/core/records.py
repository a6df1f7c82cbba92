"""Reading author records from JSON / JSONL files."""

import json
from pathlib import Path
from typing import Any, Dict, List

from authormatch.matching.base import AuthorMatch


def load_records(path: Path) -> List[Dict[str, Any]]:
    """Load author records.

    Supports:
    - .json: a top-level list of objects
    - .jsonl: one object per line (blank lines skipped)

    Raises:
        ValueError: Unsupported suffix or a record that isn't an object
        OSError: File can't be read
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"{path}: expected a JSON list of records")
        records = data
    elif suffix == ".jsonl":
        records = []
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    records.append(json.loads(line))
    else:
        raise ValueError(f"{path}: unsupported format '{suffix}' (use .json or .jsonl)")

    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"{path}: record {i} is not an object")

    return records


def match_to_dict(match: AuthorMatch) -> Dict[str, Any]:
    """Render an AuthorMatch as a JSON-friendly dict."""
    return {
        "base": match.base,
        "enriching": match.enriching,
        "step": match.step_name,
        "confidence": match.confidence,
    }
