import json
from pathlib import Path
from typing import List, Optional

import click
import yaml

from authormatch import (
    ObservabilityLogger,
    compare,
    find_matches,
    list_steps,
    load_config,
    load_records,
    match_to_dict,
)


def _load(path: Path, logger: Optional[ObservabilityLogger]) -> List[dict]:
    try:
        return load_records(path)
    except (OSError, ValueError) as e:
        if logger:
            logger.log_error(
                "load_records",
                details={"path": str(path), "message": str(e)},
                resolution="aborted",
            )
        raise click.ClickException(str(e))


@click.group()
def cli() -> None:
    """authormatch CLI.

    Match publication authors against identity records and inspect logs.
    """


@cli.command("compare")
@click.argument("name1")
@click.argument("name2")
def compare_names(name1: str, name2: str) -> None:
    """Print the token/abbreviation confidence of two names (null if no match)."""
    click.echo(json.dumps(compare(name1, name2)))


@cli.command("steps")
def show_steps() -> None:
    """List registered step types."""
    for name in list_steps():
        click.echo(name)


@cli.command("match")
@click.option("--base", "base_path", type=click.Path(path_type=Path, exists=True, dir_okay=False),
              required=True, help="Base authors (.json or .jsonl)")
@click.option("--enriching", "enriching_path", type=click.Path(path_type=Path, exists=True, dir_okay=False),
              required=True, help="Enriching authors (.json or .jsonl)")
@click.option("--config", "config_path", type=click.Path(path_type=Path, exists=True, dir_okay=False),
              default=None, help="Step configuration (defaults to ./authormatch.yaml or built-in ORCID steps)")
@click.option("--log-db", type=click.Path(path_type=Path), default=None,
              help="Observability database (overrides log_path from config)")
def match_authors(
    base_path: Path,
    enriching_path: Path,
    config_path: Optional[Path],
    log_db: Optional[Path],
) -> None:
    """Match base authors with enriching authors and print the matches as JSON."""
    try:
        config = load_config(config_path)
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid configuration: {e}")

    db = log_db or config.log_path
    logger = ObservabilityLogger(db) if db else None

    base = _load(base_path, logger)
    enriching = _load(enriching_path, logger)

    matches = find_matches(base, enriching, config.build_steps(), logger=logger)

    click.echo(json.dumps({
        "matches": [match_to_dict(m) for m in matches],
        "unmatched_base": len(base) - len(matches),
        "unmatched_enriching": len(enriching) - len(matches),
        "session": logger.session_id if logger else None,
    }, indent=2, ensure_ascii=False))


# ---- log commands ----


@cli.group()
def log() -> None:
    """Observability logs (summary, matches)."""


@log.command("summary")
@click.option("--db", type=click.Path(path_type=Path, exists=True), required=True, help="Path to logs.db")
@click.option("--session", required=True, help="Session ID (printed by 'match')")
def log_summary(db: Path, session: str) -> None:
    """Show phase counts, matches per step and errors for a session."""
    logger = ObservabilityLogger(db)
    click.echo(json.dumps(logger.get_session_summary(session), indent=2))


@log.command("matches")
@click.option("--db", type=click.Path(path_type=Path, exists=True), required=True, help="Path to logs.db")
@click.option("--session", required=True, help="Session ID (printed by 'match')")
@click.option("--step", default=None, help="Only matches from this step")
def log_matches(db: Path, session: str, step: Optional[str]) -> None:
    """Print the logged matches of a session, one JSON object per line."""
    logger = ObservabilityLogger(db)
    for entry in logger.get_matches(step=step, session_id=session):
        click.echo(json.dumps(entry.data, ensure_ascii=False))


if __name__ == "__main__":
    cli()
