"""
authormatch - Reconcile two lists of person names

Pairs "base" authors (e.g. names printed on a publication) with "enriching"
authors (e.g. ORCID records) by running an ordered list of matching steps
over shrinking pools of unmatched authors.

Matching:
- find_matches: Run steps in order; each author is matched at most once
- string_ignore_case_matcher: Exact comparison ignoring case
- abbreviations_matcher: Ordered token and abbreviation comparison
- compare: Token-based name similarity score

Support:
- MatcherConfig / load_config: YAML step definitions for dict records
- ObservabilityLogger: Phase-based logging of matching runs
"""

__version__ = "0.1.0"

# Core modules
from authormatch.core.observability import ObservabilityLogger, LogEntry
from authormatch.core.records import load_records, match_to_dict

# Matching
from authormatch.matching import (
    AuthorMatch,
    MatcherStep,
    StepBuilder,
    string_ignore_case_matcher,
    abbreviations_matcher,
    match_equals_ignore_case,
    match_ordered_tokens_and_abbreviations,
    remove_matches,
    find_matches,
    compare,
    register_step,
    get_step,
    list_steps,
    build_step,
)

# Config
from authormatch.core.config import MatcherConfig, StepConfig, load_config, field_extractor

__all__ = [
    # Core
    "ObservabilityLogger",
    "LogEntry",
    "load_records",
    "match_to_dict",
    # Matching
    "AuthorMatch",
    "MatcherStep",
    "StepBuilder",
    "string_ignore_case_matcher",
    "abbreviations_matcher",
    "match_equals_ignore_case",
    "match_ordered_tokens_and_abbreviations",
    "remove_matches",
    "find_matches",
    "compare",
    "register_step",
    "get_step",
    "list_steps",
    "build_step",
    # Config
    "MatcherConfig",
    "StepConfig",
    "load_config",
    "field_extractor",
]
