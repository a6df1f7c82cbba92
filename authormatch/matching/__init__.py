"""Pluggable matching steps and the pipeline that chains them."""

from authormatch.matching.base import (
    AuthorMatch,
    MatcherStep,
    StepBuilder,
    register_step,
    get_step,
    list_steps,
    build_step,
)

# Import matchers to register the standard step types
from authormatch.matching.matchers import (
    string_ignore_case_matcher,
    abbreviations_matcher,
    match_equals_ignore_case,
    match_ordered_tokens_and_abbreviations,
    remove_matches,
    exclude_any_ambiguity,
    exclude_tied_confidence,
)
from authormatch.matching.pipeline import find_matches, evaluate_step
from authormatch.matching.tokens import compare, tokenize, strip_accents

__all__ = [
    "AuthorMatch",
    "MatcherStep",
    "StepBuilder",
    "register_step",
    "get_step",
    "list_steps",
    "build_step",
    "string_ignore_case_matcher",
    "abbreviations_matcher",
    "match_equals_ignore_case",
    "match_ordered_tokens_and_abbreviations",
    "remove_matches",
    "exclude_any_ambiguity",
    "exclude_tied_confidence",
    "find_matches",
    "evaluate_step",
    "compare",
    "tokenize",
    "strip_accents",
]
