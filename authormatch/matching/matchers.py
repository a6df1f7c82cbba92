"""
Standard matching steps and name comparison helpers.

- string_ignore_case: exact comparison after lower-casing (accent sensitive)
- abbreviations: ordered token and abbreviation comparison (accent insensitive)
"""

from typing import Callable, Dict, List, Optional

from authormatch.matching.base import (
    AuthorMatch,
    ExclusionPredicate,
    Extractor,
    StepBuilder,
    register_step,
)
from authormatch.matching.tokens import compare


def match_equals_ignore_case(name1: Optional[str], name2: Optional[str]) -> bool:
    """Check whether two names are equal, ignoring case."""
    if name1 is None or name2 is None:
        return False
    return name1 is name2 or name1.lower() == name2.lower()


def match_ordered_tokens_and_abbreviations(name1: Optional[str], name2: Optional[str]) -> Optional[float]:
    """Confidence of a token/abbreviation match, or None. See tokens.compare."""
    return compare(name1, name2)


def remove_matches(
    base_names: Optional[List[str]],
    enriching_names: List[str],
    matching_func: Callable[[str, str], bool],
) -> List[str]:
    """Pair plain name strings and remove the pairs from both lists.

    Each base name is paired with the first enriching name accepted by
    matching_func. Both lists are mutated.

    Returns:
        Matched names, flattened as [base1, enriching1, base2, enriching2, ...]
    """
    matched: List[str] = []
    if not base_names:
        return matched

    i = 0
    while i < len(base_names):
        base = base_names[i]
        for j, enriching in enumerate(enriching_names):
            if matching_func(base, enriching):
                del base_names[i]
                del enriching_names[j]
                matched.extend([base, enriching])
                break
        else:
            i += 1

    return matched


@register_step("string_ignore_case")
def string_ignore_case_matcher(base_extractor: Extractor, enriching_extractor: Extractor) -> StepBuilder:
    """Builder for a step that compares two extracted strings ignoring case.

    Args:
        base_extractor: Extracts a string from a base author (None if absent)
        enriching_extractor: Extracts a string from an enriching author (None if absent)

    Returns:
        StepBuilder emitting matches with confidence 1.0
    """
    def matching_func(base, enriching) -> Optional[AuthorMatch]:
        base_value = base_extractor(base)
        enriching_value = enriching_extractor(enriching)
        if base_value is None or enriching_value is None:
            return None
        if base_value.lower() == enriching_value.lower():
            return AuthorMatch.of(base, enriching, 1.0)
        return None

    return StepBuilder().matching_func(matching_func)


@register_step("abbreviations")
def abbreviations_matcher(base_extractor: Extractor, enriching_extractor: Extractor) -> StepBuilder:
    """Builder for a step that compares names by ordered tokens and abbreviations.

    Args:
        base_extractor: Extracts a name from a base author (None if absent)
        enriching_extractor: Extracts a name from an enriching author (None if absent)

    Returns:
        StepBuilder named "abbreviations", emitting the token score as confidence
    """
    def matching_func(base, enriching) -> Optional[AuthorMatch]:
        confidence = compare(base_extractor(base), enriching_extractor(enriching))
        if confidence is None:
            return None
        return AuthorMatch.of(base, enriching, confidence)

    return StepBuilder().name("abbreviations").matching_func(matching_func)


# Exclusion predicates. Only ever called with two or more candidates.

def exclude_any_ambiguity(candidates: List[AuthorMatch]) -> bool:
    """Discard every candidate set with more than one base author."""
    return len(candidates) > 1


def exclude_tied_confidence(candidates: List[AuthorMatch]) -> bool:
    """Discard candidate sets whose two best matches share the same confidence.

    Candidates arrive sorted by descending confidence.
    """
    return len(candidates) > 1 and candidates[0].confidence == candidates[1].confidence


EXCLUSION_PREDICATES: Dict[str, ExclusionPredicate] = {
    "any_ambiguity": exclude_any_ambiguity,
    "tied_confidence": exclude_tied_confidence,
}


def get_exclusion_predicate(name: Optional[str]) -> Optional[ExclusionPredicate]:
    """Look up an exclusion predicate by name (None means no predicate)."""
    if name is None:
        return None
    if name not in EXCLUSION_PREDICATES:
        raise ValueError(
            f"Unknown exclusion predicate: {name}. Available: {list(EXCLUSION_PREDICATES.keys())}"
        )
    return EXCLUSION_PREDICATES[name]
