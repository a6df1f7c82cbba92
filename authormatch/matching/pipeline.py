"""
Matching pipeline.

Runs an ordered list of matching steps over two author lists. Each step only
sees the authors that no earlier step has claimed, so every base author and
every enriching author ends up in at most one match.

Matching is greedy on purpose: within a step, the highest-confidence
candidates claim their authors first. This does not compute a maximum-weight
matching.
"""

from typing import List, Optional, Sequence, Set

from authormatch.core.observability import ObservabilityLogger
from authormatch.matching.base import AuthorMatch, MatcherStep


def _by_confidence(matches: List[AuthorMatch]) -> List[AuthorMatch]:
    # Stable: equal confidences keep enumeration order
    return sorted(matches, key=lambda m: m.confidence, reverse=True)


def evaluate_step(
    unmatched_base: List,
    unmatched_enriching: List,
    step: MatcherStep,
    logger: Optional[ObservabilityLogger] = None,
) -> List[AuthorMatch]:
    """Apply one step to the unmatched pools.

    Claimed authors are removed from both pools in place.

    Args:
        unmatched_base: Base authors not yet matched (mutated)
        unmatched_enriching: Enriching authors not yet matched (mutated)
        step: Step to apply
        logger: Optional observability logger

    Returns:
        Matches accepted by this step, highest confidence first
    """
    if logger:
        logger.log_step(step.name, len(unmatched_base), len(unmatched_enriching))

    if not unmatched_base:
        return []

    # Phase 1: candidates per enriching author
    accepted: List[AuthorMatch] = []
    for enriching in unmatched_enriching:
        candidates = [
            match
            for match in (step.try_match(base, enriching) for base in unmatched_base)
            if match is not None
        ]
        candidates = _by_confidence(candidates)

        if len(candidates) == 1:
            accepted.extend(candidates)
        elif len(candidates) > 1:
            if step.is_excluded(candidates):
                if logger:
                    logger.log_excluded(step.name, enriching, candidates)
            else:
                accepted.extend(candidates)

    # Phase 2: greedy deduplication across enriching authors
    claimed_base: Set[int] = set()
    claimed_enriching: Set[int] = set()
    results: List[AuthorMatch] = []
    for match in _by_confidence(accepted):
        if id(match.base) in claimed_base or id(match.enriching) in claimed_enriching:
            continue
        claimed_base.add(id(match.base))
        claimed_enriching.add(id(match.enriching))
        results.append(match)
        if logger:
            logger.log_match(match)

    unmatched_base[:] = [a for a in unmatched_base if id(a) not in claimed_base]
    unmatched_enriching[:] = [a for a in unmatched_enriching if id(a) not in claimed_enriching]

    return results


def find_matches(
    base_authors: Optional[Sequence],
    enriching_authors: Optional[Sequence],
    steps: Optional[Sequence[MatcherStep]],
    logger: Optional[ObservabilityLogger] = None,
) -> List[AuthorMatch]:
    """Match base authors with enriching authors using a sequence of steps.

    Authors are compared by identity, so records don't need to be hashable.
    None inputs are treated as empty.

    Args:
        base_authors: Authors to identify (e.g. from a publication)
        enriching_authors: Candidate identities (e.g. ORCID records)
        steps: Steps to apply, in order
        logger: Optional observability logger

    Returns:
        All accepted matches. Matches of step i come before those of step i+1.
    """
    unmatched_base = list(base_authors or [])
    unmatched_enriching = list(enriching_authors or [])
    result: List[AuthorMatch] = []

    if logger:
        logger.log_input(len(unmatched_base), len(unmatched_enriching), [s.name for s in steps or []])

    for step in steps or []:
        result.extend(evaluate_step(unmatched_base, unmatched_enriching, step, logger))

    return result
