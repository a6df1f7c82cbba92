"""
Base classes for author matching steps.

A matching step pairs one base author (e.g. a name printed on a publication)
with one enriching author (e.g. an ORCID record) and reports how confident
it is about the pairing.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

BA = TypeVar("BA")  # base author
EA = TypeVar("EA")  # enriching author

Extractor = Callable[[Any], Optional[str]]


@dataclass(frozen=True)
class AuthorMatch(Generic[BA, EA]):
    """A successful match between a base author and an enriching author."""

    base: BA
    enriching: EA
    step_name: str  # Name of the step that produced the match
    confidence: float  # Confidence score (0.0 to 1.0)

    def __post_init__(self):
        """Validate confidence."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be between 0 and 1, got {self.confidence}")

    @classmethod
    def of(cls, base: BA, enriching: EA, confidence: float) -> "AuthorMatch[BA, EA]":
        """Create a match with no step name yet (the step fills it in)."""
        return cls(base=base, enriching=enriching, step_name="", confidence=confidence)

    def with_step_name(self, step_name: str) -> "AuthorMatch[BA, EA]":
        """Return a copy attributed to another step."""
        return replace(self, step_name=step_name)


MatchingFunc = Callable[[Any, Any], Optional[AuthorMatch]]
ExclusionPredicate = Callable[[List[AuthorMatch]], bool]


@dataclass(frozen=True)
class MatcherStep(Generic[BA, EA]):
    """One named comparison technique applied pairwise by the pipeline.

    The matching function must be pure. The exclusion predicate, when set,
    is asked about the candidates found for a single enriching author; it
    returns True when they are too ambiguous to trust.
    """

    name: str
    matching_func: MatchingFunc
    exclusion_predicate: Optional[ExclusionPredicate] = None

    def try_match(self, base: BA, enriching: EA) -> Optional[AuthorMatch[BA, EA]]:
        """Attempt to match a pair. The match is always attributed to this step."""
        match = self.matching_func(base, enriching)
        if match is None:
            return None
        return match.with_step_name(self.name)

    def is_excluded(self, candidates: List[AuthorMatch[BA, EA]]) -> bool:
        """Check whether a candidate set should be discarded as ambiguous."""
        if self.exclusion_predicate is None:
            return False
        return bool(self.exclusion_predicate(candidates))


class StepBuilder(Generic[BA, EA]):
    """Fluent builder for MatcherStep.

    Example:
        step = (
            string_ignore_case_matcher(get_name, get_credit_name)
            .name("creditName")
            .build()
        )
    """

    def __init__(self):
        self._matching_func: Optional[MatchingFunc] = None
        self._exclusion_predicate: Optional[ExclusionPredicate] = None
        self._name: str = ""

    def matching_func(self, func: MatchingFunc) -> "StepBuilder[BA, EA]":
        self._matching_func = func
        return self

    def exclusion_predicate(self, predicate: Optional[ExclusionPredicate]) -> "StepBuilder[BA, EA]":
        self._exclusion_predicate = predicate
        return self

    def name(self, name: str) -> "StepBuilder[BA, EA]":
        self._name = name
        return self

    def build(self) -> MatcherStep[BA, EA]:
        if self._matching_func is None:
            raise ValueError("A matching function is required to build a step")
        return MatcherStep(
            name=self._name,
            matching_func=self._matching_func,
            exclusion_predicate=self._exclusion_predicate,
        )


# Step type registry for building steps by name (e.g. from config)
_STEP_REGISTRY: Dict[str, Callable[[Extractor, Extractor], StepBuilder]] = {}


def register_step(type_name: str):
    """Decorator to register a step builder factory."""
    def decorator(factory):
        _STEP_REGISTRY[type_name] = factory
        return factory
    return decorator


def get_step(type_name: str) -> Callable[[Extractor, Extractor], StepBuilder]:
    """Get a step builder factory by type name."""
    if type_name not in _STEP_REGISTRY:
        raise ValueError(f"Unknown step type: {type_name}. Available: {list(_STEP_REGISTRY.keys())}")
    return _STEP_REGISTRY[type_name]


def list_steps() -> List[str]:
    """List available step type names."""
    return list(_STEP_REGISTRY.keys())


def build_step(
    type_name: str,
    base_extractor: Extractor,
    enriching_extractor: Extractor,
    name: Optional[str] = None,
    exclusion_predicate: Optional[ExclusionPredicate] = None,
) -> MatcherStep:
    """Build a step of a registered type.

    Args:
        type_name: Registered type (e.g. "string_ignore_case", "abbreviations")
        base_extractor: Extracts the compared string from a base author
        enriching_extractor: Extracts the compared string from an enriching author
        name: Step name reported on matches (defaults to the factory's name)
        exclusion_predicate: Optional ambiguity predicate

    Returns:
        Built MatcherStep
    """
    builder = get_step(type_name)(base_extractor, enriching_extractor)
    if name is not None:
        builder.name(name)
    return builder.exclusion_predicate(exclusion_predicate).build()
