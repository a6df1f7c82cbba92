"""Tests for the matching pipeline.

Scenario data comes from real publications (DOIs noted per test) matched
against ORCID records.
"""

import pytest

from authormatch.matching import (
    AuthorMatch,
    MatcherStep,
    StepBuilder,
    abbreviations_matcher,
    evaluate_step,
    exclude_any_ambiguity,
    exclude_tied_confidence,
    find_matches,
)
from tests.conftest import OrcidAuthor, PublicationAuthor, check_match, get_matches, orcid_steps


def _scored_step(name, scores, predicate=None) -> MatcherStep:
    """Step matching (base, enriching) pairs found in a score table."""
    def matching_func(base, enriching):
        score = scores.get((base, enriching))
        return None if score is None else AuthorMatch.of(base, enriching, score)

    return StepBuilder().matching_func(matching_func).exclusion_predicate(predicate).name(name).build()


def _assert_exclusive(matches):
    bases = [id(m.base) for m in matches]
    enrichings = [id(m.enriching) for m in matches]
    assert len(bases) == len(set(bases))
    assert len(enrichings) == len(set(enrichings))


# ============================================================================
# Publication scenarios
# ============================================================================


class TestScenarios:
    def test_mixed_methods(self, mixed_authors):
        """DOI 10.1111/jbi.14978."""
        authors, candidates = mixed_authors
        result = get_matches(authors, candidates)

        assert len(result) == 3
        assert check_match(result, "Marco Ferrante", "0000-0003-2421-396X")
        assert check_match(result, "Gabor L. Lövei", "0000-0002-6467-9812")
        assert check_match(result, "Andy G. Howe", "0000-0002-7460-5227")
        assert [m.step_name for m in result] == ["fullName", "orderedTokens", "creditName"]
        assert result[0].confidence == 1.0
        assert result[1].confidence < 1.0

    def test_homonymy(self):
        """DOI 10.57805/revstat.v20i4.382: two ORCID records for the same name."""
        authors = PublicationAuthor.of("Otto, Philipp", "Otto, P.")
        candidates = [
            OrcidAuthor("Philipp", "Otto", "", "0000-0001-8630-108X"),
            OrcidAuthor("Philipp", "Otto", "", "0000-0002-9796-6682"),
        ]
        result = get_matches(authors, candidates)

        assert len(result) == 2
        assert check_match(result, "Otto, Philipp", "0000-0001-8630-108X")
        assert check_match(result, "Otto, P.", "0000-0002-9796-6682")
        _assert_exclusive(result)

    def test_accent_insensitive(self):
        """DOI 10.48550/arxiv.1210.5363."""
        authors = PublicationAuthor.of("Michal Pilipczuk")
        candidates = [OrcidAuthor("Michał", "Pilipczuk", "", "0000-0001-7891-1988")]
        result = get_matches(authors, candidates)

        assert len(result) == 1
        assert check_match(result, "Michal Pilipczuk", "0000-0001-7891-1988")
        assert result[0].step_name == "orderedTokens"
        assert 0.5 < result[0].confidence < 1.0

    def test_full_names(self):
        """DOI 10.1145/3618260.3649791: one author has no ORCID record."""
        authors = PublicationAuthor.of(
            "Peter Gartland",
            "Daniel Lokshtanov",
            "Tomáš Masařík",
            "Marcin Pilipczuk",
            "Michał Pilipczuk",
            "Paweł Rzążewski",
        )
        candidates = [
            OrcidAuthor("Tomáš", "Masařík", "", "0000-0001-8524-4036"),
            OrcidAuthor("Daniel", "Lokshtanov", "", "0000-0002-3166-9212"),
            OrcidAuthor("Paweł", "Rzążewski", "", "0000-0001-7696-3848"),
            OrcidAuthor("Marcin", "Pilipczuk", "", "0000-0001-5680-7397"),
            OrcidAuthor("Michał", "Pilipczuk", "", "0000-0001-7891-1988"),
        ]
        result = get_matches(authors, candidates)

        assert len(result) == 5
        assert check_match(result, "Daniel Lokshtanov", "0000-0002-3166-9212")
        assert check_match(result, "Tomáš Masařík", "0000-0001-8524-4036")
        assert check_match(result, "Marcin Pilipczuk", "0000-0001-5680-7397")
        assert check_match(result, "Michał Pilipczuk", "0000-0001-7891-1988")
        assert check_match(result, "Paweł Rzążewski", "0000-0001-7696-3848")
        assert all(m.step_name == "fullName" for m in result)

    def test_case_insensitive(self):
        """PMID 14244447."""
        authors = PublicationAuthor.of("Davis, M. J. F.")
        candidates = [OrcidAuthor("M J", "DAVIS", "", "")]
        result = get_matches(authors, candidates)

        assert len(result) == 1
        assert check_match(result, "Davis, M. J. F.", "")


# ============================================================================
# Pipeline mechanics
# ============================================================================


class TestFindMatches:
    def test_none_inputs(self):
        assert find_matches(None, None, None) == []
        assert find_matches(["a"], ["b"], None) == []
        assert find_matches(None, ["b"], orcid_steps()) == []
        assert find_matches(["a"], None, [_scored_step("s", {("a", "b"): 1.0})]) == []

    def test_no_steps(self):
        assert find_matches(["a"], ["b"], []) == []

    def test_inputs_not_mutated(self, mixed_authors):
        authors, candidates = mixed_authors
        get_matches(authors, candidates)
        assert len(authors) == 3
        assert len(candidates) == 3

    def test_step_order_preserved(self):
        b1, b2, e1, e2 = object(), object(), object(), object()
        first = _scored_step("first", {(b2, e2): 0.2})
        second = _scored_step("second", {(b1, e1): 0.9})

        result = find_matches([b1, b2], [e1, e2], [first, second])

        assert [m.step_name for m in result] == ["first", "second"]

    def test_claimed_authors_skip_later_steps(self):
        b1, e1, e2 = object(), object(), object()
        first = _scored_step("first", {(b1, e1): 0.5})
        second = _scored_step("second", {(b1, e2): 1.0})

        result = find_matches([b1], [e1, e2], [first, second])

        assert len(result) == 1
        assert result[0].enriching is e1

    def test_exclusive_across_many_steps(self):
        authors = PublicationAuthor.of("Otto, Philipp", "Otto, P.", "P. Otto", "Philipp Otto")
        candidates = [
            OrcidAuthor("Philipp", "Otto", "Philipp Otto", "x"),
            OrcidAuthor("Philipp", "Otto", "P. Otto", "y"),
            OrcidAuthor("P.", "Otto", "", "z"),
        ]
        result = get_matches(authors, candidates)
        _assert_exclusive(result)
        assert len(result) == 3

    def test_dict_records(self):
        """Records don't need to be hashable."""
        base = [{"name": "Alice Smith"}]
        enriching = [{"name": "alice smith"}]
        step = abbreviations_matcher(lambda r: r["name"], lambda r: r["name"]).build()

        result = find_matches(base, enriching, [step])

        assert len(result) == 1
        assert result[0].base is base[0]


class TestEvaluateStep:
    def test_empty_base_pool(self):
        e1 = object()
        enriching = [e1]
        assert evaluate_step([], enriching, _scored_step("s", {})) == []
        assert enriching == [e1]

    def test_pools_shrink_by_claimed(self):
        b1, b2, b3, e1, e2 = object(), object(), object(), object(), object()
        base = [b1, b2, b3]
        enriching = [e1, e2]
        step = _scored_step("s", {(b2, e1): 0.8})

        result = evaluate_step(base, enriching, step)

        assert [(m.base, m.enriching) for m in result] == [(b2, e1)]
        assert base == [b1, b3]
        assert enriching == [e2]

    def test_single_candidate_ignores_predicate(self):
        b1, e1 = object(), object()
        step = _scored_step("s", {(b1, e1): 0.8}, predicate=lambda candidates: True)
        assert len(evaluate_step([b1], [e1], step)) == 1

    def test_ambiguous_candidates_excluded(self):
        b1, b2, e1 = object(), object(), object()
        base = [b1, b2]
        enriching = [e1]
        step = _scored_step("s", {(b1, e1): 0.9, (b2, e1): 0.5}, predicate=exclude_any_ambiguity)

        assert evaluate_step(base, enriching, step) == []
        assert base == [b1, b2]
        assert enriching == [e1]

    def test_exclusion_is_per_enriching_author(self):
        b1, b2, e1, e2 = object(), object(), object(), object()
        step = _scored_step(
            "s",
            {(b1, e1): 0.9, (b2, e1): 0.9, (b2, e2): 0.7},
            predicate=exclude_tied_confidence,
        )

        result = evaluate_step([b1, b2], [e1, e2], step)

        assert [(m.base, m.enriching) for m in result] == [(b2, e2)]

    def test_ambiguous_candidates_accepted_without_predicate(self):
        b1, b2, e1 = object(), object(), object()
        step = _scored_step("s", {(b1, e1): 0.5, (b2, e1): 0.9})

        result = evaluate_step([b1, b2], [e1], step)

        assert len(result) == 1
        assert result[0].base is b2

    def test_greedy_highest_confidence_first(self):
        b1, e1, e2 = object(), object(), object()
        step = _scored_step("s", {(b1, e1): 0.6, (b1, e2): 0.9})

        result = evaluate_step([b1], [e1, e2], step)

        assert len(result) == 1
        assert result[0].enriching is e2

    def test_greedy_is_not_globally_optimal(self):
        # b1-e1 (0.9) blocks b1-e2 + b2-e1 (0.8 + 0.8)
        b1, b2, e1, e2 = object(), object(), object(), object()
        step = _scored_step("s", {(b1, e1): 0.9, (b1, e2): 0.8, (b2, e1): 0.8})

        result = evaluate_step([b1, b2], [e1, e2], step)

        assert [(m.base, m.enriching) for m in result] == [(b1, e1)]

    def test_ties_follow_pool_order(self):
        b1, b2, e1, e2 = object(), object(), object(), object()
        scores = {(b1, e1): 0.7, (b2, e1): 0.7, (b1, e2): 0.7, (b2, e2): 0.7}

        result = evaluate_step([b1, b2], [e1, e2], _scored_step("s", scores))

        assert [(m.base, m.enriching) for m in result] == [(b1, e1), (b2, e2)]

    def test_results_sorted_by_confidence(self):
        b1, b2, e1, e2 = object(), object(), object(), object()
        step = _scored_step("s", {(b1, e1): 0.4, (b2, e2): 0.8})

        result = evaluate_step([b1, b2], [e1, e2], step)

        assert [m.confidence for m in result] == [0.8, 0.4]

    @pytest.mark.parametrize("steps", [orcid_steps()])
    def test_monotonic_pool_shrink(self, steps, mixed_authors):
        authors, candidates = mixed_authors
        base = list(authors)
        enriching = list(candidates)

        for step in steps:
            before_base = list(base)
            before_enriching = list(enriching)
            matches = evaluate_step(base, enriching, step)
            claimed_base = {id(m.base) for m in matches}
            claimed_enriching = {id(m.enriching) for m in matches}

            assert base == [a for a in before_base if id(a) not in claimed_base]
            assert enriching == [a for a in before_enriching if id(a) not in claimed_enriching]

        assert base == []
        assert enriching == []
