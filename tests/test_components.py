"""
Tests for the scoring components.

These tests verify:
1. Fuzzy criterion matching (substring and keyword rules)
2. Form completeness, including empty answers and label case
3. Academic normalization across percentage, GWA and GPA scales
4. Response quality curve
5. Neutral defaults for missing or malformed data
"""

import pytest

from applicant_ranking.domain import (
    ApplicantRecord,
    FormField,
    FormResponse,
    ScholarshipCriteria,
)
from applicant_ranking.ranking.components import (
    NEUTRAL_ACADEMIC_SCORE,
    Rating,
    compute_rating,
    count_criteria_matches,
    evaluate_academic_performance,
    evaluate_criteria_match,
    evaluate_form_completeness,
    evaluate_response_quality,
    matches_criterion,
    names_gpa_scale,
    normalize_grade,
)


# =============================================================================
# TEST FIXTURES
# =============================================================================

def make_applicant(*responses, applicant_id: str = "app-1") -> ApplicantRecord:
    """Helper to create an applicant from (label, value) pairs."""
    return ApplicantRecord(
        applicant_id=applicant_id,
        responses=tuple(FormResponse(label, value) for label, value in responses),
    )


def make_scholarship(
    criteria=(),
    fields=(),
    scholarship_type=None,
) -> ScholarshipCriteria:
    """Helper to create a scholarship with text fields of the given labels."""
    return ScholarshipCriteria(
        criteria=tuple(criteria),
        custom_form_fields=tuple(FormField(label=label) for label in fields),
        type=scholarship_type,
    )


def academic_score(label, value) -> float:
    """Academic component for a single grade response on a merit scholarship."""
    applicant = make_applicant((label, value))
    return evaluate_academic_performance(applicant, make_scholarship(scholarship_type="merit_based"))


# =============================================================================
# CRITERION MATCHER TESTS
# =============================================================================

class TestMatchesCriterion:
    """Test fuzzy matching of a single value against a criterion."""

    def test_value_contains_criterion(self):
        assert matches_criterion("Leadership Experience", "Leadership")

    def test_criterion_contains_value(self):
        """A short value inside the criterion text matches."""
        assert matches_criterion("need", "Financial Need")

    def test_case_insensitive(self):
        assert matches_criterion("LEADERSHIP", "leadership")

    def test_keyword_match(self):
        """One of two tokens is enough (ceil(2 * 0.5) = 1)."""
        assert matches_criterion(
            "My family has financial difficulties",
            "Financial Need",
        )

    def test_keyword_match_needs_half_of_tokens(self):
        """Four tokens need two long-keyword hits."""
        criterion = "Academic Excellence and Leadership"
        assert not matches_criterion("strong academic record", criterion)
        assert matches_criterion("academic awards and leadership roles", criterion)

    def test_short_tokens_never_count(self):
        """Tokens of 3 characters or fewer do not count as keywords."""
        assert not matches_criterion("art club member", "Art and Music")

    def test_unrelated_value_does_not_match(self):
        assert not matches_criterion("President of student council", "Leadership")

    def test_blank_value_never_matches(self):
        assert not matches_criterion("", "Financial Need")
        assert not matches_criterion("   ", "Financial Need")
        assert not matches_criterion(None, "Financial Need")
        assert not matches_criterion([], "Financial Need")

    def test_empty_criterion_matches_any_value(self):
        """"" is contained in every non-empty value."""
        assert matches_criterion("anything", "")
        assert not matches_criterion("", "")

    def test_whitespace_criterion(self):
        assert not matches_criterion("anything", "   ")

    def test_edge_whitespace_counts_as_token(self):
        """A leading space adds an empty token: 5 tokens need 3 keyword hits."""
        value = "Weekend service hours at the shelter"
        assert matches_criterion(value, "Community Service Work Hours")
        assert not matches_criterion(value, " Community Service Work Hours")

    def test_number_value(self):
        assert matches_criterion(85.0, "85")

    def test_list_value(self):
        assert matches_criterion(["Tutoring", "Feeding program"], "Feeding Program")


class TestCriteriaMatch:
    """Test the criteria matching component."""

    def test_no_criteria_is_perfect(self):
        applicant = make_applicant(("Anything", "at all"))
        assert evaluate_criteria_match(applicant, make_scholarship()) == 1.0

    def test_empty_criterion_is_met_by_any_answer(self):
        applicant = make_applicant(("Anything", "at all"))
        assert evaluate_criteria_match(applicant, make_scholarship(criteria=[""])) == 1.0

    def test_fraction_of_criteria_matched(self):
        applicant = make_applicant(
            ("Leadership Experience", "President of student council"),
            ("Household Income", "Below poverty line"),
        )
        scholarship = make_scholarship(criteria=["Leadership", "Financial Need"])

        assert count_criteria_matches(applicant, scholarship) == 1
        assert evaluate_criteria_match(applicant, scholarship) == 0.5

    def test_labels_are_matched(self):
        """A criterion named by a label matches even with a blank answer."""
        applicant = make_applicant(("Community Service", ""))
        scholarship = make_scholarship(criteria=["Community Service"])

        assert evaluate_criteria_match(applicant, scholarship) == 1.0

    def test_duplicate_labels_last_wins(self):
        """Only the last answer for a repeated label is considered."""
        applicant = make_applicant(
            ("Essay", "I have shown leadership"),
            ("Essay", "No comment"),
        )
        scholarship = make_scholarship(criteria=["Leadership"])

        assert evaluate_criteria_match(applicant, scholarship) == 0.0

    def test_no_responses(self):
        scholarship = make_scholarship(criteria=["Leadership"])
        assert evaluate_criteria_match(make_applicant(), scholarship) == 0.0


# =============================================================================
# FORM COMPLETENESS TESTS
# =============================================================================

class TestFormCompleteness:
    """Test form completeness component."""

    def test_no_fields_is_complete(self):
        applicant = make_applicant()
        assert evaluate_form_completeness(applicant, make_scholarship()) == 1.0

    def test_all_answered(self):
        applicant = make_applicant(("Full Name", "Juan"), ("Essay", "Because"))
        scholarship = make_scholarship(fields=["Full Name", "Essay"])

        assert evaluate_form_completeness(applicant, scholarship) == 1.0

    def test_empty_answers_do_not_count(self):
        """None, "" and [] are unanswered; 0 is an answer."""
        applicant = make_applicant(
            ("A", "yes"),
            ("B", ""),
            ("C", []),
            ("D", 0),
            ("E", None),
        )
        scholarship = make_scholarship(fields=["A", "B", "C", "D", "E", "F"])

        assert evaluate_form_completeness(applicant, scholarship) == pytest.approx(2 / 6)

    def test_label_lookup_is_case_insensitive(self):
        applicant = make_applicant(("full name", "Juan"))
        scholarship = make_scholarship(fields=["Full Name"])

        assert evaluate_form_completeness(applicant, scholarship) == 1.0


# =============================================================================
# ACADEMIC NORMALIZER TESTS
# =============================================================================

class TestNormalizeGrade:
    """Test grade normalization across scales."""

    def test_percentage(self):
        assert normalize_grade(85) == pytest.approx(0.85)
        assert normalize_grade(100) == pytest.approx(1.0)

    def test_gwa_scale(self):
        assert normalize_grade(1.0) == pytest.approx(1.0)
        assert normalize_grade(3.0) == pytest.approx(0.5)
        assert normalize_grade(5.0) == pytest.approx(0.0)

    def test_overlap_resolves_to_gwa(self):
        """4.0 fits both GWA and GPA; GWA is tried first."""
        assert normalize_grade(4.0) == pytest.approx(0.25)

    def test_gpa_below_gwa_range(self):
        assert normalize_grade(0.5) == pytest.approx(0.125)

    def test_gpa_scale_hint(self):
        assert normalize_grade(3.2, gpa_scale=True) == pytest.approx(0.8)
        assert normalize_grade(4.0, gpa_scale=True) == pytest.approx(1.0)

    def test_gpa_hint_above_four_falls_back_to_gwa(self):
        assert normalize_grade(4.5, gpa_scale=True) == pytest.approx(0.125)

    def test_out_of_range_scores_zero(self):
        assert normalize_grade(150) == 0.0
        assert normalize_grade(50) == 0.0
        assert normalize_grade(20) == 0.0


class TestAcademicPerformance:
    """Test academic performance component."""

    def test_non_merit_is_neutral(self):
        applicant = make_applicant(("GWA", "1.0"))
        scholarship = make_scholarship(scholarship_type="skill_based")

        assert evaluate_academic_performance(applicant, scholarship) == NEUTRAL_ACADEMIC_SCORE

    def test_untyped_scholarship_is_neutral(self):
        applicant = make_applicant(("GWA", "1.0"))
        assert evaluate_academic_performance(applicant, make_scholarship()) == 0.5

    def test_gwa_values(self):
        assert academic_score("GWA", "1.0") == pytest.approx(1.0)
        assert academic_score("GWA", "3.0") == pytest.approx(0.5)
        assert academic_score("GWA", "5.0") == pytest.approx(0.0)

    def test_percentage_value(self):
        assert academic_score("General Average", "85%") == pytest.approx(0.85)

    def test_gpa_on_four_point_scale(self):
        assert academic_score("GPA", "3.2") == pytest.approx(0.8)

    def test_unlabeled_scale_uses_range_order(self):
        assert academic_score("Grade", "3.0") == pytest.approx(0.5)

    def test_gpa_label_overrides_range_order(self):
        """The same 3.0 reads as GPA only on a GPA-labeled field."""
        assert academic_score("GPA", "3.0") == pytest.approx(0.75)
        assert academic_score("GWA", "3.0") == pytest.approx(0.5)

    def test_numeric_value(self):
        assert academic_score("Final Grade", 92) == pytest.approx(0.92)

    def test_number_embedded_in_text(self):
        assert academic_score("General Weighted Average", "GWA of 1.75") == pytest.approx(0.8125)

    def test_best_grade_wins(self):
        applicant = make_applicant(
            ("GWA", "2.0"),
            ("Average in Math", "90"),
        )
        scholarship = make_scholarship(scholarship_type="merit_based")

        assert evaluate_academic_performance(applicant, scholarship) == pytest.approx(0.9)

    def test_non_numeric_grade_is_neutral(self):
        assert academic_score("GWA", "N/A") == 0.5
        assert academic_score("GWA", True) == 0.5
        assert academic_score("GWA", ["1.0"]) == 0.5

    def test_no_grade_field_is_neutral(self):
        assert academic_score("Essay", "I scored 1.0") == 0.5

    def test_out_of_range_grade_scores_zero(self):
        assert academic_score("Grade", "150") == 0.0


class TestGpaScaleHint:
    """Test which labels pin the 4.0 GPA scale."""

    def test_gpa_labels(self):
        assert names_gpa_scale("GPA")
        assert names_gpa_scale("Cumulative Grade Point Average")

    def test_gwa_labels_are_not_gpa(self):
        assert not names_gpa_scale("GWA")
        assert not names_gpa_scale("General Weighted Average")
        assert not names_gpa_scale("GPA / GWA")

    def test_plain_grade_label(self):
        assert not names_gpa_scale("Grade")


# =============================================================================
# RESPONSE QUALITY TESTS
# =============================================================================

class TestResponseQuality:
    """Test response quality component."""

    def test_no_responses_scores_zero(self):
        assert evaluate_response_quality(make_applicant(), make_scholarship()) == 0.0

    def test_numbers_and_blanks_are_ignored(self):
        applicant = make_applicant(("Age", 19), ("Essay", ""), ("Clubs", []), ("Other", None))
        assert evaluate_response_quality(applicant, make_scholarship()) == 0.0

    def test_short_answers(self):
        applicant = make_applicant(("Essay", "a" * 25))
        assert evaluate_response_quality(applicant, make_scholarship()) == pytest.approx(0.25)

    def test_medium_answers(self):
        applicant = make_applicant(("Essay", "a" * 100))
        assert evaluate_response_quality(applicant, make_scholarship()) == pytest.approx(0.6)

    def test_long_answers(self):
        applicant = make_applicant(("Essay", "a" * 200))
        assert evaluate_response_quality(applicant, make_scholarship()) == pytest.approx(0.8)

    def test_very_long_answers_are_capped(self):
        applicant = make_applicant(("Essay", "a" * 1500))
        assert evaluate_response_quality(applicant, make_scholarship()) == 1.0

    def test_list_counts_once(self):
        """A list counts once with the summed length of its strings."""
        applicant = make_applicant(("Clubs", ["abc", "de", 7]))
        assert evaluate_response_quality(applicant, make_scholarship()) == pytest.approx(0.05)

    def test_average_over_responses(self):
        applicant = make_applicant(("Essay", "a" * 80), ("Motto", "a" * 20))
        assert evaluate_response_quality(applicant, make_scholarship()) == pytest.approx(0.5)


# =============================================================================
# RATING TESTS
# =============================================================================

class TestRating:
    """Test rating thresholds."""

    def test_excellent(self):
        assert compute_rating(0.71) == Rating.EXCELLENT
        assert compute_rating(1.0) == Rating.EXCELLENT

    def test_good(self):
        assert compute_rating(0.7) == Rating.GOOD
        assert compute_rating(0.51) == Rating.GOOD

    def test_fair(self):
        assert compute_rating(0.5) == Rating.FAIR
        assert compute_rating(0.31) == Rating.FAIR

    def test_needs_improvement(self):
        assert compute_rating(0.3) == Rating.NEEDS_IMPROVEMENT
        assert compute_rating(0.0) == Rating.NEEDS_IMPROVEMENT


# =============================================================================
# RUN TESTS
# =============================================================================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
