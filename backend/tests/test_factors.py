"""
Tests for factor scoring
"""
from academy.catalog import FACTOR_KEYS, FACTOR_MAPPING
from academy.factors import average_one_place, compute_factors, required_answers

from payloads import FULL_ANSWERS


def _answers(values):
    return {n: v for n, v in enumerate(values, start=1)}


def test_fully_answered_survey_has_every_item_factor():
    factors = compute_factors(_answers(FULL_ANSWERS))
    assert set(factors) == set(FACTOR_KEYS)
    assert all(factors[key] is not None for key, items in FACTOR_MAPPING.items() if items)


def test_factor_is_rounded_mean_of_its_items():
    answers = {6: 4, 7: 5, 8: 3, 9: 4, 10: 5}
    assert compute_factors(answers)["attitude"] == 4.2


def test_rounding_is_half_up():
    # assignment items 12, 13, 16, 17 -> 17 / 4 = 4.25
    answers = {12: 4, 13: 5, 16: 4, 17: 4}
    assert compute_factors(answers)["assignment"] == 4.3
    assert average_one_place([3, 3, 4, 3]) == 3.3


def test_required_answers_is_sixty_percent_rounded_up():
    assert required_answers(5) == 3
    assert required_answers(4) == 3
    assert required_answers(3) == 2


def test_factor_absent_below_threshold():
    # attitude has 5 items and needs 3
    factors = compute_factors({6: 5, 7: 5})
    assert factors["attitude"] is None
    factors = compute_factors({6: 5, 7: 5, 8: 2})
    assert factors["attitude"] == 4.0


def test_four_item_factor_needs_three_answers():
    factors = compute_factors({1: 5, 2: 5})
    assert factors["social"] is None
    factors = compute_factors({1: 5, 2: 5, 4: 2})
    assert factors["social"] == 4.0


def test_emotion_factor_is_never_scored_from_items():
    assert FACTOR_MAPPING["emotion"] == []
    answers = {n: 5 for n in range(1, 31)}
    assert compute_factors(answers)["emotion"] is None


def test_teacher_preference_items_only_feed_management():
    # Q26, Q27 and Q29 describe preferred teachers and belong to no factor
    mapped = {n for items in FACTOR_MAPPING.values() for n in items}
    assert {26, 27, 29}.isdisjoint(mapped)
    assert {28, 30} <= set(FACTOR_MAPPING["management"])


def test_lowest_score_is_not_confused_with_missing():
    answers = {n: 1 for n in range(1, 31)}
    factors = compute_factors(answers)
    assert all(factors[key] == 1.0 for key, items in FACTOR_MAPPING.items() if items)


def test_empty_survey_has_no_factors():
    factors = compute_factors({})
    assert factors == {key: None for key in FACTOR_MAPPING}


def test_accepts_column_named_answers():
    answers = {f"q{n}": v for n, v in _answers(FULL_ANSWERS).items()}
    assert compute_factors(answers) == compute_factors(_answers(FULL_ANSWERS))


def test_skipped_items_are_ignored_in_mean():
    answers = {6: 5, 7: None, 8: 4, 9: 3, 10: None}
    assert compute_factors(answers)["attitude"] == 4.0


def test_scoring_is_deterministic_and_does_not_touch_input():
    answers = _answers(FULL_ANSWERS)
    snapshot = dict(answers)
    first = compute_factors(answers)
    second = compute_factors(answers)
    assert first == second
    assert answers == snapshot


def test_expected_values_for_sample_survey():
    factors = compute_factors(_answers(FULL_ANSWERS))
    assert factors == {
        "attitude": 4.2,
        "self_directed": 2.4,
        "assignment": 4.3,
        "willingness": 4.4,
        "social": 4.0,
        "management": 3.0,
        "emotion": None,
    }
