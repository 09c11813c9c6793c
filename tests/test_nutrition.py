"""
Tests for nutrition totals and daily targets
"""

import pytest

from fitfuel.nutrition import aggregate, target_nutrition, to_number


@pytest.mark.parametrize("value, expected", [
    (12, 12),
    (2.5, 2.5),
    ("30", 30.0),
    (" 4.5 ", 4.5),
    ("lots", 0),
    (None, 0),
    (True, 0),
    ([1], 0),
])
def test_to_number(value, expected):
    assert to_number(value) == expected


def test_aggregate_sums_fields():
    totals = aggregate([
        {"calories": 300, "protein": 10, "carbs": 40, "fat": 5, "fiber": 6},
        {"calories": 450, "protein": 35, "carbs": 20, "fat": 18},
    ])
    assert totals.model_dump() == {"calories": 750, "protein": 45, "carbs": 60, "fat": 23, "fiber": 6}


def test_aggregate_tolerates_bad_values():
    totals = aggregate([
        {"calories": "250", "protein": "n/a", "fat": None},
        None,
        {"calories": 100, "carbs": True},
    ])
    assert totals.calories == 350
    assert totals.protein == 0
    assert totals.carbs == 0
    assert totals.fiber == 0


def test_aggregate_of_nothing():
    assert aggregate([]).model_dump() == {"calories": 0, "protein": 0, "carbs": 0, "fat": 0, "fiber": 0}


def test_weight_loss_keto_targets():
    targets = target_nutrition("weight_loss", "keto", 2000)
    assert targets.calories == pytest.approx(1700)
    assert targets.protein == pytest.approx(106.25)
    assert targets.carbs == pytest.approx(21.25)
    assert targets.fat == pytest.approx(132.22, abs=0.01)
    assert targets.fiber == 30


def test_muscle_gain_vegan_targets_default_base():
    targets = target_nutrition("muscle_gain", "vegan")
    assert targets.calories == pytest.approx(2300)
    assert targets.protein == pytest.approx(143.75)
    assert targets.carbs == pytest.approx(287.5)
    assert targets.fat == pytest.approx(63.89, abs=0.01)


def test_maintenance_balanced_targets():
    targets = target_nutrition("maintenance", "balanced", 1800)
    assert targets.calories == pytest.approx(1800)
    assert targets.protein == pytest.approx(135)
    assert targets.carbs == pytest.approx(180)
    assert targets.fat == pytest.approx(60)


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "Infinity", "nan", "1e999"])
def test_non_finite_values_count_as_zero(value):
    assert to_number(value) == 0


def test_aggregate_ignores_infinite_calories():
    totals = aggregate([{"calories": float("inf")}, {"calories": 200, "fat": float("nan")}])
    assert totals.calories == 200
    assert totals.fat == 0
