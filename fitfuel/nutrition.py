"""
Nutrition arithmetic: running totals over generated recipes and daily targets
"""

import math
from typing import Any, Dict, Iterable, Optional, Union

from fitfuel.models import NutritionInfo

NUTRIENTS = ("calories", "protein", "carbs", "fat", "fiber")

GOAL_CALORIE_FACTORS = {
    "weight_loss": 0.85,
    "muscle_gain": 1.15,
}

# protein / carbs / fat share of calories
DIET_MACRO_SPLITS = {
    "keto": (0.25, 0.05, 0.70),
    "vegan": (0.25, 0.50, 0.25),
    "vegetarian": (0.25, 0.50, 0.25),
}
DEFAULT_MACRO_SPLIT = (0.30, 0.40, 0.30)

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FAT = 9
DAILY_FIBER_GRAMS = 30
DEFAULT_BASE_CALORIES = 2000


def to_number(value: Any) -> Union[int, float]:
    """Numeric value of a nutrition field; anything unusable, NaN or infinite counts as 0"""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    return 0


def aggregate(nutritions: Iterable[Optional[Dict[str, Any]]]) -> NutritionInfo:
    """Sum nutrition bundles; a missing field (fiber, usually) adds nothing"""
    totals = dict.fromkeys(NUTRIENTS, 0)
    for nutrition in nutritions:
        if not isinstance(nutrition, dict):
            continue
        for key in NUTRIENTS:
            totals[key] += to_number(nutrition.get(key, 0))
    return NutritionInfo(**totals)


def target_nutrition(goal: Optional[str], diet_type: Optional[str],
                     base_calories: Optional[float] = None) -> NutritionInfo:
    """Daily targets for a goal and diet type"""
    calories = (base_calories or DEFAULT_BASE_CALORIES) * GOAL_CALORIE_FACTORS.get(goal, 1.0)
    protein_ratio, carbs_ratio, fat_ratio = DIET_MACRO_SPLITS.get(diet_type, DEFAULT_MACRO_SPLIT)

    return NutritionInfo(
        calories=calories,
        protein=calories * protein_ratio / KCAL_PER_GRAM_PROTEIN,
        carbs=calories * carbs_ratio / KCAL_PER_GRAM_CARBS,
        fat=calories * fat_ratio / KCAL_PER_GRAM_FAT,
        fiber=DAILY_FIBER_GRAMS,
    )
