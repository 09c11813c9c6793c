"""
Tests for prompt building
"""

import json

from fitfuel.models import MealPlanForm, RecipeBookForm
from fitfuel.nutrition import target_nutrition
from fitfuel.prompts import (MEAL_PLAN_SYSTEM_PROMPT, RECIPE_BOOK_SYSTEM_PROMPT,
                             build_meal_plan_prompt, build_recipe_book_prompt)


def _example_json(system_prompt):
    start = system_prompt.index("{")
    end = system_prompt.rindex("}") + 1
    return json.loads(system_prompt[start:end])


def test_system_prompts_show_valid_json():
    plan = _example_json(MEAL_PLAN_SYSTEM_PROMPT)
    recipe = plan["days"][0]["meals"][0]["recipe"]
    assert list(recipe)[-1] == "nutrition"
    assert recipe["servings"] == 1

    book = _example_json(RECIPE_BOOK_SYSTEM_PROMPT)
    assert book["recipes"][0]["servings"] == 4


def test_meal_plan_prompt():
    form = MealPlanForm(name="Sam", goal="muscle_gain", dietType="vegan", mealsPerDay=4,
                        allergies=["peanuts", "soy"], notes="No mushrooms")
    prompt = build_meal_plan_prompt(form, target_nutrition(form.goal, form.dietType))

    assert "- Goal: muscle_gain" in prompt
    assert "- Allergies: peanuts, soy" in prompt
    assert "- Additional Notes: No mushrooms" in prompt
    assert "Dislikes" not in prompt
    assert "- Calories: 2300" in prompt
    assert "- Protein: 144g" in prompt
    assert "Create 4 meals per day." in prompt


def test_recipe_book_prompt():
    prompt = build_recipe_book_prompt(RecipeBookForm(prompt="cosy soups", dietType="vegetarian", numberOfRecipes=4))
    assert 'request: "cosy soups"' in prompt
    assert "Diet Type: vegetarian" in prompt
    assert "Generate exactly 4 unique recipes." in prompt

    prompt = build_recipe_book_prompt(RecipeBookForm(prompt="cosy soups"))
    assert "Diet Type" not in prompt
