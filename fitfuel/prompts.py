"""
Prompt templates for meal plans and recipe books
"""

from fitfuel.models import MealPlanForm, NutritionInfo, RecipeBookForm

RECIPE_JSON_SHAPE = """{{
            "id": "recipe-id",
            "name": "Recipe Name",
            "description": "Brief description",
            "prepTime": 15,
            "cookTime": 20,
            "servings": {servings},
            "difficulty": "easy",
            "ingredients": [
                {{"item": "ingredient name", "amount": "1", "unit": "cup"}}
            ],
            "instructions": [
                "Step 1",
                "Step 2"
            ],
            "nutrition": {{
                "calories": 450,
                "protein": 25,
                "carbs": 50,
                "fat": 15,
                "fiber": 8
            }}
        }}"""

MEAL_PLAN_SYSTEM_PROMPT = """You are a professional nutritionist and meal planner. Create a detailed, personalized 7-day meal plan based on the user's preferences and goals.

IMPORTANT: You must respond with ONLY valid JSON, no markdown, no code blocks, no additional text. The JSON must follow this exact structure:

{{
    "days": [
        {{
            "day": 1,
            "dayName": "Monday",
            "meals": [
                {{
                    "id": "unique-id",
                    "name": "Breakfast/Lunch/Dinner/Snack",
                    "time": "8:00 AM",
                    "recipe": {recipe}
                }}
            ]
        }}
    ]
}}

Within each recipe, write "name" and "instructions" BEFORE "nutrition".""".format(
    recipe=RECIPE_JSON_SHAPE.format(servings=1)
)

RECIPE_BOOK_SYSTEM_PROMPT = """You are a professional chef and recipe creator. Create detailed, delicious recipes based on the user's request.

IMPORTANT: You must respond with ONLY valid JSON, no markdown, no code blocks, no additional text. The JSON must follow this exact structure:

{{
    "title": "Recipe Book Title",
    "description": "Brief description of the recipe collection",
    "recipes": [
        {recipe}
    ]
}}

Within each recipe, write "name" and "instructions" BEFORE "nutrition".""".format(
    recipe=RECIPE_JSON_SHAPE.format(servings=4)
)

MEAL_PLAN_USER_TEMPLATE = """Create a 7-day meal plan for:
- Name: {name}
- Goal: {goal}
- Diet Type: {diet_type}
- Meals Per Day: {meals_per_day}
- Cooking Time: {cooking_time}
{extra_lines}
Target Daily Nutrition:
- Calories: {calories}
- Protein: {protein}g
- Carbs: {carbs}g
- Fat: {fat}g

Create {meals_per_day} meals per day.
Remember: Response must be ONLY the JSON object, no markdown formatting."""

RECIPE_BOOK_USER_TEMPLATE = """Create a recipe book based on this request: "{prompt}"

{diet_line}
Number of Recipes: {count}

Make the recipes:
- Detailed and easy to follow
- Creative and delicious
- Properly portioned with accurate nutrition information
- Varied in ingredients and cooking methods

Generate exactly {count} unique recipes.

Remember: Response must be ONLY the JSON object, no markdown formatting."""


def build_meal_plan_prompt(form: MealPlanForm, targets: NutritionInfo) -> str:
    extra_lines = []
    if form.allergies:
        extra_lines.append(f"- Allergies: {', '.join(form.allergies)}")
    if form.dislikes:
        extra_lines.append(f"- Dislikes: {', '.join(form.dislikes)}")
    if form.cuisinePreferences:
        extra_lines.append(f"- Cuisine Preferences: {', '.join(form.cuisinePreferences)}")
    if form.notes:
        extra_lines.append(f"- Additional Notes: {form.notes}")

    return MEAL_PLAN_USER_TEMPLATE.format(
        name=form.name,
        goal=form.goal,
        diet_type=form.dietType,
        meals_per_day=form.mealsPerDay,
        cooking_time=form.cookingTime,
        extra_lines="\n".join(extra_lines) + "\n" if extra_lines else "",
        calories=round(targets.calories),
        protein=round(targets.protein),
        carbs=round(targets.carbs),
        fat=round(targets.fat),
    )


def build_recipe_book_prompt(form: RecipeBookForm) -> str:
    return RECIPE_BOOK_USER_TEMPLATE.format(
        prompt=form.prompt,
        diet_line=f"Diet Type: {form.dietType}" if form.dietType else "",
        count=form.numberOfRecipes,
    )
