"""
Request and response models
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

DietType = Literal["balanced", "keto", "vegan", "vegetarian", "paleo", "mediterranean"]
Goal = Literal["weight_loss", "muscle_gain", "maintenance", "energy"]
CookingTime = Literal["quick", "moderate", "elaborate"]


class NutritionInfo(BaseModel):
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    fiber: float = 0


class MealPlanForm(BaseModel):
    # Personal info
    name: str
    email: str = ""

    # Dietary preferences
    dietType: DietType = "balanced"
    allergies: List[str] = []
    dislikes: List[str] = []

    # Goals
    goal: Goal = "maintenance"
    calorieTarget: Optional[int] = None

    mealsPerDay: int = 3
    cuisinePreferences: List[str] = []
    cookingTime: CookingTime = "moderate"
    notes: Optional[str] = None


class RecipeBookForm(BaseModel):
    prompt: str  # e.g. "5 healthy takeaway recipes"
    dietType: Optional[DietType] = None
    numberOfRecipes: int = 5


class ImageRequest(BaseModel):
    recipeName: str
    ingredients: List[Dict[str, Any]] = []
    recipeId: Optional[str] = None
