"""
Document shapes the LLM is asked to produce, and which of their records
count as complete.

Two shapes exist: a meal plan (records grouped by day) and a recipe book
(one flat list of recipes). The shape is chosen once per session.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from fitfuel.models import NutritionInfo
from fitfuel.nutrition import aggregate, to_number


@dataclass
class Container:
    """One group of complete records (a day, or the whole recipe list)"""
    container_id: Any
    records: List[Dict[str, Any]]
    totals: NutritionInfo
    meta: Dict[str, Any] = field(default_factory=dict)


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _has_calories(nutrition: Any) -> bool:
    return isinstance(nutrition, dict) and to_number(nutrition.get("calories")) > 0


def day_index(value: Any) -> Optional[int]:
    """Day number as an int, or None if it is not a usable day index"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
        return number if number >= 1 else None
    return None


class DocumentSchema:
    """Base for the two document shapes"""

    kind = ""
    truncation_message = "Response was truncated. Try a smaller request."

    def iter_containers(self, document: Any) -> Iterator[Tuple[Any, Dict[str, Any], List[Any]]]:
        """Yield (container id, container fields, raw records) in document order"""
        raise NotImplementedError

    def is_complete(self, record: Any, container_id: Any) -> bool:
        raise NotImplementedError

    def nutrition_of(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def render(self, containers: List[Container], document: Dict[str, Any], final: bool) -> Dict[str, Any]:
        """Body of the document sent to clients"""
        raise NotImplementedError

    def extract(self, document: Any) -> List[Tuple[Any, Dict[str, Any]]]:
        """Complete records as (container id, record), in document order"""
        return [
            (container_id, record)
            for container_id, _meta, records in self.iter_containers(document)
            for record in records
            if self.is_complete(record, container_id)
        ]

    def containers(self, document: Any) -> List[Container]:
        """Complete records grouped per container, with totals. Empty containers are dropped."""
        grouped = []
        for container_id, meta, records in self.iter_containers(document):
            valid = [record for record in records if self.is_complete(record, container_id)]
            if not valid:
                continue
            totals = aggregate(self.nutrition_of(record) for record in valid)
            grouped.append(Container(container_id, valid, totals, meta))
        return grouped


class MealPlanSchema(DocumentSchema):
    """{"days": [{"day", "dayName", "meals": [{"id", "name", "time", "recipe"}]}]}"""

    kind = "meal_plan"
    truncation_message = "Response was truncated. Try requesting fewer meals per day."

    def iter_containers(self, document):
        if not isinstance(document, dict):
            return
        days = document.get("days")
        if not isinstance(days, list):
            return
        for day in days:
            if not isinstance(day, dict):
                continue
            meals = day.get("meals")
            if not isinstance(meals, list):
                continue
            meta = {"dayName": day.get("dayName")}
            yield day_index(day.get("day")), meta, meals

    def is_complete(self, record, container_id):
        if container_id is None or not isinstance(record, dict):
            return False
        recipe = record.get("recipe")
        if not isinstance(recipe, dict):
            return False
        return _has_text(recipe.get("name")) and _has_calories(recipe.get("nutrition"))

    def nutrition_of(self, record):
        return record["recipe"].get("nutrition")

    def render(self, containers, document, final):
        return {
            "days": [
                {
                    "day": container.container_id,
                    "dayName": container.meta.get("dayName"),
                    "meals": container.records,
                    "totalNutrition": container.totals.model_dump(),
                }
                for container in containers
            ]
        }


class RecipeBookSchema(DocumentSchema):
    """{"title", "description", "recipes": [recipe, ...]}"""

    kind = "recipe_book"
    truncation_message = "Response was truncated. Try requesting fewer recipes."
    container_id = "recipes"

    def iter_containers(self, document):
        if not isinstance(document, dict):
            return
        recipes = document.get("recipes")
        if isinstance(recipes, list):
            yield self.container_id, {}, recipes

    def is_complete(self, record, container_id):
        if not isinstance(record, dict):
            return False
        instructions = record.get("instructions")
        return isinstance(instructions, list) and len(instructions) > 0 and _has_calories(record.get("nutrition"))

    def nutrition_of(self, record):
        return record.get("nutrition")

    def render(self, containers, document, final):
        records = [record for container in containers for record in container.records]
        totals = aggregate(self.nutrition_of(record) for record in records)
        return {
            "title": document.get("title") or "Recipe Book",
            "description": document.get("description") or ("" if final else "Loading..."),
            "recipes": records,
            "totalNutrition": totals.model_dump(),
        }


MEAL_PLAN = MealPlanSchema()
RECIPE_BOOK = RecipeBookSchema()

SCHEMAS = {schema.kind: schema for schema in (MEAL_PLAN, RECIPE_BOOK)}


def schema_for(kind: str) -> DocumentSchema:
    if kind not in SCHEMAS:
        raise ValueError(f"Unknown document kind: {kind}")
    return SCHEMAS[kind]
