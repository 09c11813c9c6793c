"""
In-memory history of generated meal plans and recipe books.

Only the most recent items are kept; nothing survives a restart.
"""

import logging
from typing import Any, Dict, List, Optional

from fitfuel.config import MAX_STORED_ITEMS

logger = logging.getLogger(__name__)

# Storage (in production, use a database)
meal_plans_storage: Dict[str, Dict[str, Any]] = {}
recipe_books_storage: Dict[str, Dict[str, Any]] = {}


def _save(storage: Dict[str, Dict[str, Any]], item: Dict[str, Any]) -> None:
    # Re-saving moves the item to the newest position
    storage.pop(item["id"], None)
    storage[item["id"]] = item
    while len(storage) > MAX_STORED_ITEMS:
        oldest = next(iter(storage))
        del storage[oldest]


def _newest_first(storage: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
    return list(reversed(list(storage.values())))


def save_meal_plan(meal_plan: Dict[str, Any]) -> None:
    _save(meal_plans_storage, meal_plan)
    logger.info("Saved meal plan %s", meal_plan["id"])


def get_meal_plans() -> List[Dict[str, Any]]:
    return _newest_first(meal_plans_storage)


def get_meal_plan(plan_id: str) -> Optional[Dict[str, Any]]:
    return meal_plans_storage.get(plan_id)


def delete_meal_plan(plan_id: str) -> bool:
    return meal_plans_storage.pop(plan_id, None) is not None


def save_recipe_book(recipe_book: Dict[str, Any]) -> None:
    _save(recipe_books_storage, recipe_book)
    logger.info("Saved recipe book %s", recipe_book["id"])


def get_recipe_books() -> List[Dict[str, Any]]:
    return _newest_first(recipe_books_storage)


def get_recipe_book(book_id: str) -> Optional[Dict[str, Any]]:
    return recipe_books_storage.get(book_id)


def delete_recipe_book(book_id: str) -> bool:
    return recipe_books_storage.pop(book_id, None) is not None
