"""
Tests for the in-memory history
"""

from fitfuel import storage


def test_newest_first():
    for plan_id in ("a", "b", "c"):
        storage.save_meal_plan({"id": plan_id})
    assert [plan["id"] for plan in storage.get_meal_plans()] == ["c", "b", "a"]


def test_oldest_items_are_dropped(monkeypatch):
    monkeypatch.setattr(storage, "MAX_STORED_ITEMS", 3)
    for i in range(5):
        storage.save_recipe_book({"id": f"rb-{i}"})

    assert [book["id"] for book in storage.get_recipe_books()] == ["rb-4", "rb-3", "rb-2"]
    assert storage.get_recipe_book("rb-0") is None


def test_resaving_moves_item_to_front(monkeypatch):
    monkeypatch.setattr(storage, "MAX_STORED_ITEMS", 2)
    storage.save_meal_plan({"id": "a", "version": 1})
    storage.save_meal_plan({"id": "b"})
    storage.save_meal_plan({"id": "a", "version": 2})
    storage.save_meal_plan({"id": "c"})

    assert [plan["id"] for plan in storage.get_meal_plans()] == ["c", "a"]
    assert storage.get_meal_plan("a")["version"] == 2


def test_delete():
    storage.save_meal_plan({"id": "a"})
    assert storage.delete_meal_plan("a") is True
    assert storage.delete_meal_plan("a") is False
    assert storage.get_meal_plans() == []
