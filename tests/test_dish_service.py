from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from dish_explorer.database import SessionLocal
from dish_explorer.errors import ValidationError
from dish_explorer.models import Course, Diet, Dish, Region
from dish_explorer.schemas import DishSearchQuery, TimeRange
from dish_explorer.services.dish_service import (
    get_all_dishes,
    get_dish_by_name,
    get_dishes_by_available_ingredients,
    get_search_suggestions,
    get_unique_values,
    has_all_ingredient_tokens,
    ingredients_available,
    search_dishes,
)
from tests.conftest import SAMPLE_DISH_COUNT


def _names(dishes) -> set[str]:
    return {d["name"] for d in dishes}


# ── Matching helpers ─────────────────────────────────────────────────────


class TestIngredientMatching:
    def test_tokens_are_substrings(self):
        assert has_all_ingredient_tokens(["Basmati Rice", "salt"], ["rice", "SALT"])

    def test_every_token_required(self):
        assert not has_all_ingredient_tokens(["rice", "salt"], ["rice", "ghee"])

    def test_available_exact(self):
        assert ingredients_available(["rice", "salt"], ["rice", "salt"])

    def test_available_dish_contains_token(self):
        assert ingredients_available(["fresh ginger paste"], ["ginger"])

    def test_available_token_contains_dish_ingredient(self):
        assert ingredients_available(["ginger"], ["fresh ginger paste"])

    def test_available_missing_ingredient(self):
        assert not ingredients_available(["rice", "salt", "ghee"], ["rice", "salt"])

    def test_dish_without_ingredients_is_vacuously_available(self):
        assert ingredients_available([], ["rice"])


# ── Catalog reads ────────────────────────────────────────────────────────


def test_get_all_dishes_stable_order(catalog):
    first = get_all_dishes()
    assert len(first) == SAMPLE_DISH_COUNT
    assert [d["id"] for d in first] == sorted(d["id"] for d in first)
    assert first == get_all_dishes()


def test_every_dish_found_by_name(catalog):
    for dish in get_all_dishes():
        found = get_dish_by_name(dish["name"].upper())
        assert found is not None
        assert found["name"].lower() == dish["name"].lower()


def test_get_dish_by_name_is_exact(catalog):
    assert get_dish_by_name("rice") is None
    assert get_dish_by_name("  ") is None
    assert get_dish_by_name("plain RICE")["name"] == "Plain rice"


# ── search_dishes ────────────────────────────────────────────────────────


class TestSearch:
    def test_empty_query_returns_catalog(self, catalog):
        assert len(search_dishes(DishSearchQuery())) == len(get_all_dishes())

    def test_name_substring_case_insensitive(self, catalog):
        assert _names(search_dishes(DishSearchQuery(name="RICE"))) == {"Plain rice", "Jeera rice"}

    def test_name_wildcards_are_literal(self, catalog):
        assert search_dishes(DishSearchQuery(name="%")) == []
        assert search_dishes(DishSearchQuery(name="_")) == []

    def test_diet(self, catalog):
        result = search_dishes(DishSearchQuery(diet=Diet.non_vegetarian))
        assert _names(result) == {"Butter chicken", "Machher jhol", "Bebinca", "Tandoori chicken"}

    def test_course_and_region_combine(self, catalog):
        result = search_dishes(DishSearchQuery(course=Course.dessert, region=Region.east))
        assert _names(result) == {"Gulab jamun"}

    def test_state_case_insensitive_exact(self, catalog):
        result = search_dishes(DishSearchQuery(state="punjab"))
        assert _names(result) == {"Jeera rice", "Butter chicken", "Aloo tikki", "Tandoori chicken"}
        assert search_dishes(DishSearchQuery(state="punj")) == []

    def test_prep_time_range_inclusive(self, catalog):
        result = search_dishes(DishSearchQuery(prep_time=TimeRange(gte=10, lte=20)))
        assert _names(result) == {"Butter chicken", "Gulab jamun", "Machher jhol", "Dhokla", "Bebinca"}
        for d in result:
            assert 10 <= d["prep_time"] <= 20

    def test_zero_lower_bound_excludes_unknown_times(self, catalog):
        result = search_dishes(DishSearchQuery(prep_time=TimeRange(gte=0)))
        assert len(result) == SAMPLE_DISH_COUNT - 3
        assert all(d["prep_time"] is not None for d in result)

    def test_cook_time_upper_bound_inclusive(self, catalog):
        assert _names(search_dishes(DishSearchQuery(cook_time=TimeRange(lte=2)))) == {"Pani puri"}

    def test_single_ingredient_token(self, catalog):
        result = search_dishes(DishSearchQuery(ingredients=["rice"]))
        assert _names(result) == {"Plain rice", "Jeera rice", "Kheer", "Aloo tikki", "Masala dosa"}

    def test_all_ingredient_tokens_required(self, catalog):
        result = search_dishes(DishSearchQuery(ingredients=["rice", "SALT"]))
        assert _names(result) == {"Plain rice", "Jeera rice", "Aloo tikki"}

    def test_ingredients_with_relational_filters(self, catalog):
        result = search_dishes(DishSearchQuery(ingredients=["ginger"], diet=Diet.vegetarian))
        assert _names(result) == {"Ginger chai", "Dhokla"}

    def test_results_satisfy_every_constraint(self, catalog):
        query = DishSearchQuery(
            name="a",
            diet=Diet.vegetarian,
            ingredients=["a"],
            cook_time=TimeRange(gte=10, lte=40),
        )
        result = search_dishes(query)
        assert result
        for d in result:
            assert "a" in d["name"].lower()
            assert d["diet"] == "vegetarian"
            assert 10 <= d["cook_time"] <= 40
            assert any("a" in i.lower() for i in d["ingredients"])


# ── get_dishes_by_available_ingredients ──────────────────────────────────


class TestAvailableIngredients:
    @pytest.mark.parametrize("available", [None, [], ["", "  "]])
    def test_rejects_missing_or_empty(self, catalog, available):
        with pytest.raises(ValidationError):
            get_dishes_by_available_ingredients(available)

    def test_exact_ingredients(self, catalog):
        assert _names(get_dishes_by_available_ingredients(["rice", "salt"])) == {"Plain rice"}

    def test_available_token_inside_dish_ingredient(self, catalog):
        result = get_dishes_by_available_ingredients(["Ginger", "milk", "tea", "sugar"])
        assert _names(result) == {"Ginger chai"}

    def test_dish_ingredient_inside_available_token(self, catalog):
        result = get_dishes_by_available_ingredients(["fresh rice", "sea salt"])
        assert _names(result) == {"Plain rice"}

    def test_nothing_matches(self, catalog):
        assert get_dishes_by_available_ingredients(["saffron"]) == []


# ── get_unique_values ────────────────────────────────────────────────────


def test_unique_values(catalog):
    values = get_unique_values()
    assert values["states"] == ["Assam", "Goa", "Gujarat", "Karnataka", "Punjab", "West Bengal"]
    assert values["regions"] == ["East", "North", "North East", "South", "West"]
    assert values["courses"] == ["dessert", "main course", "snack", "starter"]
    assert values["flavor_profiles"] == ["spicy", "sweet"]
    assert values["diets"] == ["non vegetarian", "vegetarian"]


def test_unique_diets_sorted_and_known(catalog):
    diets = get_unique_values()["diets"]
    assert diets == sorted(set(diets))
    assert set(diets) <= {"vegetarian", "non vegetarian"}


def test_unique_values_empty_catalog(empty_db):
    assert get_unique_values() == {
        "states": [], "regions": [], "courses": [], "flavor_profiles": [], "diets": [],
    }


# ── get_search_suggestions ───────────────────────────────────────────────


def test_suggestions_name_then_ingredient_matches(catalog):
    result = get_search_suggestions("rice")
    assert [d["name"] for d in result] == ["Plain rice", "Jeera rice", "Kheer", "Aloo tikki", "Masala dosa"]


def test_suggestions_limit(catalog):
    assert [d["name"] for d in get_search_suggestions("rice", limit=3)] == ["Plain rice", "Jeera rice", "Kheer"]


def test_suggestions_match_state(catalog):
    assert _names(get_search_suggestions("gujarat")) == {"Dhokla"}


def test_suggestions_blank(catalog):
    assert get_search_suggestions("   ") == []


# ── Non-ASCII text and ingredient-free dishes ────────────────────────────


def _add_dish(**fields) -> None:
    fields.setdefault("ingredients", ["flour"])
    fields.setdefault("diet", Diet.vegetarian)
    fields.setdefault("course", Course.dessert)
    with SessionLocal() as db:
        db.add(Dish(**fields))
        db.commit()


def test_non_ascii_name_lookup_is_case_insensitive(catalog):
    _add_dish(name="Éclair", state="Île-de-France")
    assert get_dish_by_name("Éclair")["name"] == "Éclair"
    assert get_dish_by_name("éCLAIR")["name"] == "Éclair"


def test_non_ascii_state_search_is_case_insensitive(catalog):
    _add_dish(name="Éclair", state="Île-de-France")
    assert _names(search_dishes(DishSearchQuery(state="île-de-france"))) == {"Éclair"}
    assert _names(search_dishes(DishSearchQuery(name="ÉCL"))) == {"Éclair"}


def test_non_ascii_names_unique_across_case(catalog):
    _add_dish(name="Éclair")
    with pytest.raises(IntegrityError):
        _add_dish(name="ÉCLAIR")


def test_dish_without_ingredients_is_suggested(catalog):
    _add_dish(name="Mystery dish", ingredients=[])
    result = get_dishes_by_available_ingredients(["rice"])
    assert "Mystery dish" in _names(result)
