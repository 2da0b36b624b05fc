# dish_explorer/services/dish_service.py
import logging
from typing import Any, Dict, List, Sequence

from sqlalchemy import distinct, func, select

from dish_explorer.database import SessionLocal
from dish_explorer.errors import ValidationError
from dish_explorer.models import Dish
from dish_explorer.schemas import DishSearchQuery, TimeRange
from dish_explorer.utils.normalization import clean_tokens, fold

logger = logging.getLogger(__name__)


def _value(v):
    return v.value if v is not None and hasattr(v, "value") else v


def dish_to_dict(d: Dish) -> Dict[str, Any]:
    return {
        "id": d.id,
        "name": d.name,
        "ingredients": list(d.ingredients or []),
        "diet": _value(d.diet),
        "prep_time": d.prep_time,
        "cook_time": d.cook_time,
        "flavor_profile": _value(d.flavor_profile),
        "course": _value(d.course),
        "state": d.state,
        "region": _value(d.region),
    }


def has_all_ingredient_tokens(dish_ingredients: Sequence[str], tokens: Sequence[str]) -> bool:
    """Every token is a case-insensitive substring of at least one dish ingredient."""
    folded = [fold(i) for i in dish_ingredients]
    return all(any(fold(t) in ing for ing in folded) for t in tokens)


def ingredients_available(dish_ingredients: Sequence[str], available: Sequence[str]) -> bool:
    """
    Every dish ingredient matches some available ingredient, where a match is
    containment in either direction ("ginger" ~ "fresh ginger paste").
    """
    folded_available = [fold(a) for a in available]
    for ing in dish_ingredients:
        ing = fold(ing)
        if not any(ing in a or a in ing for a in folded_available):
            return False
    return True


def _range_conditions(column, rng: TimeRange | None) -> list:
    if rng is None:
        return []
    conditions = []
    if rng.gte is not None:
        conditions.append(column >= rng.gte)
    if rng.lte is not None:
        conditions.append(column <= rng.lte)
    return conditions


def _fetch(db, *conditions) -> List[Dish]:
    q = select(Dish)
    if conditions:
        q = q.where(*conditions)
    return list(db.execute(q.order_by(Dish.id)).scalars().all())


def get_all_dishes() -> List[Dict[str, Any]]:
    with SessionLocal() as db:
        return [dish_to_dict(d) for d in _fetch(db)]


def get_dish_by_name(name: str) -> Dict[str, Any] | None:
    key = fold(name)
    if not key:
        return None
    with SessionLocal() as db:
        d = db.execute(
            select(Dish).where(func.lower(Dish.name) == key).order_by(Dish.id)
        ).scalars().first()
        return dish_to_dict(d) if d else None


def search_dishes(query: DishSearchQuery) -> List[Dict[str, Any]]:
    conditions = []

    if query.name:
        conditions.append(Dish.name.icontains(query.name.strip(), autoescape=True))
    if query.diet is not None:
        conditions.append(Dish.diet == query.diet)
    if query.flavor_profile is not None:
        conditions.append(Dish.flavor_profile == query.flavor_profile)
    if query.course is not None:
        conditions.append(Dish.course == query.course)
    if query.state:
        conditions.append(func.lower(Dish.state) == fold(query.state))
    if query.region is not None:
        conditions.append(Dish.region == query.region)
    conditions += _range_conditions(Dish.prep_time, query.prep_time)
    conditions += _range_conditions(Dish.cook_time, query.cook_time)

    with SessionLocal() as db:
        rows = _fetch(db, *conditions)

    # Ingredient tokens are matched in memory after the relational filters.
    tokens = clean_tokens(query.ingredients)
    if tokens:
        rows = [d for d in rows if has_all_ingredient_tokens(d.ingredients or [], tokens)]

    return [dish_to_dict(d) for d in rows]


def get_dishes_by_available_ingredients(available: Sequence[str] | None) -> List[Dict[str, Any]]:
    tokens = clean_tokens(available)
    if not tokens:
        raise ValidationError("available_ingredients array is required and must not be empty")

    with SessionLocal() as db:
        rows = _fetch(db)

    matches = [dish_to_dict(d) for d in rows if ingredients_available(d.ingredients or [], tokens)]
    logger.debug("%d of %d dishes can be made from %d ingredients", len(matches), len(rows), len(tokens))
    return matches


def _distinct_values(db, column) -> List[str]:
    values = db.execute(select(distinct(column)).where(column.is_not(None))).scalars().all()
    return sorted({str(_value(v)) for v in values})


def get_unique_values() -> Dict[str, List[str]]:
    with SessionLocal() as db:
        return {
            "states": _distinct_values(db, Dish.state),
            "regions": _distinct_values(db, Dish.region),
            "courses": _distinct_values(db, Dish.course),
            "flavor_profiles": _distinct_values(db, Dish.flavor_profile),
            "diets": _distinct_values(db, Dish.diet),
        }


def get_search_suggestions(text: str, limit: int = 10) -> List[Dict[str, Any]]:
    """Dishes matching text by name, then by ingredient, then by state; deduplicated by name."""
    text = (text or "").strip()
    if not text:
        return []

    candidates = (
        search_dishes(DishSearchQuery(name=text))
        + search_dishes(DishSearchQuery(ingredients=[text]))
        + search_dishes(DishSearchQuery(state=text))
    )

    out: List[Dict[str, Any]] = []
    seen: set[str] = set()
    for d in candidates:
        key = fold(d["name"])
        if key in seen:
            continue
        seen.add(key)
        out.append(d)
        if len(out) >= limit:
            break
    return out
