from fastapi import APIRouter, Query, Request

from dish_explorer.errors import NotFoundError
from dish_explorer.query_params import parse_search_params
from dish_explorer.schemas import (
    DishListResponse,
    DishResponse,
    ErrorResponse,
    FilterOptionsResponse,
    IngredientsQuery,
    IngredientsResponse,
    SearchResponse,
)
from dish_explorer.services.dish_service import (
    get_all_dishes,
    get_dish_by_name,
    get_dishes_by_available_ingredients,
    get_search_suggestions,
    get_unique_values,
    search_dishes,
)
from dish_explorer.utils.normalization import clean_tokens

router = APIRouter(
    prefix="/dishes",
    tags=["dishes"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.get("", response_model=DishListResponse)
def fetch_all_dishes():
    dishes = get_all_dishes()
    return {"success": True, "count": len(dishes), "data": dishes}


# Fixed paths are registered before /{name} so they are not read as dish names.


@router.get("/search", response_model=SearchResponse)
def search(request: Request):
    """
    Filter dishes with query parameters. Ranges use bracket notation,
    e.g. ``prep_time[gte]=10&prep_time[lte]=30``; ``ingredients`` is comma-separated.
    """
    query = parse_search_params(request.query_params)
    dishes = search_dishes(query)
    return {
        "success": True,
        "count": len(dishes),
        "query": query.model_dump(mode="json", exclude_none=True),
        "data": dishes,
    }


@router.get("/filters", response_model=FilterOptionsResponse)
def filter_options():
    return {"success": True, "data": get_unique_values()}


@router.get("/suggestions", response_model=DishListResponse)
def suggestions(q: str = "", limit: int = Query(default=10, ge=1, le=50)):
    dishes = get_search_suggestions(q, limit=limit)
    return {"success": True, "count": len(dishes), "data": dishes}


@router.post("/by-ingredients", response_model=IngredientsResponse)
def dishes_by_ingredients(body: IngredientsQuery):
    dishes = get_dishes_by_available_ingredients(body.available_ingredients)
    return {
        "success": True,
        "count": len(dishes),
        "available_ingredients": clean_tokens(body.available_ingredients),
        "data": dishes,
    }


@router.get("/{name}", response_model=DishResponse)
def dish_detail(name: str):
    dish = get_dish_by_name(name)
    if not dish:
        raise NotFoundError(f"Dish '{name}' not found")
    return {"success": True, "data": dish}
