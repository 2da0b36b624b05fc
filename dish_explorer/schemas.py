from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dish_explorer.models import Course, Diet, FlavorProfile, Region


class DishOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    ingredients: list[str]
    diet: Diet
    prep_time: int | None = None
    cook_time: int | None = None
    flavor_profile: FlavorProfile | None = None
    course: Course
    state: str | None = None
    region: Region | None = None


class TimeRange(BaseModel):
    gte: int | None = Field(default=None, ge=0)
    lte: int | None = Field(default=None, ge=0)


class DishSearchQuery(BaseModel):
    name: str | None = None
    ingredients: list[str] | None = None
    diet: Diet | None = None
    flavor_profile: FlavorProfile | None = None
    course: Course | None = None
    state: str | None = None
    region: Region | None = None
    prep_time: TimeRange | None = None
    cook_time: TimeRange | None = None


class IngredientsQuery(BaseModel):
    available_ingredients: list[str] | None = Field(
        default=None,
        description='Ingredients on hand, e.g. ["rice", "salt"]',
    )


class FilterOptions(BaseModel):
    states: list[str]
    regions: list[str]
    courses: list[str]
    flavor_profiles: list[str]
    diets: list[str]


class DishListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[DishOut]


class DishResponse(BaseModel):
    success: bool = True
    data: DishOut


class SearchResponse(DishListResponse):
    query: dict[str, Any]


class IngredientsResponse(DishListResponse):
    available_ingredients: list[str]


class FilterOptionsResponse(BaseModel):
    success: bool = True
    data: FilterOptions


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str | None = None
