from __future__ import annotations

import enum
from typing import Mapping

from dish_explorer.errors import ValidationError
from dish_explorer.models import Course, Diet, FlavorProfile, Region
from dish_explorer.schemas import DishSearchQuery, TimeRange
from dish_explorer.utils.normalization import fold, split_comma_list

ENUM_PARAMS: dict[str, type[enum.Enum]] = {
    "diet": Diet,
    "flavor_profile": FlavorProfile,
    "course": Course,
    "region": Region,
}
RANGE_PARAMS = ("prep_time", "cook_time")
RANGE_BOUNDS = ("gte", "lte")


def parse_enum(field: str, raw: str, enum_cls: type[enum.Enum]) -> enum.Enum:
    wanted = fold(raw)
    for member in enum_cls:
        if member.value.lower() == wanted:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValidationError(f"Invalid {field} '{raw}'. Expected one of: {allowed}")


def parse_bound(key: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValidationError(f"{key} must be a non-negative integer, got '{raw}'") from None
    if value < 0:
        raise ValidationError(f"{key} must be a non-negative integer, got '{raw}'")
    return value


def parse_search_params(params: Mapping[str, str]) -> DishSearchQuery:
    """
    Build a DishSearchQuery from raw query-string values.

    Blank values count as absent and unknown keys are ignored. Enum values
    match case-insensitively; range bounds use bracketed keys such as
    ``prep_time[gte]``. Raises ValidationError on anything unrecognized.
    """
    def value(key: str) -> str | None:
        raw = params.get(key)
        if raw is None or not str(raw).strip():
            return None
        return str(raw).strip()

    fields: dict = {}

    for key in ("name", "state"):
        if value(key):
            fields[key] = value(key)

    for key, enum_cls in ENUM_PARAMS.items():
        if value(key):
            fields[key] = parse_enum(key, value(key), enum_cls)

    if value("ingredients"):
        tokens = split_comma_list(value("ingredients"))
        if tokens:
            fields["ingredients"] = tokens

    for key in RANGE_PARAMS:
        bounds = {}
        for bound in RANGE_BOUNDS:
            raw = value(f"{key}[{bound}]")
            if raw is not None:
                bounds[bound] = parse_bound(f"{key}[{bound}]", raw)
        if bounds:
            fields[key] = TimeRange(**bounds)

    return DishSearchQuery(**fields)
