import enum

from sqlalchemy import JSON, CheckConstraint, Enum, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Diet(str, enum.Enum):
    vegetarian = "vegetarian"
    non_vegetarian = "non vegetarian"


class FlavorProfile(str, enum.Enum):
    sweet = "sweet"
    spicy = "spicy"
    bitter = "bitter"
    sour = "sour"


class Course(str, enum.Enum):
    main_course = "main course"
    dessert = "dessert"
    snack = "snack"
    starter = "starter"


class Region(str, enum.Enum):
    north = "North"
    south = "South"
    east = "East"
    west = "West"
    north_east = "North East"
    central = "Central"


def _enum_type(enum_cls: type[enum.Enum], name: str) -> Enum:
    # Store the human-readable value ("main course"), not the member name.
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        values_callable=lambda members: [m.value for m in members],
    )


class Base(DeclarativeBase): ...


class Dish(Base):
    __tablename__ = "dishes"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)
    ingredients: Mapped[list[str]] = mapped_column(JSON, default=list)
    diet: Mapped[Diet] = mapped_column(_enum_type(Diet, "diet"))
    prep_time: Mapped[int | None] = mapped_column(Integer)
    cook_time: Mapped[int | None] = mapped_column(Integer)
    flavor_profile: Mapped[FlavorProfile | None] = mapped_column(_enum_type(FlavorProfile, "flavor_profile"))
    course: Mapped[Course] = mapped_column(_enum_type(Course, "course"))
    state: Mapped[str | None] = mapped_column(String(100))
    region: Mapped[Region | None] = mapped_column(_enum_type(Region, "region"))
    __table_args__ = (
        Index("ix_dish_course_diet", "course", "diet"),
        CheckConstraint("prep_time IS NULL OR prep_time >= 0", name="ck_dish_prep_time"),
        CheckConstraint("cook_time IS NULL OR cook_time >= 0", name="ck_dish_cook_time"),
    )


# Names are unique under case-insensitive comparison.
Index("uq_dish_name_lower", func.lower(Dish.name), unique=True)
