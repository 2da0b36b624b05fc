import logging
import re
import threading
from pathlib import Path

import pandas as pd
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from dish_explorer.config import settings
from dish_explorer.database import SessionLocal, engine, init_db
from dish_explorer.errors import DataLoadError
from dish_explorer.models import Base, Course, Diet, Dish, FlavorProfile, Region
from dish_explorer.utils.normalization import fold, split_comma_list

logger = logging.getLogger(__name__)

UNKNOWN = "-1"

_seed_lock = threading.Lock()


def _cell(row, col: str) -> str:
    val = row.get(col, "")
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return ""
    return str(val)


def parse_ingredients(val) -> list[str]:
    return split_comma_list(val)


def parse_diet(val) -> Diet:
    return Diet.non_vegetarian if fold(val) == Diet.non_vegetarian.value else Diet.vegetarian


def parse_time(val) -> int | None:
    """Minutes as int, or None for blank, non-numeric, -1 or negative values."""
    s = (val or "").strip()
    if not s or s == UNKNOWN:
        return None
    m = re.match(r"^[+-]?\d+", s)
    if not m:
        return None
    minutes = int(m.group(0))
    return minutes if minutes >= 0 else None


def parse_flavor_profile(val) -> FlavorProfile | None:
    s = fold(val)
    for flavor in FlavorProfile:
        if flavor.value == s:
            return flavor
    return None


def parse_course(val) -> Course:
    s = fold(val)
    for course in Course:
        if course.value == s:
            return course
    return Course.main_course


def parse_state(val) -> str | None:
    s = (val or "").strip()
    if not s or s == UNKNOWN:
        return None
    return s


def parse_region(val) -> Region | None:
    s = (val or "").strip()
    if not s or s == UNKNOWN:
        return None
    for region in Region:
        if region.value == s:
            return region
    return None


def parse_row(row) -> Dish:
    name = _cell(row, "name").strip()
    if not name:
        raise ValueError("dish name is empty")
    return Dish(
        name=name,
        ingredients=parse_ingredients(_cell(row, "ingredients")),
        diet=parse_diet(_cell(row, "diet")),
        prep_time=parse_time(_cell(row, "prep_time")),
        cook_time=parse_time(_cell(row, "cook_time")),
        flavor_profile=parse_flavor_profile(_cell(row, "flavor_profile")),
        course=parse_course(_cell(row, "course")),
        state=parse_state(_cell(row, "state")),
        region=parse_region(_cell(row, "region")),
    )


def read_seed_file(path) -> pd.DataFrame:
    path = Path(path)
    try:
        # Keep every cell as text so "-1" and blanks reach the parsers untouched.
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    except (OSError, ValueError) as exc:
        raise DataLoadError(f"Could not read seed file {path}: {exc}") from exc
    df.columns = [str(c).strip().lower() for c in df.columns]
    if "name" not in df.columns:
        raise DataLoadError(f"Seed file {path} has no 'name' column")
    return df


def parse_seed_rows(df: pd.DataFrame) -> tuple[list[Dish], int]:
    """
    Turn seed rows into Dish objects.
    Rows with an empty or repeated (case-insensitive) name are skipped.
    Returns (dishes, skipped_count).
    """
    dishes: list[Dish] = []
    seen: set[str] = set()
    skipped = 0
    for i, row in df.iterrows():
        line = int(i) + 2  # header is line 1
        try:
            dish = parse_row(row)
        except ValueError as exc:
            logger.warning("Skipping seed row at line %d: %s", line, exc)
            skipped += 1
            continue
        key = fold(dish.name)
        if key in seen:
            logger.warning("Skipping seed row at line %d: duplicate dish name %r", line, dish.name)
            skipped += 1
            continue
        seen.add(key)
        dishes.append(dish)
    return dishes, skipped


def count_dishes(session) -> int:
    return session.execute(select(func.count()).select_from(Dish)).scalar_one()


def load_if_empty(csv_path=None) -> int:
    """
    Seed the dishes table from csv_path when it is empty.

    The emptiness check and the insert share one transaction. A concurrent
    seeder in another process trips the unique name index and its batch is
    rolled back. Returns the number of dishes inserted (0 if already seeded).
    """
    csv_path = Path(csv_path or settings.seed_csv_path)
    with _seed_lock:
        session = SessionLocal()
        try:
            existing = count_dishes(session)
            if existing:
                logger.info("Catalog already contains %d dishes", existing)
                return 0

            logger.info("Catalog is empty, loading dishes from %s", csv_path)
            dishes, skipped = parse_seed_rows(read_seed_file(csv_path))
            session.add_all(dishes)
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.info("Catalog was seeded concurrently, skipping load")
            return 0
        except SQLAlchemyError as exc:
            session.rollback()
            raise DataLoadError(f"Could not persist seed dishes: {exc}") from exc
        except DataLoadError:
            session.rollback()
            raise
        finally:
            session.close()

    logger.info("Loaded %d dishes from %s (%d rows skipped)", len(dishes), csv_path, skipped)
    return len(dishes)


def init_catalog(csv_path=None) -> str:
    """Create the schema and seed it. Returns "ready", or "degraded" when seeding failed."""
    try:
        try:
            init_db()
        except SQLAlchemyError as exc:
            raise DataLoadError(f"Could not create catalog schema: {exc}") from exc
        load_if_empty(csv_path)
    except DataLoadError as exc:
        logger.error("Catalog load failed, serving without seed data: %s", exc)
        return "degraded"
    return "ready"


def load_csv(path, reset: bool = False):
    if reset:
        Base.metadata.drop_all(bind=engine)
    init_db()
    inserted = load_if_empty(path)
    with SessionLocal() as session:
        total = count_dishes(session)
    return {"dishes_inserted": inserted, "dishes_total": total}


if __name__ == "__main__":
    import sys
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    p = args[0] if args else settings.seed_csv_path
    print(load_csv(p, reset="--reset" in sys.argv))
