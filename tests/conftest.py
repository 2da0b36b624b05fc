import os
import tempfile
from pathlib import Path

# Point the app at a throwaway database and the sample seed file before it is imported.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="dish_explorer_tests_"))
SAMPLE_CSV = Path(__file__).resolve().parent / "data" / "dishes_sample.csv"
os.environ["DATABASE_URL"] = f"sqlite:///{(_TMP_DIR / 'test.db').as_posix()}"
os.environ["SEED_CSV_PATH"] = str(SAMPLE_CSV)

import pytest
from fastapi.testclient import TestClient

from dish_explorer.database import engine
from dish_explorer.etl.load_dishes_sqlalchemy import load_if_empty
from dish_explorer.models import Base
from main import app

# Rows in dishes_sample.csv that survive parsing (15 rows, blank name and duplicate skipped).
SAMPLE_DISH_COUNT = 13


@pytest.fixture
def empty_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine


@pytest.fixture
def catalog(empty_db):
    load_if_empty(SAMPLE_CSV)
    yield engine


@pytest.fixture
def client(catalog):
    return TestClient(app)


@pytest.fixture
def write_csv(tmp_path):
    def _write(text: str, name: str = "seed.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
