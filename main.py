import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dish_explorer.config import settings
from dish_explorer.database import SessionLocal, ping
from dish_explorer.errors import DishExplorerError
from dish_explorer.etl.load_dishes_sqlalchemy import count_dishes, init_catalog
from dish_explorer.routes import router as dish_router

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed the catalog before serving; a failed seed leaves the service up but degraded."""
    app.state.catalog_status = init_catalog(settings.seed_csv_path)
    logger.info("Starting Indian Dish Explorer API (catalog %s)", app.state.catalog_status)
    yield
    logger.info("Shutting down Indian Dish Explorer API")


app = FastAPI(title="Indian Dish Explorer API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    content = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(DishExplorerError)
async def dish_explorer_error_handler(request: Request, exc: DishExplorerError):
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in errors
    )
    return _error(400, "Invalid request", detail)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return _error(500, "Internal server error", str(exc))


@app.get("/")
def root():
    return {"message": "Indian Dish Explorer API is running."}


@app.get("/health")
def health():
    catalog = getattr(app.state, "catalog_status", "unknown")
    try:
        ping()
        with SessionLocal() as db:
            dishes = count_dishes(db)
    except SQLAlchemyError as e:
        return {"status": "degraded", "db": "unreachable", "catalog": catalog, "error": str(e)}
    status = "ok" if catalog != "degraded" else "degraded"
    return {"status": status, "db": "reachable", "catalog": catalog, "dishes": dishes}


app.include_router(dish_router)
