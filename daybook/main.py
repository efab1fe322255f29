from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from daybook.core.config import settings
from daybook.core.errors import (
    DaybookException,
    daybook_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from daybook.core.logging import configure_logging
from daybook.db.base import SessionLocal, get_db
from daybook.routers import daily_logs, families, metrics, students, subjects
from daybook.services.metric_catalog import seed_template_metrics

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("app_starting", env=settings.APP_ENV)
    if settings.SEED_TEMPLATES_ON_STARTUP:
        with SessionLocal() as db:
            seed_template_metrics(db)
    yield
    logger.info("app_stopped")


app = FastAPI(
    title="Family Daybook API",
    description=(
        "**Homeschool record keeping for families**\n\n"
        "Students, subjects and metric definitions per family, with one daily log "
        "per student, subject and day holding the values of the metrics active there.\n\n"
        "Errors always come back as `{code, message, details}`."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Most specific first.
app.add_exception_handler(DaybookException, daybook_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

for module in (families, students, subjects, metrics, daily_logs):
    app.include_router(module.router)


@app.get("/health", tags=["health"], summary="Liveness and database check")
def health(db: Session = Depends(get_db)):
    """`200 {"status": "ok"}` when the database answers, `503` otherwise."""
    try:
        db.scalar(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("health_db_unreachable")
        return JSONResponse(status_code=503, content={"status": "error", "db": "unreachable"})
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
