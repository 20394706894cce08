# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from serenai.models import database
from serenai.models import *  # registers all models

from serenai.routers import (
    chat_router,
    healthz_router,
    insights_router,
    journal_router,
    mood_router,
    notifications_router,
    posts_router,
    therapy_router,
    user_router,
)
from serenai.services.reminder_scheduler import ReminderScheduler
from serenai.utils.rate_limit_utils import limiter
from serenai.utils.time_utils import APP_TIMEZONE

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("serenai")

SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")


# Create DB tables in one go
database.Base.metadata.create_all(bind=database.engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ⏰ Daily reminders, weekly summaries, monthly achievements and custom reminders
    reminder_scheduler = ReminderScheduler(session_factory=database.SessionLocal, tz=APP_TIMEZONE)
    app.state.reminder_scheduler = reminder_scheduler

    if SCHEDULER_ENABLED:
        reminder_scheduler.start()
    else:
        logger.info("⏸️ Reminder scheduler disabled.")

    yield
    reminder_scheduler.shutdown()


# Create FastAPI app with lifespan
app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="SerenAI API",
    description="Mental wellness companion backend",
    version="1.0"
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Include routers
app.include_router(user_router.router)
app.include_router(chat_router.router)
app.include_router(journal_router.router)
app.include_router(mood_router.router)
app.include_router(insights_router.router)
app.include_router(therapy_router.router)
app.include_router(posts_router.router)
app.include_router(notifications_router.router)
app.include_router(healthz_router.router)


# ---------------------- ADDING EXCEPTION HANDLERS ----------------------
@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request, exc):
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please slow down."}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())}
    )


@app.middleware("http")
async def catch_unhandled_errors(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("🛑 Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )


@app.get("/")
def read_root():
    return {"message": "Welcome to SerenAI - mental wellness companion backend Live"
                       "Copyright (c) 2025 Shiladitya Mallick "
                       "This file is part of the SerenAI - Mental Wellness Companion project. "
                       "Licensed under the MIT License - see the LICENSE file for details."}


@app.get("/health", tags=["Infra"])
def health_check():
    return {"status": "ok"}
