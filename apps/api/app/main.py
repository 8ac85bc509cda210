import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routers import auth, health, me, projects, tasks, reviews, users
from .models.user import Base
from .db import engine, SessionLocal
from .core.seed import seed_admin
from .core.settings import settings
from .core.errors import InternalError

import app.models.project  # noqa: F401
import app.models.project_assignment  # noqa: F401
import app.models.task  # noqa: F401
import app.models.task_review  # noqa: F401


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Project Hours Tracker API")


@app.on_event("startup")
def on_startup():
    if settings.AUTO_DB_BOOTSTRAP:
        # Create tables in dev if missing.
        Base.metadata.create_all(bind=engine)

        with SessionLocal() as session:
            seed_admin(session)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        msg = str(first.get("msg", "")).removeprefix("Value error, ")
        detail = f"{field}: {msg}" if field else msg
    return JSONResponse(status_code=400, content={"detail": detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=InternalError.status_code, content={"detail": InternalError.default_detail})


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(me.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(reviews.router)
app.include_router(users.router)

# CORS: allow local dev origins by default.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
