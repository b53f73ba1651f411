import logging
import sqlite3
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.errors import JobValidationError, PreconditionFailed
from app.routers import auth, banners, categories, jobs

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create the database and default banner, then integrity-check
    try:
        from app.database import init_db
        from app.services.storage_service import FileStorage
        from app.utils.filesystem import ensure_storage_dirs
        ensure_storage_dirs()
        FileStorage().ensure_default_banner(settings.banner_width, settings.banner_height)
        init_db()
        conn = sqlite3.connect(str(settings.db_path))
        result = conn.execute("PRAGMA integrity_check").fetchone()
        conn.close()
        if result and result[0] == "ok":
            logger.info("Database integrity check passed.")
        else:
            logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    except Exception as exc:
        logger.error("Could not run startup setup/integrity check: %s", exc)
    yield


app = FastAPI(
    title="Job Board",
    description="Job posting review and publishing service",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PreconditionFailed)
async def precondition_failed_handler(request: Request, exc: PreconditionFailed):
    return JSONResponse(status_code=403, content={"detail": exc.message, "code": exc.code})


@app.exception_handler(JobValidationError)
async def job_validation_handler(request: Request, exc: JobValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.to_detail()})


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(jobs.router, prefix=settings.api_prefix)
app.include_router(jobs.public_router, prefix=settings.api_prefix)
app.include_router(banners.router, prefix=settings.api_prefix)
app.include_router(categories.router, prefix=settings.api_prefix)
app.include_router(banners.media_router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
