import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from college_events.config import settings
from college_events.exceptions import EventsError, ThrottledError
from college_events.routers import auth, events, uploads

logger = logging.getLogger("college_events")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: data directories, schema and integrity check
    from college_events.database import check_integrity, init_db
    from college_events.utils.filesystem import ensure_data_dirs

    ensure_data_dirs()
    init_db()
    result = check_integrity()
    if result == "ok":
        logger.info("Database integrity check passed (%s).", settings.db_path)
    else:
        logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    yield
    # Shutdown: drop sessions and release pooled connections
    from college_events.database import engine
    from college_events.services.auth_service import auth_service
    auth_service.revoke_all()
    engine.dispose()


app = FastAPI(
    title="College Events",
    description="Event listings with image attachments and owner-only editing",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(EventsError)
async def events_error_handler(request: Request, exc: EventsError):
    content = {"message": exc.message}
    headers = None
    if isinstance(exc, ThrottledError):
        content["retry_after_seconds"] = exc.retry_after_seconds
        headers = {"Retry-After": str(int(exc.retry_after_seconds) + 1)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": "Invalid request"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error"})


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(events.router, prefix=settings.api_prefix)
app.include_router(uploads.router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
