import logging
import time

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config, database
from .database import get_db
from .routers import lesson_router, order_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("lesson_service")

app = FastAPI(
    title="Lesson Service",
    description="Lesson catalog and order placement backed by MongoDB",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Lesson images
app.mount("/images", StaticFiles(directory=config.IMAGES_DIR, check_dir=False), name="images")

app.include_router(lesson_router.router)
app.include_router(order_router.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s %d %.1f ms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = exc.detail
    elif exc.status_code >= 500:
        content = {"msg": "error", "error": "Internal Server Error"}
    else:
        content = {"msg": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"msg": "error", "error": "Invalid request body"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"msg": "error", "error": "Internal Server Error"},
    )


@app.on_event("startup")
def _startup() -> None:
    # Fail fast: an exception here aborts startup before any request is served
    try:
        uri, db_name = config.resolve_connection()
    except config.ConfigError:
        logger.exception("Failed to start the server")
        raise
    app.state.mongo_client, app.state.db = database.connect(uri, db_name)


@app.on_event("shutdown")
def _shutdown() -> None:
    client = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()
        logger.info("MongoDB connection closed")


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Hello, MongoDB!"


@app.get("/health")
def health_check(db: Database = Depends(get_db)):
    if not database.ping(db):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "service": "lesson-service"},
        )
    return {"status": "healthy", "service": "lesson-service"}


def run() -> None:
    uvicorn.run(app, host=config.HOST, port=config.PORT)
