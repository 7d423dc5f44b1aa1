import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from allies import router as allies_router
from committees import router as committees_router
from core import db, logs, settings
from metrics import router as metrics_router
from officials import router as officials_router
from votes import router as votes_router

API_PREFIX = "/api/v1"

logs.configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="InfluencePower API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.env_list("CORS_ORIGINS", ["*"]),
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(db.StoreError)
async def store_error_handler(request: Request, exc: db.StoreError) -> JSONResponse:
    logger.error("store_error method=%s path=%s error=%s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# Literal paths (/officials/party/..., /officials/ward/...) are registered
# before /officials/{official_id} inside the officials router.
app.include_router(officials_router.router, prefix=API_PREFIX, tags=["officials"])
app.include_router(votes_router.router, prefix=API_PREFIX, tags=["votes"])
app.include_router(committees_router.router, prefix=API_PREFIX, tags=["committees"])
app.include_router(metrics_router.router, prefix=API_PREFIX, tags=["metrics"])
app.include_router(allies_router.router, prefix=API_PREFIX, tags=["allies"])


@app.get(f"{API_PREFIX}/health")
def health() -> dict:
    return {"status": "healthy", "message": "InfluencePower API is running"}


@app.get("/")
def root() -> dict:
    return {"message": "InfluencePower api"}
