# main.py

from contextlib import asynccontextmanager
import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
import uvicorn

from shidduch.middleware.request_logging import RequestLoggingMiddleware
from shidduch.routers import auth_router
from shidduch.routers.ai_profile_router import router as ai_profile_router
from shidduch.routers.library_router import router as library_router
from shidduch.routers.notes_router import router as notes_router
from shidduch.routers.profiles_router import router as profiles_router
from shidduch.routers.search_router import router as search_router
from shidduch.utils.mongo import verify_mongo_connection

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("shidduch")

SKIP_DB_CHECK = os.getenv("SKIP_DB_CHECK", "0").strip().lower() in {"1", "true", "yes", "on"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not SKIP_DB_CHECK:
        await verify_mongo_connection()
    logger.info("service_ready")
    yield


app = FastAPI(
    title="Shidduch AI API",
    description="Resume library, AI match scoring and AI profile generation for parents and shadchanim.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS for the web client
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
]

_frontend_env = os.getenv("FRONTEND_BASE_URL")
if _frontend_env and _frontend_env not in origins:
    origins.append(_frontend_env)

_extra = os.getenv("CORS_EXTRA_ORIGINS", "")
if _extra:
    for o in [x.strip() for x in _extra.split(",") if x.strip()]:
        if o not in origins:
            origins.append(o)

_allow_all = os.getenv("CORS_ALLOW_ALL", "0").strip().lower() in {"1", "true", "yes", "on"}
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if _allow_all else origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(auth_router.router, prefix="/auth")
app.include_router(profiles_router, prefix="/profiles")
app.include_router(library_router, prefix="/library")
app.include_router(notes_router, prefix="/notes")
app.include_router(search_router, prefix="/ai-search")
app.include_router(ai_profile_router, prefix="/ai-profiles")


@app.get("/healthz")
async def healthz():
    return JSONResponse({"status": "ok", "service": "shidduch-api"})


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "0") == "1",
    )
