from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from memevsmeme.config import settings
from memevsmeme.logging_setup import configure_logging
from memevsmeme.routes.system import router as system_router
from memevsmeme.routes.auth import router as auth_router
from memevsmeme.routes.memes import router as memes_router
from memevsmeme.routes.challenges import router as challenges_router, user_battles_router
from memevsmeme.routes.battles import router as battles_router, leaderboard_router
from memevsmeme.routes.community import router as community_router
from memevsmeme.routes.media import router as media_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for daily meme challenges and battles",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(auth_router)
app.include_router(memes_router)
app.include_router(challenges_router)
app.include_router(user_battles_router)
app.include_router(battles_router)
app.include_router(leaderboard_router)
app.include_router(community_router)
app.include_router(media_router)

@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    try:
        response: Response = await call_next(request)
    except Exception:
        # handled here while request_id is still bound
        log.exception("unhandled_error", path=request.url.path, method=request.method)
        response = JSONResponse(status_code=500, content={"detail": "Internal server error"})
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers["X-Request-ID"] = rid
    return response
