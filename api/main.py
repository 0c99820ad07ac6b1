"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.routes import game, wallet
from api.schemas import ErrorResponse
from api.session import get_registry
from config import config
from core.errors import BlackjackError
from log import setup_logging

setup_logging(config.log_level)
logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    enabled=config.rate_limit.enabled,
    default_limits=[f"{config.rate_limit.requests_per_minute}/minute"],
)


def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}"},
    )


def _blackjack_error_handler(request: Request, exc: BlackjackError) -> JSONResponse:
    """Turn engine errors into JSON error bodies."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    body = ErrorResponse(**exc.to_dict())
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )


async def _sweep_idle_sessions(interval: float) -> None:
    """Evict idle sessions every `interval` seconds."""
    while True:
        await asyncio.sleep(interval)
        registry = await get_registry()
        registry.evict_idle()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the idle session sweeper for the life of the app."""
    sweeper = asyncio.create_task(_sweep_idle_sessions(max(config.session_ttl // 4, 1)))
    try:
        yield
    finally:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass


app = FastAPI(
    title="Blackjack Sessions",
    description="Concurrent blackjack sessions with wallet settlement",
    version="0.1.0",
    debug=config.debug,
    lifespan=lifespan,
)

# Add rate limiter to app state and exception handlers
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(BlackjackError, _blackjack_error_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors.allowed_origins,
    allow_credentials=config.cors.allow_credentials,
    allow_methods=config.cors.allow_methods,
    allow_headers=config.cors.allow_headers,
)


@app.get("/api/health")
@limiter.limit(f"{config.rate_limit.requests_per_minute}/minute")
async def health_check(request: Request) -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
app.include_router(wallet.router, prefix="/api/session", tags=["session"])
app.include_router(game.router, prefix="/api/game", tags=["game"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
