import logging
import time
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rover_console.api.routes.alerts import router as alerts_router
from rover_console.api.routes.metrics import router as metrics_router
from rover_console.api.routes.people import router as people_router
from rover_console.api.routes.rover import router as rover_router
from rover_console.api.routes.stats import router as stats_router
from rover_console.core.config import settings
from rover_console.core.errors import StorageError
from rover_console.db import session as db_session
from rover_console.metrics.prometheus import api_request_latency_seconds
from rover_console.services.alert_board import AlertBoard
from rover_console.services.alert_store import LocalAlertStore
from rover_console.services.detection_feed import RoverApiClient
from rover_console.services.polling import PeriodicRefresh

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

def build_rover_client() -> RoverApiClient:
    return RoverApiClient(
        base_url=settings.rover_api_url,
        token=settings.rover_api_token,
        timeout=settings.rover_api_timeout,
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    if not db_session.create_tables():
        logger.warning("database unavailable; people registry requests will fail until it recovers")
    store = LocalAlertStore(db_session.engine, seed_samples=settings.seed_sample_alerts)
    if not store.init():
        logger.warning("alert store unavailable; starting with an empty local alert log")

    client = build_rover_client()
    board = AlertBoard(store, client, detection_limit=settings.detection_limit)
    app.state.rover_client = client
    app.state.board = board
    app.state.pollers = []

    async with AsyncExitStack() as stack:
        stack.push_async_callback(client.aclose)
        stack.callback(board.dispose)
        if settings.polling_enabled:
            app.state.pollers = [
                await stack.enter_async_context(
                    PeriodicRefresh("local", board.refresh_local, settings.local_poll_seconds)
                ),
                await stack.enter_async_context(
                    PeriodicRefresh("remote", board.refresh_remote, settings.remote_poll_seconds)
                ),
            ]
        else:
            await board.refresh()
        yield

app = FastAPI(
    title="Rover Console API",
    version="0.1.0",
    description="Alert log, detection feed and people registry for the rover dashboard",
    lifespan=lifespan,
)

# Expo web / Metro dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:8081",
        "http://127.0.0.1:8081",
        "http://localhost:19006",
        "http://127.0.0.1:19006",
    ],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Operation failed"})

@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.perf_counter()
    status = "500"
    try:
        response: Response = await call_next(request)
        status = str(response.status_code)
        return response
    finally:
        dt = time.perf_counter() - start
        api_request_latency_seconds.labels(
            route=request.url.path, method=request.method, status=status
        ).observe(dt)

@app.get("/health")
def health():
    return {"status": "ok"}

app.include_router(alerts_router)
app.include_router(people_router)
app.include_router(rover_router)
app.include_router(metrics_router)
app.include_router(stats_router)
