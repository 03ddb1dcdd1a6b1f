# path: speed-breaker-api/speedbreaker/main.py

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from speedbreaker import config
from speedbreaker.api.routes.hazards import router as hazards_router
from speedbreaker.api.routes.navigation import router as navigation_router
from speedbreaker.services.hazard_store import HazardStore
from speedbreaker.services.map_service import GeoJSONMapAdapter
from speedbreaker.services.playback import PlaybackController

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = HazardStore(config.HAZARD_STORE_PATH or None)
    if config.SEED_DEFAULT_DATA:
        store.seed_defaults()
    app.state.hazard_store = store
    app.state.playback = PlaybackController(
        hazard_source=store.list_approved,
        map_service=GeoJSONMapAdapter(),
    )
    yield
    # Don't leave a timer running past shutdown.
    app.state.playback.stop()
    logger.info("Server shutting down")


app = FastAPI(title="speed-breaker-api", lifespan=lifespan)

app.include_router(hazards_router)
app.include_router(navigation_router)
