"""FastAPI application for the venue booking platform."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.middleware import SlowAPIMiddleware

from venuebook import __version__, db
from venuebook.config import ENVIRONMENT, LOG_LEVEL
from venuebook.errors import register_error_handlers
from venuebook.rate_limit import limiter
from venuebook.routers import auth, bookings, health, superadmin
from venuebook.routers.venues import build_venue_router
from venuebook.services.registry import registry

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting venue booking API (%s)", ENVIRONMENT)
    await db.init_db()
    yield
    await db.close_db()
    logger.info("Venue booking API stopped")


app = FastAPI(
    title="Venue Booking API",
    description="Bookings, share links and booking links for pools, tennis and pickleball courts",
    version=__version__,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
register_error_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
for spec in registry.list_kinds():
    app.include_router(build_venue_router(spec))
app.include_router(bookings.router)
app.include_router(superadmin.router)
