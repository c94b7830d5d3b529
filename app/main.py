import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_settings
from app.dependencies.discord import close_discord_client, get_discord_client
from app.dependencies.redis import close_redis_client
from app.routers import interactions
from app.services.game.sessions import SessionReaper, get_session_store
from app.services.interactions.commands import install_commands

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting RPS interactions bot")
    logger.debug("Debug mode: %s", settings.DEBUG)

    # Start expiring abandoned sessions
    reaper = SessionReaper(get_session_store(), settings.SESSION_REAPER_INTERVAL)
    await reaper.start()
    logger.info("Session reaper started")

    if settings.REGISTER_COMMANDS_ON_STARTUP:
        await install_commands(get_discord_client())

    yield

    # Shutdown: stop reaper, close outbound clients
    logger.info("Shutting down RPS interactions bot")
    await reaper.stop()
    await close_discord_client()
    await close_redis_client()
    logger.info("Session reaper, Discord and Redis cleanup complete")


app = FastAPI(
    title="RPS Interactions Bot",
    lifespan=lifespan,
)

app.include_router(interactions.router)
logger.debug("Routers registered: /interactions")


@app.get("/")
def root():
    return {"message": "RPS Interactions Bot"}


@app.get("/health")
def health():
    return {"status": "healthy"}
