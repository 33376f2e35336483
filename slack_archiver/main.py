import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from slack_archiver.config import Settings, get_settings
from slack_archiver.api.routes import slack
from slack_archiver.integrations.slack.transport import get_default_transport


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("slack_archiver").setLevel(level)


settings = get_settings()
configure_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the shared connection pool, if one was ever opened
    if get_default_transport.cache_info().currsize:
        get_default_transport().close()
        get_default_transport.cache_clear()


app = FastAPI(
    title=settings.app_name,
    description="Archive Slack conversations from their permalinks",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(slack.router, prefix="/api/slack", tags=["Slack"])


@app.get("/")
async def root():
    return {
        "message": "Welcome to Slack Archiver - Slack permalink to JSON archive",
        "version": "0.1.0",
        "endpoints": {
            "archive": "/api/slack/archive",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
        "archive_dir": settings.archive_dir,
        # Whether requests may omit api_token / cookie
        "default_credentials": bool(settings.slack_api_token and settings.slack_api_cookie),
    }
