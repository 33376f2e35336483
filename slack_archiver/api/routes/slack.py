"""
Slack API Routes
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Optional
import logging
import time

from slack_archiver.config import get_settings
from slack_archiver.integrations.slack.exceptions import (
    SlackArchiverError,
    ValidationError,
    describe_error,
)
from slack_archiver.integrations.slack.models import Credentials, FeatureFlags
from slack_archiver.services.archive_store import ArchiveStore
from slack_archiver.services.retrieval import ERROR_PREFIX, retrieve

logger = logging.getLogger(__name__)
router = APIRouter()


class ArchiveRequest(BaseModel):
    """Body of POST /api/slack/archive."""

    api_token: Optional[str] = Field(None, description="xoxc token (default: SLACK_API_TOKEN)")
    cookie: Optional[str] = Field(None, description="xoxd cookie (default: SLACK_API_COOKIE)")
    permalink: str = Field(..., min_length=1, description="Slack message permalink")
    feature_flags: Optional[FeatureFlags] = Field(
        None, description="Entities to fetch (default: from settings)"
    )
    save: bool = Field(True, description="Write the archive file to ARCHIVE_DIR")


def _default_feature_flags() -> FeatureFlags:
    settings = get_settings()
    return FeatureFlags(
        fetch_users=settings.fetch_users,
        fetch_channel=settings.fetch_channel,
        fetch_team=settings.fetch_team,
        fetch_files=settings.fetch_files,
    )


@router.post("/archive")
async def archive_conversation(request: ArchiveRequest):
    """
    Retrieve the conversation behind a permalink and archive it.

    Pipeline:
    1. Validate credentials and parse the permalink
    2. Fetch the thread, then channel / users / teams per feature flags
    3. Denormalize and (optionally) write <channel>-<ts>.json to the archive dir

    Examples:
    - POST /api/slack/archive {"permalink": "https://acme.slack.com/archives/C123/p1700000000000100"}
    """
    start_time = time.time()
    settings = get_settings()

    credentials = Credentials(
        api_token=request.api_token or settings.slack_api_token,
        cookie=request.cookie or settings.slack_api_cookie,
    )
    flags = request.feature_flags or _default_feature_flags()

    try:
        components = await retrieve(credentials, request.permalink, flags)
    except ValidationError as e:
        logger.warning(f"Rejected archive request: {e}")
        raise HTTPException(status_code=400, detail=ERROR_PREFIX + describe_error(e))
    except SlackArchiverError as e:
        logger.error(f"Archive request failed: {describe_error(e)}")
        raise HTTPException(status_code=502, detail=ERROR_PREFIX + describe_error(e))

    saved_path = None
    if request.save:
        saved_path = str(ArchiveStore(settings.archive_dir).save(components))

    processing_time = time.time() - start_time
    logger.info(f"Archived {components.file_name} in {processing_time:.2f}s")

    return {
        "success": True,
        "file_name": components.file_name,
        "saved_path": saved_path,
        "components": components.model_dump(mode="json", exclude_none=True),
        "processing_time_seconds": round(processing_time, 2),
    }
