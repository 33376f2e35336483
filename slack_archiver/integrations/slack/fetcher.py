"""
Remote entity fetching

Sends requests through the client's transport, validates the Slack response
envelope and fans out one request per identifier for user / team lookups.
"""

import asyncio
import json
import logging
from typing import Callable, Iterable, TypeVar

from pydantic import ValidationError as PydanticValidationError

from slack_archiver.integrations.slack.client import SlackClient
from slack_archiver.integrations.slack.exceptions import (
    EntityMissing,
    ResponseDecodeError,
    ResponseNotOk,
    SlackArchiverError,
    TransportError,
)
from slack_archiver.integrations.slack.models import SlackResponse
from slack_archiver.integrations.slack.transport import SlackRequest

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=SlackResponse)
E = TypeVar("E")


class RemoteEntityFetcher:
    """Fetches Slack entities, all-or-nothing."""

    def __init__(self, client: SlackClient):
        self.client = client

    async def fetch_one(
        self,
        identifier: str,
        request: SlackRequest,
        response_model: type[R],
    ) -> R:
        """
        Send one request and return its validated envelope.

        Args:
            identifier: Id the request targets, used in error context
            request: Request to send
            response_model: Envelope model to validate the body into

        Returns:
            The envelope, guaranteed to have ok == True

        Raises:
            TransportError: The transport failed
            ResponseDecodeError: The body is not a JSON object of the expected shape
            ResponseNotOk: Slack reported ok = false
        """
        try:
            body = await self.client.send(request)
        except SlackArchiverError:
            raise
        except Exception as e:
            logger.error(f"Transport error for {identifier}: {e}")
            raise TransportError(identifier, e) from e

        try:
            data = json.loads(body)
        except (TypeError, ValueError) as e:
            raise ResponseDecodeError(identifier, str(body), str(e)) from e

        if not isinstance(data, dict):
            raise ResponseDecodeError(identifier, body, "response is not a JSON object")

        try:
            response = response_model.model_validate(data)
        except PydanticValidationError as e:
            raise ResponseDecodeError(identifier, body, str(e)) from e

        if response.ok is not True:
            logger.error(f"Slack response for {identifier} was not ok: {response.error}")
            raise ResponseNotOk(identifier, response.model_dump_json(exclude_none=True))

        return response

    async def fetch_entity(
        self,
        identifier: str,
        request: SlackRequest,
        response_model: type[R],
        field: str,
    ):
        """Fetch one envelope and return its ``field`` entity."""
        response = await self.fetch_one(identifier, request, response_model)
        entity = getattr(response, field)
        if entity is None:
            raise EntityMissing(identifier, field)
        return entity

    async def fetch_many(
        self,
        identifiers: Iterable[str],
        request_for: Callable[[str], SlackRequest],
        response_model: type[R],
        field: str,
    ) -> dict[str, E]:
        """
        Fetch one entity per identifier concurrently.

        Any failure fails the whole batch and cancels the requests still in
        flight. Results are zipped with the identifiers in input order, so
        callers should pass an ordered, deduplicated collection.

        Returns:
            Mapping of identifier to entity
        """
        ids = list(identifiers)
        logger.info(f"Fetching {len(ids)} {field} entities")

        tasks = [
            asyncio.ensure_future(
                self.fetch_entity(identifier, request_for(identifier), response_model, field)
            )
            for identifier in ids
        ]
        try:
            entities = await asyncio.gather(*tasks)
        except BaseException:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                logger.info(f"Cancelled {len(pending)} pending {field} requests")
            await asyncio.gather(*pending, return_exceptions=True)
            raise

        return dict(zip(ids, entities))
