"""MongoDB inventory sampler.

This module issues the read-only admin commands behind an inventory
capture and bounds the whole exchange with one timeout.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol

import pymongo
from pymongo.errors import PyMongoError

from core.constants import ADMIN_DATABASE_NAME
from core.errors import MongoDiffSamplingError
from core.logging_config import get_logger
from sampling.inventory_format import format_inventory

_LOGGER = get_logger(__name__)


class InventorySampler(Protocol):
    """Anything that captures one deterministic inventory text block."""

    def sample(self) -> str:
        """Return the current inventory text."""
        ...


class MongoInventorySampler:
    """Inventory sampler backed by a pymongo client."""

    def __init__(
        self,
        mongo_uri: str,
        timeout_seconds: float,
        client_factory: Callable[..., Any] = pymongo.MongoClient,
    ) -> None:
        """Initialize sampler settings.

        Args:
            mongo_uri: MongoDB connection string, passed through unchanged.
            timeout_seconds: Bound for connecting and running all commands.
            client_factory: Callable building a client from a URI and options.
        """
        self._mongo_uri = mongo_uri
        self._timeout_seconds = timeout_seconds
        self._client_factory = client_factory

    def sample(self) -> str:
        """Capture the inventory text block.

        Returns:
            Deterministic inventory text.

        Raises:
            MongoDiffSamplingError: On connection, command, or timeout failures.
        """
        started = time.monotonic()
        timeout_ms = int(self._timeout_seconds * 1000)
        try:
            client = self._client_factory(
                self._mongo_uri,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
                timeoutMS=timeout_ms,
            )
        except PyMongoError as error:
            raise MongoDiffSamplingError(
                f"Failed to create MongoDB client: {error}. Check --mongo-uri."
            ) from error
        try:
            with pymongo.timeout(self._timeout_seconds):
                content = _collect_inventory(client)
        except PyMongoError as error:
            raise MongoDiffSamplingError(_describe_failure(error, self._timeout_seconds)) from error
        finally:
            client.close()
        _LOGGER.info(
            "inventory_sampled",
            line_count=content.count("\n"),
            elapsed_seconds=round(time.monotonic() - started, 3),
        )
        return content


def _collect_inventory(client: Any) -> str:
    """Run the admin commands and format their replies."""
    admin = client.get_database(ADMIN_DATABASE_NAME)
    database_names = client.list_database_names()
    users_reply = admin.command("usersInfo", {"forAllDBs": True})
    config_reply = admin.command("replSetGetConfig")
    status_reply = admin.command("replSetGetStatus")
    return format_inventory(
        database_names=database_names,
        users=users_reply.get("users") or [],
        repl_config=config_reply.get("config") or {},
        repl_status=status_reply,
    )


def _describe_failure(error: PyMongoError, timeout_seconds: float) -> str:
    if error.timeout:
        return (
            f"MongoDB inventory sampling timed out after {timeout_seconds:g}s: {error}. "
            "Check that the server is reachable or raise --timeout."
        )
    return f"MongoDB inventory sampling failed: {error}. Check --mongo-uri and credentials."
