"""Typed adapter over ``UniformClient``.

The gateway is the boundary where raw vendor JSON becomes ``Component`` and
``ProjectMetadata`` models. Nothing untyped leaves this module except the
full component definition handed through a transfer verbatim.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from ..config import Config
from ..errors import MetadataFetchError, UpstreamError
from ..models import Component, ProjectMetadata
from .client import UniformClient

logger = logging.getLogger(__name__)


class VendorGateway:
    """Uniform API operations keyed by project id and API key.

    Clients are created lazily and reused per credential pair. Methods are
    blocking and safe to call from worker threads.
    """

    def __init__(self, config: Config):
        self.config = config
        self._clients: dict[tuple[str, str], UniformClient] = {}
        self._lock = threading.Lock()

    def client_for(self, project_id: str, api_key: str) -> UniformClient:
        key = (project_id, api_key)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = UniformClient(self.config, project_id, api_key)
                self._clients[key] = client
            return client

    def fetch_project_metadata(
        self, project_id: str, api_key: str
    ) -> ProjectMetadata:
        """Fetch a project's name and team.

        Raises:
            MetadataFetchError: If the lookup fails or the payload has no name.
        """
        try:
            data = self.client_for(project_id, api_key).get_project()
        except UpstreamError as e:
            raise MetadataFetchError(
                f"Failed to fetch metadata for project {project_id}: {e}",
                status_code=e.status_code,
            ) from e

        name = data.get("name")
        if not isinstance(name, str):
            raise MetadataFetchError(
                f"Project {project_id} metadata has no name"
            )
        return ProjectMetadata(
            project_id=project_id,
            name=name,
            team_id=str(data.get("teamId") or ""),
            team_name=str(data.get("teamName") or ""),
        )

    def list_components(
        self, project_id: str, api_key: str
    ) -> list[Component]:
        """List every component definition of a project, decoded."""
        definitions = self.client_for(
            project_id, api_key
        ).get_component_definitions(limit=self.config.component_page_limit)
        components = [_decode(d, project_id) for d in definitions]
        logger.info(
            "Fetched %d components from project %s",
            len(components),
            project_id,
        )
        return components

    def get_component(
        self, project_id: str, api_key: str, component_id: str
    ) -> dict[str, Any] | None:
        """Fetch one full component definition, or ``None`` if absent."""
        definitions = self.client_for(
            project_id, api_key
        ).get_component_definitions(component_id=component_id)
        if not definitions:
            return None
        definition = definitions[0]
        if not isinstance(definition, dict):
            raise UpstreamError(
                f"Malformed definition for component '{component_id}' in project {project_id}"
            )
        return definition

    def put_component(
        self, project_id: str, api_key: str, definition: dict[str, Any]
    ) -> None:
        """Write a full component definition, replacing any existing copy."""
        self.client_for(project_id, api_key).update_component_definition(
            definition
        )


def _decode(definition: Any, project_id: str) -> Component:
    if not isinstance(definition, dict):
        raise UpstreamError(
            f"Malformed component definition in project {project_id}"
        )
    try:
        return Component.from_definition(definition)
    except ValueError as e:
        raise UpstreamError(
            f"Malformed component definition in project {project_id}: {e}"
        ) from e
