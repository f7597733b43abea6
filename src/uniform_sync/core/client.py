import logging
import threading
from typing import Any

import requests

from ..config import Config
from ..errors import UpstreamError

logger = logging.getLogger(__name__)

PROJECT_PATH = "/api/v1/project"
DEFINITIONS_PATH = "/api/v1/canvas-definitions"

# (connect, read) timeouts; read comes from config
CONNECT_TIMEOUT = 10


class UniformClient:
    """HTTP client for one Uniform project.

    Each instance is bound to a single project id / API key pair. The key
    is sent verbatim in the ``x-api-key`` header on every request.
    """

    def __init__(self, config: Config, project_id: str, api_key: str):
        self.config = config
        self.project_id = project_id
        self._api_key = api_key
        self._thread_local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The current thread's session."""
        return self._get_session()

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(
            {
                "x-api-key": self._api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )
        return session

    def _url(self, path: str) -> str:
        return f"{self.config.api_url.rstrip('/')}{path}"

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a request to the Uniform API and return the decoded JSON body.

        Raises:
            UpstreamError: On transport failure, non-2xx status, or a body
                that is not JSON.
        """
        url = self._url(path)
        logger.debug("%s %s project=%s", method, path, self.project_id)
        try:
            response = self._get_session().request(
                method,
                url,
                params=params,
                json=payload,
                timeout=(CONNECT_TIMEOUT, self.config.request_timeout),
            )
        except requests.RequestException as e:
            raise UpstreamError(
                f"Uniform API request {method} {path} failed: {e}"
            ) from e

        if not response.ok:
            raise UpstreamError(
                f"Uniform API returned {response.status_code} "
                f"{response.reason or ''} for {method} {path}: "
                f"{_error_detail(response)}".strip(),
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Uniform API returned a non-JSON body for {method} {path}",
                status_code=response.status_code,
            ) from e

    def get_project(self) -> dict[str, Any]:
        """
        Fetch project metadata (name, teamId, teamName, ...).
        """
        data = self._request(
            "GET", PROJECT_PATH, params={"projectId": self.project_id}
        )
        if not isinstance(data, dict):
            raise UpstreamError("Unexpected project metadata response")
        return data

    def get_component_definitions(
        self,
        component_id: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        List component definitions, or fetch a single one by id.

        Args:
            component_id: Restrict the result to this component.
            limit: Page size; large enough values return every component.

        Returns:
            The ``componentDefinitions`` list. Empty when a requested
            component does not exist.
        """
        params: dict[str, Any] = {"projectId": self.project_id}
        if component_id is not None:
            params["componentId"] = component_id
        if limit is not None:
            params["limit"] = limit

        try:
            data = self._request("GET", DEFINITIONS_PATH, params=params)
        except UpstreamError as e:
            if component_id is not None and e.status_code == 404:
                return []
            raise

        if data is None:
            return []
        if not isinstance(data, dict) or not isinstance(
            data.get("componentDefinitions", []), list
        ):
            raise UpstreamError("Unexpected component definitions response")
        return data.get("componentDefinitions", [])

    def update_component_definition(
        self, definition: dict[str, Any]
    ) -> None:
        """
        Create or replace a component definition in this project.
        """
        self._request(
            "PUT",
            DEFINITIONS_PATH,
            payload={
                "projectId": self.project_id,
                "componentDefinition": definition,
            },
        )


def _error_detail(response: requests.Response) -> str:
    """Best-effort extraction of the vendor's error message."""
    try:
        body = response.json()
    except ValueError:
        return (response.text or "")[:200]
    if isinstance(body, dict):
        for key in ("errorMessage", "message", "error"):
            if body.get(key):
                return str(body[key])
    return str(body)[:200]
