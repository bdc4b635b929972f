"""
app/connectors/base.py

Shared HTTP mechanics for the renderer and publisher clients.

Report jobs never retry a failed phase, so requests are attempted once;
the next scheduled trigger is the retry.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)


class HTTPCollaboratorError(RuntimeError):
    """
    Raised when an outbound collaborator request fails.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HTTPCollaborator:
    """
    Thin ``requests`` wrapper with a fixed timeout and uniform error mapping.
    """

    name: str

    def __init__(
        self,
        *,
        name: str,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        self.name = name
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    def _post(
        self,
        url: str,
        *,
        data: str | bytes | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """
        POST once and return the response, raising on transport errors and
        non-2xx statuses.
        """

        try:
            response = self._session.post(
                url,
                data=data,
                json=json,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            # Any transport failure, including a malformed URL or a broken stream.
            logger.error("%s request failed url=%s error=%s", self.name, url, exc)
            raise HTTPCollaboratorError(f"{self.name}: request to {url} failed.") from exc

        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            logger.error(
                "%s request rejected status=%s url=%s",
                self.name,
                response.status_code,
                url,
            )
            raise HTTPCollaboratorError(
                f"{self.name}: {url} answered {response.status_code}.",
                status_code=response.status_code,
            ) from exc
        return response
