"""
app/connectors/renderer.py

Client for the chart rendering service: definition JSON text in, image bytes out.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import requests

from app.config import RendererSettings
from app.connectors.base import HTTPCollaborator, HTTPCollaboratorError
from app.errors import RenderFailureError

logger = logging.getLogger(__name__)


class Renderer(ABC):
    """
    Converts a serialized report definition into a binary artifact.
    """

    @abstractmethod
    def render(self, definition_text: str) -> bytes:
        """
        Render ``definition_text`` and return the image bytes.

        Raises :class:`RenderFailureError` when no artifact can be produced.
        """


class HTTPRenderer(HTTPCollaborator, Renderer):
    """
    Posts the definition to a rendering endpoint and returns the response body.
    """

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(name="renderer", timeout_seconds=timeout_seconds, session=session)
        self._url = url

    @classmethod
    def from_settings(cls, settings: RendererSettings) -> "HTTPRenderer":
        if not settings.url:
            raise RuntimeError("RENDERER_URL is not set.")
        return cls(url=settings.url, timeout_seconds=settings.timeout_seconds)

    def render(self, definition_text: str) -> bytes:
        try:
            response = self._post(
                self._url,
                data=definition_text.encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
        except HTTPCollaboratorError as exc:
            raise RenderFailureError(str(exc)) from exc

        if not response.content:
            raise RenderFailureError("renderer: empty response body.")
        logger.debug("Rendered artifact bytes=%d", len(response.content))
        return response.content
