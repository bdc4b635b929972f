"""
app/connectors/publisher.py

Keyed artifact publishing to the message bus.

The HTTP implementation speaks the REST-proxy record format: binary values
travel base64-encoded inside a JSON record batch posted to
``{base_url}/topics/{topic}``.
"""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from urllib.parse import quote

import requests

from app.config import PublisherSettings
from app.connectors.base import HTTPCollaborator, HTTPCollaboratorError
from app.errors import PublishFailureError

logger = logging.getLogger(__name__)

_CONTENT_TYPE = "application/vnd.kafka.binary.v2+json"


class Publisher(ABC):
    """
    Fire-and-forget keyed publish.
    """

    @abstractmethod
    def publish(self, topic: str, key: str, payload: bytes) -> None:
        """
        Send ``payload`` under ``key`` to ``topic``.

        Raises :class:`PublishFailureError` when the bus does not accept it.
        """


class HTTPPublisher(HTTPCollaborator, Publisher):
    """
    Publishes through a message bus REST proxy.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(name="publisher", timeout_seconds=timeout_seconds, session=session)
        self._base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: PublisherSettings) -> "HTTPPublisher":
        if not settings.base_url:
            raise RuntimeError("PUBLISHER_BASE_URL is not set.")
        return cls(base_url=settings.base_url, timeout_seconds=settings.timeout_seconds)

    @staticmethod
    def _encode(value: str | bytes) -> str:
        raw = value.encode("utf-8") if isinstance(value, str) else value
        return base64.b64encode(raw).decode("ascii")

    def publish(self, topic: str, key: str, payload: bytes) -> None:
        url = f"{self._base_url}/topics/{quote(topic, safe='')}"
        body = {"records": [{"key": self._encode(key), "value": self._encode(payload)}]}
        try:
            self._post(url, json=body, headers={"Content-Type": _CONTENT_TYPE})
        except HTTPCollaboratorError as exc:
            raise PublishFailureError(str(exc)) from exc
        logger.debug("Published topic=%s key=%s bytes=%d", topic, key, len(payload))
