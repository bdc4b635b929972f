"""
tests/test_connectors.py

HTTP renderer and publisher clients against a mocked requests session.
"""

from __future__ import annotations

import base64
from unittest.mock import Mock

import pytest
import requests

from app.config import PublisherSettings, RendererSettings
from app.connectors.publisher import HTTPPublisher
from app.connectors.renderer import HTTPRenderer
from app.errors import PublishFailureError, RenderFailureError


def _response(status_code: int = 200, content: bytes = b"") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.url = "http://collaborator.test"
    return response


@pytest.fixture
def session() -> Mock:
    return Mock(spec=requests.Session)


class TestHTTPRenderer:
    def test_posts_definition_and_returns_body(self, session: Mock) -> None:
        session.post.return_value = _response(content=b"\x89PNG")
        renderer = HTTPRenderer(url="http://renderer.test/chart", timeout_seconds=5, session=session)

        image = renderer.render('{"kind": "bar"}')

        assert image == b"\x89PNG"
        args, kwargs = session.post.call_args
        assert args == ("http://renderer.test/chart",)
        assert kwargs["data"] == b'{"kind": "bar"}'
        assert kwargs["headers"] == {"Content-Type": "application/json"}
        assert kwargs["timeout"] == 5

    def test_error_status_is_render_failure(self, session: Mock) -> None:
        session.post.return_value = _response(status_code=500, content=b"oops")
        renderer = HTTPRenderer(url="http://renderer.test/chart", session=session)

        with pytest.raises(RenderFailureError, match="500"):
            renderer.render("{}")

    def test_unreachable_is_render_failure(self, session: Mock) -> None:
        session.post.side_effect = requests.ConnectionError("refused")
        renderer = HTTPRenderer(url="http://renderer.test/chart", session=session)

        with pytest.raises(RenderFailureError):
            renderer.render("{}")
        assert session.post.call_count == 1

    def test_empty_body_is_render_failure(self, session: Mock) -> None:
        session.post.return_value = _response(content=b"")
        renderer = HTTPRenderer(url="http://renderer.test/chart", session=session)

        with pytest.raises(RenderFailureError, match="empty"):
            renderer.render("{}")

    def test_from_settings_requires_url(self) -> None:
        with pytest.raises(RuntimeError, match="RENDERER_URL"):
            HTTPRenderer.from_settings(RendererSettings())


class TestHTTPPublisher:
    def test_posts_base64_record_batch(self, session: Mock) -> None:
        session.post.return_value = _response()
        publisher = HTTPPublisher(base_url="http://bus.test/", session=session)

        publisher.publish("visualizations", "Tamil Nadu-statewisetotal", b"\x89PNG")

        args, kwargs = session.post.call_args
        assert args == ("http://bus.test/topics/visualizations",)
        (record,) = kwargs["json"]["records"]
        assert base64.b64decode(record["key"]) == b"Tamil Nadu-statewisetotal"
        assert base64.b64decode(record["value"]) == b"\x89PNG"
        assert kwargs["headers"]["Content-Type"] == "application/vnd.kafka.binary.v2+json"

    def test_topic_is_quoted(self, session: Mock) -> None:
        session.post.return_value = _response()
        publisher = HTTPPublisher(base_url="http://bus.test", session=session)

        publisher.publish("charts/daily", "today", b"x")

        assert session.post.call_args.args == ("http://bus.test/topics/charts%2Fdaily",)

    def test_rejection_is_publish_failure(self, session: Mock) -> None:
        session.post.return_value = _response(status_code=503)
        publisher = HTTPPublisher(base_url="http://bus.test", session=session)

        with pytest.raises(PublishFailureError, match="503"):
            publisher.publish("visualizations", "today", b"x")

    def test_timeout_is_publish_failure(self, session: Mock) -> None:
        session.post.side_effect = requests.Timeout("slow")
        publisher = HTTPPublisher(base_url="http://bus.test", session=session)

        with pytest.raises(PublishFailureError):
            publisher.publish("visualizations", "today", b"x")

    def test_from_settings(self) -> None:
        publisher = HTTPPublisher.from_settings(PublisherSettings(base_url="http://bus.test", timeout_seconds=3))
        assert publisher.name == "publisher"

        with pytest.raises(RuntimeError, match="PUBLISHER_BASE_URL"):
            HTTPPublisher.from_settings(PublisherSettings())


class TestTransportErrors:
    @pytest.mark.parametrize(
        "error",
        [
            requests.exceptions.ChunkedEncodingError("connection broken"),
            requests.exceptions.MissingSchema("no scheme"),
            requests.exceptions.InvalidURL("bad url"),
            requests.exceptions.TooManyRedirects("loop"),
        ],
    )
    def test_renderer_maps_every_request_error(self, session: Mock, error: requests.RequestException) -> None:
        session.post.side_effect = error
        renderer = HTTPRenderer(url="renderer.test/chart", session=session)

        with pytest.raises(RenderFailureError):
            renderer.render("{}")

    @pytest.mark.parametrize(
        "error",
        [
            requests.exceptions.ChunkedEncodingError("connection broken"),
            requests.exceptions.ContentDecodingError("bad gzip"),
            requests.exceptions.InvalidURL("bad url"),
        ],
    )
    def test_publisher_maps_every_request_error(self, session: Mock, error: requests.RequestException) -> None:
        session.post.side_effect = error
        publisher = HTTPPublisher(base_url="http://bus.test", session=session)

        with pytest.raises(PublishFailureError):
            publisher.publish("visualizations", "today", b"x")
