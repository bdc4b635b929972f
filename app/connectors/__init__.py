"""
app/connectors package marker.
"""

from app.connectors.base import HTTPCollaborator, HTTPCollaboratorError
from app.connectors.publisher import HTTPPublisher, Publisher
from app.connectors.renderer import HTTPRenderer, Renderer

__all__ = [
    "HTTPCollaborator",
    "HTTPCollaboratorError",
    "HTTPPublisher",
    "HTTPRenderer",
    "Publisher",
    "Renderer",
]
