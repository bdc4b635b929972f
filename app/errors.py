"""
Report pipeline exceptions.

A missing record is not an error: store lookups return ``None`` and the
assembler marks the point absent.
"""

from __future__ import annotations


class ReportPipelineError(Exception):
    """Base exception for report job failures."""


class StoreUnavailableError(ReportPipelineError):
    """Raised when the record store cannot answer a lookup or scan."""


class RenderFailureError(ReportPipelineError):
    """Raised when the renderer rejects a definition or cannot be reached."""


class PublishFailureError(ReportPipelineError):
    """Raised when an artifact cannot be handed to the message bus."""


class UnknownReportJobError(ReportPipelineError):
    """Raised when an on-demand run names a job that is not in the catalogue."""
