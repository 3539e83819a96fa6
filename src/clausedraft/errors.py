"""Exceptions raised by the drafting layer.

The renderer itself never raises; these cover the collaborators around it.
"""
from __future__ import annotations


class DraftingError(Exception):
    """Base class for drafting failures."""


class GenerationError(DraftingError):
    """The upstream text generator failed or returned an unusable envelope."""


class ResponseParseError(DraftingError):
    """A model response that should be JSON could not be parsed."""


class MissingFieldsError(DraftingError):
    """A request lacks required inputs."""


class TemplateNotFoundError(DraftingError):
    """No contract template with the requested id."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id
