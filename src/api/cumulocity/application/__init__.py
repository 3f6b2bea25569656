"""Cumulocity application layer: client resolution and response formatting."""

from cumulocity.application.client_resolver import ClientResolver

__all__ = ["ClientResolver"]
