"""Observability for Cumulocity infrastructure."""

from cumulocity.infrastructure.observability.client_probe import (
    CumulocityClientProbe,
    DefaultCumulocityClientProbe,
)

__all__ = [
    "CumulocityClientProbe",
    "DefaultCumulocityClientProbe",
]
