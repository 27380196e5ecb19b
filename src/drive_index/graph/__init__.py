"""Microsoft Graph client: authentication, drive access and item models."""

from drive_index.graph.client import GraphClient, graph_client_from_config
from drive_index.graph.drive import Drive
from drive_index.graph.errors import (
    GraphApiError,
    GraphAuthError,
    GraphConfigError,
    GraphError,
    GraphTransportError,
    classify,
)
from drive_index.graph.models import Item
from drive_index.graph.token import Token

__all__ = [
    "Drive",
    "GraphApiError",
    "GraphAuthError",
    "GraphClient",
    "GraphConfigError",
    "GraphError",
    "GraphTransportError",
    "Item",
    "Token",
    "classify",
    "graph_client_from_config",
]
