"""Browse a Microsoft Graph drive through its REST API."""

__version__ = "0.1.0"
