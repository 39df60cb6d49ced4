"""Database module."""

from db.cosmos_session import close_cosmos, get_container, get_cosmos_client

__all__ = ["get_cosmos_client", "get_container", "close_cosmos"]
