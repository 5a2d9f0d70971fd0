"""Streaming server settings: typed record, JSON persistence and web API."""

__all__ = [
    "config",
    "webapi",
]
