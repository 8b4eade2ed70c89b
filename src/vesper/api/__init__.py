"""Vesper HTTP API."""

from vesper.api.app import create_app

__all__ = ["create_app"]
