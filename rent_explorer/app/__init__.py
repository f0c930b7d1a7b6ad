"""Dash front end for the rent explorer."""

from .app import create_app

__all__ = ["create_app"]
