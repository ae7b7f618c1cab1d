"""Command-line interface for fixed-hdr."""

from .main import app, main

__all__ = ['app', 'main']
