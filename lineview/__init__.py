"""Reactive line-item panel: query, invalidation, role-gated row actions."""

__version__ = "0.1.0"
