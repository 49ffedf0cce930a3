"""Shared resources for the API layer."""

from __future__ import annotations

from aurora_sentinel.services.connection_manager import ConnectionManager

# Singleton connection manager for dashboard WebSocket clients
ui_manager = ConnectionManager()
