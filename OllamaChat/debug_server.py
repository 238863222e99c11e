"""
Debug WebSocket Server

Broadcasts chat turn events (user input, backend calls, resets) to
connected viewers while DEBUG_MODE is on.
"""

import asyncio
import json
import logging
from typing import Optional, Set

import websockets

from . import config

logger = logging.getLogger(__name__)


class DebugServer:
    """
    WebSocket server for real-time debugging events.

    Singleton: only one server instance exists per process.
    """

    _instance: Optional["DebugServer"] = None

    def __new__(cls) -> "DebugServer":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._clients = set()
            cls._instance._server = None
        return cls._instance

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def _register_client(self, websocket) -> None:
        self._clients.add(websocket)
        logger.info(f"Debug viewer connected. Total clients: {self.client_count}")
        try:
            await websocket.wait_closed()
        finally:
            self._clients.discard(websocket)
            logger.info(f"Debug viewer disconnected. Total clients: {self.client_count}")

    async def start(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """Start the WebSocket server if debug mode is enabled."""
        if not config.debug.enabled:
            return
        host = host or config.debug.websocket_host
        port = port or config.debug.websocket_port

        logger.info(f"Starting Debug WebSocket Server on ws://{host}:{port}")
        self._server = await websockets.serve(self._register_client, host, port)

    async def stop(self) -> None:
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            logger.info("Debug WebSocket Server stopped.")

    def broadcast(self, event_type: str, data: dict) -> None:
        """
        Send an event to all connected clients.

        Args:
            event_type: e.g. 'user_input', 'turn_start', 'turn_end'
            data: JSON-serializable event payload
        """
        clients: Set = self._clients
        if not clients:
            return

        message = json.dumps({
            "type": event_type,
            "data": data,
            "timestamp": asyncio.get_running_loop().time(),
        }, ensure_ascii=False, default=str)

        websockets.broadcast(clients, message)


# ==============================================================================
# Global Helpers
# ==============================================================================

_server = DebugServer()


def get_server() -> DebugServer:
    """Get the singleton debug server instance."""
    return _server


def broadcast_event(event_type: str, data: dict) -> None:
    """
    Broadcast an event. Does nothing outside a running event loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return  # No running event loop
    _server.broadcast(event_type, data)
