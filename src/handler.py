"""AWS Lambda entry point for the Potting WebSocket API.

This is a thin adapter that routes API Gateway WebSocket events
($connect, $disconnect, $default) to the transport handlers. All
business logic lives in src/game/ and src/lobby/.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

logger = logging.getLogger("potting.handler")
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

# Module-level deps for Lambda warm starts
_deps = None


def _init_deps(overrides: dict | None = None):
    """Initialize dependencies (lazily, once per Lambda container)."""
    global _deps

    if overrides:
        from src.ws.deps import Deps

        _deps = Deps(**overrides)
        return _deps

    from src.db.dynamodb import DynamoDBConnectionRepository, DynamoDBRoomRepository
    from src.game.engine import GameEngine
    from src.lobby.locks import RoomLocks
    from src.lobby.manager import LobbyManager
    from src.utils.apigateway import ConnectionClient
    from src.ws.deps import Deps

    room_repo = DynamoDBRoomRepository()
    connection_repo = DynamoDBConnectionRepository()
    locks = RoomLocks()
    engine = GameEngine(room_repo, locks=locks)
    lobby_manager = LobbyManager(room_repo, locks)
    client = ConnectionClient()

    _deps = Deps(
        engine=engine,
        lobby_manager=lobby_manager,
        room_repo=room_repo,
        connection_repo=connection_repo,
        client=client,
    )
    return _deps


def lambda_handler(event: dict, context: Any = None) -> dict:
    """Handle one API Gateway WebSocket event."""
    global _deps

    request = event.get("requestContext", {})
    route_key = request.get("routeKey", "$default")
    connection_id = request.get("connectionId")
    if not connection_id:
        logger.warning("Event without a connection id")
        return {"statusCode": 400, "body": "Missing connection"}

    logger.info(
        json.dumps({"event": "ws_event", "route": route_key, "connection": connection_id})
    )

    if route_key == "$connect":
        return {"statusCode": 200, "body": "Connected"}

    try:
        if _deps is None:
            _init_deps()

        from src.ws.commands import handle_disconnect
        from src.ws.router import route_message

        assert _deps is not None
        if route_key == "$disconnect":
            handle_disconnect(connection_id, _deps)
        else:
            route_message(connection_id, event.get("body"), _deps)
    except Exception:
        logger.exception("Error processing %s event", route_key)

    # Rejections travel over the socket; the integration response is always 200
    return {"statusCode": 200, "body": json.dumps({"ok": True})}
