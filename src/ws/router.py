"""Message router: parses inbound WebSocket frames and dispatches them."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from src.db.repository import VersionConflict
from src.utils.constants import ERR_VERSION_CONFLICT
from src.ws.notifications import send_error

if TYPE_CHECKING:
    from src.ws.deps import Deps

logger = logging.getLogger("potting.router")


def parse_message(body: str | bytes | dict | None) -> tuple[str, dict] | None:
    """Decode `{"type": ..., "payload": {...}}`. Returns None if malformed."""
    if isinstance(body, (str, bytes)):
        try:
            body = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
    if not isinstance(body, dict):
        return None

    command = body.get("type")
    payload = body.get("payload", {})
    if payload is None:
        payload = {}
    if not isinstance(command, str) or not isinstance(payload, dict):
        return None
    return command, payload


def route_message(connection_id: str, body, deps: Deps) -> None:
    """Route one inbound frame to its command handler."""
    from src.ws.commands import handle_command

    parsed = parse_message(body)
    if parsed is None:
        logger.warning("Dropped unparseable message from %s", connection_id)
        return

    command, payload = parsed
    logger.info(json.dumps({"event": "command", "type": command, "connection": connection_id}))
    try:
        handle_command(command, payload, connection_id, deps)
    except VersionConflict:
        logger.warning("Version conflict on %s from %s", command, connection_id)
        send_error(connection_id, ERR_VERSION_CONFLICT, deps)
