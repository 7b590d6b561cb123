"""API Gateway WebSocket client: pushes JSON messages to connections."""

from __future__ import annotations

import json
import logging
import os

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger("potting.apigateway")


class ConnectionClient:
    """Synchronous wrapper around the API Gateway management API."""

    def __init__(
        self,
        endpoint_url: str | None = None,
        client=None,
    ) -> None:
        self._endpoint = endpoint_url or os.environ.get("WEBSOCKET_ENDPOINT_URL", "")
        self._client = client or boto3.client(
            "apigatewaymanagementapi", endpoint_url=self._endpoint
        )

    def send(self, connection_id: str, message: dict) -> bool:
        """Post one message. Returns False if the connection is gone or errored."""
        try:
            self._client.post_to_connection(
                ConnectionId=connection_id,
                Data=json.dumps(message).encode("utf-8"),
            )
        except ClientError as e:
            code = e.response["Error"]["Code"]
            if code == "GoneException":
                logger.info("Connection %s is gone", connection_id)
            else:
                logger.error("API Gateway error on %s: %s", connection_id, code)
            return False
        return True
