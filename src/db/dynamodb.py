"""DynamoDB repository implementations for production."""

from __future__ import annotations

import os

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from src.db.repository import VersionConflict
from src.game.models import Room

# Initialize DynamoDB resource at module level for Lambda warm starts
_dynamodb = None
_prefix = os.environ.get("DYNAMODB_TABLE_PREFIX", "Potting")


def _get_dynamodb():
    global _dynamodb
    if _dynamodb is None:
        _dynamodb = boto3.resource("dynamodb")
    return _dynamodb


class DynamoDBRoomRepository:
    def __init__(self, table_name: str | None = None) -> None:
        self._table_name = table_name or f"{_prefix}_Rooms"
        self._table = _get_dynamodb().Table(self._table_name)

    def get_room(self, room_id: str) -> Room | None:
        response = self._table.get_item(
            Key={"roomId": room_id},
            ConsistentRead=True,
        )
        item = response.get("Item")
        if not item:
            return None
        return Room.from_dict(item)

    def save_room(self, room: Room) -> None:
        item = room.to_dict()
        item["version"] = room.version + 1
        try:
            self._table.put_item(
                Item=item,
                ConditionExpression=(
                    "attribute_not_exists(roomId) OR version = :v"
                ),
                ExpressionAttributeValues={":v": room.version},
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise VersionConflict("Version conflict") from e
            raise

    def delete_room(self, room_id: str) -> None:
        self._table.delete_item(Key={"roomId": room_id})

    def get_room_by_code(self, code: str) -> Room | None:
        # Scan is acceptable for the handful of live rooms
        response = self._table.scan(FilterExpression=Attr("roomCode").eq(code))
        items = response.get("Items", [])
        return Room.from_dict(items[0]) if items else None


class DynamoDBConnectionRepository:
    def __init__(self, table_name: str | None = None) -> None:
        self._table_name = table_name or f"{_prefix}_Connections"
        self._table = _get_dynamodb().Table(self._table_name)

    def get_connection(self, connection_id: str) -> dict | None:
        response = self._table.get_item(Key={"connectionId": connection_id})
        return response.get("Item")

    def save_connection(self, connection: dict) -> None:
        self._table.put_item(Item=connection)

    def delete_connection(self, connection_id: str) -> None:
        self._table.delete_item(Key={"connectionId": connection_id})
