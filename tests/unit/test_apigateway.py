"""Tests for the API Gateway connection client and the mock client."""

import json

from botocore.exceptions import ClientError

from src.utils.apigateway import ConnectionClient

from tests.conftest import MockConnectionClient


class FakeManagementApi:
    """Stands in for the boto3 apigatewaymanagementapi client."""

    def __init__(self, error_code: str | None = None) -> None:
        self.posts: list[tuple[str, bytes]] = []
        self.error_code = error_code

    def post_to_connection(self, ConnectionId: str, Data: bytes) -> dict:
        if self.error_code:
            raise ClientError(
                {"Error": {"Code": self.error_code, "Message": "boom"}},
                "PostToConnection",
            )
        self.posts.append((ConnectionId, Data))
        return {}


class TestConnectionClient:
    def test_posts_json(self):
        api = FakeManagementApi()
        client = ConnectionClient(endpoint_url="https://example.test", client=api)
        assert client.send("conn-1", {"type": "GAME_UPDATE", "payload": {"a": 1}})
        connection_id, data = api.posts[0]
        assert connection_id == "conn-1"
        assert json.loads(data.decode("utf-8")) == {"type": "GAME_UPDATE", "payload": {"a": 1}}

    def test_gone_connection(self, caplog):
        client = ConnectionClient(endpoint_url="https://example.test", client=FakeManagementApi("GoneException"))
        with caplog.at_level("INFO", logger="potting.apigateway"):
            assert client.send("conn-1", {"type": "X"}) is False
        assert "is gone" in caplog.text

    def test_other_error(self, caplog):
        client = ConnectionClient(endpoint_url="https://example.test", client=FakeManagementApi("LimitExceededException"))
        with caplog.at_level("ERROR", logger="potting.apigateway"):
            assert client.send("conn-1", {"type": "X"}) is False
        assert "LimitExceededException" in caplog.text


class TestMockClient:
    def test_records_calls(self):
        mock = MockConnectionClient()
        mock.send("c1", {"type": "A"})
        mock.send("c2", {"type": "B"})
        mock.send("c1", {"type": "C"})
        assert mock.types_for("c1") == ["A", "C"]
        assert mock.last_message("c2") == {"type": "B"}
        assert mock.last_message("c3") is None

    def test_gone(self):
        mock = MockConnectionClient()
        mock.gone.add("c1")
        assert mock.send("c1", {"type": "A"}) is False
        assert mock.calls == []
