"""
トランスポートのテスト

ローカルの TCP サーバーとソケットのモックで送受信をテストします。
"""

import logging
import socket
import threading
from unittest.mock import patch, MagicMock

import pytest

from spartan_client import send, ConnectError, WriteError, ReadError
from spartan_client.transport import connect_address


class OneShotServer:
    """1 回だけリクエストを受け付けて固定のレスポンスを返すテスト用サーバー"""

    def __init__(self, response: bytes, expected_size: int) -> None:
        self.response = response
        self.expected_size = expected_size
        self.received = b""
        self.server = socket.create_server(("127.0.0.1", 0))
        self.port = self.server.getsockname()[1]
        self.thread = threading.Thread(target=self._serve, daemon=True)

    def __enter__(self) -> "OneShotServer":
        self.thread.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.thread.join(timeout=5)
        self.server.close()

    def _serve(self) -> None:
        connection, _ = self.server.accept()
        with connection:
            while len(self.received) < self.expected_size:
                chunk = connection.recv(1024)
                if not chunk:
                    break
                self.received += chunk
            connection.sendall(self.response)


class TestSendOverLoopback:
    """実際のソケットでの送受信テスト"""

    def test_round_trip(self):
        payload = b"127.0.0.1 / 5\r\nhello"
        response = "2 text/gemini\r\n# héllo\n".encode("utf-8")

        with OneShotServer(response, len(payload)) as server:
            result = send(payload, "127.0.0.1", server.port, timeout=5)

        assert server.received == payload
        assert result == "2 text/gemini\r\n# héllo\n"

    def test_large_response(self):
        """バッファサイズを超えるレスポンスも全て読み取る"""
        payload = b"127.0.0.1 / 0\r\n"
        response = b"2 text/plain\r\n" + b"x" * 20000

        with OneShotServer(response, len(payload)) as server:
            result = send(payload, "127.0.0.1", server.port, timeout=5)

        assert len(result) == len(response)

    def test_str_payload(self):
        payload = "127.0.0.1 / 1\r\né"

        with OneShotServer(b"2 ok\r\n", len(payload.encode("utf-8"))) as server:
            send(payload, "127.0.0.1", server.port, timeout=5)

        assert server.received == payload.encode("utf-8")


class TestSendErrors:
    """送受信エラーのテスト"""

    def create_connection_mock(self):
        connection = MagicMock()
        connection.recv.side_effect = [b"2 ok\r\n", b""]
        return connection

    def test_connect_error(self):
        with patch(
            "spartan_client.transport.socket.create_connection",
            side_effect=ConnectionRefusedError("refused"),
        ):
            with pytest.raises(ConnectError) as exc_info:
                send(b"example.com / 0\r\n", "example.com", 300)

        assert exc_info.value.details == {"host": "example.com", "port": 300}
        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)

    def test_write_error(self):
        connection = self.create_connection_mock()
        connection.sendall.side_effect = BrokenPipeError("broken")

        with patch(
            "spartan_client.transport.socket.create_connection", return_value=connection
        ):
            with pytest.raises(WriteError):
                send(b"example.com / 0\r\n", "example.com", 300)

        # 失敗時もソケットは閉じられる
        connection.__exit__.assert_called_once()
        connection.recv.assert_not_called()

    def test_read_error(self):
        connection = self.create_connection_mock()
        connection.recv.side_effect = ConnectionResetError("reset")

        with patch(
            "spartan_client.transport.socket.create_connection", return_value=connection
        ):
            with pytest.raises(ReadError):
                send(b"example.com / 0\r\n", "example.com", 300)

        connection.__exit__.assert_called_once()

    def test_undecodable_response(self):
        connection = self.create_connection_mock()
        connection.recv.side_effect = [b"\xff\xfe", b""]

        with patch(
            "spartan_client.transport.socket.create_connection", return_value=connection
        ):
            with pytest.raises(ReadError) as exc_info:
                send(b"example.com / 0\r\n", "example.com", 300)

        assert exc_info.value.error_code == "READ_ERROR"

    def test_connect_arguments(self):
        connection = self.create_connection_mock()

        with patch(
            "spartan_client.transport.socket.create_connection", return_value=connection
        ) as create_connection:
            result = send("::1 / 0\r\n", "[::1]", 3000, timeout=2.5)

        create_connection.assert_called_once_with(("::1", 3000), timeout=2.5)
        connection.sendall.assert_called_once_with(b"::1 / 0\r\n")
        assert result == "2 ok\r\n"

    def test_errors_are_logged(self, caplog):
        with patch(
            "spartan_client.transport.socket.create_connection",
            side_effect=OSError("unreachable"),
        ):
            with caplog.at_level(logging.ERROR, logger="spartan_client.transport"):
                with pytest.raises(ConnectError):
                    send(b"example.com / 0\r\n", "example.com", 300)

        assert "example.com:300" in caplog.text


class TestConnectAddress:
    """接続アドレスのテスト"""

    def test_ipv6_brackets_removed(self):
        assert connect_address("[::1]") == "::1"

    def test_hostname_unchanged(self):
        assert connect_address("example.com") == "example.com"
