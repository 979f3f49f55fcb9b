"""
トランスポート

シリアライズ済みのリクエストを TCP で送信し、接続が閉じられるまでレスポンスを読み取ります。
リトライ・タイムアウト（指定時以外）・部分読み取りからの回復は行いません。
"""

import logging
import socket
from typing import Optional, Union

from .exceptions import ConnectError, WriteError, ReadError

RECV_BUFFER_SIZE = 4096

logger = logging.getLogger(__name__)


def connect_address(host: str) -> str:
    """接続用のホスト名（IPv6 リテラルの角括弧を除去）"""
    if host.startswith("[") and host.endswith("]"):
        return host[1:-1]
    return host


def send(
    payload: Union[str, bytes],
    host: str,
    port: int,
    timeout: Optional[float] = None,
    encoding: str = "utf-8",
) -> str:
    """
    リクエストを送信してレスポンス全体を返す

    Args:
        payload: シリアライズ済みのリクエスト
        host: 接続先ホスト（IPv6 は角括弧付きでも可）
        port: 接続先ポート
        timeout: ソケットタイムアウト（秒）。None の場合は無制限にブロック
        encoding: リクエスト・レスポンスのテキストエンコーディング

    Returns:
        str: デコード済みのレスポンス

    Raises:
        ConnectError: 接続できない場合
        WriteError: 書き込みに失敗した場合
        ReadError: 読み取りまたはデコードに失敗した場合
    """
    if isinstance(payload, str):
        payload = payload.encode(encoding)

    address = (connect_address(host), port)
    logger.debug(f"Connecting to {host}:{port}")

    try:
        connection = socket.create_connection(address, timeout=timeout)
    except OSError as e:
        logger.error(f"Connection to {host}:{port} failed: {e}")
        raise ConnectError(f"Unable to connect to {host}:{port}: {e}", host=host, port=port) from e

    with connection:
        try:
            connection.sendall(payload)
        except OSError as e:
            logger.error(f"Write to {host}:{port} failed: {e}")
            raise WriteError(f"Error writing to socket: {e}") from e

        logger.debug(f"Sent {len(payload)} bytes to {host}:{port}")

        response = receive_all(connection)

    logger.debug(f"Received {len(response)} bytes from {host}:{port}")

    try:
        return response.decode(encoding)
    except UnicodeDecodeError as e:
        logger.error(f"Response from {host}:{port} is not valid {encoding}: {e}")
        raise ReadError(
            f"Unable to decode response as {encoding}", details={"reason": str(e)}
        ) from e


def receive_all(connection: socket.socket) -> bytes:
    """相手が接続を閉じるまで読み取る"""
    chunks = []
    while True:
        try:
            received = connection.recv(RECV_BUFFER_SIZE)
        except OSError as e:
            logger.error(f"Read failed: {e}")
            raise ReadError(f"Unable to read response: {e}") from e

        if not received:
            break
        chunks.append(received)

    return b"".join(chunks)
