"""
Spartan クライアント

URL 文字列を受け取り、リクエストの組み立て・送信・レスポンスの読み取りまでを行います。

使用例:
    from spartan_client import get, try_get

    body = get("spartan://example.com/")

    result = try_get("spartan://example.com/?hello")
    if result.is_ok:
        print(result.value)
    else:
        print(result.error.to_dict())
"""

import logging
from typing import Optional

from .config import ClientConfig
from .exceptions import ConnectError, WriteError
from .request import Request
from .result import Result, capture
from .transport import send
from .url import ParsedURL, parse_url

logger = logging.getLogger(__name__)


class SpartanClient:
    """Spartan クライアント（設定以外の状態を持たないためスレッド間で共有可能）"""

    def __init__(self, config: Optional[ClientConfig] = None) -> None:
        self.config = config or ClientConfig()

        # ログ設定
        if self.config.enable_logging:
            logging.getLogger("spartan_client").setLevel(logging.DEBUG)

    def resolve_port(self, parsed_url: ParsedURL) -> int:
        """接続ポートを決定"""
        port = parsed_url.port
        if port is None:
            port = self.config.default_port_for(parsed_url.scheme)
        if port is None:
            raise ConnectError(
                f"No default port for scheme: {parsed_url.scheme}",
                host=parsed_url.host,
                details={"scheme": parsed_url.scheme},
            )
        return port

    def build_request(self, url: str) -> Request:
        """URL 文字列から Request を作成"""
        return Request.from_url(parse_url(url), strict=self.config.strict_decoding)

    def get(self, url: str) -> str:
        """
        URL にリクエストを送信してレスポンスを取得

        Args:
            url: spartan:// URL

        Returns:
            str: レスポンス全体

        Raises:
            SpartanError: いずれかの段階で失敗した場合
        """
        parsed_url = parse_url(url)
        request = Request.from_url(parsed_url, strict=self.config.strict_decoding)
        port = self.resolve_port(parsed_url)

        logger.debug(f"Sending request: {request.request_line!r}")

        try:
            payload = request.to_bytes(self.config.encoding)
        except UnicodeEncodeError as e:
            raise WriteError(
                f"Request cannot be encoded as {self.config.encoding}",
                details={"reason": str(e)},
            ) from e

        return send(
            payload,
            request.host,
            port,
            timeout=self.config.timeout,
            encoding=self.config.encoding,
        )

    def try_get(self, url: str) -> "Result[str]":
        """get の Result 版（SpartanError を送出しない）"""
        return capture(self.get, url)


_default_client = SpartanClient()


def get(url: str) -> str:
    """デフォルト設定で URL を取得"""
    return _default_client.get(url)


def try_get(url: str) -> "Result[str]":
    """デフォルト設定で URL を取得し、結果を Result で返す"""
    return _default_client.try_get(url)
