"""
Request クラス

Spartan URL からリクエストを組み立て、ワイヤ形式にシリアライズします。

ワイヤ形式:
    <host> <path> <content_length>\\r\\n<data>
"""

from typing import Optional
from dataclasses import dataclass

from .config import SPARTAN_SCHEME
from .exceptions import InvalidSchemeError, MissingHostError
from .url import ParsedURL, parse_url, decode_query


@dataclass(frozen=True)
class Request:
    """Spartan リクエスト"""

    host: str
    path: str
    content_length: int = 0
    data: Optional[str] = None

    def __post_init__(self) -> None:
        """初期化後の検証"""
        if self.data is None and self.content_length != 0:
            raise ValueError("content_length must be 0 when there is no data")
        if self.data is not None and self.content_length != len(self.data):
            raise ValueError(
                f"content_length {self.content_length} does not match "
                f"data length {len(self.data)}"
            )

    @classmethod
    def from_url(cls, parsed_url: ParsedURL, strict: bool = True) -> "Request":
        """
        解析済み URL から Request を作成

        Args:
            parsed_url: parse_url の結果
            strict: クエリのデコードを厳密に行うか

        Returns:
            Request: 作成されたリクエスト

        Raises:
            InvalidSchemeError: スキームが spartan でない場合
            MissingHostError: ホストがない場合
            DecodeError: クエリのパーセントエンコーディングが不正な場合
        """
        if parsed_url.scheme != SPARTAN_SCHEME:
            raise InvalidSchemeError(parsed_url.scheme)

        if not parsed_url.host:
            raise MissingHostError()

        data: Optional[str] = None
        content_length = 0
        if parsed_url.query:
            data = decode_query(parsed_url.query, strict=strict)
            # バイト数ではなく文字数
            content_length = len(data)

        return cls(
            host=parsed_url.host,
            path=parsed_url.path or "/",
            content_length=content_length,
            data=data,
        )

    @classmethod
    def from_string(cls, url: str, strict: bool = True) -> "Request":
        """URL 文字列から Request を作成"""
        return cls.from_url(parse_url(url), strict=strict)

    @property
    def request_line(self) -> str:
        """リクエスト行（CRLF を含む）"""
        return f"{self.host} {self.path} {self.content_length}\r\n"

    def to_string(self) -> str:
        """ワイヤ形式の文字列に変換"""
        return self.request_line + (self.data or "")

    def to_bytes(self, encoding: str = "utf-8") -> bytes:
        """ワイヤ形式のバイト列に変換"""
        return self.to_string().encode(encoding)

    def __str__(self) -> str:
        return self.to_string()

