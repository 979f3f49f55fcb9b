"""
構造化エラーハンドリング

Spartan リクエストの各段階で発生するエラーを表す例外クラスを提供します。
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class SpartanError(Exception):
    """Spartan クライアントエラーの基底クラス"""

    message: str
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        """初期化後の処理"""
        if self.error_code is None:
            self.error_code = "SPARTAN_ERROR"

        if self.details is None:
            self.details = {}

        # Exception の message を設定
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式に変換"""
        result: Dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }

        if self.details:
            result["details"] = self.details

        return result


class ParseError(SpartanError):
    """URL として解析できない入力"""

    def __init__(
        self,
        message: str = "Cannot parse url",
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if url is not None:
            error_details["url"] = url

        super().__init__(message=message, error_code="PARSE_ERROR", details=error_details)


class InvalidSchemeError(SpartanError):
    """spartan 以外のスキーム"""

    def __init__(self, scheme: str, details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        error_details["scheme"] = scheme

        super().__init__(
            message=f"Not a spartan URL (scheme: {scheme})",
            error_code="INVALID_SCHEME",
            details=error_details,
        )


class MissingHostError(SpartanError):
    """ホスト名のない URL"""

    def __init__(self, message: str = "No hostname", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="MISSING_HOST", details=details)


class DecodeError(SpartanError):
    """クエリのパーセントエンコーディングが不正"""

    def __init__(
        self,
        message: str = "Invalid percent-encoding in query",
        position: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if position is not None:
            error_details["position"] = position

        super().__init__(message=message, error_code="DECODE_ERROR", details=error_details)


class ConnectError(SpartanError):
    """TCP 接続エラー"""

    def __init__(
        self,
        message: str = "Unable to connect",
        host: Optional[str] = None,
        port: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if host is not None:
            error_details["host"] = host
        if port is not None:
            error_details["port"] = port

        super().__init__(message=message, error_code="CONNECT_ERROR", details=error_details)


class WriteError(SpartanError):
    """ソケット書き込みエラー"""

    def __init__(
        self, message: str = "Error writing to socket", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, error_code="WRITE_ERROR", details=details)


class ReadError(SpartanError):
    """レスポンス読み取りエラー"""

    def __init__(
        self, message: str = "Unable to read response", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, error_code="READ_ERROR", details=details)
