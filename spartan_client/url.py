"""
URL 解析

Spartan URL をスキーム・ホスト・ポート・パス・クエリに分解し、正規化します。

正規化の内容:
    - ホスト名はパーセントデコード・小文字化し、非 ASCII ラベルは IDNA (xn--) に変換
    - IPv4 は省略形・16 進・8 進表記をドット区切り 10 進に揃える
    - IPv6 リテラルは短縮形に揃えて角括弧で囲む
    - パスの "." / ".." セグメントを除去し、UTF-8 でパーセントエンコード
    - クエリは未デコードのまま保持（デコードは decode_query で行う）
"""

import ipaddress
import re
from typing import List, Optional
from dataclasses import dataclass
from urllib.parse import urlsplit, quote, unquote_to_bytes

from .exceptions import ParseError, DecodeError

# パーセントエンコードしない記号（英数字と "_.-~" は quote が常に残す）
_PATH_SAFE = "!$%&'()*+,-./:;=@[\\]^_|~"

_FORBIDDEN_HOST_CHARS = re.compile(r"[\x00-\x20#%/:<>?@\[\\\]^|\x7f]")

_INVALID_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_IPV4_NUMBER = re.compile(r"[0-9]+|0[xX][0-9A-Fa-f]*")
_DEC_DIGITS = re.compile(r"[0-9]+")
_OCT_DIGITS = re.compile(r"[0-7]*")
_HEX_DIGITS = re.compile(r"[0-9A-Fa-f]*")

_SINGLE_DOT = (".", "%2e")
_DOUBLE_DOT = ("..", ".%2e", "%2e.", "%2e%2e")


@dataclass(frozen=True)
class ParsedURL:
    """分解・正規化済みの URL"""

    scheme: str
    host: Optional[str]
    port: Optional[int]
    path: str
    query: Optional[str] = None
    fragment: Optional[str] = None


def parse_url(raw: str) -> ParsedURL:
    """
    URL 文字列を解析

    Args:
        raw: 解析する URL 文字列

    Returns:
        ParsedURL: 正規化済みの URL

    Raises:
        ParseError: 絶対 URL として解析できない場合
    """
    if not isinstance(raw, str):
        raise ParseError(
            f"URL must be a string, got {type(raw).__name__}",
            details={"type": type(raw).__name__},
        )

    try:
        parts = urlsplit(raw.strip())
        port = parts.port
    except ValueError as e:
        raise ParseError(f"Cannot parse url: {e}", url=raw) from e

    if not parts.scheme:
        raise ParseError("Relative URL without a scheme", url=raw)

    host = _normalize_host(parts.netloc, parts.hostname, raw)

    try:
        path = normalize_path(parts.path)
    except UnicodeError as e:
        raise ParseError(f"Cannot encode path: {e}", url=raw) from e

    return ParsedURL(
        scheme=parts.scheme,
        host=host,
        port=port,
        path=path,
        query=parts.query or None,
        fragment=parts.fragment or None,
    )


def _normalize_host(netloc: str, hostname: Optional[str], raw: str) -> Optional[str]:
    if not hostname:
        return None

    # userinfo を除いた部分が角括弧で始まれば IPv6 リテラル
    if netloc.rpartition("@")[2].startswith("["):
        try:
            address = ipaddress.IPv6Address(hostname)
        except ValueError as e:
            raise ParseError(f"Invalid IPv6 address: {hostname}", url=raw) from e
        return f"[{address.compressed}]"

    try:
        decoded = unquote_to_bytes(hostname).decode("utf-8")
        host = encode_hostname(decoded)
    except UnicodeError as e:
        raise ParseError(f"Invalid hostname: {hostname}", url=raw) from e

    if _FORBIDDEN_HOST_CHARS.search(host):
        raise ParseError(f"Forbidden character in hostname: {hostname}", url=raw)

    if _ends_in_number(host):
        try:
            return str(ipaddress.IPv4Address(parse_ipv4(host)))
        except ValueError as e:
            raise ParseError(f"Invalid IPv4 address: {hostname}", url=raw) from e

    return host


def _ends_in_number(host: str) -> bool:
    labels = host.split(".")
    if labels[-1] == "" and len(labels) > 1:
        labels.pop()
    return bool(_IPV4_NUMBER.fullmatch(labels[-1]))


def _parse_ipv4_part(part: str) -> int:
    if part[:2].lower() == "0x":
        digits, pattern, base = part[2:], _HEX_DIGITS, 16
    elif len(part) > 1 and part.startswith("0"):
        digits, pattern, base = part[1:], _OCT_DIGITS, 8
    else:
        digits, pattern, base = part, _DEC_DIGITS, 10

    if not pattern.fullmatch(digits):
        raise ValueError(f"Invalid IPv4 number: {part}")
    return int(digits, base) if digits else 0


def parse_ipv4(host: str) -> int:
    """
    IPv4 ホストを数値に変換

    "127.1", "0x7f.0.0.1", "0177.0.0.1", "2130706433" のような省略形・16 進・8 進表記を受け付けます。

    Raises:
        ValueError: IPv4 アドレスとして不正な場合
    """
    parts = host.split(".")
    if parts[-1] == "" and len(parts) > 1:
        parts.pop()
    if len(parts) > 4:
        raise ValueError(f"Too many IPv4 parts: {host}")

    numbers = [_parse_ipv4_part(part) for part in parts]
    if any(number > 255 for number in numbers[:-1]):
        raise ValueError(f"IPv4 part out of range: {host}")
    if numbers[-1] >= 256 ** (5 - len(numbers)):
        raise ValueError(f"IPv4 address out of range: {host}")

    address = numbers[-1]
    for index, number in enumerate(numbers[:-1]):
        address += number * 256 ** (3 - index)
    return address


def encode_hostname(hostname: str) -> str:
    """
    ホスト名を ASCII 互換エンコーディングに変換

    例: "examplé.com" -> "xn--exampl-gva.com"

    Raises:
        UnicodeError: 空ラベルや 63 文字を超えるラベルを含む場合
    """
    return hostname.lower().encode("idna").decode("ascii")


def remove_dot_segments(path: str) -> str:
    """パスから "." と ".." セグメントを除去（RFC 3986 5.2.4）"""
    if not path.startswith("/"):
        return path

    segments = path.split("/")[1:]
    output: List[str] = []
    for segment in segments:
        lowered = segment.lower()
        if lowered in _SINGLE_DOT:
            continue
        if lowered in _DOUBLE_DOT:
            if output:
                output.pop()
            continue
        output.append(segment)

    result = "/" + "/".join(output)
    if segments[-1].lower() in _SINGLE_DOT + _DOUBLE_DOT and not result.endswith("/"):
        result += "/"
    return result


def normalize_path(path: str) -> str:
    """
    パスを正規化してパーセントエンコード

    既存の %XX エスケープはそのまま残します。空のパスは空文字列のまま返します。

    例: "/café.txt" -> "/caf%C3%A9.txt"
    """
    if not path:
        return ""
    return quote(remove_dot_segments(path), safe=_PATH_SAFE)


def decode_query(query: str, strict: bool = True) -> str:
    """
    クエリ文字列をパーセントデコード

    クエリ全体を不透明なボディとして扱うため "&" / "=" はそのまま残し、
    "+" も空白には変換しません。

    Args:
        query: 未デコードのクエリ文字列
        strict: True の場合、不正なエスケープや不正な UTF-8 で DecodeError を送出

    Returns:
        str: デコード済みの文字列

    Raises:
        DecodeError: strict で不正なパーセントエンコーディングを含む場合
    """
    if not strict:
        # 孤立サロゲートも U+FFFD に置き換える
        raw = query.encode("utf-8", "surrogatepass")
        return unquote_to_bytes(raw).decode("utf-8", "replace")

    invalid = _INVALID_ESCAPE.search(query)
    if invalid:
        raise DecodeError(
            f"Invalid percent-escape at position {invalid.start()}",
            position=invalid.start(),
        )

    try:
        return unquote_to_bytes(query).decode("utf-8")
    except UnicodeError as e:
        raise DecodeError(
            "Percent-decoded query is not valid UTF-8", details={"reason": str(e)}
        ) from e
