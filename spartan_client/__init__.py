"""
spartan_client

Spartan プロトコル用の最小クライアント

使用例:
    from spartan_client import get, Request

    print(get("spartan://example.com/"))

    request = Request.from_string("spartan://example.com/?hello%20world")
    str(request)  # "example.com / 11\\r\\nhello world"
"""

from .client import SpartanClient, get, try_get
from .config import (
    ClientConfig,
    create_client_config,
    DEFAULT_PORTS,
    SPARTAN_DEFAULT_PORT,
    SPARTAN_SCHEME,
)
from .request import Request
from .result import Ok, Err, Result, capture
from .transport import send
from .url import ParsedURL, parse_url, decode_query, encode_hostname, normalize_path
from .exceptions import (
    SpartanError,
    ParseError,
    InvalidSchemeError,
    MissingHostError,
    DecodeError,
    ConnectError,
    WriteError,
    ReadError,
)

__version__ = "0.1.0"

__all__ = [
    "SpartanClient",
    "get",
    "try_get",
    "ClientConfig",
    "create_client_config",
    "DEFAULT_PORTS",
    "SPARTAN_DEFAULT_PORT",
    "SPARTAN_SCHEME",
    "Request",
    "Ok",
    "Err",
    "Result",
    "capture",
    "send",
    "ParsedURL",
    "parse_url",
    "decode_query",
    "encode_hostname",
    "normalize_path",
    "SpartanError",
    "ParseError",
    "InvalidSchemeError",
    "MissingHostError",
    "DecodeError",
    "ConnectError",
    "WriteError",
    "ReadError",
]
