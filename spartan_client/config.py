"""
クライアント設定

Spartan クライアントの動作設定（デフォルトポート、タイムアウト、デコード方針など）を提供します。
"""

import codecs
import os
from types import MappingProxyType
from typing import Dict, Mapping, Optional
from dataclasses import dataclass, field

SPARTAN_SCHEME = "spartan"
SPARTAN_DEFAULT_PORT = 300

# スキームごとのデフォルトポート（URL ライブラリの表には依存しない）
DEFAULT_PORTS: Dict[str, int] = {SPARTAN_SCHEME: SPARTAN_DEFAULT_PORT}

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class ClientConfig:
    """クライアント設定クラス"""

    default_ports: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_PORTS))
    timeout: Optional[float] = None
    strict_decoding: bool = True
    encoding: str = "utf-8"
    enable_logging: bool = False

    def __post_init__(self) -> None:
        """初期化後の検証"""
        # 読み取り専用のコピー
        object.__setattr__(self, "default_ports", MappingProxyType(dict(self.default_ports)))

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

        for scheme, port in self.default_ports.items():
            if not 0 < port <= 65535:
                raise ValueError(f"Invalid default port for {scheme}: {port}")

        # 未知のエンコーディングは送信時ではなくここで検出する
        codecs.lookup(self.encoding)

    def default_port_for(self, scheme: str) -> Optional[int]:
        """スキームのデフォルトポートを取得"""
        return self.default_ports.get(scheme)

    def __hash__(self) -> int:
        return hash(
            (
                tuple(sorted(self.default_ports.items())),
                self.timeout,
                self.strict_decoding,
                self.encoding,
                self.enable_logging,
            )
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        """
        環境変数から設定を作成

        Args:
            environ: 参照する環境変数（省略時は os.environ）

        Returns:
            ClientConfig: 作成された設定

        Note:
            SPARTAN_TIMEOUT, SPARTAN_STRICT_DECODING, SPARTAN_ENCODING, SPARTAN_LOG を参照します
        """
        env = os.environ if environ is None else environ

        timeout: Optional[float] = None
        raw_timeout = env.get("SPARTAN_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(f"SPARTAN_TIMEOUT must be a number, got {raw_timeout!r}")

        strict_decoding = True
        raw_strict = env.get("SPARTAN_STRICT_DECODING")
        if raw_strict:
            strict_decoding = _parse_bool("SPARTAN_STRICT_DECODING", raw_strict)

        enable_logging = False
        raw_log = env.get("SPARTAN_LOG")
        if raw_log:
            enable_logging = _parse_bool("SPARTAN_LOG", raw_log)

        return cls(
            timeout=timeout,
            strict_decoding=strict_decoding,
            encoding=env.get("SPARTAN_ENCODING") or "utf-8",
            enable_logging=enable_logging,
        )


def create_client_config(
    timeout: Optional[float] = None,
    strict_decoding: bool = True,
    encoding: str = "utf-8",
    enable_logging: bool = False,
    default_ports: Optional[Dict[str, int]] = None,
) -> ClientConfig:
    """クライアント設定を作成するヘルパー関数"""
    ports = dict(DEFAULT_PORTS)
    if default_ports:
        ports.update(default_ports)

    return ClientConfig(
        default_ports=ports,
        timeout=timeout,
        strict_decoding=strict_decoding,
        encoding=encoding,
        enable_logging=enable_logging,
    )
