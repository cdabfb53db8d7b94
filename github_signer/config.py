from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

TIP_SOURCES = ("remote", "local")


@dataclass(frozen=True)
class SignerConfig:
    token: Optional[str] = None
    api_url: str = "https://api.github.com"
    timeout_seconds: int = 30
    base_branch: Optional[str] = None
    tip_source: str = "remote"
    strict_refresh: bool = True

    def __post_init__(self) -> None:
        if self.tip_source not in TIP_SOURCES:
            raise ValueError(
                f"Invalid SIGNER_TIP_SOURCE {self.tip_source!r} "
                f"(expected one of {', '.join(TIP_SOURCES)})"
            )


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(environ.get(name, str(default)).strip())
    except Exception:
        return default


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config(environ: Mapping[str, str] | None = None) -> SignerConfig:
    env = os.environ if environ is None else environ
    return SignerConfig(
        token=env.get("GITHUB_TOKEN") or None,
        api_url=(env.get("GITHUB_API_URL") or "https://api.github.com").rstrip("/"),
        timeout_seconds=_env_int(env, "SIGNER_TIMEOUT_SECONDS", 30),
        base_branch=(env.get("SIGNER_BASE_BRANCH") or "").strip() or None,
        tip_source=(env.get("SIGNER_TIP_SOURCE") or "remote").strip().lower(),
        strict_refresh=_env_bool(env, "SIGNER_STRICT_REFRESH", True),
    )
