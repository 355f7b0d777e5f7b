from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from . import console

APP_NAME = "bedita"
CONFIG_FILENAME = "config.toml"
ENV_API_URL = "BEDITA_API_URL"
ENV_API_KEY = "BEDITA_API_KEY"

_WARNED_BASE_URL_SCHEME = False


@dataclass
class AuthConfig:
    jwt: str = ""
    renew: str = ""


@dataclass
class ProfileConfig:
    base_url: str = ""
    api_key: str = ""


@dataclass
class AppConfig:
    base_url: str
    auth: AuthConfig
    api_key: str = ""
    profiles: dict[str, ProfileConfig] = field(default_factory=dict)


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig(
        base_url="http://localhost:8090",
        auth=AuthConfig(),
        api_key="",
        profiles={},
    )


def normalize_base_url(raw: str | None, *, warn: bool = False) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        scheme = "http://"
    else:
        scheme = "https://"

    normalized = f"{scheme}{value}"
    if warn:
        _warn_missing_scheme(normalized)
    return normalized


def _warn_missing_scheme(normalized: str) -> None:
    global _WARNED_BASE_URL_SCHEME
    if _WARNED_BASE_URL_SCHEME:
        return
    if not _is_interactive():
        return
    console.warn(f"base_url missing scheme, assuming {normalized}")
    _WARNED_BASE_URL_SCHEME = True


def _is_interactive() -> bool:
    import sys
    return bool(sys.stderr.isatty() or sys.stdout.isatty())


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    data: dict[str, Any] = {
        "base_url": cfg.base_url,
        "api_key": cfg.api_key,
        "auth": {
            "jwt": cfg.auth.jwt,
            "renew": cfg.auth.renew,
        },
    }
    if cfg.profiles:
        data["profiles"] = {
            name: {"base_url": p.base_url, "api_key": p.api_key}
            for name, p in cfg.profiles.items()
        }
    return data


def from_toml(data: dict[str, Any]) -> AppConfig:
    base_url = normalize_base_url(str(data.get("base_url") or ""), warn=True)
    api_key = str(data.get("api_key") or "").strip()
    auth_raw = data.get("auth") or {}
    jwt = ""
    renew = ""
    if isinstance(auth_raw, dict):
        jwt = str(auth_raw.get("jwt") or "")
        renew = str(auth_raw.get("renew") or "")
    profiles_raw = data.get("profiles") or {}
    profiles: dict[str, ProfileConfig] = {}
    if isinstance(profiles_raw, dict):
        for name, v in profiles_raw.items():
            if not isinstance(v, dict):
                continue
            profiles[str(name)] = ProfileConfig(
                base_url=normalize_base_url(str(v.get("base_url") or ""), warn=True),
                api_key=str(v.get("api_key") or "").strip(),
            )

    cfg = default_config()
    if base_url:
        cfg.base_url = base_url
    cfg.api_key = api_key
    cfg.auth = AuthConfig(jwt=jwt, renew=renew)
    cfg.profiles = profiles
    return cfg


def apply_env(cfg: AppConfig) -> AppConfig:
    env_url = os.getenv(ENV_API_URL, "").strip()
    env_key = os.getenv(ENV_API_KEY, "").strip()
    if env_url:
        cfg.base_url = normalize_base_url(env_url)
    if env_key:
        cfg.api_key = env_key
    return cfg


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        cfg = from_toml(data)
    except FileNotFoundError:
        cfg = default_config()
    return apply_env(cfg)


def apply_profile(cfg: AppConfig, profile: str | None) -> AppConfig:
    if not profile:
        return cfg
    prof = cfg.profiles.get(profile)
    if prof is None:
        console.warn(f"profile '{profile}' not found, using defaults")
        return cfg
    return AppConfig(
        base_url=prof.base_url or cfg.base_url,
        auth=cfg.auth,
        api_key=prof.api_key or cfg.api_key,
        profiles=cfg.profiles,
    )


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path
