from __future__ import annotations

from bedita_client import BEditaClient, TokenPair

from .config import AppConfig, apply_profile, normalize_base_url, save_config

CLI_VERSION = "0.1.0"

_http_log_file: str | None = None


def set_http_log_file(path: str | None) -> None:
    global _http_log_file
    _http_log_file = path or None


def make_client(
    cfg: AppConfig,
    *,
    profile: str | None,
    base_url_override: str | None,
) -> BEditaClient:
    effective_cfg = apply_profile(cfg, profile)
    base_url = normalize_base_url(base_url_override or effective_cfg.base_url, warn=True)
    tokens = TokenPair(
        access_token=effective_cfg.auth.jwt or None,
        refresh_token=effective_cfg.auth.renew or None,
    )
    client = BEditaClient(
        base_url,
        effective_cfg.api_key or None,
        tokens,
        client_version=CLI_VERSION,
    )
    if _http_log_file:
        client.init_logger({"log_file": _http_log_file})
    return client


def persist_tokens(cfg: AppConfig, client: BEditaClient) -> bool:
    """Save tokens renewed by the client during a command. Returns True when the file changed."""
    tokens = client.get_tokens()
    jwt = tokens.access_token or ""
    renew = tokens.refresh_token or ""
    if jwt == cfg.auth.jwt and renew == cfg.auth.renew:
        return False
    cfg.auth.jwt = jwt
    cfg.auth.renew = renew
    save_config(cfg)
    return True
