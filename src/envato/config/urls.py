from __future__ import annotations

API_BASE_URL = "https://api.envato.com/"


def get_authorization_url() -> str:
    return "https://api.envato.com/authorization"


def get_token_url() -> str:
    return "https://api.envato.com/token"
