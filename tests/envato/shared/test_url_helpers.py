from __future__ import annotations

from envato.core.domain.enums import MarketName
from envato.shared.url import build, clean_params, join, prepare


def test_build_appends_query_and_drops_none():
    assert build("/v3/market/catalog/item", {"id": 123, "page": None}) == "/v3/market/catalog/item?id=123"


def test_build_without_params_keeps_question_mark():
    assert build("/v1/market/total-users.json") == "/v1/market/total-users.json?"


def test_build_renders_booleans_and_enums():
    path = build("/v1/discovery/search/search/item", {"site": MarketName.CODECANYON, "rating_min": None, "x": False})
    assert path == "/v1/discovery/search/search/item?site=codecanyon&x=false"


def test_build_escapes_values():
    assert build("/search", {"term": "landing page&more"}) == "/search?term=landing+page%26more"


def test_clean_params_handles_missing_mapping():
    assert clean_params(None) == {}
    assert clean_params({"a": True, "b": None, "c": 0}) == {"a": "true", "c": 0}


def test_prepare_escapes_strings_and_keeps_numbers():
    assert prepare("/v1/market/user:%s.json", "some user/x") == "/v1/market/user:some%20user%2Fx.json"
    assert prepare("/v1/market/item-prices:%d.json", 42) == "/v1/market/item-prices:42.json"


def test_prepare_accepts_enum_members():
    assert prepare("/v1/market/popular:%s.json", MarketName.THREEDOCEAN) == "/v1/market/popular:3docean.json"


def test_join_normalizes_slashes():
    assert join("https://api.envato.com/", "/whoami") == "https://api.envato.com/whoami"
    assert join("https://api.envato.com", "whoami") == "https://api.envato.com/whoami"
