"""Tests for environment-driven configuration."""

from gatekeeper_bot.app import create_app
from gatekeeper_bot.command_handler import SearchRequest, verify_token
from gatekeeper_bot.config import BridgeConfig


def test_reads_environment(monkeypatch) -> None:
    monkeypatch.delenv("AIRTABLE_API_URL", raising=False)
    monkeypatch.delenv("AIRTABLE_RECORD_URL", raising=False)
    monkeypatch.setenv("SLACK_VERIFICATION_TOKEN", "secret")
    monkeypatch.setenv("AIRTABLE_API_KEY", "key")
    monkeypatch.setenv("AIRTABLE_BASE_ID", "appX")
    monkeypatch.setenv("AIRTABLE_TABLE_ID", "tblY")
    monkeypatch.setenv("SEARCH_FIELDS", "Nickname, Email ,")
    monkeypatch.setenv("SLACK_SUPERUSER_IDS", "UA,UB")
    monkeypatch.setenv("AIRTABLE_TIMEOUT", "12")

    config = BridgeConfig()

    assert config.search_fields == ("Nickname", "Email")
    assert config.superuser_ids == ("UA", "UB")
    assert config.timeout == 12.0
    assert config.table_url == "https://api.airtable.com/v0/appX/tblY"
    assert config.record_link("rec1") == "https://airtable.com/tblY/rec1"
    assert config.missing() == []


def test_defaults(monkeypatch) -> None:
    for name in ("SEARCH_FIELDS", "SLACK_SUPERUSER_IDS", "AIRTABLE_VIEW", "AIRTABLE_API_URL"):
        monkeypatch.delenv(name, raising=False)

    config = BridgeConfig(verification_token=None, airtable_api_key="k", base_id="b", table_id="t")

    assert config.search_fields == ("First Name", "Last Name")
    assert config.superuser_ids == ()
    assert config.view is None
    assert config.missing() == ["SLACK_VERIFICATION_TOKEN"]


def test_verify_token() -> None:
    assert verify_token("abc", "abc")
    assert not verify_token("abc", "abd")
    assert not verify_token(None, "abc")
    assert not verify_token("abc", None)
    assert not verify_token("", "")


def test_verify_token_rejects_non_strings() -> None:
    assert not verify_token(123, "123")
    assert not verify_token(["abc"], "abc")


def test_search_request_coerces_json_values() -> None:
    request = SearchRequest.from_payload({"text": 5, "user_id": 42, "response_url": None})

    assert request.raw_query_text == "5"
    assert request.requester_id == "42"
    assert request.callback_url is None


def test_create_app_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("AIRTABLE_TABLE_ID", "tblFROMENV")

    app = create_app()

    assert app.state.config.table_id == "tblFROMENV"
