"""Tests for the core data models and settings."""

import pytest
from pydantic import ValidationError

from mind_vault.config import PipelineSettings, VaultSettings
from mind_vault.models import AnalysisResult, VaultItem, apply_analysis


def test_vault_item_defaults():
    item = VaultItem(type="note", content="hello", title="Hello")

    assert item.id
    assert item.summary is None
    assert item.tags == []
    assert item.created_at > 0


def test_vault_item_ids_are_unique():
    assert VaultItem(type="note", content="a", title="A").id != VaultItem(
        type="note", content="a", title="A"
    ).id


def test_tags_are_deduplicated_in_order():
    item = VaultItem(type="note", content="x", title="X", tags=["b", "a", "b", "c", "a"])

    assert item.tags == ["b", "a", "c"]


def test_invalid_type_rejected():
    with pytest.raises(ValidationError):
        VaultItem(type="video", content="x", title="X")


def test_wire_format_uses_created_at_alias():
    item = VaultItem.model_validate(
        {"id": "1", "type": "link", "content": "http://e.com", "title": "E", "createdAt": 5}
    )

    assert item.created_at == 5
    assert item.to_wire()["createdAt"] == 5
    assert "created_at" not in item.to_wire()


def test_apply_analysis_keeps_identity():
    item = VaultItem(type="link", content="http://e.com", title="Old", created_at=7)
    analysis = AnalysisResult(title="New", summary="Summary", tags=["a", "a", "b"], type="note")

    updated = apply_analysis(item, analysis)

    assert updated.id == item.id
    assert updated.created_at == 7
    assert updated.content == item.content
    assert updated.title == "New"
    assert updated.tags == ["a", "b"]
    assert item.title == "Old"


def test_pipeline_settings_defaults():
    settings = PipelineSettings()

    assert settings.chunk_size == 50
    assert settings.enrichment_window == 5
    assert settings.min_summary_length == 10


def test_pipeline_settings_reject_zero_window():
    with pytest.raises(ValidationError):
        PipelineSettings(enrichment_window=0)


@pytest.mark.parametrize(
    "endpoint,expected",
    [
        ("https://vault.example.test/", "https://vault.example.test"),
        ("  https://vault.example.test  ", "https://vault.example.test"),
        ("", None),
        (None, None),
    ],
)
def test_vault_settings_normalises_endpoint(endpoint, expected):
    settings = VaultSettings(api_endpoint=endpoint)

    assert settings.api_endpoint == expected
    assert settings.is_remote is (expected is not None)


def test_vault_settings_from_env(monkeypatch):
    monkeypatch.setenv("MINDVAULT_API_ENDPOINT", "https://vault.example.test/")
    monkeypatch.setenv("MINDVAULT_AUTH_TOKEN", "token")
    monkeypatch.setenv("MINDVAULT_TIMEOUT", "12.5")

    settings = VaultSettings.from_env()

    assert settings.api_endpoint == "https://vault.example.test"
    assert settings.auth_token == "token"
    assert settings.timeout == 12.5


def test_vault_settings_from_empty_env(monkeypatch):
    for name in ("MINDVAULT_API_ENDPOINT", "MINDVAULT_AUTH_TOKEN", "MINDVAULT_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)

    settings = VaultSettings.from_env()

    assert settings.api_endpoint is None
    assert settings.timeout == 30.0
    assert not settings.is_remote
