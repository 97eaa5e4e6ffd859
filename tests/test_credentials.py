"""Tests for shotboard.credentials and shotboard.tiers modules."""

from __future__ import annotations

import pytest

from shotboard.credentials import EnvCredentialProvider, StaticCredentialProvider
from shotboard.tiers import TierSource


class TestEnvCredentialProvider:
    def test_missing_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SHOTBOARD_TEST_KEY", raising=False)
        provider = EnvCredentialProvider("SHOTBOARD_TEST_KEY")
        assert not provider.has_credential()
        assert provider.get_key() is None

    def test_blank_variable_is_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHOTBOARD_TEST_KEY", "   ")
        assert not EnvCredentialProvider("SHOTBOARD_TEST_KEY").has_credential()

    def test_present_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHOTBOARD_TEST_KEY", "abc123")
        provider = EnvCredentialProvider("SHOTBOARD_TEST_KEY")
        assert provider.has_credential()
        assert provider.get_key() == "abc123"

    def test_invalidate_until_selected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHOTBOARD_TEST_KEY", "abc123")
        provider = EnvCredentialProvider("SHOTBOARD_TEST_KEY")

        provider.invalidate()
        assert not provider.has_credential()

        provider.select("new-key")
        assert provider.get_key() == "new-key"


class TestStaticCredentialProvider:
    def test_invalidate(self) -> None:
        provider = StaticCredentialProvider(available=True)
        provider.invalidate()
        assert not provider.has_credential()


class TestTierSource:
    def test_notifies_on_change(self) -> None:
        tiers = TierSource("free")
        seen: list[str] = []
        tiers.subscribe(seen.append)

        tiers.set_tier("paid")

        assert tiers.tier == "paid"
        assert seen == ["paid"]

    def test_no_notification_when_unchanged(self) -> None:
        tiers = TierSource("free")
        seen: list[str] = []
        tiers.subscribe(seen.append)
        tiers.set_tier("free")
        assert seen == []

    def test_unsubscribe(self) -> None:
        tiers = TierSource("free")
        seen: list[str] = []
        unsubscribe = tiers.subscribe(seen.append)
        unsubscribe()
        tiers.set_tier("paid")
        assert seen == []

    def test_unknown_tier_raises(self) -> None:
        with pytest.raises(ValueError):
            TierSource("free").set_tier("platinum")
        with pytest.raises(ValueError):
            TierSource("platinum")
