"""Tests for settings, the session store, notifications and callback helpers."""

import logging

import pytest

from jewelry_admin.client.session import SESSION_KEYS, AdminSession
from jewelry_admin.config import Settings
from jewelry_admin.core.callbacks import invoke
from jewelry_admin.core.exceptions import CategoryCycleError, ValidationFailed
from jewelry_admin.core.notifications import Notification, Notifier
from jewelry_admin.logging_config import setup_logging


# ============================================================================
# TESTS: SETTINGS
# ============================================================================

class TestSettings:

    def test_trailing_slash_stripped(self):
        assert Settings(API_BASE_URL="https://shop.test/").API_BASE_URL == "https://shop.test"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("METAL_PRICE_MAX_RECONNECTS", "9")
        monkeypatch.setenv("LOGIN_URL", "/admin/login")

        config = Settings()

        assert config.METAL_PRICE_MAX_RECONNECTS == 9
        assert config.LOGIN_URL == "/admin/login"

    def test_setup_logging_respects_level(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

        setup_logging("warning")

        assert calls["level"] == logging.WARNING


# ============================================================================
# TESTS: SESSION
# ============================================================================

class TestAdminSession:

    def test_login_and_clear(self):
        session = AdminSession()
        assert session.is_authenticated is False

        session.login("t0k3n", user="root")
        for key in SESSION_KEYS[2:]:
            session.set(key, "x")
        session.set("theme", "dark")
        assert session.token == "t0k3n"

        session.clear()

        assert session.is_authenticated is False
        assert all(session.get(key) is None for key in SESSION_KEYS)
        assert session.get("theme") == "dark"


# ============================================================================
# TESTS: NOTIFICATIONS AND ERRORS
# ============================================================================

class TestNotifier:

    def test_variants(self):
        notifier = Notifier()

        notifier.success("Saved")
        notifier.error("Nope", title="Validation Error")

        assert [n.variant for n in notifier.notifications] == ["success", "destructive"]
        assert notifier.latest.title == "Validation Error"

        notifier.clear()
        assert notifier.latest is None

    def test_history_is_bounded(self):
        notifier = Notifier(limit=3)

        for n in range(5):
            notifier.success(f"update {n}")

        assert [n.description for n in notifier.notifications] == ["update 2", "update 3", "update 4"]
        assert notifier.latest.description == "update 4"

    def test_invalid_variant(self):
        with pytest.raises(ValueError):
            Notification(title="x", description="y", variant="warning")

    def test_cycle_error_message(self):
        error = CategoryCycleError([["a", "b"]])

        assert error.message == "Category hierarchy contains a cycle: a -> b -> a"

    def test_validation_failed_carries_errors(self):
        error = ValidationFailed({"name": "Category name is required"})

        assert error.errors["name"] == "Category name is required"
        assert error.message == "Please fill in all required fields"


class TestInvoke:

    async def test_sync_and_async_callbacks(self):
        async def doubled(x):
            return x * 2

        assert await invoke(lambda x: x + 1, 1) == 2
        assert await invoke(doubled, 2) == 4
        assert await invoke(None, 3) is None
