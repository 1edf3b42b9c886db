"""Tests for settings and controller wiring."""

import pytest
from pydantic import ValidationError

from csi_cbs.adapters import CbsDiskGateway
from csi_cbs.config import CredentialConfig, PollerConfig, Settings
from csi_cbs.core.lock import KeyedLock, NullLock
from csi_cbs.dependencies import (
    build_controller,
    get_controller,
    init_controller,
    reset_controller,
)


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("CBS_ZONE", "CBS_POLL_INTERVAL", "CBS_POLL_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.poller.interval == 5.0
        assert settings.poller.timeout == 120.0
        assert settings.cbs.zone == "ap-guangzhou-3"
        assert settings.controller.serialize_operations is True

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CBS_ZONE", "ap-shanghai-2")
        monkeypatch.setenv("CBS_POLL_TIMEOUT", "180")
        monkeypatch.setenv("TENCENTCLOUD_CBS_API_SECRET_ID", "AKID")

        settings = Settings()

        assert settings.cbs.zone == "ap-shanghai-2"
        assert settings.poller.timeout == 180.0
        assert settings.credentials.secret_id == "AKID"

    def test_poller_rejects_non_positive(self) -> None:
        with pytest.raises(ValidationError):
            PollerConfig(interval=0)
        with pytest.raises(ValidationError):
            PollerConfig(timeout=-1)


class TestControllerWiring:
    """Tests for build/init/get/reset of the controller singleton."""

    @pytest.fixture(autouse=True)
    def reset(self):
        reset_controller()
        yield
        reset_controller()

    @pytest.fixture
    def settings(self) -> Settings:
        return Settings(credentials=CredentialConfig(secret_id="AKID", secret_key="secret"))

    def test_build_uses_keyed_lock(self, settings: Settings) -> None:
        controller = build_controller(settings)

        assert isinstance(controller._gateway, CbsDiskGateway)
        assert isinstance(controller._locks, KeyedLock)
        assert controller._zone == settings.cbs.zone

    def test_build_without_serialization(self, settings: Settings) -> None:
        settings.controller.serialize_operations = False

        controller = build_controller(settings)

        assert isinstance(controller._locks, NullLock)

    def test_init_requires_credentials(self) -> None:
        settings = Settings(credentials=CredentialConfig(secret_id="", secret_key=""))

        with pytest.raises(RuntimeError, match="credentials"):
            init_controller(settings)

    def test_init_then_get(self, settings: Settings) -> None:
        controller = init_controller(settings)

        assert get_controller() is controller

    def test_get_before_init(self) -> None:
        with pytest.raises(RuntimeError, match="not initialized"):
            get_controller()
