"""Tests for finch.config — EngineConfig defaults and validation."""

import dataclasses

import pytest

from finch.config import EngineConfig
from finch.errors import ConfigurationError


class TestEngineConfig:
    def test_defaults(self) -> None:
        config = EngineConfig()
        assert config.unspecified_policy == "authenticated"
        assert config.strict_routes is False
        assert config.request_id_header == "X-Request-ID"
        assert config.token_header == "Authorization"
        assert config.token_scheme == "Bearer"
        assert config.decode_token is None
        assert config.debug is False
        assert config.max_content_length == 16 * 1024 * 1024

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            EngineConfig().debug = True  # type: ignore[misc]

    def test_rejects_unknown_unspecified_policy(self) -> None:
        with pytest.raises(ConfigurationError, match="unspecified_policy"):
            EngineConfig(unspecified_policy="allow")  # type: ignore[arg-type]

    def test_rejects_non_positive_body_limit(self) -> None:
        with pytest.raises(ConfigurationError):
            EngineConfig(max_content_length=0)

    def test_rejects_empty_request_id_header(self) -> None:
        with pytest.raises(ConfigurationError):
            EngineConfig(request_id_header="")
