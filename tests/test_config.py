"""Proxy configuration and adapter wiring."""

import pytest

from tapontama.adapters.camera.mock_camera import MockCamera
from tapontama.adapters.vision.mock_vision import MockVision
from tapontama.adapters.vision.proxy_client import ClassificationClient
from tapontama.orchestrator.contracts import CapturePhase
from tapontama.services.config import XIMILAR_CLASSIFY_URL, ProxyConfig
from tapontama.services.pipeline import build_classifier, build_state_machine


class TestProxyConfig:
    def test_defaults(self):
        config = ProxyConfig.from_env({})

        assert config.provider_url == XIMILAR_CLASSIFY_URL
        assert config.api_token is None
        assert not config.token_configured
        assert config.auth_scheme == "Token"
        assert config.timeout == 30.0
        assert config.port == 8000

    def test_reads_env_mapping(self):
        config = ProxyConfig.from_env({
            "XIMILAR_API_TOKEN": "abc",
            "PROVIDER_URL": "http://provider.local/classify/",
            "PROVIDER_AUTH_SCHEME": "Bearer",
            "PROVIDER_TIMEOUT": "4.5",
            "PROXY_PORT": "8123",
        })

        assert config.token_configured
        assert config.provider_url == "http://provider.local/classify/"
        assert config.auth_header() == {"Authorization": "Bearer abc"}
        assert config.timeout == 4.5
        assert config.port == 8123

    def test_blank_token_counts_as_missing(self):
        assert not ProxyConfig.from_env({"XIMILAR_API_TOKEN": ""}).token_configured

    def test_repr_hides_token(self):
        assert "abc" not in repr(ProxyConfig(api_token="abc"))


class TestPipeline:
    def test_mock_kinds(self, status):
        machine = build_state_machine(status, camera_kind="mock", classifier_kind="mock")

        assert isinstance(machine.camera, MockCamera)
        assert isinstance(machine.classifier, MockVision)
        assert machine.phase is CapturePhase.IDLE
        assert any("MockCamera" in line for line in status.logs)

    def test_classifier_kind_from_env(self, status, monkeypatch):
        monkeypatch.setenv("CLASSIFIER_ADAPTER", "PROXY")

        assert isinstance(build_classifier(status), ClassificationClient)

    @pytest.mark.asyncio
    async def test_mock_pipeline_runs_end_to_end(self, status):
        machine = build_state_machine(status, camera_kind="mock", classifier_kind="mock")

        await machine.start()
        snap = await machine.capture()

        assert snap.phase is CapturePhase.DONE
        assert snap.result.source == "mock_fallback"
        assert machine.camera.held is None
