"""Tests for StackConfig parsing"""

import os

import pytest

from config import StackConfig


class FakeConfig:
    """Stand-in for pulumi.Config backed by a dict."""

    def __init__(self, values):
        self.values = values

    def get(self, key):
        return self.values.get(key)

    def require(self, key):
        if key not in self.values:
            raise KeyError(key)
        return self.values[key]


PROJECT = {
    "generalTagName": "acme",
    "targetDomain": "api.example.com",
    "targetDomainRedirect": "www.example.com",
    "vpcNetwork": "default",
    "vpcConnectorRange": "10.8.0.0/28",
    "slsServiceName": "gateway",
}
PROVIDER = {"region": "us-central1", "project": "demo-project"}


def _load(project=None, provider=None, stack="dev"):
    return StackConfig.from_pulumi_config(
        FakeConfig(PROJECT if project is None else project),
        FakeConfig(PROVIDER if provider is None else provider),
        stack,
    )


class TestStackConfig:
    def test_required_keys(self):
        config = _load()
        assert config.target_domain == "api.example.com"
        assert config.region == "us-central1"
        assert config.project == "demo-project"
        assert config.zone is None

    def test_general_prefix(self):
        assert _load(stack="prod").general_prefix == "acme-prod"

    def test_defaults(self):
        config = _load()
        assert config.alb_http_route is False
        assert config.alb_header_powered_by == "acme"
        assert config.create_template_path == os.path.join(
            "source_code", "configuration-template-create.yml"
        )
        assert config.update_template_path == os.path.join(
            "source_code", "configuration-template-update.yml"
        )
        assert config.archive_path == os.path.join("source_code", "gateway.zip")

    @pytest.mark.parametrize("raw", ["true", "True", "1", "yes", True])
    def test_http_route_truthy(self, raw):
        assert _load(project={**PROJECT, "albHttpRoute": raw}).alb_http_route is True

    @pytest.mark.parametrize("raw", ["false", "0", "no", False])
    def test_http_route_falsy(self, raw):
        assert _load(project={**PROJECT, "albHttpRoute": raw}).alb_http_route is False

    def test_overrides(self):
        config = _load(
            project={
                **PROJECT,
                "albHeaderPoweredBy": "ACME Corp",
                "slsSourceDir": "build",
            }
        )
        assert config.alb_header_powered_by == "ACME Corp"
        assert config.archive_path == os.path.join("build", "gateway.zip")

    def test_missing_required_key_raises(self):
        project = dict(PROJECT)
        del project["targetDomain"]
        with pytest.raises(KeyError):
            _load(project=project)

    def test_missing_region_raises(self):
        with pytest.raises(KeyError):
            _load(provider={"project": "demo-project"})

    def test_frozen(self):
        config = _load()
        with pytest.raises(AttributeError):
            config.region = "europe-west1"
