"""
Stack configuration loaded from pulumi.Config().

Provides a typed, immutable view of stack settings. Settings are read from
Pulumi config (e.g. Pulumi.<stack>.yaml or pulumi config set): project keys
from the project namespace, region/zone/project from the ``gcp`` provider
namespace. Used by __main__.main() to name resources, locate the deployment
templates and toggle the plain HTTP route.
"""

import os
from dataclasses import dataclass
from typing import Any, Callable

import pulumi

DEFAULT_SOURCE_DIR = "source_code"
DEFAULT_CREATE_TEMPLATE = "configuration-template-create.yml"
DEFAULT_UPDATE_TEMPLATE = "configuration-template-update.yml"


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes")


def _require_str(config: pulumi.Config, key: str) -> str:
    return config.require(key)


def _optional_bool(config: pulumi.Config, key: str) -> bool:
    raw = config.get(key)
    return False if raw is None else _parse_bool(raw)


def _optional_str(config: pulumi.Config, key: str) -> str | None:
    return config.get(key)


# (attribute, key, parser); parser receives (config, key) and returns value.
_CONFIG_SPEC: list[tuple[str, str, Callable[[pulumi.Config, str], Any]]] = [
    ("general_tag_name", "generalTagName", _require_str),
    ("target_domain", "targetDomain", _require_str),
    ("target_domain_redirect", "targetDomainRedirect", _require_str),
    ("vpc_network", "vpcNetwork", _require_str),
    ("vpc_connector_range", "vpcConnectorRange", _require_str),
    ("sls_service_name", "slsServiceName", _require_str),
    ("alb_http_route", "albHttpRoute", _optional_bool),
    ("alb_header_powered_by", "albHeaderPoweredBy", _optional_str),
    ("sls_source_dir", "slsSourceDir", _optional_str),
    ("sls_create_template", "slsCreateTemplate", _optional_str),
    ("sls_update_template", "slsUpdateTemplate", _optional_str),
]

# Keys of the ``gcp`` provider namespace.
_PROVIDER_SPEC: list[tuple[str, str, Callable[[pulumi.Config, str], Any]]] = [
    ("region", "region", _require_str),
    ("project", "project", _require_str),
    ("zone", "zone", _optional_str),
]


@dataclass(frozen=True)
class StackConfig:
    """
    Stack configuration from Pulumi config.

    Attributes:
        stack: Pulumi stack name (e.g. "dev").
        region: GCP region of regional resources (gcp:region, required).
        project: GCP project id (gcp:project, required).
        zone: GCP zone (gcp:zone, optional; unused by regional resources).
        general_tag_name: Base of every resource name and the ``tag`` label (required).
        target_domain: Domain served by the load balancer (required).
        target_domain_redirect: Host unmatched traffic is redirected to (required).
        vpc_network: Existing VPC network for the connector (required).
        vpc_connector_range: /28 CIDR range of the connector (required).
        sls_service_name: Serverless service name; the archive is <name>.zip (required).
        alb_http_route: Whether to also serve plain HTTP on port 80 (default False).
        alb_header_powered_by: X-Powered-By header value (default general_tag_name).
        sls_source_dir: Directory holding the templates and the archive.
        sls_create_template: File name of the bucket ("create") template.
        sls_update_template: File name of the functions ("update") template.
    """

    stack: str
    region: str
    project: str
    general_tag_name: str
    target_domain: str
    target_domain_redirect: str
    vpc_network: str
    vpc_connector_range: str
    sls_service_name: str
    zone: str | None = None
    alb_http_route: bool = False
    alb_header_powered_by: str | None = None
    sls_source_dir: str | None = None
    sls_create_template: str | None = None
    sls_update_template: str | None = None

    def __post_init__(self):
        # Frozen: fill optional defaults through object.__setattr__.
        defaults = {
            "alb_header_powered_by": self.general_tag_name,
            "sls_source_dir": DEFAULT_SOURCE_DIR,
            "sls_create_template": DEFAULT_CREATE_TEMPLATE,
            "sls_update_template": DEFAULT_UPDATE_TEMPLATE,
        }
        for attr, default in defaults.items():
            if getattr(self, attr) is None:
                object.__setattr__(self, attr, default)

    @property
    def general_prefix(self) -> str:
        """Prefix of generated resource names: <generalTagName>-<stack>."""
        return f"{self.general_tag_name}-{self.stack}"

    @property
    def create_template_path(self) -> str:
        return os.path.join(self.sls_source_dir, self.sls_create_template)

    @property
    def update_template_path(self) -> str:
        return os.path.join(self.sls_source_dir, self.sls_update_template)

    @property
    def archive_path(self) -> str:
        return os.path.join(self.sls_source_dir, f"{self.sls_service_name}.zip")

    @classmethod
    def from_pulumi_config(
        cls,
        config: pulumi.Config,
        gcp_config: pulumi.Config,
        stack: str,
    ) -> "StackConfig":
        """
        Build StackConfig from the project and ``gcp`` provider configs.
        Required keys raise pulumi.ConfigMissingError when absent.
        """
        kwargs = {attr: parser(config, key) for attr, key, parser in _CONFIG_SPEC}
        kwargs.update(
            {attr: parser(gcp_config, key) for attr, key, parser in _PROVIDER_SPEC}
        )
        return cls(stack=stack, **kwargs)
