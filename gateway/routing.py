"""
GCP external HTTP(S) load balancer in front of the Cloud Functions.

Each function entry of the deployment descriptor gets a serverless network
endpoint group and a backend service, and contributes one path rule
(``httpsTrigger.url`` -> backend) to a single URL map. Requests for the
target domain that match no path go to the default backend, which is the
backend of the first function in the descriptor. Requests for any other host
are redirected over HTTPS to the redirect domain.

The URL map is exposed through an HTTPS proxy (managed certificate, TLS 1.2+)
on port 443 and, when enabled, a plain HTTP proxy on port 80. Both forwarding
rules share the static address of the network component.
"""

from collections.abc import Mapping
from dataclasses import dataclass

import pulumi
import pulumi_gcp as gcp

from gateway._helpers import DescriptorError, security_response_headers
from gateway.descriptor import Descriptor, DescriptorEntry

ID = "slsgateway:gcp:LoadBalancer"

PATH_MATCHER = "allpaths"
MIN_TLS_VERSION = "TLS_1_2"
SSL_PROFILE = "COMPATIBLE"


@dataclass(frozen=True)
class RoutePlan:
    """One routed function: ``index`` is 1-based and names its resources."""

    index: int
    entry: DescriptorEntry
    trigger_url: str

    @property
    def is_default(self) -> bool:
        return self.index == 1


def plan_routes(descriptor: Descriptor) -> list[RoutePlan]:
    """
    Number the function entries of a descriptor in document order.

    Entries are validated here, so a bad descriptor fails before any
    resource is declared. The first plan is the default route of the URL map.

    Raises:
        DescriptorError: If the descriptor has no function entry; a URL map
            without a default service cannot be built.
    """
    plans = [
        RoutePlan(
            index=index,
            entry=entry,
            trigger_url=entry.function_spec().trigger_url,
        )
        for index, entry in enumerate(descriptor.functions, start=1)
    ]
    if not plans:
        raise DescriptorError(
            "Descriptor has no function entries; the URL map needs a default service"
        )
    skipped = len(descriptor.resources) - len(plans)
    if skipped:
        pulumi.log.info(f"Skipped {skipped} storage entry(ies) while planning routes")
    return plans


class LoadBalancer(pulumi.ComponentResource):
    """
    Serverless NEGs, backend services, URL map, proxies and forwarding rules.

    Resources: per function RegionNetworkEndpointGroup and BackendService;
    URLMap, SSLPolicy, TargetHttpsProxy, GlobalForwardingRule (443) and,
    when ``http_route`` is set, TargetHttpProxy and GlobalForwardingRule (80).
    """

    def __init__(
        self,
        name: str,
        descriptor: Descriptor,
        region: str,
        target_domain: str,
        redirect_domain: str,
        ip_address: pulumi.Input[str],
        certificates: Mapping[str, gcp.compute.ManagedSslCertificate],
        powered_by: str,
        http_route: bool = False,
        function_names: Mapping[str, pulumi.Input[str]] | None = None,
    ):
        """
        Create the routing resources for every function entry.

        Args:
            name: Resource name prefix (the stack's general prefix).
            descriptor: Parsed "update" template.
            region: Region of the functions (and of their endpoint groups).
            target_domain: Host routed to the functions.
            redirect_domain: Host other traffic is redirected to.
            ip_address: Static address shared by the forwarding rules.
            certificates: Managed certificates keyed by domain; must contain
                target_domain.
            powered_by: Value of the X-Powered-By response header.
            http_route: If True, also serve plain HTTP on port 80.
            function_names: Deployed function name per entry name. Entries
                not listed are referenced by their descriptor name.

        Outputs (set on self, registered for the component):
            url_map_self_link: Self link of the URL map.
        """
        plans = plan_routes(descriptor)
        if target_domain not in certificates:
            raise ValueError(f"No certificate declared for domain '{target_domain}'")
        function_names = function_names or {}

        super().__init__(ID, name)

        child_opts = pulumi.ResourceOptions(parent=self)
        headers = security_response_headers(powered_by)

        self.endpoint_groups: list[gcp.compute.RegionNetworkEndpointGroup] = []
        self.backend_services: list[gcp.compute.BackendService] = []
        path_rules: list[gcp.compute.URLMapPathMatcherPathRuleArgs] = []
        default_backend = None
        for plan in plans:
            entry = plan.entry
            endpoint_group = gcp.compute.RegionNetworkEndpointGroup(
                resource_name=f"{name}-rne-{plan.index}",
                network_endpoint_type="SERVERLESS",
                region=region,
                cloud_function=gcp.compute.RegionNetworkEndpointGroupCloudFunctionArgs(
                    function=function_names.get(entry.name, entry.name),
                ),
                opts=child_opts,
            )
            self.endpoint_groups.append(endpoint_group)

            backend = gcp.compute.BackendService(
                resource_name=f"{name}-alb-bsfunction-{plan.index}",
                protocol="HTTP",
                backends=[
                    gcp.compute.BackendServiceBackendArgs(group=endpoint_group.self_link)
                ],
                custom_response_headers=headers,
                opts=child_opts,
            )
            self.backend_services.append(backend)

            path_rules.append(
                gcp.compute.URLMapPathMatcherPathRuleArgs(
                    paths=[plan.trigger_url],
                    service=backend.self_link,
                )
            )
            if plan.is_default:
                default_backend = backend

        self.default_backend: gcp.compute.BackendService = default_backend
        self.path_rules = path_rules

        self.url_map = gcp.compute.URLMap(
            resource_name=f"{name}-alb-backend",
            default_url_redirect=gcp.compute.URLMapDefaultUrlRedirectArgs(
                host_redirect=redirect_domain,
                https_redirect=True,
                strip_query=True,
            ),
            host_rules=[
                gcp.compute.URLMapHostRuleArgs(
                    hosts=[target_domain],
                    path_matcher=PATH_MATCHER,
                )
            ],
            path_matchers=[
                gcp.compute.URLMapPathMatcherArgs(
                    name=PATH_MATCHER,
                    default_service=default_backend.self_link,
                    path_rules=path_rules,
                )
            ],
            opts=child_opts,
        )

        self.http_forwarding_rule: gcp.compute.GlobalForwardingRule | None = None
        if http_route:
            http_proxy = gcp.compute.TargetHttpProxy(
                resource_name=f"{name}-alb-backend-proxy-http",
                url_map=self.url_map.self_link,
                opts=child_opts,
            )
            self.http_forwarding_rule = gcp.compute.GlobalForwardingRule(
                resource_name=f"{name}-alb-backend-forward-http",
                target=http_proxy.self_link,
                ip_address=ip_address,
                port_range="80",
                opts=child_opts,
            )
        else:
            pulumi.log.info("HTTP route disabled; serving HTTPS only")

        self.ssl_policy = gcp.compute.SSLPolicy(
            resource_name=f"{name}-alb-backend-https-policy",
            min_tls_version=MIN_TLS_VERSION,
            profile=SSL_PROFILE,
            opts=child_opts,
        )

        self.https_proxy = gcp.compute.TargetHttpsProxy(
            resource_name=f"{name}-alb-backend-proxy-https",
            url_map=self.url_map.self_link,
            ssl_policy=self.ssl_policy.self_link,
            ssl_certificates=[certificates[target_domain].id],
            opts=child_opts,
        )

        self.https_forwarding_rule = gcp.compute.GlobalForwardingRule(
            resource_name=f"{name}-alb-backend-forward-https",
            target=self.https_proxy.self_link,
            ip_address=ip_address,
            port_range="443",
            opts=child_opts,
        )

        self.url_map_self_link: pulumi.Output[str] = self.url_map.self_link
        self.register_outputs({"url_map_self_link": self.url_map_self_link})
