"""
GCP network edge: VPC access connector, static address, DNS and TLS.

This component looks up an existing VPC network and creates a Serverless VPC
Access connector on it, so functions can reach private ranges. It allocates a
global static address for the external load balancer and, for each served
domain, points an "A" record at that address and requests a Google-managed
TLS certificate.

The DNS zone of every domain must already exist and be named after the
domain with dots replaced by dashes (``api.example.com`` -> ``api-example-com``).
Certificates are exposed in ``certificates`` keyed by domain so the HTTPS
proxy of the routing component can pick the right one.
"""

import pulumi
import pulumi_gcp as gcp

from gateway._helpers import ensure_trailing_dot, zone_id_for_domain

ID = "slsgateway:gcp:NetworkEdge"

DNS_RECORD_TTL = 600


class NetworkEdge(pulumi.ComponentResource):
    """
    VPC connector, global address, and per-domain A record + managed cert.

    Resources: Network (lookup), Connector, GlobalAddress, and per domain
    ManagedZone (lookup), RecordSet, ManagedSslCertificate.
    """

    def __init__(
        self,
        name: str,
        network_name: str,
        connector_range: str,
        region: str,
        domains: list[str],
    ):
        """
        Create the connector, the address and the per-domain DNS/TLS resources.

        Args:
            name: Resource name prefix (the stack's general prefix).
            network_name: Existing VPC network to attach the connector to.
            connector_range: /28 CIDR range reserved for the connector.
            region: Region of the connector.
            domains: Domains served by the load balancer.

        Outputs (set on self, registered for the component):
            ip_address: The global static address.
            connector_self_link: Self link used by functions for egress.
        """
        super().__init__(ID, name)

        child_opts = pulumi.ResourceOptions(parent=self)

        # Lookup fails the deployment if the network does not exist.
        network = gcp.compute.Network.get(
            f"{name}-{network_name}-network", network_name, opts=child_opts
        )

        self.connector = gcp.vpcaccess.Connector(
            resource_name=f"{name}-vpcconn",
            name=f"{name}-vpcconn",
            ip_cidr_range=connector_range,
            network=network.name,
            region=region,
            opts=child_opts,
        )

        self.address = gcp.compute.GlobalAddress(
            resource_name=f"{name}-external-ip-backend",
            opts=child_opts,
        )

        self.records: dict[str, gcp.dns.RecordSet] = {}
        self.certificates: dict[str, gcp.compute.ManagedSslCertificate] = {}
        for domain in domains:
            self._create_alias_record(name, domain, child_opts)

        self.ip_address: pulumi.Output[str] = self.address.address
        self.connector_self_link: pulumi.Output[str] = self.connector.self_link
        self.register_outputs(
            {
                "ip_address": self.ip_address,
                "connector_self_link": self.connector_self_link,
            }
        )

    def _create_alias_record(
        self,
        name: str,
        domain: str,
        opts: pulumi.ResourceOptions,
    ) -> None:
        zone_id = zone_id_for_domain(domain)
        zone = gcp.dns.ManagedZone.get(f"{name}-{zone_id}-zone", zone_id, opts=opts)

        self.records[domain] = gcp.dns.RecordSet(
            resource_name=f"{name}-{domain}-record-set",
            name=ensure_trailing_dot(domain),
            type="A",
            ttl=DNS_RECORD_TTL,
            managed_zone=zone.name,
            rrdatas=[self.address.address],
            opts=opts,
        )

        # Provisioning stays pending until the A record resolves to the address.
        managed = gcp.compute.ManagedSslCertificateManagedArgs(
            domains=[ensure_trailing_dot(domain)],
        )
        self.certificates[domain] = gcp.compute.ManagedSslCertificate(
            resource_name=f"{name}-{zone_id}-ssl",
            managed=managed,
            opts=opts,
        )
