"""
Serverless gateway - GCP IaC entrypoint.

Wires three ComponentResources using Pulumi config, the Serverless Framework
deployment templates and output chaining:

- **NetworkEdge**: VPC access connector on an existing network, a global
  static address, and the target domain's A record and managed certificate.
- **FunctionDeployment**: source bucket, uploaded archive and one HTTP Cloud
  Function per template entry. Functions egress through the connector.
- **LoadBalancer**: one serverless NEG + backend per function, a URL map
  routing each trigger path, HTTPS (and optional HTTP) forwarding rules on
  the static address. Deployed function names and the certificate map are
  passed in from the other components.

Stack exports: backend_ip_address, bucket_name, url_map, function_urls.
"""

import pulumi

from config import StackConfig
from gateway import FunctionDeployment, LoadBalancer, NetworkEdge, load_descriptor


def main():
    """
    Build the network, function and load balancer components and export outputs.

    Reads config and both deployment templates, then chains the connector into
    the functions and the address, certificates and function names into the
    load balancer.
    """
    config = StackConfig.from_pulumi_config(
        pulumi.Config(), pulumi.Config("gcp"), pulumi.get_stack()
    )

    try:
        bucket_descriptor = load_descriptor(config.create_template_path)
        functions_descriptor = load_descriptor(config.update_template_path)
    except Exception as e:
        pulumi.log.error(f"Failed to load deployment templates: {e}")
        raise
    pulumi.log.info(
        f"Loaded {len(functions_descriptor.functions)} function(s) "
        f"from {config.update_template_path}"
    )

    prefix = config.general_prefix

    try:
        edge = NetworkEdge(
            name=prefix,
            network_name=config.vpc_network,
            connector_range=config.vpc_connector_range,
            region=config.region,
            domains=[config.target_domain],
        )

        functions = FunctionDeployment(
            name=prefix,
            bucket_descriptor=bucket_descriptor,
            functions_descriptor=functions_descriptor,
            archive_path=config.archive_path,
            region=config.region,
            connector=edge.connector_self_link,
            label=config.general_tag_name,
        )

        lb = LoadBalancer(
            name=prefix,
            descriptor=functions_descriptor,
            region=config.region,
            target_domain=config.target_domain,
            redirect_domain=config.target_domain_redirect,
            ip_address=edge.ip_address,
            certificates=edge.certificates,
            powered_by=config.alb_header_powered_by,
            http_route=config.alb_http_route,
            function_names=functions.function_names,
        )
    except Exception as e:
        pulumi.log.error(f"Failed during resource build: {e}")
        raise

    for output_name, value in [
        ("backend_ip_address", edge.ip_address),
        ("bucket_name", functions.bucket_name),
        ("url_map", lb.url_map_self_link),
        ("function_urls", functions.function_urls),
    ]:
        pulumi.export(output_name, value)


if __name__ == "__main__":
    main()
