"""
Serverless gateway infrastructure components.

Each layer is encapsulated in its own ComponentResource for clear ownership,
testability, and reuse. Use from the Pulumi entrypoint (e.g. __main__.py) with
config and output chaining:

- **NetworkEdge**: VPC connector, static address, A record and managed
  certificate; exposes ip_address, connector_self_link and certificates.
- **FunctionDeployment**: source bucket + archive and one HTTP Cloud Function
  per descriptor entry; exposes function_names and function_urls.
- **LoadBalancer**: serverless NEGs, backend services, URL map, proxies and
  forwarding rules; accepts the address, certificates and function names.
"""

from gateway.descriptor import Descriptor, DescriptorError, load_descriptor
from gateway.functions import FunctionDeployment
from gateway.network import NetworkEdge
from gateway.routing import LoadBalancer

__all__ = [
    "Descriptor",
    "DescriptorError",
    "FunctionDeployment",
    "LoadBalancer",
    "NetworkEdge",
    "load_descriptor",
]
