"""
Deployment descriptors: the YAML templates produced by the Serverless
Framework for Google Cloud Functions.

Two templates are read. The "create" template declares only the artifact
bucket; the "update" template repeats the bucket and adds one
``cloudfunctions`` resource per function::

    resources:
      - name: sls-api-dev-1a2b3c
        type: storage.v1.bucket
        properties:
          location: us-central1
      - name: api-dev-hello
        type: gcp-types/cloudfunctions-v1:projects.locations.functions
        properties:
          runtime: nodejs18
          availableMemoryMb: 256
          entryPoint: hello
          timeout: 60s
          sourceArchiveUrl: gs://sls-api-dev-1a2b3c/serverless/api/dev/api.zip
          httpsTrigger:
            url: /hello

Entries are kept in document order; routing and the default backend depend
on it.
"""

from dataclasses import dataclass, field
from typing import Any

import yaml

from gateway._helpers import DescriptorError, is_storage_type, parse_timeout


@dataclass(frozen=True)
class FunctionSpec:
    """
    Typed view of a function entry's ``properties``.

    Attributes:
        runtime: Cloud Functions runtime (e.g. "nodejs18").
        available_memory_mb: Memory in MB.
        entry_point: Exported handler name.
        timeout: Timeout in seconds, parsed from "<N>s".
        trigger_url: Path routed to the function by the load balancer.
        source_archive_url: gs:// URL of the deployment archive.
        environment_variables: Environment passed to the function.
    """

    runtime: str
    available_memory_mb: int
    entry_point: str
    timeout: int
    trigger_url: str
    source_archive_url: str
    environment_variables: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class DescriptorEntry:
    name: str
    type: str
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def is_storage(self) -> bool:
        return is_storage_type(self.type)

    def function_spec(self) -> FunctionSpec:
        """
        Build the FunctionSpec for a non-storage entry.

        Raises:
            DescriptorError: If the entry is a storage entry, or a required
                property is missing or malformed.
        """
        if self.is_storage:
            raise DescriptorError(f"Entry '{self.name}' is a storage resource")
        props = self.properties
        try:
            trigger = props.get("httpsTrigger") or {}
            return FunctionSpec(
                runtime=props["runtime"],
                available_memory_mb=int(props["availableMemoryMb"]),
                entry_point=props["entryPoint"],
                timeout=parse_timeout(props["timeout"]),
                trigger_url=trigger["url"],
                source_archive_url=props["sourceArchiveUrl"],
                environment_variables=dict(props.get("environmentVariables") or {}),
            )
        except KeyError as e:
            raise DescriptorError(
                f"Function entry '{self.name}' is missing property {e}"
            ) from e
        except (TypeError, ValueError) as e:
            raise DescriptorError(f"Function entry '{self.name}' is invalid: {e}") from e


@dataclass(frozen=True)
class Descriptor:
    resources: tuple[DescriptorEntry, ...]

    @property
    def functions(self) -> list[DescriptorEntry]:
        """Non-storage entries, in document order."""
        return [entry for entry in self.resources if not entry.is_storage]

    @property
    def storage(self) -> DescriptorEntry:
        """
        First storage entry.

        Raises:
            DescriptorError: If the descriptor declares no storage resource.
        """
        for entry in self.resources:
            if entry.is_storage:
                return entry
        raise DescriptorError("Descriptor declares no storage resource")

    @classmethod
    def from_dict(cls, data: Any) -> "Descriptor":
        if not isinstance(data, dict) or not isinstance(data.get("resources"), list):
            raise DescriptorError("Descriptor must be a mapping with a 'resources' list")
        entries = []
        for position, raw in enumerate(data["resources"]):
            if not isinstance(raw, dict) or "name" not in raw or "type" not in raw:
                raise DescriptorError(
                    f"Resource #{position} must be a mapping with 'name' and 'type'"
                )
            properties = raw.get("properties") or {}
            if not isinstance(properties, dict):
                raise DescriptorError(f"Resource #{position} 'properties' must be a mapping")
            entries.append(
                DescriptorEntry(
                    name=str(raw["name"]),
                    type=str(raw["type"]),
                    properties=dict(properties),
                )
            )
        return cls(resources=tuple(entries))


def load_descriptor(file_path: str) -> Descriptor:
    """Load and validate a deployment descriptor from the given file path."""
    with open(file_path, "r") as file:
        data = yaml.safe_load(file)
    try:
        return Descriptor.from_dict(data)
    except DescriptorError as e:
        raise DescriptorError(f"{file_path}: {e}") from e
