"""
GCP Cloud Functions: source bucket, archive and one HTTP function per entry.

The bucket name is taken from the storage resource of the "create" template
(minus its generated suffix) and the archive object name from the
``sourceArchiveUrl`` of the first function of the "update" template. The local
archive ``<service>.zip`` is uploaded once and shared by every function.

Functions only accept traffic from inside the VPC or through the load
balancer, egress to private ranges through the VPC connector, and are made
publicly invokable so the load balancer can reach them without credentials.
"""

import pulumi
import pulumi_gcp as gcp

from gateway._helpers import (
    DescriptorError,
    archive_object_name,
    bucket_name_from_resource,
    invoker_resource_name,
)
from gateway.descriptor import Descriptor

ID = "slsgateway:gcp:FunctionDeployment"

INGRESS_SETTINGS = "ALLOW_INTERNAL_AND_GCLB"
EGRESS_SETTINGS = "PRIVATE_RANGES_ONLY"
INVOKER_ROLE = "roles/cloudfunctions.invoker"
INVOKER_MEMBER = "allUsers"


def source_location(
    bucket_descriptor: Descriptor,
    functions_descriptor: Descriptor,
) -> tuple[str, str]:
    """
    Return (bucket name, archive object name) for the deployment archive.

    Raises:
        DescriptorError: If either template lacks the resource to derive from.
    """
    bucket = bucket_name_from_resource(bucket_descriptor.storage.name)
    functions = functions_descriptor.functions
    if not functions:
        raise DescriptorError("Descriptor declares no function to deploy")
    archive_url = functions[0].function_spec().source_archive_url
    return bucket, archive_object_name(archive_url, bucket)


class FunctionDeployment(pulumi.ComponentResource):
    """
    Source bucket + archive and an HTTP Cloud Function per descriptor entry.

    Resources: Bucket, BucketObject, and per function Function and
    FunctionIamMember (public invoker).
    """

    def __init__(
        self,
        name: str,
        bucket_descriptor: Descriptor,
        functions_descriptor: Descriptor,
        archive_path: str,
        region: str,
        connector: pulumi.Input[str],
        label: str,
    ):
        """
        Upload the archive and declare the functions.

        Args:
            name: Resource name prefix (the stack's general prefix).
            bucket_descriptor: Parsed "create" template (declares the bucket).
            functions_descriptor: Parsed "update" template (declares functions).
            archive_path: Local path of the packaged service archive.
            region: Region of the functions and the bucket.
            connector: Self link of the VPC access connector.
            label: Value of the ``tag`` label set on every function.

        Outputs (set on self, registered for the component):
            bucket_name: Name of the source bucket.
            function_names: Deployed function name per descriptor entry name.
            function_urls: HTTPS trigger URL per descriptor entry name.
        """
        # Validate every entry before registering anything.
        bucket_name, archive_name = source_location(
            bucket_descriptor, functions_descriptor
        )
        entries = [
            (entry, entry.function_spec()) for entry in functions_descriptor.functions
        ]

        super().__init__(ID, name)

        child_opts = pulumi.ResourceOptions(parent=self)

        self.bucket = gcp.storage.Bucket(
            resource_name=bucket_name,
            name=bucket_name,
            location=region,
            opts=child_opts,
        )

        self.archive = gcp.storage.BucketObject(
            resource_name=archive_name,
            name=archive_name,
            bucket=self.bucket.name,
            source=pulumi.FileAsset(archive_path),
            opts=child_opts,
        )

        self.functions: dict[str, gcp.cloudfunctions.Function] = {}
        for entry, spec in entries:
            function = gcp.cloudfunctions.Function(
                resource_name=entry.name,
                name=entry.name,
                region=region,
                runtime=spec.runtime,
                available_memory_mb=spec.available_memory_mb,
                source_archive_bucket=self.bucket.name,
                source_archive_object=self.archive.name,
                entry_point=spec.entry_point,
                trigger_http=True,
                timeout=spec.timeout,
                environment_variables=spec.environment_variables,
                ingress_settings=INGRESS_SETTINGS,
                vpc_connector=connector,
                vpc_connector_egress_settings=EGRESS_SETTINGS,
                labels={"tag": label},
                opts=child_opts,
            )

            gcp.cloudfunctions.FunctionIamMember(
                resource_name=invoker_resource_name(name, entry.name),
                cloud_function=function.name,
                region=region,
                role=INVOKER_ROLE,
                member=INVOKER_MEMBER,
                opts=child_opts,
            )
            self.functions[entry.name] = function

        pulumi.log.info(
            f"Declared {len(self.functions)} function(s) from gs://{bucket_name}/{archive_name}"
        )

        self.bucket_name: pulumi.Output[str] = self.bucket.name
        self.function_names: dict[str, pulumi.Output[str]] = {
            key: function.name for key, function in self.functions.items()
        }
        self.function_urls: dict[str, pulumi.Output[str]] = {
            key: function.https_trigger_url for key, function in self.functions.items()
        }
        self.register_outputs(
            {
                "bucket_name": self.bucket_name,
                "function_urls": self.function_urls,
            }
        )
