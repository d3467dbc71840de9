"""
Pure helpers for naming, descriptor parsing and load balancer headers.
Testable without Pulumi runtime.

Used by the network component (ensure_trailing_dot, zone_id_for_domain), the
routing component (security_response_headers) and the functions component
(bucket_name_from_resource, archive_object_name, parse_timeout,
invoker_resource_name). No Pulumi types; all functions accept and return
plain Python types so they can be unit-tested without a Pulumi stack.
"""

import re

STORAGE_TYPE_MARKER = "storage"

_TIMEOUT_PATTERN = re.compile(r"^(\d+)s?$")


class DescriptorError(ValueError):
    """Raised when a deployment descriptor cannot be turned into resources."""


def is_storage_type(
    resource_type: str,
) -> bool:
    """Return True for descriptor types that describe the artifact bucket."""
    return STORAGE_TYPE_MARKER in resource_type


def ensure_trailing_dot(
    domain: str,
) -> str:
    """
    Return domain with a single trailing dot for DNS FQDN.

    Cloud DNS (and many DNS APIs) expect zone and record names with a trailing
    dot when they are fully qualified. Idempotent if already present.
    """
    return domain if domain.endswith(".") else f"{domain}."


def zone_id_for_domain(
    domain: str,
) -> str:
    """
    Return the Cloud DNS managed zone name used for a domain.

    Zones are named after the domain with dots replaced by dashes
    (e.g. "api.example.com" -> "api-example-com").
    """
    return domain.rstrip(".").replace(".", "-")


def bucket_name_from_resource(
    resource_name: str,
) -> str:
    """
    Derive the source bucket name from the storage resource name.

    The deployment template suffixes the bucket with a generated token after
    the last dash ("myfuncs-abc123-xyz" -> "myfuncs-abc123").

    Raises:
        DescriptorError: If the name carries no dash-separated suffix.
    """
    head, sep, _ = resource_name.rpartition("-")
    if not sep or not head:
        raise DescriptorError(
            f"Storage resource name '{resource_name}' has no '-<suffix>' to strip"
        )
    return head


def archive_object_name(
    source_archive_url: str,
    bucket_name: str,
) -> str:
    """
    Return the object name of a function archive inside its bucket.

    Args:
        source_archive_url: URL as written in the template
            (e.g. "gs://myfuncs-abc123/bucket-name/archive.zip").
        bucket_name: Bucket holding the archive (e.g. "myfuncs-abc123").

    Returns:
        Object path without the scheme and bucket (e.g. "bucket-name/archive.zip").
    """
    return source_archive_url.replace("gs://", "", 1).replace(f"{bucket_name}/", "", 1)


def parse_timeout(
    value: str | int,
) -> int:
    """
    Parse a function timeout written as "<seconds>s" (e.g. "540s" -> 540).

    Raises:
        DescriptorError: If the value is not a non-negative integer of seconds.
    """
    if isinstance(value, bool):
        raise DescriptorError(f"Invalid timeout {value!r}; expected '<seconds>s'")
    if isinstance(value, int):
        if value < 0:
            raise DescriptorError(f"Invalid timeout {value!r}; must not be negative")
        return value
    match = _TIMEOUT_PATTERN.match(str(value).strip())
    if match is None:
        raise DescriptorError(f"Invalid timeout {value!r}; expected '<seconds>s'")
    return int(match.group(1))


def security_response_headers(
    powered_by: str,
) -> list[str]:
    """
    Return the custom response headers attached to every backend service.

    Order is stable so previews do not show spurious diffs.
    """
    return [
        "X-Frame-Options: DENY",
        "X-XSS-Protection: 1; mode=block",
        "Content-Security-Policy: frame-ancestors 'self'",
        "Strict-Transport-Security: max-age=31536000; includesubdomains",
        "X-Content-Type-Options: nosniff",
        f"X-Powered-By: {powered_by}",
        'Cache-Control: no-cache="Set-Cookie"',
    ]


def invoker_resource_name(
    prefix: str,
    function_name: str,
) -> str:
    """Pulumi name of the public invoke grant for a function."""
    return f"{prefix}-{function_name.lower()}-invoker"
