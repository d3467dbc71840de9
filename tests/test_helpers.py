"""Tests for pure helpers"""

import pytest

from gateway import _helpers


class TestEnsureTrailingDot:
    def test_adds_dot_when_missing(self):
        assert _helpers.ensure_trailing_dot("example.com") == "example.com."

    def test_leaves_dot_when_present(self):
        assert _helpers.ensure_trailing_dot("example.com.") == "example.com."


class TestZoneIdForDomain:
    def test_replaces_dots(self):
        assert _helpers.zone_id_for_domain("api.example.com") == "api-example-com"

    def test_ignores_trailing_dot(self):
        assert _helpers.zone_id_for_domain("example.com.") == "example-com"


class TestIsStorageType:
    def test_bucket_type(self):
        assert _helpers.is_storage_type("storage.v1.bucket")

    def test_function_type(self):
        assert not _helpers.is_storage_type(
            "gcp-types/cloudfunctions-v1:projects.locations.functions"
        )


class TestBucketNameFromResource:
    def test_strips_last_suffix(self):
        assert _helpers.bucket_name_from_resource("myfuncs-abc123-xyz") == "myfuncs-abc123"

    def test_single_suffix(self):
        assert _helpers.bucket_name_from_resource("bucket-1") == "bucket"

    def test_no_dash_raises(self):
        with pytest.raises(_helpers.DescriptorError):
            _helpers.bucket_name_from_resource("bucket")

    def test_leading_dash_only_raises(self):
        with pytest.raises(_helpers.DescriptorError):
            _helpers.bucket_name_from_resource("-suffix")


class TestArchiveObjectName:
    def test_strips_scheme_and_bucket(self):
        assert (
            _helpers.archive_object_name(
                "gs://myfuncs-abc123/bucket-name/archive.zip", "myfuncs-abc123"
            )
            == "bucket-name/archive.zip"
        )

    def test_only_first_bucket_prefix_removed(self):
        assert (
            _helpers.archive_object_name("gs://b/b/archive.zip", "b")
            == "b/archive.zip"
        )

    def test_other_bucket_left_untouched(self):
        assert (
            _helpers.archive_object_name("gs://other/archive.zip", "mine")
            == "other/archive.zip"
        )


class TestParseTimeout:
    def test_seconds_suffix(self):
        assert _helpers.parse_timeout("540s") == 540

    def test_bare_integer_string(self):
        assert _helpers.parse_timeout("60") == 60

    def test_integer(self):
        assert _helpers.parse_timeout(30) == 30

    def test_negative_integer_raises(self):
        with pytest.raises(_helpers.DescriptorError):
            _helpers.parse_timeout(-5)

    @pytest.mark.parametrize("value", ["abc", "10m", "s", "", "1.5s", True])
    def test_invalid_raises(self, value):
        with pytest.raises(_helpers.DescriptorError):
            _helpers.parse_timeout(value)


class TestSecurityResponseHeaders:
    def test_includes_powered_by(self):
        headers = _helpers.security_response_headers("acme")
        assert "X-Powered-By: acme" in headers

    def test_fixed_security_headers(self):
        headers = _helpers.security_response_headers("acme")
        assert headers[0] == "X-Frame-Options: DENY"
        assert "X-Content-Type-Options: nosniff" in headers
        assert (
            "Strict-Transport-Security: max-age=31536000; includesubdomains"
            in headers
        )
        assert len(headers) == 7


class TestInvokerResourceName:
    def test_lowercases_function_name(self):
        assert (
            _helpers.invoker_resource_name("app-dev", "Gateway-Orders")
            == "app-dev-gateway-orders-invoker"
        )
