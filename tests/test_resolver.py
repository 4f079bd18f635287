"""Tests for the annotation cascade."""

from datetime import datetime, timedelta, timezone

import pytest

from secretsync.config.settings import DefaultsConfig
from secretsync.secrets.resolver import (
    ANNOTATION_CURVE,
    ANNOTATION_GENERATED_AT,
    ANNOTATION_LENGTH,
    ANNOTATION_ROTATE,
    ANNOTATION_TYPE,
    ConfigResolver,
    FieldSpec,
    format_timestamp,
    parse_fields,
    parse_timestamp,
)


class TestParseFields:
    """Test splitting the autogenerate annotation."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("password", ["password"]),
            ("username,password", ["username", "password"]),
            (" username , password ", ["username", "password"]),
            ("a,,b,", ["a", "b"]),
            ("a,b,a", ["a", "b"]),
            ("", []),
            (None, []),
            (" , ", []),
        ],
    )
    def test_parse_fields(self, value, expected):
        assert parse_fields(value) == expected


class TestTimestamps:
    """Test the generated-at timestamp format."""

    def test_format_is_second_precision_utc(self):
        value = datetime(2026, 2, 9, 12, 30, 15, 987654, tzinfo=timezone.utc)

        assert format_timestamp(value) == "2026-02-09T12:30:15Z"

    def test_format_converts_to_utc(self):
        value = datetime(2026, 2, 9, 13, 0, tzinfo=timezone(timedelta(hours=1)))

        assert format_timestamp(value) == "2026-02-09T12:00:00Z"

    def test_parse_zulu(self):
        assert parse_timestamp("2026-02-09T12:00:00Z") == datetime(2026, 2, 9, 12, 0, tzinfo=timezone.utc)

    def test_parse_offset(self):
        parsed = parse_timestamp("2026-02-09T13:00:00+01:00")

        assert parsed == datetime(2026, 2, 9, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["yesterday", "2026-02-09T12:00:00", "2026-13-01T00:00:00Z"])
    def test_parse_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)


class TestConfigResolver:
    """Test per-field resolution with field, secret-wide and global levels."""

    def setup_method(self):
        self.resolver = ConfigResolver(DefaultsConfig())

    def test_global_defaults(self):
        spec = self.resolver.resolve({}, "password")

        assert spec == FieldSpec(name="password", type="string", length=32, curve="P-256")
        assert not spec.rotates

    def test_secret_wide_value_beats_default(self):
        annotations = {ANNOTATION_TYPE: "bytes", ANNOTATION_LENGTH: "64"}

        spec = self.resolver.resolve(annotations, "token")

        assert spec.type == "bytes"
        assert spec.length == 64

    def test_field_value_beats_secret_wide(self):
        annotations = {
            ANNOTATION_TYPE: "bytes",
            f"{ANNOTATION_TYPE}.password": "string",
            ANNOTATION_LENGTH: "64",
            f"{ANNOTATION_LENGTH}.password": "16",
        }

        password = self.resolver.resolve(annotations, "password")
        token = self.resolver.resolve(annotations, "token")

        assert (password.type, password.length) == ("string", 16)
        assert (token.type, token.length) == ("bytes", 64)

    def test_empty_field_value_falls_through(self):
        annotations = {f"{ANNOTATION_TYPE}.key": "", ANNOTATION_TYPE: "ed25519"}

        assert self.resolver.field_type(annotations, "key") == "ed25519"

    @pytest.mark.parametrize("bad", ["abc", "0", "-4", "1.5", "3_2", " 32 ", "٣٢", "３２"])
    def test_invalid_field_length_falls_through(self, bad):
        annotations = {f"{ANNOTATION_LENGTH}.password": bad, ANNOTATION_LENGTH: "20"}

        assert self.resolver.field_length(annotations, "password") == 20

    def test_invalid_lengths_everywhere_use_default(self):
        annotations = {f"{ANNOTATION_LENGTH}.password": "x", ANNOTATION_LENGTH: "0"}

        assert self.resolver.field_length(annotations, "password") == 32

    def test_rsa_default_bits(self):
        spec = self.resolver.resolve({f"{ANNOTATION_TYPE}.key": "rsa"}, "key")

        assert spec.type == "rsa"
        assert spec.length == 2048

    def test_rsa_explicit_bits(self):
        annotations = {f"{ANNOTATION_TYPE}.key": "rsa", f"{ANNOTATION_LENGTH}.key": "4096"}

        assert self.resolver.resolve(annotations, "key").length == 4096

    def test_custom_defaults(self):
        resolver = ConfigResolver(DefaultsConfig(type="bytes", length=48, curve="P-384", rsa_bits=3072))

        assert resolver.resolve({}, "x") == FieldSpec(name="x", type="bytes", length=48, curve="P-384")
        assert resolver.resolve({ANNOTATION_TYPE: "rsa"}, "x").length == 3072

    def test_curve_cascade(self):
        annotations = {ANNOTATION_CURVE: "P-384", f"{ANNOTATION_CURVE}.signing": "P-521"}

        assert self.resolver.field_curve(annotations, "signing") == "P-521"
        assert self.resolver.field_curve(annotations, "other") == "P-384"

    def test_rotation_interval_cascade(self):
        annotations = {ANNOTATION_ROTATE: "24h", f"{ANNOTATION_ROTATE}.password": "7d"}

        assert self.resolver.field_rotation_interval(annotations, "password") == timedelta(days=7)
        assert self.resolver.field_rotation_interval(annotations, "token") == timedelta(hours=24)

    def test_unparseable_rotation_falls_through(self):
        annotations = {f"{ANNOTATION_ROTATE}.password": "weekly", ANNOTATION_ROTATE: "1h"}

        assert self.resolver.field_rotation_interval(annotations, "password") == timedelta(hours=1)

    @pytest.mark.parametrize("value", ["9999999999d", "99999999999h", "٣h"])
    def test_out_of_range_rotation_falls_through(self, value):
        annotations = {f"{ANNOTATION_ROTATE}.password": value, ANNOTATION_ROTATE: "1h"}

        assert self.resolver.field_rotation_interval(annotations, "password") == timedelta(hours=1)

    def test_unparseable_rotation_everywhere_means_no_rotation(self):
        assert self.resolver.field_rotation_interval({ANNOTATION_ROTATE: "soon"}, "password") is None

    @pytest.mark.parametrize("value", ["0", "0s", "-1h"])
    def test_non_positive_rotation_disables_rotation(self, value):
        annotations = {f"{ANNOTATION_ROTATE}.password": value, ANNOTATION_ROTATE: "1h"}

        spec = self.resolver.resolve(annotations, "password")

        assert spec.rotation_interval is None
        assert not spec.rotates

    def test_rotates(self):
        spec = self.resolver.resolve({ANNOTATION_ROTATE: "30m"}, "password")

        assert spec.rotates
        assert spec.rotation_interval == timedelta(minutes=30)

    def test_generated_at(self):
        annotations = {ANNOTATION_GENERATED_AT: "2026-02-09T10:00:00Z"}

        assert self.resolver.generated_at(annotations) == datetime(2026, 2, 9, 10, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "last tuesday"])
    def test_generated_at_missing_or_invalid(self, value):
        annotations = {} if value is None else {ANNOTATION_GENERATED_AT: value}

        assert self.resolver.generated_at(annotations) is None
