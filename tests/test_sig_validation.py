"""
Tests for protocol checks and configurable limits.
"""

import json

import pytest
from dbussig import (
    check, validate, Signature, SignatureLimits, DEFAULT_LIMITS,
    load_limits, limits_from_env, ValidationError, ErrorSeverity,
    ArrayType, make_struct, make_dictionary, INT32, STRING, VARIANT,
)
from dbussig.config import limits_from_dict


def nested_arrays(depth, inner=INT32):
    value = inner
    for _ in range(depth):
        value = ArrayType(value)
    return value


def nested_structs(depth, inner=INT32):
    value = inner
    for _ in range(depth):
        value = make_struct(value)
    return value


class TestNesting:
    """Test the depth limits."""

    def test_array_depth_at_limit(self):
        """32 nested arrays are allowed."""
        result = check([nested_arrays(32)])
        assert not result.has_errors

    def test_array_depth_over_limit(self):
        """33 nested arrays are reported once."""
        result = check([nested_arrays(33)])
        assert [d.code for d in result.diagnostics] == ["E202"]
        assert result.diagnostics[0].span.start.offset == 32

    def test_struct_depth_over_limit(self):
        """33 nested structs are reported."""
        result = check([nested_structs(33)])
        assert [d.code for d in result.diagnostics] == ["E203"]

    def test_total_depth_over_limit(self):
        """Arrays and structs together count toward the total."""
        limits = SignatureLimits(max_total_depth=3)
        value = ArrayType(make_struct(ArrayType(make_struct(INT32))))
        result = check([value], limits)
        assert [d.code for d in result.diagnostics] == ["E204"]

    def test_deep_struct_tree_checked(self):
        """Very deep hand-built structs are reported, not a RecursionError."""
        result = check([nested_structs(3000)])
        assert [d.code for d in result.diagnostics] == ["E201", "E203", "E204"]
        assert result.diagnostics[1].span.start.offset == 32

    def test_parsed_signature_over_limit(self):
        """A signature that parses can still fail validation."""
        sig = Signature.from_string("a" * 33 + "i")
        with pytest.raises(ValidationError) as exc_info:
            sig.validate()
        assert exc_info.value.code == "E202"


class TestDictionaryEntries:
    """Test where dict entries may appear."""

    def test_inside_array(self):
        """a{s} is accepted."""
        result = check([ArrayType(make_dictionary(STRING))])
        assert not result.has_errors
        assert not result.has_warnings

    def test_outside_array(self):
        """A bare dict entry is an error."""
        result = check([make_dictionary(STRING)])
        assert result.diagnostics[0].code == "E205"
        assert result.diagnostics[0].span.start.offset == 0

    def test_inside_struct(self):
        """A dict entry as a struct field is an error."""
        result = check([make_struct(INT32, make_dictionary(STRING))])
        assert result.diagnostics[0].code == "E205"
        assert result.diagnostics[0].span.start.offset == 2

    def test_non_basic_payload_warns(self):
        """A payload that is not a basic type is flagged, not rejected."""
        result = check([ArrayType(make_dictionary(make_struct(STRING, VARIANT)))])
        assert not result.has_errors
        assert result.warning_count == 1
        assert result.diagnostics[0].severity == ErrorSeverity.WARNING
        assert result.diagnostics[0].code == "W201"


class TestLength:
    """Test the encoded length check."""

    def test_too_long(self):
        """Hand-built trees can exceed the maximum length."""
        types = [INT32] * 256
        result = check(types)
        assert result.diagnostics[0].code == "E201"

    def test_validate_collects_all_errors(self):
        """ValidationError carries every error."""
        types = [make_dictionary(STRING)] * 100
        with pytest.raises(ValidationError) as exc_info:
            validate(types)
        codes = [d.code for d in exc_info.value.diagnostics]
        assert codes[0] == "E201"
        assert "E205" in codes

    def test_json_output(self):
        """Collector output is JSON serializable."""
        result = check([make_dictionary(STRING)])
        data = json.loads(json.dumps(result.to_json()))
        assert data["error_count"] == 1
        assert data["diagnostics"][0]["range"] == {"start": 0, "end": 3}


class TestLimitsConfig:
    """Test limits and YAML config loading."""

    def test_defaults(self):
        assert DEFAULT_LIMITS.min_length == 1
        assert DEFAULT_LIMITS.max_length == 255
        assert DEFAULT_LIMITS.max_array_depth == 32
        assert DEFAULT_LIMITS.max_struct_depth == 32
        assert DEFAULT_LIMITS.max_total_depth == 64

    def test_invalid_limits(self):
        with pytest.raises(ValueError):
            SignatureLimits(max_length=-1)
        with pytest.raises(ValueError):
            SignatureLimits(min_length=10, max_length=5)

    def test_depth_limits_capped(self):
        """Depth limits cannot exceed the parser's ceiling."""
        assert SignatureLimits(max_total_depth=255).max_total_depth == 255
        with pytest.raises(ValueError, match="at most 255"):
            SignatureLimits(max_total_depth=1000)
        with pytest.raises(ValueError):
            limits_from_dict({"max_array_depth": 256})

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown limit"):
            limits_from_dict({"max_depth": 3})

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "limits.yaml"
        path.write_text(
            'schema_version: "1.0"\n'
            'limits:\n'
            '  max_length: 16\n'
            '  max_array_depth: 2\n'
        )
        limits = load_limits(path)
        assert limits.max_length == 16
        assert limits.max_array_depth == 2
        assert limits.max_struct_depth == 32

    def test_load_empty_yaml(self, tmp_path):
        path = tmp_path / "limits.yaml"
        path.write_text("")
        assert load_limits(path) == DEFAULT_LIMITS

    def test_load_bad_schema(self, tmp_path):
        path = tmp_path / "limits.yaml"
        path.write_text('schema_version: "2.0"\n')
        with pytest.raises(ValueError, match="Unsupported schema version"):
            load_limits(path)

    def test_load_bad_root(self, tmp_path):
        path = tmp_path / "limits.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="expected dict"):
            load_limits(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_limits(tmp_path / "nope.yaml")

    def test_from_env(self, tmp_path):
        path = tmp_path / "limits.yaml"
        path.write_text("limits:\n  max_length: 8\n")
        assert limits_from_env({"DBUSSIG_CONFIG": str(path)}).max_length == 8
        assert limits_from_env({}) == DEFAULT_LIMITS

    def test_limits_apply_to_validation(self):
        limits = SignatureLimits(max_array_depth=2)
        result = check([nested_arrays(3)], limits)
        assert result.diagnostics[0].code == "E202"
