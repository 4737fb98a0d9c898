"""Tests for Path, ReferencePath and PayloadTemplate."""

import pytest

from floe.errors import InvalidWorkflowError, PathError
from floe.workflow import Context, Path, PayloadTemplate, ReferencePath


class TestPath:
    """Tests for read-only paths."""

    def test_requires_dollar(self):
        """Test paths must start with $."""
        with pytest.raises(InvalidWorkflowError):
            Path("foo")

    def test_root_returns_input(self):
        """Test $ returns the whole input."""
        assert Path("$").value({}, {"a": 1}) == {"a": 1}

    def test_single_match_returns_value(self):
        """Test a single match is returned unwrapped."""
        assert Path("$.a.b").value({}, {"a": {"b": [1, 2]}}) == [1, 2]

    def test_no_match_returns_none(self):
        """Test a missing key returns None."""
        assert Path("$.missing").value({}, {"a": 1}) is None

    def test_several_matches_return_list(self):
        """Test several matches are returned as a list."""
        assert Path("$.items[*].id").value({}, {"items": [{"id": 1}, {"id": 2}]}) == [1, 2]

    def test_context_path_reads_context(self):
        """Test $$ addresses the context rather than the input."""
        context = Context(input={"x": 1})
        path = Path("$$.Execution.Input.x")

        assert path.context_path is True
        assert path.value(context, {"x": 2}) == 1

    def test_context_path_accepts_plain_dict(self):
        """Test $$ paths work against a plain mapping."""
        assert Path("$$.Map.Item.Index").value({"Map": {"Item": {"Index": 3}}}, {}) == 3

    def test_equality(self):
        """Test paths compare by payload and type."""
        assert Path("$.a") == Path("$.a")
        assert Path("$.a") != Path("$.b")
        assert Path("$.a") != ReferencePath("$.a")
        assert len({Path("$.a"), Path("$.a")}) == 1


class TestReferencePath:
    """Tests for writable reference paths."""

    @pytest.mark.parametrize("payload", ["$..a", "$.a[*]", "$.a[0,1]", "$.a[?(@.b)]", "$$.Execution", "$.a[1:2]"])
    def test_rejects_non_reference_paths(self, payload):
        """Test wildcards, filters, unions, slices and context paths are rejected."""
        with pytest.raises(InvalidWorkflowError):
            ReferencePath(payload)

    def test_path_components(self):
        """Test the parsed path is a list of keys and indexes."""
        assert ReferencePath("$.a[2].b").path == ["a", 2, "b"]
        assert ReferencePath("$").path == []

    def test_get(self):
        """Test reading a value."""
        assert ReferencePath("$.a[1]").get({"a": [10, 20]}) == 20

    def test_set_root_merges_maps(self):
        """Test setting the root merges a mapping into a mapping."""
        assert ReferencePath("$").set({"a": 1, "b": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_set_root_replaces_non_maps(self):
        """Test setting the root with a non-mapping replaces the document."""
        assert ReferencePath("$").set({"a": 1}, [1, 2]) == [1, 2]
        assert ReferencePath("$").set("text", {"a": 1}) == {"a": 1}

    def test_set_nested_creates_containers(self):
        """Test missing intermediate maps and lists are created."""
        assert ReferencePath("$.a.b").set({}, 1) == {"a": {"b": 1}}
        assert ReferencePath("$.a[1]").set({}, "x") == {"a": [None, "x"]}

    def test_set_does_not_modify_input(self):
        """Test set returns a new document."""
        data = {"a": {"b": 1}}
        result = ReferencePath("$.a.c").set(data, 2)

        assert result == {"a": {"b": 1, "c": 2}}
        assert data == {"a": {"b": 1}}

    def test_set_overwrites_scalar_intermediate(self):
        """Test a scalar in the way is replaced by a container."""
        assert ReferencePath("$.a.b").set({"a": 5}, 1) == {"a": {"b": 1}}

    def test_set_negative_index_out_of_range(self):
        """Test out of range negative index fails."""
        with pytest.raises(PathError):
            ReferencePath("$.a[-3]").set({"a": [1]}, 2)


class TestPayloadTemplate:
    """Tests for payload templates."""

    def test_resolves_path_keys(self):
        """Test keys ending in .$ are resolved and renamed."""
        template = PayloadTemplate({"name.$": "$.user.name", "static": "value"})

        assert template.value({}, {"user": {"name": "ada"}}) == {"name": "ada", "static": "value"}

    def test_resolves_nested_and_lists(self):
        """Test templates are resolved recursively through lists and maps."""
        template = PayloadTemplate({"outer": {"ids.$": "$.items[*].id"}, "list": [{"v.$": "$.v"}, 3]})

        result = template.value({}, {"items": [{"id": 1}, {"id": 2}], "v": True})

        assert result == {"outer": {"ids": [1, 2]}, "list": [{"v": True}, 3]}

    def test_resolves_context_paths(self):
        """Test $$ values read from the context."""
        template = PayloadTemplate({"index.$": "$$.Map.Item.Index"})

        assert template.value({"Map": {"Item": {"Index": 0}}}, {}) == {"index": 0}

    def test_dollar_string_values_resolved(self):
        """Test plain string values beginning with $ are resolved."""
        assert PayloadTemplate({"a": "$.b"}).value({}, {"b": 2}) == {"a": 2}

    def test_missing_value_becomes_none(self):
        """Test an unmatched path resolves to None."""
        assert PayloadTemplate({"a.$": "$.missing"}).value({}, {}) == {"a": None}

    def test_invalid_path_key_value(self):
        """Test .$ keys need a path string."""
        with pytest.raises(InvalidWorkflowError):
            PayloadTemplate({"a.$": 5})
        with pytest.raises(InvalidWorkflowError):
            PayloadTemplate({"a.$": "not-a-path"})

    def test_scalar_template(self):
        """Test scalars pass through unchanged."""
        assert PayloadTemplate(42).value({}, {}) == 42
