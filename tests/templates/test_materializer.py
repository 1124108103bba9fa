"""Tests for openapi_enforcer.templates.materializer module."""

from datetime import date

from openapi_enforcer.config import PopulateOptions
from openapi_enforcer.models import MISSING
from openapi_enforcer.templates import Materializer, materialize


class TestUnboundValues:
    """Test variables, templates and defaults for values that were not supplied."""

    def test_template(self):
        """Test that templates are filled from params."""
        result = Materializer(params={"name": "Ada"}).apply(
            {"type": "string", "x-template": "Hello, {name}"}
        )
        assert result.applied is True
        assert result.value == "Hello, Ada"

    def test_template_without_params(self):
        """Test that an unresolved template does not apply."""
        result = Materializer().apply({"type": "string", "x-template": "Hello, {name}"})
        assert result.applied is False
        assert result.value is MISSING
        assert materialize({"type": "string", "x-template": "{name}"}) is None

    def test_variable_precedence(self):
        """Test that a variable wins over a template and a default."""
        schema = {"type": "integer", "x-variable": "count", "x-template": "{other}", "default": 1}
        assert materialize(schema, params={"count": 3, "other": 4}) == 3
        assert materialize(schema, params={"other": 4}) == "4"
        assert materialize(schema) == 1

    def test_default_auto_format(self):
        """Test that defaults are coerced when autoFormat is on."""
        schema = {"type": "integer", "default": "5"}
        assert materialize(schema) == "5"
        assert materialize(schema, options=PopulateOptions(autoFormat=True)) == 5

        dated = {"type": "string", "format": "date", "default": "2020-01-02"}
        assert materialize(dated, options=PopulateOptions(autoFormat=True)) == date(2020, 1, 2)

    def test_defaults_use_params(self):
        """Test that string defaults pass through the injector."""
        schema = {"type": "string", "default": "Hi {name}"}
        assert materialize(schema, params={"name": "Bob"}) == "Hi Bob"
        options = PopulateOptions(defaultsUseParams=False)
        assert materialize(schema, params={"name": "Bob"}, options=options) == "Hi {name}"

    def test_object_default(self):
        """Test that an object default is itself materialized."""
        schema = {
            "type": "object",
            "default": {"a": 1},
            "properties": {"b": {"type": "integer", "default": 2}},
        }
        assert materialize(schema) == {"a": 1, "b": 2}

    def test_everything_disabled(self):
        """Test that nothing applies when every source is off."""
        options = PopulateOptions(defaults=False, templates=False, variables=False)
        result = Materializer(options=options).apply({"type": "integer", "default": 1})
        assert result.applied is False


class TestObjects:
    """Test object materialization."""

    def test_properties(self):
        """Test that properties are filled in."""
        schema = {
            "type": "object",
            "properties": {
                "greeting": {"type": "string", "x-template": "Hello, {name}"},
                "count": {"type": "integer", "default": 1},
                "plain": {"type": "string"},
            },
        }
        assert materialize(schema, params={"name": "Ada"}) == {"greeting": "Hello, Ada", "count": 1}

    def test_supplied_values_are_kept(self):
        """Test that supplied values win and the input is not mutated."""
        schema = {"type": "object", "properties": {"a": {"default": 1}, "b": {"default": 2}}}
        initial = {"a": 5}
        assert materialize(schema, initial_value=initial) == {"a": 5, "b": 2}
        assert initial == {"a": 5}

    def test_object_default_fills_partial_value(self):
        """Test that an object default supplies the keys a partial value lacks."""
        schema = {
            "type": "object",
            "default": {"a": 1, "b": 2},
            "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
        }
        initial = {"a": 5}
        result = Materializer().apply(schema, initial)
        assert result.applied is True
        assert result.value == {"a": 5, "b": 2}
        assert initial == {"a": 5}

    def test_object_default_respects_required_guard(self):
        """Test that a merged default is discarded when required keys stay missing."""
        schema = {
            "type": "object",
            "required": ["c"],
            "default": {"b": 2},
            "properties": {"b": {"type": "integer"}, "c": {"type": "integer"}},
        }
        options = PopulateOptions(ignoreMissingRequired=False)
        result = Materializer(options=options).apply(schema, {"a": 5})
        assert result.applied is False
        assert result.value == {"a": 5}

    def test_idempotent(self):
        """Test that materializing a materialized value changes nothing."""
        schema = {
            "type": "object",
            "properties": {
                "a": {"type": "integer", "default": 1},
                "nested": {"type": "object", "properties": {"b": {"type": "string", "default": "x"}}},
            },
        }
        first = materialize(schema)
        assert first == {"a": 1, "nested": {"b": "x"}}
        result = Materializer().apply(schema, first)
        assert result.applied is False
        assert result.value == first

    def test_additional_properties(self):
        """Test that additionalProperties schemas apply to undeclared keys."""
        schema = {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {"enabled": {"type": "boolean", "default": True}},
            },
        }
        assert materialize(schema, initial_value={"x": {}, "y": {"enabled": False}}) == {
            "x": {"enabled": True},
            "y": {"enabled": False},
        }

    def test_ignore_missing_required(self):
        """Test that an incomplete object can be discarded."""
        schema = {
            "type": "object",
            "required": ["b"],
            "properties": {"a": {"default": 1}, "b": {"type": "string"}},
        }
        assert materialize(schema) == {"a": 1}
        assert materialize(schema, options=PopulateOptions(ignoreMissingRequired=False)) is None

    def test_copy(self):
        """Test that untouched sub-values are shared unless copy is on."""
        schema = {"type": "object", "properties": {"a": {"default": 1}}}
        initial = {"tags": [1]}
        shared = materialize(schema, initial_value=initial)
        assert shared["tags"] is initial["tags"]
        copied = materialize(schema, initial_value=initial, options=PopulateOptions(copy=True))
        assert copied["tags"] == [1]
        assert copied["tags"] is not initial["tags"]


class TestArrays:
    """Test array materialization."""

    def test_items(self):
        """Test that every item is materialized."""
        schema = {
            "type": "array",
            "items": {"type": "object", "properties": {"n": {"type": "integer", "default": 0}}},
        }
        assert materialize(schema, initial_value=[{}, {"n": 5}]) == [{"n": 0}, {"n": 5}]

    def test_missing_array(self):
        """Test that a missing array without a default stays missing."""
        assert materialize({"type": "array", "items": {"default": 1}}) is None
        assert materialize({"type": "array", "default": [1, 2]}) == [1, 2]


class TestComposition:
    """Test allOf, references and discriminators."""

    def test_all_of_merges(self):
        """Test that allOf results are merged."""
        schema = {
            "allOf": [
                {"type": "object", "properties": {"a": {"default": 1}}},
                {"type": "object", "properties": {"b": {"default": 2}}},
            ]
        }
        assert materialize(schema) == {"a": 1, "b": 2}
        assert materialize(schema, options=PopulateOptions(allOf=False)) is None

    def test_references(self):
        """Test that references are followed."""
        definitions = {"Count": {"type": "integer", "default": 3}}
        schema = {"type": "object", "properties": {"count": {"$ref": "#/definitions/Count"}}}
        assert materialize(schema, definitions=definitions) == {"count": 3}

    def test_discriminator(self):
        """Test that the subtype named by the value contributes its defaults."""
        definitions = {
            "Pet": {
                "type": "object",
                "discriminator": "petType",
                "properties": {"petType": {"type": "string"}},
            },
            "Cat": {
                "allOf": [
                    {"$ref": "#/definitions/Pet"},
                    {"type": "object", "properties": {"lives": {"type": "integer", "default": 9}}},
                ]
            },
        }
        result = materialize(
            {"$ref": "#/definitions/Pet"},
            definitions=definitions,
            initial_value={"petType": "Cat"},
            version="2.0",
        )
        assert result == {"petType": "Cat", "lives": 9}

    def test_self_referencing_schema(self):
        """Test that recursive schemas terminate."""
        definitions = {
            "Node": {
                "type": "object",
                "properties": {
                    "label": {"type": "string", "default": "n"},
                    "child": {"$ref": "#/definitions/Node"},
                },
            }
        }
        result = materialize({"$ref": "#/definitions/Node"}, definitions=definitions)
        assert result["label"] == "n"

    def test_self_referencing_object_default(self):
        """Test that a recursive schema with an object default stops at max depth."""
        definitions = {
            "Node": {
                "type": "object",
                "default": {},
                "properties": {"child": {"$ref": "#/definitions/Node"}},
            }
        }
        result = Materializer(definitions, max_depth=5).apply({"$ref": "#/definitions/Node"})
        assert result.applied is True
        assert result.value == {"child": {"child": {}}}

        deep = materialize({"$ref": "#/definitions/Node"}, definitions=definitions)
        assert isinstance(deep, dict)
        assert "child" in deep
