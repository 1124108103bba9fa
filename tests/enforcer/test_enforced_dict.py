"""Tests for openapi_enforcer.enforcer.object module."""

import pytest

from openapi_enforcer import Enforcer, enforce, unwrap
from openapi_enforcer.config import EnforcerConfig
from openapi_enforcer.enforcer import EnforcedDict
from openapi_enforcer.errors import (
    DiscriminatorError,
    EnumError,
    LengthBoundError,
    RequiredPropertyError,
    TypeMismatchError,
    UniquenessError,
    UnknownPropertyError,
)

PERSON = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "maxLength": 5},
        "age": {"type": "integer", "minimum": 0},
    },
    "additionalProperties": False,
}

REQUIRED_ON = EnforcerConfig().with_overrides(enforce={"required": True})


class TestProperties:
    """Test property writes."""

    def test_declared_properties(self):
        """Test that declared properties are validated on write."""
        person = enforce(PERSON, {"name": "Al"})
        assert isinstance(person, EnforcedDict)
        person["age"] = 30
        with pytest.raises(LengthBoundError) as exc_info:
            person["name"] = "Alexander"
        assert exc_info.value.code == "ESESMAX"
        assert exc_info.value.path == "/name"
        with pytest.raises(TypeMismatchError, match="/age: Expected an integer"):
            person["age"] = "old"
        assert person == {"name": "Al", "age": 30}

    def test_additional_properties_false(self):
        """Test that undeclared keys are rejected."""
        person = enforce(PERSON, {})
        with pytest.raises(UnknownPropertyError) as exc_info:
            person["nickname"] = "Bo"
        assert exc_info.value.path == "/nickname"
        assert "nickname" not in person

    def test_additional_properties_schema(self):
        """Test that undeclared keys follow additionalProperties."""
        counts = enforce({"type": "object", "additionalProperties": {"type": "integer"}}, {})
        counts["a"] = 1
        with pytest.raises(TypeMismatchError):
            counts["b"] = "two"
        assert dict(counts) == {"a": 1}

    def test_schemaless_values_must_serialize(self):
        """Test that values without a schema must be serializable."""
        bag = enforce({"type": "object"}, {})
        bag["ok"] = {"list": [1, 2]}
        with pytest.raises(TypeMismatchError, match="Value is not serializable"):
            bag["fn"] = lambda: None
        assert list(bag) == ["ok"]

    def test_max_properties(self):
        """Test that adding past maxProperties is rejected, replacing is not."""
        limited = enforce({"type": "object", "maxProperties": 1}, {"a": 1})
        limited["a"] = 2
        with pytest.raises(LengthBoundError):
            limited["b"] = 1
        assert limited == {"a": 2}

    def test_auto_format(self):
        """Test that written values are coerced when autoFormat is on."""
        config = EnforcerConfig().with_overrides(populate={"autoFormat": True})
        person = enforce(PERSON, {}, config=config)
        person["age"] = "42"
        assert person["age"] == 42


class TestDeletion:
    """Test property deletion."""

    def test_required_off_by_default(self):
        """Test that required properties can be removed unless enabled."""
        person = enforce(PERSON, {"name": "Al"})
        del person["name"]
        assert person == {}

    def test_required(self):
        """Test that removing a required property is rejected."""
        person = enforce(PERSON, {"name": "Al", "age": 3}, config=REQUIRED_ON)
        with pytest.raises(RequiredPropertyError, match="Property is required: name"):
            del person["name"]
        with pytest.raises(RequiredPropertyError):
            person.pop("name")
        del person["age"]
        assert person == {"name": "Al"}

    def test_required_through_all_of(self):
        """Test that required properties of allOf members are honoured."""
        schema = {
            "allOf": [
                {"type": "object", "required": ["a"], "properties": {"a": {"type": "integer"}}},
                {"type": "object", "properties": {"b": {"type": "integer"}}},
            ]
        }
        value = enforce(schema, {"a": 1, "b": 2}, config=REQUIRED_ON)
        with pytest.raises(RequiredPropertyError):
            del value["a"]
        del value["b"]
        with pytest.raises(TypeMismatchError):
            value["b"] = "x"
        assert value == {"a": 1}

    def test_min_properties(self):
        """Test minProperties once enabled."""
        config = EnforcerConfig().with_overrides(enforce={"minProperties": True})
        value = enforce({"type": "object", "minProperties": 1}, {"a": 1}, config=config)
        with pytest.raises(LengthBoundError):
            del value["a"]

    def test_missing_key(self):
        """Test deleting an absent key."""
        with pytest.raises(KeyError):
            del enforce(PERSON, {})["name"]


class TestAtomicOperations:
    """Test update and clear."""

    def test_update_is_atomic(self):
        """Test that one bad value rejects the whole update."""
        person = enforce(PERSON, {"name": "Al"})
        with pytest.raises(TypeMismatchError):
            person.update({"name": "Bo", "age": "x"})
        assert person == {"name": "Al"}
        person.update({"name": "Bo"}, age=5)
        assert person == {"name": "Bo", "age": 5}

    def test_clear(self):
        """Test clearing with and without required enforcement."""
        enforce(PERSON, {"name": "Al"}).clear()
        person = enforce(PERSON, {"name": "Al"}, config=REQUIRED_ON)
        with pytest.raises(RequiredPropertyError):
            person.clear()
        assert person == {"name": "Al"}

    def test_setdefault(self):
        """Test the mapping mixins go through the checked paths."""
        person = enforce(PERSON, {})
        assert person.setdefault("age", 7) == 7
        with pytest.raises(TypeMismatchError):
            person.setdefault("name", 1)


class TestNesting:
    """Test lazily wrapped nested values."""

    def test_nested_objects(self):
        """Test that nested objects are enforced at their path."""
        schema = {
            "type": "object",
            "properties": {
                "owner": {"type": "object", "properties": {"age": {"type": "integer"}}},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
        }
        pet = enforce(schema, {"owner": {}, "tags": []})
        with pytest.raises(TypeMismatchError) as exc_info:
            pet["owner"]["age"] = "x"
        assert exc_info.value.path == "/owner/age"
        pet["owner"]["age"] = 3
        pet["tags"].push("cute")
        assert unwrap(pet) == {"owner": {"age": 3}, "tags": ["cute"]}

    def test_nested_writes_keep_parent_enum(self):
        """Test that a write through a nested object is checked against the parent's enum."""
        schema = {
            "type": "object",
            "properties": {"size": {"type": "object", "properties": {"w": {"type": "integer"}}}},
            "enum": [{"size": {"w": 1}}, {"size": {"w": 2}}],
        }
        box = enforce(schema, {"size": {"w": 1}})
        box["size"]["w"] = 2
        with pytest.raises(EnumError):
            box["size"]["w"] = 3
        assert box == {"size": {"w": 2}}

    def test_nested_writes_check_every_ancestor(self):
        """Test that a change two levels down is checked against the outer array."""
        schema = {
            "type": "array",
            "uniqueItems": True,
            "items": {
                "type": "object",
                "properties": {"tags": {"type": "array", "items": {"type": "string"}}},
            },
        }
        people = enforce(schema, [{"tags": ["a"]}, {"tags": ["a", "b"]}])
        with pytest.raises(UniquenessError):
            people[0]["tags"].push("b")
        assert people == [{"tags": ["a"]}, {"tags": ["a", "b"]}]
        people[0]["tags"].push("c")
        assert unwrap(people) == [{"tags": ["a", "c"]}, {"tags": ["a", "b"]}]

    def test_materialized_defaults(self):
        """Test that a missing value is built from defaults."""
        schema = {"type": "object", "properties": {"a": {"type": "integer", "default": 1}}}
        value = enforce(schema)
        assert value == {"a": 1}
        assert enforce({"type": "object"}) == {}

    def test_primitives_are_returned_plain(self):
        """Test that primitives are validated and returned as-is."""
        assert enforce({"type": "integer"}, 5) == 5
        assert enforce({"type": "string"}) is None
        assert enforce({"type": "string", "default": "x"}) == "x"
        with pytest.raises(LengthBoundError):
            enforce({"type": "string", "maxLength": 2}, "abc")


class TestDiscriminators:
    """Test discriminated objects."""

    def test_subtype_properties(self, swagger_pets):
        """Test that subtype properties are validated."""
        enforcer = Enforcer(EnforcerConfig(version="2.0"), swagger_pets)
        pet = enforcer.enforce(
            {"$ref": "#/definitions/Pet"}, {"petType": "Cat", "name": "Tom", "huntingSkill": "lazy"}
        )
        pet["huntingSkill"] = "aggressive"
        with pytest.raises(EnumError) as exc_info:
            pet["huntingSkill"] = "sleepy"
        assert exc_info.value.path == "/huntingSkill"

    def test_undefined_subtype(self, swagger_pets):
        """Test that switching to an undefined subtype is rejected."""
        enforcer = Enforcer(EnforcerConfig(version="2.0"), swagger_pets)
        pet = enforcer.enforce({"$ref": "#/definitions/Pet"}, {"petType": "Cat", "huntingSkill": "lazy"})
        with pytest.raises(DiscriminatorError):
            pet["petType"] = "Bird"
        assert pet["petType"] == "Cat"

    def test_switching_subtype_revalidates(self, swagger_pets):
        """Test that a discriminator write validates against the new subtype."""
        config = EnforcerConfig(version="2.0").with_overrides(enforce={"required": True})
        enforcer = Enforcer(config, swagger_pets)
        pet = enforcer.enforce({"$ref": "#/definitions/Pet"}, {"petType": "Cat", "huntingSkill": "lazy"})
        with pytest.raises(RequiredPropertyError, match="packSize"):
            pet["petType"] = "Dog"
        pet.update(petType="Dog", packSize=3)
        assert pet["petType"] == "Dog"


class TestRepr:
    """Test representation."""

    def test_repr(self):
        """Test the representation."""
        assert repr(enforce({"type": "object"}, {"a": 1})) == "EnforcedDict({'a': 1})"
