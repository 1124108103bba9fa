"""
Global pytest configuration and fixtures.
"""

import pytest


@pytest.fixture
def swagger_pets() -> dict:
    """Swagger 2 style polymorphic pets: the discriminator value names the definition."""
    return {
        "Pet": {
            "type": "object",
            "discriminator": "petType",
            "required": ["petType"],
            "properties": {
                "petType": {"type": "string"},
                "name": {"type": "string"},
            },
        },
        "Cat": {
            "allOf": [
                {"$ref": "#/definitions/Pet"},
                {
                    "type": "object",
                    "required": ["huntingSkill"],
                    "properties": {
                        "huntingSkill": {
                            "type": "string",
                            "enum": ["clueless", "lazy", "adventurous", "aggressive"],
                        }
                    },
                },
            ]
        },
        "Dog": {
            "allOf": [
                {"$ref": "#/definitions/Pet"},
                {
                    "type": "object",
                    "required": ["packSize"],
                    "properties": {"packSize": {"type": "integer", "minimum": 0}},
                },
            ]
        },
    }


@pytest.fixture
def openapi_pets() -> dict:
    """OpenAPI 3 style polymorphic pets with a discriminator mapping."""
    return {
        "Pet": {
            "type": "object",
            "required": ["kind"],
            "properties": {"kind": {"type": "string"}},
            "discriminator": {
                "propertyName": "kind",
                "mapping": {"kitty": "#/components/schemas/Cat"},
            },
        },
        "Cat": {
            "allOf": [
                {"$ref": "#/components/schemas/Pet"},
                {"type": "object", "properties": {"lives": {"type": "integer", "maximum": 9}}},
            ]
        },
    }
