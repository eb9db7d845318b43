"""
Pytest configuration and shared fixtures for entity-schema tests.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure src is in path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from entity_schema import Entity  # noqa: E402


@pytest.fixture
def social_entity():
    """Entity exposing four string social handles."""
    return Entity().add("qq", "skype", "facebook", "twitter", {"type": "string"})


@pytest.fixture
def user_entity(social_entity):
    """User entity built with add(), covering every option kind."""
    entity = Entity()
    entity.add("name", "city", {"type": "string"})
    entity.add("age", {"type": "number", "default": 0})
    entity.add("gender", {"type": "string", "default": "unknown"})
    entity.add(
        "is_adult",
        {"type": "boolean"},
        lambda obj, options, key: bool(obj) and (obj.get("age") or 0) >= 18,
    )
    entity.add(
        "points",
        {"value": 100, "if": lambda obj, options, key: (obj.get("age") or 0) >= 18},
    )
    entity.add("description", {"type": "string", "as": "introduction"})
    entity.add(
        "is_signed_in",
        {"type": "boolean"},
        lambda obj, options, key: bool(options.get("is_signed_in")),
    )
    entity.add("birthday", {"type": "string", "default": datetime(2015, 10, 10, 10, 0, 0)})
    entity.add("has_girlfriend", {"type": "boolean"})
    entity.add("social", {"using": social_entity})
    entity.add("habits", {"type": ["string"]})
    return entity


@pytest.fixture
def family_entity():
    """Entity with an inline array sub-schema."""
    return Entity(
        {
            "name": {"type": "string"},
            "age": {"type": "number"},
            "children": [
                {
                    "id": {"type": "number"},
                    "name": {"type": "string"},
                }
            ],
        }
    )
