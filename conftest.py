"""
shared fixtures for the ubicity test suite.
"""

import pytest

from ubicity.core.config import UbicityConfig
from ubicity.core.schemas import validate_experience
from ubicity.core.storage import ExperienceStorage
from ubicity.index.experience_index import ExperienceIndex
from ubicity.mapper import UrbanKnowledgeMapper


def _raw(
    id=None,
    learner="alex",
    location="Library",
    type="reading",
    description="read about bridges",
    domains=None,
    timestamp="2024-01-15T10:00:00Z",
    coordinates=None,
    questions=None,
    connections_made=None,
    privacy=None,
    **extra
):
    record = {
        "learner": {"id": learner},
        "context": {"location": {"name": location}},
        "experience": {
            "type": type,
            "description": description,
            "domains": list(domains or []),
        },
    }
    if id is not None:
        record["id"] = id
    if timestamp is not None:
        record["timestamp"] = timestamp
    if coordinates is not None:
        record["context"]["location"]["coordinates"] = {
            "latitude": coordinates[0], "longitude": coordinates[1]
        }
    if questions is not None or connections_made is not None:
        record["experience"]["outcome"] = {
            "next_questions": list(questions or []),
            "connections_made": list(connections_made or []),
        }
    if privacy is not None:
        record["privacy"] = {"level": privacy}
    record.update(extra)
    return record


@pytest.fixture
def make_raw():
    """factory for raw experience dicts."""
    return _raw


@pytest.fixture
def make_experience():
    """factory for validated experiences."""
    def factory(**kwargs):
        kwargs.setdefault("id", "ubi-test")
        return validate_experience(_raw(**kwargs))
    return factory


@pytest.fixture
def library_index(make_experience):
    """
    the three-record library scenario:
    all at Library, alice twice, bob once.
    """
    index = ExperienceIndex()
    index.bulk_load([
        make_experience(id="ubi-e1", learner="alice", location="Library",
                        type="reading", domains=["math"],
                        timestamp="2024-01-01T10:00:00Z"),
        make_experience(id="ubi-e2", learner="alice", location="Library",
                        type="workshop", domains=["math", "art"],
                        timestamp="2024-01-02T10:00:00Z"),
        make_experience(id="ubi-e3", learner="bob", location="Library",
                        type="conversation", domains=["art", "music"],
                        timestamp="2024-01-03T10:00:00Z"),
    ])
    return index


@pytest.fixture
def storage(tmp_path):
    """storage rooted in a temp directory."""
    store = ExperienceStorage(str(tmp_path / "ubicity-data"))
    store.ensure_directories()
    return store


@pytest.fixture
def mapper(tmp_path):
    """initialized mapper over an empty temp store."""
    config = UbicityConfig.minimal(str(tmp_path / "ubicity-data"))
    engine = UrbanKnowledgeMapper(config=config)
    engine.initialize()
    return engine
