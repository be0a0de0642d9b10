#!/usr/bin/env python3
"""
tests for the mapper engine and json storage.

run with: pytest test_mapper.py -v
"""

import json

import pytest
from unittest.mock import patch

from ubicity.core.config import UbicityConfig
from ubicity.core.errors import IntegrityError, StorageError, ValidationError
from ubicity.core.storage import ExperienceStorage
from ubicity.mapper import UrbanKnowledgeMapper


# =============================================================================
# Storage Tests
# =============================================================================

class TestStorage:
    """test the directory-backed store."""

    def test_directories_created(self, storage):
        """test layout directories exist."""
        assert storage.experiences_dir.is_dir()
        assert storage.analyses_dir.is_dir()
        assert storage.maps_dir.is_dir()

    def test_save_and_load(self, storage):
        """test one file per record, keyed by id."""
        path = storage.save_experience({"id": "ubi-1", "learner": {"id": "a"}})
        assert path.name == "ubi-1.json"
        assert storage.load_experience("ubi-1") == {"id": "ubi-1", "learner": {"id": "a"}}
        assert storage.load_experience("ubi-missing") is None

    def test_load_all_sorted(self, storage):
        """test records come back in file-name order."""
        for experience_id in ("ubi-c", "ubi-a", "ubi-b"):
            storage.save_experience({"id": experience_id})
        assert [r["id"] for r in storage.load_all_experiences()] == ["ubi-a", "ubi-b", "ubi-c"]

    def test_load_all_missing_dir(self, tmp_path):
        """test an uninitialized store loads nothing."""
        assert ExperienceStorage(str(tmp_path / "nowhere")).load_all_experiences() == []

    def test_corrupt_file(self, storage):
        """test invalid json raises StorageError with the path."""
        (storage.experiences_dir / "ubi-bad.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError) as exc_info:
            storage.load_all_experiences()
        assert exc_info.value.path.endswith("ubi-bad.json")

    def test_path_outside_store_rejected(self, storage, tmp_path):
        """test ids that resolve outside experiences/ never touch disk."""
        with pytest.raises(StorageError):
            storage.save_experience({"id": "ubi-/../../../escaped"})
        with pytest.raises(StorageError):
            storage.load_experience("../escaped")
        assert not (tmp_path / "escaped.json").exists()
        assert not list(tmp_path.rglob("escaped.json"))

    def test_delete(self, storage):
        """test deleting a stored record."""
        storage.save_experience({"id": "ubi-1"})
        assert storage.delete_experience("ubi-1")
        assert not storage.delete_experience("ubi-1")

    def test_save_report_and_map(self, storage):
        """test snapshots land in their directories."""
        report_path = storage.save_report({"summary": {}})
        assert report_path.parent == storage.analyses_dir
        assert report_path.name.startswith("report-")
        map_path = storage.save_map("hotspots.geojson", "{}")
        assert map_path.read_text(encoding="utf-8") == "{}"

    def test_stats(self, storage):
        """test file count and size."""
        storage.save_experience({"id": "ubi-1"})
        stats = storage.get_stats()
        assert stats["total_experiences"] == 1
        assert stats["total_size_kb"] >= 0


# =============================================================================
# Mapper Tests
# =============================================================================

class TestCapture:
    """test capture: validate, persist, index."""

    def test_capture_persists_and_indexes(self, mapper, make_raw):
        """test a captured record is on disk and in the index."""
        experience_id = mapper.capture_experience(make_raw(domains=["math", "art"]))

        assert experience_id.startswith("ubi-")
        assert experience_id in mapper.experiences
        stored = mapper.storage.load_experience(experience_id)
        assert stored["learner"]["id"] == "alex"
        assert stored["experience"]["domains"] == ["math", "art"]

    def test_capture_defaults_id_and_timestamp(self, mapper, make_raw):
        """test id and timestamp are generated when missing."""
        experience_id = mapper.capture_experience(make_raw(timestamp=None))
        assert mapper.experiences[experience_id].timestamp

    def test_capture_invalid_not_stored(self, mapper, make_raw):
        """test validation failure touches neither disk nor index."""
        with pytest.raises(ValidationError):
            mapper.capture_experience(make_raw(location=""))
        assert len(mapper.experiences) == 0
        assert mapper.storage.load_all_experiences() == []

    def test_storage_failure_leaves_index_untouched(self, mapper, make_raw):
        """test failed persistence means the record is not indexed."""
        with patch.object(
            mapper.storage, "save_experience",
            side_effect=StorageError("disk full", "/tmp/x.json")
        ):
            with pytest.raises(StorageError):
                mapper.capture_experience(make_raw(id="ubi-1"))

        assert "ubi-1" not in mapper.experiences
        assert mapper.index.learner_index == {}

    def test_capture_traversal_id_rejected(self, mapper, make_raw, tmp_path):
        """test an id with path segments fails validation and writes nothing."""
        with pytest.raises(ValidationError):
            mapper.capture_experience(make_raw(id="ubi-/../../../escaped"))
        assert not list(tmp_path.rglob("escaped.json"))
        assert len(mapper.experiences) == 0

    @pytest.mark.parametrize("payload", [["not", "a", "record"], "text", None, 42])
    def test_capture_non_object(self, mapper, payload):
        """test non-dict input surfaces as a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            mapper.capture_experience(payload)
        assert exc_info.value.errors == ["experience must be an object"]
        assert len(mapper.experiences) == 0

    def test_experiences_is_a_copy(self, mapper, make_raw):
        """test callers cannot change the record set through the property."""
        mapper.capture_experience(make_raw(id="ubi-1"))
        mapper.experiences.clear()
        assert "ubi-1" in mapper.experiences
        assert len(mapper.index) == 1

    def test_conflicting_capture(self, mapper, make_raw):
        """test re-capturing an id with new content is refused before writing."""
        mapper.capture_experience(make_raw(id="ubi-1", description="first"))
        with pytest.raises(IntegrityError):
            mapper.capture_experience(make_raw(id="ubi-1", description="changed"))
        assert mapper.storage.load_experience("ubi-1")["experience"]["description"] == "first"

    def test_capture_is_timed(self, mapper, make_raw):
        """test capture feeds the performance monitor."""
        mapper.capture_experience(make_raw())
        assert mapper.performance_stats()["capture"]["count"] == 1


class TestLoadAll:
    """test replaying the store into the index."""

    def test_reload_roundtrip(self, tmp_path, make_raw):
        """test a fresh mapper sees what an earlier one captured."""
        config = UbicityConfig.minimal(str(tmp_path / "data"))
        first = UrbanKnowledgeMapper(config=config)
        first.initialize()
        first.capture_experience(make_raw(id="ubi-1", domains=["a", "b"], coordinates=(1.0, 2.0)))
        first.capture_experience(make_raw(id="ubi-2", learner="sam"))

        second = UrbanKnowledgeMapper.open(config=config)
        assert set(second.experiences) == {"ubi-1", "ubi-2"}
        assert second.experiences["ubi-1"].to_dict() == first.experiences["ubi-1"].to_dict()

    def test_strict_raises_on_invalid(self, mapper):
        """test strict load refuses invalid stored records."""
        mapper.storage.save_experience({"id": "ubi-bad", "learner": {}})
        with pytest.raises(ValidationError):
            mapper.load_all()

    def test_lenient_skips_invalid(self, mapper, make_raw):
        """test non-strict load skips invalid stored records."""
        mapper.capture_experience(make_raw(id="ubi-good"))
        mapper.storage.save_experience({"id": "ubi-bad", "learner": {}})

        fresh = UrbanKnowledgeMapper(storage=mapper.storage, config=mapper.config)
        assert fresh.load_all(strict=False) == 1
        assert list(fresh.experiences) == ["ubi-good"]

    def test_env_data_dir(self, tmp_path, monkeypatch):
        """test UBICITY_DATA_DIR points the default config."""
        monkeypatch.setenv("UBICITY_DATA_DIR", str(tmp_path / "env-data"))
        config = UbicityConfig.from_env()
        assert config.storage.data_dir == str(tmp_path / "env-data")


class TestMapperAnalysis:
    """test analyzer passthroughs and report persistence."""

    @pytest.fixture
    def loaded(self, mapper, make_raw):
        mapper.capture_experience(make_raw(id="ubi-1", domains=["math", "art"],
                                           timestamp="2024-01-01T10:00:00Z"))
        mapper.capture_experience(make_raw(id="ubi-2", type="workshop", domains=["math", "music"],
                                           timestamp="2024-01-02T10:00:00Z"))
        mapper.capture_experience(make_raw(id="ubi-3", learner="sam", location="Park",
                                           domains=["biology"], timestamp="2024-01-03T10:00:00Z"))
        return mapper

    def test_passthroughs(self, loaded):
        """test analyzers reach the shared index."""
        assert [h.name for h in loaded.find_hotspots()] == ["Library"]
        assert len(loaded.find_interdisciplinary_connections()) == 2
        assert loaded.generate_domain_network().node_size("math") == 2
        assert loaded.get_journey("sam").experience_count == 1
        assert len(loaded.all_journeys()) == 2
        assert set(loaded.map_by_location()) == {"Library", "Park"}

    def test_generate_report_saves_snapshot(self, loaded):
        """test report snapshot is written to analyses/."""
        report = loaded.generate_report()
        files = list(loaded.storage.analyses_dir.glob("report-*.json"))
        assert len(files) == 1
        saved = json.loads(files[0].read_text(encoding="utf-8"))
        assert saved["summary"] == report.summary.to_dict()

    def test_generate_report_without_persist(self, loaded):
        """test persist=False writes nothing."""
        loaded.generate_report(persist=False)
        assert list(loaded.storage.analyses_dir.glob("*.json")) == []

    def test_voyant_corpus(self, loaded):
        """test one text document per experience."""
        corpus = loaded.export_to_voyant()
        assert len(corpus) == 3
        assert corpus[0]["title"] == "Library - reading"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
