"""
urban knowledge mapper - the engine.
owns one index and one storage collaborator; analyzers read the index.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .core.config import UbicityConfig
from .core.errors import ValidationError
from .core.models import Experience, stamp_raw
from .core.schemas import safe_validate_experience, validate_experience
from .core.storage import ExperienceStorage
from .core.timing import PerformanceMonitor
from .index.experience_index import ExperienceIndex
from .analysis.connections import InterdisciplinaryConnection, find_interdisciplinary_connections
from .analysis.locations import LocationAggregator, LocationSummary
from .analysis.network import DomainNetwork, generate_domain_network
from .analysis.journey import JourneyTracker, LearnerJourney
from .analysis.report import AnalysisReport, ReportAssembler
from .export.formats import voyant_corpus


logger = logging.getLogger("ubicity.mapper")


class UrbanKnowledgeMapper:
    """
    maps learning experiences across urban space.

    capture order is validate -> persist -> index: a record that fails
    to persist never shows up in the index.
    """

    def __init__(
        self,
        storage: Optional[ExperienceStorage] = None,
        config: Optional[UbicityConfig] = None,
        monitor: Optional[PerformanceMonitor] = None
    ):
        self.config = config or UbicityConfig.default()
        self.storage = storage or ExperienceStorage(config=self.config.storage)
        self.monitor = monitor or PerformanceMonitor()
        self.index = ExperienceIndex()

    @classmethod
    def open(cls, data_dir: Optional[str] = None, config: Optional[UbicityConfig] = None) -> 'UrbanKnowledgeMapper':
        """create, initialize storage and load every stored record."""
        config = config or UbicityConfig.from_env()
        storage = ExperienceStorage(data_dir, config.storage)
        mapper = cls(storage=storage, config=config)
        mapper.initialize()
        mapper.load_all()
        return mapper

    def initialize(self):
        self.storage.ensure_directories()

    @property
    def experiences(self) -> Dict[str, Experience]:
        """copy of the record set; mutate only through ingest."""
        return dict(self.index.experiences)

    # ingestion

    def capture_experience(self, raw: Dict[str, Any]) -> str:
        """
        validate, persist, then index a raw record.
        storage errors propagate and leave the index untouched.
        """
        if not isinstance(raw, dict):
            raise ValidationError(["experience must be an object"])

        with self.monitor.timed("capture"):
            experience = validate_experience(stamp_raw(raw))
            self.index.check(experience)

            self.storage.save_experience(experience.to_dict())
            experience_id = self.index.ingest(experience)

        logger.info(f"captured experience {experience_id}")
        return experience_id

    def ingest(self, experience: Experience) -> str:
        """index an already-validated record without persisting it."""
        return self.index.ingest(experience)

    def bulk_load(self, experiences: Iterable[Experience]) -> int:
        return self.index.bulk_load(experiences)

    def load_all(self, strict: bool = True) -> int:
        """
        replay every stored record into the index.
        strict=False skips records that fail validation instead of raising.
        """
        with self.monitor.timed("load_all"):
            experiences = []
            for data in self.storage.load_all_experiences():
                result = safe_validate_experience(data)
                if result.success:
                    experiences.append(result.experience)
                    continue
                if strict:
                    raise ValidationError(result.errors, experience_id=data.get("id"))
                logger.warning(f"skipping invalid stored experience {data.get('id')}: {result.errors}")

            count = self.index.bulk_load(experiences)

        logger.info(f"loaded {count} experiences")
        return count

    # analyzers

    def find_interdisciplinary_connections(self) -> List[InterdisciplinaryConnection]:
        return find_interdisciplinary_connections(self.index)

    def map_by_location(self) -> Dict[str, LocationSummary]:
        return LocationAggregator(self.index, self.config.analysis).map_by_location()

    def find_hotspots(self, min_diversity: Optional[int] = None) -> List[LocationSummary]:
        return LocationAggregator(self.index, self.config.analysis).find_hotspots(min_diversity)

    def generate_domain_network(self) -> DomainNetwork:
        return generate_domain_network(self.index)

    def get_journey(self, learner_id: str) -> Optional[LearnerJourney]:
        return JourneyTracker(self.index).get_journey(learner_id)

    def all_journeys(self) -> List[LearnerJourney]:
        return JourneyTracker(self.index).all_journeys()

    def generate_report(self, persist: bool = True) -> AnalysisReport:
        """assemble the report; persist the snapshot unless told not to."""
        with self.monitor.timed("generate_report"):
            report = ReportAssembler(self.index, self.config.analysis).generate_report()
            if persist:
                self.storage.save_report(report.to_dict())
        return report

    def export_to_voyant(self) -> List[Dict[str, Any]]:
        return voyant_corpus(self.index)

    def performance_stats(self) -> Dict[str, Dict[str, float]]:
        return {name: stats.to_dict() for name, stats in self.monitor.get_all_stats().items()}
