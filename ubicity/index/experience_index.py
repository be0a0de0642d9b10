"""
experience index - the record set plus three derived lookups.
location -> ids, domain -> ids, learner -> ids.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from ..core.errors import IntegrityError, ValidationError
from ..core.models import Experience


logger = logging.getLogger("ubicity.index")


class ExperienceIndex:
    """
    in-memory index over validated experiences.

    mutated only by ingest() / bulk_load(); analyzers only read.
    record order is ingestion order and is kept for deterministic output.
    """

    def __init__(self):
        self.experiences: Dict[str, Experience] = {}

        self.location_index: Dict[str, Set[str]] = {}
        self.domain_index: Dict[str, Set[str]] = {}
        self.learner_index: Dict[str, Set[str]] = {}

        # id -> ingestion ordinal
        self._sequence: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.experiences)

    def __contains__(self, experience_id: str) -> bool:
        return experience_id in self.experiences

    def check(self, experience: Experience):
        """
        raise if the record cannot be ingested.
        identical re-ingestion passes (it is a no-op).
        """
        missing = experience.missing_required_fields()
        if missing:
            raise ValidationError(
                [f"{path}: required" for path in missing],
                experience_id=experience.id
            )

        existing = self.experiences.get(experience.id)
        if existing is not None and existing.to_dict() != experience.to_dict():
            raise IntegrityError(experience.id)

    def ingest(self, experience: Experience) -> str:
        """add one record and update the indices; returns its id."""
        self.check(experience)

        if experience.id in self.experiences:
            logger.debug(f"experience {experience.id} already indexed, skipping")
            return experience.id

        self._sequence[experience.id] = len(self._sequence)
        self.experiences[experience.id] = experience
        self._update_indices(experience)
        return experience.id

    def bulk_load(self, experiences: Iterable[Experience]) -> int:
        """ingest many records in any order; returns the record-set size."""
        before = len(self.experiences)
        for experience in experiences:
            self.ingest(experience)
        logger.info(f"bulk load added {len(self.experiences) - before} experiences")
        return len(self.experiences)

    def _update_indices(self, experience: Experience):
        experience_id = experience.id

        location_name = experience.location_name
        if location_name:
            self.location_index.setdefault(location_name, set()).add(experience_id)

        for domain in experience.domains:
            self.domain_index.setdefault(domain, set()).add(experience_id)

        self.learner_index.setdefault(experience.learner_id, set()).add(experience_id)

    # lookups

    def get(self, experience_id: str) -> Optional[Experience]:
        return self.experiences.get(experience_id)

    def ordered(self, experience_ids: Iterable[str]) -> List[Experience]:
        """records for the given ids, in ingestion order."""
        ids = sorted(experience_ids, key=lambda i: self._sequence[i])
        return [self.experiences[i] for i in ids]

    def at_location(self, location_name: str) -> List[Experience]:
        return self.ordered(self.location_index.get(location_name, ()))

    def with_domain(self, domain: str) -> List[Experience]:
        return self.ordered(self.domain_index.get(domain, ()))

    def for_learner(self, learner_id: str) -> List[Experience]:
        return self.ordered(self.learner_index.get(learner_id, ()))

    def stats(self) -> Dict[str, int]:
        return {
            "experiences": len(self.experiences),
            "learners": len(self.learner_index),
            "locations": len(self.location_index),
            "domains": len(self.domain_index),
        }
