"""
location aggregation and hotspot ranking.
a hotspot is a place whose experiences span many distinct domains.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from ..core.config import AnalysisConfig
from ..core.models import Coordinates
from ..index.experience_index import ExperienceIndex


logger = logging.getLogger("ubicity.analysis.locations")


@dataclass
class LocationSummary:
    """aggregate view of every experience at one location."""
    name: str
    count: int
    learners: int                          # distinct learner ids
    domains: List[str] = field(default_factory=list)  # first-seen order
    types: List[str] = field(default_factory=list)    # first-seen order
    coordinates: Optional[Coordinates] = None         # first ingested record wins

    @property
    def diversity(self) -> int:
        return len(self.domains)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.name,
            "count": self.count,
            "learners": self.learners,
            "domains": list(self.domains),
            "types": list(self.types),
            "diversity": self.diversity,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
        }


class LocationAggregator:
    """
    builds per-location summaries from the location index.
    read-only; every call returns fresh summaries.
    """

    def __init__(self, index: ExperienceIndex, config: Optional[AnalysisConfig] = None):
        self.index = index
        self.config = config or AnalysisConfig()

    def summarize(self, location_name: str) -> Optional[LocationSummary]:
        experiences = self.index.at_location(location_name)
        if not experiences:
            return None

        domains: Dict[str, None] = {}
        types: Dict[str, None] = {}
        learners = set()

        for experience in experiences:
            for domain in experience.domains:
                domains.setdefault(domain, None)
            types.setdefault(experience.experience.type, None)
            learners.add(experience.learner_id)

        first = experiences[0].coordinates

        return LocationSummary(
            name=location_name,
            count=len(experiences),
            learners=len(learners),
            domains=list(domains),
            types=list(types),
            coordinates=replace(first) if first is not None else None,
        )

    def map_by_location(self) -> Dict[str, LocationSummary]:
        """location name -> summary, in first-appearance order."""
        location_map = {}
        for location_name in self.index.location_index:
            location_map[location_name] = self.summarize(location_name)
        return location_map

    def find_hotspots(self, min_diversity: Optional[int] = None) -> List[LocationSummary]:
        """
        locations with diversity >= min_diversity, most diverse first.
        equal diversity keeps first-appearance order.
        """
        if min_diversity is None:
            min_diversity = self.config.hotspot_min_diversity

        candidates = [
            summary for summary in self.map_by_location().values()
            if summary.diversity >= min_diversity
        ]
        hotspots = sorted(candidates, key=lambda s: s.diversity, reverse=True)

        logger.debug(f"{len(hotspots)} hotspots at min diversity {min_diversity}")
        return hotspots
