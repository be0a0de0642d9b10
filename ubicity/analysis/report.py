"""
report assembler - one consistent snapshot of every analyzer plus summary counts.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.config import AnalysisConfig
from ..index.experience_index import ExperienceIndex
from .connections import InterdisciplinaryConnection, find_interdisciplinary_connections
from .locations import LocationAggregator, LocationSummary
from .network import DomainNetwork, generate_domain_network


logger = logging.getLogger("ubicity.analysis.report")


@dataclass
class ReportSummary:
    total_experiences: int = 0
    unique_learners: int = 0
    unique_locations: int = 0
    unique_domains: int = 0
    interdisciplinary_experiences: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_experiences": self.total_experiences,
            "unique_learners": self.unique_learners,
            "unique_locations": self.unique_locations,
            "unique_domains": self.unique_domains,
            "interdisciplinary_experiences": self.interdisciplinary_experiences,
        }


@dataclass
class AnalysisReport:
    """complete analysis snapshot."""
    generated: str
    summary: ReportSummary
    learning_hotspots: List[LocationSummary] = field(default_factory=list)
    interdisciplinary_connections: List[InterdisciplinaryConnection] = field(default_factory=list)
    domain_network: DomainNetwork = field(default_factory=DomainNetwork)
    location_map: Dict[str, LocationSummary] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated": self.generated,
            "summary": self.summary.to_dict(),
            "learning_hotspots": [h.to_dict() for h in self.learning_hotspots],
            "interdisciplinary_connections": [c.to_dict() for c in self.interdisciplinary_connections],
            "domain_network": self.domain_network.to_dict(),
            "location_map": {name: s.to_dict() for name, s in self.location_map.items()},
        }


class ReportAssembler:
    """
    runs every analyzer against one index and packages the results.

    the location map has no diversity floor; the hotspot view uses
    config.hotspot_min_diversity. connections are truncated to
    config.report_connection_limit, in ingestion order.
    """

    def __init__(self, index: ExperienceIndex, config: Optional[AnalysisConfig] = None):
        self.index = index
        self.config = config or AnalysisConfig()

    def generate_report(self) -> AnalysisReport:
        aggregator = LocationAggregator(self.index, self.config)

        connections = find_interdisciplinary_connections(self.index)

        summary = ReportSummary(
            total_experiences=len(self.index.experiences),
            unique_learners=len(self.index.learner_index),
            unique_locations=len(self.index.location_index),
            unique_domains=len(self.index.domain_index),
            interdisciplinary_experiences=len(connections),
        )

        report = AnalysisReport(
            generated=datetime.now(timezone.utc).isoformat(),
            summary=summary,
            learning_hotspots=aggregator.find_hotspots(self.config.hotspot_min_diversity),
            interdisciplinary_connections=connections[:self.config.report_connection_limit],
            domain_network=generate_domain_network(self.index),
            location_map=aggregator.map_by_location(),
        )

        logger.info(
            f"report: {summary.total_experiences} experiences, "
            f"{len(report.learning_hotspots)} hotspots, "
            f"{summary.interdisciplinary_experiences} interdisciplinary"
        )
        return report
