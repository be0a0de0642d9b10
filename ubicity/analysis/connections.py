"""
interdisciplinary connections - experiences that span more than one domain.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..index.experience_index import ExperienceIndex


@dataclass
class InterdisciplinaryConnection:
    id: str
    domains: List[str]
    description: str
    location: Optional[str]
    unexpected: List[str] = field(default_factory=list)  # outcome.connections_made

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "domains": list(self.domains),
            "description": self.description,
            "location": self.location,
            "unexpected": list(self.unexpected),
        }


def find_interdisciplinary_connections(index: ExperienceIndex) -> List[InterdisciplinaryConnection]:
    """
    one entry per record with two or more distinct domains.
    order is ingestion order, so truncating the list is reproducible.
    """
    connections = []
    for experience_id, experience in index.experiences.items():
        domains = experience.experience.unique_domains()
        if len(domains) < 2:
            continue

        connections.append(InterdisciplinaryConnection(
            id=experience_id,
            domains=domains,
            description=experience.experience.description,
            location=experience.location_name,
            unexpected=list(experience.connections_made),
        ))
    return connections
