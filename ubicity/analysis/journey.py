"""
learner journeys - one learner's experiences in time order,
with the points where new domains entered their learning.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.models import Experience
from ..index.experience_index import ExperienceIndex


@dataclass
class TimelineEntry:
    timestamp: str
    location: Optional[str]
    type: str
    domains: List[str]
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "location": self.location,
            "type": self.type,
            "domains": list(self.domains),
            "description": self.description,
        }


@dataclass
class DomainEvolution:
    """domains a learner met for the first time at one step."""
    timestamp: str
    new_domains: List[str]
    context: Optional[str]  # location name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "new_domains": list(self.new_domains),
            "context": self.context,
        }


@dataclass
class LearnerJourney:
    learner_id: str
    timeline: List[TimelineEntry] = field(default_factory=list)
    domain_evolution: List[DomainEvolution] = field(default_factory=list)
    questions_emerged: List[str] = field(default_factory=list)

    @property
    def experience_count(self) -> int:
        return len(self.timeline)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "learner_id": self.learner_id,
            "experience_count": self.experience_count,
            "timeline": [t.to_dict() for t in self.timeline],
            "domain_evolution": [d.to_dict() for d in self.domain_evolution],
            "questions_emerged": list(self.questions_emerged),
        }


class JourneyTracker:
    """reconstructs learner journeys from the learner index."""

    def __init__(self, index: ExperienceIndex):
        self.index = index

    def sorted_experiences(self, learner_id: str) -> List[Experience]:
        """
        learner's records by timestamp ascending.
        equal timestamps keep ingestion order (sorted() is stable).
        """
        return sorted(
            self.index.for_learner(learner_id),
            key=lambda e: e.parsed_timestamp()
        )

    def get_journey(self, learner_id: str) -> Optional[LearnerJourney]:
        """journey for a learner, None if the learner is unknown."""
        if learner_id not in self.index.learner_index:
            return None

        experiences = self.sorted_experiences(learner_id)

        timeline = [
            TimelineEntry(
                timestamp=e.timestamp,
                location=e.location_name,
                type=e.experience.type,
                domains=list(e.domains),
                description=e.experience.description,
            )
            for e in experiences
        ]

        questions = []
        for e in experiences:
            questions.extend(e.next_questions)

        return LearnerJourney(
            learner_id=learner_id,
            timeline=timeline,
            domain_evolution=self.track_domain_evolution(experiences),
            questions_emerged=questions,
        )

    def track_domain_evolution(self, experiences: List[Experience]) -> List[DomainEvolution]:
        """
        walk time-ordered experiences, emitting only newly seen domains.
        experiences must already be sorted.
        """
        evolution = []
        seen = set()

        for experience in experiences:
            new_domains = [
                d for d in experience.experience.unique_domains()
                if d not in seen
            ]
            if not new_domains:
                continue

            evolution.append(DomainEvolution(
                timestamp=experience.timestamp,
                new_domains=new_domains,
                context=experience.location_name,
            ))
            seen.update(new_domains)

        return evolution

    def all_journeys(self) -> List[LearnerJourney]:
        """journeys for every learner, in first-appearance order."""
        return [self.get_journey(learner_id) for learner_id in self.index.learner_index]
