"""
core data models for ubicity.
one learning experience = who learned, where, what.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum
from datetime import datetime, timezone
import copy
import uuid


ID_PREFIX = "ubi-"
SCHEMA_VERSION = "0.2.0"


class PrivacyLevel(Enum):
    """how widely a record may be shared."""
    PRIVATE = "private"      # never leaves the local store
    ANONYMOUS = "anonymous"  # shareable once anonymized
    PUBLIC = "public"        # shareable as-is (pii still redacted)


def generate_id() -> str:
    """fresh experience id: fixed prefix + uuid4."""
    return f"{ID_PREFIX}{uuid.uuid4()}"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    """
    parse an ISO-8601 timestamp.
    naive values are treated as UTC so mixed inputs stay comparable.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Coordinates:
    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass
class Learner:
    """learner pseudonym plus optional descriptive fields."""
    id: str = ""
    name: Optional[str] = None
    background: Optional[str] = None
    interests: List[str] = field(default_factory=list)


@dataclass
class Location:
    name: str = ""
    type: Optional[str] = None            # makerspace, library, park, ...
    coordinates: Optional[Coordinates] = None
    address: Optional[str] = None


@dataclass
class Context:
    location: Location = field(default_factory=Location)
    situation: Optional[str] = None
    connections: List[str] = field(default_factory=list)  # other people involved
    time_of_day: Optional[str] = None


@dataclass
class Outcome:
    success: Optional[bool] = None
    connections_made: List[str] = field(default_factory=list)
    next_questions: List[str] = field(default_factory=list)
    artifacts: List[str] = field(default_factory=list)


@dataclass
class ExperienceDetails:
    """the WHAT of an experience."""
    type: str = ""
    description: str = ""
    domains: List[str] = field(default_factory=list)
    outcome: Optional[Outcome] = None
    duration: Optional[float] = None      # minutes
    intensity: Optional[str] = None

    def unique_domains(self) -> List[str]:
        """domains as a set, keeping first-seen order."""
        return list(dict.fromkeys(self.domains))


@dataclass
class Privacy:
    level: PrivacyLevel = PrivacyLevel.ANONYMOUS
    shareable_with: List[str] = field(default_factory=list)


@dataclass
class Experience:
    """
    a single learning experience record.
    id and timestamp are filled at construction if absent.
    """
    learner: Learner = field(default_factory=Learner)
    context: Context = field(default_factory=Context)
    experience: ExperienceDetails = field(default_factory=ExperienceDetails)

    id: str = ""
    timestamp: str = ""

    # consumed by export / anonymization only
    privacy: Optional[Privacy] = None
    tags: List[str] = field(default_factory=list)
    version: str = SCHEMA_VERSION

    def __post_init__(self):
        if not self.id:
            self.id = generate_id()
        if not self.timestamp:
            self.timestamp = now_iso()

    # convenience accessors

    @property
    def learner_id(self) -> str:
        return self.learner.id

    @property
    def location_name(self) -> Optional[str]:
        return self.context.location.name or None

    @property
    def coordinates(self) -> Optional[Coordinates]:
        return self.context.location.coordinates

    @property
    def domains(self) -> List[str]:
        return self.experience.domains

    @property
    def next_questions(self) -> List[str]:
        if self.experience.outcome is None:
            return []
        return self.experience.outcome.next_questions

    @property
    def connections_made(self) -> List[str]:
        if self.experience.outcome is None:
            return []
        return self.experience.outcome.connections_made

    @property
    def privacy_level(self) -> PrivacyLevel:
        if self.privacy is None:
            return PrivacyLevel.ANONYMOUS
        return self.privacy.level

    def parsed_timestamp(self) -> datetime:
        return parse_timestamp(self.timestamp)

    def missing_required_fields(self) -> List[str]:
        """paths of required fields that are empty."""
        missing = []
        if not self.learner.id:
            missing.append("learner.id")
        if not self.context.location.name:
            missing.append("context.location.name")
        if not self.experience.type:
            missing.append("experience.type")
        if not self.experience.description:
            missing.append("experience.description")
        return missing

    def copy(self) -> 'Experience':
        return copy.deepcopy(self)

    # serialization

    def to_dict(self) -> Dict[str, Any]:
        """plain attribute mapping, one record per file."""
        location = self.context.location
        details = self.experience

        location_data: Dict[str, Any] = {"name": location.name}
        if location.type is not None:
            location_data["type"] = location.type
        if location.coordinates is not None:
            location_data["coordinates"] = location.coordinates.to_dict()
        if location.address is not None:
            location_data["address"] = location.address

        context_data: Dict[str, Any] = {"location": location_data}
        if self.context.situation is not None:
            context_data["situation"] = self.context.situation
        if self.context.connections:
            context_data["connections"] = list(self.context.connections)
        if self.context.time_of_day is not None:
            context_data["time_of_day"] = self.context.time_of_day

        learner_data: Dict[str, Any] = {"id": self.learner.id}
        if self.learner.name is not None:
            learner_data["name"] = self.learner.name
        if self.learner.background is not None:
            learner_data["background"] = self.learner.background
        if self.learner.interests:
            learner_data["interests"] = list(self.learner.interests)

        details_data: Dict[str, Any] = {
            "type": details.type,
            "description": details.description,
            "domains": list(details.domains),
        }
        if details.outcome is not None:
            outcome: Dict[str, Any] = {
                "connections_made": list(details.outcome.connections_made),
                "next_questions": list(details.outcome.next_questions),
            }
            if details.outcome.success is not None:
                outcome["success"] = details.outcome.success
            if details.outcome.artifacts:
                outcome["artifacts"] = list(details.outcome.artifacts)
            details_data["outcome"] = outcome
        if details.duration is not None:
            details_data["duration"] = details.duration
        if details.intensity is not None:
            details_data["intensity"] = details.intensity

        data: Dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "learner": learner_data,
            "context": context_data,
            "experience": details_data,
            "version": self.version,
        }
        if self.privacy is not None:
            data["privacy"] = {
                "level": self.privacy.level.value,
                "shareable_with": list(self.privacy.shareable_with),
            }
        if self.tags:
            data["tags"] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Experience':
        """
        build from a plain mapping.
        lenient: absent sections become empty, validation happens elsewhere.
        """
        learner_data = data.get("learner") or {}
        context_data = data.get("context") or {}
        location_data = context_data.get("location") or {}
        details_data = data.get("experience") or {}

        coordinates = None
        coords_data = location_data.get("coordinates")
        if coords_data:
            coordinates = Coordinates(
                latitude=float(coords_data["latitude"]),
                longitude=float(coords_data["longitude"])
            )

        outcome = None
        outcome_data = details_data.get("outcome")
        if outcome_data is not None:
            outcome = Outcome(
                success=outcome_data.get("success"),
                connections_made=list(outcome_data.get("connections_made") or []),
                next_questions=list(outcome_data.get("next_questions") or []),
                artifacts=list(outcome_data.get("artifacts") or []),
            )

        privacy = None
        privacy_data = data.get("privacy")
        if privacy_data is not None:
            shareable = privacy_data.get("shareable_with", privacy_data.get("shareableWith"))
            privacy = Privacy(
                level=PrivacyLevel(privacy_data.get("level") or PrivacyLevel.ANONYMOUS.value),
                shareable_with=list(shareable or []),
            )

        return cls(
            id=data.get("id") or "",
            timestamp=data.get("timestamp") or "",
            learner=Learner(
                id=learner_data.get("id") or "",
                name=learner_data.get("name"),
                background=learner_data.get("background"),
                interests=list(learner_data.get("interests") or []),
            ),
            context=Context(
                location=Location(
                    name=location_data.get("name") or "",
                    type=location_data.get("type"),
                    coordinates=coordinates,
                    address=location_data.get("address"),
                ),
                situation=context_data.get("situation"),
                connections=list(context_data.get("connections") or []),
                time_of_day=context_data.get("time_of_day", context_data.get("timeOfDay")),
            ),
            experience=ExperienceDetails(
                type=details_data.get("type") or "",
                description=details_data.get("description") or "",
                domains=list(details_data.get("domains") or []),
                outcome=outcome,
                duration=details_data.get("duration"),
                intensity=details_data.get("intensity"),
            ),
            privacy=privacy,
            tags=list(data.get("tags") or []),
            version=data.get("version") or SCHEMA_VERSION,
        )


def stamp_raw(raw: Dict[str, Any]) -> Dict[str, Any]:
    """copy of raw input with id and timestamp defaulted."""
    stamped = copy.deepcopy(raw)
    if not stamped.get("id"):
        stamped["id"] = generate_id()
    if not stamped.get("timestamp"):
        stamped["timestamp"] = now_iso()
    return stamped


def create_experience(raw: Dict[str, Any]) -> Experience:
    """
    construct an experience from raw data, defaulting id and timestamp.
    does not validate; run the schema check before ingesting.
    """
    return Experience.from_dict(stamp_raw(raw))
