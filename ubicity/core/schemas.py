"""
schema validation for learning experiences.
the core only ever ingests records that passed through here.
"""

import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import Experience, ID_PREFIX, SCHEMA_VERSION, parse_timestamp


# ids name files on disk: no separators, no dots
ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


# friendlier messages for the minimal who/where/what fields
REQUIRED_MESSAGES = {
    "learner.id": "learner id is required",
    "context.location.name": "location name is required",
    "experience.type": "experience type is required",
    "experience.description": "description is required",
}


# minimal viable protocol: who / where / what

class LearnerSchema(BaseModel):
    id: str = Field(min_length=1)
    name: Optional[str] = None
    background: Optional[str] = None
    interests: Optional[List[str]] = None


class CoordinatesSchema(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class LocationSchema(BaseModel):
    name: str = Field(min_length=1)
    coordinates: Optional[CoordinatesSchema] = None
    type: Optional[str] = None
    address: Optional[str] = None


class ContextSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location: LocationSchema
    situation: Optional[str] = None
    connections: Optional[List[str]] = None
    time_of_day: Optional[Literal["morning", "afternoon", "evening", "night"]] = Field(
        default=None, alias="timeOfDay"
    )


class OutcomeSchema(BaseModel):
    success: Optional[bool] = None
    connections_made: Optional[List[str]] = None
    next_questions: Optional[List[str]] = None
    artifacts: Optional[List[str]] = None


class ExperienceDetailsSchema(BaseModel):
    type: str = Field(min_length=1)
    description: str = Field(min_length=1)
    domains: Optional[List[str]] = None
    outcome: Optional[OutcomeSchema] = None
    duration: Optional[float] = Field(default=None, gt=0)
    intensity: Optional[Literal["low", "medium", "high"]] = None


class PrivacySchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    level: Literal["private", "anonymous", "public"] = "anonymous"
    shareable_with: Optional[List[str]] = Field(default=None, alias="shareableWith")


class LearningExperienceSchema(BaseModel):
    id: str
    timestamp: str
    learner: LearnerSchema
    context: ContextSchema
    experience: ExperienceDetailsSchema
    privacy: Optional[PrivacySchema] = None
    tags: Optional[List[str]] = None
    version: str = SCHEMA_VERSION

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        if not ID_PATTERN.fullmatch(value):
            raise ValueError("id may only contain letters, digits, '-' and '_'")
        if value.startswith(ID_PREFIX):
            return value
        try:
            uuid.UUID(value)
        except ValueError:
            raise ValueError(f"id must be a uuid or start with '{ID_PREFIX}'")
        return value

    @field_validator("timestamp")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        try:
            parse_timestamp(value)
        except ValueError:
            raise ValueError("timestamp must be an ISO-8601 datetime")
        return value


@dataclass
class SchemaResult:
    """outcome of a non-raising validation."""
    success: bool
    experience: Optional[Experience] = None
    errors: List[str] = field(default_factory=list)


def _format_errors(error: PydanticValidationError) -> List[str]:
    messages = []
    for err in error.errors():
        path = ".".join(str(part) for part in err["loc"])
        message = err["msg"]
        if path in REQUIRED_MESSAGES and err["type"] in ("missing", "string_too_short", "string_type"):
            message = REQUIRED_MESSAGES[path]
        messages.append(f"{path}: {message}" if path else message)
    return messages


def safe_validate_experience(data: Any) -> SchemaResult:
    """validate without raising; errors are field-path qualified."""
    if not isinstance(data, dict):
        return SchemaResult(success=False, errors=["experience must be an object"])

    try:
        model = LearningExperienceSchema.model_validate(data)
    except PydanticValidationError as e:
        return SchemaResult(success=False, errors=_format_errors(e))

    return SchemaResult(
        success=True,
        experience=Experience.from_dict(model.model_dump(exclude_none=True))
    )


def validate_experience(data: Any) -> Experience:
    """
    validate raw data and return a typed experience.
    raises ValidationError with every failing field.
    """
    result = safe_validate_experience(data)
    if not result.success:
        experience_id = data.get("id") if isinstance(data, dict) else None
        raise ValidationError(result.errors, experience_id=experience_id)
    return result.experience
