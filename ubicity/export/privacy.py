"""
privacy tools - pseudonymize learners, coarsen locations, redact pii.
applied to copies; the indexed records are never modified.
"""

import hashlib
import re
from typing import Iterable, List, Optional

from ..core.config import ExportConfig
from ..core.models import Coordinates, Experience, PrivacyLevel


EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_PATTERN = re.compile(r"(?<!\w)\+?\d[\d\s().-]{7,}\d(?!\w)")

EMAIL_PLACEHOLDER = "[email]"
PHONE_PLACEHOLDER = "[phone]"


def pseudonym(learner_id: str, prefix: str = "anon-") -> str:
    """stable pseudonym: same input id always maps to the same output."""
    digest = hashlib.sha256(learner_id.encode("utf-8")).hexdigest()
    return f"{prefix}{digest[:12]}"


def remove_pii(text: Optional[str]) -> Optional[str]:
    """redact email addresses and phone numbers."""
    if not text:
        return text
    text = EMAIL_PATTERN.sub(EMAIL_PLACEHOLDER, text)
    return PHONE_PATTERN.sub(_redact_phone, text)


def _redact_phone(match: re.Match) -> str:
    # dates like 2024-01-15 carry 8 digits; phone numbers carry 9+
    digits = sum(ch.isdigit() for ch in match.group(0))
    return PHONE_PLACEHOLDER if digits >= 9 else match.group(0)


def anonymize_learner(experience: Experience, config: Optional[ExportConfig] = None) -> Experience:
    """replace learner id with a pseudonym and drop identifying fields."""
    config = config or ExportConfig()
    result = experience.copy()
    result.learner.id = pseudonym(experience.learner.id, config.pseudonym_prefix)
    result.learner.name = None
    result.learner.background = None
    return result


def anonymize_location(experience: Experience, config: Optional[ExportConfig] = None) -> Experience:
    """round coordinates and drop the street address; place name is kept."""
    config = config or ExportConfig()
    result = experience.copy()
    location = result.context.location

    if location.coordinates is not None:
        precision = config.coordinate_precision
        location.coordinates = Coordinates(
            latitude=round(location.coordinates.latitude, precision),
            longitude=round(location.coordinates.longitude, precision),
        )
    location.address = None
    return result


def scrub_text(experience: Experience) -> Experience:
    """pii redaction over every free-text field."""
    result = experience.copy()
    details = result.experience

    details.description = remove_pii(details.description)
    result.context.situation = remove_pii(result.context.situation)
    if details.outcome is not None:
        details.outcome.connections_made = [remove_pii(t) for t in details.outcome.connections_made]
        details.outcome.next_questions = [remove_pii(t) for t in details.outcome.next_questions]
    return result


def fully_anonymize(experience: Experience, config: Optional[ExportConfig] = None) -> Experience:
    """learner + location anonymization, pii redaction, other people removed."""
    result = scrub_text(anonymize_location(anonymize_learner(experience, config), config))
    result.context.connections = []
    if result.privacy is not None:
        result.privacy.shareable_with = []
    return result


def generate_shareable_dataset(
    experiences: Iterable[Experience],
    config: Optional[ExportConfig] = None
) -> List[Experience]:
    """
    records safe to share.
    private records are dropped, anonymous ones fully anonymized,
    public ones only have pii redacted.
    """
    shareable = []
    for experience in experiences:
        level = experience.privacy_level
        if level == PrivacyLevel.PRIVATE:
            continue
        if level == PrivacyLevel.PUBLIC:
            shareable.append(scrub_text(experience))
        else:
            shareable.append(fully_anonymize(experience, config))
    return shareable
