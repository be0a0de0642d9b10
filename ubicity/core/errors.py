"""
error types raised by ubicity.
"""

from typing import List, Optional


class UbicityError(Exception):
    """base class for all ubicity errors."""


class ValidationError(UbicityError):
    """
    record failed schema validation.
    carries field-path-qualified messages, e.g. "learner.id: learner id is required".
    """

    def __init__(self, errors: List[str], experience_id: Optional[str] = None):
        self.errors = list(errors)
        self.experience_id = experience_id
        prefix = f"validation failed for {experience_id}" if experience_id else "validation failed"
        super().__init__(f"{prefix}: {'; '.join(self.errors)}")


class IntegrityError(UbicityError):
    """an id already in the index was ingested again with different content."""

    def __init__(self, experience_id: str):
        self.experience_id = experience_id
        super().__init__(f"experience {experience_id} already indexed with different content")


class StorageError(UbicityError):
    """reading or writing the record store failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{message}: {path}" if path else message)
