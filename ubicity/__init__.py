"""
ubicity - urban learning capture and pattern mapping.
"""

from .core.config import UbicityConfig
from .core.models import Experience, PrivacyLevel, create_experience
from .core.errors import UbicityError, ValidationError, IntegrityError, StorageError
from .core.schemas import validate_experience, safe_validate_experience
from .core.storage import ExperienceStorage
from .index.experience_index import ExperienceIndex
from .analysis.report import ReportAssembler, AnalysisReport
from .mapper import UrbanKnowledgeMapper
from .export.formats import ExperienceExporter, export_data

__version__ = "0.2.0"

__all__ = [
    "UbicityConfig",
    "Experience",
    "PrivacyLevel",
    "create_experience",
    "UbicityError",
    "ValidationError",
    "IntegrityError",
    "StorageError",
    "validate_experience",
    "safe_validate_experience",
    "ExperienceStorage",
    "ExperienceIndex",
    "ReportAssembler",
    "AnalysisReport",
    "UrbanKnowledgeMapper",
    "ExperienceExporter",
    "export_data"
]
