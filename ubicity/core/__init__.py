from .models import (
    Experience, ExperienceDetails, Learner, Context, Location, Coordinates,
    Outcome, Privacy, PrivacyLevel, create_experience, stamp_raw
)
from .config import UbicityConfig, StorageConfig, AnalysisConfig, ExportConfig
from .errors import UbicityError, ValidationError, IntegrityError, StorageError
from .schemas import validate_experience, safe_validate_experience, SchemaResult
from .storage import ExperienceStorage
from .timing import PerformanceMonitor, TimingStats
from .logs import setup_logging
