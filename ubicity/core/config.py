"""
configuration for ubicity.
all settings in one place, easily tunable.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


DATA_DIR_ENV = "UBICITY_DATA_DIR"


@dataclass
class StorageConfig:
    """record store layout."""
    data_dir: str = "./ubicity-data"
    experiences_dir: str = "experiences"
    analyses_dir: str = "analyses"
    maps_dir: str = "maps"

    # json formatting
    indent: int = 2


@dataclass
class AnalysisConfig:
    """analyzer and report settings."""
    hotspot_min_diversity: int = 3
    report_connection_limit: int = 10

    # cli display limits
    top_hotspots_shown: int = 5
    top_edges_shown: int = 10


@dataclass
class ExportConfig:
    """export settings."""
    output_dir: Optional[str] = None
    default_format: str = "json"

    # anonymization
    coordinate_precision: int = 2   # ~1km
    pseudonym_prefix: str = "anon-"

    # graphviz sizing
    dot_min_width: float = 0.5
    dot_max_width: float = 3.0
    dot_size_divisor: float = 5.0
    dot_min_penwidth: float = 1.0
    dot_max_penwidth: float = 5.0


@dataclass
class UbicityConfig:
    """master configuration for ubicity."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def default(cls) -> 'UbicityConfig':
        """return default configuration."""
        return cls()

    @classmethod
    def minimal(cls, data_dir: str) -> 'UbicityConfig':
        """config rooted at a specific directory, handy for tests."""
        config = cls()
        config.storage.data_dir = data_dir
        return config

    @classmethod
    def from_env(cls) -> 'UbicityConfig':
        """default config with environment overrides applied."""
        config = cls()
        data_dir = os.environ.get(DATA_DIR_ENV)
        if data_dir:
            config.storage.data_dir = data_dir
        return config
