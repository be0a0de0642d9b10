"""
json file storage for experiences and report snapshots.
one file per record, keyed by id.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import StorageConfig
from .errors import StorageError


logger = logging.getLogger("ubicity.storage")


class ExperienceStorage:
    """
    directory-backed record store.

    layout:
        <data_dir>/experiences/<id>.json
        <data_dir>/analyses/report-<timestamp>.json
        <data_dir>/maps/<name>
    """

    def __init__(self, data_dir: Optional[str] = None, config: Optional[StorageConfig] = None):
        self.config = config or StorageConfig()
        self.data_dir = Path(data_dir or self.config.data_dir)

    @property
    def experiences_dir(self) -> Path:
        return self.data_dir / self.config.experiences_dir

    @property
    def analyses_dir(self) -> Path:
        return self.data_dir / self.config.analyses_dir

    @property
    def maps_dir(self) -> Path:
        return self.data_dir / self.config.maps_dir

    def ensure_directories(self):
        """create storage directories if they don't exist."""
        for path in (self.experiences_dir, self.analyses_dir, self.maps_dir):
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(f"cannot create directory ({e})", str(path)) from e

    # experiences

    def experience_path(self, experience_id: str) -> Path:
        """file for one record; ids that would escape experiences/ raise StorageError."""
        path = self.experiences_dir / f"{experience_id}.json"
        if path.resolve().parent != self.experiences_dir.resolve():
            raise StorageError(f"invalid experience id {experience_id!r}", str(path))
        return path

    def save_experience(self, data: Dict[str, Any]) -> Path:
        """write one record; returns the file path."""
        path = self.experience_path(data["id"])
        self._write_json(path, data)
        logger.debug(f"saved experience {data['id']}")
        return path

    def load_experience(self, experience_id: str) -> Optional[Dict[str, Any]]:
        path = self.experience_path(experience_id)
        if not path.exists():
            return None
        return self._read_json(path)

    def load_all_experiences(self) -> List[Dict[str, Any]]:
        """all stored records, in file-name order."""
        if not self.experiences_dir.exists():
            return []

        records = []
        for path in sorted(self.experiences_dir.glob("*.json")):
            records.append(self._read_json(path))

        logger.info(f"loaded {len(records)} experience files from {self.experiences_dir}")
        return records

    def delete_experience(self, experience_id: str) -> bool:
        path = self.experience_path(experience_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"cannot delete ({e})", str(path)) from e
        return True

    # snapshots

    def save_report(self, report: Dict[str, Any]) -> Path:
        stamp = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        path = self.analyses_dir / f"report-{stamp}.json"
        self._write_json(path, report)
        logger.info(f"report saved to {path}")
        return path

    def save_map(self, name: str, content: str) -> Path:
        path = self.maps_dir / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"cannot write ({e})", str(path)) from e
        return path

    def get_stats(self) -> Dict[str, Any]:
        """file count and total size of stored experiences."""
        files = list(self.experiences_dir.glob("*.json")) if self.experiences_dir.exists() else []
        total_bytes = sum(f.stat().st_size for f in files)
        return {
            "storage_dir": str(self.data_dir),
            "total_experiences": len(files),
            "total_size_kb": round(total_bytes / 1024, 2),
        }

    # private helpers

    def _write_json(self, path: Path, data: Dict[str, Any]):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=self.config.indent, default=str)
        except OSError as e:
            raise StorageError(f"cannot write ({e})", str(path)) from e

    def _read_json(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"invalid json ({e.msg} at line {e.lineno})", str(path)) from e
        except OSError as e:
            raise StorageError(f"cannot read ({e})", str(path)) from e
