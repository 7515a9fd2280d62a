# Profile and roadmap persistence adapters
"""
The engine only needs load/save by user id. Two flavours are provided: an
in-memory store for tests and single-process use, and a JSON-file store that
keeps one document per user in a directory.
"""

import hashlib
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from career_engine.models.career import DynamicRoadmap, UserProfile

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)

_SAFE_NAME = re.compile(r'^[A-Za-z0-9_.-]{1,64}$')


class ProfileStore(ABC):
    @abstractmethod
    def load(self, user_id: str) -> Optional[UserProfile]:
        ...

    @abstractmethod
    def save(self, profile: UserProfile) -> None:
        ...


class RoadmapStore(ABC):
    @abstractmethod
    def load(self, user_id: str) -> Optional[DynamicRoadmap]:
        ...

    @abstractmethod
    def save(self, roadmap: DynamicRoadmap) -> None:
        ...


class _InMemoryStore(Generic[ModelT]):
    """Keeps deep copies so callers never share mutable state with the store."""

    def __init__(self):
        self._records: Dict[str, ModelT] = {}

    def _load(self, user_id: str) -> Optional[ModelT]:
        record = self._records.get(user_id)
        return record.model_copy(deep=True) if record is not None else None

    def _save(self, user_id: str, record: ModelT) -> None:
        self._records[user_id] = record.model_copy(deep=True)


class InMemoryProfileStore(_InMemoryStore[UserProfile], ProfileStore):
    def load(self, user_id: str) -> Optional[UserProfile]:
        return self._load(user_id)

    def save(self, profile: UserProfile) -> None:
        self._save(profile.user_id, profile)


class InMemoryRoadmapStore(_InMemoryStore[DynamicRoadmap], RoadmapStore):
    def load(self, user_id: str) -> Optional[DynamicRoadmap]:
        return self._load(user_id)

    def save(self, roadmap: DynamicRoadmap) -> None:
        self._save(roadmap.user_id, roadmap)


class _JsonFileStore(Generic[ModelT]):
    def __init__(self, directory: Path, model_cls: Type[ModelT]):
        self.directory = Path(directory)
        self.model_cls = model_cls
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, user_id: str) -> Path:
        if _SAFE_NAME.match(user_id):
            name = user_id
        else:
            name = hashlib.sha256(user_id.encode('utf-8')).hexdigest()
        return self.directory / f"{name}.json"

    def _load(self, user_id: str) -> Optional[ModelT]:
        path = self._path(user_id)
        if not path.exists():
            return None
        try:
            return self.model_cls.model_validate_json(path.read_text(encoding='utf-8'))
        except (OSError, ValidationError) as e:
            raise RuntimeError(f"Error loading {self.model_cls.__name__} for user '{user_id}' from {path}: {e}")

    def _save(self, user_id: str, record: ModelT) -> None:
        path = self._path(user_id)
        tmp_path = path.with_suffix('.json.tmp')
        try:
            tmp_path.write_text(record.model_dump_json(indent=2), encoding='utf-8')
            tmp_path.replace(path)
        except OSError as e:
            raise RuntimeError(f"Error saving {self.model_cls.__name__} for user '{user_id}' to {path}: {e}")
        logger.info(f"Saved {self.model_cls.__name__} for user '{user_id}' to {path}")


class JsonFileProfileStore(_JsonFileStore[UserProfile], ProfileStore):
    def __init__(self, directory: Path):
        super().__init__(Path(directory) / 'profiles', UserProfile)

    def load(self, user_id: str) -> Optional[UserProfile]:
        return self._load(user_id)

    def save(self, profile: UserProfile) -> None:
        self._save(profile.user_id, profile)


class JsonFileRoadmapStore(_JsonFileStore[DynamicRoadmap], RoadmapStore):
    def __init__(self, directory: Path):
        super().__init__(Path(directory) / 'roadmaps', DynamicRoadmap)

    def load(self, user_id: str) -> Optional[DynamicRoadmap]:
        return self._load(user_id)

    def save(self, roadmap: DynamicRoadmap) -> None:
        self._save(roadmap.user_id, roadmap)
