import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from career_engine.data_processing.data_validator import CatalogValidator
from career_engine.models.career import CareerTrack
from career_engine.models.errors import InvalidTrackDefinition

logger = logging.getLogger(__name__)

SKILL_COLUMNS = ['skill_id', 'name', 'category', 'base_hours', 'project_worthy', 'aliases', 'resources']


def load_data(file_path: Path) -> List[Dict]:
    """Loads JSONL data from a file."""
    data = []
    if not file_path.exists():
        logger.error(f"Error: Data file not found at {file_path}")
        return []
    with open(file_path, 'r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                data.append(json.loads(line))
            except json.JSONDecodeError as e:
                logger.warning(f"Error decoding JSON on line {line_num}: {line.strip()}. Error: {e}")
                continue
    logger.info(f"Loaded {len(data)} records from {file_path}")
    return data


def skills_to_frame(records: List[Dict]) -> pd.DataFrame:
    """Turns raw skill records into the reference DataFrame used by the skill graph."""
    df = pd.DataFrame(records)
    for col in SKILL_COLUMNS:
        if col not in df.columns:
            df[col] = None
    df['category'] = df['category'].fillna('General')
    df['project_worthy'] = df['project_worthy'].fillna(False).astype(bool)
    df['base_hours'] = pd.to_numeric(df['base_hours'], errors='coerce')
    for col in ['aliases', 'resources']:
        df[col] = df[col].apply(lambda x: x if isinstance(x, list) else [])
    return df[SKILL_COLUMNS]


class TrackCatalog:
    """
    Track catalog backed by JSONL reference files.
    Tracks are cached after the first read and only re-read on reload().
    """

    def __init__(self, tracks_path: Path, skills_path: Path, validator: Optional[CatalogValidator] = None):
        self.tracks_path = Path(tracks_path)
        self.skills_path = Path(skills_path)
        self.validator = validator or CatalogValidator()
        self._tracks: Optional[List[CareerTrack]] = None
        self._skills_df: Optional[pd.DataFrame] = None

    def skills_frame(self) -> pd.DataFrame:
        if self._skills_df is None:
            records = load_data(self.skills_path)
            result = self.validator.validate_skills(records)
            if not result.is_valid:
                logger.error(self.validator.generate_validation_report(result, title="Skill Table"))
                raise RuntimeError(f"Skill reference data at {self.skills_path} is invalid: {result.errors[:3]}")
            for warning in result.warnings:
                logger.warning(warning)
            self._skills_df = skills_to_frame(records)
        return self._skills_df

    def list_tracks(self) -> List[CareerTrack]:
        if self._tracks is None:
            records = load_data(self.tracks_path)
            if not records:
                logger.warning(f"No career tracks found at {self.tracks_path}")
                self._tracks = []
                return []
            known_skills = self.skills_frame()['skill_id'].tolist()
            result = self.validator.validate_tracks(records, known_skills)
            if not result.is_valid:
                logger.error(self.validator.generate_validation_report(result, title="Career Track Catalog"))
                first_bad = next((r.get('id', '?') for r in records if any(f"'{r.get('id')}'" in e for e in result.errors)), '?')
                raise InvalidTrackDefinition(str(first_bad), "; ".join(result.errors[:3]))
            self._tracks = [CareerTrack(**record) for record in records]
            logger.info(f"Track catalog ready with {len(self._tracks)} tracks.")
        return list(self._tracks)

    def get_track(self, track_id: str) -> Optional[CareerTrack]:
        for track in self.list_tracks():
            if track.id == track_id:
                return track
        return None

    def reload(self) -> List[CareerTrack]:
        """Drops the cached reference data and reads it again."""
        logger.info("Reloading career track catalog...")
        self._tracks = None
        self._skills_df = None
        return self.list_tracks()
