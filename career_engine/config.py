# Runtime configuration read from the environment
import os
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_DATA_DIR = PACKAGE_DIR / "data"


class EngineSettings(BaseModel):
    data_dir: Path = DEFAULT_DATA_DIR
    # None keeps profiles and roadmaps in memory
    store_dir: Optional[Path] = None
    max_plan_weeks: int = Field(52, ge=1)
    start_date_tolerance_days: int = Field(1, ge=0)
    roadmap_max_age_days: Optional[int] = None
    mentor_backend: str = "remote"
    huggingface_api_key: str = ""
    hf_model_name: str = "distilgpt2"
    mentor_timeout_seconds: float = 10.0
    port: int = 8000

    @property
    def tracks_path(self) -> Path:
        return self.data_dir / "career_tracks.jsonl"

    @property
    def skills_path(self) -> Path:
        return self.data_dir / "skills.jsonl"


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


def load_settings() -> EngineSettings:
    """Build settings from environment variables (a local .env file is honoured)."""
    load_dotenv()
    store_dir = os.getenv("CAREER_STORE_DIR")
    settings = EngineSettings(
        data_dir=Path(os.getenv("CAREER_DATA_DIR", str(DEFAULT_DATA_DIR))),
        store_dir=Path(store_dir) if store_dir else None,
        max_plan_weeks=int(os.getenv("MAX_PLAN_WEEKS", "52")),
        start_date_tolerance_days=int(os.getenv("START_DATE_TOLERANCE_DAYS", "1")),
        roadmap_max_age_days=_optional_int(os.getenv("ROADMAP_MAX_AGE_DAYS")),
        mentor_backend=(os.getenv("MENTOR_BACKEND") or "remote").strip().lower(),
        huggingface_api_key=(os.getenv("HUGGINGFACE_API_KEY") or "").strip(),
        hf_model_name=os.getenv("HF_MODEL_NAME", "distilgpt2"),
        mentor_timeout_seconds=float(os.getenv("MENTOR_TIMEOUT_SECONDS", "10")),
        port=int(os.environ.get("PORT", 8000)),
    )
    logger.info(f"Settings loaded. Data dir: {settings.data_dir}, mentor backend: {settings.mentor_backend}")
    return settings
