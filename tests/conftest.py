"""Pytest configuration and shared fixtures."""

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, List

import pytest

from career_engine.analytics.career_analyzer import CareerAnalyzer
from career_engine.analytics.mentor import RuleBasedMentor
from career_engine.analytics.roadmap_synthesizer import RoadmapSynthesizer
from career_engine.config import EngineSettings
from career_engine.data_processing.catalog_loader import TrackCatalog
from career_engine.data_processing.skill_graph import SkillGraph
from career_engine.models.career import CareerTrack, RequiredSkill, UserProfile
from career_engine.storage.stores import InMemoryProfileStore, InMemoryRoadmapStore

NOW = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
START = date(2026, 1, 5)

SKILL_RECORDS: List[Dict] = [
    {"skill_id": "js", "name": "JavaScript", "category": "Programming", "base_hours": 20,
     "project_worthy": False, "aliases": ["javascript", "ecmascript"], "resources": []},
    {"skill_id": "react", "name": "React", "category": "Framework", "base_hours": 18,
     "project_worthy": True, "aliases": ["reactjs"],
     "resources": [{"id": "res-react", "type": "Tutorial", "title": "React Quick Start",
                    "url": "https://react.dev/learn", "description": "Official tutorial."}]},
    {"skill_id": "node", "name": "Node.js", "category": "Framework", "base_hours": 12,
     "project_worthy": False, "aliases": ["nodejs"], "resources": []},
    {"skill_id": "python", "name": "Python", "category": "Programming", "base_hours": 30,
     "project_worthy": False, "aliases": ["py"], "resources": []},
    {"skill_id": "sql", "name": "SQL", "category": "Database", "base_hours": None,
     "project_worthy": False, "aliases": [], "resources": []},
    {"skill_id": "statistics", "name": "Statistics", "category": "Mathematics", "base_hours": 10,
     "project_worthy": False, "aliases": ["stats"], "resources": []},
]

TRACK_RECORDS: List[Dict] = [
    {"id": "web-dev", "title": "Web Developer", "description": "Build web applications.",
     "demand_level": "High", "average_salary": "$90,000 - $120,000",
     "required_skills": [{"skill_id": "js", "weight": 8}, {"skill_id": "react", "weight": 6},
                         {"skill_id": "node", "weight": 4}],
     "recommended_courses": ["Modern JavaScript"], "time_to_achieve": "6 months",
     "job_titles": ["Frontend Developer", "Web Developer"]},
    {"id": "backend-dev", "title": "Backend Developer", "description": "Build APIs and services.",
     "demand_level": "Medium", "average_salary": "$95,000 - $130,000",
     "required_skills": [{"skill_id": "node", "weight": 9}, {"skill_id": "sql", "weight": 5}],
     "recommended_courses": [], "time_to_achieve": "8 months",
     "job_titles": ["Backend Engineer"]},
    {"id": "data-analyst", "title": "Data Analyst", "description": "Turn data into business insight.",
     "demand_level": "High", "average_salary": "$80,000 - $110,000",
     "required_skills": [{"skill_id": "python", "weight": 9}, {"skill_id": "sql", "weight": 5}],
     "recommended_courses": [], "time_to_achieve": "6 months",
     "job_titles": ["Data Analyst", "Business Analyst"]},
]


def write_jsonl(path: Path, records: List[Dict]) -> Path:
    path.write_text("".join(json.dumps(record) + "\n" for record in records), encoding="utf-8")
    return path


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Reference data directory with the test skills and tracks."""
    write_jsonl(tmp_path / "skills.jsonl", SKILL_RECORDS)
    write_jsonl(tmp_path / "career_tracks.jsonl", TRACK_RECORDS)
    return tmp_path


@pytest.fixture
def catalog(data_dir: Path) -> TrackCatalog:
    return TrackCatalog(data_dir / "career_tracks.jsonl", data_dir / "skills.jsonl")


@pytest.fixture
def skill_graph(catalog: TrackCatalog) -> SkillGraph:
    return SkillGraph.from_frames(catalog.skills_frame(), catalog.list_tracks())


@pytest.fixture
def web_track() -> CareerTrack:
    return CareerTrack(
        id="web-dev",
        title="Web Developer",
        description="Build web applications.",
        required_skills=[
            RequiredSkill(skill_id="js", weight=8),
            RequiredSkill(skill_id="react", weight=6),
            RequiredSkill(skill_id="node", weight=4),
        ],
        job_titles=["Frontend Developer", "Web Developer"],
    )


@pytest.fixture
def js_profile() -> UserProfile:
    return UserProfile(id="u1", user_id="u1", current_skills=["js"], desired_skills=[], time_availability=5)


@pytest.fixture
def synthesizer(skill_graph: SkillGraph) -> RoadmapSynthesizer:
    return RoadmapSynthesizer(skill_graph.hour_estimates(), skill_graph=skill_graph, clock=fixed_clock)


@pytest.fixture
def settings(data_dir: Path) -> EngineSettings:
    return EngineSettings(data_dir=data_dir, mentor_backend="rules")


@pytest.fixture
def analyzer(settings: EngineSettings) -> CareerAnalyzer:
    engine = CareerAnalyzer(
        settings,
        profile_store=InMemoryProfileStore(),
        roadmap_store=InMemoryRoadmapStore(),
        mentor=RuleBasedMentor(),
        clock=fixed_clock,
    )
    engine.load_resources()
    return engine
