# Data model shared by the scorer, synthesizer, stores and API
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EducationLevel(str, Enum):
    HIGH_SCHOOL = "High School"
    ASSOCIATE = "Associate"
    BACHELOR = "Bachelor"
    MASTER = "Master"
    PHD = "PhD"
    SELF_TAUGHT = "Self-Taught"


class LearningStyle(str, Enum):
    VISUAL = "Visual"
    AUDITORY = "Auditory"
    READING_WRITING = "Reading/Writing"
    KINESTHETIC = "Kinesthetic"
    MIXED = "Mixed"


class DemandLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskType(str, Enum):
    READING = "Reading"
    EXERCISE = "Exercise"
    CODING = "Coding"
    QUIZ = "Quiz"
    PROJECT = "Project"


class ResourceType(str, Enum):
    VIDEO = "Video"
    ARTICLE = "Article"
    TUTORIAL = "Tutorial"
    DOCUMENTATION = "Documentation"
    BOOK = "Book"
    COURSE = "Course"


def _dedupe(values: List[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


# --- Learner profile ---

class UserProfile(BaseModel):
    id: str = Field("", description="Profile document id.")
    user_id: str = Field(..., description="Owning learner.")
    current_skills: List[str] = Field(default_factory=list, description="Skill identifiers the learner already has.")
    desired_skills: List[str] = Field(default_factory=list, description="Skill identifiers the learner wants to pick up.")
    interests: List[str] = Field(default_factory=list)
    career_goals: List[str] = Field(default_factory=list)
    experience: float = Field(0, ge=0, description="Years of experience.")
    education: EducationLevel = EducationLevel.HIGH_SCHOOL
    preferred_learning_style: LearningStyle = LearningStyle.VISUAL
    time_availability: float = Field(5, allow_inf_nan=False, description="Hours per week available for learning.")

    @field_validator("current_skills", "desired_skills")
    @classmethod
    def _ordered_set(cls, values: List[str]) -> List[str]:
        return _dedupe(values)


def default_profile(user_id: str) -> UserProfile:
    """Profile used when the store has nothing for this learner."""
    return UserProfile(id=user_id, user_id=user_id)


# --- Reference data ---

class RequiredSkill(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill_id: str
    weight: int = Field(..., ge=0, le=10, description="Importance weight, 1-10 for valid tracks.")


class CareerTrack(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    demand_level: DemandLevel = DemandLevel.MEDIUM
    average_salary: str = ""
    required_skills: List[RequiredSkill] = Field(default_factory=list)
    recommended_courses: List[str] = Field(default_factory=list)
    time_to_achieve: str = ""
    job_titles: List[str] = Field(default_factory=list)


class LearningResource(BaseModel):
    id: str
    type: ResourceType = ResourceType.ARTICLE
    title: str
    url: str = "#"
    description: str = ""
    estimated_time: int = Field(0, description="Minutes.")


class SkillInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill_id: str
    name: str
    category: str = "General"
    base_hours: Optional[float] = None
    project_worthy: bool = False
    aliases: List[str] = Field(default_factory=list)
    resources: List[LearningResource] = Field(default_factory=list)


class SkillGapEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill_id: str
    weight: int


# --- Roadmap ---

class LearningTask(BaseModel):
    id: str
    title: str
    type: TaskType
    skill_id: Optional[str] = None
    estimated_hours: float = 0.0
    completed: bool = False
    resource_id: Optional[str] = None


class DailyLearningPlan(BaseModel):
    id: str
    day_number: int
    title: str
    description: str = ""
    estimated_hours: float = 0.0
    resources: List[LearningResource] = Field(default_factory=list)
    tasks: List[LearningTask] = Field(default_factory=list)
    completed: bool = False


class RoadmapWeek(BaseModel):
    id: str
    week_number: int
    learning_objectives: List[str] = Field(default_factory=list)
    daily_plans: List[DailyLearningPlan] = Field(default_factory=list)
    assessments: List[str] = Field(default_factory=list)
    project: Optional[str] = None

    @property
    def total_hours(self) -> float:
        return sum(day.estimated_hours for day in self.daily_plans)


class DynamicRoadmap(BaseModel):
    id: str
    user_id: str
    target_career_track: str
    start_date: date
    end_date: date
    weeks: List[RoadmapWeek] = Field(default_factory=list)
    last_updated: datetime
    profile_signature: str = ""
    weekly_budget_hours: float = 0.0

    def iter_tasks(self):
        for week in self.weeks:
            for day in week.daily_plans:
                for task in day.tasks:
                    yield week, day, task
