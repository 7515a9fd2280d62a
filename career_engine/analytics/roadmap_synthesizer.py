# Roadmap synthesis: turns a skill gap into a dated week/day/task plan
"""
Greedy, explainable allocation of gap skills onto a weekly time budget.

Weeks are filled in gap order (heaviest skills first). A skill that does not
fit in what is left of a week is split and the remainder carried into the next
week, so the plan lasts exactly ceil(total hours / weekly budget) weeks. Inside
a week the hours are laid out over the active days, each day capped at the
weekly budget divided by the number of active days. Allocation works on exact
fractions. Published hours are rounded down to multiples of 1/HOUR_GRAIN,
which floats represent exactly, so summed day and week hours never exceed the
caps.
"""

import logging
import math
import uuid
from datetime import date, datetime, timedelta, timezone
from fractions import Fraction
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from career_engine.data_processing.skill_graph import SkillGraph
from career_engine.models.career import (
    CareerTrack,
    DailyLearningPlan,
    DynamicRoadmap,
    LearningResource,
    LearningStyle,
    LearningTask,
    RoadmapWeek,
    SkillGapEntry,
    TaskType,
    UserProfile,
)
from career_engine.models.errors import InvalidStartDate, MissingHourEstimate, UnrealisticTimeline

logger = logging.getLogger(__name__)

DEFAULT_ACTIVE_DAYS = 5
# Every style studies on the default number of days until per-style schedules exist.
ACTIVE_DAYS_BY_STYLE = {style: DEFAULT_ACTIVE_DAYS for style in LearningStyle}
MAX_TASK_HOURS = Fraction(2)
CODING_CATEGORIES = {'Programming', 'Framework', 'Database', 'DevOps', 'Tool', 'Data Science'}
REVIEW_HOURS = Fraction(1)
HOUR_GRAIN = 2 ** 20


def active_days_for(style: LearningStyle) -> int:
    return ACTIVE_DAYS_BY_STYLE.get(style, DEFAULT_ACTIVE_DAYS)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_fraction(value) -> Fraction:
    return Fraction(str(float(value)))


def _to_hours(value: Fraction) -> float:
    """Rounds down onto the output grain."""
    return math.floor(value * HOUR_GRAIN) / HOUR_GRAIN


class RoadmapSynthesizer:
    def __init__(
        self,
        hour_estimates: Mapping[str, Optional[float]],
        skill_graph: Optional[SkillGraph] = None,
        max_plan_weeks: int = 52,
        start_date_tolerance_days: int = 1,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.hour_estimates = hour_estimates
        self.skill_graph = skill_graph
        self.max_plan_weeks = max_plan_weeks
        self.start_date_tolerance_days = start_date_tolerance_days
        self.clock = clock

    # --- reference data helpers ---

    def _name(self, skill_id: str) -> str:
        return self.skill_graph.display_name(skill_id) if self.skill_graph else skill_id

    def _category(self, skill_id: str) -> str:
        return self.skill_graph.category(skill_id) if self.skill_graph else 'General'

    def _project_worthy(self, skill_id: str) -> bool:
        return self.skill_graph.is_project_worthy(skill_id) if self.skill_graph else False

    def _primary_resource(self, skill_id: str) -> Optional[LearningResource]:
        if self.skill_graph is None:
            return None
        info = self.skill_graph.skill_info(skill_id)
        if info is None or not info.resources:
            return None
        return info.resources[0]

    # --- validation ---

    def _check_start_date(self, start_date, now: datetime) -> date:
        if isinstance(start_date, datetime):
            start_date = start_date.date()
        if not isinstance(start_date, date):
            raise InvalidStartDate(f"Start date must be a calendar date, got {start_date!r}.")
        earliest = now.date() - timedelta(days=self.start_date_tolerance_days)
        if start_date < earliest:
            raise InvalidStartDate(
                f"Start date {start_date.isoformat()} lies in the past. "
                f"Choose a date on or after {earliest.isoformat()}."
            )
        return start_date

    def _gap_hours(self, gap: List[SkillGapEntry]) -> Dict[str, Fraction]:
        hours = {}
        for entry in gap:
            estimate = self.hour_estimates.get(entry.skill_id)
            if estimate is None or not math.isfinite(float(estimate)) or float(estimate) <= 0:
                raise MissingHourEstimate(entry.skill_id)
            hours[entry.skill_id] = _as_fraction(estimate)
        return hours

    def _weekly_budget(self, profile: UserProfile) -> Fraction:
        if not math.isfinite(float(profile.time_availability)):
            raise UnrealisticTimeline(
                f"Weekly time availability must be a finite number of hours, got {profile.time_availability}."
            )
        return _as_fraction(profile.time_availability)

    def plan_duration(self, total_hours: Fraction, weekly_budget: Fraction) -> int:
        if weekly_budget <= 0:
            raise UnrealisticTimeline(
                "Weekly time availability must be greater than zero hours to build a roadmap."
            )
        weeks = max(1, math.ceil(total_hours / weekly_budget))
        if weeks > self.max_plan_weeks:
            raise UnrealisticTimeline(
                f"Closing this skill gap needs {float(total_hours):g} hours, which takes {weeks} weeks at "
                f"{float(weekly_budget):g} hours per week (limit is {self.max_plan_weeks} weeks). "
                f"Increase your weekly availability or pick a closer career track."
            )
        return weeks

    # --- allocation ---

    def pack_weeks(self, gap: List[SkillGapEntry], hours: Dict[str, Fraction],
                   weekly_budget: Fraction) -> List[List[Tuple[str, Fraction]]]:
        """
        Greedy packing of gap skills into weeks, in gap order.
        Returns per week the (skill_id, hours) slices assigned to it.
        """
        weeks = []
        current: List[Tuple[str, Fraction]] = []
        capacity = weekly_budget
        for entry in gap:
            remaining = hours[entry.skill_id]
            while remaining > 0:
                if capacity == 0:
                    weeks.append(current)
                    current = []
                    capacity = weekly_budget
                portion = min(remaining, capacity)
                current.append((entry.skill_id, portion))
                remaining -= portion
                capacity -= portion
        if current:
            weeks.append(current)
        return weeks

    def _task_type(self, skill_id: str, exposure: int) -> TaskType:
        if exposure == 0:
            return TaskType.READING
        if exposure == 1:
            return TaskType.EXERCISE
        return TaskType.CODING if self._category(skill_id) in CODING_CATEGORIES else TaskType.QUIZ

    def _task_title(self, skill_id: str, task_type: TaskType, resource: Optional[LearningResource]) -> str:
        name = self._name(skill_id)
        if task_type == TaskType.READING:
            return f"Read: {resource.title}" if resource else f"Study the fundamentals of {name}"
        if task_type == TaskType.EXERCISE:
            return f"Complete practice exercises on {name}"
        if task_type == TaskType.CODING:
            return f"Build a small program using {name}"
        return f"Take a self-check quiz on {name}"

    def _layout_week(self, week_number: int, slices: List[Tuple[str, Fraction]], daily_cap: Fraction,
                     first_day_number: int, exposures: Dict[str, int]) -> List[DailyLearningPlan]:
        days = []
        day_tasks: List[LearningTask] = []
        day_resources: List[LearningResource] = []
        day_skills: List[str] = []
        day_hours = Fraction(0)

        def close_day():
            day_number = first_day_number + len(days)
            published = sum(task.estimated_hours for task in day_tasks)
            intro = [s for s in day_skills if any(
                t.skill_id == s and t.type == TaskType.READING for t in day_tasks)]
            labels = [f"Introduction to {self._name(s)}" if s in intro else f"{self._name(s)} Practice"
                      for s in day_skills]
            days.append(DailyLearningPlan(
                id=f"w{week_number}-d{day_number}",
                day_number=day_number,
                title=f"Day {day_number}: {' & '.join(labels)}",
                description=f"Spend about {round(published, 2):g} hours on {', '.join(self._name(s) for s in day_skills)}.",
                estimated_hours=published,
                resources=list(day_resources),
                tasks=list(day_tasks),
            ))

        for skill_id, portion in slices:
            remaining = portion
            while remaining > 0:
                if day_hours == daily_cap:
                    close_day()
                    day_tasks, day_resources, day_skills, day_hours = [], [], [], Fraction(0)
                piece = min(remaining, daily_cap - day_hours, MAX_TASK_HOURS)
                exposure = exposures.get(skill_id, 0)
                task_type = self._task_type(skill_id, exposure)
                resource = self._primary_resource(skill_id) if task_type == TaskType.READING else None
                if resource is not None:
                    resource = resource.model_copy(update={'estimated_time': int(piece * 60)})
                    day_resources.append(resource)
                day_number = first_day_number + len(days)
                day_tasks.append(LearningTask(
                    id=f"w{week_number}-d{day_number}-t{len(day_tasks) + 1}",
                    title=self._task_title(skill_id, task_type, resource),
                    type=task_type,
                    skill_id=skill_id,
                    estimated_hours=_to_hours(piece),
                    resource_id=resource.id if resource else None,
                ))
                if skill_id not in day_skills:
                    day_skills.append(skill_id)
                exposures[skill_id] = exposure + 1
                day_hours += piece
                remaining -= piece
        if day_tasks:
            close_day()
        return days

    def _review_week(self, track: CareerTrack, daily_cap: Fraction) -> RoadmapWeek:
        hours = min(REVIEW_HOURS, daily_cap)
        task = LearningTask(
            id="w1-d1-t1",
            title=f"Review the {track.title} skill set and update your portfolio",
            type=TaskType.QUIZ,
            estimated_hours=_to_hours(hours),
        )
        day = DailyLearningPlan(
            id="w1-d1",
            day_number=1,
            title="Day 1: Skill Review",
            description="You already cover every required skill for this track.",
            estimated_hours=_to_hours(hours),
            tasks=[task],
        )
        return RoadmapWeek(
            id="w1",
            week_number=1,
            learning_objectives=[f"Confirm readiness for {track.title} roles"],
            daily_plans=[day],
        )

    # --- entry point ---

    def synthesize(self, profile: UserProfile, track: CareerTrack, gap: List[SkillGapEntry], start_date,
                   roadmap_id: Optional[str] = None, profile_signature: str = "") -> DynamicRoadmap:
        """
        Builds the full roadmap or raises; a partial roadmap is never returned.
        """
        now = self.clock()
        start = self._check_start_date(start_date, now)
        hours = self._gap_hours(gap)
        weekly_budget = self._weekly_budget(profile)
        total_hours = sum(hours.values(), Fraction(0))
        week_count = self.plan_duration(total_hours, weekly_budget)

        active_days = active_days_for(profile.preferred_learning_style)
        daily_cap = weekly_budget / active_days

        if not gap:
            weeks = [self._review_week(track, daily_cap)]
        else:
            packed = self.pack_weeks(gap, hours, weekly_budget)
            weeks = []
            exposures: Dict[str, int] = {}
            scheduled: Dict[str, Fraction] = {}
            next_day = 1
            for index, slices in enumerate(packed):
                week_number = index + 1
                daily_plans = self._layout_week(week_number, slices, daily_cap, next_day, exposures)
                next_day += len(daily_plans)

                objectives = []
                assessments = []
                for skill_id, portion in slices:
                    started = skill_id in scheduled
                    scheduled[skill_id] = scheduled.get(skill_id, Fraction(0)) + portion
                    name = self._name(skill_id)
                    objectives.append(f"Continue building {name} skills" if started
                                      else f"Learn the fundamentals of {name}")
                    if scheduled[skill_id] == hours[skill_id]:
                        assessments.append(f"quiz-{skill_id}")
                weeks.append(RoadmapWeek(
                    id=f"w{week_number}",
                    week_number=week_number,
                    learning_objectives=objectives,
                    daily_plans=daily_plans,
                    assessments=assessments,
                ))

            project_skills = [entry.skill_id for entry in gap if self._project_worthy(entry.skill_id)]
            if project_skills:
                final_week = weeks[-1]
                final_week.project = f"project-{track.id}-capstone"
                final_week.learning_objectives.append(
                    f"Build a capstone project using {', '.join(self._name(s) for s in project_skills)}"
                )

        roadmap = DynamicRoadmap(
            id=roadmap_id or str(uuid.uuid4()),
            user_id=profile.user_id,
            target_career_track=track.id,
            start_date=start,
            end_date=start + timedelta(days=7 * len(weeks) - 1),
            weeks=weeks,
            last_updated=now,
            profile_signature=profile_signature,
            weekly_budget_hours=float(weekly_budget),
        )
        logger.info(
            f"Synthesized roadmap for user '{profile.user_id}' on track '{track.id}': "
            f"{len(weeks)} weeks, {float(total_hours):g} hours."
        )
        return roadmap
