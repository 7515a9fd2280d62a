# Roadmap freshness: regenerate on profile/track change, patch on task toggles
"""
A stored roadmap is FRESH while the signature recorded at synthesis time
matches the live profile and track. Any mismatch makes it STALE, as does an
explicitly requested start date other than the stored one, and reading it
triggers a full regeneration. Completion flags do not survive a
regeneration; the old roadmap is replaced as a whole. Toggling tasks only
moves a FRESH roadmap to PARTIALLY_COMPLETE and never causes regeneration.
"""

import hashlib
import json
import logging
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Optional

from career_engine.analytics.fit_scorer import FitScorer
from career_engine.analytics.roadmap_synthesizer import RoadmapSynthesizer
from career_engine.models.career import CareerTrack, DynamicRoadmap, UserProfile
from career_engine.models.errors import RoadmapNotFound, TaskNotFound
from career_engine.storage.stores import RoadmapStore

logger = logging.getLogger(__name__)


class RoadmapState(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    PARTIALLY_COMPLETE = "partially_complete"


def profile_signature(profile: UserProfile, track_id: str) -> str:
    payload = {
        'current_skills': sorted(profile.current_skills),
        'desired_skills': sorted(profile.desired_skills),
        'time_availability': float(profile.time_availability),
        'track_id': track_id,
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(',', ':')).encode('utf-8')
    return hashlib.sha256(encoded).hexdigest()


def toggle_task(roadmap: DynamicRoadmap, task_id: str) -> DynamicRoadmap:
    """
    Returns a copy of the roadmap with one task's completion flag flipped.
    The day's completed flag follows its tasks; nothing else changes.
    """
    updated = roadmap.model_copy(deep=True)
    for _, day, task in updated.iter_tasks():
        if task.id == task_id:
            task.completed = not task.completed
            day.completed = all(t.completed for t in day.tasks)
            return updated
    raise TaskNotFound(task_id)


def progress(roadmap: DynamicRoadmap) -> Dict[str, float]:
    total_tasks = 0
    completed_tasks = 0
    total_hours = 0.0
    completed_hours = 0.0
    for _, _, task in roadmap.iter_tasks():
        total_tasks += 1
        total_hours += task.estimated_hours
        if task.completed:
            completed_tasks += 1
            completed_hours += task.estimated_hours
    return {
        'total_tasks': total_tasks,
        'completed_tasks': completed_tasks,
        'total_hours': round(total_hours, 2),
        'completed_hours': round(completed_hours, 2),
        'percent_complete': round(100 * completed_tasks / total_tasks, 1) if total_tasks else 0.0,
    }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshController:
    def __init__(
        self,
        synthesizer: RoadmapSynthesizer,
        store: RoadmapStore,
        scorer: Optional[FitScorer] = None,
        max_age_days: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.synthesizer = synthesizer
        self.store = store
        self.scorer = scorer or FitScorer()
        self.max_age_days = max_age_days
        self.clock = clock

    def _expired(self, roadmap: DynamicRoadmap) -> bool:
        if self.max_age_days is None:
            return False
        last_updated = roadmap.last_updated
        now = self.clock()
        if last_updated.tzinfo is None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)
        return now - last_updated > timedelta(days=self.max_age_days)

    def evaluate(self, roadmap: DynamicRoadmap, profile: UserProfile, track_id: str,
                 start_date: Optional[date] = None) -> RoadmapState:
        if roadmap.target_career_track != track_id:
            return RoadmapState.STALE
        if start_date is not None and roadmap.start_date != start_date:
            return RoadmapState.STALE
        if roadmap.profile_signature != profile_signature(profile, track_id):
            return RoadmapState.STALE
        if self._expired(roadmap):
            return RoadmapState.STALE
        if any(task.completed for _, _, task in roadmap.iter_tasks()):
            return RoadmapState.PARTIALLY_COMPLETE
        return RoadmapState.FRESH

    def regenerate(self, profile: UserProfile, track: CareerTrack, start_date: date) -> DynamicRoadmap:
        """Full synthesis from the current profile; the previous roadmap is replaced."""
        _, gap = self.scorer.score(profile, track)
        roadmap = self.synthesizer.synthesize(
            profile, track, gap, start_date,
            profile_signature=profile_signature(profile, track.id),
        )
        self.store.save(roadmap)
        return roadmap

    def ensure_fresh(self, profile: UserProfile, track: CareerTrack,
                     start_date: Optional[date] = None) -> DynamicRoadmap:
        """
        Returns the stored roadmap if it still matches the profile, track and
        requested start date, otherwise regenerates, saves and returns a new one.
        """
        stored = self.store.load(profile.user_id)
        if stored is not None:
            state = self.evaluate(stored, profile, track.id, start_date)
            if state != RoadmapState.STALE:
                return stored
            logger.info(f"Roadmap for user '{profile.user_id}' is stale; regenerating for track '{track.id}'.")
        else:
            logger.info(f"No roadmap stored for user '{profile.user_id}'; generating one for track '{track.id}'.")
        return self.regenerate(profile, track, start_date or self.clock().date())

    def toggle(self, user_id: str, task_id: str) -> DynamicRoadmap:
        roadmap = self.store.load(user_id)
        if roadmap is None:
            raise RoadmapNotFound(user_id)
        updated = toggle_task(roadmap, task_id)
        self.store.save(updated)
        return updated
