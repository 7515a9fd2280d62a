# Fit scoring of a learner profile against a career track
import logging
import math
import re
from typing import List, NamedTuple, Optional, Set

import numpy as np

from career_engine.data_processing.skill_graph import SkillGraph
from career_engine.models.career import CareerTrack, RequiredSkill, SkillGapEntry, UserProfile
from career_engine.models.errors import InvalidTrackDefinition

logger = logging.getLogger(__name__)

STOPWORDS = {
    'a', 'an', 'and', 'as', 'at', 'be', 'become', 'for', 'get', 'in', 'into', 'of', 'on', 'or',
    'role', 'the', 'to', 'with', 'work', 'working', 'job', 'career', 'my',
}


class FitResult(NamedTuple):
    fit_score: int
    gap: List[SkillGapEntry]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _keywords(texts) -> Set[str]:
    words = set()
    for text in texts:
        for token in re.findall(r"[a-z0-9+#]+", text.lower()):
            if token not in STOPWORDS and len(token) > 1:
                words.add(token)
    return words


def sort_gap(gap: List[SkillGapEntry]) -> List[SkillGapEntry]:
    """Heaviest skills first; equal weights by skill id."""
    return sorted(gap, key=lambda entry: (-entry.weight, entry.skill_id))


class FitScorer:
    """
    Scores how well a profile's current skills cover a track's weighted requirements.
    Requirements come from the skill graph when it knows the track, otherwise from the track itself.
    """

    def __init__(self, skill_graph: Optional[SkillGraph] = None):
        self.skill_graph = skill_graph

    def _requirements(self, track: CareerTrack) -> List[RequiredSkill]:
        if self.skill_graph is not None and self.skill_graph.has_track(track.id):
            return self.skill_graph.requirements(track.id)
        return list(track.required_skills)

    def score(self, profile: UserProfile, track: CareerTrack) -> FitResult:
        requirements = self._requirements(track)
        weights = np.array([req.weight for req in requirements], dtype=float)
        total_weight = float(weights.sum()) if len(weights) else 0.0
        if total_weight <= 0:
            logger.error(f"Track '{track.id}' has a total requirement weight of {total_weight}; rejecting.")
            raise InvalidTrackDefinition(track.id, "total importance weight of required skills is zero")

        current = set(profile.current_skills)
        matched_mask = np.array([req.skill_id in current for req in requirements], dtype=bool)
        matched_sum = float(weights[matched_mask].sum())
        fit_score = round_half_up(100 * matched_sum / total_weight)

        gap = sort_gap([SkillGapEntry(skill_id=req.skill_id, weight=req.weight)
                        for req, matched in zip(requirements, matched_mask) if not matched])
        return FitResult(fit_score, gap)

    def goal_alignment(self, profile: UserProfile, track: CareerTrack) -> int:
        """
        Number of career goal keywords that also appear in the track's job titles or description.
        Used only to order tracks with equal fit scores.
        """
        learner_words = _keywords(profile.career_goals)
        if not learner_words:
            return 0
        track_words = _keywords(track.job_titles + [track.title, track.description])
        return len(learner_words & track_words)
