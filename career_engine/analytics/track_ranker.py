import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel

from career_engine.analytics.fit_scorer import FitScorer
from career_engine.models.career import CareerTrack, SkillGapEntry, UserProfile
from career_engine.models.errors import EmptyCatalog

logger = logging.getLogger(__name__)


class RankedTrack(BaseModel):
    track: CareerTrack
    fit_score: int
    gap: List[SkillGapEntry]
    goal_alignment: int = 0


class TrackRanker:
    def __init__(self, scorer: Optional[FitScorer] = None):
        self.scorer = scorer or FitScorer()

    def rank(self, profile: UserProfile, tracks: Sequence[CareerTrack]) -> List[RankedTrack]:
        """
        Orders tracks by fit score, then goal alignment, then track id.
        The inputs are left untouched; identical inputs give identical output.
        """
        if not tracks:
            raise EmptyCatalog()

        ranked = []
        for track in tracks:
            fit_score, gap = self.scorer.score(profile, track)
            ranked.append(RankedTrack(
                track=track,
                fit_score=fit_score,
                gap=gap,
                goal_alignment=self.scorer.goal_alignment(profile, track),
            ))
        ranked.sort(key=lambda item: (-item.fit_score, -item.goal_alignment, item.track.id))
        logger.info(f"Ranked {len(ranked)} tracks for user '{profile.user_id}'. Top: {ranked[0].track.id} ({ranked[0].fit_score})")
        return ranked

    def top(self, profile: UserProfile, tracks: Sequence[CareerTrack], n: int = 3) -> List[RankedTrack]:
        return self.rank(profile, tracks)[:max(0, n)]
