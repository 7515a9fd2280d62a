"""Track ranking order and tie-breaks."""

from typing import List

import pytest

from career_engine.analytics.track_ranker import TrackRanker
from career_engine.models.career import CareerTrack, RequiredSkill, UserProfile
from career_engine.models.errors import EmptyCatalog, InvalidTrackDefinition


@pytest.fixture
def tracks(catalog) -> List[CareerTrack]:
    return catalog.list_tracks()


class TestTrackRanker:
    def test_best_fit_first_then_track_id(self, tracks: List[CareerTrack]) -> None:
        profile = UserProfile(user_id="u1", current_skills=["js"])
        ranked = TrackRanker().rank(profile, tracks)
        assert [(r.track.id, r.fit_score) for r in ranked] == [
            ("web-dev", 44),
            ("backend-dev", 0),
            ("data-analyst", 0),
        ]
        assert [g.skill_id for g in ranked[0].gap] == ["react", "node"]

    def test_goal_alignment_breaks_score_ties(self, tracks: List[CareerTrack]) -> None:
        profile = UserProfile(user_id="u1", career_goals=["Become a data analyst"])
        ranked = TrackRanker().rank(profile, tracks)
        assert ranked[0].track.id == "data-analyst"
        assert ranked[0].goal_alignment > 0

    def test_same_input_same_output(self, tracks: List[CareerTrack]) -> None:
        profile = UserProfile(user_id="u1", current_skills=["node", "python"])
        ranker = TrackRanker()
        first = [r.model_dump() for r in ranker.rank(profile, tracks)]
        second = [r.model_dump() for r in ranker.rank(profile, list(reversed(tracks)))]
        assert first == second

    def test_inputs_are_not_modified(self, tracks: List[CareerTrack]) -> None:
        profile = UserProfile(user_id="u1", current_skills=["sql"])
        before_tracks = [t.model_dump() for t in tracks]
        before_profile = profile.model_dump()
        TrackRanker().rank(profile, tracks)
        assert [t.model_dump() for t in tracks] == before_tracks
        assert profile.model_dump() == before_profile

    def test_empty_catalog(self) -> None:
        with pytest.raises(EmptyCatalog):
            TrackRanker().rank(UserProfile(user_id="u1"), [])

    def test_top_n(self, tracks: List[CareerTrack]) -> None:
        profile = UserProfile(user_id="u1", current_skills=["node"])
        ranker = TrackRanker()
        top = ranker.top(profile, tracks, n=2)
        assert [r.track.id for r in top] == ["backend-dev", "web-dev"]
        assert ranker.top(profile, tracks, n=0) == []

    def test_malformed_track_propagates(self) -> None:
        tracks = [
            CareerTrack(id="ok", title="OK", required_skills=[RequiredSkill(skill_id="a", weight=3)]),
            CareerTrack(id="broken", title="Broken"),
        ]
        with pytest.raises(InvalidTrackDefinition):
            TrackRanker().rank(UserProfile(user_id="u1"), tracks)
