"""Roadmap freshness, regeneration and task toggling."""

from datetime import timedelta

import pytest

from career_engine.analytics.fit_scorer import FitScorer
from career_engine.analytics.refresh_controller import (
    RefreshController,
    RoadmapState,
    profile_signature,
    progress,
    toggle_task,
)
from career_engine.models.career import UserProfile
from career_engine.models.errors import RoadmapNotFound, TaskNotFound, UnrealisticTimeline
from career_engine.storage.stores import InMemoryRoadmapStore
from tests.conftest import NOW, START, fixed_clock


@pytest.fixture
def store() -> InMemoryRoadmapStore:
    return InMemoryRoadmapStore()


@pytest.fixture
def controller(synthesizer, skill_graph, store) -> RefreshController:
    return RefreshController(synthesizer, store, scorer=FitScorer(skill_graph), clock=fixed_clock)


class TestSignature:
    def test_order_of_skills_does_not_matter(self) -> None:
        a = UserProfile(user_id="u1", current_skills=["js", "react"], desired_skills=["node", "sql"])
        b = UserProfile(user_id="u1", current_skills=["react", "js"], desired_skills=["sql", "node"])
        assert profile_signature(a, "web-dev") == profile_signature(b, "web-dev")

    def test_inputs_that_change_the_plan_change_the_signature(self) -> None:
        base = UserProfile(user_id="u1", current_skills=["js"], time_availability=5)
        signature = profile_signature(base, "web-dev")
        assert profile_signature(base.model_copy(update={"time_availability": 6}), "web-dev") != signature
        assert profile_signature(base.model_copy(update={"current_skills": ["js", "react"]}), "web-dev") != signature
        assert profile_signature(base, "backend-dev") != signature

    def test_unrelated_fields_do_not_change_the_signature(self) -> None:
        base = UserProfile(user_id="u1", current_skills=["js"])
        other = base.model_copy(update={"interests": ["gaming"], "experience": 4})
        assert profile_signature(base, "web-dev") == profile_signature(other, "web-dev")


class TestEnsureFresh:
    def test_generates_then_reuses(self, controller, store, js_profile, web_track) -> None:
        first = controller.ensure_fresh(js_profile, web_track, START)
        assert store.load("u1").id == first.id
        assert controller.evaluate(first, js_profile, "web-dev") == RoadmapState.FRESH
        again = controller.ensure_fresh(js_profile, web_track)
        assert again.id == first.id

    def test_profile_change_regenerates_and_drops_progress(self, controller, js_profile, web_track) -> None:
        first = controller.ensure_fresh(js_profile, web_track, START)
        controller.toggle("u1", "w1-d1-t1")

        grown = js_profile.model_copy(update={"current_skills": ["js", "react"]})
        assert controller.evaluate(controller.store.load("u1"), grown, "web-dev") == RoadmapState.STALE
        regenerated = controller.ensure_fresh(grown, web_track)
        assert regenerated.id != first.id
        assert len(regenerated.weeks) == 3
        assert not any(task.completed for _, _, task in regenerated.iter_tasks())
        assert regenerated.start_date == START

    def test_partially_complete_roadmap_is_kept(self, controller, js_profile, web_track) -> None:
        first = controller.ensure_fresh(js_profile, web_track, START)
        toggled = controller.toggle("u1", "w1-d1-t1")
        assert controller.evaluate(toggled, js_profile, "web-dev") == RoadmapState.PARTIALLY_COMPLETE
        kept = controller.ensure_fresh(js_profile, web_track)
        assert kept.id == first.id
        assert kept.weeks[0].daily_plans[0].tasks[0].completed

    def test_other_track_is_stale(self, controller, js_profile, web_track) -> None:
        roadmap = controller.ensure_fresh(js_profile, web_track, START)
        assert controller.evaluate(roadmap, js_profile, "backend-dev") == RoadmapState.STALE

    def test_different_start_date_is_stale(self, controller, js_profile, web_track) -> None:
        first = controller.ensure_fresh(js_profile, web_track, START)
        assert controller.evaluate(first, js_profile, "web-dev", START) == RoadmapState.FRESH
        later = START + timedelta(days=7)
        assert controller.evaluate(first, js_profile, "web-dev", later) == RoadmapState.STALE
        moved = controller.ensure_fresh(js_profile, web_track, later)
        assert moved.id != first.id
        assert moved.start_date == later
        assert controller.ensure_fresh(js_profile, web_track).id == moved.id

    def test_expired_roadmap_is_stale(self, synthesizer, skill_graph, store, js_profile, web_track) -> None:
        RefreshController(synthesizer, store, clock=fixed_clock).ensure_fresh(js_profile, web_track, START)
        later = RefreshController(synthesizer, store, scorer=FitScorer(skill_graph), max_age_days=30,
                                  clock=lambda: NOW + timedelta(days=31))
        assert later.evaluate(store.load("u1"), js_profile, "web-dev") == RoadmapState.STALE

    def test_failed_regeneration_keeps_previous_roadmap(self, controller, store, js_profile, web_track) -> None:
        first = controller.ensure_fresh(js_profile, web_track, START)
        broke = js_profile.model_copy(update={"time_availability": 0})
        with pytest.raises(UnrealisticTimeline):
            controller.ensure_fresh(broke, web_track)
        assert store.load("u1").id == first.id


class TestToggle:
    def test_only_the_target_task_changes(self, controller, js_profile, web_track) -> None:
        before = controller.ensure_fresh(js_profile, web_track, START)
        after = controller.toggle("u1", "w2-d7-t1")

        assert len(after.weeks) == len(before.weeks)
        for old_week, new_week in zip(before.weeks, after.weeks):
            assert len(old_week.daily_plans) == len(new_week.daily_plans)
        flipped = [(t.id, t.completed) for _, _, t in after.iter_tasks() if t.completed]
        assert flipped == [("w2-d7-t1", True)]
        assert after.weeks[1].daily_plans[1].completed
        assert not before.weeks[1].daily_plans[1].tasks[0].completed

    def test_toggle_twice_restores(self, controller, js_profile, web_track) -> None:
        before = controller.ensure_fresh(js_profile, web_track, START)
        controller.toggle("u1", "w1-d3-t1")
        restored = controller.toggle("u1", "w1-d3-t1")
        assert restored.model_dump() == before.model_dump()

    def test_day_completion_needs_every_task(self, synthesizer, web_track) -> None:
        profile = UserProfile(user_id="u1", current_skills=["js"], time_availability=20)
        gap = FitScorer().score(profile, web_track).gap
        roadmap = synthesizer.synthesize(profile, web_track, gap, START)
        day = roadmap.weeks[0].daily_plans[0]
        assert len(day.tasks) == 2
        half = toggle_task(roadmap, day.tasks[0].id)
        assert not half.weeks[0].daily_plans[0].completed
        full = toggle_task(half, day.tasks[1].id)
        assert full.weeks[0].daily_plans[0].completed

    def test_unknown_task(self, controller, js_profile, web_track) -> None:
        controller.ensure_fresh(js_profile, web_track, START)
        with pytest.raises(TaskNotFound):
            controller.toggle("u1", "w99-d1-t1")

    def test_no_roadmap(self, controller) -> None:
        with pytest.raises(RoadmapNotFound):
            controller.toggle("nobody", "w1-d1-t1")

    def test_progress_summary(self, controller, js_profile, web_track) -> None:
        controller.ensure_fresh(js_profile, web_track, START)
        roadmap = controller.toggle("u1", "w1-d1-t1")
        assert progress(roadmap) == {
            "total_tasks": 30,
            "completed_tasks": 1,
            "total_hours": 30.0,
            "completed_hours": 1.0,
            "percent_complete": 3.3,
        }
