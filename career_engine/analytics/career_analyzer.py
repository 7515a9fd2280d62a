# Engine facade used by the API: scoring, ranking, roadmaps and the mentor
import logging
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional

from career_engine.analytics.fit_scorer import FitScorer
from career_engine.analytics.mentor import MentorReply, MentorService, build_mentor
from career_engine.analytics.refresh_controller import RefreshController, progress
from career_engine.analytics.roadmap_synthesizer import RoadmapSynthesizer
from career_engine.analytics.track_ranker import RankedTrack, TrackRanker
from career_engine.config import EngineSettings, load_settings
from career_engine.data_processing.catalog_loader import TrackCatalog
from career_engine.data_processing.skill_graph import SkillGraph
from career_engine.models.career import CareerTrack, DynamicRoadmap, UserProfile, default_profile
from career_engine.models.errors import RoadmapNotFound, TrackNotFound
from career_engine.storage.stores import (
    InMemoryProfileStore,
    InMemoryRoadmapStore,
    JsonFileProfileStore,
    JsonFileRoadmapStore,
    ProfileStore,
    RoadmapStore,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CareerAnalyzer:
    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        catalog: Optional[TrackCatalog] = None,
        profile_store: Optional[ProfileStore] = None,
        roadmap_store: Optional[RoadmapStore] = None,
        mentor: Optional[MentorService] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.settings = settings or load_settings()
        self.catalog = catalog or TrackCatalog(self.settings.tracks_path, self.settings.skills_path)
        if self.settings.store_dir is not None:
            self.profile_store = profile_store or JsonFileProfileStore(self.settings.store_dir)
            self.roadmap_store = roadmap_store or JsonFileRoadmapStore(self.settings.store_dir)
        else:
            self.profile_store = profile_store or InMemoryProfileStore()
            self.roadmap_store = roadmap_store or InMemoryRoadmapStore()
        self.mentor = mentor
        self.clock = clock

        self.skill_graph: Optional[SkillGraph] = None
        self.scorer: Optional[FitScorer] = None
        self.ranker: Optional[TrackRanker] = None
        self.synthesizer: Optional[RoadmapSynthesizer] = None
        self.controller: Optional[RefreshController] = None

    def load_resources(self):
        """Loads reference data and wires the scoring and roadmap components."""
        if self.skill_graph is not None:
            return
        logger.info("Loading career track catalog and skill reference data...")
        tracks = self.catalog.list_tracks()
        self.skill_graph = SkillGraph.from_frames(self.catalog.skills_frame(), tracks)
        self.scorer = FitScorer(self.skill_graph)
        self.ranker = TrackRanker(self.scorer)
        self.synthesizer = RoadmapSynthesizer(
            self.skill_graph.hour_estimates(),
            skill_graph=self.skill_graph,
            max_plan_weeks=self.settings.max_plan_weeks,
            start_date_tolerance_days=self.settings.start_date_tolerance_days,
            clock=self.clock,
        )
        self.controller = RefreshController(
            self.synthesizer,
            self.roadmap_store,
            scorer=self.scorer,
            max_age_days=self.settings.roadmap_max_age_days,
            clock=self.clock,
        )
        if self.mentor is None:
            self.mentor = build_mentor(self.settings)
        logger.info("Career engine resources loaded.")

    def reload_catalog(self) -> List[CareerTrack]:
        self.catalog.reload()
        self.skill_graph = None
        self.load_resources()
        return self.catalog.list_tracks()

    def _require_resources(self):
        if self.skill_graph is None:
            raise RuntimeError("CareerAnalyzer resources are not loaded yet. Call load_resources() first.")

    # --- profiles ---

    def prepare_profile(self, profile: UserProfile) -> UserProfile:
        """Resolves the profile's skill identifiers to canonical skill ids."""
        self._require_resources()
        return profile.model_copy(update={
            'current_skills': self.skill_graph.resolve(profile.current_skills),
            'desired_skills': self.skill_graph.resolve(profile.desired_skills),
        })

    def get_profile(self, user_id: str) -> UserProfile:
        profile = self.profile_store.load(user_id)
        if profile is None:
            logger.info(f"No stored profile for user '{user_id}'; starting from an empty profile.")
            return default_profile(user_id)
        return profile

    def save_profile(self, profile: UserProfile) -> UserProfile:
        resolved = self.prepare_profile(profile)
        self.profile_store.save(resolved)
        return resolved

    # --- tracks ---

    def list_tracks(self) -> List[CareerTrack]:
        return self.catalog.list_tracks()

    def get_track(self, track_id: str) -> CareerTrack:
        track = self.catalog.get_track(track_id)
        if track is None:
            raise TrackNotFound(track_id)
        return track

    def recommend_careers(self, profile: UserProfile, top_n: Optional[int] = None) -> List[RankedTrack]:
        self._require_resources()
        resolved = self.prepare_profile(profile)
        tracks = self.catalog.list_tracks()
        if top_n is not None:
            return self.ranker.top(resolved, tracks, top_n)
        return self.ranker.rank(resolved, tracks)

    # --- roadmaps ---

    def generate_roadmap(self, profile: UserProfile, track_id: str, start_date: Optional[date] = None,
                         force: bool = False) -> DynamicRoadmap:
        """
        Returns a roadmap for the profile and track. An existing roadmap that still matches is
        reused unless force is set or a different start date is requested. The profile is only
        stored once a roadmap has been produced for it.
        """
        self._require_resources()
        resolved = self.prepare_profile(profile)
        track = self.get_track(track_id)
        if force:
            roadmap = self.controller.regenerate(resolved, track, start_date or self.clock().date())
        else:
            roadmap = self.controller.ensure_fresh(resolved, track, start_date)
        self.profile_store.save(resolved)
        return roadmap

    def get_roadmap(self, user_id: str) -> DynamicRoadmap:
        """Stored roadmap, regenerated first when the live profile no longer matches it."""
        self._require_resources()
        stored = self.roadmap_store.load(user_id)
        if stored is None:
            raise RoadmapNotFound(user_id)
        profile = self.get_profile(user_id)
        track = self.get_track(stored.target_career_track)
        return self.controller.ensure_fresh(profile, track)

    def toggle_task(self, user_id: str, task_id: str) -> DynamicRoadmap:
        self._require_resources()
        return self.controller.toggle(user_id, task_id)

    def roadmap_progress(self, user_id: str) -> Dict[str, float]:
        return progress(self.get_roadmap(user_id))

    # --- mentor ---

    def ask_mentor(self, profile: UserProfile, query: str, track_id: Optional[str] = None) -> MentorReply:
        self._require_resources()
        track = self.get_track(track_id) if track_id else None
        return self.mentor.respond(profile, query, track)
