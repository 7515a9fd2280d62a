# career_engine/api/main.py

import logging
from datetime import date
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from career_engine.analytics.career_analyzer import CareerAnalyzer
from career_engine.config import load_settings
from career_engine.models.career import CareerTrack, DemandLevel, DynamicRoadmap, SkillGapEntry, UserProfile
from career_engine.models.errors import CareerEngineError

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

settings = load_settings()

app = FastAPI(
    title="Career Matching & Roadmap API",
    description="Ranks career tracks for a learner profile and builds week-by-week learning roadmaps.",
    version="1.0.0"
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual origins like ["http://localhost:3000"]
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Initialize CareerAnalyzer globally
career_analyzer = CareerAnalyzer(settings)


@app.on_event("startup")
async def startup_event():
    """Event handler that runs when the FastAPI application starts."""
    logging.info("API Startup: Loading career catalog and skill graph...")
    try:
        career_analyzer.load_resources()
        logging.info("API Startup: All resources loaded successfully.")
    except (CareerEngineError, RuntimeError) as e:
        logging.error(f"API Startup Error: {e}")
        raise


def _http_error(e: CareerEngineError) -> HTTPException:
    """Maps an engine failure to its HTTP status, with the failure kind in the body."""
    if e.status_code >= 500:
        logger.error(f"{type(e).__name__}: {e}")
    else:
        logger.info(f"Rejected request with {type(e).__name__}: {e}")
    return HTTPException(status_code=e.status_code, detail={"error": type(e).__name__, "message": str(e)})


# --- Pydantic Models for Request and Response ---

class TrackSummary(BaseModel):
    id: str
    title: str
    description: str
    demand_level: DemandLevel
    average_salary: str
    time_to_achieve: str
    job_titles: List[str]
    fit_score: int = Field(..., description="0-100 weighted coverage of the track's required skills.")
    missing_skills: List[SkillGapEntry] = Field(..., description="Skill gap, most important first.")
    goal_alignment: int = Field(0, description="Goal keywords shared with the track's job titles.")


class RecommendationResponse(BaseModel):
    recommendations: List[TrackSummary]


class RoadmapRequest(BaseModel):
    user_profile: UserProfile
    career_track_id: str = Field(..., description="Id of the chosen career track.")
    start_date: Optional[date] = Field(None, description="First day of the plan. Defaults to today.")
    force: bool = Field(False, description="Regenerate even if the stored roadmap is still fresh.")


class RoadmapResponse(BaseModel):
    roadmap: DynamicRoadmap
    guidance: str = Field("", description="Mentor advice for the plan.")
    guidance_source: str = ""
    message: str = "Roadmap ready."


class ProgressResponse(BaseModel):
    total_tasks: int
    completed_tasks: int
    total_hours: float
    completed_hours: float
    percent_complete: float


class MentorRequest(BaseModel):
    user_profile: UserProfile
    query: str = Field(..., min_length=1)
    career_track_id: Optional[str] = None


class MentorResponse(BaseModel):
    response: str
    source: str


class CatalogResponse(BaseModel):
    tracks: List[CareerTrack]
    total: int


# --- API Endpoints ---

@app.post("/api/v1/recommendations/careers", response_model=RecommendationResponse, summary="Rank career tracks for a profile")
async def recommend_careers(user_profile: UserProfile, top_n: Optional[int] = None):
    """
    Scores every career track against the profile and returns them best fit first.
    """
    try:
        ranked = career_analyzer.recommend_careers(user_profile, top_n=top_n)
    except CareerEngineError as e:
        raise _http_error(e)
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return RecommendationResponse(recommendations=[
        TrackSummary(
            id=item.track.id,
            title=item.track.title,
            description=item.track.description,
            demand_level=item.track.demand_level,
            average_salary=item.track.average_salary,
            time_to_achieve=item.track.time_to_achieve,
            job_titles=item.track.job_titles,
            fit_score=item.fit_score,
            missing_skills=item.gap,
            goal_alignment=item.goal_alignment,
        )
        for item in ranked
    ])


@app.post("/api/v1/roadmap/generate", response_model=RoadmapResponse, summary="Generate a learning roadmap for a track")
def generate_roadmap(request: RoadmapRequest):
    """
    Builds (or reuses, when still fresh) the learner's roadmap for the chosen track.
    The mentor guidance is best-effort and never fails the request.
    """
    try:
        roadmap = career_analyzer.generate_roadmap(
            request.user_profile,
            request.career_track_id,
            start_date=request.start_date,
            force=request.force,
        )
        reply = career_analyzer.ask_mentor(request.user_profile, "learning path", request.career_track_id)
    except CareerEngineError as e:
        raise _http_error(e)
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return RoadmapResponse(roadmap=roadmap, guidance=reply.text, guidance_source=reply.source)


@app.get("/api/v1/roadmap/{user_id}", response_model=DynamicRoadmap, summary="Get the learner's current roadmap")
async def get_roadmap(user_id: str):
    """
    Returns the stored roadmap. If the profile changed since it was built, it is regenerated first.
    """
    try:
        return career_analyzer.get_roadmap(user_id)
    except CareerEngineError as e:
        raise _http_error(e)


@app.post("/api/v1/roadmap/{user_id}/tasks/{task_id}/toggle", response_model=DynamicRoadmap, summary="Toggle a task's completion")
async def toggle_task(user_id: str, task_id: str):
    try:
        return career_analyzer.toggle_task(user_id, task_id)
    except CareerEngineError as e:
        raise _http_error(e)


@app.get("/api/v1/roadmap/{user_id}/progress", response_model=ProgressResponse, summary="Completion summary of the roadmap")
async def roadmap_progress(user_id: str):
    try:
        return ProgressResponse(**career_analyzer.roadmap_progress(user_id))
    except CareerEngineError as e:
        raise _http_error(e)


@app.get("/api/v1/profile/{user_id}", response_model=UserProfile, summary="Get a learner profile")
async def get_profile(user_id: str):
    """Returns the stored profile, or an empty default profile for new learners."""
    return career_analyzer.get_profile(user_id)


@app.put("/api/v1/profile/{user_id}", response_model=UserProfile, summary="Create or update a learner profile")
async def put_profile(user_id: str, profile: UserProfile):
    if profile.user_id != user_id:
        raise HTTPException(status_code=400, detail="user_id in the body does not match the URL.")
    try:
        return career_analyzer.save_profile(profile)
    except CareerEngineError as e:
        raise _http_error(e)
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/api/v1/careers", response_model=CatalogResponse, summary="List all career tracks")
async def list_careers():
    try:
        tracks = career_analyzer.list_tracks()
    except CareerEngineError as e:
        raise _http_error(e)
    return CatalogResponse(tracks=tracks, total=len(tracks))


@app.post("/api/v1/careers/reload", response_model=CatalogResponse, summary="Reload the career track catalog")
async def reload_careers():
    try:
        tracks = career_analyzer.reload_catalog()
    except CareerEngineError as e:
        raise _http_error(e)
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return CatalogResponse(tracks=tracks, total=len(tracks))


@app.post("/api/v1/mentor/ask", response_model=MentorResponse, summary="Ask the AI career mentor")
def ask_mentor(request: MentorRequest):
    """
    Answers from the remote model when it responds in time, otherwise from the local rule-based mentor.
    """
    try:
        reply = career_analyzer.ask_mentor(request.user_profile, request.query, request.career_track_id)
    except CareerEngineError as e:
        raise _http_error(e)
    return MentorResponse(response=reply.text, source=reply.source)


if __name__ == "__main__":
    uvicorn.run(
        "career_engine.api.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level="info"
    )
