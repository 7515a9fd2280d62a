# AI mentor: remote text generation with a deterministic local fallback
import logging
import math
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Optional

from huggingface_hub import InferenceClient
from pydantic import BaseModel

from career_engine.config import EngineSettings
from career_engine.models.career import CareerTrack, LearningStyle, UserProfile

logger = logging.getLogger(__name__)

MENTOR_PREFIX = "AI Career Mentor:"
MIN_REPLY_LENGTH = 20

_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="mentor")


class MentorReply(BaseModel):
    text: str
    source: str


class MentorService(ABC):
    @abstractmethod
    def respond(self, profile: UserProfile, query: str, track: Optional[CareerTrack] = None) -> MentorReply:
        ...


def _first(values, default: str) -> str:
    return values[0] if values else default


class RuleBasedMentor(MentorService):
    """Keyword-driven replies built only from the profile. Always available."""

    source = "rules"

    def _format_hint(self, style: LearningStyle) -> str:
        if style == LearningStyle.VISUAL:
            return "video tutorials"
        if style == LearningStyle.READING_WRITING:
            return "documentation"
        return "interactive exercises"

    def _course_format(self, style: LearningStyle) -> str:
        return {
            LearningStyle.VISUAL: "video-based",
            LearningStyle.AUDITORY: "lecture-based",
            LearningStyle.KINESTHETIC: "hands-on",
        }.get(style, "comprehensive")

    def respond(self, profile: UserProfile, query: str, track: Optional[CareerTrack] = None) -> MentorReply:
        skills = profile.current_skills
        desired = list(profile.desired_skills)
        if track is not None:
            desired += [req.skill_id for req in track.required_skills
                        if req.skill_id not in skills and req.skill_id not in desired]
        goals = profile.career_goals
        experience = profile.experience
        style = profile.preferred_learning_style
        goal = _first(goals, 'advance your career')

        if experience > 5:
            level = 'Senior Developer or Team Lead'
        elif experience > 2:
            level = 'Mid-level Developer'
        else:
            level = 'Junior Developer'

        responses = {
            'learning path': (
                f"Based on your {experience:g} years of experience and current skills in "
                f"{', '.join(skills[:3]) or 'your current areas'}, I recommend focusing on "
                f"{' and '.join(desired[:2]) or 'the core skills of your target role'} first. "
                f"This aligns with your goal to {goal}."
            ),
            'recommend': (
                f"Looking at your profile, I'd recommend exploring {_first(desired, 'new technologies')} through "
                f"{self._format_hint(style)}. This would complement your experience with "
                f"{_first(skills, 'your current skills')}."
            ),
            'best practice': (
                f"Best practices for {_first(skills, 'your field')} include continuous learning and project-based "
                f"experience. With your goals related to {_first(goals, 'career advancement')}, I suggest focusing "
                f"on real-world applications of {_first(desired, 'your desired skills')}."
            ),
            'course': (
                f"For someone with your background in {' and '.join(skills[:2]) or 'your field'}, I'd recommend "
                f"courses that focus on {_first(desired, 'your areas of interest')}. Given your {style.value} "
                f"learning style, look for {self._course_format(style)} courses."
            ),
            'project idea': (
                f"Consider building a project that combines {_first(skills, 'your strongest skill')} with "
                f"{_first(desired, 'what you want to learn')}. It will showcase your abilities while you learn."
            ),
            'career advice': (
                f"With {experience:g} years of experience and skills in {', '.join(skills[:3]) or 'your field'}, "
                f"you're positioned to pursue roles as a {level}. Focus on {_first(desired, 'your next skill')} "
                f"to accelerate toward your goal of {_first(goals, 'advancement')}."
            ),
            'time management': (
                f"Based on your {profile.time_availability:g} hours/week availability, break learning "
                f"{_first(desired, 'new skills')} into {max(1, math.ceil(profile.time_availability / 3))} sessions "
                f"of 2-3 hours each. This structured approach works well with your {style.value} learning style."
            ),
            'help': (
                "I'm your AI Career Mentor! I can help with learning paths, course recommendations, project ideas, "
                "career advice, and more. Ask me about your tech career and I'll answer based on your profile."
            ),
        }

        query_lower = query.lower()
        for keyword, response in responses.items():
            if keyword in query_lower:
                return MentorReply(text=response, source=self.source)

        return MentorReply(
            text=(
                f"Based on your profile with {len(skills)} skills and interest in "
                f"{', '.join(desired[:2]) or 'new areas'}, I'd recommend focusing on projects and courses that "
                f"align with your {_first(goals, 'career goals')}. Could you ask me something more specific "
                f"about your learning path or career development?"
            ),
            source=self.source,
        )


class RemoteMentor(MentorService):
    """Text generation through the Hugging Face inference API."""

    source = "huggingface"

    def __init__(self, client: InferenceClient, model_name: str = "distilgpt2"):
        self.client = client
        self.model_name = model_name

    def build_prompt(self, profile: UserProfile, query: str, track: Optional[CareerTrack]) -> str:
        lines = [
            f"User skills: {', '.join(profile.current_skills) or 'None provided'}",
            f"Skills to learn: {', '.join(profile.desired_skills) or 'None provided'}",
            f"Career goals: {', '.join(profile.career_goals) or 'None provided'}",
            f"Experience level: {profile.experience:g} years",
            f"Learning style: {profile.preferred_learning_style.value}",
        ]
        if track is not None:
            lines.append(f"Focused career track: {track.title}")
            lines.append(f"Required skills for track: {', '.join(r.skill_id for r in track.required_skills)}")
        return "\n".join(lines) + f"\n\nUser question: {query}\n\n{MENTOR_PREFIX}"

    def respond(self, profile: UserProfile, query: str, track: Optional[CareerTrack] = None) -> MentorReply:
        generated = self.client.text_generation(
            self.build_prompt(profile, query, track),
            model=self.model_name,
            max_new_tokens=300,
            temperature=0.7,
            top_p=0.9,
            repetition_penalty=1.2,
        )
        text = generated or ""
        start = text.find(MENTOR_PREFIX)
        if start != -1:
            text = text[start + len(MENTOR_PREFIX):]
        return MentorReply(text=text.strip(), source=self.source)


class TimeoutMentor(MentorService):
    """
    Runs the primary mentor with a deadline. Timeouts, errors and unusably short
    replies are answered by the fallback mentor instead; callers never see them.
    """

    def __init__(self, primary: MentorService, fallback: MentorService, timeout_seconds: float):
        self.primary = primary
        self.fallback = fallback
        self.timeout_seconds = timeout_seconds

    def respond(self, profile: UserProfile, query: str, track: Optional[CareerTrack] = None) -> MentorReply:
        future = _executor.submit(self.primary.respond, profile, query, track)
        try:
            reply = future.result(timeout=self.timeout_seconds)
        except FuturesTimeout:
            logger.warning(f"Mentor call timed out after {self.timeout_seconds}s; using local fallback.")
            return self.fallback.respond(profile, query, track)
        except Exception as e:
            logger.warning(f"Mentor call failed ({type(e).__name__}: {e}); using local fallback.")
            return self.fallback.respond(profile, query, track)
        if len(reply.text) < MIN_REPLY_LENGTH:
            logger.info("Mentor reply too short; using local fallback.")
            return self.fallback.respond(profile, query, track)
        return reply


def build_mentor(settings: EngineSettings, client: Optional[InferenceClient] = None) -> MentorService:
    """Picks the mentor implementation from the configured backend."""
    rules = RuleBasedMentor()
    if settings.mentor_backend == "rules":
        return rules
    if client is None:
        if not settings.huggingface_api_key:
            logger.warning("MENTOR_BACKEND is 'remote' but HUGGINGFACE_API_KEY is not set; using rule-based mentor.")
            return rules
        client = InferenceClient(token=settings.huggingface_api_key, timeout=settings.mentor_timeout_seconds)
    remote = RemoteMentor(client, model_name=settings.hf_model_name)
    return TimeoutMentor(remote, rules, settings.mentor_timeout_seconds)
