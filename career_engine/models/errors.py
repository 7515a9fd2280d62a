# Error taxonomy for the career engine
"""
Exceptions raised by the scoring, ranking and roadmap components.

Input problems derive from ValueError and service problems from RuntimeError,
so callers can keep the usual ValueError/RuntimeError handling. Every class
carries the HTTP status the API layer answers with.
"""

from typing import List, Optional


class CareerEngineError(Exception):
    """Base class for every engine failure."""
    status_code = 500


class InvalidTrackDefinition(CareerEngineError, RuntimeError):
    """Reference data describes a track that cannot be scored."""
    status_code = 500

    def __init__(self, track_id: str, reason: str):
        self.track_id = track_id
        self.reason = reason
        super().__init__(f"Career track '{track_id}' is malformed: {reason}")


class EmptyCatalog(CareerEngineError, RuntimeError):
    """No career tracks are available to rank."""
    status_code = 503

    def __init__(self, message: str = "The career track catalog is empty. Reload the catalog and retry."):
        super().__init__(message)


class MissingHourEstimate(CareerEngineError, ValueError):
    status_code = 424

    def __init__(self, skill_id: str):
        self.skill_id = skill_id
        super().__init__(
            f"No learning-hour estimate for skill '{skill_id}'. "
            f"Add a positive 'base_hours' value for it to the skill reference data."
        )


class UnrealisticTimeline(CareerEngineError, ValueError):
    status_code = 422


class InvalidStartDate(CareerEngineError, ValueError):
    status_code = 400


class UnknownSkill(CareerEngineError, ValueError):
    """A skill identifier could not be resolved against the skill graph."""
    status_code = 404

    def __init__(self, identifier: str, suggestions: Optional[List[str]] = None):
        self.identifier = identifier
        self.suggestions = suggestions or []
        message = f"Unknown skill identifier '{identifier}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)


class TrackNotFound(CareerEngineError, ValueError):
    status_code = 404

    def __init__(self, track_id: str):
        self.track_id = track_id
        super().__init__(f"Career track '{track_id}' not found in the catalog.")


class RoadmapNotFound(CareerEngineError, ValueError):
    status_code = 404

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No roadmap stored for user '{user_id}'. Generate one first.")


class TaskNotFound(CareerEngineError, ValueError):
    status_code = 404

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task '{task_id}' does not exist in this roadmap.")
