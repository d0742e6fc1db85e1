"""
Composition error hierarchy.

Build errors (EmptyProject, MissingSceneAsset, InvalidDuration, InvalidSettings)
mean the upstream project data must be fixed before compiling again.
SubmissionFailure and UpstreamFetchError are transient and may be retried by the
caller; the engine itself never retries.
"""

from typing import Any, Optional


class CompositionError(Exception):
    """Base exception for all composition engine errors."""

    code = "composition_error"
    retryable = False

    def details(self) -> dict[str, Any]:
        """Structured, user-actionable context for API responses and logs."""
        return {}


class BuildError(CompositionError):
    """The project data cannot be composed into a plan."""

    code = "build_error"


class EmptyProject(BuildError):
    """The project has no scenes."""

    code = "empty_project"

    def __init__(self, project_id: Optional[str] = None):
        super().__init__("No scenes found. Please generate scenes first.")
        self.project_id = project_id

    def details(self) -> dict[str, Any]:
        return {"project_id": self.project_id}


class MissingSceneAsset(BuildError):
    """A scene has no image or video clip that can represent it."""

    code = "missing_scene_asset"

    def __init__(self, scene_number: int, scene_id: Optional[str] = None):
        super().__init__(f"No image found for scene {scene_number}")
        self.scene_number = scene_number
        self.scene_id = scene_id

    def details(self) -> dict[str, Any]:
        return {"scene_number": self.scene_number, "scene_id": self.scene_id}


class InvalidDuration(BuildError):
    """The target duration is not a positive number of seconds."""

    code = "invalid_duration"

    def __init__(self, value: Any):
        super().__init__(f"Target duration must be a positive number of seconds, got {value!r}")
        self.value = value

    def details(self) -> dict[str, Any]:
        return {"value": self.value}


class InvalidSettings(BuildError):
    """A compile setting is outside its enumerated set or numeric range."""

    code = "invalid_settings"

    def __init__(self, field: str, value: Any, allowed: Optional[Any] = None, reason: Optional[str] = None):
        message = reason or f"Invalid value for {field}: {value!r}"
        if allowed is not None and reason is None:
            message += f" (allowed: {allowed})"
        super().__init__(message)
        self.field = field
        self.value = value
        self.allowed = allowed

    def details(self) -> dict[str, Any]:
        return {"field": self.field, "value": self.value, "allowed": self.allowed}


class ProjectNotFound(CompositionError):
    """The project does not exist in the project store."""

    code = "project_not_found"

    def __init__(self, project_id: str):
        super().__init__(f"Project {project_id} not found")
        self.project_id = project_id

    def details(self) -> dict[str, Any]:
        return {"project_id": self.project_id}


class CompileInProgress(CompositionError):
    """Another compile for the same project has not finished yet."""

    code = "compile_in_progress"

    def __init__(self, project_id: str):
        super().__init__(f"A compile is already in progress for project {project_id}")
        self.project_id = project_id

    def details(self) -> dict[str, Any]:
        return {"project_id": self.project_id}


class UpstreamFetchError(CompositionError):
    """Reading scenes, assets or project settings from the store failed."""

    code = "upstream_fetch_failed"
    retryable = True

    def __init__(self, source: str, cause: Exception):
        super().__init__(f"Failed to fetch {source}: {cause}")
        self.source = source
        self.cause = cause

    def details(self) -> dict[str, Any]:
        return {"source": self.source, "cause": str(self.cause)}


class SubmissionFailure(CompositionError):
    """
    The renderer, asset store or project store failed after a valid plan was built.

    Attributes:
        stage: Which submission step failed (render, upload, persist)
        plan: The valid composition plan, reusable for resubmission
        cause: The underlying exception
    """

    code = "submission_failed"
    retryable = True

    def __init__(self, stage: str, plan: Any, cause: Exception):
        super().__init__(f"Video {stage} failed: {cause}")
        self.stage = stage
        self.plan = plan
        self.cause = cause

    def details(self) -> dict[str, Any]:
        return {"stage": self.stage, "cause": str(self.cause), "retryable": True}
