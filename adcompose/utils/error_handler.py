"""Error Handler - provides user-friendly error messages with a suggested fix."""

from typing import Optional

from adcompose.core.errors import (
    CompileInProgress,
    EmptyProject,
    InvalidDuration,
    InvalidSettings,
    MissingSceneAsset,
    ProjectNotFound,
    SubmissionFailure,
    UpstreamFetchError,
)


def format_error_message(
    operation: str,
    error: Exception,
    context: Optional[dict] = None,
    suggestion: Optional[str] = None,
) -> str:
    """
    Format a user-friendly error message.

    Args:
        operation: What was being performed (e.g., "Compiling video")
        error: The exception that occurred
        context: Additional context (e.g., {"project_id": "proj_123"})
        suggestion: Optional hint for fixing the issue (defaults to get_suggestion)

    Returns:
        Formatted error message
    """
    context_str = ""
    if context:
        context_parts = [f"{k}={v}" for k, v in context.items()]
        context_str = f" ({', '.join(context_parts)})"

    message = f"❌ {operation} failed{context_str}\n"
    message += f"   Error: {type(error).__name__}: {error}"

    suggestion = suggestion or get_suggestion(error)
    if suggestion:
        message += f"\n   💡 Suggestion: {suggestion}"

    return message


def get_suggestion(error: Exception) -> Optional[str]:
    """
    Get a suggestion for how to recover from a compile error.

    Args:
        error: The exception

    Returns:
        Suggestion string or None
    """
    if isinstance(error, EmptyProject):
        return "Generate scenes for the project before compiling."
    if isinstance(error, MissingSceneAsset):
        return f"Generate or upload an image for scene {error.scene_number}, then compile again."
    if isinstance(error, InvalidDuration):
        return "Choose a video duration greater than zero seconds."
    if isinstance(error, InvalidSettings):
        if error.field == "music_volume":
            return "Set the music volume between 0 and 1."
        if error.field == "music":
            return "Pick a single music track (preset, library or generated) in the music step."
        if error.field == "captions":
            return "Save the caption settings again in the captions step."
        if error.allowed:
            return f"Use one of: {', '.join(str(a) for a in error.allowed)}."
        return None
    if isinstance(error, CompileInProgress):
        return "Wait for the current compile to finish before starting another."
    if isinstance(error, ProjectNotFound):
        return "Check the project ID."
    if isinstance(error, SubmissionFailure):
        if error.stage == "render":
            return "The render service failed. The plan is still valid; try compiling again."
        if error.stage == "upload":
            return "Storing the rendered video failed. Try again; the plan does not need rebuilding."
        return "Saving the final video failed. Try again later."
    if isinstance(error, UpstreamFetchError):
        return "Project data could not be read. Check storage availability and retry."
    return None
