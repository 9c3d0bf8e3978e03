"""
layer_helper.exceptions — Error taxonomy for the build-and-publish pipeline.

Every fatal error maps to exit code 1.  UserAborted is the one graceful
termination and maps to exit code 0.
"""

from __future__ import annotations


class LayerHelperError(RuntimeError):
    """Base class for pipeline failures that end the run with exit code 1."""


class MissingDependencyTool(LayerHelperError):
    """Raised when a required interpreter or tool is not installed."""

    def __init__(self, tool: str, message: str | None = None) -> None:
        self.tool = tool
        super().__init__(message or f"{tool} is not installed on this system.")


class InvalidManifest(LayerHelperError):
    """Raised when the manifest is still unusable after the single re-edit."""

    def __init__(self, path: str, state: str) -> None:
        self.path = path
        self.state = state
        super().__init__(f"{path} is {state}; add at least one requirement and re-run.")


class BuildStepFailure(LayerHelperError):
    """
    Raised when a Layer Builder sub-step fails.

    Attributes:
        step:      Name of the failing sub-step (e.g. "install-requirements").
        operation: The exact operation that failed, suitable for re-running by hand.
        detail:    Tool-native diagnostic text, possibly empty.
    """

    def __init__(self, *, step: str, operation: str, detail: str = "") -> None:
        self.step = step
        self.operation = operation
        self.detail = detail
        super().__init__(f"Build step '{step}' failed: {operation}")


class PublishFailure(LayerHelperError):
    """Raised when the layer version could not be published."""


class UserAborted(Exception):
    """Raised when the operator declines to continue.  Exit status 0."""
