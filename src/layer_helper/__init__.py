"""
layer_helper — Build and publish AWS Lambda dependency layers.

Pipeline: precondition check -> manifest validation -> credential gate ->
build (venv, pip install, copy, prune, zip) -> publish -> cleanup.

Usage:
    layer-helper --layer-name my-layer --manifest requirements.txt
    python -m layer_helper --layer-name my-layer
"""

from layer_helper.config import LayerContext, is_valid_layer_name
from layer_helper.exceptions import (
    BuildStepFailure,
    InvalidManifest,
    LayerHelperError,
    MissingDependencyTool,
    PublishFailure,
    UserAborted,
)

__all__ = [
    "BuildStepFailure",
    "InvalidManifest",
    "LayerContext",
    "LayerHelperError",
    "MissingDependencyTool",
    "PublishFailure",
    "UserAborted",
    "is_valid_layer_name",
]
