"""RefinementEngine - resilient generation, multi-step refinement and code extraction."""

from refinementengine.interfaces import IImageGenerator, ITextGenerator
from refinementengine.models.errors import (
    ErrorCode,
    GenerationError,
    MalformedResponseError,
    RateLimitExhausted,
    RecoverableFailureExhausted,
    SessionBusyError,
    StudioError,
    UserInputError,
    is_retryable,
)
from refinementengine.models.extraction import ExtractionResult, PrimaryCodeBlock
from refinementengine.models.refinement import StepContext
from refinementengine.models.requests import (
    Attachment,
    GenerationMode,
    GenerationRequest,
    ImageModel,
    TargetOperation,
    TextModel,
)
from refinementengine.models.responses import ErrorDetail, TurnResponse
from refinementengine.services.generation_client import GenerationClient
from refinementengine.services.refinement_service import RefinementOrchestrator
from refinementengine.services.retry_service import (
    DEFAULT_RETRY_POLICY,
    RetryableError,
    RetryingInvoker,
    RetryPolicy,
)
from refinementengine.session import StudioSession
from refinementengine.utils.code_extraction import extract, find_renderable, get_primary_code_block
from refinementengine.utils.storyboard import compose_storyboard, split_frame_descriptions

__version__ = "0.1.0"

__all__ = [
    # Interfaces
    "ITextGenerator",
    "IImageGenerator",
    # Errors
    "ErrorCode",
    "is_retryable",
    "StudioError",
    "RateLimitExhausted",
    "RecoverableFailureExhausted",
    "MalformedResponseError",
    "GenerationError",
    "UserInputError",
    "SessionBusyError",
    # Request/response types
    "Attachment",
    "GenerationMode",
    "GenerationRequest",
    "ImageModel",
    "TargetOperation",
    "TextModel",
    "StepContext",
    "ExtractionResult",
    "PrimaryCodeBlock",
    "ErrorDetail",
    "TurnResponse",
    # Services
    "GenerationClient",
    "RefinementOrchestrator",
    "RetryingInvoker",
    "RetryPolicy",
    "RetryableError",
    "DEFAULT_RETRY_POLICY",
    "StudioSession",
    # Utilities
    "extract",
    "find_renderable",
    "get_primary_code_block",
    "compose_storyboard",
    "split_frame_descriptions",
]
