"""Models package for RefinementEngine."""

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
from refinementengine.models.extraction import CodeSegment, ExtractionResult, PrimaryCodeBlock
from refinementengine.models.image_responses import ImagePredictionPayload, Prediction
from refinementengine.models.refinement import StepContext
from refinementengine.models.requests import (
    Attachment,
    GenerationMode,
    GenerationRequest,
    ImageGenerationParameters,
    ImageModel,
    TargetOperation,
    TextModel,
)
from refinementengine.models.responses import ErrorDetail, TurnResponse
from refinementengine.models.text_responses import TextGenerationPayload

__all__ = [
    "ErrorCode",
    "is_retryable",
    "StudioError",
    "RateLimitExhausted",
    "RecoverableFailureExhausted",
    "MalformedResponseError",
    "GenerationError",
    "UserInputError",
    "SessionBusyError",
    "CodeSegment",
    "ExtractionResult",
    "PrimaryCodeBlock",
    "ImagePredictionPayload",
    "Prediction",
    "StepContext",
    "Attachment",
    "GenerationMode",
    "GenerationRequest",
    "ImageGenerationParameters",
    "ImageModel",
    "TargetOperation",
    "TextModel",
    "ErrorDetail",
    "TurnResponse",
    "TextGenerationPayload",
]
