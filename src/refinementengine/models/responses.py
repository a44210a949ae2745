"""Response models for RefinementEngine."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from refinementengine.models.errors import ErrorCode, StudioError, is_retryable
from refinementengine.models.extraction import ExtractionResult
from refinementengine.models.requests import GenerationMode


class ErrorDetail(BaseModel):
    """Error details for a failed turn."""

    code: ErrorCode = Field(..., description="Error category code")
    message: str = Field(..., description="User-friendly error message")
    retryable: bool = Field(..., description="Whether the failure was transient")

    @classmethod
    def from_exception(cls, error: StudioError) -> "ErrorDetail":
        return cls(code=error.code, message=error.message, retryable=is_retryable(error.code))


class TurnResponse(BaseModel):
    """Standardized result of one user turn."""

    model_config = ConfigDict(protected_namespaces=())

    success: bool = Field(..., description="Whether the turn succeeded")
    mode: GenerationMode = Field(..., description="Mode the turn ran in")
    content: Optional[str] = Field(None, description="Final text, or a data URI in image mode")
    images: Optional[list[str]] = Field(None, description="Frame data URIs in video mode")
    extraction: Optional[ExtractionResult] = Field(None, description="Code extraction over the content")
    model_used: Optional[str] = Field(None, description="Label of the model that produced the content")
    error: Optional[ErrorDetail] = Field(None, description="Error details if success=False")

    @model_validator(mode="after")
    def validate_success_state(self):
        """Ensure success state is consistent."""
        if self.success is True:
            if not self.content:
                raise ValueError("content must be present when success=True")
            if self.error is not None:
                raise ValueError("error must be None when success=True")
        else:
            if self.error is None:
                raise ValueError("error must be present when success=False")
            if self.content is not None or self.images is not None:
                raise ValueError("content and images must be None when success=False")
        return self
