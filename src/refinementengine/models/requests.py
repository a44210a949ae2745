"""Request models for RefinementEngine."""

import base64
import binascii
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TextModel(str, Enum):
    """AI models available for text generation."""

    GEMINI_2_5_FLASH = "gemini-2.5-flash-preview-09-2025"


class ImageModel(str, Enum):
    """AI models available for image generation."""

    IMAGEN_4 = "imagen-4.0-generate-001"


class GenerationMode(str, Enum):
    """User-selectable generation modes."""

    CANVAS = "canvas"  # 10-step refinement with the code + preview mandate
    DEEP_RESEARCH = "deep_research"  # 10-step refinement, plain text
    SINGLE_SHOT = "single_shot"
    IMAGE = "image"
    VIDEO = "video"  # three-frame storyboard


class TargetOperation(str, Enum):
    """Endpoint a request is addressed to."""

    TEXT_GENERATE = "generateContent"
    IMAGE_GENERATE = "predict"


class Attachment(BaseModel):
    """Binary payload sent alongside a text prompt (multimodal input)."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., min_length=1, description="Raw attachment bytes")
    mime_type: str = Field(..., min_length=1, description="MIME type, e.g. image/png")

    @classmethod
    def from_data_url(cls, data_url: str) -> "Attachment":
        """Build an attachment from a ``data:<mime>;base64,<payload>`` URL."""
        header, sep, payload = data_url.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise ValueError("Expected a base64 data URL")
        mime_type = header[len("data:"):-len(";base64")]
        try:
            data = base64.b64decode(payload, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload: {e}") from e
        return cls(data=data, mime_type=mime_type)

    def to_part(self) -> dict[str, Any]:
        """Wire form of the attachment as a content part."""
        return {
            "inlineData": {
                "mimeType": self.mime_type,
                "data": base64.b64encode(self.data).decode("ascii"),
            }
        }


class ImageGenerationParameters(BaseModel):
    """Fixed parameters for image generation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sample_count: int = Field(1, ge=1, alias="sampleCount")
    output_mime_type: str = Field("image/png", alias="outputMimeType")
    aspect_ratio: str = Field("16:9", alias="aspectRatio")


class GenerationRequest(BaseModel):
    """One outbound generation call. Immutable, created per call."""

    model_config = ConfigDict(frozen=True)

    prompt_text: str = Field(..., description="Prompt sent to the model")
    attachment: Optional[Attachment] = Field(None, description="Optional inline attachment (text only)")
    target_operation: TargetOperation = Field(TargetOperation.TEXT_GENERATE, description="Endpoint operation")
    model: str = Field(TextModel.GEMINI_2_5_FLASH.value, min_length=1, description="Model identifier")
    image_parameters: ImageGenerationParameters = Field(default_factory=ImageGenerationParameters)

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON body for the target endpoint."""
        if self.target_operation is TargetOperation.IMAGE_GENERATE:
            return {
                "instances": [{"prompt": self.prompt_text}],
                "parameters": self.image_parameters.model_dump(by_alias=True),
            }

        parts: list[dict[str, Any]] = [{"text": self.prompt_text}]
        if self.attachment is not None:
            parts.append(self.attachment.to_part())
        return {"contents": [{"parts": parts}]}
