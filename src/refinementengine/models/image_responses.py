"""Response schema for the image generation endpoint."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Prediction(BaseModel):
    """A single generated image."""

    model_config = ConfigDict(populate_by_name=True)

    bytes_base64_encoded: Optional[str] = Field(None, alias="bytesBase64Encoded")
    mime_type: Optional[str] = Field(None, alias="mimeType")


class ImagePredictionPayload(BaseModel):
    """Decoded body of a ``predict`` call."""

    predictions: Optional[list[Prediction]] = Field(None, description="Generated images")

    def first_image(self) -> Optional[str]:
        """Return the first prediction's base64 payload, if any."""
        if not self.predictions:
            return None
        return self.predictions[0].bytes_base64_encoded or None
