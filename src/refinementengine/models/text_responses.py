"""Response schema for the text generation endpoint."""

from typing import Optional

from pydantic import BaseModel, Field


class ContentPart(BaseModel):
    """A single part of a candidate's content."""

    text: Optional[str] = Field(None, description="Text content of the part")


class CandidateContent(BaseModel):
    """Content block of a candidate."""

    parts: list[ContentPart] = Field(default_factory=list)


class Candidate(BaseModel):
    """One generated candidate."""

    content: Optional[CandidateContent] = Field(None)


class ApiErrorBody(BaseModel):
    """Error object the API may embed in an otherwise successful body."""

    code: Optional[int] = Field(None)
    message: Optional[str] = Field(None)
    status: Optional[str] = Field(None)


class TextGenerationPayload(BaseModel):
    """Decoded body of a ``generateContent`` call."""

    candidates: Optional[list[Candidate]] = Field(None, description="Generated candidates")
    error: Optional[ApiErrorBody] = Field(None, description="Explicit error reported by the API")

    def first_text(self) -> Optional[str]:
        """Return the first candidate's first text part, if any."""
        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text
