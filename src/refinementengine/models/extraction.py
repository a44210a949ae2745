"""Models produced by the response code extractor."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CodeSegment(BaseModel):
    """A fenced code segment found in generated text."""

    model_config = ConfigDict(frozen=True)

    language: str = Field(..., description="Tag written right after the opening fence")
    code: str = Field(..., description="Trimmed segment content")


class PrimaryCodeBlock(BaseModel):
    """First fenced block of any language, used for raw copy."""

    model_config = ConfigDict(frozen=True)

    language: str
    code: str


class ExtractionResult(BaseModel):
    """What the UI can do with a piece of generated text."""

    model_config = ConfigDict(frozen=True)

    primary_language: Optional[str] = Field(None, description="Lower-cased tag of the first fenced block")
    primary_code_raw: Optional[str] = Field(None, description="Trimmed content of the first fenced block")
    renderable_document: Optional[str] = Field(None, description="HTML suitable for a live preview")

    @property
    def has_renderable(self) -> bool:
        return self.renderable_document is not None

    @property
    def primary_block(self) -> Optional[PrimaryCodeBlock]:
        if self.primary_language is None or self.primary_code_raw is None:
            return None
        return PrimaryCodeBlock(language=self.primary_language, code=self.primary_code_raw)
