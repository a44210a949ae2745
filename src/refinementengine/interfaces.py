"""Protocol interfaces for RefinementEngine."""

from typing import Optional, Protocol

from typing_extensions import runtime_checkable

from refinementengine.models.requests import Attachment


@runtime_checkable
class ITextGenerator(Protocol):
    """Anything that can turn a prompt into generated text."""

    async def generate_text(
        self,
        prompt: str,
        attachment: Optional[Attachment] = None,
        model: Optional[str] = None,
    ) -> str:
        """Generate text for a prompt. Raises a StudioError on failure."""
        ...


@runtime_checkable
class IImageGenerator(Protocol):
    """Anything that can turn prompts into image data URIs."""

    async def generate_image(self, prompt: str) -> str:
        """Generate one image and return it as a data URI."""
        ...

    async def generate_images(self, prompts: list[str]) -> list[str]:
        """Generate one image per prompt, all-or-nothing, in input order."""
        ...
