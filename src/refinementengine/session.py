"""Session boundary between the UI and the generation core."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from refinementengine.models.errors import SessionBusyError, StudioError, UserInputError
from refinementengine.models.extraction import ExtractionResult
from refinementengine.models.requests import Attachment, GenerationMode
from refinementengine.models.responses import ErrorDetail, TurnResponse
from refinementengine.services.generation_client import GenerationClient
from refinementengine.services.refinement_service import ProgressCallback, RefinementOrchestrator
from refinementengine.utils.code_extraction import extract
from refinementengine.utils.storyboard import (
    FRAME_COUNT,
    compose_storyboard,
    split_frame_descriptions,
    validate_frame_descriptions,
)

logger = logging.getLogger(__name__)

MODE_MODEL_LABELS: dict[GenerationMode, str] = {
    GenerationMode.CANVAS: "Studio Tech (multi-step code)",
    GenerationMode.DEEP_RESEARCH: "Studio Tech (multi-step research)",
    GenerationMode.SINGLE_SHOT: "Studio Tech",
    GenerationMode.IMAGE: "Imagen 4.0 (image mode)",
    GenerationMode.VIDEO: "Imagen 4.0 (video simulation)",
}


class StudioSession:
    """
    One user's generation session.

    Only one turn may be in flight at a time; a turn submitted while another
    is running is rejected with SessionBusyError rather than queued.
    """

    def __init__(
        self,
        client: GenerationClient | None = None,
        orchestrator: RefinementOrchestrator | None = None,
    ):
        """
        Initialize session.

        Args:
            client: Generation client (created from environment settings if omitted)
            orchestrator: Refinement orchestrator (built over ``client`` if omitted)
        """
        self.client = client or GenerationClient()
        self.orchestrator = orchestrator or RefinementOrchestrator(self.client)
        self._turn_lock = asyncio.Lock()

    async def aclose(self) -> None:
        """Release the client's HTTP connections."""
        await self.client.aclose()

    @property
    def busy(self) -> bool:
        return self._turn_lock.locked()

    @asynccontextmanager
    async def _exclusive_turn(self) -> AsyncIterator[None]:
        if self._turn_lock.locked():
            logger.warning("⏳ [Session] Turn rejected, another one is in flight")
            raise SessionBusyError()
        async with self._turn_lock:
            yield

    async def run_single_shot(self, prompt: str, attachment: Optional[Attachment] = None) -> str:
        async with self._exclusive_turn():
            return await self.client.generate_text(prompt, attachment=attachment)

    async def run_refinement(
        self,
        prompt: str,
        code_mode: bool,
        attachment: Optional[Attachment] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        async with self._exclusive_turn():
            return await self.orchestrator.run(prompt, code_mode, attachment=attachment, on_progress=on_progress)

    async def run_image(self, prompt: str) -> str:
        async with self._exclusive_turn():
            return await self.client.generate_image(prompt)

    async def run_video_batch(self, segments: list[str]) -> list[str]:
        """Generate one frame per segment. Needs exactly three non-empty segments."""
        validate_frame_descriptions(segments)
        async with self._exclusive_turn():
            return await self.client.generate_images([segment.strip() for segment in segments])

    @staticmethod
    def extract(text: str) -> ExtractionResult:
        return extract(text)

    async def handle(
        self,
        mode: GenerationMode | str,
        prompt: str,
        attachment: Optional[Attachment] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> TurnResponse:
        """
        Run one user turn in ``mode`` and wrap the outcome in a TurnResponse.

        StudioErrors become ``success=False`` responses; anything else propagates.
        """
        mode = GenerationMode(mode)
        try:
            async with self._exclusive_turn():
                return await self._dispatch(mode, prompt, attachment, on_progress)
        except StudioError as e:
            logger.error(f"❌ [Session] {mode.value} turn failed ({e.code.value}): {e.message}")
            return TurnResponse(success=False, mode=mode, error=ErrorDetail.from_exception(e))

    async def _dispatch(
        self,
        mode: GenerationMode,
        prompt: str,
        attachment: Optional[Attachment],
        on_progress: Optional[ProgressCallback],
    ) -> TurnResponse:
        # Attachments only feed text generation
        if mode in (GenerationMode.IMAGE, GenerationMode.VIDEO):
            attachment = None

        if not (prompt or "").strip() and attachment is None:
            raise UserInputError("Please enter a prompt or attach a file.")

        model_used = MODE_MODEL_LABELS[mode]

        if mode is GenerationMode.IMAGE:
            _notify(on_progress, "Calling the image model...")
            image_uri = await self.client.generate_image(prompt)
            return TurnResponse(success=True, mode=mode, content=image_uri, images=[image_uri], model_used=model_used)

        if mode is GenerationMode.VIDEO:
            descriptions = split_frame_descriptions(prompt)
            _notify(on_progress, f"Generating a {FRAME_COUNT}-frame video sequence...")
            image_uris = await self.client.generate_images(descriptions)
            content = compose_storyboard(image_uris, descriptions)
            return TurnResponse(
                success=True,
                mode=mode,
                content=content,
                images=image_uris,
                extraction=extract(content),
                model_used=model_used,
            )

        if mode is GenerationMode.SINGLE_SHOT:
            _notify(on_progress, "Generating response...")
            content = await self.client.generate_text(prompt, attachment=attachment)
        else:
            content = await self.orchestrator.run(
                prompt,
                code_mode=mode is GenerationMode.CANVAS,
                attachment=attachment,
                on_progress=on_progress,
            )

        return TurnResponse(
            success=True,
            mode=mode,
            content=content,
            extraction=extract(content),
            model_used=model_used,
        )


def _notify(on_progress: Optional[ProgressCallback], label: str) -> None:
    if on_progress is not None:
        on_progress(label)
