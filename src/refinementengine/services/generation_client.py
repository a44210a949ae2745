"""Generation client for the hosted text and image endpoints."""

import asyncio
import logging
import os
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from refinementengine.models.errors import GenerationError, MalformedResponseError
from refinementengine.models.image_responses import ImagePredictionPayload
from refinementengine.models.requests import (
    Attachment,
    GenerationRequest,
    ImageModel,
    TargetOperation,
    TextModel,
)
from refinementengine.models.text_responses import TextGenerationPayload
from refinementengine.services.retry_service import (
    DEFAULT_RETRY_POLICY,
    RetryingInvoker,
    RetryPolicy,
    SleepFunc,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_CLIENT_LABEL = "Studio"


class GenerationClient:
    """Builds requests for text and image generation and validates what comes back."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        text_model: str = TextModel.GEMINI_2_5_FLASH.value,
        image_model: str = ImageModel.IMAGEN_4.value,
        client_label: str = DEFAULT_CLIENT_LABEL,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """
        Initialize generation client.

        Args:
            api_key: API key (defaults to GEMINI_API_KEY env var)
            base_url: API root (defaults to GENERATION_API_BASE_URL env var, then the public endpoint)
            http_client: Optional httpx.AsyncClient; one is created when omitted
            retry_policy: Policy applied to every call
            text_model: Default model for text generation
            image_model: Model for image generation
            client_label: Prefix for API error messages surfaced to the user
            sleep: Coroutine used for backoff waits (seconds)
        """
        api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ValueError("API key is required. Set GEMINI_API_KEY environment variable or pass api_key.")

        self._api_key = api_key
        self.base_url = (base_url or os.getenv("GENERATION_API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.http_client = http_client or httpx.AsyncClient(timeout=120.0)
        self.retry_policy = retry_policy
        self.text_model = text_model
        self.image_model = image_model
        self.client_label = client_label
        self._invoker = RetryingInvoker(self.http_client, sleep=sleep)

    async def aclose(self) -> None:
        await self.http_client.aclose()

    def endpoint_url(self, model: str, operation: TargetOperation) -> str:
        return f"{self.base_url}/models/{model}:{operation.value}"

    async def generate_text(
        self,
        prompt: str,
        attachment: Optional[Attachment] = None,
        model: str | TextModel | None = None,
    ) -> str:
        """
        Generate text for a prompt, optionally with an inline attachment.

        Args:
            prompt: Prompt text
            attachment: Optional binary payload (e.g. an image)
            model: Model identifier; defaults to the client's text model

        Returns:
            The first candidate's first text part

        Raises:
            RateLimitExhausted, RecoverableFailureExhausted: Retries consumed
            MalformedResponseError: Body without candidates, or with an explicit error
        """
        model_id = model.value if isinstance(model, TextModel) else (model or self.text_model)
        request = GenerationRequest(
            prompt_text=prompt,
            attachment=attachment,
            target_operation=TargetOperation.TEXT_GENERATE,
            model=model_id,
        )
        logger.debug(
            f"📝 [GenerationClient] generateContent model={model_id} "
            f"prompt_length={len(prompt)} attachment={attachment is not None}"
        )

        body = await self._send(request)

        try:
            payload = TextGenerationPayload.model_validate(body)
        except ValidationError as e:
            logger.error(f"❌ [GenerationClient] Unexpected text response shape: {e}")
            raise MalformedResponseError() from e

        if payload.error is not None:
            message = payload.error.message or f"status {payload.error.code or 'unknown'}"
            logger.error(f"❌ [GenerationClient] API reported an error: {message}")
            raise MalformedResponseError(f"{self.client_label} API error: {message}")

        text = payload.first_text()
        if not text:
            logger.error("❌ [GenerationClient] Response contained no text")
            raise MalformedResponseError()

        return text

    async def generate_image(self, prompt: str) -> str:
        """
        Generate one 16:9 PNG for a prompt.

        Returns:
            ``data:image/png;base64,<payload>``

        Raises:
            RateLimitExhausted, RecoverableFailureExhausted: Retries consumed
            GenerationError: No prediction bytes in the response
        """
        request = GenerationRequest(
            prompt_text=prompt,
            target_operation=TargetOperation.IMAGE_GENERATE,
            model=self.image_model,
        )
        logger.debug(f"🎨 [GenerationClient] predict model={self.image_model} prompt_length={len(prompt)}")

        body = await self._send(request)

        try:
            image_b64 = ImagePredictionPayload.model_validate(body).first_image()
        except ValidationError as e:
            logger.error(f"❌ [GenerationClient] Unexpected image response shape: {e}")
            image_b64 = None

        if not image_b64:
            raise GenerationError("Image generation failed. No valid result was returned.")

        mime_type = request.image_parameters.output_mime_type
        return f"data:{mime_type};base64,{image_b64}"

    async def generate_images(self, prompts: list[str]) -> list[str]:
        """
        Generate one image per prompt concurrently.

        All-or-nothing: the first failure fails the whole batch, and the
        remaining frames are cancelled before the error propagates. Results
        come back in input order.
        """
        logger.info(f"🎞️ [GenerationClient] Generating {len(prompts)} image(s) concurrently")
        tasks = [asyncio.ensure_future(self.generate_image(prompt)) for prompt in prompts]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            pending = [task for task in tasks if not task.done()]
            if pending:
                logger.warning(f"🛑 [GenerationClient] Cancelling {len(pending)} unfinished frame(s)")
            for task in pending:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _send(self, request: GenerationRequest) -> Any:
        url = self.endpoint_url(request.model, request.target_operation)
        return await self._invoker.invoke(
            url,
            request.to_payload(),
            policy=self.retry_policy,
            params={"key": self._api_key},
        )
