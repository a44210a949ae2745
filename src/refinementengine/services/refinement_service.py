"""Multi-step self-refinement over a text generator."""

import logging
import time
from typing import Callable, Optional

from refinementengine.interfaces import ITextGenerator
from refinementengine.models.errors import StudioError
from refinementengine.models.refinement import DEFAULT_TOTAL_STEPS, StepContext
from refinementengine.models.requests import Attachment
from refinementengine.prompts import build_progress_label, build_step_prompt

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class RefinementOrchestrator:
    """
    Runs a fixed number of generation rounds, feeding each output into the next prompt.

    The sequence never stops early: the round-4 prompt invites the model to
    deliver a final answer, but every round still runs and only the last
    round's output is returned.
    """

    def __init__(
        self,
        text_generator: ITextGenerator,
        total_steps: int = DEFAULT_TOTAL_STEPS,
        model: str | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            text_generator: Generator used for every round (usually a GenerationClient)
            total_steps: Number of rounds
            model: Optional model override passed to every round
        """
        if total_steps < 1:
            raise ValueError("total_steps must be at least 1")
        self.text_generator = text_generator
        self.total_steps = total_steps
        self.model = model

    async def run(
        self,
        prompt: str,
        code_mode: bool,
        attachment: Optional[Attachment] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Refine ``prompt`` over ``total_steps`` rounds.

        Args:
            prompt: Original user text
            code_mode: Require a solution block plus a browser-renderable block
            attachment: Sent with the first round only
            on_progress: Called with a status label before each round

        Returns:
            Output of the final round

        Raises:
            StudioError: From any round; remaining rounds are not run
        """
        start_time = time.time()
        current_output = ""

        for step_index in range(self.total_steps):
            ctx = StepContext(
                step_index=step_index,
                total_steps=self.total_steps,
                original_prompt=prompt,
                prior_output=current_output,
                code_mode_enabled=code_mode,
            )

            if on_progress is not None:
                on_progress(build_progress_label(ctx))
            logger.info(f"🔁 [Refinement] Step {ctx.step_number}/{ctx.total_steps} (code_mode={code_mode})")

            try:
                current_output = await self.text_generator.generate_text(
                    build_step_prompt(ctx),
                    attachment=attachment if ctx.is_first else None,
                    model=self.model,
                )
            except StudioError as e:
                logger.error(f"❌ [Refinement] Step {ctx.step_number}/{ctx.total_steps} failed: {e.message}")
                raise

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"✅ [Refinement] Completed {self.total_steps} steps in {duration_ms}ms")
        return current_output
