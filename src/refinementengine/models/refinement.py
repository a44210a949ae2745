"""Refinement round state."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_TOTAL_STEPS = 10


class StepContext(BaseModel):
    """State of a single refinement round. A fresh instance is built per round."""

    model_config = ConfigDict(frozen=True)

    step_index: int = Field(..., ge=0, description="0-based round index")
    total_steps: int = Field(DEFAULT_TOTAL_STEPS, ge=1, description="Number of rounds in the sequence")
    original_prompt: str = Field(..., description="User text, unchanged across rounds")
    prior_output: str = Field("", description="Previous round's output (empty on round 0)")
    code_mode_enabled: bool = Field(False, description="Whether the dual-block code mandate applies")

    @model_validator(mode="after")
    def validate_step_index(self):
        """Ensure the index lies inside the sequence."""
        if self.step_index >= self.total_steps:
            raise ValueError("step_index must be lower than total_steps")
        return self

    @property
    def is_first(self) -> bool:
        return self.step_index == 0

    @property
    def is_final(self) -> bool:
        return self.step_index == self.total_steps - 1

    @property
    def step_number(self) -> int:
        """1-based round number, as shown to the model and the user."""
        return self.step_index + 1
