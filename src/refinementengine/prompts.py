"""Prompt templates for the multi-step refinement sequence."""

from refinementengine.models.refinement import StepContext

# Round index at which the model is told it may deliver the final answer early.
TARGET_DELIVERY_STEP = 3

ITERATIVE_INSTRUCTION_BASE = (
    "Analyze the previous response and keep improving, fixing and completing it until the "
    "user's request is fulfilled perfectly and completely. Do NOT use negative words such as "
    "NOT DONE or FAILED. Always proceed as if you are reaching the final result."
)

TARGET_DELIVERY_INSTRUCTION = (
    "STEP 4 (Target Delivery): This should be the **perfect and complete** delivery of the "
    "user's request. If you are confident in the result, give this output and skip the next "
    "steps. Otherwise, continue to the next steps for further refinement."
)

FINAL_DELIVERY_INSTRUCTION = (
    "FINAL STEP: This is the **PERFECT, COMPLETE AND DIRECT** delivery of the user's request. "
    "SHOW THE FINAL OUTPUT, skip explanations and intermediate steps. Act as if the problem "
    "has been solved and delivered."
)

HTML_OUTPUT_MANDATE = (
    "If the user's request calls for output in a programming language (Python, Java, C#, etc.), "
    "you must always return two separate code blocks: "
    "1) The code in the requested language (**CORE LOGIC**). "
    "2) A SINGLE code block containing **HTML, JavaScript and CSS**, ready for the Canvas "
    "preview, in which this core logic can be visualized in the browser. "
    "**IMPORTANT:** Even if the user did not ask for a visualization, as long as canvas mode "
    "is active a runnable HTML/JavaScript/CSS Canvas preview **MUST** be produced."
)


def build_step_instruction(ctx: StepContext) -> str:
    """Escalating instruction for the round described by ``ctx``."""
    if ctx.step_index == TARGET_DELIVERY_STEP:
        return TARGET_DELIVERY_INSTRUCTION
    if ctx.is_final:
        return FINAL_DELIVERY_INSTRUCTION
    if ctx.step_index > TARGET_DELIVERY_STEP:
        return (
            f"Extended Refinement Step ({ctx.step_number}/{ctx.total_steps}): "
            f"{ITERATIVE_INSTRUCTION_BASE} Continuing for a superior result."
        )
    return f"({ctx.step_number}/{ctx.total_steps} Refinement Step): {ITERATIVE_INSTRUCTION_BASE}"


def build_step_prompt(ctx: StepContext) -> str:
    """Full prompt sent to the model for the round described by ``ctx``."""
    instruction = build_step_instruction(ctx)

    if ctx.code_mode_enabled:
        if ctx.is_first:
            return f'User request: "{ctx.original_prompt}". {instruction} {HTML_OUTPUT_MANDATE}'
        return (
            f'Original user request: "{ctx.original_prompt}". '
            f'Code draft produced in the previous step: "{ctx.prior_output}". '
            f"Please evaluate this code and carry out the following task. "
            f"{instruction} {HTML_OUTPUT_MANDATE}"
        )

    if ctx.is_first:
        return ctx.original_prompt
    return (
        f'Original user request: "{ctx.original_prompt}". '
        f'Response produced in the previous step: "{ctx.prior_output}". '
        f"Please evaluate this response and carry out the following task. {instruction}"
    )


def build_progress_label(ctx: StepContext) -> str:
    """Short status line shown to the user while a round runs."""
    status = "Preparing final delivery" if ctx.is_final else "Refining output..."
    return f"Step {ctx.step_number}/{ctx.total_steps}: {status}"
