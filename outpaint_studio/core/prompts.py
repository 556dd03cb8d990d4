"""Prompt construction for outpainting and edit requests."""

from typing import Optional


def build_outpainting_prompt(base_prompt: str, context_text: Optional[str] = None) -> str:
    """Base instruction plus the optional visual context of the source image."""
    if context_text and context_text.strip():
        return f"{base_prompt}\n\nImage Context: {context_text.strip()}"
    return base_prompt


def build_edit_prompt(edit_prefix: str, instruction: str) -> str:
    """Wrap the user's instruction so the model edits locally."""
    return f'{edit_prefix}: "{instruction.strip()}"'
