"""
Prompt enhancement - steer image generation toward the brand template
"""

from typing import Optional

from modules.schemas import TemplateSettings


CORNER_PHRASES = {
    "top-left": "top-left corner",
    "top-center": "top center",
    "top-right": "top-right corner",
    "bottom-left": "bottom-left corner",
    "bottom-center": "bottom center",
    "bottom-right": "bottom-right corner",
}


def enhance_prompt_with_template(prompt: str, template: Optional[TemplateSettings]) -> str:
    """
    Append color-theme and logo-space instructions to an image prompt

    Args:
        prompt: Original generation prompt
        template: Current template settings, if any

    Returns:
        Prompt with template hints appended (unchanged without a template)
    """
    if template is None:
        return prompt

    enhanced = prompt

    if template.has_color:
        enhanced += (
            f" Use {template.selected_color} as the primary color theme"
            " and accent color throughout the image."
        )

    if template.has_logo and template.selected_position:
        enhanced += f" Leave space in the {CORNER_PHRASES[template.selected_position]} for a logo overlay."

    return enhanced
