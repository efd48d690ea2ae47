from modules.prompt import enhance_prompt_with_template
from modules.schemas import TemplateSettings


def test_no_template_leaves_prompt_alone() -> None:
    assert enhance_prompt_with_template("A latte.", None) == "A latte."


def test_color_and_logo_space_hints() -> None:
    template = TemplateSettings.model_validate(
        {"selectedColor": "#FF0000", "logoPreview": "logo.png", "selectedPosition": "bottom-center"}
    )
    prompt = enhance_prompt_with_template("A latte.", template)

    assert prompt.startswith("A latte. ")
    assert "Use #FF0000 as the primary color theme and accent color throughout the image." in prompt
    assert prompt.endswith("Leave space in the bottom center for a logo overlay.")


def test_transparent_color_and_positionless_logo_add_nothing() -> None:
    template = TemplateSettings.model_validate({"selectedColor": "transparent", "logoPreview": "logo.png"})
    assert enhance_prompt_with_template("A latte.", template) == "A latte."
