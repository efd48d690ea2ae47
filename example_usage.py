"""
Example usage of the Brand Overlay Compositor

This script demonstrates how to use the compositor programmatically
"""

import asyncio
import base64
from pathlib import Path

from PIL import Image

from config import settings
from modules import InMemoryTemplateStore, TemplateCompositor, enhance_prompt_with_template
from utils import configure_logging


def make_sample_image(path: Path) -> Path:
    """
    Create a plain gradient image to composite onto
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    image = Image.linear_gradient("L").resize((1024, 768)).convert("RGB")
    image.save(path)
    return path


def save_data_url(data_url: str, path: Path) -> None:
    _, payload = data_url.split(",", 1)
    path.write_bytes(base64.b64decode(payload))


async def composite_example():
    """
    Example: template overlay followed by a promotion badge
    """
    base_path = make_sample_image(settings.WORKSPACE_DIR / "sample.png")

    store = InMemoryTemplateStore({
        "selectedColor": "#FF0000",
        "companyText": "Acme Coffee",
        "selectedPosition": "bottom-right",
        "textColor": "#FFFFFF",
        "textSize": 32,
    })
    compositor = TemplateCompositor(store=store)

    components = [
        {"id": "c1", "name": "Summer Launch", "category": "Campaign"},
        {"id": "c2", "name": "20% OFF", "category": "Promotion", "color": "#3366CC"},
    ]

    print("\nComposing...")
    result = await compositor.apply_all(str(base_path), components)

    if result == str(base_path):
        print("\n✗ Overlay skipped, original image returned")
        return

    out_path = settings.WORKSPACE_DIR / "sample_composited.png"
    save_data_url(result, out_path)
    print(f"\n✓ Success!")
    print(f"  Output: {out_path}")

    prompt = enhance_prompt_with_template("A latte on a wooden table.", store.get())
    print(f"\nPrompt with template hints:\n  {prompt}")


if __name__ == "__main__":
    configure_logging()

    print("=" * 60)
    print("Brand Overlay Compositor - Example Usage")
    print("=" * 60)

    asyncio.run(composite_example())

    print("\n" + "=" * 60)
