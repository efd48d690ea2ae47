"""
Brand Overlay Compositor Modules
"""

from .schemas import TemplateSettings, PromotionalComponent, PositionPair
from .template_store import TemplateStore, JsonTemplateStore, InMemoryTemplateStore
from .loader import ImageLoader, BlobStore, Loaded, LoadFailed
from .source import to_same_origin
from .prompt import enhance_prompt_with_template
from .compositor import TemplateCompositor, apply_template_to_image, apply_components_to_image

__all__ = [
    "TemplateSettings",
    "PromotionalComponent",
    "PositionPair",
    "TemplateStore",
    "JsonTemplateStore",
    "InMemoryTemplateStore",
    "ImageLoader",
    "BlobStore",
    "Loaded",
    "LoadFailed",
    "to_same_origin",
    "enhance_prompt_with_template",
    "TemplateCompositor",
    "apply_template_to_image",
    "apply_components_to_image",
]
