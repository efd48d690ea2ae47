"""
Compositing Pipeline - brand template overlay and promotional badge overlay

Both pipelines always hand back a usable image reference: the composited
PNG as a data URL, or the original reference when anything goes wrong.
"""

import math
import random
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np
from loguru import logger
from PIL import Image, ImageDraw, ImageFilter
from pydantic import ValidationError

from config import settings
from modules.badge import BadgeGeometry, estimate_obstacles, resolve_badge_color, select_promotion
from modules.color import adjust_color_luminance, hex_to_rgb_tuple, parse_color
from modules.geometry import (
    BoundingBox,
    Position,
    candidate_positions,
    clamp,
    clamp_center,
    corner_origin,
    find_non_overlapping_position,
    parse_anchor,
    resolve_anchor,
)
from modules.loader import ImageLoader, LoadFailed
from modules.schemas import PromotionalComponent, TemplateSettings
from modules.source import to_same_origin
from modules.template_store import JsonTemplateStore, TemplateStore
from modules.text_layout import company_font_size, position_company_text, wrap_text_centered
from utils.exceptions import ExportError, ImageLoadError
from utils.image_utils import encode_data_url, load_font, paste_layer, resize_image


ComponentInput = Union[PromotionalComponent, dict]


class TemplateCompositor:
    """
    Renders template and badge overlays onto generated images
    """

    def __init__(
        self,
        store: TemplateStore = None,
        loader: ImageLoader = None,
        rng: random.Random = None
    ):
        """
        Initialize Template Compositor

        Args:
            store: Template settings source (default: JSON store from settings)
            loader: Image loader (default: a new ImageLoader)
            rng: Random source for badge color / placement variety
        """
        self.store = store or JsonTemplateStore()
        self.loader = loader or ImageLoader()
        self.rng = rng or random.Random()

        logger.info(f"TemplateCompositor initialized (store={type(self.store).__name__})")

    # ------------------------------------------------------------------------
    # Pipeline A - template overlay
    # ------------------------------------------------------------------------

    async def apply_template_to_image(self, image_ref: str) -> str:
        """
        Draw the brand template (color wash, logo, company text) on an image

        Args:
            image_ref: Base image reference (URL, data URL or path)

        Returns:
            PNG data URL, or ``image_ref`` when there is nothing to draw or
            any step fails
        """
        try:
            template = self.store.get()
            if template is None or template.is_noop:
                logger.info("No template overlay configured, returning original image")
                return image_ref

            return await self._render_template(image_ref, template)
        except Exception as e:
            logger.exception(f"Template overlay failed, returning original image: {e}")
            return image_ref

    async def _render_template(self, image_ref: str, template: TemplateSettings) -> str:
        logger.info("Applying template overlay...")

        base = await self.loader.load(to_same_origin(image_ref))
        if isinstance(base, LoadFailed):
            logger.error(f"Failed to load base image, returning original: {base.reason}")
            return image_ref

        canvas = base.image.convert("RGBA")

        if template.has_color:
            self._draw_color_wash(canvas, template.selected_color)

        logo_box = None
        if template.has_logo:
            logo = await self.loader.load(to_same_origin(template.logo_preview))
            if isinstance(logo, LoadFailed):
                logger.warning(f"Logo failed to load, continuing without it: {logo.reason}")
            else:
                logo_box = self._draw_logo(canvas, logo.image, template.selected_position)

        if template.has_company_text:
            self._draw_company_text(canvas, template, logo_box)

        result = self._export(canvas, image_ref)
        if result != image_ref:
            logger.info("✅ Template overlay complete")
        return result

    def _draw_color_wash(self, canvas: Image.Image, color: str) -> None:
        fill = parse_color(color, alpha=settings.COLOR_WASH_ALPHA)
        logger.debug(f"Color wash {color} -> {fill}")
        canvas.alpha_composite(Image.new("RGBA", canvas.size, fill))

    def _draw_logo(self, canvas: Image.Image, logo: Image.Image, position: Optional[str]) -> BoundingBox:
        """
        Draw the logo at its template corner

        Width is LOGO_WIDTH_RATIO of the canvas capped at LOGO_MAX_WIDTH,
        height follows the logo's aspect ratio.

        Returns:
            Box the logo was drawn into
        """
        width, height = canvas.size
        padding = settings.TEMPLATE_PADDING

        logo_w = min(width * settings.LOGO_WIDTH_RATIO, settings.LOGO_MAX_WIDTH)
        logo_h = logo_w / (logo.width / logo.height)

        origin = corner_origin(position, canvas.size, (logo_w, logo_h), padding)
        x = clamp(origin.x, padding, width - logo_w - padding)
        y = clamp(origin.y, padding, height - logo_h - padding)

        resized = resize_image(logo, (max(1, round(logo_w)), max(1, round(logo_h))))
        paste_layer(canvas, resized, (x, y))

        logger.debug(f"Logo drawn at ({x:.0f}, {y:.0f}) size {logo_w:.0f}x{logo_h:.0f} ({position or 'default'})")
        return BoundingBox(x=x, y=y, w=logo_w, h=logo_h)

    def _draw_company_text(
        self,
        canvas: Image.Image,
        template: TemplateSettings,
        logo_box: Optional[BoundingBox]
    ) -> Position:
        """
        Draw the company text with a dark outline

        Returns:
            Top-left origin the text was drawn at
        """
        font_size = company_font_size(template.text_size, canvas.width)
        font = load_font(font_size)
        draw = ImageDraw.Draw(canvas)

        fill = parse_color(template.text_color or settings.DEFAULT_TEXT_COLOR, default=(255, 255, 255))
        stroke = parse_color(settings.TEXT_STROKE_COLOR)

        text_w = draw.textlength(template.company_text, font=font)
        origin = position_company_text(
            logo_box,
            template.text_position,
            template.text_alignment,
            canvas.size,
            (text_w, font_size),
            settings.TEMPLATE_PADDING,
            settings.TEXT_SPACING,
        )

        draw.text(
            (origin.x, origin.y),
            template.company_text,
            font=font,
            fill=fill,
            stroke_width=settings.TEXT_STROKE_WIDTH,
            stroke_fill=stroke,
            anchor="la",
        )

        logger.debug(f"Company text at ({origin.x:.0f}, {origin.y:.0f}), {font_size:.0f}px")
        return origin

    # ------------------------------------------------------------------------
    # Pipeline B - promotional badge
    # ------------------------------------------------------------------------

    async def apply_components_to_image(self, image_ref: str, components: Iterable[ComponentInput]) -> str:
        """
        Draw a badge for the first promotional component

        Args:
            image_ref: Base image reference (typically Pipeline A's output)
            components: AI-suggested components (models or raw dicts)

        Returns:
            PNG data URL, or ``image_ref`` when there is no promotion or any
            step fails
        """
        promo = select_promotion(self._coerce_components(components))
        if promo is None:
            logger.info("No promotional component, returning original image")
            return image_ref

        try:
            return await self._render_badge(image_ref, promo)
        except Exception as e:
            logger.exception(f"Badge overlay failed, returning original image: {e}")
            return image_ref

    def _coerce_components(self, components: Optional[Iterable[ComponentInput]]) -> List[PromotionalComponent]:
        coerced = []
        for component in components or ():
            if isinstance(component, PromotionalComponent):
                coerced.append(component)
                continue
            try:
                coerced.append(PromotionalComponent.model_validate(component))
            except ValidationError as e:
                logger.warning(f"Skipping malformed component: {e}")
        return coerced

    async def _render_badge(self, image_ref: str, promo: PromotionalComponent) -> str:
        logger.info(f"Applying promotion badge '{promo.display_name}'...")

        try:
            data = await self.loader.fetch_bytes(to_same_origin(image_ref))
        except ImageLoadError as e:
            logger.error(f"Failed to fetch base image, returning original: {e.reason}")
            return image_ref

        with self.loader.blobs.hold(data) as blob_url:
            base = await self.loader.load(blob_url)

        if isinstance(base, LoadFailed):
            logger.error(f"Failed to decode base image, returning original: {base.reason}")
            return image_ref

        canvas = base.image.convert("RGBA")
        template = self.store.get()

        color = resolve_badge_color(promo, self.rng)
        geometry = BadgeGeometry.for_canvas(canvas.size)
        center = self.plan_badge_center(promo, template, canvas.size, geometry)

        self._draw_badge(canvas, center, geometry, color, promo.display_name)

        result = self._export(canvas, image_ref)
        if result != image_ref:
            logger.info(f"✅ Badge drawn at ({center.x:.0f}, {center.y:.0f}) in {color}")
        return result

    def plan_badge_center(
        self,
        promo: PromotionalComponent,
        template: Optional[TemplateSettings],
        canvas_size: Tuple[int, int],
        geometry: BadgeGeometry
    ) -> Position:
        """
        Resolve, clamp and de-collide the badge center

        Args:
            promo: Selected promotion
            template: Current template (its logo/text are obstacles)
            canvas_size: (width, height)
            geometry: Badge sizes for this canvas

        Returns:
            Final badge center
        """
        template_position = template.selected_position if template else None
        anchor = parse_anchor(promo.position, template_position)

        def clamp_fn(p: Position) -> Position:
            return clamp_center(p, canvas_size, geometry.diameter, geometry.padding)

        center = clamp_fn(resolve_anchor(anchor, canvas_size, geometry.diameter, geometry.padding, self.rng))

        obstacles = estimate_obstacles(template, canvas_size)
        if obstacles:
            center = find_non_overlapping_position(
                center,
                geometry.radius,
                obstacles,
                candidate_positions(canvas_size),
                clamp_fn,
            )

        logger.debug(f"Badge anchor {anchor} -> ({center.x:.0f}, {center.y:.0f})")
        return center

    def _draw_badge(
        self,
        canvas: Image.Image,
        center: Position,
        geometry: BadgeGeometry,
        color: str,
        text: str
    ) -> None:
        self._draw_badge_shadow(canvas, center, geometry, color)
        self._draw_badge_circle(canvas, center, geometry, color)
        self._draw_badge_sheen(canvas, center, geometry)

        font_size = max(14.0, geometry.inner * 0.26)
        font = load_font(font_size)
        draw = ImageDraw.Draw(canvas)
        wrap_text_centered(
            draw,
            text,
            center.x,
            center.y,
            geometry.inner * 0.78,
            font_size + 2,
            font,
            (255, 255, 255, 255),
        )

    def _draw_badge_shadow(self, canvas: Image.Image, center: Position, geometry: BadgeGeometry, color: str) -> None:
        blur = max(8.0, geometry.diameter * 0.06)
        r = geometry.radius
        side = int(math.ceil(geometry.diameter + blur * 4))
        offset = 2

        layer = Image.new("RGBA", (side, side), (0, 0, 0, 0))
        c = side / 2 + offset
        ImageDraw.Draw(layer).ellipse(
            (c - r, c - r, c + r, c + r),
            fill=hex_to_rgb_tuple(color, settings.BADGE_SHADOW_ALPHA),
        )
        layer = layer.filter(ImageFilter.GaussianBlur(blur / 2))
        paste_layer(canvas, layer, (center.x - side / 2, center.y - side / 2))

    def _draw_badge_circle(self, canvas: Image.Image, center: Position, geometry: BadgeGeometry, color: str) -> None:
        """
        Radial gradient disc from ``color`` to a slightly darker shade

        The gradient starts at a focal point up and left of center, which
        gives the badge its lit-from-above look.
        """
        d = geometry.diameter
        r = geometry.radius
        x0 = int(math.floor(center.x - r)) - 1
        y0 = int(math.floor(center.y - r)) - 1
        side = int(math.ceil(d)) + 3

        # Gradient
        xs = x0 + np.arange(side) + 0.5
        ys = y0 + np.arange(side) + 0.5
        X, Y = np.meshgrid(xs, ys)

        focal_x = center.x - d * 0.12
        focal_y = center.y - d * 0.18
        r0 = d * 0.05
        r1 = d / 1.1

        dist = np.sqrt((X - focal_x) ** 2 + (Y - focal_y) ** 2)
        t = np.clip((dist - r0) / (r1 - r0), 0, 1)[..., None]

        start = np.array(hex_to_rgb_tuple(color)[:3], dtype=np.float64)
        end = np.array(
            hex_to_rgb_tuple(adjust_color_luminance(color, settings.BADGE_GRADIENT_LUMINANCE))[:3],
            dtype=np.float64,
        )
        rgb = start + (end - start) * t

        # Anti-aliased disc mask (4x supersampled)
        scale = 4
        mask = Image.new("L", (side * scale, side * scale), 0)
        cx = (center.x - x0) * scale
        cy = (center.y - y0) * scale
        ImageDraw.Draw(mask).ellipse((cx - r * scale, cy - r * scale, cx + r * scale, cy + r * scale), fill=255)
        mask = mask.resize((side, side), Image.LANCZOS)

        rgba = np.dstack([rgb, np.asarray(mask, dtype=np.float64)])
        layer = Image.fromarray(np.clip(np.rint(rgba), 0, 255).astype(np.uint8))
        paste_layer(canvas, layer, (x0, y0))

    def _draw_badge_sheen(self, canvas: Image.Image, center: Position, geometry: BadgeGeometry) -> None:
        d = geometry.diameter
        rx, ry = d * 0.28, d * 0.18
        side = int(math.ceil(rx * 2)) + 4

        layer = Image.new("RGBA", (side, side), (0, 0, 0, 0))
        c = side / 2
        ImageDraw.Draw(layer).ellipse(
            (c - rx, c - ry, c + rx, c + ry),
            fill=(255, 255, 255, round(settings.BADGE_SHEEN_ALPHA * 255)),
        )
        # -0.4 rad in canvas (y-down) space is counter-clockwise on screen
        layer = layer.rotate(math.degrees(0.4), resample=Image.BICUBIC)

        sheen_x = center.x - d * 0.16
        sheen_y = center.y - d * 0.22
        paste_layer(canvas, layer, (sheen_x - side / 2, sheen_y - side / 2))

    # ------------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------------

    def _export(self, canvas: Image.Image, original_ref: str) -> str:
        try:
            return encode_data_url(canvas)
        except ExportError as e:
            logger.warning(f"Canvas export failed, returning original image: {e}")
            return original_ref

    async def apply_all(self, image_ref: str, components: Iterable[ComponentInput]) -> str:
        """Template first, then badge, so badge placement can avoid the template"""
        templated = await self.apply_template_to_image(image_ref)
        return await self.apply_components_to_image(templated, components)


async def apply_template_to_image(image_ref: str, store: TemplateStore = None) -> str:
    """Pipeline A with a default compositor"""
    return await TemplateCompositor(store=store).apply_template_to_image(image_ref)


async def apply_components_to_image(
    image_ref: str,
    components: Iterable[ComponentInput],
    store: TemplateStore = None
) -> str:
    """Pipeline B with a default compositor"""
    return await TemplateCompositor(store=store).apply_components_to_image(image_ref, components)
