"""
Configuration settings for the Brand Overlay Compositor
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Project paths
    PROJECT_ROOT: Path = Path(__file__).parent
    WORKSPACE_DIR: Path = PROJECT_ROOT / "workspace"
    ASSETS_DIR: Path = PROJECT_ROOT / "assets"
    FONTS_DIR: Path = ASSETS_DIR / "fonts"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Template settings store (read-only key-value store)
    TEMPLATE_STORE_PATH: Path = WORKSPACE_DIR / "template.json"
    TEMPLATE_STORE_KEY: str = "brewpost-template"

    # Same-origin asset proxy
    ASSET_PROXY_PATTERNS: list[str] = [
        "s3-brewpost.s3.us-east-1.amazonaws.com",
        "brewpost-assets",
    ]
    ASSET_PROXY_BASE: str = "http://localhost:5044/api/assets/proxy/"

    # Network (None = no timeout, the caller owns that policy)
    HTTP_TIMEOUT: Optional[float] = None

    # Fonts (falls back to Pillow's bundled font when missing)
    FONT_PATH: Optional[Path] = None
    FONT_BOLD: str = "DejaVuSans-Bold.ttf"

    # Template overlay
    TEMPLATE_PADDING: int = 20
    LOGO_WIDTH_RATIO: float = 0.1  # 10% of canvas width
    LOGO_MAX_WIDTH: int = 80
    COLOR_WASH_ALPHA: float = 0.1
    TEXT_SPACING: int = 10  # logo <-> company text gap
    TEXT_STROKE_WIDTH: int = 2
    DEFAULT_TEXT_COLOR: str = "#FFFFFF"
    TEXT_STROKE_COLOR: str = "#000000"

    # Promotional badge
    BADGE_INNER_RATIO: float = 0.18  # of min(width, height)
    BADGE_VISUAL_SCALE: float = 1.25
    BADGE_HUE_SHIFT_MIN: int = 12
    BADGE_HUE_SHIFT_SPAN: int = 20  # shift = MIN + randrange(SPAN)
    BADGE_GRADIENT_LUMINANCE: float = -0.06
    BADGE_SHADOW_ALPHA: float = 0.35
    BADGE_SHEEN_ALPHA: float = 0.12
    BADGE_PALETTE: list[str] = [
        "#FFB86B",
        "#FF6B6B",
        "#6BCBFF",
        "#7C4DFF",
        "#4DD0E1",
        "#00C851",
        "#FF3B30",
        "#F06292",
        "#FFD54F",
        "#4DB6AC",
    ]

    # Output settings
    OUTPUT_FORMAT: str = "PNG"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
