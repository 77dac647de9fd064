"""
Layout constants and server settings.

All geometry, typography and styling numbers the engine uses live on a
single frozen ``LayoutConfig``. ``DEFAULT_CONFIG`` carries the canonical
values; callers normally never build their own.

Server settings are read from the environment with defaults, so the
backend and CLI can be pointed elsewhere without code changes:

- AUTOLAYOUT_HOST                    (default 127.0.0.1)
- AUTOLAYOUT_PORT                    (default 8765)
- AUTOLAYOUT_MIN_REQUEST_INTERVAL_MS (default 1000)
- AUTOLAYOUT_LOG_LEVEL               (default INFO)
"""

import os

from pydantic import BaseModel, ConfigDict


class LayoutConfig(BaseModel):
    """Fixed constants for one layout run."""
    model_config = ConfigDict(frozen=True)

    # Shape sizing
    shape_scale: float = 1.6
    min_shape_width: int = 160
    min_shape_height: int = 64
    max_shape_size: int = 3200      # 2000 px hint at full scale

    # Typography
    text_font_size: int = 22       # standalone text nodes
    label_font_size: int = 20       # labels inside shapes
    edge_label_font_size: int = 16  # labels on arrows
    char_width_ratio: float = 0.6
    line_height_ratio: float = 1.2
    max_text_width: int = 360
    text_padding: int = 12
    min_text_width: int = 32
    label_inset: int = 16
    edge_label_width: int = 280
    font_family: int = 1

    # Row layout
    margin: int = 100
    horizontal_gap: int = 80
    vertical_gap: int = 100

    # Output envelope
    coord_limit: int = 5000

    # Styling
    stroke_color: str = "#1e293b"
    background_color: str = "#e2e8f0"
    fill_style: str = "solid"
    stroke_width: int = 2
    stroke_style: str = "solid"
    opacity: int = 100
    roughness: int = 1
    arrow_binding_gap: int = 8


DEFAULT_CONFIG = LayoutConfig()


class ServerSettings(BaseModel):
    """Settings for the HTTP backend and CLI."""
    host: str = "127.0.0.1"
    port: int = 8765
    min_request_interval_ms: int = 1000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerSettings":
        """Build settings from AUTOLAYOUT_* environment variables."""
        return cls(
            host=os.environ.get("AUTOLAYOUT_HOST", "127.0.0.1"),
            port=int(os.environ.get("AUTOLAYOUT_PORT", "8765")),
            min_request_interval_ms=int(
                os.environ.get("AUTOLAYOUT_MIN_REQUEST_INTERVAL_MS", "1000")
            ),
            log_level=os.environ.get("AUTOLAYOUT_LOG_LEVEL", "INFO").upper(),
        )
