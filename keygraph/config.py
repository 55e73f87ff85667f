"""Configuration loading for the key graph visualizer."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class LayoutConfig(BaseModel):
    h_spacing: float = Field(default=120.0, gt=0)  # horizontal distance between siblings in a layer
    v_spacing: float = Field(default=100.0, gt=0)  # vertical distance between layers


class GeometryConfig(BaseModel):
    arrow_size: float = Field(default=8.0, gt=0)
    arrow_half_angle_deg: float = Field(default=30.0, gt=0, lt=90)
    arrow_standoff: float = Field(default=20.0, ge=0)  # node center to arrow tip
    label_padding: float = Field(default=8.0, ge=0)
    box_height: float = Field(default=24.0, gt=0)
    corner_radius: float = Field(default=4.0, ge=0)
    font_size: int = Field(default=12, gt=0)


class PickerConfig(BaseModel):
    hit_radius_px: float = Field(default=10.0, gt=0)
    min_zoom: float = Field(default=0.1, gt=0)
    max_zoom: float = Field(default=5.0, gt=0)
    zoom_in_step: float = 1.1
    zoom_out_step: float = 0.9


class RenderConfig(BaseModel):
    width: int = Field(default=1600, gt=0)
    height: int = Field(default=1000, gt=0)
    background: str = "#ffffff"
    resil_edge_color: tuple[int, int, int, int] = (100, 100, 100, 77)
    resil_edge_width: float = 1.5
    nonresil_edge_color: tuple[int, int, int, int] = (150, 150, 150, 102)
    nonresil_edge_width: float = 1.0
    node_border_width: float = 2.75
    unknown_node_color: tuple[int, int, int, int] = (128, 128, 128, 102)
    text_color: str = "#1f2937"
    target_text_color: str = "#e11d48"
    font_path: str | None = None


class DataConfig(BaseModel):
    data_dir: str = "data"
    slug_mapping: str = "slug_mapping.json"


class Config(BaseModel):
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    picker: PickerConfig = Field(default_factory=PickerConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    data: DataConfig = Field(default_factory=DataConfig)

    @property
    def resolved_data_dir(self) -> Path:
        """Resolve data_dir relative to project root."""
        p = Path(self.data.data_dir).expanduser()
        if p.is_absolute():
            return p
        return _project_root() / p

    @property
    def resolved_slug_mapping(self) -> Path:
        p = Path(self.data.slug_mapping).expanduser()
        if p.is_absolute():
            return p
        return _project_root() / p


def _project_root() -> Path:
    """Return the keygraph project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return Config(**raw)

    return Config()
