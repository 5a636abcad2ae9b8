from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Sequence

from mandelcanvas.color import ColorPolicy, ExponentialGrowth, policy_from_name, policy_name
from mandelcanvas.errors import InvalidConfig, InvalidDimensions
from mandelcanvas.viewport import CENTERED_SCALE, REFERENCES, ViewportTransform

DEFAULTS: Dict[str, Any] = {
    "width": 800,
    "height": 600,
    "offset_x": 0.0,
    "offset_y": 0.0,
    "scale": None,
    "reference": "fixed",
    "centered": False,
    "max_iterations": 1000,
    "bailout_radius": 256.0,
    "base_scale": 256.0,
    "color_policy": "growth",
    "policy_params": {},
    "workers": 1,
    "band_height": 32,
    "output": "mandelbrot.png",
}

# Wire option name -> config key.
WIRE_OPTIONS = {
    "offsetX": "offset_x",
    "offsetY": "offset_y",
    "scale": "scale",
    "maxIterations": "max_iterations",
    "bailoutRadius": "bailout_radius",
    "colorPolicy": "color_policy",
    "reference": "reference",
}

@dataclass(frozen=True)
class RenderConfig:
    """Tunable constants for one render, passed explicitly into each call."""

    max_iterations: int = 1000
    bailout_radius: float = 256.0
    base_scale: float = 256.0
    color_policy: ColorPolicy = field(default_factory=ExponentialGrowth)

    def __post_init__(self) -> None:
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int) or self.max_iterations < 1:
            raise InvalidConfig(f"max_iterations must be a positive int, got {self.max_iterations!r}")
        if not (math.isfinite(self.bailout_radius) and self.bailout_radius > 1.0):
            raise InvalidConfig(f"bailout_radius must be a finite value > 1, got {self.bailout_radius!r}")
        if not (math.isfinite(self.base_scale) and self.base_scale > 0):
            raise InvalidConfig(f"base_scale must be a finite value > 0, got {self.base_scale!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_iterations": self.max_iterations,
            "bailout_radius": self.bailout_radius,
            "base_scale": self.base_scale,
            "color_policy": policy_name(self.color_policy),
            "policy_params": asdict(self.color_policy),
        }

def check_dimensions(width: int, height: int) -> None:
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidDimensions(f"{name} must be a positive int, got {value!r}")

@dataclass(frozen=True)
class RenderRequest:
    width: int
    height: int
    transform: ViewportTransform = field(default_factory=ViewportTransform)
    config: RenderConfig = field(default_factory=RenderConfig)

    @classmethod
    def from_wire(cls, message: Sequence[Any]) -> "RenderRequest":
        """Build a request from a ``[width, height, options]`` message."""
        if not isinstance(message, (list, tuple)) or len(message) not in (2, 3):
            raise InvalidConfig("render message must be [width, height, options]")
        width, height = message[0], message[1]
        options = message[2] if len(message) == 3 else None
        return cls.from_dict({"width": width, "height": height, "options": options or {}})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenderRequest":
        width = _as_dimension(data.get("width"))
        height = _as_dimension(data.get("height"))
        check_dimensions(width, height)
        options = data.get("options") or {}
        if not isinstance(options, dict):
            raise InvalidConfig("options must be an object")
        unknown = sorted(set(options) - set(WIRE_OPTIONS))
        if unknown:
            raise InvalidConfig(f"unknown render options: {', '.join(unknown)}")
        cfg = {WIRE_OPTIONS[k]: v for k, v in options.items()}
        try:
            transform = ViewportTransform(
                offset_x=float(cfg.get("offset_x", 0.0)),
                offset_y=float(cfg.get("offset_y", 0.0)),
                scale=float(cfg.get("scale", 1.0)),
                reference=str(cfg.get("reference", "fixed")),
            )
            config = RenderConfig(
                max_iterations=_as_int(cfg.get("max_iterations", 1000), "maxIterations"),
                bailout_radius=float(cfg.get("bailout_radius", 256.0)),
                color_policy=policy_from_name(str(cfg.get("color_policy", "growth"))),
            )
        except (TypeError, ValueError) as e:
            if isinstance(e, InvalidConfig):
                raise
            raise InvalidConfig(str(e)) from e
        return cls(width=width, height=height, transform=transform, config=config)

def _as_dimension(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value

def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidConfig(f"{name} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidConfig(f"{name} must be an integer, got {value!r}")
        return int(value)
    if not isinstance(value, int):
        raise InvalidConfig(f"{name} must be an integer, got {value!r}")
    return value

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return dict(DEFAULTS)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfig(f"Config {config_path} is not valid JSON: {e}") from e
    if not isinstance(cfg, dict):
        raise InvalidConfig("Config JSON must be an object.")
    unknown = sorted(set(cfg) - set(DEFAULTS))
    if unknown:
        raise InvalidConfig(f"Unknown config fields: {', '.join(unknown)}")
    out = dict(DEFAULTS)
    out.update(cfg)
    return out

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(DEFAULTS)
    out.update(cfg)
    try:
        out["width"] = _as_dimension(out["width"])
        out["height"] = _as_dimension(out["height"])
        out["max_iterations"] = _as_int(out["max_iterations"], "max_iterations")
        out["workers"] = _as_int(out["workers"], "workers")
        out["band_height"] = _as_int(out["band_height"], "band_height")
        for k in ("offset_x", "offset_y", "bailout_radius", "base_scale"):
            out[k] = float(out[k])
        if out["scale"] is not None:
            out["scale"] = float(out["scale"])
    except (TypeError, ValueError) as e:
        if isinstance(e, InvalidConfig):
            raise
        raise InvalidConfig(str(e)) from e
    check_dimensions(out["width"], out["height"])
    if out["reference"] not in REFERENCES:
        raise InvalidConfig(f"reference must be one of: {', '.join(REFERENCES)}")
    if out["workers"] < 1 or out["band_height"] < 1:
        raise InvalidConfig("workers/band_height must be positive.")
    if not isinstance(out["policy_params"], dict):
        raise InvalidConfig("policy_params must be an object.")
    out["centered"] = bool(out["centered"])
    out["output"] = str(out["output"])
    return out

def transform_from_config(cfg: Dict[str, Any]) -> ViewportTransform:
    # An unset scale means the natural zoom of the chosen framing.
    scale = cfg.get("scale")
    if cfg["centered"]:
        return ViewportTransform.centered(cfg["width"], cfg["height"], CENTERED_SCALE if scale is None else scale)
    return ViewportTransform(
        offset_x=cfg["offset_x"], offset_y=cfg["offset_y"], scale=1.0 if scale is None else scale, reference=cfg["reference"]
    )

def render_config_from_config(cfg: Dict[str, Any]) -> RenderConfig:
    return RenderConfig(
        max_iterations=cfg["max_iterations"],
        bailout_radius=cfg["bailout_radius"],
        base_scale=cfg["base_scale"],
        color_policy=policy_from_name(cfg["color_policy"], **cfg["policy_params"]),
    )
