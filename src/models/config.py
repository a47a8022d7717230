"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DETECTION_METHODS = ("feature_print", "anchor", "native")


@dataclass
class CameraConfig:
    """Camera configuration."""
    backend: str = "opencv"
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [1280, 720])
    fps: int = 30
    swap_rb: bool = False
    rotate: int = 0
    flip_horizontal: bool = False
    flip_vertical: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            backend=d.get("backend", "opencv"),
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [1280, 720]),
            fps=d.get("fps", 30),
            swap_rb=d.get("swap_rb", False),
            rotate=d.get("rotate", 0),
            flip_horizontal=d.get("flip_horizontal", False),
            flip_vertical=d.get("flip_vertical", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "swap_rb": self.swap_rb,
            "rotate": self.rotate,
            "flip_horizontal": self.flip_horizontal,
            "flip_vertical": self.flip_vertical,
        }


@dataclass
class AnchorConfig:
    """Keypoint anchor tracker configuration."""
    n_features: int = 1000
    ratio_test: float = 0.75
    min_inliers: int = 15

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AnchorConfig":
        return cls(
            n_features=d.get("n_features", 1000),
            ratio_test=d.get("ratio_test", 0.75),
            min_inliers=d.get("min_inliers", 15),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_features": self.n_features,
            "ratio_test": self.ratio_test,
            "min_inliers": self.min_inliers,
        }


@dataclass
class DetectionConfig:
    """
    Detection configuration.

    Attributes:
        method: Observation strategy (feature_print, anchor, native).
        min_sample_interval: Seconds between processed frames.
        match_distance_threshold: Acceptance threshold in descriptor distance
            units; tuned per descriptor algorithm.
        anchor: Settings for the keypoint anchor tracker.
        native_init_timeout: Seconds to wait for a native engine to initialise.
    """
    method: str = "feature_print"
    min_sample_interval: float = 1.0
    match_distance_threshold: float = 30.0
    anchor: Optional[AnchorConfig] = None
    native_init_timeout: float = 10.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        anchor_dict = d.get("anchor")
        anchor = AnchorConfig.from_dict(anchor_dict) if anchor_dict else None
        return cls(
            method=d.get("method", "feature_print"),
            min_sample_interval=float(d.get("min_sample_interval", 1.0)),
            match_distance_threshold=float(d.get("match_distance_threshold", 30.0)),
            anchor=anchor,
            native_init_timeout=float(d.get("native_init_timeout", 10.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "method": self.method,
            "min_sample_interval": self.min_sample_interval,
            "match_distance_threshold": self.match_distance_threshold,
            "native_init_timeout": self.native_init_timeout,
        }
        if self.anchor:
            d["anchor"] = self.anchor.to_dict()
        return d


@dataclass
class CatalogConfig:
    """Reference image set used to build the catalog."""
    reference_dir: str = "assets/references"
    labels: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CatalogConfig":
        return cls(
            reference_dir=d.get("reference_dir", "assets/references"),
            labels=d.get("labels"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"reference_dir": self.reference_dir}
        if self.labels is not None:
            d["labels"] = self.labels
        return d


@dataclass
class WebConfig:
    """Status API configuration."""
    enabled: bool = False
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", False),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/banknote_reader.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            catalog=CatalogConfig.from_dict(d.get("catalog", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/banknote_reader.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        return {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "catalog": self.catalog.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
