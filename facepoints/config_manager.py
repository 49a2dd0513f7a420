#!/usr/bin/env python3
"""
Configuration Management Module
Handles loading and validating configuration files, and turns the
per-feature records into immutable feature profiles

Created: 2025
"""

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import cv2

logger = logging.getLogger(__name__)

MIN_FACE_SIZE = 30
BAND_FEATURES = ("eyes", "nose", "mouth")


class ConfigurationError(ValueError):
    """Raised when the configuration cannot be used to build the pipeline."""


@dataclass(frozen=True)
class FeatureProfile:
    """Search geometry and filter thresholds for one facial feature.

    ``min_height_ratio``/``max_height_ratio`` are fractions of the face height
    bounding the vertical band searched for the feature.
    """

    name: str
    min_height_ratio: float
    max_height_ratio: float
    min_object_size: int = MIN_FACE_SIZE // 5
    expected_count: int = 1
    min_neighbors: int = 1
    scale_factor: float = 1.1
    pad_x: int = 0
    pad_top: int = 0
    pad_bottom: int = 0
    thresholds: Mapping[str, float] = field(default_factory=dict)

    def threshold(self, key: str) -> float:
        return float(self.thresholds[key])


class ConfigManager:
    """Configuration manager for the landmark pipeline"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager
        Args:
            config_path: Path to configuration file
        """
        self.config_path = config_path or "config.json"
        self.config = self._get_default_config()

        if os.path.exists(self.config_path):
            self.load_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            "min_face_size": MIN_FACE_SIZE,
            "face_scale_factor": 1.1,
            "face_min_neighbors": 2,
            "equalize_histogram": True,
            "enable_debug": False,
            "max_workers": 3,
            "models_directory": "models",
            "models": {
                "face": "haarcascade_frontalface_alt.xml",
                "eyes": "haarcascade_eye_tree_eyeglasses.xml",
                "nose": "haarcascade_mcs_nose.xml",
                "mouth": "haarcascade_mcs_mouth.xml",
            },
            "corners": {
                "max_corners": 20,
                "quality_level": 0.01,
                "min_distance": 3.0,
                "block_size": 3,
                "use_harris": True,
                "k": 0.04,
            },
            "features": {
                "eyes": {
                    "min_height_ratio": 0.2,
                    "max_height_ratio": 0.55,
                    "expected_count": 2,
                    "min_neighbors": 1,
                    "pad_x": 3,
                    "thresholds": {
                        "y_deviation": 0.12,
                        "brow_expand": 0.15,
                        "brow_height": 0.4,
                    },
                },
                "nose": {
                    "min_height_ratio": 0.4,
                    "max_height_ratio": 0.75,
                    "expected_count": 1,
                    "min_neighbors": 1,
                    "thresholds": {
                        "x_deviation": 0.09,
                        "y_deviation": 0.12,
                        "center_offset": 2.0,
                    },
                },
                "mouth": {
                    "min_height_ratio": 0.7,
                    "max_height_ratio": 0.99,
                    "expected_count": 1,
                    "min_neighbors": 1,
                    "pad_x": 5,
                    "pad_top": 5,
                    "thresholds": {
                        "midline_deviation": 0.1,
                    },
                },
            },
            "colors": {
                "eyebrows": [255, 255, 0],
                "eye_corners": [0, 165, 255],
                "eye_center": [0, 0, 255],
                "nose": [255, 0, 255],
                "mouth": [255, 0, 0],
                "candidates": [0, 255, 0],
                "kept": [0, 255, 255],
                "debug_rect": [0, 0, 255],
            },
        }

    def load_config(self) -> bool:
        """
        Load configuration from file
        Returns:
            True if loaded successfully
        """
        try:
            with open(self.config_path, 'r') as f:
                loaded_config = json.load(f)

            # Update default config with loaded values
            self._deep_update(self.config, loaded_config)

            logger.info("Configuration loaded from %s", self.config_path)
            return True

        except (OSError, ValueError) as e:
            print(f"Error loading configuration: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value
        Args:
            key: Configuration key (supports dot notation, e.g., 'features.eyes.pad_x')
            default: Default value if key not found
        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any):
        """
        Set configuration value
        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        # Navigate to parent of target key
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def _deep_update(self, base_dict: Dict, update_dict: Dict):
        """
        Deep update dictionary
        Args:
            base_dict: Base dictionary to update
            update_dict: Dictionary with updates
        """
        for key, value in update_dict.items():
            if key in base_dict and isinstance(base_dict[key], dict) and isinstance(value, dict):
                self._deep_update(base_dict[key], value)
            else:
                base_dict[key] = value

    def _collect_errors(self) -> List[str]:
        errors = []

        if self.get('min_face_size', 0) <= 0:
            errors.append("min_face_size must be positive")

        if self.get('face_scale_factor', 0) <= 1.0:
            errors.append("face_scale_factor must be greater than 1")

        if self.get('max_workers', 0) < 1:
            errors.append("max_workers must be at least 1")

        if not 0 < self.get('corners.quality_level', 0) <= 1:
            errors.append("corners.quality_level must be in (0, 1]")

        if self.get('corners.max_corners', 0) < 0:
            errors.append("corners.max_corners must not be negative")

        for name in BAND_FEATURES:
            record = self.get(f'features.{name}')
            if not isinstance(record, dict):
                errors.append(f"features.{name} is missing")
                continue

            low = record.get('min_height_ratio', -1)
            high = record.get('max_height_ratio', -1)
            if not 0 <= low < high <= 1:
                errors.append(f"features.{name}: height ratios must satisfy 0 <= min < max <= 1")

            if record.get('expected_count', 1) < 1:
                errors.append(f"features.{name}.expected_count must be at least 1")

            if record.get('min_neighbors', 1) < 0:
                errors.append(f"features.{name}.min_neighbors must not be negative")

            if record.get('min_object_size', 1) < 1:
                errors.append(f"features.{name}.min_object_size must be positive")

            for pad_key in ('pad_x', 'pad_top', 'pad_bottom'):
                if record.get(pad_key, 0) < 0:
                    errors.append(f"features.{name}.{pad_key} must not be negative")

            for key, value in (record.get('thresholds') or {}).items():
                if not isinstance(value, (int, float)) or value < 0:
                    errors.append(f"features.{name}.thresholds.{key} must be a non-negative number")

        for name in ("face",) + BAND_FEATURES:
            if not self.get(f'models.{name}'):
                errors.append(f"models.{name} must name a cascade file")

        return errors

    def validate_config(self) -> bool:
        """
        Validate configuration values
        Returns:
            True if configuration is valid
        """
        errors = self._collect_errors()

        if errors:
            print("Configuration validation errors:")
            for error in errors:
                print(f"  - {error}")
            return False

        return True

    def build_profiles(self) -> Dict[str, FeatureProfile]:
        """
        Build the immutable per-feature profiles
        Returns:
            Mapping of feature name to profile
        Raises:
            ConfigurationError: if any feature record is invalid
        """
        errors = self._collect_errors()
        if errors:
            raise ConfigurationError("; ".join(errors))

        default_object_size = max(1, int(self.get('min_face_size')) // 5)
        profiles = {}
        for name in BAND_FEATURES:
            record = self.get(f'features.{name}')
            profiles[name] = FeatureProfile(
                name=name,
                min_height_ratio=float(record['min_height_ratio']),
                max_height_ratio=float(record['max_height_ratio']),
                min_object_size=int(record.get('min_object_size', default_object_size)),
                expected_count=int(record.get('expected_count', 1)),
                min_neighbors=int(record.get('min_neighbors', 1)),
                scale_factor=float(record.get('scale_factor', 1.1)),
                pad_x=int(record.get('pad_x', 0)),
                pad_top=int(record.get('pad_top', 0)),
                pad_bottom=int(record.get('pad_bottom', 0)),
                thresholds=MappingProxyType(copy.deepcopy(record.get('thresholds') or {})),
            )
        return profiles

    def resolve_model_path(self, name: str) -> str:
        """
        Locate a cascade file by feature name
        Args:
            name: Key under ``models`` (face, eyes, nose, mouth)
        Returns:
            First existing candidate, or the configured value unchanged
        """
        configured = self.get(f'models.{name}')
        if not configured:
            raise ConfigurationError(f"No cascade configured for '{name}'")

        candidates = [
            configured,
            os.path.join(self.get('models_directory') or '', configured),
            os.path.join(cv2.data.haarcascades, os.path.basename(configured)),
        ]
        for candidate in candidates:
            if os.path.isfile(candidate):
                return candidate
        return configured

    def print_config(self):
        """Print current configuration"""
        print("=== Current Configuration ===")
        self._print_dict(self.config, indent=0)

    def _print_dict(self, d: Dict, indent: int):
        """Recursively print dictionary"""
        for key, value in d.items():
            if isinstance(value, dict):
                print("  " * indent + f"{key}:")
                self._print_dict(value, indent + 1)
            else:
                print("  " * indent + f"{key}: {value}")
