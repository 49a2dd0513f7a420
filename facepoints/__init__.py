#!/usr/bin/env python3
"""
Facial landmark points from cascade detections and Harris corners
Init file for the facepoints package

Created: 2025
"""

from .config_manager import ConfigManager, ConfigurationError, FeatureProfile
from .corners import CornerExtractor
from .detectors import CascadeDetector, ModelLoadError
from .face_landmarks import FaceLandmarkDetector
from .types import FaceLandmarks, FeatureLandmarks

__version__ = "1.0.0"
__author__ = "Facepoints Team"

__all__ = [
    'ConfigManager',
    'ConfigurationError',
    'FeatureProfile',
    'CornerExtractor',
    'CascadeDetector',
    'ModelLoadError',
    'FaceLandmarkDetector',
    'FaceLandmarks',
    'FeatureLandmarks',
]
