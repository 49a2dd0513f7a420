#!/usr/bin/env python3
"""
Face Landmark Module
Finds faces with a Haar cascade, then locates eyebrow, eye, nostril and
mouth points inside each face from Harris corner candidates

Created: 2025
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .annotation import AnnotationLayer, Color, composite
from .config_manager import BAND_FEATURES, ConfigManager, FeatureProfile
from .corners import CornerExtractor
from .detectors.cascade import load_cascades
from .feature_selector import FeatureSelector
from .geometry import Rect, clip_rect, crop, eyebrow_region, is_empty, region_for_band, to_global
from .landmarks import eye_landmarks, eyebrow_landmarks, mouth_landmarks, nose_landmarks
from .types import FaceLandmarks, FeatureLandmarks

logger = logging.getLogger(__name__)

DEFAULT_COLORS: Dict[str, Color] = {
    "eyebrows": (255, 255, 0),
    "eye_corners": (0, 165, 255),
    "eye_center": (0, 0, 255),
    "nose": (255, 0, 255),
    "mouth": (255, 0, 0),
    "candidates": (0, 255, 0),
    "kept": (0, 255, 255),
    "debug_rect": (0, 0, 255),
}


class FaceLandmarkDetector:
    """Landmark pipeline for still images"""

    def __init__(
        self,
        face_detector,
        feature_detectors: Dict[str, object],
        profiles: Dict[str, FeatureProfile],
        corner_extractor: Optional[CornerExtractor] = None,
        *,
        min_face_size: int = 30,
        equalize_histogram: bool = True,
        enable_debug: bool = False,
        colors: Optional[Dict[str, Sequence[int]]] = None,
        max_workers: int = 3,
    ):
        """
        Initialize the landmark pipeline
        Args:
            face_detector: Object with ``detect(gray, min_size) -> [Rect]``
            feature_detectors: Same interface, keyed by eyes/nose/mouth
            profiles: Feature profiles keyed by eyes/nose/mouth
            corner_extractor: Candidate point source (defaults to Harris)
            min_face_size: Smallest face side in pixels
            equalize_histogram: Equalize the detection image first
            enable_debug: Also draw candidates and search rectangles
            colors: BGR colors overriding ``DEFAULT_COLORS``
            max_workers: Threads used for the per-face feature tasks
        """
        missing = [name for name in BAND_FEATURES if name not in feature_detectors or name not in profiles]
        if missing:
            raise ValueError(f"Missing detector or profile for: {', '.join(missing)}")

        self.face_detector = face_detector
        self.selectors = {
            name: FeatureSelector(feature_detectors[name], profiles[name])
            for name in BAND_FEATURES
        }
        self.profiles = profiles
        self.corner_extractor = corner_extractor or CornerExtractor()
        self.min_face_size = min_face_size
        self.equalize_histogram = equalize_histogram
        self.enable_debug = enable_debug
        self.colors: Dict[str, Color] = dict(DEFAULT_COLORS)
        for key, value in (colors or {}).items():
            self.colors[key] = tuple(int(c) for c in value)
        self.max_workers = max(1, int(max_workers))
        self._executor: Optional[ThreadPoolExecutor] = None

    @classmethod
    def from_config(cls, config: ConfigManager) -> "FaceLandmarkDetector":
        """
        Build the pipeline from configuration, loading every cascade
        Raises:
            ConfigurationError: invalid configuration
            ModelLoadError: a cascade could not be loaded
        """
        profiles = config.build_profiles()

        paths = {name: config.resolve_model_path(name) for name in ("face",) + BAND_FEATURES}
        settings = {
            "face": (float(config.get("face_scale_factor")), int(config.get("face_min_neighbors"))),
        }
        for name, profile in profiles.items():
            settings[name] = (profile.scale_factor, profile.min_neighbors)
        detectors = load_cascades(paths, settings)

        corners = CornerExtractor(
            max_corners=int(config.get("corners.max_corners")),
            quality_level=float(config.get("corners.quality_level")),
            min_distance=float(config.get("corners.min_distance")),
            block_size=int(config.get("corners.block_size")),
            use_harris=bool(config.get("corners.use_harris")),
            k=float(config.get("corners.k")),
        )

        return cls(
            detectors.pop("face"),
            detectors,
            profiles,
            corners,
            min_face_size=int(config.get("min_face_size")),
            equalize_histogram=bool(config.get("equalize_histogram", True)),
            enable_debug=bool(config.get("enable_debug", False)),
            colors=config.get("colors"),
            max_workers=int(config.get("max_workers", 3)),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="facepoints",
            )
        return self._executor

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "FaceLandmarkDetector":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def prepare(self, frame: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Split an input image into the buffers the pipeline reads
        Returns:
            (color, detection_gray, corner_gray) where ``detection_gray`` is
            histogram-equalized when enabled and ``corner_gray`` is not
        """
        if len(frame.shape) == 2:
            color = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
            corner_gray = frame
        else:
            color = frame
            corner_gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)

        detection_gray = cv2.equalizeHist(corner_gray) if self.equalize_histogram else corner_gray
        return color, detection_gray, corner_gray

    def detect_faces(self, gray: np.ndarray) -> List[Rect]:
        """Face rectangles clipped to the image, in detector order."""
        faces = []
        for rect in self.face_detector.detect(gray, self.min_face_size):
            rect = clip_rect(rect, gray.shape)
            if not is_empty(rect):
                faces.append(rect)
        return faces

    def detect_landmarks(self, frame: np.ndarray) -> Tuple[np.ndarray, List[FaceLandmarks]]:
        """
        Locate landmarks on every face in ``frame``
        Args:
            frame: BGR or grayscale image; it is never modified
        Returns:
            (annotated copy of the image, landmarks per face)
        """
        color, detection_gray, corner_gray = self.prepare(frame)

        faces = self.detect_faces(detection_gray)
        logger.debug("Detected %d faces", len(faces))

        results: List[FaceLandmarks] = []
        layers: List[AnnotationLayer] = []
        for face in faces:
            face_result, face_layers = self.process_face(detection_gray, corner_gray, face)
            results.append(face_result)
            layers.extend(face_layers)

        return composite(color, layers), results

    def process_face(
        self,
        detection_gray: np.ndarray,
        corner_gray: np.ndarray,
        face: Rect,
    ) -> Tuple[FaceLandmarks, List[AnnotationLayer]]:
        """
        Run the eye, nose and mouth tasks for one face concurrently
        Returns:
            Landmarks for the face and its annotation layers in render order
        """
        bounds = clip_rect(face, detection_gray.shape)
        face_layer = AnnotationLayer(bounds)
        if self.enable_debug:
            face_layer.rectangle(bounds, self.colors["debug_rect"])

        tasks = (self._eyes_task, self._nose_task, self._mouth_task)
        executor = self._get_executor()
        futures = []
        for task in tasks:
            layer = AnnotationLayer(bounds)
            futures.append((layer, executor.submit(task, detection_gray, corner_gray, face, layer)))
        wait([future for _, future in futures])

        result = FaceLandmarks(rect=face)
        layers = [face_layer]
        for layer, future in futures:
            for feature, items in future.result().items():
                result.features[feature].extend(items)
            layers.append(layer)

        logger.debug(
            "Face %s: %d eyes, %d eyebrows, %d nose, %d mouth",
            face,
            len(result.features["eyes"]),
            len(result.features["eyebrows"]),
            len(result.features["nose"]),
            len(result.features["mouth"]),
        )
        return result, layers

    # ------------------------------------------------------------------
    # Feature tasks
    # ------------------------------------------------------------------

    def _feature_boxes(self, name: str, gray: np.ndarray, face: Rect) -> List[Rect]:
        profile = self.profiles[name]
        region = region_for_band(face, profile.min_height_ratio, profile.max_height_ratio)
        return self.selectors[name].select(gray, region)

    def _candidates(self, corner_gray: np.ndarray, box: Rect, layer: AnnotationLayer):
        candidates = to_global(self.corner_extractor.extract(crop(corner_gray, box)), box)
        if self.enable_debug:
            layer.circles(candidates, self.colors["candidates"])
        return candidates

    def _debug_kept(self, landmarks: FeatureLandmarks, layer: AnnotationLayer) -> None:
        if self.enable_debug:
            layer.circles(landmarks.kept, self.colors["kept"])
            layer.rectangle(landmarks.box, self.colors["debug_rect"])

    def _eyes_task(
        self,
        gray: np.ndarray,
        corner_gray: np.ndarray,
        face: Rect,
        layer: AnnotationLayer,
    ) -> Dict[str, List[FeatureLandmarks]]:
        profile = self.profiles["eyes"]
        eyes: List[FeatureLandmarks] = []
        eyebrows: List[FeatureLandmarks] = []

        for box in self._feature_boxes("eyes", gray, face):
            eye = eye_landmarks(self._candidates(corner_gray, box, layer), box, profile)
            self._debug_kept(eye, layer)
            for label in ("left_corner", "right_corner"):
                if eye.points[label] is not None:
                    layer.circle(eye.points[label], self.colors["eye_corners"])
            layer.circle(eye.points["center"], self.colors["eye_center"])
            eyes.append(eye)

            region = clip_rect(
                eyebrow_region(box, profile.threshold("brow_expand"), profile.threshold("brow_height")),
                corner_gray.shape,
            )
            if is_empty(region):
                continue
            brow = eyebrow_landmarks(self._candidates(corner_gray, region, layer), region, box)
            layer.circles(brow.present().values(), self.colors["eyebrows"])
            if self.enable_debug:
                layer.rectangle(region, self.colors["debug_rect"])
            eyebrows.append(brow)

        return {"eyes": eyes, "eyebrows": eyebrows}

    def _nose_task(
        self,
        gray: np.ndarray,
        corner_gray: np.ndarray,
        face: Rect,
        layer: AnnotationLayer,
    ) -> Dict[str, List[FeatureLandmarks]]:
        profile = self.profiles["nose"]
        noses = []
        for box in self._feature_boxes("nose", gray, face):
            nose = nose_landmarks(self._candidates(corner_gray, box, layer), box, profile)
            self._debug_kept(nose, layer)
            layer.circles(nose.present().values(), self.colors["nose"])
            noses.append(nose)
        return {"nose": noses}

    def _mouth_task(
        self,
        gray: np.ndarray,
        corner_gray: np.ndarray,
        face: Rect,
        layer: AnnotationLayer,
    ) -> Dict[str, List[FeatureLandmarks]]:
        profile = self.profiles["mouth"]
        mouths = []
        for box in self._feature_boxes("mouth", gray, face):
            mouth = mouth_landmarks(self._candidates(corner_gray, box, layer), box, profile)
            self._debug_kept(mouth, layer)
            layer.circles(mouth.present().values(), self.colors["mouth"])
            mouths.append(mouth)
        return {"mouth": mouths}
