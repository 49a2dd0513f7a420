#!/usr/bin/env python3
"""CLI entry point for the facial landmark application."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np

# Ensure the facepoints package is importable regardless of entry location
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from facepoints.config_manager import ConfigManager, ConfigurationError
from facepoints.detectors import ModelLoadError
from facepoints.face_landmarks import FaceLandmarkDetector
from facepoints.types import FaceLandmarks

SUPPORTED_FORMATS: Tuple[str, ...] = ('.jpg', '.jpeg', '.png', '.bmp')
WINDOW_NAME = "Facial landmarks"


class LandmarkSystem:
    """Runs the landmark pipeline over still images and keeps timing."""

    def __init__(
        self,
        config: ConfigManager,
        detector: Optional[FaceLandmarkDetector] = None,
    ) -> None:
        self.config = config
        self.detector = detector or FaceLandmarkDetector.from_config(config)
        self.image_count = 0
        self.total_ms = 0.0

    def process_image(self, image: np.ndarray) -> Tuple[np.ndarray, List[FaceLandmarks], float]:
        """Annotate one image. Returns (annotated, faces, elapsed_ms)."""
        start = time.perf_counter()
        annotated, faces = self.detector.detect_landmarks(image)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        self.image_count += 1
        self.total_ms += elapsed_ms
        return annotated, faces, elapsed_ms

    def average_ms(self) -> float:
        return self.total_ms / self.image_count if self.image_count else 0.0

    def close(self) -> None:
        self.detector.close()


def collect_images(inputs: Sequence[str]) -> List[str]:
    """Expand files and directories into a sorted list of image paths."""
    paths: List[str] = []
    for item in inputs:
        if os.path.isdir(item):
            for name in sorted(os.listdir(item)):
                if name.lower().endswith(SUPPORTED_FORMATS):
                    paths.append(os.path.join(item, name))
        elif os.path.isfile(item):
            paths.append(item)
        else:
            print(f"Warning: input not found: {item}", file=sys.stderr)
    return paths


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Facial landmark points - eyebrows, eyes, nostrils and mouth",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("inputs", nargs="+", help="Image files or directories of images")
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument("--models-dir", type=str, help="Directory holding the cascade XML files")
    parser.add_argument("--min-size", type=int, help="Minimum face size in pixels")
    parser.add_argument("--debug", action="store_true", help="Draw candidate points and search rectangles")
    parser.add_argument("--show", action="store_true", help="Display each result and wait for a key ('q' quits)")
    parser.add_argument("--output", type=str, help="Directory to write annotated images to")
    parser.add_argument("--json", type=str, help="Write landmark coordinates to this JSON file")
    parser.add_argument("--log-level", type=str, default="WARNING", help="DEBUG/INFO/WARNING/ERROR")
    parser.add_argument("--print-config", action="store_true", help="Print the effective configuration first")
    return parser


def load_configuration(args: argparse.Namespace) -> Optional[ConfigManager]:
    if args.config and not os.path.isfile(args.config):
        print(f"Error: configuration file not found: {args.config}", file=sys.stderr)
        return None

    config = ConfigManager(args.config)
    if args.models_dir:
        config.set("models_directory", args.models_dir)
    if args.min_size is not None:
        config.set("min_face_size", args.min_size)
    if args.debug:
        config.set("enable_debug", True)

    if not config.validate_config():
        return None
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_configuration(args)
    if config is None:
        return 2

    if args.print_config:
        config.print_config()

    try:
        system = LandmarkSystem(config)
    except (ConfigurationError, ModelLoadError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    images = collect_images(args.inputs)
    if not images:
        print("No images to process")
        system.close()
        return 0

    if args.output:
        os.makedirs(args.output, exist_ok=True)

    report: Dict[str, list] = {}
    try:
        for path in images:
            image = cv2.imread(path, cv2.IMREAD_COLOR)
            if image is None:
                print(f"Skipping unreadable image: {path}", file=sys.stderr)
                continue

            annotated, faces, elapsed_ms = system.process_image(image)
            points = sum(face.count() for face in faces)
            print(f"{path}: {len(faces)} faces, {points} points, {elapsed_ms:.3f} [ms]")
            report[path] = [face.to_dict() for face in faces]

            if args.output:
                out_path = os.path.join(args.output, Path(path).stem + "_landmarks.png")
                if not cv2.imwrite(out_path, annotated):
                    print(f"Warning: could not write {out_path}", file=sys.stderr)

            if args.show:
                cv2.imshow(WINDOW_NAME, annotated)
                key = cv2.waitKey(0) & 0xFF
                if key == ord("q"):
                    break

    except KeyboardInterrupt:
        print("Interrupted by user")

    finally:
        system.close()
        if args.show:
            cv2.destroyAllWindows()

    if args.json:
        with open(args.json, "w", encoding="utf-8") as fh:
            json.dump(report, fh, indent=2)
        print(f"Landmarks written to {args.json}")

    if system.image_count:
        print(f"Processed {system.image_count} images, average {system.average_ms():.3f} [ms]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
