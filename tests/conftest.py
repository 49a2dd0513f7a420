from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from facepoints.config_manager import ConfigManager


class StubDetector:
    """Returns the same boxes for every call and records what it was given."""

    def __init__(self, boxes=(), error=None):
        self.boxes = list(boxes)
        self.error = error
        self.calls = []

    def detect(self, gray, min_size):
        self.calls.append((gray.shape, min_size))
        if self.error is not None:
            raise self.error
        return list(self.boxes)


@pytest.fixture
def config(tmp_path: Path) -> ConfigManager:
    return ConfigManager(str(tmp_path / "config.json"))


@pytest.fixture
def profiles(config: ConfigManager):
    return config.build_profiles()


@pytest.fixture
def textured_image() -> np.ndarray:
    """200x200 BGR image with blocky texture so Harris finds corners everywhere."""
    rng = np.random.default_rng(7)
    blocks = rng.integers(0, 256, size=(25, 25), dtype=np.uint8)
    gray = np.kron(blocks, np.ones((8, 8), dtype=np.uint8))
    return np.dstack([gray, gray, gray]).copy()
