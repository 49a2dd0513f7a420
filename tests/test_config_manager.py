import json
import os

import cv2
import pytest

from facepoints.config_manager import ConfigManager, ConfigurationError, FeatureProfile


def test_default_profiles(profiles):
    assert set(profiles) == {"eyes", "nose", "mouth"}

    eyes = profiles["eyes"]
    assert isinstance(eyes, FeatureProfile)
    assert (eyes.min_height_ratio, eyes.max_height_ratio) == (0.2, 0.55)
    assert eyes.expected_count == 2
    assert eyes.min_object_size == 6
    assert eyes.pad_x == 3
    assert eyes.threshold("y_deviation") == 0.12

    assert (profiles["nose"].pad_x, profiles["nose"].pad_top) == (0, 0)
    assert (profiles["mouth"].pad_x, profiles["mouth"].pad_top) == (5, 5)


def test_profiles_are_immutable(profiles):
    with pytest.raises(Exception):
        profiles["eyes"].expected_count = 3
    with pytest.raises(TypeError):
        profiles["eyes"].thresholds["y_deviation"] = 0.5


def test_min_object_size_follows_min_face_size(config):
    config.set("min_face_size", 50)
    assert config.build_profiles()["nose"].min_object_size == 10


def test_file_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"features": {"nose": {"min_neighbors": 3}}, "enable_debug": True}))

    config = ConfigManager(str(path))

    assert config.get("enable_debug") is True
    assert config.get("features.nose.min_neighbors") == 3
    assert config.get("features.nose.min_height_ratio") == 0.4
    assert config.build_profiles()["nose"].min_neighbors == 3


def test_unreadable_file_keeps_defaults(tmp_path, capsys):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    config = ConfigManager(str(path))

    assert config.get("min_face_size") == 30
    assert "Error loading configuration" in capsys.readouterr().out


@pytest.mark.parametrize(
    "key, value, message",
    [
        ("features.eyes.min_height_ratio", 0.9, "features.eyes"),
        ("features.mouth.max_height_ratio", 1.5, "features.mouth"),
        ("features.nose.expected_count", 0, "expected_count"),
        ("features.eyes.pad_x", -1, "pad_x"),
        ("features.mouth.thresholds.midline_deviation", -0.1, "midline_deviation"),
        ("min_face_size", 0, "min_face_size"),
        ("models.nose", "", "models.nose"),
    ],
)
def test_invalid_values_are_rejected(config, capsys, key, value, message):
    config.set(key, value)

    assert config.validate_config() is False
    assert message in capsys.readouterr().out
    with pytest.raises(ConfigurationError, match=message):
        config.build_profiles()


def test_model_paths_resolve_through_models_directory(config, tmp_path):
    models = tmp_path / "models"
    models.mkdir()
    (models / "haarcascade_mcs_nose.xml").write_text("<opencv_storage/>")
    config.set("models_directory", str(models))

    assert config.resolve_model_path("nose") == os.path.join(str(models), "haarcascade_mcs_nose.xml")


def test_model_paths_fall_back_to_bundled_cascades(config):
    resolved = config.resolve_model_path("face")
    assert resolved == os.path.join(cv2.data.haarcascades, "haarcascade_frontalface_alt.xml")


def test_unknown_model_name_is_a_configuration_error(config):
    with pytest.raises(ConfigurationError):
        config.resolve_model_path("ears")
