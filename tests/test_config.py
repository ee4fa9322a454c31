import json
import logging

import pytest

from lowlight_vision.config import DEFAULT_CONFIG, configure_logging, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('LOWLIGHT_OUTPUT_DIR', 'LOWLIGHT_DETECTION_CONFIDENCE',
                 'LOWLIGHT_DETECTION_DEVICE', 'LOWLIGHT_LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = load_config()
    assert cfg == DEFAULT_CONFIG
    assert cfg['enhancement']['clahe_clip_limit'] == 3.0
    assert cfg['enhancement']['clahe_tile_grid_size'] == 8
    assert cfg['enhancement']['gamma'] == 1.8


def test_returns_independent_copy():
    cfg = load_config()
    cfg['enhancement']['gamma'] = 9.0
    assert DEFAULT_CONFIG['enhancement']['gamma'] == 1.8


def test_json_file_is_merged(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({'enhancement': {'gamma': 2.2}, 'pipeline': {'weights': {'texture': 0.5}}}))

    cfg = load_config(path)

    assert cfg['enhancement']['gamma'] == 2.2
    assert cfg['enhancement']['method'] == 'composite'
    assert cfg['pipeline']['weights']['texture'] == 0.5
    assert cfg['pipeline']['weights']['keypoints'] == 0.3


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.json")


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv('LOWLIGHT_OUTPUT_DIR', str(tmp_path))
    monkeypatch.setenv('LOWLIGHT_DETECTION_CONFIDENCE', '0.4')
    monkeypatch.setenv('LOWLIGHT_DETECTION_DEVICE', 'cpu')

    cfg = load_config()

    assert cfg['pipeline']['output_dir'] == str(tmp_path)
    assert cfg['detection']['confidence_threshold'] == 0.4
    assert cfg['detection']['device'] == 'cpu'


def test_configure_logging_reads_env(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, 'basicConfig', lambda **kwargs: calls.update(kwargs))
    monkeypatch.setenv('LOWLIGHT_LOG_LEVEL', 'warning')

    configure_logging()

    assert calls['level'] == logging.WARNING
