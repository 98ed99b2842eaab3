import json

import pytest
from dateutil.relativedelta import relativedelta

from bracketkit.exceptions import (
    InvalidConfigurationException,
    MissingConfigurationException,
)
from bracketkit.settings import EngineSettings, load_settings


def test_defaults():
    settings = EngineSettings()

    assert settings.win_points == 3
    assert settings.loss_points == 0
    assert settings.match_slot == relativedelta(minutes=90)
    assert settings.advance_delay == relativedelta(hours=24)


@pytest.mark.parametrize(
    "data",
    [
        {"win_points": -1},
        {"match_duration_minutes": 0},
        {"status_refresh_minutes": 0},
        {"match_gap_minutes": "30"},
        {"advance_delay_hours": True},
        {"draw_points": 1},
    ],
)
def test_invalid_values_are_rejected(data):
    with pytest.raises(InvalidConfigurationException):
        EngineSettings.from_dict(data)


def test_load_settings_from_json(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"win_points": 2, "match_gap_minutes": 0}), encoding="utf-8")

    settings = load_settings(path)

    assert settings.win_points == 2
    assert settings.match_slot == relativedelta(minutes=60)
    assert EngineSettings.from_dict(settings.to_dict()) == settings


def test_load_settings_errors(tmp_path):
    with pytest.raises(MissingConfigurationException):
        load_settings(tmp_path / "absent.json")

    broken = tmp_path / "broken.json"
    broken.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(InvalidConfigurationException):
        load_settings(broken)

    broken.write_text("{", encoding="utf-8")
    with pytest.raises(InvalidConfigurationException):
        load_settings(broken)
