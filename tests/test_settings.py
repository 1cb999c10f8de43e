import pytest

from fallguard.config import Settings
from fallguard.detectors.fall_detector import FallDecisionEngine
from fallguard.monitor import FallMonitor
from fallguard.utils.constants import DEFAULT_COUNTDOWN_CONFIG, DEFAULT_FALL_DETECTOR_CONFIG


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "HEIGHT_DROP_THRESHOLD",
        "VELOCITY_THRESHOLD",
        "HISTORY_WINDOW_FRAMES",
        "CONFIRMATION_WINDOW_MS",
        "COUNTDOWN_DURATION",
        "TICK_INTERVAL",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings()
    assert settings.HEIGHT_DROP_THRESHOLD == 0.5
    assert settings.HIP_GROUND_LEVEL == 0.6
    assert settings.VELOCITY_THRESHOLD == 0.3
    assert settings.CONFIRMATION_WINDOW_MS == 2000
    assert settings.FALSE_POSITIVE_WINDOW_MS == 5000
    assert settings.STALE_EPISODE_MS == 3000
    assert settings.COUNTDOWN_DURATION == 10
    assert settings.TICK_INTERVAL == 1.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("VELOCITY_THRESHOLD", "0.45")
    monkeypatch.setenv("CONFIRMATION_WINDOW_MS", "1500")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.VELOCITY_THRESHOLD == 0.45
    assert settings.CONFIRMATION_WINDOW_MS == 1500
    assert settings.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize(
    "name, raw, expected",
    [
        ("HEIGHT_DROP_THRESHOLD", "abc", 0.5),
        ("HEIGHT_DROP_THRESHOLD", "1.7", 0.5),
        ("VELOCITY_THRESHOLD", "-1", 0.3),
        ("HISTORY_WINDOW_FRAMES", "1", 30),
        ("COUNTDOWN_DURATION", "0", 10),
        ("TICK_INTERVAL", "0", 1.0),
        ("LOG_LEVEL", "chatty", "INFO"),
    ],
)
def test_invalid_values_fall_back(monkeypatch, name, raw, expected):
    monkeypatch.setenv(name, raw)
    assert getattr(Settings(), name) == expected


def test_detector_config_builds_engine(monkeypatch):
    monkeypatch.setenv("CONFIRMATION_WINDOW_MS", "1000")
    engine = FallDecisionEngine(**Settings().detector_config())
    assert engine.confirmation_window_ms == 1000


def test_monitor_from_settings(monkeypatch, scheduler):
    monkeypatch.setenv("COUNTDOWN_DURATION", "5")
    monkeypatch.setenv("TICK_INTERVAL", "0.5")

    monitor = FallMonitor.from_settings(Settings(), scheduler=scheduler)

    assert monitor.countdown.duration == 5
    assert monitor.countdown.remaining == 5
    assert monitor.countdown.tick_interval == 0.5


def test_defaults_match_documented_config():
    settings = Settings()
    detector = settings.detector_config()
    detector.pop("calibration_warn_after")

    assert detector == DEFAULT_FALL_DETECTOR_CONFIG
    assert settings.countdown_config() == DEFAULT_COUNTDOWN_CONFIG
