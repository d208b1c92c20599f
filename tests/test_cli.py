import signal
from types import SimpleNamespace

import pytest

from barkwatch import cli
from barkwatch.audio import recorder as recorder_mod
from barkwatch.audio.recorder import DeviceError
from barkwatch.config import BarkSettings


@pytest.fixture(autouse=True)
def _no_signal_handlers(monkeypatch):
    monkeypatch.setattr(signal, "signal", lambda *args: None)


def test_resolve_settings_applies_overrides(tmp_path):
    args = cli.build_parser().parse_args(
        [
            "--barks-dir",
            str(tmp_path),
            "--log-level",
            "debug",
            "record",
            "--threshold",
            "0.2",
            "--silence-timeout",
            "2.5",
            "--device",
            "2",
            "--duration",
            "30",
        ]
    )
    settings = cli.resolve_settings(args, BarkSettings())
    assert settings.barks_dir == str(tmp_path)
    assert settings.log_level == "DEBUG"
    assert settings.amplitude_threshold == 0.2
    assert settings.silence_timeout_sec == 2.5
    assert settings.input_device == 2
    assert settings.run_seconds == 30.0


def test_resolve_settings_without_overrides_returns_base():
    base = BarkSettings()
    args = cli.build_parser().parse_args(["scan"])
    assert cli.resolve_settings(args, base) is base


def test_resolve_settings_keeps_named_device():
    args = cli.build_parser().parse_args(["record", "--device", "USB Mic"])
    assert cli.resolve_settings(args, BarkSettings()).input_device == "USB Mic"


def test_scan_prints_history(tmp_path, write_bark, capsys):
    write_bark(tmp_path / "bark_20240101_1_00_00_am.wav", [0.5] * 800)
    assert cli.main(["--barks-dir", str(tmp_path), "scan"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[-1] == "1 bark(s)"
    assert out[0].endswith("bark_20240101_1_00_00_am.wav")
    assert "0.10s" in out[0]


def test_record_reports_missing_device(tmp_path, monkeypatch):
    def unavailable():
        raise DeviceError("sounddevice unavailable: no PortAudio")

    monkeypatch.setattr(recorder_mod, "_load_sounddevice", unavailable)
    settings = BarkSettings(barks_dir=str(tmp_path))
    assert cli.run_record(settings) == cli.EXIT_DEVICE_ERROR


def test_record_reports_unwritable_directory(tmp_path, monkeypatch):
    fake = SimpleNamespace(
        PortAudioError=OSError,
        query_devices=lambda device, kind: {
            "name": "fake mic",
            "max_input_channels": 1,
            "default_samplerate": 8000.0,
        },
    )
    monkeypatch.setattr(recorder_mod, "_load_sounddevice", lambda: fake)
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    settings = BarkSettings(barks_dir=str(blocker / "barks"))
    assert cli.run_record(settings) == cli.EXIT_STORAGE_ERROR
