"""Tests for the set-audio-format command line."""

from dataclasses import replace

import pytest

from set_audio_format import cli
from set_audio_format.exceptions import ArgumentValidationError, BackendUnavailableError


class ExplodingBackend:
    """Fails the test if the CLI touches the OS before validating input."""

    def __getattr__(self, name):
        raise AssertionError(f"backend.{name} called")


class TestParseOverrides:
    def test_all_fields(self):
        overrides = cli.parse_overrides("48000", "24", "8")
        assert overrides.sample_rate == 48000.0
        assert overrides.bits_per_channel == 24
        assert overrides.channels_per_frame == 8

    def test_absent_fields_stay_none(self):
        overrides = cli.parse_overrides(None, "16", None)
        assert overrides.sample_rate is None
        assert overrides.channels_per_frame is None

    def test_fractional_and_exponent_rates(self):
        assert cli.parse_overrides("44100.5", None, None).sample_rate == 44100.5
        assert cli.parse_overrides("4.8e4", None, None).sample_rate == 48000.0

    @pytest.mark.parametrize(
        "raw",
        ["0", "-48000", "48k", "abc", "", "nan", "1e", "48000\n", "٤٨٠٠٠"],
    )
    def test_invalid_rate(self, raw):
        with pytest.raises(ArgumentValidationError) as excinfo:
            cli.parse_overrides(raw, None, None)
        assert str(excinfo.value) == cli.RATE_ERROR

    @pytest.mark.parametrize(
        "raw", ["8", "32", "16.0", "24bit", "1_6", "", "16\n", "١٦"]
    )
    def test_invalid_bits(self, raw):
        with pytest.raises(ArgumentValidationError) as excinfo:
            cli.parse_overrides(None, raw, None)
        assert str(excinfo.value) == cli.BITS_ERROR

    @pytest.mark.parametrize("raw", ["0", "9", "-2", "2ch", "two", "2\n", "٢"])
    def test_invalid_channels(self, raw):
        with pytest.raises(ArgumentValidationError) as excinfo:
            cli.parse_overrides(None, None, raw)
        assert str(excinfo.value) == cli.CHANNELS_ERROR

    def test_leading_whitespace_and_sign_accepted(self):
        overrides = cli.parse_overrides(" +48000", " 20", "+2")
        assert overrides.sample_rate == 48000.0
        assert overrides.bits_per_channel == 20
        assert overrides.channels_per_frame == 2


class TestMain:
    def test_help_prints_usage_without_backend(self, capsys):
        assert cli.main(["--help"], backend=ExplodingBackend()) == 0
        out = capsys.readouterr().out
        assert "Usage:" in out
        assert "--rate=RATE" in out

    def test_help_wins_over_invalid_values(self, capsys):
        assert cli.main(["-b", "17", "-h"], backend=ExplodingBackend()) == 0
        captured = capsys.readouterr()
        assert "Usage:" in captured.out
        assert captured.err == ""

    def test_no_options_is_an_error(self, capsys):
        assert cli.main([], backend=ExplodingBackend()) == 1
        err = capsys.readouterr().err
        assert "No valid options provided." in err
        assert "Usage:" in err

    def test_unknown_option_prints_usage(self, capsys):
        assert cli.main(["--volume=3"], backend=ExplodingBackend()) == 1
        assert "Usage:" in capsys.readouterr().err

    def test_missing_value_is_usage_error(self, capsys):
        assert cli.main(["-r"], backend=ExplodingBackend()) == 1
        assert "Usage:" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "argv, message",
        [
            (["--bits=18"], cli.BITS_ERROR),
            (["-c", "12"], cli.CHANNELS_ERROR),
            (["--rate=-1"], cli.RATE_ERROR),
            (["-r", "fast", "-b", "16"], cli.RATE_ERROR),
            (["-b", "16\n"], cli.BITS_ERROR),
            (["--rate=48000\n"], cli.RATE_ERROR),
            (["-c", "٢"], cli.CHANNELS_ERROR),
        ],
    )
    def test_validation_error_exits_before_backend(self, capsys, argv, message):
        assert cli.main(argv, backend=ExplodingBackend()) == 1
        assert capsys.readouterr().err.strip() == message

    def test_successful_apply_prints_nothing(self, capsys, backend):
        rc = cli.main(["-r", "48000", "-b", "16", "-c", "2"], backend=backend)

        assert rc == 0
        assert capsys.readouterr().out == ""
        assert backend.written[0].bytes_per_frame == 6
        assert backend.calls[0] == "default_output_device"

    def test_rate_mismatch_warns_on_stdout(self, capsys, make_backend, stereo_format):
        backend = make_backend(
            stereo_format, clamp=lambda fmt: replace(fmt, sample_rate=44100.0)
        )

        rc = cli.main(["--rate=96000"], backend=backend)

        captured = capsys.readouterr()
        assert rc == 0
        assert "Warning: New sample rate was not applied." in captured.out
        assert "Desired: 96000, Actual: 44100" in captured.out
        assert captured.err == ""

    def test_device_failure_prints_status(self, capsys, backend):
        backend.fail["default_output_device"] = -10851

        assert cli.main(["-c", "2"], backend=backend) == 1
        assert capsys.readouterr().err.strip() == (
            "Error getting default output device: -10851"
        )
        assert backend.written == []

    def test_write_failure_exits_non_zero(self, capsys, backend):
        backend.fail["write"] = 1852797029

        assert cli.main(["-b", "24"], backend=backend) == 1
        assert "Error setting stream format: 1852797029" in capsys.readouterr().err

    def test_dry_run_reports_target_format(self, capsys, backend):
        rc = cli.main(["--dry-run", "--bits=16", "--channels=2"], backend=backend)

        assert rc == 0
        out = capsys.readouterr().out
        assert "would apply" in out
        assert "bytes/frame=6" in out
        assert backend.written == []

    def test_dry_run_from_environment(self, monkeypatch, capsys, backend):
        monkeypatch.setenv("SET_AUDIO_FORMAT_DRY_RUN", "yes")

        assert cli.main(["-c", "1"], backend=backend) == 0
        assert backend.written == []

    def test_last_repeated_flag_wins(self, backend):
        assert cli.main(["-c", "1", "-c", "2"], backend=backend) == 0
        assert backend.written[0].channels_per_frame == 2

    def test_long_option_prefix_accepted(self, backend):
        assert cli.main(["--chan=4"], backend=backend) == 0
        assert backend.written[0].channels_per_frame == 4

    def test_unavailable_backend(self, capsys, monkeypatch):
        def _unavailable():
            raise BackendUnavailableError("CoreAudio framework not available")

        monkeypatch.setattr(cli, "default_backend", _unavailable)

        assert cli.main(["-c", "2"]) == 1
        assert "CoreAudio framework not available" in capsys.readouterr().err
