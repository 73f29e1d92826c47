import json

import pytest
from typer.testing import CliRunner

from loudness_probe import cli
from loudness_probe.core.probe import LoudnessProbe
from tests.fakes import FULL_XML, SOX_STAT_OUTPUT, FakeRunner, tool_result

runner = CliRunner()


@pytest.fixture
def probe_runner(monkeypatch):
    fake = FakeRunner({
        "sox": tool_result(stderr=SOX_STAT_OUTPUT),
        "bs1770gain": tool_result(stdout=FULL_XML),
    })
    monkeypatch.setattr(cli, "check_tool", lambda name: True)
    monkeypatch.setattr(cli, "LoudnessProbe", lambda options: LoudnessProbe(options, runner=fake))
    return fake


def test_analyze_json_output(audio_path, probe_runner):
    result = runner.invoke(cli.app, ["analyze", str(audio_path), "--json", "--maxima"])

    assert result.exit_code == 0, result.output
    (entry,) = json.loads(result.stdout)
    assert entry["file"] == str(audio_path)
    assert entry["integrated_loudness"] == -16.32
    assert entry["momentary_maximum"] == -10.02
    assert entry["duration"] == 181.23
    assert entry["duration_unit"] == "seconds"


def test_analyze_microseconds_without_maxima(audio_path, probe_runner):
    result = runner.invoke(cli.app, ["analyze", str(audio_path), "--json", "--unit", "microseconds"])

    assert result.exit_code == 0, result.output
    (entry,) = json.loads(result.stdout)
    assert entry["duration"] == 181_230_000
    assert entry["momentary_maximum"] is None


def test_analyze_table_output(audio_path, probe_runner):
    result = runner.invoke(cli.app, ["analyze", str(audio_path)])

    assert result.exit_code == 0, result.output
    assert "song.wav" in result.output
    assert "-16.32 LUFS" in result.output
    assert "181.23 s" in result.output


def test_analyze_highpass_uses_filtered_copy(audio_path, probe_runner):
    def sox(args):
        with open(args[2], "wb") as f:
            f.write(b"filtered")
        return tool_result(stderr=SOX_STAT_OUTPUT)

    probe_runner.responses["sox"] = sox

    result = runner.invoke(cli.app, ["analyze", str(audio_path), "--json", "--highpass"])

    assert result.exit_code == 0, result.output
    assert probe_runner.calls_to("sox")[0][3:5] == ["highpass", "150"]
    assert probe_runner.calls_to("bs1770gain")[0][-1] != str(audio_path)


def test_analyze_collects_supported_files_from_directories(tmp_path, probe_runner):
    (tmp_path / "a.wav").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("not audio")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "b.flac").write_bytes(b"")

    flat = runner.invoke(cli.app, ["analyze", str(tmp_path), "--json"])
    deep = runner.invoke(cli.app, ["analyze", str(tmp_path), "--json", "-r"])

    assert [e["file"] for e in json.loads(flat.stdout)] == [str(tmp_path / "a.wav")]
    assert [e["file"] for e in json.loads(deep.stdout)] == [
        str(tmp_path / "a.wav"),
        str(nested / "b.flac"),
    ]


def test_analyze_reports_failures_and_exits_nonzero(audio_path, probe_runner):
    probe_runner.responses["bs1770gain"] = tool_result(stderr="cannot decode", returncode=1)

    result = runner.invoke(cli.app, ["analyze", str(audio_path)])

    assert result.exit_code == 1
    assert "decode" in result.output


def test_analyze_rejects_highpass_without_duration(audio_path, probe_runner):
    result = runner.invoke(cli.app, ["analyze", str(audio_path), "--highpass", "--no-duration"])

    assert result.exit_code == 1
    assert "highpass requires measure_duration" in result.output


def test_analyze_without_tools(audio_path, monkeypatch):
    monkeypatch.setattr(cli, "check_tool", lambda name: name != "bs1770gain")

    result = runner.invoke(cli.app, ["analyze", str(audio_path)])

    assert result.exit_code == 1
    assert "bs1770gain not found" in result.output


def test_no_duration_does_not_need_sox(audio_path, probe_runner, monkeypatch):
    monkeypatch.setattr(cli, "check_tool", lambda name: name != "sox")

    result = runner.invoke(cli.app, ["analyze", str(audio_path), "--json", "--no-duration"])

    assert result.exit_code == 0, result.output
    assert probe_runner.calls_to("sox") == []


def test_check_command(monkeypatch):
    monkeypatch.setattr(cli, "check_tool", lambda name: True)
    ok = runner.invoke(cli.app, ["check"])

    monkeypatch.setattr(cli, "check_tool", lambda name: name == "sox")
    missing = runner.invoke(cli.app, ["check"])

    assert ok.exit_code == 0
    assert missing.exit_code == 1
    assert "bs1770gain not found" in missing.output


def test_analyze_has_no_deadline_unless_asked(audio_path, probe_runner):
    default = runner.invoke(cli.app, ["analyze", str(audio_path), "--json"])
    assert default.exit_code == 0, default.output
    assert probe_runner.timeouts == [None, None]

    bounded = runner.invoke(cli.app, ["analyze", str(audio_path), "--json", "--timeout", "30"])
    assert bounded.exit_code == 0, bounded.output
    assert probe_runner.timeouts[2:] == [30.0, 30.0]
