from pathlib import Path

from cli import main
from conftest import FakeRunner, exited


def test_cli_prints_artifact_path(make_pipeline, capsys) -> None:
    pipeline = make_pipeline(FakeRunner())
    code = main(["https://example/video", "30", "40", "Hi: there"], pipeline=pipeline)
    out = capsys.readouterr().out.strip()
    assert code == 0
    assert out.endswith("output_1080x1920.mp4")
    assert Path(out).exists()


def test_cli_validation_error_exit_code(make_pipeline, capsys) -> None:
    runner = FakeRunner()
    code = main(["https://example/video", "40", "30", "Backwards"], pipeline=make_pipeline(runner))
    assert code == 2
    assert "Invalid time range" in capsys.readouterr().err
    assert runner.calls == []


def test_cli_tool_failure_reports_kept_workspace(make_pipeline, capsys) -> None:
    runner = FakeRunner({"fetch": [exited(1, stderr="ERROR: Video unavailable")]})
    code = main(["https://example/video", "0", "5", "Gone"], pipeline=make_pipeline(runner))
    err = capsys.readouterr().err
    assert code == 1
    assert "yt-dlp failed (code 1): ERROR: Video unavailable" in err
    assert "workspace kept at" in err
