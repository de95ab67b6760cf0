from __future__ import annotations

from pathlib import Path

from movie_details import cli
from movie_details.providers.common import ProviderError
from movie_details.providers.fixtures import FixtureLanguageModel


def _fixture_env(monkeypatch, tmp_path: Path) -> Path:
    out_dir = tmp_path / "out"
    monkeypatch.setenv("MOVIE_DETAILS_USE_FIXTURE", "1")
    monkeypatch.setenv("MOVIE_DETAILS_OUTPUT_DIR", str(out_dir))
    return out_dir


def test_resolve_title_joins_words_and_defaults():
    assert cli.resolve_title(["the", "matrix"]) == "the matrix"
    assert cli.resolve_title([]) == "Inception 2010"
    assert cli.resolve_title(["  ", ""]) == "Inception 2010"


def test_main_writes_file_for_found_title(monkeypatch, tmp_path, capsys):
    out_dir = _fixture_env(monkeypatch, tmp_path)
    assert cli.main(["fiction", "pulp"]) == 0
    out = capsys.readouterr().out
    assert 'Processing movie title: "fiction pulp"' in out
    assert "Final Status: Successfully wrote" in out
    assert f"Output File: {out_dir / 'pulp_fiction.txt'}" in out
    assert (out_dir / "pulp_fiction.txt").exists()


def test_main_uses_default_title(monkeypatch, tmp_path, capsys):
    out_dir = _fixture_env(monkeypatch, tmp_path)
    assert cli.main([]) == 0
    assert (out_dir / "inception.txt").exists()
    assert '"Inception 2010"' in capsys.readouterr().out


def test_main_not_found_exits_zero_without_file(monkeypatch, tmp_path, capsys):
    out_dir = _fixture_env(monkeypatch, tmp_path)
    assert cli.main(["asdkjasdkj", "nonsense"]) == 0
    out = capsys.readouterr().out
    assert "Final Status: Processing halted" in out
    assert "Output File" not in out
    assert not out_dir.exists()


def test_main_missing_credentials_exits_one(monkeypatch, capsys):
    assert cli.main(["Inception"]) == 1
    err = capsys.readouterr().err
    assert "Configuration error" in err
    assert "GOOGLE_API_KEY" in err


def test_main_reports_stage_fatal_error(monkeypatch, tmp_path, capsys):
    out_dir = _fixture_env(monkeypatch, tmp_path)

    def failing_complete(self, role, prompt):
        raise ProviderError("quota exceeded", provider="fixture-llm")

    monkeypatch.setattr(FixtureLanguageModel, "complete", failing_complete)
    assert cli.main(["Inception"]) == 1
    err = capsys.readouterr().err
    assert "Critical error during pipeline execution" in err
    assert "Stage: refine_title" in err
    assert "quota exceeded" in err
    assert not out_dir.exists()
