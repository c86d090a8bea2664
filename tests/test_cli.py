"""Tests for the command-line interface."""

from __future__ import annotations

import argparse
import io
from pathlib import Path

import pytest
from rich.console import Console

from conftest import create_broken_png, page_sizes
from imgdir2pdf import cli


def _answers(monkeypatch, *values: str) -> list[str]:
    """Feed *values* to ``Console.input`` and record the prompts shown."""
    remaining = list(values)
    prompts: list[str] = []

    def fake_input(self, prompt="", **kwargs):
        prompts.append(str(prompt))
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    monkeypatch.setattr(Console, "input", fake_input)
    return prompts


class TestPromptPositive:
    def test_reprompts_until_positive_number(self, monkeypatch):
        prompts = _answers(monkeypatch, "", "abc", "0", "-3", "nan", "300")
        console = Console(file=io.StringIO())

        value = cli._prompt_positive(console, "DPI: ")

        assert value == 300.0
        assert prompts == ["DPI: "] * 6

    def test_accepts_fractional_values(self, monkeypatch):
        _answers(monkeypatch, "2.5")
        console = Console(file=io.StringIO())

        assert cli._prompt_positive(console, "Divisor: ") == 2.5


class TestArgumentTypes:
    @pytest.mark.parametrize("text", ["0", "-1", "abc", "inf"])
    def test_positive_number_rejects(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            cli._positive_number(text)

    def test_positive_number_accepts(self):
        assert cli._positive_number("150") == 150.0

    @pytest.mark.parametrize("text", ["0", "96", "x"])
    def test_quality_rejects(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            cli._jpeg_quality(text)

    def test_quality_accepts(self):
        assert cli._jpeg_quality("85") == 85


class TestFormatSize:
    def test_bytes(self):
        assert cli._format_size(512) == "512.0 B"

    def test_megabytes(self):
        assert cli._format_size(3 * 1024 * 1024) == "3.0 MB"


class TestMain:
    def test_no_directories_prints_usage(self, capsys):
        cli.main([])

        assert "usage: imgdir2pdf" in capsys.readouterr().out

    def test_converts_with_flags(self, image_dir, tmp_path: Path, capsys):
        d = image_dir("scans", {"1.png": (200, 100), "2.png": (100, 200)})

        cli.main(["--dpi", "144", "--divisor", "2", str(d)])

        out = capsys.readouterr().out
        assert "PDF file created" in out
        assert page_sizes(tmp_path / "scans.pdf") == [
            pytest.approx((100.0, 50.0), abs=0.01),
            pytest.approx((50.0, 100.0), abs=0.01),
        ]

    def test_prompts_for_missing_values(self, image_dir, tmp_path: Path, monkeypatch):
        d = image_dir("scans", {"1.png": (200, 100), "2.png": (100, 200)})
        prompts = _answers(monkeypatch, "x", "300", "-2", "2")

        cli.main([str(d)])

        assert prompts == [
            "Resolution of original images (DPI): ",
            "Resolution of original images (DPI): ",
            "Divide image dimensions by: ",
            "Divide image dimensions by: ",
        ]
        assert page_sizes(tmp_path / "scans.pdf")[0] == pytest.approx((48.0, 24.0), abs=0.01)

    def test_validation_failure_exits_2_without_prompting(
        self, image_dir, tmp_path: Path, monkeypatch, capsys
    ):
        good = image_dir("good", {"1.png": (10, 10), "2.png": (10, 10)})
        bad = image_dir("bad", {"1.png": (10, 10)})
        prompts = _answers(monkeypatch, "300", "2")

        with pytest.raises(SystemExit) as excinfo:
            cli.main([str(good), str(bad)])

        assert excinfo.value.code == cli.EXIT_VALIDATION_FAILED
        assert prompts == []
        assert "less than 2 images" in capsys.readouterr().err
        assert not (tmp_path / "good.pdf").exists()

    def test_directory_failure_exits_1_after_others_finish(
        self, image_dir, tmp_path: Path, capsys
    ):
        corrupt = tmp_path / "corrupt"
        corrupt.mkdir()
        (corrupt / "1.png").write_bytes(b"nope")
        (corrupt / "2.png").write_bytes(b"nope")
        valid = image_dir("valid", {"1.png": (10, 10), "2.png": (10, 10)})

        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--dpi", "72", "--divisor", "1", str(corrupt), str(valid)])

        assert excinfo.value.code == cli.EXIT_DIRECTORY_FAILED
        out = capsys.readouterr().out
        assert "Failed" in out
        assert (tmp_path / "valid.pdf").exists()
        assert not (tmp_path / "corrupt.pdf").exists()

    def test_end_of_input_while_prompting_exits_130(self, image_dir, monkeypatch):
        d = image_dir("scans", {"1.png": (10, 10), "2.png": (10, 10)})
        _answers(monkeypatch)

        with pytest.raises(SystemExit) as excinfo:
            cli.main([str(d)])

        assert excinfo.value.code == cli.EXIT_INTERRUPTED

    def test_invalid_flag_value_is_a_usage_error(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--divisor", "0", "somewhere"])

        assert excinfo.value.code == 2
        assert "greater than 0" in capsys.readouterr().err

    def test_damaged_image_exits_1_without_traceback(
        self, image_dir, tmp_path: Path, capsys
    ):
        create_broken_png(tmp_path / "broken" / "1.png")
        create_broken_png(tmp_path / "broken" / "2.png")
        valid = image_dir("valid", {"1.png": (10, 10), "2.png": (10, 10)})

        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--dpi", "72", "--divisor", "1", str(tmp_path / "broken"), str(valid)])

        assert excinfo.value.code == cli.EXIT_DIRECTORY_FAILED
        assert "Failed" in capsys.readouterr().out
        assert (tmp_path / "valid.pdf").exists()
