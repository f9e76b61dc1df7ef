"""Tests for the Typer command-line interface."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from tile_mosaic.cli import app

runner = CliRunner()


@pytest.fixture
def input_image(tmp_path: Path) -> Path:
    """A 70x50 RGB PNG; with 16px tiles it crops to 64x48."""
    rng = np.random.default_rng(3)
    p = tmp_path / "input.png"
    Image.fromarray(rng.integers(0, 256, (50, 70, 3), dtype=np.uint8)).save(p)
    return p


class TestRender:
    @pytest.mark.parametrize("algorithm", ["serial", "parallel", "slow_parallel"])
    def test_saves_cropped_mosaic(
        self, algorithm: str, input_image: Path, tmp_path: Path,
    ) -> None:
        out = tmp_path / "out" / f"{algorithm}.png"
        result = runner.invoke(
            app, ["render", str(input_image), "-a", algorithm, "-t", "16", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert out.exists()
        assert Image.open(out).size == (64, 48)

    def test_without_output_discards(self, input_image: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, ["render", str(input_image), "-t", "10"])
        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in tmp_path.iterdir()) == ["input.png"]

    def test_benchmark_reports(self, input_image: Path) -> None:
        result = runner.invoke(
            app, ["render", str(input_image), "-a", "parallel", "-t", "8", "-b", "2"],
        )
        assert result.exit_code == 0, result.output
        assert "OK" in result.output
        assert "MISMATCH" not in result.output

    def test_zero_tile_side(self, input_image: Path) -> None:
        result = runner.invoke(app, ["render", str(input_image), "-t", "0"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_input(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["render", str(tmp_path / "nope.png")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_extension(self, input_image: Path, tmp_path: Path) -> None:
        out = tmp_path / "mosaic"
        result = runner.invoke(
            app, ["render", str(input_image), "-t", "16", "-o", str(out)],
        )
        assert result.exit_code == 1
        assert not out.exists()

    def test_unknown_algorithm(self, input_image: Path) -> None:
        result = runner.invoke(app, ["render", str(input_image), "-a", "gpu"])
        assert result.exit_code != 0


class TestCompare:
    def test_all_algorithms_agree(self, input_image: Path) -> None:
        result = runner.invoke(app, ["compare", str(input_image), "-t", "8", "-r", "1"])
        assert result.exit_code == 0, result.output
        assert "MISMATCH" not in result.output

    def test_isolated_stages(self, input_image: Path) -> None:
        result = runner.invoke(
            app,
            ["compare", str(input_image), "-t", "8", "-r", "1", "--isolated-stages"],
        )
        assert result.exit_code == 0, result.output

    def test_runs_must_be_positive(self, input_image: Path) -> None:
        result = runner.invoke(app, ["compare", str(input_image), "-r", "0"])
        assert result.exit_code == 1
