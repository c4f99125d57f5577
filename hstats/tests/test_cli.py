"""Tests for the command line demo."""

import pytest

from hstats.cli import build_parser, load_config, main


@pytest.fixture(autouse=True)
def _restore_logger(restore_hstats_logger):
    """Every run reconfigures the package logger."""
    yield


class TestLoadConfig:
    """Arguments become configuration overrides."""

    def test_no_arguments(self):
        config = load_config(build_parser().parse_args([]))
        assert config.histogram.bin_count == 30
        assert config.parallel.enabled is False

    def test_overrides(self):
        args = build_parser().parse_args(["--bins", "12", "--start", "-1", "--bar-char", "#"])
        config = load_config(args)
        assert config.histogram.bin_count == 12
        assert config.histogram.start == -1.0
        assert config.display.bar_char == "#"

    @pytest.mark.parametrize(
        "argv",
        [["--parallel"], ["--workers", "2"], ["--chunk-size", "10"], ["--executor", "process"]],
    )
    def test_parallel_flags_enable_parallel(self, argv):
        config = load_config(build_parser().parse_args(argv))
        assert config.parallel.enabled is True


class TestMain:
    """End-to-end runs of the command."""

    def test_default_run(self, capsys):
        assert main(["--samples", "1000"]) == 0
        out = capsys.readouterr().out
        assert "Start" in out.splitlines()[0]
        assert "Total Count: 1000" in out

    def test_parallel_run(self, capsys):
        assert main(["--samples", "1000", "--workers", "2"]) == 0
        assert "Total Count: 1000" in capsys.readouterr().out

    def test_same_output_parallel_and_single(self, capsys):
        main(["--samples", "2000", "--seed", "3"])
        single = capsys.readouterr().out
        main(["--samples", "2000", "--seed", "3", "--workers", "3"])
        parallel = capsys.readouterr().out
        assert single.splitlines()[:-1] == parallel.splitlines()[:-1]

    def test_display_options(self, capsys):
        assert main(["--samples", "100", "--precision", "0", "--bar-char", "*"]) == 0
        out = capsys.readouterr().out
        assert "*" in out
        assert "░" not in out

    def test_invalid_range(self, capsys):
        assert main(["--samples", "10", "--start", "5", "--end", "1"]) == 2
        assert "invalid configuration" in capsys.readouterr().err

    def test_config_file(self, tmp_path, capsys):
        path = tmp_path / "run.yaml"
        path.write_text(
            "histogram:\n  start: 0.0\n  end: 1.0\n  bin_count: 4\n"
            "sampling:\n  distribution: uniform\n  mean: 0.5\n  std_dev: 0.2\n"
            "  num_samples: 500\n",
            encoding="utf-8",
        )
        assert main(["--config", str(path)]) == 0
        out = capsys.readouterr().out
        assert "Total Count: 500" in out
        # header, rule, 4 bins + under/overflow, blank, summary
        assert len(out.splitlines()) == 10

    def test_missing_config(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "nope.yaml")]) == 2
        assert "not found" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "content", ["- 1\n- 2\n", "histogram: [\n"], ids=["list", "syntax-error"]
    )
    def test_malformed_config(self, tmp_path, capsys, content):
        path = tmp_path / "bad.yaml"
        path.write_text(content, encoding="utf-8")
        assert main(["--config", str(path)]) == 2
        assert "invalid configuration" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "hstats" in capsys.readouterr().out
