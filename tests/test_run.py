"""Tests for the command-line interface and its exit codes."""

import pytest

from kepler.run import (
    EXIT_CONFIG_ERROR,
    EXIT_EXPORT_ERROR,
    EXIT_OK,
    EXIT_PLOT_ERROR,
    create_parser,
    main,
)


class TestParser:

    def test_flags(self):
        args = create_parser().parse_args(["c.yaml", "-v", "--validate-only"])

        assert args.config == "c.yaml"
        assert args.verbose
        assert args.validate_only
        assert not args.create_example

    def test_config_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])


class TestMain:

    def test_create_example(self, tmp_path, capsys):
        path = tmp_path / "example.yaml"

        assert main([str(path), "--create-example"]) == EXIT_OK
        assert path.is_file()
        assert "Example configuration written" in capsys.readouterr().out

    def test_validate_only(self, tmp_path, capsys):
        path = tmp_path / "example.yaml"
        main([str(path), "--create-example"])

        assert main([str(path), "--validate-only"]) == EXIT_OK
        assert "validated successfully" in capsys.readouterr().out
        assert not (tmp_path / "output").exists()

    def test_missing_config(self, tmp_path, capsys):
        assert main([str(tmp_path / "absent.yaml")]) == EXIT_CONFIG_ERROR
        assert "Failed to load configuration" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, write_yaml, config_document, capsys):
        doc = config_document(tmp_path / "out", timestep=0.0)

        assert main([str(write_yaml(doc))]) == EXIT_CONFIG_ERROR
        assert "INVALID" in capsys.readouterr().err

    def test_successful_run(self, tmp_path, write_yaml, config_document, capsys):
        doc = config_document(tmp_path / "out", plot_system=True)

        assert main([str(write_yaml(doc))]) == EXIT_OK

        out = capsys.readouterr().out
        assert "SIMULATION SUMMARY" in out
        assert "Relative drift" in out
        assert (tmp_path / "out" / "run_Earth.csv").is_file()
        assert (tmp_path / "out" / "run_Energy.svg").is_file()

    def test_prints_config_before_run(self, tmp_path, write_yaml, config_document, capsys):
        doc = config_document(tmp_path / "out")

        assert main([str(write_yaml(doc))]) == EXIT_OK
        out = capsys.readouterr().out
        assert "RunConfig:" in out
        assert "Body 'Earth'" in out

    def test_export_failure(self, tmp_path, write_yaml, config_document, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        doc = config_document(blocker)

        assert main([str(write_yaml(doc))]) == EXIT_EXPORT_ERROR
        assert "Simulation aborted" in capsys.readouterr().err

    def test_plot_failure(self, tmp_path, write_yaml, config_document):
        doc = config_document(tmp_path / "out", steps=0, plot_system=True)

        assert main([str(write_yaml(doc))]) == EXIT_PLOT_ERROR
        assert (tmp_path / "out" / "run_Earth.csv").is_file()

    def test_body_name_colliding_with_export_file(self, tmp_path, write_yaml, config_document):
        doc = config_document(tmp_path / "out", export_system_parameters_history=True)
        doc["system"]["bodies"][1]["name"] = "system_parameters"

        assert main([str(write_yaml(doc))]) == EXIT_CONFIG_ERROR
        assert not (tmp_path / "out").exists()
