"""
Tests for the command-line interface.
"""

import json

import pytest

from sector_mapping_server import cli


class TestParser:
    """Tests for argument parsing."""

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 1
        assert "Available commands" in capsys.readouterr().out

    def test_search_defaults(self):
        args = cli.build_parser().parse_args(["search", "software"])
        assert args.query == "software"
        assert args.limit == 20
        assert args.json is False

    def test_http_overrides(self):
        args = cli.build_parser().parse_args(["http", "--host", "127.0.0.1", "--port", "9000"])
        assert (args.host, args.port) == ("127.0.0.1", 9000)


class TestSearchCommand:
    """Tests for `search`."""

    def test_text_output(self, capsys):
        cli.main(["search", "construction"])
        out = capsys.readouterr().out

        assert "ATECO codes matching 'construction'" in out
        assert "[41] Construction of buildings" in out

    def test_json_output(self, capsys):
        cli.main(["search", "62", "--json"])
        results = json.loads(capsys.readouterr().out)
        assert [r["code"] for r in results] == ["62"]

    def test_limit(self, capsys):
        cli.main(["search", "manufacturing", "--limit", "3", "--json"])
        assert len(json.loads(capsys.readouterr().out)) == 3

    def test_no_match(self, capsys):
        cli.main(["search", "zzzz"])
        assert "No ATECO codes match 'zzzz'" in capsys.readouterr().out

    def test_invalid_limit(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["search", "software", "--limit", "0"])

        assert exc_info.value.code == 2
        assert "Error: limit must be at least 1" in capsys.readouterr().err


class TestResolveCommand:
    """Tests for `resolve`."""

    def test_text_output(self, capsys):
        cli.main(["resolve", "Software / SaaS / IT", "--ateco", "62"])
        out = capsys.readouterr().out

        assert "ATECO code: 62" in out
        assert "Suggested ATECO codes: 61, 62, 63" in out
        assert " 70%  Software (System & Application)" in out
        assert "Notes: " in out

    def test_json_output(self, capsys):
        cli.main(["resolve", "Tourism / Hospitality / Food Service", "--json"])
        data = json.loads(capsys.readouterr().out)

        assert data["damodaranIndustries"]["primary"] == "Hotel/Gaming"
        assert "atecoCode" not in data

    def test_dotted_code_echoed(self, capsys):
        cli.main(["resolve", "Software / SaaS / IT", "--ateco", "62.01", "--json"])
        assert json.loads(capsys.readouterr().out)["atecoCode"] == "62.01"

    def test_malformed_code(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["resolve", "Software / SaaS / IT", "--ateco", "6x"])
        assert exc_info.value.code == 2

    def test_unknown_sector(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["resolve", "Aerospace"])

        assert exc_info.value.code == 2
        assert "Error: Invalid onboarding sector" in capsys.readouterr().err


class TestListingCommands:
    """Tests for `industries`, `sectors` and `stats`."""

    def test_industries(self, capsys):
        cli.main(["industries"])
        lines = capsys.readouterr().out.splitlines()
        assert lines == sorted(lines)
        assert len(lines) < 94

    def test_industries_all(self, capsys):
        cli.main(["industries", "--all"])
        assert len(capsys.readouterr().out.splitlines()) == 94

    def test_sectors(self, capsys):
        cli.main(["sectors"])
        lines = capsys.readouterr().out.splitlines()

        assert len(lines) == 16
        assert lines[0].startswith("Software / SaaS / IT")
        assert lines[0].endswith("K  [61, 62, 63]")

    def test_stats(self, capsys):
        cli.main(["stats"])
        out = capsys.readouterr().out

        assert "ATECO 2-digit codes:   52" in out
        assert "Damodaran industries:  94" in out
        assert "Sector mappings:       16" in out


class TestServeCommands:
    """Tests for `serve` and `http` without starting servers."""

    def test_http_applies_overrides(self, monkeypatch):
        started = {}

        def fake_run(self):
            started["host"] = self.config.host
            started["port"] = self.config.port
            started["enabled"] = self.config.enabled

        monkeypatch.setattr("sector_mapping_server.http_server.HTTPServer.run", fake_run)
        cli.main(["http", "--host", "127.0.0.1", "--port", "9001"])

        assert started == {"host": "127.0.0.1", "port": 9001, "enabled": True}

    def test_unexpected_error_exits_1(self, monkeypatch):
        def fake_run(self):
            raise OSError("address in use")

        monkeypatch.setattr("sector_mapping_server.http_server.HTTPServer.run", fake_run)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["http"])
        assert exc_info.value.code == 1
