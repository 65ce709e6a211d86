"""Unit tests for the command line entry point."""

from __future__ import annotations

import csv
from unittest.mock import AsyncMock, MagicMock

import pytest

from cloudgraph.paging import cli
from cloudgraph.paging.core import CloudEnvironment, ContinuationStrategy, ProviderError


class _OwnedTransport:
    """Stands in for GraphTransport's async context manager."""

    def __init__(self, transport):
        self.transport = transport

    async def __aenter__(self):
        return self.transport

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


@pytest.fixture
def use_transport(monkeypatch):
    """Route the CLI's GraphTransport to the given transport; collect the sessions it got."""
    sessions = []

    def install(transport):
        def factory(session):
            sessions.append(session)
            return _OwnedTransport(transport)

        monkeypatch.setattr(cli, "GraphTransport", factory)
        return sessions

    return install


class TestParseArgs:
    """Test argument parsing."""

    def test_defaults(self, monkeypatch):
        """Test defaults mirror FetchOptions defaults."""
        monkeypatch.delenv(cli.TOKEN_ENV, raising=False)
        monkeypatch.delenv(cli.ENVIRONMENT_ENV, raising=False)

        args = cli.parse_args(["users"])

        assert args.endpoint == "users"
        assert args.page_size == 999
        assert args.concurrent is False
        assert args.max_jobs == 8
        assert args.memory_threshold == 100
        assert args.strategy == "token"
        assert args.environment == "Global"
        assert args.token is None

    def test_environment_variables(self, monkeypatch):
        """Test token and environment fall back to environment variables."""
        monkeypatch.setenv(cli.TOKEN_ENV, "env-token")
        monkeypatch.setenv(cli.ENVIRONMENT_ENV, "USGov")

        args = cli.parse_args(["groups"])

        assert args.token == "env-token"
        assert args.environment == "USGov"

    def test_invalid_strategy(self):
        """Test unknown strategies are rejected by argparse."""
        with pytest.raises(SystemExit):
            cli.parse_args(["users", "--strategy", "cursor"])


class TestBuildOptions:
    """Test CLI to FetchOptions conversion."""

    def test_filter_is_url_encoded(self):
        """Test the raw filter expression is encoded once."""
        args = cli.parse_args(["users", "--filter", "startswith(displayName,'A')", "--token", "t"])

        options = cli.build_options(args)

        assert options.filter == "startswith%28displayName%2C%27A%27%29"

    def test_all_options(self):
        """Test every flag lands in FetchOptions."""
        args = cli.parse_args(
            [
                "devices",
                "--page-size",
                "100",
                "--concurrent",
                "--max-jobs",
                "12",
                "--memory-threshold",
                "0",
                "--strategy",
                "url",
                "--api-version",
                "beta",
            ]
        )

        options = cli.build_options(args)

        assert options.page_size == 100
        assert options.concurrent is True
        assert options.max_concurrent_jobs == 12
        assert options.memory_threshold_mb == 0
        assert options.strategy == ContinuationStrategy.URL
        assert options.api_version == "beta"
        assert options.filter is None


class TestMain:
    """Test main() exit codes and output."""

    def test_complete_fetch_with_csv(self, widgets_directory, use_transport, tmp_path, capsys):
        """Test a complete fetch prints a summary, writes CSV and exits 0."""
        sessions = use_transport(widgets_directory)
        out = tmp_path / "widgets.csv"

        code = cli.main(["widgets", "--page-size", "2", "--token", "t", "--environment", "china", "--output", str(out)])

        assert code == 0
        assert sessions[0].environment == CloudEnvironment.CHINA
        assert sessions[0].access_token == "t"
        printed = capsys.readouterr().out
        assert "Records:         5" in printed
        assert "Complete:        yes" in printed
        with open(out, encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
        assert [r["id"] for r in rows] == [f"widgets-{i}" for i in range(5)]

    def test_incomplete_fetch_exits_2(self, directory_factory, use_transport, capsys):
        """Test abandoned branches are reported and change the exit code."""
        use_transport(directory_factory({"widgets": 5}, fail_offsets={2: 503}))

        code = cli.main(["widgets", "--page-size", "2", "--token", "t", "-q"])

        assert code == 2
        printed = capsys.readouterr().out
        assert "Complete:        NO" in printed
        assert "abandoned branch: request 1 status=503" in printed

    def test_invalid_options_exit_1(self, widgets_directory, use_transport, capsys):
        """Test option validation errors exit 1 without a request."""
        use_transport(widgets_directory)

        code = cli.main(["widgets", "--page-size", "0", "--token", "t"])

        assert code == 1
        assert "Invalid options" in capsys.readouterr().err
        assert widgets_directory.get_calls == []

    def test_first_page_error_exit_1(self, use_transport, capsys):
        """Test a failed first page exits 1 with the error."""
        transport = MagicMock()
        transport.get_page = AsyncMock(side_effect=ProviderError("Unauthorized", status_code=401))
        use_transport(transport)

        code = cli.main(["users", "--token", "expired"])

        assert code == 1
        assert "Error:" in capsys.readouterr().err
