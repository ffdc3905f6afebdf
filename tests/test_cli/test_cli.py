"""Tests for CLI commands."""

import pytest
from click.testing import CliRunner

from pixcache.cli import cli


class FakeFetcher:
    def __init__(self, body: bytes) -> None:
        self.body = body
        self.calls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        return self.body

    async def close(self) -> None:
        pass


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_fetcher(monkeypatch, png_bytes):
    fake = FakeFetcher(png_bytes)
    monkeypatch.setattr("pixcache.cache.manager.ImageFetcher", lambda **kwargs: fake)
    return fake


class TestCLIGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "pixcache" in result.output
        assert "get" in result.output
        assert "resource" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0


class TestGetCommand:
    def test_help(self, runner):
        result = runner.invoke(cli, ["get", "--help"])
        assert result.exit_code == 0
        assert "--output" in result.output
        assert "--cache-dir" in result.output

    def test_missing_url(self, runner):
        result = runner.invoke(cli, ["get"])
        assert result.exit_code != 0

    def test_loads_from_network_then_disk(self, runner, fake_fetcher, tmp_path):
        args = ["get", "https://example.com/a.png", "--cache-dir", str(tmp_path / "c")]
        first = runner.invoke(cli, args)
        assert first.exit_code == 0, first.output
        assert "64x48" in first.output
        assert "from network" in first.output

        second = runner.invoke(cli, args)
        assert second.exit_code == 0, second.output
        assert "from disk" in second.output
        assert len(fake_fetcher.calls) == 1

    def test_writes_output(self, runner, fake_fetcher, tmp_path):
        out = tmp_path / "out.png"
        result = runner.invoke(
            cli,
            [
                "get",
                "https://example.com/a.png",
                "--cache-dir",
                str(tmp_path / "c"),
                "-o",
                str(out),
            ],
        )
        assert result.exit_code == 0, result.output
        assert out.is_file()

    def test_failure_exits_nonzero(self, runner, monkeypatch, tmp_path):
        monkeypatch.setattr(
            "pixcache.cache.manager.ImageFetcher", lambda **kwargs: FakeFetcher(b"not an image")
        )
        result = runner.invoke(
            cli, ["get", "https://example.com/a.png", "--cache-dir", str(tmp_path / "c")]
        )
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "decode" in result.output


class TestResourceCommand:
    def test_loads_resource(self, runner, resource_dir, tmp_path):
        result = runner.invoke(
            cli,
            ["resource", "1", "--resource-dir", str(resource_dir), "--cache-dir", str(tmp_path)],
        )
        assert result.exit_code == 0, result.output
        assert "drawable_1" in result.output
        assert "32x32" in result.output
        assert "from resource" in result.output

    def test_unknown_resource(self, runner, resource_dir, tmp_path):
        result = runner.invoke(
            cli,
            ["resource", "99", "--resource-dir", str(resource_dir), "--cache-dir", str(tmp_path)],
        )
        assert result.exit_code == 1
        assert "not_found" in result.output

    def test_non_integer_id(self, runner):
        result = runner.invoke(cli, ["resource", "abc"])
        assert result.exit_code != 0


class TestCacheCommands:
    def test_cache_help(self, runner):
        result = runner.invoke(cli, ["cache", "--help"])
        assert result.exit_code == 0
        assert "stats" in result.output
        assert "clear" in result.output

    def test_stats_shows_table(self, runner, tmp_path):
        cache_dir = tmp_path / "c"
        cache_dir.mkdir()
        (cache_dir / "abc").write_bytes(b"x" * 10)
        result = runner.invoke(cli, ["cache", "stats", "--cache-dir", str(cache_dir)])
        assert result.exit_code == 0
        assert "Cache Statistics" in result.output
        assert "Entries" in result.output
        assert "1" in result.output

    def test_clear_requires_confirmation(self, runner, tmp_path):
        cache_dir = tmp_path / "c"
        cache_dir.mkdir()
        (cache_dir / "abc").write_bytes(b"x")
        result = runner.invoke(cli, ["cache", "clear", "--cache-dir", str(cache_dir)], input="n\n")
        assert result.exit_code != 0
        assert (cache_dir / "abc").exists()

    def test_clear_with_yes(self, runner, tmp_path):
        cache_dir = tmp_path / "c"
        cache_dir.mkdir()
        (cache_dir / "abc").write_bytes(b"x")
        (cache_dir / "def").write_bytes(b"y")
        result = runner.invoke(cli, ["cache", "clear", "--yes", "--cache-dir", str(cache_dir)])
        assert result.exit_code == 0
        assert "2 entries removed" in result.output
        assert not (cache_dir / "abc").exists()
