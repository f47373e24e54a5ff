"""Integration tests for movegov CLI commands.

These tests exercise the full CLI workflow against fixture contracts.
"""

import json
from pathlib import Path
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from movegov import __version__
from movegov.cli import app
from movegov.rpc.client import SuiRPCClient

runner = CliRunner()


class TestGlobalOptions:
    """Tests for options shared by every command."""

    def test_version(self) -> None:
        """Test --version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"movegov {__version__}" in result.output

    def test_missing_config_file(self, counter_path: Path, tmp_path: Path) -> None:
        """Test --config must point at an existing file."""
        result = runner.invoke(
            app, ["--config", str(tmp_path / "absent.yaml"), "analyze", str(counter_path)]
        )

        assert result.exit_code != 0

    def test_config_file_is_used(self, counter_path: Path, tmp_path: Path) -> None:
        """Test output names come from the config file."""
        config_path = tmp_path / "movegov.yaml"
        config_path.write_text(
            "output:\n"
            f"  directory: {tmp_path / 'out'}\n"
            "  governance_filename: gov.move\n"
            "  token_filename: token.move\n"
        )

        result = runner.invoke(app, ["--config", str(config_path), "generate", str(counter_path)])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "gov.move").exists()
        assert (tmp_path / "out" / "token.move").exists()


class TestGenerate:
    """Integration tests for `movegov generate`."""

    def test_writes_both_modules(self, counter_path: Path, tmp_path: Path) -> None:
        """Test governance and token modules are written."""
        result = runner.invoke(
            app, ["generate", str(counter_path), "--output", str(tmp_path)]
        )

        assert result.exit_code == 0, result.output
        governance = (tmp_path / "generated_governance.move").read_text()
        token = (tmp_path / "generated_govtoken.move").read_text()
        assert "counter::increment(app_object);" in governance
        assert "module counter_governance::govtoken" in token
        assert "Actions: increment, set_value" in result.output

    def test_dry_run(self, counter_path: Path, tmp_path: Path) -> None:
        """Test --dry-run prints the modules instead of writing them."""
        result = runner.invoke(
            app, ["generate", str(counter_path), "--dry-run", "--output", str(tmp_path)]
        )

        assert result.exit_code == 0, result.output
        assert "module counter_governance::governance" in result.output
        assert not (tmp_path / "generated_governance.move").exists()

    def test_json(self, counter_path: Path) -> None:
        """Test --json emits the parse result."""
        result = runner.invoke(app, ["--quiet", "generate", str(counter_path), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["moduleInfo"] == {"packageName": "counter", "moduleName": "counter"}
        assert [a["name"] for a in data["governableActions"]] == ["increment", "set_value"]
        assert data["mainStruct"] == "Counter"
        assert "governanceContract" in data
        assert "tokenContract" in data

    def test_selected_actions(self, counter_path: Path) -> None:
        """Test --action picks the actions and their order."""
        result = runner.invoke(
            app,
            [
                "--quiet",
                "generate", str(counter_path),
                "--action", "set_value",
                "--action", "get_value",
                "--json",
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [a["name"] for a in data["governableActions"]] == ["set_value", "get_value"]

    def test_unknown_action(self, counter_path: Path) -> None:
        """Test selecting a function that does not exist."""
        result = runner.invoke(
            app, ["generate", str(counter_path), "--action", "launch", "--dry-run"]
        )

        assert result.exit_code == 1

    def test_nothing_governable(self, getters_only_path: Path) -> None:
        """Test a contract without governable functions fails."""
        result = runner.invoke(app, ["generate", str(getters_only_path), "--dry-run"])

        assert result.exit_code == 1

    def test_invalid_policy(self, counter_path: Path) -> None:
        """Test an unknown policy name."""
        result = runner.invoke(
            app, ["generate", str(counter_path), "--policy", "lenient", "--dry-run"]
        )

        assert result.exit_code == 1

    def test_broad_policy(self, tmp_path: Path, admin_cap_source: str) -> None:
        """Test --policy broad picks up capability-guarded functions."""
        source = tmp_path / "store.move"
        source.write_text(admin_cap_source)

        strict = runner.invoke(app, ["generate", str(source), "--dry-run"])
        broad = runner.invoke(
            app, ["generate", str(source), "--policy", "broad", "--dry-run"]
        )

        assert strict.exit_code == 1
        assert broad.exit_code == 0, broad.output
        assert "store::toggle_pause(_cap, app_object);" in broad.output


class TestAnalyzeAndDiscover:
    """Integration tests for `movegov analyze` and `movegov discover`."""

    def test_analyze(self, counter_path: Path) -> None:
        """Test the human-readable analysis."""
        result = runner.invoke(app, ["analyze", str(counter_path)])

        assert result.exit_code == 0, result.output
        assert "Module: counter::counter" in result.output
        assert "[+] public entry fun increment(counter: &mut Counter)" in result.output
        assert "[-] public fun get_value(counter: &Counter)" in result.output
        assert "2 of 3 function(s) governable" in result.output

    def test_analyze_json(self, counter_path: Path) -> None:
        """Test the JSON analysis."""
        result = runner.invoke(app, ["--quiet", "analyze", str(counter_path), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["policy"] == "strict"
        assert [f["governanceCandidate"] for f in data["functions"]] == [True, True, False]
        assert [s["name"] for s in data["stateStructs"]] == ["Counter"]

    def test_analyze_missing_header(self, tmp_path: Path, no_header_source: str) -> None:
        """Test a file without a module header."""
        source = tmp_path / "broken.move"
        source.write_text(no_header_source)

        result = runner.invoke(app, ["analyze", str(source)])

        assert result.exit_code == 1

    def test_analyze_without_facts(
        self, counter_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an analysis result carrying no facts exits cleanly."""
        from movegov.models import ModuleInfo, ParseResult
        from movegov.pipeline import GovernancePipeline

        monkeypatch.setattr(
            GovernancePipeline,
            "analyze",
            lambda self, text, policy=None: ParseResult(module_info=ModuleInfo("p", "m")),
        )

        result = runner.invoke(app, ["analyze", str(counter_path)])

        assert result.exit_code == 1

    def test_discover_json(self, counter_path: Path) -> None:
        """Test discovery lists every public function."""
        result = runner.invoke(app, ["--quiet", "discover", str(counter_path), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [f["name"] for f in data["entryPoints"]] == ["increment", "set_value", "get_value"]

    def test_discover_text(self, counter_path: Path) -> None:
        """Test discovery text output."""
        result = runner.invoke(app, ["discover", str(counter_path)])

        assert result.exit_code == 0, result.output
        assert "set_value(counter: &mut Counter, value: u64, ctx: &mut TxContext)" in result.output


class TestFetch:
    """Integration tests for `movegov fetch` against a mocked endpoint."""

    @pytest.fixture
    def mock_rpc(
        self, monkeypatch: pytest.MonkeyPatch, governed_modules: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Route every RPC client through a mock transport."""
        requests: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            requests.append({"url": str(request.url), **payload})
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": payload["id"], "result": governed_modules}
            )

        class MockedClient(SuiRPCClient):
            def __init__(self, config=None, transport=None) -> None:
                super().__init__(config, transport=httpx.MockTransport(handler))

        monkeypatch.setattr("movegov.rpc.SuiRPCClient", MockedClient)
        return requests

    def test_fetch_generates(self, mock_rpc: list[dict[str, Any]]) -> None:
        """Test generation for a published module."""
        result = runner.invoke(
            app,
            [
                "--quiet",
                "fetch", "0xabc",
                "--module", "campaign",
                "--rpc-url", "http://rpc.test",
                "--json",
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [a["name"] for a in data["governableActions"]] == ["set_goal"]
        assert mock_rpc[0]["url"].startswith("http://rpc.test")
        assert mock_rpc[0]["params"] == ["0xabc"]

    def test_fetch_governance_module(self, mock_rpc: list[dict[str, Any]]) -> None:
        """Test --governance locates an existing governance module."""
        result = runner.invoke(app, ["fetch", "0xabc", "--governance"])

        assert result.exit_code == 0, result.output
        assert "Governance module: governance" in result.output

    def test_fetch_unknown_module(self, mock_rpc: list[dict[str, Any]]) -> None:
        """Test a module the package does not contain."""
        result = runner.invoke(app, ["fetch", "0xabc", "--module", "nope", "--dry-run"])

        assert result.exit_code == 1


class TestInit:
    """Integration tests for `movegov init`."""

    def test_init_creates_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the default config file is written."""
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / ".movegov" / "config.yaml").exists()

    def test_init_refuses_overwrite(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an existing config is kept unless --force is given."""
        monkeypatch.chdir(tmp_path)
        runner.invoke(app, ["init"])

        again = runner.invoke(app, ["init"])
        forced = runner.invoke(app, ["init", "--force"])

        assert again.exit_code == 1
        assert forced.exit_code == 0
