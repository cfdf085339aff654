"""Tests for the analyze_block command-line entry point."""

from __future__ import annotations

from argparse import ArgumentTypeError
import json

import httpx
import pytest

from typing import TYPE_CHECKING

from rich.console import Console

from fakes import ADDR_A, MINER, raw_block

from blockdiff import analyze_block as cli_module
from blockdiff.analysis.models import BlockAnalysis, BlockRecord, StateChange
from blockdiff.helpers.errors import MissingFieldError


if TYPE_CHECKING:
    from pytest_httpx import HTTPXMock


RPC_URL = "https://test.rpc"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove configuration variables that would leak into the CLI."""
    for key in (
        "ETH_RPC_URL",
        "RPC_TIMEOUT",
        "RPC_MAX_RETRIES",
        "ANALYSIS_CONCURRENCY",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


def sample_analysis() -> BlockAnalysis:
    block = BlockRecord(
        number=12,
        timestamp=0,
        hash="0x" + "11" * 32,
        parent_hash="0x" + "22" * 32,
        proposer=MINER,
        difficulty="0",
        gas_used=0,
        gas_limit=30_000_000,
    )
    return BlockAnalysis(
        block=block,
        changes=(StateChange(address=ADDR_A, balance_delta=-5, nonce_delta=1),),
    )


class TestParseBlockArg:
    """Tests for --block parsing."""

    def test_decimal(self) -> None:
        """Test decimal block numbers."""
        assert cli_module.parse_block_arg("7408000") == 7408000

    def test_hex(self) -> None:
        """Test 0x-prefixed block numbers."""
        assert cli_module.parse_block_arg("0x10") == 16

    def test_latest(self) -> None:
        """Test 'latest' maps to None."""
        assert cli_module.parse_block_arg("LATEST") is None

    def test_negative_rejected(self) -> None:
        """Test negative numbers are rejected."""
        with pytest.raises(ArgumentTypeError, match="negative"):
            cli_module.parse_block_arg("-1")

    def test_garbage_rejected(self) -> None:
        """Test non-numbers are rejected."""
        with pytest.raises(ArgumentTypeError, match="invalid block"):
            cli_module.parse_block_arg("tip")


class TestMain:
    """Tests for the async main function."""

    @pytest.mark.asyncio
    async def test_success_prints_tables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a successful run prints the analysis and exits 0."""
        captured: dict[str, object] = {}

        async def fake_analyze(
            client: object, block: int | None, **kwargs: object
        ) -> BlockAnalysis:
            captured["block"] = block
            captured.update(kwargs)
            return sample_analysis()

        monkeypatch.setattr(cli_module, "analyze_block", fake_analyze)
        args = cli_module.build_parser().parse_args(
            ["--block", "12", "--rpc-url", RPC_URL, "--concurrency", "4"]
        )
        console = Console(record=True, width=300)

        status = await cli_module.main(args, console)

        assert status == 0
        assert captured == {
            "block": 12,
            "concurrency": 4,
            "include_state_changes": True,
        }
        assert "State Changes (1)" in console.export_text()

    @pytest.mark.asyncio
    async def test_json_output(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test --json prints the model as JSON."""

        async def fake_analyze(
            client: object, block: int | None, **kwargs: object
        ) -> BlockAnalysis:
            return sample_analysis()

        monkeypatch.setattr(cli_module, "analyze_block", fake_analyze)
        args = cli_module.build_parser().parse_args(["--rpc-url", RPC_URL, "--json"])
        console = Console(record=True, width=300)

        status = await cli_module.main(args, console)

        assert status == 0
        output = console.export_text()
        assert output.startswith('{\n  "block": {\n    "number": 12,')
        assert '"balance_delta": -5' in output
        assert '"changes"' in output

    @pytest.mark.asyncio
    async def test_json_stdout_is_parseable(
        self,
        httpx_mock: HTTPXMock,
        capfd: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test --json keeps log lines off stdout so it parses as one document."""
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        httpx_mock.add_response(
            url=RPC_URL,
            json={"jsonrpc": "2.0", "id": 1, "result": raw_block(12)},
        )
        args = cli_module.build_parser().parse_args(
            ["--block", "12", "--block-only", "--json", "--rpc-url", RPC_URL]
        )

        status = await cli_module.main(args)

        out, err = capfd.readouterr()
        assert status == 0
        assert json.loads(out)["block"]["number"] == 12
        assert "Block 12: 0 transactions" in err

    @pytest.mark.asyncio
    async def test_analysis_error_exits_nonzero(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a typed analysis failure prints the error and returns 1."""

        async def fake_analyze(
            client: object, block: int | None, **kwargs: object
        ) -> BlockAnalysis:
            raise MissingFieldError("from", "transaction 0xab (index 0)")

        monkeypatch.setattr(cli_module, "analyze_block", fake_analyze)
        args = cli_module.build_parser().parse_args(["--rpc-url", RPC_URL])
        console = Console(record=True, width=300)

        status = await cli_module.main(args, console)

        assert status == 1
        assert "missing required field 'from'" in console.export_text()

    @pytest.mark.asyncio
    async def test_missing_rpc_url_exits_nonzero(self) -> None:
        """Test running without an endpoint is a configuration error."""
        args = cli_module.build_parser().parse_args([])
        console = Console(record=True, width=300)

        status = await cli_module.main(args, console)

        assert status == 1
        assert "ETH_RPC_URL" in console.export_text()

    @pytest.mark.asyncio
    async def test_unknown_block_against_node(self, httpx_mock: HTTPXMock) -> None:
        """Test a null eth_getBlockByNumber result reports block not found."""
        httpx_mock.add_response(
            url=RPC_URL,
            json={"jsonrpc": "2.0", "id": 1, "result": None},
        )
        args = cli_module.build_parser().parse_args(
            ["--block", "999999999", "--rpc-url", RPC_URL]
        )
        console = Console(record=True, width=300)

        status = await cli_module.main(args, console)

        assert status == 1
        assert "Block not found: 999999999" in console.export_text()
        request = httpx_mock.get_request()
        assert request is not None
        assert b"eth_getBlockByNumber" in request.content

    @pytest.mark.asyncio
    async def test_transport_failure_exits_nonzero(self, httpx_mock: HTTPXMock) -> None:
        """Test a connection failure is reported as an error."""
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))
        args = cli_module.build_parser().parse_args(["--rpc-url", RPC_URL])
        console = Console(record=True, width=300)

        status = await cli_module.main(args, console)

        assert status == 1
        assert "connection refused" in console.export_text()


def test_cli_exits_with_status(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test the console script exits with main's return code."""

    async def fake_main(args: object, console: object = None) -> int:
        return 3

    monkeypatch.setattr(cli_module, "main", fake_main)

    with pytest.raises(SystemExit) as exc_info:
        cli_module.cli(["--block", "1"])

    assert exc_info.value.code == 3
