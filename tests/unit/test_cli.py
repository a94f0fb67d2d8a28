"""Unit tests for the CLI module."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from receiptpoints.cli import (
    APIError,
    ReceiptFileError,
    ReceiptPointsCLI,
    create_parser,
    load_receipt,
)
from receiptpoints.models import Receipt


@pytest.fixture
def receipt_file(tmp_path: Path, target_receipt_data: dict[str, Any]) -> Path:
    """Write the Target receipt to a JSON file."""
    path = tmp_path / "target.json"
    path.write_text(json.dumps(target_receipt_data), encoding="utf-8")
    return path


class TestCLIArgumentParsing:
    """Test CLI argument parsing."""

    def test_create_parser(self) -> None:
        """Test parser creation."""
        parser = create_parser()
        assert isinstance(parser, argparse.ArgumentParser)

    def test_score_command(self) -> None:
        """Test score command parsing."""
        args = create_parser().parse_args(["score", "receipt.json"])
        assert args.command == "score"
        assert args.receipt == "receipt.json"
        assert args.output == "text"

    def test_submit_command(self) -> None:
        """Test submit command parsing with all options."""
        args = create_parser().parse_args(
            ["submit", "receipt.json", "--url", "http://api:8080", "--output", "json"]
        )
        assert args.command == "submit"
        assert args.url == "http://api:8080"
        assert args.output == "json"

    def test_serve_command(self) -> None:
        """Test serve command parsing."""
        args = create_parser().parse_args(["serve", "--port", "9000", "--reload"])
        assert args.command == "serve"
        assert args.port == 9000
        assert args.host is None
        assert args.reload is True

    def test_missing_command(self) -> None:
        """Test parser with missing command."""
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    def test_invalid_output_format(self) -> None:
        """Test parser with invalid output format."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["score", "receipt.json", "--output", "xml"])


class TestLoadReceipt:
    """Test reading receipt files."""

    def test_load_valid_file(self, receipt_file: Path) -> None:
        """A valid file decodes into a receipt."""
        receipt = load_receipt(receipt_file)
        assert receipt.retailer == "Target"
        assert len(receipt.items) == 5

    def test_missing_file(self, tmp_path: Path) -> None:
        """Missing files are reported."""
        with pytest.raises(ReceiptFileError, match="File not found"):
            load_receipt(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Files that are not JSON are reported."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ReceiptFileError, match="Could not read"):
            load_receipt(path)

    def test_missing_fields(self, tmp_path: Path) -> None:
        """JSON without the receipt structure is reported."""
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"retailer": "Target"}), encoding="utf-8")
        with pytest.raises(ReceiptFileError, match="Invalid receipt"):
            load_receipt(path)


class TestScoreCommand:
    """Test the offline score command."""

    def test_score_text_output(
        self, receipt_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Text output lists each rule and the total."""
        args = create_parser().parse_args(["score", str(receipt_file)])

        with pytest.raises(SystemExit) as exc_info:
            ReceiptPointsCLI().score_command(args)

        assert exc_info.value.code == 0
        output = capsys.readouterr().out
        assert "Retailer: Target" in output
        assert "retailer_name" in output
        assert "Total points: 28" in output

    def test_score_json_output(
        self, receipt_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """JSON output carries the breakdown."""
        args = create_parser().parse_args(
            ["score", str(receipt_file), "--output", "json"]
        )

        with pytest.raises(SystemExit):
            ReceiptPointsCLI().score_command(args)

        result = json.loads(capsys.readouterr().out)
        assert result["points"] == 28
        assert len(result["rules"]) == 7
        assert result["errors"] == []

    def test_score_missing_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Unreadable files exit with status 2."""
        args = create_parser().parse_args(["score", str(tmp_path / "nope.json")])

        with pytest.raises(SystemExit) as exc_info:
            ReceiptPointsCLI().score_command(args)

        assert exc_info.value.code == 2
        assert "File not found" in capsys.readouterr().err


class TestSubmitCommand:
    """Test submitting receipts to a running server."""

    @pytest.mark.asyncio
    async def test_submit_receipt(self, target_receipt: Receipt) -> None:
        """The receipt is posted and its points fetched."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.method == "POST":
                return httpx.Response(200, json={"id": "abc-123"})
            return httpx.Response(200, json=28)

        real_client = httpx.AsyncClient

        def client_factory(**kwargs: Any) -> httpx.AsyncClient:
            return real_client(transport=httpx.MockTransport(handler), **kwargs)

        with patch("receiptpoints.cli.httpx.AsyncClient", side_effect=client_factory):
            result = await ReceiptPointsCLI().submit_receipt(
                target_receipt, "http://testserver"
            )

        assert result == {"id": "abc-123", "points": 28}
        posted = json.loads(requests[0].content)
        assert posted["purchaseDate"] == "2022-01-01"
        assert posted["items"][0]["shortDescription"] == "Mountain Dew 12PK"
        assert requests[1].url.path == "/receipts/abc-123/points"

    @pytest.mark.asyncio
    async def test_submit_rejected(self, target_receipt: Receipt) -> None:
        """Server errors surface as APIError."""

        def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
            return httpx.Response(400, json={"detail": "Invalid receipt"})

        real_client = httpx.AsyncClient

        def client_factory(**kwargs: Any) -> httpx.AsyncClient:
            return real_client(transport=httpx.MockTransport(handler), **kwargs)

        with (
            patch("receiptpoints.cli.httpx.AsyncClient", side_effect=client_factory),
            pytest.raises(APIError, match="400"),
        ):
            await ReceiptPointsCLI().submit_receipt(target_receipt, "http://testserver")

    @pytest.mark.asyncio
    async def test_submit_command_api_error(
        self, receipt_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """API failures exit with status 3."""
        args = create_parser().parse_args(["submit", str(receipt_file)])
        cli = ReceiptPointsCLI()

        with (
            patch.object(
                cli,
                "submit_receipt",
                AsyncMock(side_effect=APIError("Could not reach server")),
            ),
            pytest.raises(SystemExit) as exc_info,
        ):
            await cli.submit_command(args)

        assert exc_info.value.code == 3
        assert "Could not reach server" in capsys.readouterr().err
