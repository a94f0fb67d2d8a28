"""Receipt points CLI interface."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from receiptpoints import __version__
from receiptpoints.core.config import get_settings
from receiptpoints.models import PointsBreakdown, Receipt
from receiptpoints.services.parsing import validate_receipt
from receiptpoints.services.points import score_receipt

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class CLIError(Exception):
    """Base exception for CLI errors."""


class ReceiptFileError(CLIError):
    """Receipt file could not be read or decoded."""


class APIError(CLIError):
    """API communication error."""


def load_receipt(file_path: Path) -> Receipt:
    """Read and decode a receipt JSON file.

    Raises:
        ReceiptFileError: If the file is missing or not a valid receipt
    """
    if not file_path.exists():
        msg = f"File not found: {file_path}"
        raise ReceiptFileError(msg)
    if not file_path.is_file():
        msg = f"Not a file: {file_path}"
        raise ReceiptFileError(msg)

    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        msg = f"Could not read {file_path}: {e}"
        raise ReceiptFileError(msg) from e

    try:
        return Receipt.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid receipt in {file_path}: {e}"
        raise ReceiptFileError(msg) from e


class ReceiptPointsCLI:
    """Main CLI application class."""

    def __init__(self) -> None:
        """Initialize the CLI application."""
        self.settings = get_settings()

    def format_breakdown(
        self, receipt: Receipt, breakdown: PointsBreakdown, output_format: str
    ) -> str:
        """Format a points breakdown for display."""
        if output_format == "json":
            result: dict[str, Any] = {
                "retailer": receipt.retailer,
                "points": breakdown.total,
                "rules": [rule.model_dump() for rule in breakdown.rules],
                "errors": [error.model_dump() for error in breakdown.errors],
            }
            return json.dumps(result, indent=2)

        lines = [
            "=== Receipt ===",
            f"Retailer: {receipt.retailer}",
            f"Date: {receipt.purchase_date} {receipt.purchase_time}",
            f"Items: {len(receipt.items)}",
            f"Total: ${receipt.total}",
            "",
            "=== Points ===",
        ]
        lines.extend(
            f"  {rule.rule:<20} {rule.points:>4}  {rule.reason}"
            for rule in breakdown.rules
        )
        if breakdown.errors:
            lines.extend(["", "=== Unparsable fields (scored as zero) ==="])
            lines.extend(
                f"  {error.field}: {error.value!r} ({error.reason})"
                for error in breakdown.errors
            )
        lines.extend(["", f"Total points: {breakdown.total}"])
        return "\n".join(lines)

    def score_command(self, args: argparse.Namespace) -> None:
        """Handle the score command."""
        try:
            receipt = load_receipt(Path(args.receipt))
            breakdown = score_receipt(receipt)
            print(self.format_breakdown(receipt, breakdown, args.output))  # noqa: T201
            sys.exit(0)
        except ReceiptFileError as e:
            print(f"\nError: {e}", file=sys.stderr)  # noqa: T201
            sys.exit(2)

    async def submit_receipt(self, receipt: Receipt, base_url: str) -> dict[str, Any]:
        """Submit a receipt to a running server and fetch its points.

        Raises:
            APIError: If the server rejects the receipt or cannot be reached
        """
        payload = receipt.model_dump(by_alias=True, mode="json")
        async with httpx.AsyncClient(
            base_url=base_url, timeout=DEFAULT_TIMEOUT
        ) as client:
            try:
                response = await client.post("/receipts/process", json=payload)
                response.raise_for_status()
                receipt_id = response.json()["id"]

                response = await client.get(f"/receipts/{receipt_id}/points")
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                msg = (
                    f"Server returned {e.response.status_code}: "
                    f"{e.response.text}"
                )
                raise APIError(msg) from e
            except httpx.HTTPError as e:
                msg = f"Could not reach {base_url}: {e}"
                raise APIError(msg) from e

        return {"id": receipt_id, "points": response.json()}

    async def submit_command(self, args: argparse.Namespace) -> None:
        """Handle the submit command."""
        base_url = args.url or f"http://localhost:{self.settings.port}"
        try:
            receipt = load_receipt(Path(args.receipt))
            errors = validate_receipt(receipt)
            if errors:
                logger.warning("Receipt has %d unparsable fields", len(errors))

            result = await self.submit_receipt(receipt, base_url)

            if args.output == "json":
                print(json.dumps(result, indent=2))  # noqa: T201
            else:
                print(f"Receipt id: {result['id']}")  # noqa: T201
                print(f"Points: {result['points']}")  # noqa: T201
            sys.exit(0)

        except ReceiptFileError as e:
            print(f"\nError: {e}", file=sys.stderr)  # noqa: T201
            sys.exit(2)
        except APIError as e:
            print(f"\nError: {e}", file=sys.stderr)  # noqa: T201
            sys.exit(3)

    def serve_command(self, args: argparse.Namespace) -> None:
        """Handle the serve command."""
        import uvicorn

        uvicorn.run(
            "receiptpoints.main:app",
            host=args.host or self.settings.host,
            port=args.port or self.settings.port,
            reload=args.reload,
            log_level=self.settings.log_level.lower(),
        )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Receipt points - store receipts and award loyalty points",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  receiptpoints serve --port 8080
  receiptpoints score receipt.json
  receiptpoints submit receipt.json --url http://localhost:8080 --output json
        """,
    )

    # Add version argument
    parser.add_argument(
        "--version",
        action="version",
        version=f"receiptpoints {__version__}",
    )

    # Subcommands
    subparsers = parser.add_subparsers(
        dest="command", help="Available commands", required=True
    )

    # Serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API",
        description="Serve the receipt processing API with uvicorn",
    )
    serve_parser.add_argument("--host", type=str, help="Interface to bind")
    serve_parser.add_argument("--port", type=int, help="Port to listen on")
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload the server when source files change",
    )

    # Score command
    score_parser = subparsers.add_parser(
        "score",
        help="Score a receipt file offline",
        description="Compute the points for a receipt JSON file, rule by rule",
    )
    score_parser.add_argument("receipt", type=str, help="Path to a receipt JSON file")
    score_parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    # Submit command
    submit_parser = subparsers.add_parser(
        "submit",
        help="Submit a receipt to a running server",
        description="POST a receipt JSON file and fetch the points it earned",
    )
    submit_parser.add_argument(
        "receipt", type=str, help="Path to a receipt JSON file"
    )
    submit_parser.add_argument(
        "--url",
        type=str,
        help="Base URL of the server (default: http://localhost:<PORT>)",
    )
    submit_parser.add_argument(
        "--output",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    return parser


async def async_main(args: argparse.Namespace) -> None:
    """Async entry point for commands that talk to the API."""
    cli = ReceiptPointsCLI()

    if args.command == "submit":
        await cli.submit_command(args)
    else:
        msg = f"Unknown command: {args.command}"
        raise CLIError(msg)


def main() -> None:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    try:
        if args.command == "serve":
            ReceiptPointsCLI().serve_command(args)
        elif args.command == "score":
            ReceiptPointsCLI().score_command(args)
        else:
            asyncio.run(async_main(args))
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user", file=sys.stderr)  # noqa: T201
        sys.exit(130)
    except CLIError as e:
        print(f"\nError: {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)


if __name__ == "__main__":
    main()
