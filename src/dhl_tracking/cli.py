# src/dhl_tracking/cli.py
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from .api.client import ReplayTransport, TrackingClient
from .api.errors import ClientError
from .config.env import EnvError, get_app_env
from .config.logging_config import get_logger
from .models.shipment import Response

Outcome = Union[Response, ClientError]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dhl-tracking",
        description="Track DHL shipments and print their current status.",
    )
    p.add_argument("tracking_numbers", nargs="+", metavar="TRACKING_NUMBER",
                   help="One or more DHL tracking numbers.")
    p.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="JSON file of captured response bodies; served instead of the live API.",
    )
    p.add_argument(
        "--capture",
        type=Path,
        default=None,
        help="Append every successful response body to this JSON file.",
    )
    p.add_argument(
        "--xlsx",
        type=Path,
        default=None,
        help="Write Shipments/Events sheets to this .xlsx file.",
    )
    p.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Path to a .env file holding DHL_API_KEY. Default: ./.env",
    )
    p.add_argument(
        "--strict-env",
        action="store_true",
        help="Require DHL_API_KEY even with --replay; otherwise exit 2.",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Default: INFO",
    )
    p.add_argument("--log-file", type=Path, default=None, help="Also log to this file.")
    p.add_argument(
        "--no-console",
        action="store_true",
        help="Disable console logging (file logging remains).",
    )
    return p


async def track_all(client: TrackingClient, numbers: Sequence[str]) -> List[Tuple[str, Outcome]]:
    """Fetch every number concurrently; ClientErrors are returned, not raised."""
    async def one(tn: str) -> Outcome:
        try:
            return await client.fetch(tn)
        except ClientError as ex:
            return ex

    results = await asyncio.gather(*(one(tn) for tn in numbers))
    return list(zip(numbers, results))


def format_shipment_lines(resp: Response) -> List[str]:
    lines = []
    for s in resp.shipments:
        code = s.status.status_code.value if s.status.status_code else "-"
        lines.append(
            f"{s.id}\t{s.service.value}\t{code}\t"
            f"eta={s.estimated_time_of_delivery.date().isoformat()}\t"
            f"{s.status.description or ''}".rstrip()
        )
    return lines


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logger = get_logger(
        "dhl_tracking",
        level=args.log_level,
        console=not args.no_console,
        log_file=args.log_file,
    )
    logger.debug("Logger initialized.")

    # A live run always needs the key; replay only when asked to be strict.
    try:
        env_cfg = get_app_env(args.env_file, strict=args.strict_env or args.replay is None)
    except EnvError as e:
        logger.error("Environment error: %s", e)
        return 2

    writer = None
    if args.capture is not None:
        if args.capture.is_dir():
            logger.error("--capture must be a file, not a directory: %s", args.capture)
            return 2
        from .api.response_writer import ResponseWriter
        writer = ResponseWriter(args.capture)

    if args.replay is not None:
        try:
            transport = ReplayTransport(args.replay)
        except (ValueError, OSError) as e:
            logger.error("Cannot load replay file: %s", e)
            return 2
        logger.info("Replay mode enabled: %s (%d tracking numbers)",
                    args.replay, len(transport.tracking_numbers))
        client = TrackingClient(env_cfg.DHL_API_KEY, transport, base_url=env_cfg.DHL_API_BASE_URL)
    else:
        client = TrackingClient(env_cfg.DHL_API_KEY, base_url=env_cfg.DHL_API_BASE_URL)
        logger.info("Live DHL API enabled (base=%s)", env_cfg.DHL_API_BASE_URL)

    try:
        results = asyncio.run(track_all(client, args.tracking_numbers))
    finally:
        client.close()

    ok: List[Response] = []
    failures = 0
    for tn, outcome in results:
        if isinstance(outcome, ClientError):
            failures += 1
            logger.error("%s: %s: %s", tn, type(outcome).__name__, outcome)
            continue
        ok.append(outcome)
        for line in format_shipment_lines(outcome):
            print(line)
        if writer is not None:
            try:
                writer.add_response(outcome)
            except (OSError, ValueError) as e:
                logger.error("Failed to capture response to %s: %s", args.capture, e)
                return 2

    if args.xlsx is not None:
        from .export.workbook import write_workbook
        try:
            write_workbook(ok, args.xlsx)
        except OSError as e:
            logger.error("Failed to write workbook %s: %s", args.xlsx, e)
            return 2
        logger.info("Wrote workbook → %s", args.xlsx)

    logger.info("Done: %d ok, %d failed.", len(ok), failures)
    return 1 if failures else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
