from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, List, Optional, Sequence

import orjson

from .api import serialize_import_result, serialize_transitions
from .bootstrap import configure_logging
from .codecs import ImportResult, decode_batch, get_codec, ics
from .config import TRANSITIONS_DIR, ensure_data_dir, get_settings
from .domain import CalkitError, ProviderId
from .timezones import find_all_transitions, find_transitions

logger = logging.getLogger(__name__)

CANONICAL = "canonical"


def _write_json(payload: Any) -> None:
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")


def _date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="calkit", description="Calendar event conversion tools.")
    parser.add_argument("--log-level", default=None, help="Override CALKIT_LOG_LEVEL.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import-ics", help="Decode an .ics file into canonical events.")
    import_parser.add_argument("path", type=Path)
    import_parser.add_argument("--floating-zone", default=None, help="Zone for DATE-TIME values without TZID.")
    import_parser.add_argument("--display-zone", default=None, help="Zone used for display bounds.")

    convert_parser = subparsers.add_parser("convert", help="Convert events between provider formats.")
    convert_parser.add_argument("path", type=Path)
    convert_parser.add_argument("--from", dest="source", required=True, choices=[item.value for item in ProviderId])
    convert_parser.add_argument(
        "--to",
        dest="target",
        required=True,
        choices=[item.value for item in ProviderId] + [CANONICAL],
    )

    transitions_parser = subparsers.add_parser("transitions", help="List UTC offset transitions of a zone.")
    transitions_parser.add_argument("zone")
    transitions_parser.add_argument("--start", type=_date, default=None)
    limit = transitions_parser.add_mutually_exclusive_group(required=True)
    limit.add_argument("--count", type=int, default=None)
    limit.add_argument("--until", type=_date, default=None)

    all_parser = subparsers.add_parser("transitions-all", help="Write transitions for every known zone as JSON.")
    all_parser.add_argument("--start", type=_date, required=True)
    all_parser.add_argument("--until", type=_date, required=True)
    all_parser.add_argument("--output", type=Path, default=None)
    all_parser.add_argument("--zone", dest="zones", action="append", default=None)

    return parser


def _read_payloads(path: Path) -> List[Any]:
    data = orjson.loads(path.read_bytes())
    if isinstance(data, dict) and isinstance(data.get("items") or data.get("value"), list):
        return list(data.get("items") or data.get("value"))
    return data if isinstance(data, list) else [data]


def _import_ics(args: argparse.Namespace) -> int:
    settings = get_settings()
    floating_zone = args.floating_zone or settings.ics.floating_time_zone
    kind, result = ics.import_ics(args.path.read_text(encoding="utf-8"), floating_time_zone=floating_zone)
    logger.info("Imported %s file %s: %d events, %d failures", kind, args.path, len(result.events), result.failure_count)
    payload = serialize_import_result(result, display_zone=args.display_zone or settings.store.default_time_zone)
    payload["type"] = kind
    _write_json(payload)
    return 1 if result.failures and not result.events else 0


def _convert(args: argparse.Namespace) -> int:
    settings = get_settings()
    source = ProviderId(args.source)
    if source is ProviderId.ICS:
        result: ImportResult = ics.decode_calendar(
            args.path.read_text(encoding="utf-8"),
            floating_time_zone=settings.ics.floating_time_zone,
        )
    else:
        result = decode_batch(get_codec(source).decode, _read_payloads(args.path), source=source.value)

    if args.target == CANONICAL:
        _write_json(serialize_import_result(result, display_zone=settings.store.default_time_zone))
    elif args.target == ProviderId.ICS.value:
        sys.stdout.write(ics.encode_calendar(result.events, prod_id=settings.ics.prod_id))
    else:
        encode = get_codec(args.target).encode
        _write_json([encode(event) for event in result.events])
    for failure in result.failures:
        logger.warning("Item #%d (%s) was not converted: %s", failure.index, failure.item_id, failure.reason)
    return 1 if result.failures and not result.events else 0


def _transitions(args: argparse.Namespace) -> int:
    settings = get_settings()
    transitions = find_transitions(
        args.zone,
        start=args.start,
        max_transitions=args.count,
        until=args.until,
        horizon=settings.transitions.horizon,
        scan_step=settings.transitions.scan_step,
    )
    _write_json(serialize_transitions(transitions, args.zone))
    return 0


def _transitions_all(args: argparse.Namespace) -> int:
    settings = get_settings()
    output = args.output
    if output is None:
        ensure_data_dir()
        output = TRANSITIONS_DIR
    counts = find_all_transitions(
        output,
        start=args.start,
        until=args.until,
        zones=args.zones,
        scan_step=settings.transitions.scan_step,
    )
    _write_json({"output": str(output), "zones": len(counts), "transitions": sum(counts.values())})
    return 0


COMMANDS = {
    "import-ics": _import_ics,
    "convert": _convert,
    "transitions": _transitions,
    "transitions-all": _transitions_all,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)
    logger.debug("calkit %s starting", args.command)
    try:
        return COMMANDS[args.command](args)
    except (CalkitError, OSError, orjson.JSONDecodeError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
