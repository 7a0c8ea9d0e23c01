from __future__ import annotations

import argparse
import json
import sys
from dataclasses import MISSING, fields
from typing import Any, Sequence

from shopcore.container import AppContext
from shopcore.events.catalog import EventKind, UnknownEventKindError, domains, kinds_for_domain
from shopcore.events.payloads import payload_type


def _describe(kind: EventKind) -> dict[str, Any]:
    cls = payload_type(kind)
    return {
        "kind": kind.value,
        "domain": kind.domain,
        "payload": cls.__name__,
        "fields": [
            {
                "name": f.name,
                "type": str(f.type),
                "required": f.default is MISSING and f.default_factory is MISSING,
            }
            for f in fields(cls)
        ],
    }


def _format_entry(entry: dict[str, Any]) -> str:
    parts = []
    for f in entry["fields"]:
        suffix = "" if f["required"] else "?"
        parts.append(f"{f['name']}{suffix}: {f['type']}")
    return f"{entry['kind']:<28} {entry['payload']}({', '.join(parts)})"


def cmd_catalog(domain: str | None, as_json: bool) -> int:
    if domain is not None and domain not in domains():
        raise RuntimeError(f"Unknown domain: {domain} (known: {', '.join(domains())})")
    kinds = kinds_for_domain(domain) if domain else list(EventKind)
    entries = [_describe(kind) for kind in kinds]
    if as_json:
        print(json.dumps(entries, indent=2))
    else:
        for entry in entries:
            print(_format_entry(entry))
    return 0


def cmd_describe(kind: str, as_json: bool) -> int:
    try:
        entry = _describe(EventKind.parse(kind))
    except UnknownEventKindError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    if as_json:
        print(json.dumps(entry, indent=2))
    else:
        print(_format_entry(entry))
    return 0


def cmd_config() -> int:
    context = AppContext.from_env()
    print(
        json.dumps(
            {
                "base_dir": str(context.base_dir),
                "log_level": context.log_level,
                "log_json": context.log_json,
                "log_file": str(context.log_file) if context.log_file else None,
                "max_listeners": context.max_listeners,
                "service_name": context.service_name,
            },
            indent=2,
        )
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="shopcore")
    sub = p.add_subparsers(dest="cmd", required=True)

    catalog = sub.add_parser("catalog", help="List event kinds and payload shapes")
    catalog.add_argument("--domain", default=None, help="Only kinds of this domain")
    catalog.add_argument("--json", action="store_true", help="Output JSON")

    describe = sub.add_parser("describe", help="Show one event kind")
    describe.add_argument("kind")
    describe.add_argument("--json", action="store_true", help="Output JSON")

    sub.add_parser("config", help="Show resolved configuration")

    args = p.parse_args(argv)

    try:
        if args.cmd == "catalog":
            return cmd_catalog(args.domain, args.json)
        if args.cmd == "describe":
            return cmd_describe(args.kind, args.json)
        if args.cmd == "config":
            return cmd_config()
    except Exception as e:
        raise SystemExit(f"ERROR: {e}") from e
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
