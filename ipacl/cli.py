"""
Command-line tool for ipacl.

Usage:
    ipacl serve [--host HOST] [--port PORT] [--root DIR]
    ipacl check FILE IP [IP ...] [--networks]
    ipacl dump FILE [--networks]
    ipacl to-json FILE [--networks]

FILE is the line form: one address (or CIDR network with --networks)
per line. ``check`` exits 1 if any of the given addresses is denied.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional, Union

from ipacl.core.errors import AllowlistFormatError
from ipacl.core.host import BasicHostACL, dump_hosts, load_hosts
from ipacl.core.network import BasicNetACL, dump_networks, load_networks
from ipacl.core.validation import parse_ip


def _load(path: str, networks: bool) -> Union[BasicHostACL, BasicNetACL]:
    data = Path(path).read_bytes()
    return load_networks(data) if networks else load_hosts(data)


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from ipacl.core.config import get_settings
    from ipacl.core.logger import setup_logging
    from ipacl.main import create_app

    settings = get_settings()
    updates = {}
    if args.host:
        updates["host"] = args.host
    if args.port:
        updates["port"] = args.port
    if args.root:
        updates["files_root"] = args.root
    if updates:
        settings = settings.model_copy(update=updates)

    setup_logging(settings.log_level, settings.log_file)
    config = uvicorn.Config(
        app=create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
    uvicorn.Server(config).run()
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    acl = _load(args.file, args.networks)
    denied = 0
    for raw in args.ips:
        ip = parse_ip(raw)
        if ip is None:
            print(f"{raw}: invalid address", file=sys.stderr)
            denied += 1
            continue
        permitted = acl.permitted(ip)
        print(f"{ip}: {'permitted' if permitted else 'denied'}")
        if not permitted:
            denied += 1
    return 1 if denied else 0


def cmd_dump(args: argparse.Namespace) -> int:
    acl = _load(args.file, args.networks)
    out = dump_networks(acl) if args.networks else dump_hosts(acl)
    if out:
        print(out.decode("utf-8"))
    return 0


def cmd_to_json(args: argparse.Namespace) -> int:
    print(_load(args.file, args.networks).to_json())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ipacl", description="IP allowlist tool")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="run the allowlisted file server")
    p_serve.add_argument("--host")
    p_serve.add_argument("--port", type=int)
    p_serve.add_argument("--root", help="file server root")
    p_serve.set_defaults(func=cmd_serve)

    p_check = sub.add_parser("check", help="test addresses against an allowlist file")
    p_check.add_argument("file")
    p_check.add_argument("ips", nargs="+")
    p_check.set_defaults(func=cmd_check)

    p_dump = sub.add_parser("dump", help="print an allowlist file in normalized line form")
    p_dump.add_argument("file")
    p_dump.set_defaults(func=cmd_dump)

    p_json = sub.add_parser("to-json", help="print an allowlist file in compact JSON form")
    p_json.add_argument("file")
    p_json.set_defaults(func=cmd_to_json)

    for p in (p_check, p_dump, p_json):
        p.add_argument("--networks", action="store_true", help="entries are CIDR networks")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (AllowlistFormatError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
