"""Command-line front end for inspecting pre-bundle resolution and proxies.

Usage:
    python -m prebundle.cli resolve deps.yml react --kind require-call
    python -m prebundle.cli proxy deps.yml react vue
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from prebundle.dep_plugin import DepPrebundlePlugin
from prebundle.errors import PrebundleError
from prebundle.load_config import load_config
from prebundle.load_manifest import load_manifest
from prebundle.models import ImportKind, LoadArgs, Namespace, ResolveArgs


def build_plugin(args: argparse.Namespace) -> DepPrebundlePlugin:
    """Load config and manifest and wire them into a plugin instance."""
    config = load_config(args.config)
    if args.root:
        config["root"] = str(args.root)
    if args.verbose:
        config["log_level"] = "DEBUG"
    logging.basicConfig(
        level=getattr(logging, str(config["log_level"]).upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    registry, exports = load_manifest(args.manifest, config.get("exclude"))
    return DepPrebundlePlugin(registry, exports, config)


def cmd_resolve(args: argparse.Namespace) -> int:
    plugin = build_plugin(args)
    response = plugin.on_resolve(
        ResolveArgs(
            path=args.specifier,
            importer=args.importer or "",
            kind=ImportKind(args.kind),
        )
    )
    print(json.dumps(response.to_dict() if response else None, indent=2))
    return 0


def cmd_proxy(args: argparse.Namespace) -> int:
    plugin = build_plugin(args)
    ids = args.ids or sorted(plugin.registry)
    for entry_id in ids:
        response = plugin.on_load(LoadArgs(path=entry_id, namespace=Namespace.DEP.value))
        if response is None:
            continue
        print(f"// {entry_id} (loader: {response.loader})")
        print(response.contents)
        print()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and dispatch to the chosen subcommand."""
    ap = argparse.ArgumentParser(
        prog="prebundle",
        description="Resolve dependency specifiers and synthesize pre-bundle proxy modules.",
    )
    ap.add_argument("--config", help="Path to a YAML configuration file")
    ap.add_argument("--root", type=Path, help="Override the bundling root directory")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    p_resolve = sub.add_parser("resolve", help="Answer a single resolve event")
    p_resolve.add_argument("manifest", type=Path, help="Scanner manifest (YAML or JSON)")
    p_resolve.add_argument("specifier", help="Specifier to resolve")
    p_resolve.add_argument("--importer", help="Importing file or flattened entry id")
    p_resolve.add_argument(
        "--kind",
        default=ImportKind.IMPORT_STATEMENT.value,
        choices=[k.value for k in ImportKind],
        help="Import kind (default: import-statement)",
    )
    p_resolve.set_defaults(func=cmd_resolve)

    p_proxy = sub.add_parser("proxy", help="Print synthesized proxy modules")
    p_proxy.add_argument("manifest", type=Path, help="Scanner manifest (YAML or JSON)")
    p_proxy.add_argument("ids", nargs="*", help="Flattened entry ids (default: all)")
    p_proxy.set_defaults(func=cmd_proxy)

    args = ap.parse_args(argv)
    try:
        return args.func(args)
    except PrebundleError as e:
        raise SystemExit(f"error: {e}") from e


if __name__ == "__main__":
    raise SystemExit(main())
