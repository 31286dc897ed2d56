# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from stagekit.build.stage import (
	ImportsOptions,
	ResolveOptions,
	StageOptions,
	list_imports,
	resolve_location,
	stage_build,
)
from stagekit.errors import StageError


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="stagekit",
		description="Build staging (package URI resolution, import rewriting, build layout provisioning)",
	)
	p.add_argument("-v", "--verbose", action="store_true", help="Log staging steps to stderr")
	sub = p.add_subparsers(dest="cmd", required=True)

	stage = sub.add_parser("stage", help="Rebuild a build context from its JSON map and provision the build layout")
	stage.add_argument(
		"--context",
		type=Path,
		required=True,
		help="Path to the build context JSON written from BuildContext.safe_map ('-' reads stdin)",
	)
	stage.add_argument("--json", action="store_true", help="Emit machine-readable JSON report")

	imports = sub.add_parser("imports", help="Print the import directives of a library file")
	imports.add_argument("uri", help="Library file path, file: URI or package: URI")
	imports.add_argument("--packages", type=Path, default=None, help="Path to the .packages file for package: URIs")
	imports.add_argument(
		"--also-import-original",
		action="store_true",
		help="Append an import of the library file itself",
	)
	imports.add_argument("--json", action="store_true", help="Emit machine-readable JSON report")

	resolve = sub.add_parser("resolve", help="Resolve a package: URI to an absolute location")
	resolve.add_argument("uri", help="package: URI or absolute location")
	resolve.add_argument("--packages", type=Path, required=True, help="Path to the .packages file")
	resolve.add_argument("--json", action="store_true", help="Emit machine-readable JSON report")
	return p


def _emit_json(obj: dict[str, Any]) -> None:
	print(json.dumps(obj, sort_keys=True, separators=(",", ":")))


def _run(args: argparse.Namespace) -> dict[str, Any]:
	if args.cmd == "stage":
		report = stage_build(StageOptions(context_path=args.context))
		if not args.json:
			print(f"staged {report.build_directory}")
			if report.entry_file is not None:
				print(f"entry: {report.entry_file}")
		return report.to_dict()

	if args.cmd == "imports":
		directives = list_imports(
			ImportsOptions(
				uri=args.uri,
				packages_path=args.packages,
				also_import_original_file=bool(args.also_import_original),
			)
		)
		if not args.json:
			for d in directives:
				print(d)
		return {"ok": True, "imports": directives}

	if args.cmd == "resolve":
		location = resolve_location(ResolveOptions(uri=args.uri, packages_path=args.packages))
		if not args.json:
			print(location)
		return {"ok": True, "location": location}

	raise AssertionError("unreachable")


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)

	try:
		result = _run(args)
	except StageError as err:
		if args.json:
			_emit_json({"ok": False, "error": err.to_dict()})
		else:
			print(err.format_human(), file=sys.stderr)
		return 2

	if args.json:
		_emit_json(result)
	return 0
