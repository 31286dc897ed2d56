# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build staging core.

- `resolver`: `package:` URI resolution against a resolved-package table.
- `imports`: lexical import-directive extraction and rewriting.
- `provision`: idempotent directory/file provisioning.
- `context`: `BuildContext`, the per-build aggregate and its transport map.
- `stage`: the out-of-process staging step driven by the CLI.
"""

__all__ = [
	"context",
	"imports",
	"provision",
	"resolver",
	"stage",
]
