# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
stagekit: the staging layer of a compile pipeline.

Resolves `package:` URIs, extracts and rewrites import directives, provisions
the build directory layout, and serializes the build context so the staging
step can be re-run in a fresh process (`python -m stagekit stage`).
"""

from stagekit.build.context import BuildContext
from stagekit.errors import StageError

__version__ = "0.1.0"

__all__ = [
	"BuildContext",
	"StageError",
]
