# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Idempotent provisioning of build-directory locations.

Both helpers are blocking and never retry. Directories created before a
failure are left in place; they are reused as-is on the next run.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stagekit.build.locations import to_path
from stagekit.errors import ProvisioningError

logger = logging.getLogger(__name__)


def _as_path(location: str | Path) -> Path:
	return location if isinstance(location, Path) else to_path(location)


def get_directory(location: str | Path) -> Path:
	"""Return the directory at `location`, creating it (and its parents) if missing."""
	path = _as_path(location)
	if path.is_dir():
		return path
	if path.exists():
		raise ProvisioningError("path exists and is not a directory", location=str(path))
	try:
		path.mkdir(parents=True, exist_ok=True)
	except OSError as err:
		raise ProvisioningError(f"cannot create directory: {err.strerror or err}", location=str(path)) from err
	logger.debug("created directory %s", path)
	return path


def get_file(location: str | Path) -> Path:
	"""
	Return the file path at `location`, creating its parent directories.

	The file itself is not created; a later write is expected to succeed.
	"""
	path = _as_path(location)
	if path.is_dir():
		raise ProvisioningError("path exists and is a directory", location=str(path))
	get_directory(path.parent)
	return path
