# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured errors raised by the staging layer.

Every error carries a stable `reason_code` so tooling (and the `stagekit`
CLI `--json` reports) can branch on the failure kind without parsing messages.
Errors are raised synchronously and never retried: a failed resolution or
provisioning step aborts the whole staging step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class StageError(Exception):
	"""Base class for all staging failures."""

	message: str
	reason_code: str = "STAGE_ERROR"
	location: str | None = None
	package_name: str | None = None
	line: int | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"location": self.location,
			"package_name": self.package_name,
			"line": self.line,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.package_name:
			parts.append(f"package={self.package_name}")
		if self.location:
			parts.append(f"location={self.location}")
		if self.line is not None:
			parts.append(f"line={self.line}")
		return " ".join(parts)


@dataclass(frozen=True)
class InvalidArgumentError(StageError, ValueError):
	"""A call-site precondition was violated (programming error, not retryable)."""

	reason_code: str = "INVALID_ARGUMENT"


@dataclass(frozen=True)
class InvalidReferenceError(StageError, ValueError):
	"""A location reference is neither package-scheme nor absolute."""

	reason_code: str = "INVALID_REFERENCE"


@dataclass(frozen=True)
class UnresolvedPackageError(StageError, LookupError):
	"""A `package:` reference names a package missing from the resolved table."""

	reason_code: str = "UNRESOLVED_PACKAGE"


@dataclass(frozen=True)
class UnresolvableRelativeImportError(StageError, ValueError):
	"""A relative import was found in literal source with no file to resolve against."""

	reason_code: str = "UNRESOLVABLE_RELATIVE_IMPORT"


@dataclass(frozen=True)
class ProvisioningError(StageError):
	"""A directory or file location could not be provisioned."""

	reason_code: str = "PROVISIONING_FAILED"


@dataclass(frozen=True)
class SourceReadError(StageError):
	"""A source file could not be read or decoded."""

	reason_code: str = "SOURCE_READ_FAILED"


@dataclass(frozen=True)
class PackageConfigError(StageError, ValueError):
	"""The resolved-package file is missing or malformed."""

	reason_code: str = "PACKAGE_CONFIG_INVALID"


@dataclass(frozen=True)
class ManifestError(StageError, ValueError):
	"""The application manifest cannot be read or is malformed."""

	reason_code: str = "MANIFEST_INVALID"
