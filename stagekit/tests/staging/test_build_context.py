# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from stagekit.build.context import TRANSPORT_KEYS, BuildContext
from stagekit.errors import InvalidArgumentError, ManifestError, UnresolvedPackageError
from stagekit.packages.manifest import Manifest


class _FakeManifestReader:
	def __init__(self, manifest: Manifest) -> None:
		self.manifest = manifest
		self.calls: list[Path] = []

	def read_manifest(self, application_dir: Path) -> Manifest:
		self.calls.append(application_dir)
		return self.manifest


class _FakePackageConfigReader:
	def __init__(self, packages: dict[str, str]) -> None:
		self.packages = packages
		self.calls: list[tuple[Path, str]] = []

	def read_package_config(self, path: Path, *, relative_to: str) -> dict[str, str]:
		self.calls.append((path, relative_to))
		return dict(self.packages)


def _write_file(path: Path, text: str) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")


def _context(tmp_path: Path, source: str | None = "fn main() {}\n", **kwargs) -> BuildContext:
	return BuildContext(
		str(tmp_path / "app" / "lib" / "app.txt"),
		str(tmp_path / "build") + "/",
		str(tmp_path / "out" / "app.exe"),
		source,
		**kwargs,
	)


def test_round_trip_through_transport_map(tmp_path: Path) -> None:
	ctx = _context(tmp_path, include_dev_dependencies=True)
	data = ctx.to_map()
	assert sorted(data) == sorted(TRANSPORT_KEYS)

	back = BuildContext.from_map(json.loads(json.dumps(data)))
	assert back == ctx
	assert back.to_map() == data


def test_round_trip_with_absent_source(tmp_path: Path) -> None:
	ctx = _context(tmp_path, source=None)
	assert BuildContext.from_map(ctx.to_map()) == ctx


def test_from_map_coerces_null_dev_flag(tmp_path: Path) -> None:
	data = _context(tmp_path).to_map()
	data["includeDevDependencies"] = None
	assert BuildContext.from_map(data).include_dev_dependencies is False


def test_from_map_requires_every_key(tmp_path: Path) -> None:
	data = _context(tmp_path).to_map()
	del data["executableUri"]
	with pytest.raises(InvalidArgumentError, match="executableUri"):
		BuildContext.from_map(data)


def test_from_map_rejects_non_boolean_flag(tmp_path: Path) -> None:
	data = _context(tmp_path).to_map()
	data["includeDevDependencies"] = "yes"
	with pytest.raises(InvalidArgumentError, match="must be a boolean"):
		BuildContext.from_map(data)


def test_locations_must_be_absolute(tmp_path: Path) -> None:
	with pytest.raises(InvalidArgumentError, match="build_directory_uri"):
		BuildContext(str(tmp_path / "app" / "lib" / "app.txt"), "build/", str(tmp_path / "app.exe"))


def test_path_objects_are_accepted(tmp_path: Path) -> None:
	ctx = BuildContext(tmp_path / "app" / "lib" / "app.txt", tmp_path / "build", tmp_path / "app.exe")
	assert ctx.build_directory_uri == str(tmp_path / "build")
	assert ctx.build_runtime_directory == tmp_path / "build" / "generated_runtime"


def test_safe_map_provisions_library_parent(tmp_path: Path) -> None:
	ctx = _context(tmp_path)
	assert not (tmp_path / "app" / "lib").exists()
	assert ctx.safe_map == ctx.to_map()
	assert (tmp_path / "app" / "lib").is_dir()
	assert not (tmp_path / "app" / "lib" / "app.txt").exists()


def test_derived_build_layout(tmp_path: Path) -> None:
	reader = _FakeManifestReader(Manifest(name="hello"))
	ctx = _context(tmp_path, manifest_reader=reader)
	build = tmp_path / "build"

	assert ctx.build_directory == build
	assert ctx.build_runtime_directory == build / "generated_runtime"
	assert ctx.build_packages_directory == build / "packages"
	assert ctx.build_application_directory == build / "packages" / "hello"
	for d in ("generated_runtime", "packages", "packages/hello"):
		assert (build / d).is_dir()

	assert ctx.target_script_file_uri == f"{build}/main.txt"
	assert ctx.target_script_file_without_main_function_uri == f"{build}/main.g.txt"


def test_build_directory_without_trailing_separator(tmp_path: Path) -> None:
	ctx = BuildContext(str(tmp_path / "app" / "lib" / "app.txt"), str(tmp_path / "build"), str(tmp_path / "app.exe"))
	assert ctx.target_script_file_uri == f"{tmp_path}/build/main.txt"


def test_manifest_is_read_on_every_access(tmp_path: Path) -> None:
	reader = _FakeManifestReader(Manifest(name="hello"))
	ctx = _context(tmp_path, manifest_reader=reader)
	ctx.build_application_directory
	ctx.build_application_directory
	assert reader.calls == [tmp_path / "app", tmp_path / "app"]


def test_dependency_names_follow_dev_flag(tmp_path: Path) -> None:
	manifest = Manifest(name="hello", dependencies={"a": "^1.0.0"}, dev_dependencies={"test": "any"})
	reader = _FakeManifestReader(manifest)
	assert _context(tmp_path, manifest_reader=reader).dependency_names == ["a"]
	assert _context(tmp_path, manifest_reader=reader, include_dev_dependencies=True).dependency_names == ["a", "test"]


def test_source_application_directory_is_parent_of_lib(tmp_path: Path) -> None:
	ctx = _context(tmp_path)
	assert ctx.source_application_directory == tmp_path / "app"
	assert ctx.source_library_file == tmp_path / "app" / "lib" / "app.txt"


def test_default_manifest_reader_reads_manifest_yaml(tmp_path: Path) -> None:
	_write_file(tmp_path / "app" / "manifest.yaml", "name: from_disk\ndependencies:\n  x: 1.0.0\n")
	ctx = _context(tmp_path)
	assert ctx.source_application_manifest.name == "from_disk"
	assert ctx.source_application_manifest_map["dependencies"] == {"x": "1.0.0"}
	assert ctx.build_application_directory == tmp_path / "build" / "packages" / "from_disk"


def test_manifest_name_cannot_escape_build_directory(tmp_path: Path) -> None:
	_write_file(tmp_path / "app" / "manifest.yaml", "name: ../../escaped\n")
	with pytest.raises(ManifestError, match="single path segment"):
		_context(tmp_path).build_application_directory
	assert not (tmp_path / "escaped").exists()


def test_missing_manifest_is_reported(tmp_path: Path) -> None:
	with pytest.raises(ManifestError, match="cannot read manifest"):
		_context(tmp_path).build_application_directory


def test_resolved_packages_are_read_relative_to_application(tmp_path: Path) -> None:
	_write_file(tmp_path / "app" / ".packages", "# resolved\nfoo:../pkgs/foo/lib/\napp:lib/\n")
	ctx = _context(tmp_path)
	assert ctx.resolved_packages == {
		"foo": f"{tmp_path}/pkgs/foo/",
		"app": f"{tmp_path}/app/",
	}
	assert ctx.resolve_uri("package:foo/src/x.txt") == f"{tmp_path}/pkgs/foo/lib/src/x.txt"
	assert ctx.resolve_uri("package:app/app.txt") == f"{tmp_path}/app/lib/app.txt"


def test_package_table_is_only_read_for_package_uris(tmp_path: Path) -> None:
	packages = _FakePackageConfigReader({"foo": "/pkgs/foo/"})
	ctx = _context(tmp_path, package_config_reader=packages)

	assert ctx.resolve_uri("/abs/x.txt") == "/abs/x.txt"
	assert ctx.resolve_uri(None) is None
	assert packages.calls == []

	assert ctx.resolve_uri("package:foo/bar/") == "/pkgs/foo/lib/bar/"
	assert packages.calls == [(tmp_path / "app" / ".packages", f"{tmp_path}/app/")]

	with pytest.raises(UnresolvedPackageError):
		ctx.resolve_uri("package:nope/x.txt")


def test_context_import_directives_resolve_package_entry(tmp_path: Path) -> None:
	_write_file(tmp_path / "app" / "lib" / "app.txt", "import 'package:foo/foo.txt';\nimport 'src/impl.txt';\n")
	packages = _FakePackageConfigReader({"app": f"{tmp_path}/app/", "foo": "/pkgs/foo/"})
	ctx = _context(tmp_path, package_config_reader=packages)

	out = ctx.get_import_directives(uri="package:app/app.txt", also_import_original_file=True)
	assert out == [
		"import 'package:foo/foo.txt';",
		f"import 'file://{tmp_path}/app/lib/src/impl.txt';",
		f"import '{tmp_path}/app/lib/app.txt';",
	]
