"""Reading, unpacking and writing program bundles.

A bundle is a zip archive carrying a manifest at ``META-INF/MANIFEST.MF``,
the program's code, and the flow specification document named by the
manifest's ``Spec-File`` attribute.
"""

from __future__ import annotations

import logging
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import Mapping

from flowbundle.errors import MalformedBundleError
from flowbundle.specification import FlowSpecification, FlowSpecificationAdapter

LOGGER = logging.getLogger(__name__)

MANIFEST_ENTRY = "META-INF/MANIFEST.MF"
MANIFEST_VERSION = "Manifest-Version"
MAIN_CLASS = "Main-Class"
SPEC_FILE = "Spec-File"
DEFAULT_SPEC_ENTRY = "META-INF/specification/flow.json"


# raised by ZipFile.read/open on a damaged entry
_CORRUPT_ENTRY_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError)


def _empty_mapping() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class BundleManifest:
    attributes: Mapping[str, str] = field(default_factory=_empty_mapping)

    @classmethod
    def parse(cls, text: str) -> "BundleManifest":
        attributes: dict[str, str] = {}
        last_key: str | None = None
        for line in text.splitlines():
            if not line.strip():
                # only the main section is read
                if attributes:
                    break
                continue
            if line.startswith(" ") and last_key is not None:
                attributes[last_key] += line[1:]
                continue
            key, sep, value = line.partition(":")
            if not sep:
                raise ValueError(f"invalid manifest line '{line}'")
            last_key = key.strip()
            attributes[last_key] = value.strip()
        return cls(attributes=MappingProxyType(attributes))

    def get(self, name: str) -> str | None:
        value = self.attributes.get(name)
        if value is None or not value.strip():
            return None
        return value

    def render(self) -> str:
        lines = [f"{key}: {value}" for key, value in self.attributes.items()]
        return "\n".join(lines) + "\n"


def _open_bundle(bundle: Path) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(bundle)
    except (OSError, zipfile.BadZipFile) as exc:
        raise MalformedBundleError(bundle, f"cannot open archive: {exc}") from exc


def read_manifest(bundle: str | Path) -> BundleManifest | None:
    bundle_path = Path(bundle)
    with _open_bundle(bundle_path) as archive:
        try:
            raw = archive.read(MANIFEST_ENTRY)
        except KeyError:
            return None
        except _CORRUPT_ENTRY_ERRORS as exc:
            raise MalformedBundleError(bundle_path, f"corrupt manifest entry: {exc}") from exc
    try:
        return BundleManifest.parse(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedBundleError(bundle_path, f"unreadable manifest: {exc}") from exc


def read_entry(bundle: str | Path, name: str) -> bytes:
    """Return the content of one entry; raises KeyError when it is absent."""
    bundle_path = Path(bundle)
    with _open_bundle(bundle_path) as archive:
        try:
            return archive.read(name)
        except _CORRUPT_ENTRY_ERRORS as exc:
            raise MalformedBundleError(bundle_path, f"corrupt entry '{name}': {exc}") from exc


def _safe_target(bundle: Path, dest: Path, entry_name: str) -> Path:
    relative = PurePosixPath(entry_name)
    if relative.is_absolute() or ".." in relative.parts:
        raise MalformedBundleError(
            bundle, f"entry '{entry_name}' escapes the target directory"
        )
    return dest.joinpath(*relative.parts)


def unpack_bundle(bundle: str | Path, dest: str | Path) -> Path:
    bundle_path = Path(bundle)
    target_root = Path(dest)
    target_root.mkdir(parents=True, exist_ok=True)
    count = 0
    with _open_bundle(bundle_path) as archive:
        for info in archive.infolist():
            target = _safe_target(bundle_path, target_root, info.filename)
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                with archive.open(info) as source, target.open("wb") as sink:
                    while chunk := source.read(64 * 1024):
                        sink.write(chunk)
            except _CORRUPT_ENTRY_ERRORS as exc:
                raise MalformedBundleError(
                    bundle_path, f"corrupt entry '{info.filename}': {exc}"
                ) from exc
            count += 1
    LOGGER.debug("unpacked %d entries from '%s' into '%s'", count, bundle_path, target_root)
    return target_root


def write_bundle(
    bundle: str | Path,
    main_class: str,
    specification: FlowSpecification,
    *,
    files: Mapping[str, bytes | str] | None = None,
    spec_entry: str = DEFAULT_SPEC_ENTRY,
) -> Path:
    """Write a bundle with a manifest, a specification entry and code files."""
    bundle_path = Path(bundle)
    bundle_path.parent.mkdir(parents=True, exist_ok=True)
    manifest = BundleManifest(
        attributes={
            MANIFEST_VERSION: "1.0",
            MAIN_CLASS: main_class,
            SPEC_FILE: spec_entry,
        }
    )
    with zipfile.ZipFile(bundle_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(MANIFEST_ENTRY, manifest.render())
        archive.writestr(spec_entry, FlowSpecificationAdapter.to_json(specification))
        for name, content in (files or {}).items():
            archive.writestr(name, content)
    return bundle_path
