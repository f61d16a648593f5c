from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from flowbundle.errors import (
    ConfigurationError,
    DeserializationError,
    MalformedBundleError,
    MissingAttributeError,
    SpecificationLoadError,
)
from flowbundle.program.bundle import (
    MAIN_CLASS,
    MANIFEST_ENTRY,
    SPEC_FILE,
    BundleManifest,
    read_entry,
    read_manifest,
    unpack_bundle,
)
from flowbundle.program.code_context import ProgramCodeContext
from flowbundle.program.once import OnceCell
from flowbundle.specification import FlowSpecification, FlowSpecificationAdapter

LOGGER = logging.getLogger(__name__)

PROGRAM_TYPE_FLOW = "flow"


class Program:
    """A loaded program bundle.

    The main class name is read from the manifest at construction. The
    specification, the code context and the unpacking of the bundle are each
    resolved at most once, on first use, and are safe to request from several
    threads at a time. A failed resolution is cached and raised again on every
    later call; build a new ``Program`` to retry.

    When ``working_dir`` is ``None`` the specification is parsed eagerly from
    the packed bundle and the bundle is never unpacked, so the code context is
    only available if one was passed in. The caller owns ``working_dir`` and
    is responsible for deleting it.
    """

    def __init__(
        self,
        bundle_path: str | Path,
        working_dir: str | Path | None = None,
        code_context: ProgramCodeContext | None = None,
    ) -> None:
        self.bundle_path = Path(bundle_path)
        self.working_dir = Path(working_dir) if working_dir is not None else None

        manifest = read_manifest(self.bundle_path)
        if manifest is None:
            raise MalformedBundleError(
                self.bundle_path, f"failed to load manifest entry '{MANIFEST_ENTRY}'"
            )
        self.main_class_name = self._require_attribute(manifest, MAIN_CLASS)
        spec_entry = self._require_attribute(manifest, SPEC_FILE)

        self._unpacked: OnceCell[Path] = OnceCell()
        self._owns_code_context = code_context is None
        self._code_context: OnceCell[ProgramCodeContext] = (
            OnceCell.resolved(code_context) if code_context is not None else OnceCell()
        )
        if self.working_dir is None:
            self.spec_file: Path | None = None
            self._specification: OnceCell[FlowSpecification] = OnceCell.resolved(
                self._load_packed_specification(spec_entry)
            )
        else:
            self.spec_file = self.working_dir / spec_entry
            self._specification = OnceCell()

    def __repr__(self) -> str:
        return f"Program(bundle={str(self.bundle_path)!r}, main_class={self.main_class_name!r})"

    @property
    def program_id(self) -> str:
        return self.main_class_name

    @property
    def name(self) -> str:
        return self.program_id

    @property
    def program_type(self) -> str:
        return PROGRAM_TYPE_FLOW

    @property
    def is_unpacked(self) -> bool:
        return self._unpacked.is_resolved

    def get_specification(self) -> FlowSpecification:
        return self._specification.get(self._resolve_specification)

    def get_code_context(self) -> ProgramCodeContext:
        return self._code_context.get(self._resolve_code_context)

    def get_main_class(self) -> Any:
        return self.get_code_context().load_symbol(self.main_class_name)

    def ensure_unpacked(self) -> Path:
        return self._unpacked.get(self._unpack)

    def close(self) -> None:
        """Unload modules imported through a code context this program built."""
        if not self._owns_code_context:
            return
        context = self._code_context.peek()
        if context is not None:
            context.close()

    def _require_attribute(self, manifest: BundleManifest, name: str) -> str:
        value = manifest.get(name)
        if value is None:
            raise MissingAttributeError(self.bundle_path, name)
        return value

    def _load_packed_specification(self, spec_entry: str) -> FlowSpecification:
        source = f"{self.bundle_path}!{spec_entry}"
        try:
            data = read_entry(self.bundle_path, spec_entry)
        except KeyError as exc:
            raise SpecificationLoadError(source, "entry not found in bundle") from exc
        except MalformedBundleError as exc:
            raise SpecificationLoadError(source, exc.detail) from exc
        try:
            return FlowSpecificationAdapter.from_bytes(data)
        except DeserializationError as exc:
            raise SpecificationLoadError(source, str(exc)) from exc

    def _unpack(self) -> Path:
        if self.working_dir is None:
            raise ConfigurationError("directory for bundle expansion is not defined")
        LOGGER.info("unpacking bundle '%s' into '%s'", self.bundle_path, self.working_dir)
        try:
            return unpack_bundle(self.bundle_path, self.working_dir)
        except OSError as exc:
            raise ConfigurationError(
                f"cannot unpack bundle into '{self.working_dir}': {exc}"
            ) from exc

    def _resolve_specification(self) -> FlowSpecification:
        self.ensure_unpacked()
        spec_file = self.spec_file
        if spec_file is None:
            raise ConfigurationError("specification file location is not defined")
        LOGGER.debug("loading specification from '%s'", spec_file)
        try:
            return FlowSpecificationAdapter.from_file(spec_file)
        except OSError as exc:
            raise SpecificationLoadError(str(spec_file), f"cannot read file: {exc}") from exc
        except DeserializationError as exc:
            raise SpecificationLoadError(str(spec_file), str(exc)) from exc

    def _resolve_code_context(self) -> ProgramCodeContext:
        root = self.ensure_unpacked()
        LOGGER.debug("building code context for '%s'", root)
        return ProgramCodeContext(root)


def open_program(
    bundle_path: str | Path,
    working_dir: str | Path | None = None,
    code_context: ProgramCodeContext | None = None,
) -> Program:
    return Program(bundle_path, working_dir=working_dir, code_context=code_context)
