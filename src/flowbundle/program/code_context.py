from __future__ import annotations

import functools
import importlib
import importlib.machinery
import importlib.util
import itertools
import logging
import os
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable

from flowbundle.errors import CodeLoadError

LOGGER = logging.getLogger(__name__)

API_PACKAGES: tuple[str, ...] = ("flowbundle.api",)

_NAMESPACE_PREFIX = "_flowbundle_program_"
_NAMESPACE_COUNTER = itertools.count(1)


@functools.cache
def get_api_resources() -> frozenset[str]:
    """Module prefixes every program resolves from the host interpreter."""
    return frozenset(API_PACKAGES)


def split_symbol_ref(ref: str) -> tuple[str, str]:
    text = ref.strip()
    if ":" in text:
        module_name, attr = text.split(":", 1)
    else:
        module_name, _, attr = text.rpartition(".")
    if not module_name or not attr:
        raise CodeLoadError(
            f"invalid symbol ref '{ref}'. expected 'module:attr' or 'module.attr'"
        )
    return module_name, attr


class ProgramCodeContext:
    """Isolated code-loading context over one unpacked program directory.

    The directory is mounted as a private package whose name is unique to the
    context, so two programs shipping a module with the same name never share
    it. Modules under an API resource prefix are always taken from the host.
    Program code refers to its own sibling modules with relative imports.
    """

    def __init__(self, root: str | Path, api_resources: Iterable[str] | None = None) -> None:
        root_path = Path(root).expanduser()
        if not root_path.is_dir():
            raise CodeLoadError(f"program directory '{root_path}' does not exist")
        if not os.access(root_path, os.R_OK | os.X_OK):
            raise CodeLoadError(f"program directory '{root_path}' is not readable")

        self.root = root_path.resolve()
        self.api_resources = (
            get_api_resources() if api_resources is None else frozenset(api_resources)
        )
        self.namespace = f"{_NAMESPACE_PREFIX}{next(_NAMESPACE_COUNTER)}"
        self._closed = False

        spec = importlib.machinery.ModuleSpec(self.namespace, None, is_package=True)
        spec.submodule_search_locations = [str(self.root)]
        sys.modules[self.namespace] = importlib.util.module_from_spec(spec)
        LOGGER.debug("mounted '%s' as code namespace '%s'", self.root, self.namespace)

    def __enter__(self) -> "ProgramCodeContext":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ProgramCodeContext(root={str(self.root)!r}, namespace={self.namespace!r})"

    @property
    def closed(self) -> bool:
        return self._closed

    def is_api_resource(self, module_name: str) -> bool:
        return any(
            module_name == prefix or module_name.startswith(f"{prefix}.")
            for prefix in self.api_resources
        )

    def load_module(self, module_name: str) -> ModuleType:
        if self.is_api_resource(module_name):
            try:
                return importlib.import_module(module_name)
            except Exception as exc:
                raise CodeLoadError(f"failed importing API module '{module_name}': {exc}") from exc
        if self._closed:
            raise CodeLoadError(f"code context for '{self.root}' is closed")
        try:
            return importlib.import_module(f"{self.namespace}.{module_name}")
        except ModuleNotFoundError as exc:
            raise CodeLoadError(
                f"module '{module_name}' not found in program directory '{self.root}'"
            ) from exc
        except Exception as exc:
            raise CodeLoadError(f"failed importing module '{module_name}': {exc}") from exc

    def load_symbol(self, ref: str) -> Any:
        module_name, attr = split_symbol_ref(ref)
        loaded: Any = self.load_module(module_name)
        for part in attr.split("."):
            try:
                loaded = getattr(loaded, part)
            except AttributeError as exc:
                raise CodeLoadError(
                    f"symbol '{attr}' not found in module '{module_name}'"
                ) from exc
        return loaded

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        prefix = f"{self.namespace}."
        for name in [key for key in list(sys.modules) if key == self.namespace or key.startswith(prefix)]:
            sys.modules.pop(name, None)
        LOGGER.debug("closed code namespace '%s'", self.namespace)
