import os
import sys
import logging
import itertools
import importlib.util
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..core.exceptions import SupportCodeLoadError
from .active import use_builder
from .builder import SupportCodeLibrary, SupportCodeLibraryBuilder

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

_load_counter = itertools.count(1)


class SupportCodeLoader:
    """Imports support code files into a builder and finalizes it.

    While the files are imported, the module-level registration functions
    (``support_code.given``, ``support_code.before``...) write into this
    loader's builder.
    """

    def __init__(self, builder: SupportCodeLibraryBuilder):
        self.builder = builder
        self.module_names: List[str] = []

    def load(self, paths: Iterable[PathLike], project_path: PathLike,
             run_id: Optional[str] = None) -> SupportCodeLibrary:
        """Reset the builder, import every support file and finalize"""
        project_root = Path(project_path)
        files = self.expand_paths(paths, project_root)

        self._unload_modules()
        self.builder.reset(project_root, run_id)
        load_number = next(_load_counter)
        with use_builder(self.builder):
            for index, file_path in enumerate(files):
                self._import_file(file_path, f"_support_code_{load_number}_{index}")

        logger.info(f"Loaded {len(files)} support file(s) from {project_root}")
        return self.builder.finalize()

    def expand_paths(self, paths: Iterable[PathLike], project_root: Path) -> List[Path]:
        """Resolve paths against the project and expand directories to their .py files"""
        files: List[Path] = []
        for raw in paths:
            path = Path(raw)
            if not path.is_absolute():
                path = project_root / path

            if path.is_dir():
                files.extend(sorted(path.rglob("*.py")))
            elif path.is_file():
                files.append(path)
            else:
                raise SupportCodeLoadError(f"Support code path not found: {path}")

        # Keep the first occurrence of files listed more than once
        unique: List[Path] = []
        seen = set()
        for file_path in files:
            resolved = file_path.resolve()
            if resolved not in seen:
                seen.add(resolved)
                unique.append(file_path)
        return unique

    def _unload_modules(self) -> None:
        for module_name in self.module_names:
            sys.modules.pop(module_name, None)
        self.module_names = []

    def _import_file(self, file_path: Path, module_name: str) -> None:
        logger.debug(f"Importing support file {file_path}")
        spec = importlib.util.spec_from_file_location(module_name, file_path)
        if spec is None or spec.loader is None:
            raise SupportCodeLoadError(f"Cannot import support file: {file_path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise SupportCodeLoadError(f"Failed to load support file {file_path}: {e}") from e
        self.module_names.append(module_name)
