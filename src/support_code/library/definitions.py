import os
import re
import inspect
import numbers
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Pattern, Union
from dataclasses import dataclass, field

from ..core.exceptions import InvalidArgumentError

_PACKAGE_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

_OPTION_KEYS = ("tags", "timeout", "name", "wrapper_options")


class HookCategory(Enum):
    """Lifecycle point a hook definition is bound to"""
    BEFORE_TEST_RUN = "beforeTestRunHook"
    AFTER_TEST_RUN = "afterTestRunHook"
    BEFORE_TEST_CASE = "beforeTestCaseHook"
    AFTER_TEST_CASE = "afterTestCaseHook"


@dataclass(frozen=True)
class SourceLocation:
    """File and line that registered a definition"""
    uri: str
    line: int

    def __str__(self) -> str:
        return f"{self.uri}:{self.line}"


@dataclass(frozen=True)
class DefinitionOptions:
    """Normalized options shared by step and hook definitions"""
    tags: Optional[str] = None
    timeout: Optional[float] = None
    name: Optional[str] = None
    wrapper_options: Any = None
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_value(cls, value: Any) -> "DefinitionOptions":
        """Build options from None, a tag expression, a mapping or existing options"""
        if value is None:
            return cls()
        if isinstance(value, DefinitionOptions):
            return value
        if isinstance(value, str):
            return cls.from_mapping({"tags": value})
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        raise InvalidArgumentError(
            f"Options must be a tag expression or a mapping, got {type(value).__name__}"
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DefinitionOptions":
        tags = values.get("tags")
        if tags is not None and not isinstance(tags, str):
            raise InvalidArgumentError(f"Option 'tags' must be a string, got {tags!r}")
        # An empty tag expression filters nothing
        if tags == "":
            tags = None

        timeout = values.get("timeout")
        if timeout is not None:
            validate_timeout(timeout, "Option 'timeout'")

        name = values.get("name")
        if name is not None and not isinstance(name, str):
            raise InvalidArgumentError(f"Option 'name' must be a string, got {name!r}")

        extra = {k: v for k, v in values.items() if k not in _OPTION_KEYS}
        return cls(
            tags=tags,
            timeout=timeout,
            name=name,
            wrapper_options=values.get("wrapper_options"),
            extra=MappingProxyType(extra),
        )


@dataclass(frozen=True)
class Definition:
    """Base shape of every registered definition.

    ``code`` is what the executor calls; ``unwrapped_code`` is always the
    function the user registered. They are the same object when no
    definition function wrapper was installed at registration time.
    """
    id: str
    code: Callable
    unwrapped_code: Callable
    location: SourceLocation
    options: DefinitionOptions

    @property
    def uri(self) -> str:
        return self.location.uri

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def is_wrapped(self) -> bool:
        return self.code is not self.unwrapped_code

    def effective_timeout(self, default_timeout: float) -> float:
        """Timeout for this definition, falling back to the library default"""
        if self.options.timeout is not None:
            return self.options.timeout
        return default_timeout


@dataclass(frozen=True)
class StepDefinition(Definition):
    """A step pattern paired with its implementation"""
    pattern: Union[str, Pattern]

    @property
    def pattern_source(self) -> str:
        if isinstance(self.pattern, re.Pattern):
            return self.pattern.pattern
        return self.pattern


@dataclass(frozen=True)
class HookDefinition(Definition):
    """A function bound to a test-run or test-case lifecycle point"""
    category: HookCategory

    @property
    def applies_to_all_test_cases(self) -> bool:
        return self.options.tags is None


def validate_timeout(value: Any, label: str = "Timeout") -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(f"{label} must be a number of milliseconds, got {value!r}")
    if value < 0:
        raise InvalidArgumentError(f"{label} must not be negative, got {value!r}")


def capture_location(project_path: str) -> SourceLocation:
    """Locate the first caller frame outside this package"""
    frame = inspect.currentframe()
    try:
        while frame is not None and _is_internal(frame.f_code.co_filename):
            frame = frame.f_back
        if frame is None:
            return SourceLocation(uri="<unknown>", line=0)
        return SourceLocation(
            uri=_relative_uri(frame.f_code.co_filename, project_path),
            line=frame.f_lineno,
        )
    finally:
        del frame


def _is_internal(filename: str) -> bool:
    return os.path.abspath(filename).startswith(_PACKAGE_ROOT + os.sep)


def _relative_uri(filename: str, project_path: str) -> str:
    if filename.startswith("<"):
        return filename
    path = Path(filename).resolve()
    try:
        return path.relative_to(Path(project_path).resolve()).as_posix()
    except ValueError:
        return path.as_posix()
