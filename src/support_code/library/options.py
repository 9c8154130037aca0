"""
Normalization of the call shapes accepted by the registration methods.

Hooks accept ``(fn)``, ``(tag_expression, fn)`` and ``(options, fn)``, plus
decorator forms where the function is omitted. Every shape is reduced to one
``RegistrationArguments`` before the builder touches its sequences.
"""

import re
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from dataclasses import dataclass

from ..core.exceptions import InvalidArgumentError
from .definitions import DefinitionOptions


class ArgumentShape(Enum):
    """Kind of value found in the leading positional argument"""
    FUNCTION = "function"
    TAG_EXPRESSION = "tag_expression"
    OPTIONS = "options"


@dataclass(frozen=True)
class RegistrationArguments:
    """Canonical (options, fn) pair; fn is None for the decorator forms"""
    options: DefinitionOptions
    fn: Optional[Callable] = None

    @property
    def is_decorator(self) -> bool:
        return self.fn is None


def classify(value: Any) -> ArgumentShape:
    if isinstance(value, str):
        return ArgumentShape.TAG_EXPRESSION
    if isinstance(value, (Mapping, DefinitionOptions)):
        return ArgumentShape.OPTIONS
    if callable(value):
        return ArgumentShape.FUNCTION
    raise InvalidArgumentError(
        f"Expected a function, a tag expression or an options mapping, got {type(value).__name__}"
    )


def normalize_hook_arguments(method: str, args: Tuple[Any, ...],
                             kwargs: Dict[str, Any]) -> RegistrationArguments:
    """Reduce any accepted hook call shape to a RegistrationArguments"""
    if len(args) > 2:
        raise InvalidArgumentError(
            f"{method}() takes at most 2 positional arguments ({len(args)} given)"
        )

    if not args:
        if not kwargs:
            raise InvalidArgumentError(f"{method}() requires a hook function")
        return RegistrationArguments(options=merge_options(None, kwargs))

    shape = classify(args[0])

    if len(args) == 1:
        if shape is ArgumentShape.FUNCTION:
            return RegistrationArguments(options=merge_options(None, kwargs), fn=args[0])
        return RegistrationArguments(options=merge_options(args[0], kwargs))

    if shape is ArgumentShape.FUNCTION:
        raise InvalidArgumentError(
            f"{method}() expects a tag expression or options before the hook function"
        )
    fn = args[1]
    ensure_callable(fn, f"{method}() hook function")
    return RegistrationArguments(options=merge_options(args[0], kwargs), fn=fn)


def normalize_step_arguments(pattern: Any, options: Any, fn: Optional[Callable],
                             kwargs: Dict[str, Any]) -> RegistrationArguments:
    """Reduce ``(pattern, [options], fn)`` to a RegistrationArguments"""
    if not isinstance(pattern, (str, re.Pattern)):
        raise InvalidArgumentError(
            f"Step pattern must be a string or a compiled regular expression, got {type(pattern).__name__}"
        )

    # define_step(pattern, fn)
    if fn is None and options is not None and callable(options) \
            and not isinstance(options, (Mapping, DefinitionOptions)):
        options, fn = None, options

    if fn is not None:
        ensure_callable(fn, "Step function")
    if options is not None and not isinstance(options, (Mapping, DefinitionOptions)):
        raise InvalidArgumentError(
            f"Step options must be a mapping, got {type(options).__name__}"
        )
    return RegistrationArguments(options=merge_options(options, kwargs), fn=fn)


def merge_options(base: Any, overrides: Dict[str, Any]) -> DefinitionOptions:
    """Combine positional options with keyword overrides"""
    if not overrides:
        return DefinitionOptions.from_value(base)

    if base is None:
        values = {}
    elif isinstance(base, str):
        values = {"tags": base}
    elif isinstance(base, DefinitionOptions):
        values = {
            "tags": base.tags,
            "timeout": base.timeout,
            "name": base.name,
            "wrapper_options": base.wrapper_options,
            **base.extra,
        }
    else:
        values = dict(base)
    values.update(overrides)
    return DefinitionOptions.from_mapping(values)


def ensure_callable(value: Any, label: str) -> None:
    if not callable(value):
        raise InvalidArgumentError(f"{label} must be callable, got {type(value).__name__}")
