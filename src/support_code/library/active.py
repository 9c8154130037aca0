"""
The builder that module-level registration functions write into.

Support files call ``support_code.given`` and friends. Those functions look
up the active builder on every call: the process-wide builder by default, or
whichever builder a loader installed with ``use_builder`` while importing.
"""

import contextvars
import dataclasses
from contextlib import contextmanager
from typing import Callable, Iterator

from .builder import SupportCodeLibraryBuilder, SupportCodeMethods, create_builder

# Process-wide builder that support files register into
support_code_library_builder = create_builder()

_active_builder: contextvars.ContextVar = contextvars.ContextVar(
    "support_code_active_builder", default=support_code_library_builder
)


def current_builder() -> SupportCodeLibraryBuilder:
    return _active_builder.get()


@contextmanager
def use_builder(builder: SupportCodeLibraryBuilder) -> Iterator[SupportCodeLibraryBuilder]:
    """Route module-level registrations to ``builder`` for the duration of the block"""
    token = _active_builder.set(builder)
    try:
        yield builder
    finally:
        _active_builder.reset(token)


def _delegate(name: str) -> Callable:
    def method(*args, **kwargs):
        return getattr(current_builder(), name)(*args, **kwargs)

    method.__name__ = name
    method.__qualname__ = name
    method.__doc__ = getattr(SupportCodeLibraryBuilder, name).__doc__
    return method


methods = SupportCodeMethods(**{
    field.name: _delegate(field.name) for field in dataclasses.fields(SupportCodeMethods)
})
