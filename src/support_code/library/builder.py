import os
import re
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Optional, Pattern, Tuple, Union

from cucumber_expressions.parameter_type import ParameterType
from cucumber_expressions.parameter_type_registry import ParameterTypeRegistry

from ..core.config import DEFAULT_TIMEOUT_MS
from ..core.exceptions import InvalidArgumentError
from .definitions import (
    DefinitionOptions,
    HookCategory,
    HookDefinition,
    StepDefinition,
    capture_location,
    validate_timeout,
)
from .ids import IncrementingIdGenerator, new_run_id
from .options import ensure_callable, normalize_hook_arguments, normalize_step_arguments
from .world import World

logger = logging.getLogger(__name__)

# Hooks in these categories run most-recently-declared first
_PREPENDED_CATEGORIES = (HookCategory.AFTER_TEST_RUN, HookCategory.AFTER_TEST_CASE)


@dataclass(frozen=True)
class SupportCodeLibrary:
    """Immutable bundle of support code handed to the executor"""
    after_test_run_hook_definitions: Tuple[HookDefinition, ...]
    before_test_run_hook_definitions: Tuple[HookDefinition, ...]
    after_test_case_hook_definitions: Tuple[HookDefinition, ...]
    before_test_case_hook_definitions: Tuple[HookDefinition, ...]
    step_definitions: Tuple[StepDefinition, ...]
    default_timeout: float
    parameter_type_registry: Any
    world_constructor: Callable
    project_path: str
    run_id: str

    def hook_definitions(self, category: HookCategory) -> Tuple[HookDefinition, ...]:
        return {
            HookCategory.BEFORE_TEST_RUN: self.before_test_run_hook_definitions,
            HookCategory.AFTER_TEST_RUN: self.after_test_run_hook_definitions,
            HookCategory.BEFORE_TEST_CASE: self.before_test_case_hook_definitions,
            HookCategory.AFTER_TEST_CASE: self.after_test_case_hook_definitions,
        }[category]


@dataclass(frozen=True)
class SupportCodeMethods:
    """The registration API of one builder, as plain callables"""
    define_step: Callable
    given: Callable
    when: Callable
    then: Callable
    before: Callable
    after: Callable
    before_all: Callable
    after_all: Callable
    set_default_timeout: Callable
    set_definition_function_wrapper: Callable
    set_world_constructor: Callable
    set_parameter_type_registry: Callable
    define_parameter_type: Callable


class SupportCodeLibraryBuilder:
    """Accumulates step and hook definitions between ``reset`` and ``finalize``.

    A builder is usable straight after construction: it starts in the reset
    state for the current working directory with a fresh run id. Callers
    must serialize a full reset, register, finalize cycle per instance.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._default_config = self._get_default_config()
        self.config = {**self._default_config, **(config or {})}
        validate_timeout(self.config["default_timeout"], "Configured default timeout")
        self.reset(os.getcwd())

    def _get_default_config(self) -> Dict[str, Any]:
        return {
            "default_timeout": DEFAULT_TIMEOUT_MS,
        }

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Update configuration; takes effect at the next reset"""
        if "default_timeout" in updates:
            validate_timeout(updates["default_timeout"], "Configured default timeout")
        self.config.update(updates)
        logger.info(f"Configuration updated: {updates}")

    @property
    def methods(self) -> SupportCodeMethods:
        return SupportCodeMethods(
            define_step=self.define_step,
            given=self.given,
            when=self.when,
            then=self.then,
            before=self.before,
            after=self.after,
            before_all=self.before_all,
            after_all=self.after_all,
            set_default_timeout=self.set_default_timeout,
            set_definition_function_wrapper=self.set_definition_function_wrapper,
            set_world_constructor=self.set_world_constructor,
            set_parameter_type_registry=self.set_parameter_type_registry,
            define_parameter_type=self.define_parameter_type,
        )

    def reset(self, project_path: Union[str, os.PathLike], run_id: Optional[str] = None) -> None:
        """Discard all registrations and return every setting to its default"""
        self.project_path = os.fspath(project_path)
        self.run_id = run_id or new_run_id()
        self._new_id = IncrementingIdGenerator(self.run_id)
        self._step_definitions: List[StepDefinition] = []
        self._hook_definitions: Dict[HookCategory, Deque[HookDefinition]] = {
            category: deque() for category in HookCategory
        }
        self._default_timeout = self.config["default_timeout"]
        self._definition_function_wrapper: Optional[Callable] = None
        self._world_constructor: Callable = World
        self._parameter_type_registry = ParameterTypeRegistry()
        logger.info(f"Support code library reset for {self.project_path} (run {self.run_id})")

    # Steps

    def define_step(self, pattern: Union[str, Pattern], options: Any = None,
                    fn: Optional[Callable] = None, **kwargs):
        """Register a step definition.

        Accepts ``(pattern, fn)``, ``(pattern, options, fn)`` or, without a
        function, returns a decorator. Keyword arguments are merged into the
        options.
        """
        arguments = normalize_step_arguments(pattern, options, fn, kwargs)
        if arguments.is_decorator:
            def decorator(func):
                ensure_callable(func, "Step function")
                self._add_step(pattern, arguments.options, func)
                return func

            return decorator

        self._add_step(pattern, arguments.options, arguments.fn)
        return arguments.fn

    given = define_step
    when = define_step
    then = define_step

    def _add_step(self, pattern: Union[str, Pattern], options: DefinitionOptions, fn: Callable) -> None:
        definition = StepDefinition(
            id=self._new_id(),
            code=self._wrap(fn, options),
            unwrapped_code=fn,
            location=capture_location(self.project_path),
            options=options,
            pattern=pattern,
        )
        self._step_definitions.append(definition)
        source = pattern.pattern if isinstance(pattern, re.Pattern) else pattern
        logger.debug(f"Registered step {definition.id}: {source} ({definition.location})")

    # Hooks

    def before(self, *args, **kwargs):
        """Register a hook run before each matching test case"""
        return self._register_hook(HookCategory.BEFORE_TEST_CASE, "before", args, kwargs)

    def after(self, *args, **kwargs):
        """Register a hook run after each matching test case"""
        return self._register_hook(HookCategory.AFTER_TEST_CASE, "after", args, kwargs)

    def before_all(self, *args, **kwargs):
        """Register a hook run once before the test run"""
        return self._register_hook(HookCategory.BEFORE_TEST_RUN, "before_all", args, kwargs)

    def after_all(self, *args, **kwargs):
        """Register a hook run once after the test run"""
        return self._register_hook(HookCategory.AFTER_TEST_RUN, "after_all", args, kwargs)

    def _register_hook(self, category: HookCategory, method: str, args: tuple, kwargs: dict):
        arguments = normalize_hook_arguments(method, args, kwargs)
        if arguments.is_decorator:
            def decorator(func):
                ensure_callable(func, f"{method}() hook function")
                self._add_hook(category, arguments.options, func)
                return func

            return decorator

        self._add_hook(category, arguments.options, arguments.fn)
        return arguments.fn

    def _add_hook(self, category: HookCategory, options: DefinitionOptions, fn: Callable) -> None:
        definition = HookDefinition(
            id=self._new_id(),
            code=self._wrap(fn, options),
            unwrapped_code=fn,
            location=capture_location(self.project_path),
            options=options,
            category=category,
        )
        sequence = self._hook_definitions[category]
        if category in _PREPENDED_CATEGORIES:
            sequence.appendleft(definition)
        else:
            sequence.append(definition)
        logger.debug(f"Registered {category.value} {definition.id} ({definition.location})")

    def _wrap(self, fn: Callable, options: DefinitionOptions) -> Callable:
        wrapper = self._definition_function_wrapper
        if wrapper is None:
            return fn

        if options.wrapper_options is None:
            wrapped = wrapper(fn)
        else:
            wrapped = wrapper(fn, options.wrapper_options)

        if not callable(wrapped):
            raise InvalidArgumentError(
                f"Definition function wrapper returned {type(wrapped).__name__} instead of a callable"
            )
        return wrapped

    # Settings

    def set_default_timeout(self, milliseconds: float) -> None:
        validate_timeout(milliseconds, "Default timeout")
        self._default_timeout = milliseconds
        logger.debug(f"Default timeout set to {milliseconds}ms")

    def set_definition_function_wrapper(self, wrapper: Callable) -> None:
        """Install a transform applied to every function registered from now on"""
        ensure_callable(wrapper, "Definition function wrapper")
        self._definition_function_wrapper = wrapper

    def set_world_constructor(self, constructor: Callable) -> None:
        ensure_callable(constructor, "World constructor")
        self._world_constructor = constructor

    def set_parameter_type_registry(self, registry: Any) -> None:
        self._parameter_type_registry = registry

    def define_parameter_type(self, name: str, regexp: Any, type: Any = None,
                              transformer: Optional[Callable] = None,
                              use_for_snippets: bool = True,
                              prefer_for_regexp_match: bool = False) -> None:
        """Add a custom parameter type to the current parameter type registry"""
        if not isinstance(name, str):
            raise InvalidArgumentError(f"Parameter type name must be a string, got {name!r}")
        if not isinstance(regexp, (str, re.Pattern, list, tuple)):
            raise InvalidArgumentError(
                f"Parameter type regexp must be a string, pattern or list, got {regexp!r}"
            )
        if transformer is not None:
            ensure_callable(transformer, "Parameter type transformer")

        parameter_type = ParameterType(
            name,
            list(regexp) if isinstance(regexp, tuple) else regexp,
            type,
            transformer,
            use_for_snippets=use_for_snippets,
            prefer_for_regexp_match=prefer_for_regexp_match,
        )
        self._parameter_type_registry.define_parameter_type(parameter_type)
        logger.debug(f"Defined parameter type {name}")

    def finalize(self) -> SupportCodeLibrary:
        """Snapshot the current registrations without changing the builder"""
        library = SupportCodeLibrary(
            after_test_run_hook_definitions=tuple(self._hook_definitions[HookCategory.AFTER_TEST_RUN]),
            before_test_run_hook_definitions=tuple(self._hook_definitions[HookCategory.BEFORE_TEST_RUN]),
            after_test_case_hook_definitions=tuple(self._hook_definitions[HookCategory.AFTER_TEST_CASE]),
            before_test_case_hook_definitions=tuple(self._hook_definitions[HookCategory.BEFORE_TEST_CASE]),
            step_definitions=tuple(self._step_definitions),
            default_timeout=self._default_timeout,
            parameter_type_registry=self._parameter_type_registry,
            world_constructor=self._world_constructor,
            project_path=self.project_path,
            run_id=self.run_id,
        )
        logger.info(
            f"Finalized support code library: {len(library.step_definitions)} steps, "
            f"{sum(len(hooks) for hooks in self._hook_definitions.values())} hooks"
        )
        return library


def create_builder(config: Optional[Dict[str, Any]] = None) -> SupportCodeLibraryBuilder:
    """Create an isolated builder"""
    return SupportCodeLibraryBuilder(config)
