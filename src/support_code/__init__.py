"""
Support Code Library - registry of step definitions and hooks for BDD test runs
"""

__version__ = "0.1.0"
__author__ = "Support Code Library Contributors"

from .core import (
    ConfigManager,
    SupportCodeError,
    InvalidArgumentError,
    ConfigurationError,
    SupportCodeLoadError,
)
from .library import (
    SupportCodeLibrary,
    SupportCodeLibraryBuilder,
    SupportCodeLoader,
    DefinitionOptions,
    HookCategory,
    HookDefinition,
    StepDefinition,
    World,
    create_builder,
)
from .library.active import (
    current_builder,
    methods as _methods,
    support_code_library_builder,
    use_builder,
)

define_step = _methods.define_step
given = _methods.given
when = _methods.when
then = _methods.then
before = _methods.before
after = _methods.after
before_all = _methods.before_all
after_all = _methods.after_all
set_default_timeout = _methods.set_default_timeout
set_definition_function_wrapper = _methods.set_definition_function_wrapper
set_world_constructor = _methods.set_world_constructor
set_parameter_type_registry = _methods.set_parameter_type_registry
define_parameter_type = _methods.define_parameter_type


__all__ = [
    # Builder
    "support_code_library_builder",
    "current_builder",
    "use_builder",
    "create_builder",
    "SupportCodeLibrary",
    "SupportCodeLibraryBuilder",
    "SupportCodeLoader",

    # Definitions
    "DefinitionOptions",
    "HookCategory",
    "HookDefinition",
    "StepDefinition",
    "World",

    # Registration API
    "define_step",
    "given",
    "when",
    "then",
    "before",
    "after",
    "before_all",
    "after_all",
    "set_default_timeout",
    "set_definition_function_wrapper",
    "set_world_constructor",
    "set_parameter_type_registry",
    "define_parameter_type",

    # Configuration and errors
    "ConfigManager",
    "SupportCodeError",
    "InvalidArgumentError",
    "ConfigurationError",
    "SupportCodeLoadError",
]
