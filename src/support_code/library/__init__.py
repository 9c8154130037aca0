from .builder import (
    SupportCodeLibrary,
    SupportCodeLibraryBuilder,
    SupportCodeMethods,
    create_builder,
)
from .definitions import (
    Definition,
    DefinitionOptions,
    HookCategory,
    HookDefinition,
    SourceLocation,
    StepDefinition,
)
from .loader import SupportCodeLoader
from .world import World

__all__ = [
    'SupportCodeLibrary',
    'SupportCodeLibraryBuilder',
    'SupportCodeMethods',
    'create_builder',
    'Definition',
    'DefinitionOptions',
    'HookCategory',
    'HookDefinition',
    'SourceLocation',
    'StepDefinition',
    'SupportCodeLoader',
    'World',
]
