#!/usr/bin/env python3
"""
Load the example support code and print what an executor would receive.
Run from the examples directory: python basic_usage.py
"""

import logging
from pathlib import Path

from support_code import SupportCodeLoader, support_code_library_builder


def main():
    logging.basicConfig(level=logging.INFO)
    project = Path(__file__).parent

    library = SupportCodeLoader(support_code_library_builder).load(
        ["features/support"], project,
    )

    print(f"Run {library.run_id}, default timeout {library.default_timeout}ms")
    for step in library.step_definitions:
        wrapped = " (wrapped)" if step.is_wrapped else ""
        print(f"  step {step.pattern_source}{wrapped} at {step.location}")

    for hook in library.before_test_case_hook_definitions + library.after_test_case_hook_definitions:
        print(f"  {hook.category.value} {hook.unwrapped_code.__name__} tags={hook.options.tags}")

    world = library.world_constructor(attach=print, parameters={})
    step = library.step_definitions[1]
    step.code(world, "3", "apple")
    print(f"  cart: {world.cart}")


if __name__ == "__main__":
    main()
