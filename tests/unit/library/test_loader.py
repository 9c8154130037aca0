import sys
import textwrap

import pytest

from support_code import (
    SupportCodeLoader,
    create_builder,
    current_builder,
    support_code_library_builder,
    use_builder,
)
from support_code.core.exceptions import InvalidArgumentError, SupportCodeLoadError

STEPS = """
from support_code import given, when, then


def have_items(world, count):
    world.items = int(count)


given(r"I have (\\d+) items", have_items)


@when("I add an item", {"timeout": 200})
def add_item(world):
    world.items += 1
"""

HOOKS = """
from support_code import before, after, before_all, after_all, set_default_timeout

set_default_timeout(9000)


@before_all
def start_run():
    pass


@before
def open_session(world):
    pass


@after("@cleanup")
def remove_data(world):
    pass


@after
def close_session(world):
    pass


@after_all
def stop_run():
    pass
"""


def write(path, source):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source))
    return path


class TestSupportCodeLoader:
    """Loading support files into the process-wide builder"""

    @pytest.fixture
    def project(self, tmp_path):
        write(tmp_path / "features" / "support" / "a_steps.py", STEPS)
        write(tmp_path / "features" / "support" / "b_hooks.py", HOOKS)
        return tmp_path

    @pytest.fixture
    def loader(self):
        return SupportCodeLoader(support_code_library_builder)

    def test_load_directory(self, loader, project):
        library = loader.load(["features/support"], project, "run-x")

        assert [s.pattern_source for s in library.step_definitions] == [
            r"I have (\d+) items",
            "I add an item",
        ]
        assert library.step_definitions[1].options.timeout == 200
        assert library.default_timeout == 9000
        assert [h.code.__name__ for h in library.before_test_run_hook_definitions] == ["start_run"]
        assert [h.code.__name__ for h in library.before_test_case_hook_definitions] == ["open_session"]
        assert [h.code.__name__ for h in library.after_test_case_hook_definitions] == [
            "close_session",
            "remove_data",
        ]
        assert [h.code.__name__ for h in library.after_test_run_hook_definitions] == ["stop_run"]
        assert library.run_id == "run-x"

    def test_locations_are_relative_to_project(self, loader, project):
        library = loader.load(["features/support"], project)

        step = library.step_definitions[0]
        assert step.uri == "features/support/a_steps.py"
        assert step.line == 9

    def test_reload_does_not_duplicate(self, loader, project):
        first = loader.load(["features/support"], project)
        second = loader.load(["features/support"], project)

        assert len(second.step_definitions) == len(first.step_definitions) == 2
        assert first.run_id != second.run_id

    def test_single_file_and_duplicates(self, loader, project):
        path = project / "features" / "support" / "a_steps.py"
        library = loader.load([path, "features/support/a_steps.py"], project)

        assert len(library.step_definitions) == 2
        assert library.after_test_case_hook_definitions == ()

    def test_missing_path(self, loader, project):
        with pytest.raises(SupportCodeLoadError, match="not found"):
            loader.load(["features/missing"], project)

    def test_failing_support_file(self, loader, tmp_path):
        write(tmp_path / "broken.py", "raise RuntimeError('boom')\n")

        with pytest.raises(SupportCodeLoadError) as exc_info:
            loader.load(["broken.py"], tmp_path)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_invalid_registration_in_support_file(self, loader, tmp_path):
        write(tmp_path / "bad_hook.py", "from support_code import before\nbefore('@tag', 'nope')\n")

        with pytest.raises(SupportCodeLoadError) as exc_info:
            loader.load(["bad_hook.py"], tmp_path)
        assert isinstance(exc_info.value.__cause__, InvalidArgumentError)

    def test_load_into_isolated_builder(self, project):
        global_steps = support_code_library_builder.finalize().step_definitions
        builder = create_builder()

        library = SupportCodeLoader(builder).load(["features/support"], project)

        assert len(library.step_definitions) == 2
        assert len(library.after_test_case_hook_definitions) == 2
        assert support_code_library_builder.finalize().step_definitions == global_steps
        assert current_builder() is support_code_library_builder

    def test_isolated_builders_coexist(self, project, tmp_path_factory):
        other = tmp_path_factory.mktemp("other")
        write(other / "steps.py", "from support_code import given\ngiven('x', lambda world: None)\n")

        first = SupportCodeLoader(create_builder()).load(["features/support"], project)
        second = SupportCodeLoader(create_builder()).load(["steps.py"], other)

        assert len(first.step_definitions) == 2
        assert [s.pattern for s in second.step_definitions] == ["x"]

    def test_reload_releases_previous_modules(self, loader, project):
        loader.load(["features/support"], project)
        first_modules = list(loader.module_names)
        assert len(first_modules) == 2
        assert all(name in sys.modules for name in first_modules)

        loader.load(["features/support"], project)

        assert not any(name in sys.modules for name in first_modules)
        assert len(loader.module_names) == 2


class TestActiveBuilder:
    """Routing of module-level registrations"""

    def test_defaults_to_process_wide_builder(self):
        assert current_builder() is support_code_library_builder

    def test_use_builder_routes_registrations(self):
        from support_code import before

        builder = create_builder()
        with use_builder(builder):
            assert current_builder() is builder

            @before("@routed")
            def routed(world):
                pass

        assert current_builder() is support_code_library_builder
        hooks = builder.finalize().before_test_case_hook_definitions
        assert [h.code for h in hooks] == [routed]

    def test_use_builder_restores_after_error(self):
        builder = create_builder()
        with pytest.raises(RuntimeError):
            with use_builder(builder):
                raise RuntimeError("boom")

        assert current_builder() is support_code_library_builder
