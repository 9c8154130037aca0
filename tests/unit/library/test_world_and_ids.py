import re
from unittest.mock import Mock

from support_code.library import World
from support_code.library.ids import IncrementingIdGenerator, new_run_id


class TestWorld:
    """Default world constructor"""

    def test_stores_attach_and_parameters(self):
        attach = Mock()
        world = World(attach=attach, parameters={"some": "data"})

        assert world.attach is attach
        assert world.parameters == {"some": "data"}

    def test_parameters_default_to_empty(self):
        world = World(attach=Mock())
        assert world.parameters == {}

    def test_attach_is_callable_from_world(self):
        attach = Mock()
        world = World(attach, {})

        world.attach("screenshot", "image/png")
        attach.assert_called_once_with("screenshot", "image/png")


class TestIds:
    """Run and definition ids"""

    def test_run_ids_are_unique_uuids(self):
        first, second = new_run_id(), new_run_id()
        assert first != second
        assert re.fullmatch(r"[0-9a-f-]{36}", first)

    def test_incrementing_ids(self):
        new_id = IncrementingIdGenerator("run")
        assert [new_id(), new_id(), new_id()] == ["run-0", "run-1", "run-2"]

    def test_generators_are_independent(self):
        first = IncrementingIdGenerator("a")
        second = IncrementingIdGenerator("b")
        first()
        assert second() == "b-0"
