import uuid
import itertools


def new_run_id() -> str:
    """Unique identifier for one build cycle"""
    return str(uuid.uuid4())


class IncrementingIdGenerator:
    """Generates ``<prefix>-<n>`` ids, n counting up from zero"""

    def __init__(self, prefix: str):
        self.prefix = prefix
        self._counter = itertools.count()

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"
