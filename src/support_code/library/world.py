from typing import Any, Callable, Dict, Optional


class World:
    """Default per-test-case context object.

    The executor builds one for every test case, passing the attachment
    callback and the user supplied world parameters.
    """

    def __init__(self, attach: Callable, parameters: Optional[Dict[str, Any]] = None):
        self.attach = attach
        self.parameters = parameters if parameters is not None else {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(parameters={self.parameters!r})"
