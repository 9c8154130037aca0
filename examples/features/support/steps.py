"""Support code for the shopping cart example"""
import functools
import logging

from support_code import (
    World,
    after,
    before,
    before_all,
    define_parameter_type,
    given,
    set_definition_function_wrapper,
    set_world_constructor,
    then,
    when,
)

logger = logging.getLogger(__name__)


class CartWorld(World):
    def __init__(self, attach, parameters=None):
        super().__init__(attach, parameters)
        self.cart = []


def log_calls(fn):
    @functools.wraps(fn)
    def wrapped(*args, **kwargs):
        logger.info(f"Running {fn.__name__}")
        return fn(*args, **kwargs)

    return wrapped


set_world_constructor(CartWorld)
set_definition_function_wrapper(log_calls)
define_parameter_type("fruit", r"apple|banana|cherry", str)


@before_all
def seed_catalog():
    pass


@before("@empty-cart")
def clear_cart(world):
    world.cart.clear()


@after({"tags": "@screenshots", "name": "capture cart"})
def capture_cart(world):
    world.attach(repr(world.cart), "text/plain")


@given("the cart is empty")
def empty_cart(world):
    world.cart = []


@when(r"I add (\d+) (apple|banana|cherry)s?", {"timeout": 1000})
def add_items(world, count, fruit):
    world.cart.extend([fruit] * int(count))


@then(r"the cart holds (\d+) items")
def cart_size(world, count):
    assert len(world.cart) == int(count)
