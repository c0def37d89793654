"""
Example interface for demos and tests.

A small "engine" unit with a scalar step, a vector step, a custom-typed
step and an argument-less reset, written in the .epi line format.
"""
from typing import List

from epistub.declaration_parser import parse_text
from epistub.model import Declaration


EXAMPLE_UNIT_NAME = "engine"

EXAMPLE_INTERFACE = """\
fun compute(x: int; data: float^4) returns(y: float)
fun integrate(dt: float; samples: float^16) returns(total: float; count: int)
val fun steer(heading: Angle; gains: float^3) returns(command: Angle)
val fun reset() returns()
"""


def build_example_declarations() -> List[Declaration]:
    result = parse_text(EXAMPLE_INTERFACE)
    return result.declarations
