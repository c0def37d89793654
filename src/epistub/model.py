"""
Core Interface Model Objects

Defines the data structures produced by the declaration parser and
consumed by the code generators:
    - Variables (typed, named parameters)
    - Declarations (one function-like interface entry)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about C or any other target language
        - Are immutable once built
        - Are fully serializable
        - Preserve the order in which variables were written
"""

from dataclasses import dataclass, field
from typing import Tuple

from .type_lattice import MetaType


@dataclass(frozen=True)
class Variable:
    """
    A named, typed slot in a declaration.

    Properties:
        name: Identifier (non-empty, alphanumeric)
        kind: Primitive or Vector shape of the variable

    Example:
        data: float^4

        Variable(name="data", kind=Vector(Float(), 4))
    """

    name: str
    kind: MetaType

    def __post_init__(self):
        if not self.name or not self.name.isalnum():
            raise ValueError(f"Invalid variable name: '{self.name}'")


@dataclass(frozen=True)
class Declaration:
    """
    One function-like interface entry.

    Example:
        fun compute(x: int; data: float^4) returns(y: float)

    Becomes:
        Declaration(
            name="compute",
            inputs=(Variable("x", Primitive(Integer())),
                    Variable("data", Vector(Float(), 4))),
            outputs=(Variable("y", Primitive(Float())),),
        )

    Properties:
        name: Declaration identifier (non-empty, alphanumeric)
        inputs: Input variables, in source order
        outputs: Output variables, in source order

    IMPORTANT:
        Order is significant. It determines parameter order in generated
        signatures and field order in generated structs.
        Lists passed in are frozen into tuples.
    """

    name: str
    inputs: Tuple[Variable, ...] = field(default_factory=tuple)
    outputs: Tuple[Variable, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.name or not self.name.isalnum():
            raise ValueError(f"Invalid declaration name: '{self.name}'")
        # frozen dataclass: bypass __setattr__ to normalize sequences
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))


__all__ = ["Variable", "Declaration"]
