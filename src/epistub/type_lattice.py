"""
Type Lattice for epistub

Every variable in an interface file has a type drawn from a small,
closed lattice:

    Type      := Integer | Float | Custom(name)
    MetaType  := Primitive(Type) | Vector(Type, length)

Classification of raw tokens lives here, not in the parser.
Adding a reserved keyword means adding one entry to RESERVED_TYPES.

ARCHITECTURAL RULE:
    These objects know nothing about C.
    Rendering to a target language belongs in backends.
"""

import re
from abc import ABC
from dataclasses import dataclass
from typing import Dict


class MalformedLengthError(ValueError):
    """Raised when a vector length suffix is not a non-negative integer."""
    pass


class Type(ABC):
    """
    Base class for element types.

    Structure only. No rendering, no validation of usage.
    """
    pass


@dataclass(frozen=True)
class Integer(Type):
    """The reserved `int` type."""


@dataclass(frozen=True)
class Float(Type):
    """The reserved `float` type."""


@dataclass(frozen=True)
class Custom(Type):
    """
    A user-defined type, referenced by name.

    Examples:
        - Custom("speed")
        - Custom("Vec3")

    Properties:
        name: Identifier exactly as written in the source (case preserved)

    IMPORTANT:
        A Custom type never holds a reserved keyword.
        Use type_of() to classify tokens.
    """

    name: str

    def __post_init__(self):
        if self.name.lower() in RESERVED_TYPES:
            raise ValueError(f"'{self.name}' is a reserved type, not a custom one")


class MetaType(ABC):
    """Shape of a variable: scalar or fixed-length array."""
    pass


@dataclass(frozen=True)
class Primitive(MetaType):
    """A single scalar of the given type."""

    type: Type


@dataclass(frozen=True)
class Vector(MetaType):
    """
    A fixed-length array.

    Properties:
        type: Element type
        length: Number of elements, always > 0

    A zero length is never a Vector; meta_type_of() yields Primitive instead.
    """

    type: Type
    length: int

    def __post_init__(self):
        if self.length <= 0:
            raise ValueError(f"Vector length must be positive, got {self.length}")


RESERVED_TYPES: Dict[str, Type] = {
    "int": Integer(),
    "float": Float(),
}

_LENGTH_RE = re.compile(r"[0-9]+")


def type_of(token: str) -> Type:
    """
    Classify an identifier token.

    Reserved keywords match case-insensitively ("INT", "Float", ...).
    Anything else becomes a Custom type holding the token verbatim.
    """
    reserved = RESERVED_TYPES.get(token.lower())
    if reserved is not None:
        return reserved
    return Custom(token)


def meta_type_of(base: Type, length_token: str) -> MetaType:
    """
    Combine an element type with a vector length suffix.

    Args:
        base: Element type
        length_token: Text after "^" (may be empty)

    Returns:
        Primitive for an empty or zero length, Vector otherwise

    Raises:
        MalformedLengthError: If length_token is non-empty and not decimal digits
    """
    if not length_token:
        return Primitive(base)

    if not _LENGTH_RE.fullmatch(length_token):
        raise MalformedLengthError(f"Invalid vector length: '{length_token}'")

    length = int(length_token)
    if length == 0:
        return Primitive(base)
    return Vector(base, length)


__all__ = [
    "Type",
    "Integer",
    "Float",
    "Custom",
    "MetaType",
    "Primitive",
    "Vector",
    "RESERVED_TYPES",
    "MalformedLengthError",
    "type_of",
    "meta_type_of",
]
