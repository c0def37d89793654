"""
Declaration Parser for epistub (Layer 1: Interface Text → Declarations).

Converts Heptagon-style interface lines into Declaration objects.

Line Format:
    [val] fun <name>(<var>; <var>; ...) returns(<var>; ...)

    var  := <name> : <type>[^<length>]

Examples:
    fun compute(x: int; data: float^4) returns(y: float)
    val fun noop() returns()

Syntax Notes:
    - Identifiers are alphanumeric only (no "_" or "-")
    - "int" and "float" are reserved, in any letter case
    - "^0" (or a bare "^") means a scalar, not an empty vector
    - Whitespace between tokens is free
"""

import os
import warnings
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from epistub.model import Declaration, Variable
from epistub.type_lattice import MalformedLengthError, MetaType, meta_type_of, type_of


INTERFACE_EXTENSION = "epi"

_SPACES = " \t"


class DeclarationSyntaxError(Exception):
    """
    Raised when a line does not match the declaration grammar.

    Properties:
        line: The text being parsed
        position: 0-based offset where matching failed
        expected: What the parser wanted at that position
        context: Names of the grammar rules active at the failure,
                 innermost first (e.g. ["variable", "argument list",
                 "function declaration"])
    """

    def __init__(self, line: str, position: int, expected: str, rule: Optional[str] = None):
        self.line = line
        self.position = position
        self.expected = expected
        self.context: List[str] = [rule] if rule else []
        super().__init__(line, position, expected)

    @property
    def rule(self) -> Optional[str]:
        """Innermost named rule that failed."""
        return self.context[0] if self.context else None

    def __str__(self) -> str:
        where = f"at column {self.position + 1}"
        if self.context:
            where += " in " + " > ".join(self.context)
        return f"expected {self.expected} {where}"


class EmptyInterfaceWarning(UserWarning):
    """Issued when an interface file yields no declarations at all."""
    pass


@contextmanager
def _rule(name: str):
    """Record `name` on any syntax error escaping the block."""
    try:
        yield
    except DeclarationSyntaxError as e:
        e.context.append(name)
        raise


def _skip_spaces(line: str, pos: int) -> int:
    while pos < len(line) and line[pos] in _SPACES:
        pos += 1
    return pos


def _require_spaces(line: str, pos: int) -> int:
    end = _skip_spaces(line, pos)
    if end == pos:
        raise DeclarationSyntaxError(line, pos, "whitespace")
    return end


def _expect(line: str, pos: int, literal: str) -> int:
    if not line.startswith(literal, pos):
        raise DeclarationSyntaxError(line, pos, f"'{literal}'")
    return pos + len(literal)


def _take_alnum(line: str, pos: int) -> Tuple[str, int]:
    """Scan a (possibly empty) run of alphanumeric characters."""
    end = pos
    while end < len(line) and line[end].isalnum():
        end += 1
    return line[pos:end], end


def _parse_identifier(line: str, pos: int, rule: str) -> Tuple[str, int]:
    """Parse one-or-more alphanumeric characters."""
    ident, end = _take_alnum(line, pos)
    if not ident:
        raise DeclarationSyntaxError(line, pos, "identifier", rule)
    return ident, end


def _parse_variable_type(line: str, pos: int) -> Tuple[MetaType, int]:
    """Parse `type^length` or a bare `type`."""
    with _rule("variable type"):
        token, pos = _parse_identifier(line, pos, "primitive")
        base = type_of(token)

        # Vector branch is chosen by lookahead on "^" and never falls back
        if pos < len(line) and line[pos] == "^":
            length_start = pos + 1
            length_token, pos = _take_alnum(line, length_start)
            try:
                return meta_type_of(base, length_token), pos
            except MalformedLengthError:
                raise DeclarationSyntaxError(
                    line, length_start, "non-negative integer", "vector length"
                ) from None

        return meta_type_of(base, ""), pos


def _parse_variable(line: str, pos: int) -> Tuple[Variable, int]:
    """Parse `name : type`."""
    with _rule("variable"):
        name, pos = _parse_identifier(line, pos, "variable name")
        pos = _skip_spaces(line, pos)
        pos = _expect(line, pos, ":")
        pos = _skip_spaces(line, pos)
        kind, pos = _parse_variable_type(line, pos)
        return Variable(name=name, kind=kind), pos


def _parse_argument_list(line: str, pos: int) -> Tuple[List[Variable], int]:
    """Parse `( var ; var ; ... )`, including the parentheses."""
    with _rule("argument list"):
        pos = _expect(line, pos, "(")
        pos = _skip_spaces(line, pos)

        variables: List[Variable] = []
        if pos < len(line) and line[pos] == ")":
            return variables, pos + 1

        while True:
            var, pos = _parse_variable(line, pos)
            variables.append(var)
            pos = _skip_spaces(line, pos)
            if pos < len(line) and line[pos] == ";":
                pos = _skip_spaces(line, pos + 1)
                continue
            break

        pos = _expect(line, pos, ")")
        return variables, pos


def parse_declaration(line: str, start: int = 0) -> Tuple[Declaration, int]:
    """
    Parse one declaration from a line of interface text.

    Args:
        line: Interface text
        start: Offset to start parsing at

    Returns:
        (Declaration, offset of the first unconsumed character)
        Trailing text is left for the caller to judge.

    Raises:
        DeclarationSyntaxError: If the text does not match the grammar
    """
    with _rule("function declaration"):
        pos = _skip_spaces(line, start)

        # Optional legacy "val" marker, discarded
        if line.startswith("val", pos):
            after = _skip_spaces(line, pos + 3)
            if after > pos + 3:
                pos = after

        pos = _expect(line, pos, "fun")
        pos = _require_spaces(line, pos)
        name, pos = _parse_identifier(line, pos, "function name")
        pos = _skip_spaces(line, pos)
        inputs, pos = _parse_argument_list(line, pos)
        pos = _skip_spaces(line, pos)
        pos = _expect(line, pos, "returns")
        pos = _skip_spaces(line, pos)
        outputs, pos = _parse_argument_list(line, pos)

    return Declaration(name=name, inputs=tuple(inputs), outputs=tuple(outputs)), pos


@dataclass
class Diagnostic:
    """
    A problem found on one source line.

    Properties:
        line_number: 1-based line number
        line: The offending source text
        error: Structured syntax error
        fatal: True if the line was dropped, False if it was kept with a remark
    """

    line_number: int
    line: str
    error: DeclarationSyntaxError
    fatal: bool = True

    @property
    def rule(self) -> Optional[str]:
        return self.error.rule

    def format(self, source: str = "<input>") -> str:
        """Render as one line: `source:line: error: message: offending line`."""
        severity = "error" if self.fatal else "warning"
        return f"{source}:{self.line_number}: {severity}: {self.error}: {self.line.strip()}"


@dataclass
class ParseResult:
    """Declarations collected from a run plus per-line diagnostics."""

    declarations: List[Declaration] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        """Diagnostics for lines that were dropped."""
        return [d for d in self.diagnostics if d.fatal]

    @property
    def has_errors(self) -> bool:
        return any(d.fatal for d in self.diagnostics)

    @property
    def is_empty(self) -> bool:
        """No usable declaration was found."""
        return not self.declarations


def _decode_line(raw: bytes) -> str:
    """Decode one UTF-8 line, raising a syntax error at the first bad byte."""
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as e:
        text = raw.decode('utf-8', errors='replace').rstrip("\r\n")
        position = len(raw[:e.start].decode('utf-8', errors='replace'))
        raise DeclarationSyntaxError(text, position, "valid UTF-8", "encoding") from None


def parse_lines(lines: Iterable[Union[str, bytes]]) -> ParseResult:
    """
    Parse every non-blank line, skipping and reporting malformed ones.

    A bad line never aborts the run; it only shortens the result.

    Args:
        lines: Source lines (trailing newlines are ignored).
               Byte lines are decoded as UTF-8 one at a time, so an
               undecodable line is reported like any other bad line.

    Returns:
        ParseResult with declarations in source order
    """
    result = ParseResult()

    for line_number, raw in enumerate(lines, start=1):
        if isinstance(raw, bytes):
            try:
                raw = _decode_line(raw)
            except DeclarationSyntaxError as e:
                result.diagnostics.append(Diagnostic(line_number, e.line, e))
                continue

        line = raw.rstrip("\r\n")
        if len(line.strip()) <= 1:
            continue

        try:
            declaration, end = parse_declaration(line)
        except DeclarationSyntaxError as e:
            result.diagnostics.append(Diagnostic(line_number, line, e))
            continue

        result.declarations.append(declaration)

        rest = _skip_spaces(line, end)
        if rest < len(line):
            remark = DeclarationSyntaxError(line, rest, "end of line", "trailing input")
            result.diagnostics.append(Diagnostic(line_number, line, remark, fatal=False))

    return result


def parse_text(text: str) -> ParseResult:
    """Parse a whole interface document held in a string."""
    return parse_lines(text.splitlines())


def parse_interface_file(filepath: str) -> ParseResult:
    """
    Parse an interface file.

    Args:
        filepath: Path to the interface file (UTF-8, checked per line)

    Returns:
        ParseResult

    Raises:
        FileNotFoundError: If file doesn't exist
        OSError: If the file cannot be read (directory, permissions)
    """
    try:
        with open(filepath, 'rb') as f:
            result = parse_lines(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Interface file not found: {filepath}")

    if result.is_empty:
        warnings.warn(
            f"No declarations found in {os.path.basename(filepath)}",
            EmptyInterfaceWarning,
        )

    return result


__all__ = [
    "INTERFACE_EXTENSION",
    "DeclarationSyntaxError",
    "EmptyInterfaceWarning",
    "Diagnostic",
    "ParseResult",
    "parse_declaration",
    "parse_lines",
    "parse_text",
    "parse_interface_file",
]
