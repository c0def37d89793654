"""
Tests for the declaration parser (Layer 1: Interface Text → Declarations).

Line format:
    [val] fun <name>(<var>; ...) returns(<var>; ...)

We need to:
1. Parse single declarations, including vectors and custom types
2. Report failures with the grammar rule that failed
3. Skip and report bad lines without aborting a run
4. Keep declarations in source order
"""

import pytest
from epistub.declaration_parser import (
    DeclarationSyntaxError,
    EmptyInterfaceWarning,
    parse_declaration,
    parse_interface_file,
    parse_lines,
    parse_text,
)
from epistub.model import Declaration, Variable
from epistub.type_lattice import Custom, Float, Integer, Primitive, Vector


def _parse(line):
    decl, _ = parse_declaration(line)
    return decl


class TestParseDeclaration:
    """Single-line parsing."""

    def test_compute_example(self):
        decl = _parse("fun compute(x: int; data: float^4) returns(y: float)")
        assert decl == Declaration(
            name="compute",
            inputs=(
                Variable("x", Primitive(Integer())),
                Variable("data", Vector(Float(), 4)),
            ),
            outputs=(Variable("y", Primitive(Float())),),
        )

    def test_val_prefix_is_discarded(self):
        assert _parse("val fun noop() returns()") == Declaration(name="noop")
        assert _parse("val fun noop() returns()") == _parse("fun noop() returns()")

    def test_empty_argument_lists(self):
        decl = _parse("fun noop() returns()")
        assert decl.inputs == ()
        assert decl.outputs == ()

    def test_spaces_inside_empty_parens(self):
        assert _parse("fun noop( ) returns( )") == Declaration(name="noop")

    def test_flexible_whitespace(self):
        tight = _parse("fun f(a:int;b:float^2)returns(c:int)")
        loose = _parse("  fun   f ( a : int ;  b :float^2 )  returns  ( c : int )")
        assert tight == loose

    def test_tabs_are_whitespace(self):
        assert _parse("fun\tf(a:\tint) returns()").inputs[0].name == "a"

    def test_custom_type_case_preserved(self):
        decl = _parse("fun steer(h: Angle) returns(c: Angle^2)")
        assert decl.inputs[0].kind == Primitive(Custom("Angle"))
        assert decl.outputs[0].kind == Vector(Custom("Angle"), 2)

    def test_reserved_types_any_case(self):
        decl = _parse("fun f(a: INT; b: Float) returns()")
        assert decl.inputs[0].kind == Primitive(Integer())
        assert decl.inputs[1].kind == Primitive(Float())

    def test_zero_length_is_primitive(self):
        assert _parse("fun f(a: int^0) returns()").inputs[0].kind == Primitive(Integer())

    def test_empty_length_is_primitive(self):
        assert _parse("fun f(a: int^) returns()").inputs[0].kind == Primitive(Integer())

    def test_variable_order_preserved(self):
        decl = _parse("fun f(c: int; a: int; b: int) returns(z: int; y: int)")
        assert [v.name for v in decl.inputs] == ["c", "a", "b"]
        assert [v.name for v in decl.outputs] == ["z", "y"]

    def test_unicode_identifiers(self):
        assert _parse("fun vitesse(é: int) returns()").inputs[0].name == "é"

    def test_returns_end_offset(self):
        line = "fun f() returns() -- trailing"
        decl, end = parse_declaration(line)
        assert decl.name == "f"
        assert line[end:] == " -- trailing"

    def test_start_offset(self):
        decl, _ = parse_declaration("xxfun f() returns()", start=2)
        assert decl.name == "f"


class TestParseErrors:
    """Failures carry position and the named rule context."""

    def test_malformed_vector_length(self):
        with pytest.raises(DeclarationSyntaxError) as exc_info:
            parse_declaration("fun bad(x: int^abc) returns(y:int)")
        err = exc_info.value
        assert err.rule == "vector length"
        assert "variable" in err.context
        assert err.context[-1] == "function declaration"
        assert err.position == len("fun bad(x: int^")

    def test_vector_branch_does_not_fall_back(self):
        with pytest.raises(DeclarationSyntaxError):
            parse_declaration("fun f(x: int^4x) returns()")

    def test_context_nesting(self):
        with pytest.raises(DeclarationSyntaxError) as exc_info:
            parse_declaration("fun f(x int) returns()")
        assert exc_info.value.context == ["variable", "argument list", "function declaration"]
        assert exc_info.value.expected == "':'"

    def test_missing_fun_keyword(self):
        with pytest.raises(DeclarationSyntaxError) as exc_info:
            parse_declaration("node f() returns()")
        assert exc_info.value.context == ["function declaration"]
        assert exc_info.value.position == 0

    def test_fun_needs_whitespace(self):
        with pytest.raises(DeclarationSyntaxError) as exc_info:
            parse_declaration("funf() returns()")
        assert exc_info.value.expected == "whitespace"

    def test_val_needs_whitespace(self):
        with pytest.raises(DeclarationSyntaxError):
            parse_declaration("valfun f() returns()")

    def test_underscore_ends_identifier(self):
        with pytest.raises(DeclarationSyntaxError):
            parse_declaration("fun f(my_var: int) returns()")

    def test_missing_returns(self):
        with pytest.raises(DeclarationSyntaxError) as exc_info:
            parse_declaration("fun f(x: int)")
        assert exc_info.value.expected == "'returns'"

    def test_empty_variable_type(self):
        with pytest.raises(DeclarationSyntaxError) as exc_info:
            parse_declaration("fun f(x: ) returns()")
        assert exc_info.value.rule == "primitive"

    def test_trailing_separator(self):
        with pytest.raises(DeclarationSyntaxError) as exc_info:
            parse_declaration("fun f(x: int;) returns()")
        assert exc_info.value.rule == "variable name"

    def test_message_names_rules(self):
        with pytest.raises(DeclarationSyntaxError) as exc_info:
            parse_declaration("fun bad(x: int^abc) returns(y:int)")
        message = str(exc_info.value)
        assert "column 16" in message
        assert "vector length" in message
        assert "function declaration" in message


class TestParseLines:
    """The skip-and-report line driver."""

    def test_one_bad_line_is_skipped(self):
        lines = [
            "fun a() returns()",
            "fun bad(x: int^abc) returns(y:int)",
            "fun c(x: int) returns(y: int)",
        ]
        result = parse_lines(lines)
        assert [d.name for d in result.declarations] == ["a", "c"]
        assert len(result.errors) == 1
        assert result.errors[0].line_number == 2
        assert result.errors[0].line == lines[1]
        assert result.errors[0].rule == "vector length"
        assert result.has_errors

    def test_blank_and_single_char_lines_ignored(self):
        result = parse_lines(["", "   ", "\n", "x", "fun a() returns()\n"])
        assert len(result.declarations) == 1
        assert result.diagnostics == []

    def test_newlines_stripped(self):
        result = parse_lines(["fun a() returns()\r\n"])
        assert result.diagnostics == []

    def test_order_matches_lines(self):
        lines = ["fun b() returns()", "fun a() returns()", "fun c() returns()"]
        assert [d.name for d in parse_lines(lines).declarations] == ["b", "a", "c"]
        assert [d.name for d in parse_lines(reversed(lines)).declarations] == ["c", "a", "b"]

    def test_trailing_input_is_a_remark(self):
        result = parse_lines(["fun a() returns() extra"])
        assert len(result.declarations) == 1
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].fatal is False
        assert result.diagnostics[0].rule == "trailing input"
        assert not result.has_errors

    def test_trailing_spaces_are_fine(self):
        assert parse_lines(["fun a() returns()   "]).diagnostics == []

    def test_empty_versus_failed(self):
        empty = parse_lines([])
        assert empty.is_empty and not empty.has_errors

        failed = parse_lines(["garbage line"])
        assert failed.is_empty and failed.has_errors

    def test_diagnostic_format_is_one_line(self):
        result = parse_lines(["fun a() returns()", "fun bad(x: int^abc) returns(y:int)"])
        text = result.errors[0].format("engine.epi")
        assert "\n" not in text
        assert text.startswith("engine.epi:2: error: ")
        assert "vector length" in text
        assert text.endswith(": fun bad(x: int^abc) returns(y:int)")

    def test_undecodable_byte_line_is_skipped(self):
        """A line that is not UTF-8 is reported and the rest still parse."""
        lines = [b"fun a() returns()\n", b"fun bad(\xff: int) returns()\n", b"fun c() returns()\n"]
        result = parse_lines(lines)
        assert [d.name for d in result.declarations] == ["a", "c"]
        assert len(result.errors) == 1
        err = result.errors[0]
        assert err.line_number == 2
        assert err.rule == "encoding"
        assert err.error.position == len("fun bad(")
        assert err.line == "fun bad(\ufffd: int) returns()"

    def test_byte_lines_decode_as_utf8(self):
        result = parse_lines(["fun vitesse(é: int) returns()\n".encode("utf-8")])
        assert result.diagnostics == []
        assert result.declarations[0].inputs[0].name == "é"

    def test_parse_text(self):
        result = parse_text("fun a() returns()\n\nfun b() returns()\n")
        assert [d.name for d in result.declarations] == ["a", "b"]


class TestParseInterfaceFile:

    def test_reads_file(self, tmp_path):
        path = tmp_path / "engine.epi"
        path.write_text("fun compute(x: int) returns(y: float)\n", encoding="utf-8")
        result = parse_interface_file(str(path))
        assert result.declarations[0].name == "compute"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Interface file not found"):
            parse_interface_file(str(tmp_path / "missing.epi"))

    def test_empty_file_warns(self, tmp_path):
        path = tmp_path / "empty.epi"
        path.write_text("\n\n", encoding="utf-8")
        with pytest.warns(EmptyInterfaceWarning):
            result = parse_interface_file(str(path))
        assert result.is_empty

    def test_invalid_utf8_line_does_not_abort(self, tmp_path):
        path = tmp_path / "engine.epi"
        path.write_bytes(
            b"fun compute(x: int) returns(y: float)\n"
            b"fun bad(\xff: int) returns()\n"
            b"fun ok() returns()\n"
        )
        result = parse_interface_file(str(path))
        assert [d.name for d in result.declarations] == ["compute", "ok"]
        assert [e.rule for e in result.errors] == ["encoding"]

    def test_directory_is_not_readable(self, tmp_path):
        with pytest.raises(OSError):
            parse_interface_file(str(tmp_path))
