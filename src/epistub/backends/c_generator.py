"""
C stub generator for epistub declarations.

Converts a unit name and a sequence of Declaration objects into three
C artifacts:
    - <unit>_types.h : one output struct typedef per declaration
    - <unit>.h       : one step function prototype per declaration
    - <unit>.c       : one empty step function body per declaration

Naming:
    unit "engine", declaration "compute"

        struct   : Engine__compute_out
        function : void Engine__compute_step(<inputs>, Engine__compute_out *_out)
        guards   : ENGINE_TYPES_H, ENGINE_H

Output is deterministic: same input, byte-identical files.
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from epistub.model import Declaration, Variable
from epistub.type_lattice import Custom, Float, Integer, MetaType, Primitive, Type, Vector


TYPES_TEMPLATE = """
#ifndef {unit_name}_TYPES_H
#define {unit_name}_TYPES_H

{type_definitions}

#endif /* {unit_name}_TYPES_H */
"""

HEADER_TEMPLATE = """
#ifndef {unit_name}_H
#define {unit_name}_H

#include "{types_file}"

{function_declarations}

#endif /* ! {unit_name}_H */
"""

SOURCE_TEMPLATE = """
#include "{header_file}"

{function_definitions}
"""

_SLOT_RE = re.compile(r"\{(\w+)\}")
_UNIT_NAME_RE = re.compile(r"\w+")


# =============================================================================
# NAMING
# =============================================================================

def unit_upper(unit_name: str) -> str:
    """Include-guard prefix."""
    return unit_name.upper()


def unit_lower(unit_name: str) -> str:
    """Base of the generated filenames."""
    return unit_name.lower()


def unit_capitalized(unit_name: str) -> str:
    """Symbol prefix: first character uppercased, the rest untouched."""
    return unit_name[:1].upper() + unit_name[1:]


def types_filename(unit_name: str) -> str:
    return f"{unit_lower(unit_name)}_types.h"


def header_filename(unit_name: str) -> str:
    return f"{unit_lower(unit_name)}.h"


def source_filename(unit_name: str) -> str:
    return f"{unit_lower(unit_name)}.c"


# =============================================================================
# TYPE RENDERING
# =============================================================================

def render_type(t: Type) -> str:
    """Map an element type to a C type name."""
    if isinstance(t, Integer):
        return "int"
    elif isinstance(t, Float):
        return "float"
    elif isinstance(t, Custom):
        return t.name
    raise TypeError(f"Unsupported type: {type(t)}")


def render_variable(var: Variable) -> str:
    """
    Render a variable as a C declarator.

        x: int       -> "int x"
        data: float^4 -> "float data[4]"
    """
    kind: MetaType = var.kind
    if isinstance(kind, Vector):
        return f"{render_type(kind.type)} {var.name}[{kind.length}]"
    elif isinstance(kind, Primitive):
        return f"{render_type(kind.type)} {var.name}"
    raise TypeError(f"Unsupported meta type: {type(kind)}")


# =============================================================================
# PER-DECLARATION SYMBOLS
# =============================================================================

def output_struct_name(unit_name: str, declaration: Declaration) -> str:
    return f"{unit_capitalized(unit_name)}__{declaration.name}_out"


def struct_typedef(unit_name: str, declaration: Declaration) -> str:
    """typedef struct { <field>; ... } <Unit>__<name>_out;"""
    fields = "".join(f"{render_variable(var)}; " for var in declaration.outputs)
    return f"typedef struct {{ {fields}}} {output_struct_name(unit_name, declaration)};"


def function_signature(unit_name: str, declaration: Declaration) -> str:
    """void <Unit>__<name>_step(<inputs>, <Unit>__<name>_out *_out)"""
    params = "".join(f"{render_variable(var)}, " for var in declaration.inputs)
    return (
        f"void {unit_capitalized(unit_name)}__{declaration.name}_step"
        f"({params}{output_struct_name(unit_name, declaration)} *_out)"
    )


def _fill(template: str, **slots: str) -> str:
    """Substitute `{slot}` markers in a single pass."""
    return _SLOT_RE.sub(lambda m: slots[m.group(1)], template)


# =============================================================================
# ARTIFACTS
# =============================================================================

@dataclass(frozen=True)
class GeneratedUnit:
    """
    The three C artifacts for one interface unit.

    Properties:
        unit_name: Name the artifacts were derived from
        types_header: Contents of <unit>_types.h
        header: Contents of <unit>.h
        source: Contents of <unit>.c
    """

    unit_name: str
    types_header: str
    header: str
    source: str

    @property
    def types_filename(self) -> str:
        return types_filename(self.unit_name)

    @property
    def header_filename(self) -> str:
        return header_filename(self.unit_name)

    @property
    def source_filename(self) -> str:
        return source_filename(self.unit_name)

    def artifacts(self) -> Dict[str, str]:
        """Filename -> contents, in types/header/source order."""
        return {
            self.types_filename: self.types_header,
            self.header_filename: self.header,
            self.source_filename: self.source,
        }


def generate_c(unit_name: str, declarations: Sequence[Declaration]) -> GeneratedUnit:
    """
    Generate the C artifacts for a unit.

    Args:
        unit_name: Logical name of the interface (usually the file stem)
        declarations: Parsed declarations, in source order

    Returns:
        GeneratedUnit holding the three file contents

    Raises:
        ValueError: If unit_name is not a non-empty word (letters, digits, "_"),
                    or declarations is None
    """
    if not unit_name or not _UNIT_NAME_RE.fullmatch(unit_name):
        raise ValueError(f"Invalid unit name: '{unit_name}'")
    if declarations is None:
        raise ValueError("declarations must not be None")

    typedefs: List[str] = []
    signatures: List[str] = []
    for declaration in declarations:
        typedefs.append(struct_typedef(unit_name, declaration))
        signatures.append(function_signature(unit_name, declaration))

    types_header = _fill(
        TYPES_TEMPLATE,
        unit_name=unit_upper(unit_name),
        type_definitions="".join(f"{t}\n" for t in typedefs),
    )

    header = _fill(
        HEADER_TEMPLATE,
        unit_name=unit_upper(unit_name),
        types_file=types_filename(unit_name),
        function_declarations="".join(f"{s};\n" for s in signatures),
    )

    source = _fill(
        SOURCE_TEMPLATE,
        header_file=header_filename(unit_name),
        function_definitions="".join(f"{s}\n{{\n\n}}\n\n" for s in signatures),
    )

    return GeneratedUnit(
        unit_name=unit_name,
        types_header=types_header,
        header=header,
        source=source,
    )


def save_c_files(
    generated: GeneratedUnit,
    output_dir: Optional[str] = None,
    overwrite: bool = False,
) -> List[str]:
    """
    Write the three artifacts to disk.

    Args:
        generated: Output of generate_c()
        output_dir: Target directory (defaults to the current directory),
                    created if missing
        overwrite: Replace files that already exist

    Returns:
        Paths written, in types/header/source order

    Raises:
        FileExistsError: If a target exists and overwrite is False.
                         Nothing is written in that case.
        NotADirectoryError: If output_dir exists but is not a directory
        OSError: If the directory or files cannot be written
    """
    output_dir = output_dir or os.curdir
    targets = {
        os.path.join(output_dir, filename): contents
        for filename, contents in generated.artifacts().items()
    }

    if not overwrite:
        existing = [path for path in targets if os.path.exists(path)]
        if existing:
            raise FileExistsError(f"Refusing to overwrite existing files: {existing}")

    if os.path.exists(output_dir) and not os.path.isdir(output_dir):
        raise NotADirectoryError(f"Output path is not a directory: {output_dir}")
    os.makedirs(output_dir, exist_ok=True)

    for path, contents in targets.items():
        with open(path, 'w', encoding='utf-8') as f:
            f.write(contents)

    return list(targets)


__all__ = [
    "TYPES_TEMPLATE",
    "HEADER_TEMPLATE",
    "SOURCE_TEMPLATE",
    "GeneratedUnit",
    "generate_c",
    "save_c_files",
    "render_type",
    "render_variable",
    "struct_typedef",
    "function_signature",
    "output_struct_name",
    "unit_upper",
    "unit_lower",
    "unit_capitalized",
]
