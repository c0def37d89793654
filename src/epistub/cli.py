"""
Command line front end for epistub.

    epistub engine.epi                 # writes engine_types.h, engine.h, engine.c
    epistub engine.txt --force         # accept a non-.epi file
    epistub engine.epi -o build/ --overwrite
    epistub engine.epi --dump yaml     # print parsed declarations only

Malformed lines are reported on stderr and skipped; generation still runs.
"""
import argparse
import os
import sys
from typing import List, Optional

from epistub.backends.c_generator import generate_c, save_c_files
from epistub.declaration_parser import INTERFACE_EXTENSION, parse_interface_file
from epistub.serialization import declarations_to_json, declarations_to_yaml


class InterfaceExtensionError(ValueError):
    """Raised when the input file does not carry the interface extension."""
    pass


def validate_extension(filepath: str, force: bool = False) -> None:
    """Require the `.epi` extension unless forced."""
    if force:
        return
    ext = os.path.splitext(filepath)[1].lstrip('.')
    if ext != INTERFACE_EXTENSION:
        raise InterfaceExtensionError(
            f"Invalid file extension for {filepath} (expected .{INTERFACE_EXTENSION}, use --force to override)"
        )


def unit_name_for(filepath: str) -> str:
    """Unit name is the file stem."""
    return os.path.splitext(os.path.basename(filepath))[0]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='epistub',
        description='Generate C stubs from a Heptagon interface file',
    )
    parser.add_argument('file', help='interface file (.epi)')
    parser.add_argument('-f', '--force', action='store_true',
                        help='parse the file even without the .epi extension')
    parser.add_argument('-o', '--output-dir', default=None,
                        help='directory for the generated files (default: current directory)')
    parser.add_argument('--overwrite', action='store_true',
                        help='replace generated files that already exist')
    parser.add_argument('--dump', choices=['json', 'yaml'], default=None,
                        help='print the parsed declarations instead of generating C')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        validate_extension(args.file, force=args.force)
    except InterfaceExtensionError as e:
        parser.error(str(e))

    try:
        result = parse_interface_file(args.file)
    except OSError as e:
        parser.error(str(e))

    for diagnostic in result.diagnostics:
        print(diagnostic.format(args.file), file=sys.stderr)

    if args.dump == 'json':
        print(declarations_to_json(result.declarations))
        return 0
    if args.dump == 'yaml':
        print(declarations_to_yaml(result.declarations), end='')
        return 0

    unit_name = unit_name_for(args.file)
    try:
        generated = generate_c(unit_name, result.declarations)
    except ValueError as e:
        parser.error(str(e))

    try:
        written = save_c_files(generated, args.output_dir, overwrite=args.overwrite)
    except FileExistsError as e:
        print(f"epistub: error: {e} (use --overwrite to replace them)", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"epistub: error: cannot write output: {e}", file=sys.stderr)
        return 1

    skipped = len(result.errors)
    print(f"Parsed {len(result.declarations)} declaration(s) from {args.file}"
          + (f", skipped {skipped} line(s)" if skipped else ""))
    for path in written:
        print(f"  wrote {path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
