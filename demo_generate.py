#!/usr/bin/env python3
"""
Demo: Generate C stubs from an example interface.

Parses the bundled "engine" interface and prints all three artifacts.
"""

from epistub.examples import EXAMPLE_INTERFACE, EXAMPLE_UNIT_NAME
from epistub.declaration_parser import parse_text
from epistub.backends import generate_c, save_c_files


def main():
    result = parse_text(EXAMPLE_INTERFACE)

    print("=" * 80)
    print("C STUB GENERATOR DEMO")
    print("=" * 80)
    print(f"Declarations: {[d.name for d in result.declarations]}")

    generated = generate_c(EXAMPLE_UNIT_NAME, result.declarations)

    for filename, contents in generated.artifacts().items():
        print(f"\n{filename}:")
        print("-" * 80)
        print(contents)

    written = save_c_files(generated, overwrite=True)
    print("\n" + "=" * 80)
    for path in written:
        print(f"Saved to: {path}")
    print("=" * 80)


if __name__ == "__main__":
    main()
