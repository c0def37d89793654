"""
epistub: C stub generator for Heptagon-style interface files

Reads `.epi` interface declarations such as

    fun compute(x: int; data: float^4) returns(y: float)

and produces a types header, a prototypes header and a stub source file.

PIPELINE:
---------
    interface text
        -> declaration_parser  (text -> Declaration objects)
        -> backends            (Declaration objects -> C text)
        -> cli                 (files on disk)

The model layer (type_lattice, model) knows nothing about C.
"""

__version__ = "0.1.0"
