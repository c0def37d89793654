"""Backends for epistub output generation (C stubs)."""

from .c_generator import GeneratedUnit, generate_c, save_c_files

__all__ = ["GeneratedUnit", "generate_c", "save_c_files"]
