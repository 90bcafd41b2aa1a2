"""Browse the disassembly of object files as read-only, navigable text."""

__title__ = "objview"
__version__ = "0.3.0"
__description__ = "Read-only objdump views of executables and object files"
