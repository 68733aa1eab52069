"""Shared constants, types, exceptions and I/O helpers."""
