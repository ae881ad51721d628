"""Byte stream adapter: preorder tree transfer between cooperating processes."""

from .codec import read_tree, write_section

__all__ = ["read_tree", "write_section"]
