"""Text file adapter: parser and writer for the configuration file format."""

from .codec import dumps, parse, quote, read_file, write_file

__all__ = ["dumps", "parse", "quote", "read_file", "write_file"]
