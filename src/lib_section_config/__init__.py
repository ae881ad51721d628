"""Public package surface for ``lib_section_config``.

Hierarchical, human-readable configuration files: a tree of named sections
holding ordered tag/value pairs, loaded from text, overridden from other files
or ``-tag value`` command-line arguments, saved back only when edited, and
transferable over byte streams between cooperating processes.
"""

from __future__ import annotations

from .adapters.text.codec import dumps, parse
from .adapters.values.coders import (
    DEFAULT_REGISTRY,
    BoolCoder,
    CoderRegistry,
    FloatCoder,
    IntCoder,
    SequenceCoder,
    StringCoder,
)
from .core import ConfigurationFile, ConfigurationSection
from .domain.errors import (
    ConfigError,
    DecodingFailure,
    MalformedFile,
    SectionNotFound,
    StreamTruncated,
    TagNotFound,
)
from .domain.section import Section, SectionTree
from .observability import bind_trace_id, get_logger

__all__ = [
    "BoolCoder",
    "CoderRegistry",
    "ConfigError",
    "ConfigurationFile",
    "ConfigurationSection",
    "DEFAULT_REGISTRY",
    "DecodingFailure",
    "FloatCoder",
    "IntCoder",
    "MalformedFile",
    "Section",
    "SectionNotFound",
    "SectionTree",
    "SequenceCoder",
    "StreamTruncated",
    "StringCoder",
    "TagNotFound",
    "bind_trace_id",
    "dumps",
    "get_logger",
    "parse",
]
