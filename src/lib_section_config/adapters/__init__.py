"""Adapters translating section trees to and from text, byte streams, and typed values."""
