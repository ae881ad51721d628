"""Domain layer: the section tree, tag/value storage, and the error taxonomy."""
