"""Value coder adapters converting typed values to and from stored strings."""
