"""Application layer: merge policy and the ports adapters implement."""
