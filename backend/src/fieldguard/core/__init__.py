"""Entity contract and object factory."""
