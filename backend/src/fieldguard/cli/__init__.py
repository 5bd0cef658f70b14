"""fieldguard command line interface."""
