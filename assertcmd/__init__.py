"""Run command-line programs in tests and assert on their exit code and output."""

__version__ = "2.0.16"

__all__ = ["assertion", "bin_fixture", "cargo", "cmd", "color", "output", "predicates"]