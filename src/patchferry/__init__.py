"""Forward fork commits onto an upstream patch-staging branch."""

__version__ = "0.1.0"
