"""Commit migration pipeline: forward fork commits onto an upstream staging branch."""
