"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes (fake.py) and dry-run via wrappers (dry_run.py).
"""
