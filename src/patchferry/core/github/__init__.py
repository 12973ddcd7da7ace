"""GitHub operations subpackage (pull requests via the gh CLI)."""
