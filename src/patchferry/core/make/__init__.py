"""Build runner subpackage: make-based build and test recipes."""
