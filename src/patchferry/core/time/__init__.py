"""Clock access abstraction for testing."""
