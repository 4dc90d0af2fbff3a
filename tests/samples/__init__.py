"""Sample classes resolved by the test suite."""
