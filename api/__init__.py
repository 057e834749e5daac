"""HTTP surface for the mock interview service."""
