"""Test adapters shared by the router, registry and interface tests."""
