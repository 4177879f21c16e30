"""Test configuration for the user directory."""

pytest_plugins = ["tests.fixtures.core"]
