"""Test doubles for unit testing without a live node."""
