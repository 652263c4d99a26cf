"""Test support utilities for edgeguard tests."""
