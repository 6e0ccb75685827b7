"""Reusable test doubles for scmpulse tests."""
