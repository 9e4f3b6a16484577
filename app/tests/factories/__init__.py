"""Test data factories for the notification engine."""
