"""Test doubles for the comment notification tests."""

from .fakes import FakeLifecycle, FakePushDispatcher, FakeTransport

__all__ = ["FakeLifecycle", "FakePushDispatcher", "FakeTransport"]
