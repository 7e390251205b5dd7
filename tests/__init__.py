"""Unit tests for the translation gateway.

This package contains test modules for all components of the gateway.
Tests use pytest with asyncio support and replace HTTP and Redis calls via monkeypatch.
"""
