"""Unit tests for the translation router.

Tests use pytest with asyncio support. Provider clients and HTTP sessions are replaced
via monkeypatch, so no test touches the network.
"""
