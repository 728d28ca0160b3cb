"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (record REST API, SSE
    push channel, navigation, settings file) plus in-memory doubles used by
    tests and the offline demo.

Dependencies:
    ``records_rest`` and ``http_client`` depend on ``requests``; ``push_sse``
    depends on ``httpx``.
"""
