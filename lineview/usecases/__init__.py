"""Use-case layer for the reactive line-item pipeline.

Each module coordinates domain objects and ports without performing transport
I/O directly; adapters are injected by the app composition layer.
"""
