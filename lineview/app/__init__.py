"""Application composition layer.

Controllers in this package wire adapters, use cases and view models into a
runnable line-item panel without placing business logic in the host.
"""
