"""
asynctable: a deferred-returning wide-column client over a synchronous store.

Requests return immediately with a Deferred; writes are buffered and
dispatched in batches on a bounded worker pool. Scan filters translate into
the backend's filter objects without losing raw pattern bytes.
"""

__version__ = "0.1.0"
