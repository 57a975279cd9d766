"""Core logic of the tag reader.

This package is organized by pipeline step:
- filesystem: directory scanning and file identifiers
- tags: tag backends, routing and technical enrichment
- artwork: content-hash artwork cache
- catalog: diffing known identifiers against a scan
"""

__all__: list[str] = []
