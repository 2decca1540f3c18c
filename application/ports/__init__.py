"""
Provider Interfaces (Ports) for workout record resolution.

This package defines abstract interfaces that decouple the resolution logic
from the record transport and storage substrate. Implementations are provided
in the infrastructure layer.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the core needs)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import RecordProvider, RecordFilter, CacheUsage

    class ReferenceResolver:
        def __init__(self, provider: RecordProvider):
            self.provider = provider
"""

from application.ports.record_provider import CacheUsage, RecordFilter, RecordProvider

__all__ = [
    "RecordProvider",
    "RecordFilter",
    "CacheUsage",
]
