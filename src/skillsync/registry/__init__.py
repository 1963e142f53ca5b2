"""
Registry module -- GitHub client and tree/metadata models.
"""

from .client import METADATA_PATH, RegistryClient, parse_registry
from .models import CategoryMetadata, RemoteMetadata, TreeEntry, TreeIndex

__all__ = [
    "METADATA_PATH",
    "RegistryClient",
    "parse_registry",
    "CategoryMetadata",
    "RemoteMetadata",
    "TreeEntry",
    "TreeIndex",
]
