"""
Utility modules for the external asset index.
"""

from .asset_index import AssetIndex, NullAssetIndex, refresh_lock, request_reimport

__all__ = [
    "AssetIndex",
    "NullAssetIndex",
    "refresh_lock",
    "request_reimport",
]
