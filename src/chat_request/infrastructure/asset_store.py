"""In-memory asset store.

A minimal asset store implementing AssetStoreInterface, useful for tests,
scripts and processes that already hold the conversation's images in memory.
Persistent stores live outside this package and only need to provide an
async ``get(asset_id)``.
"""

from __future__ import annotations

import logging
import uuid

from chat_request.domain.entities import ImageAsset, ImageAssetData
from chat_request.domain.value_objects import AssetId

logger = logging.getLogger(__name__)


class InMemoryAssetStore:
    """Dictionary-backed image asset store.

    Attributes:
        _assets: Assets keyed by asset id.
        lookups: Asset ids requested through get(), in call order.
    """

    def __init__(self, assets: dict[str, ImageAsset] | None = None) -> None:
        self._assets: dict[str, ImageAsset] = dict(assets or {})
        self.lookups: list[str] = []

    async def get(self, asset_id: str) -> ImageAsset | None:
        """Return the asset stored under asset_id, or None."""
        self.lookups.append(asset_id)
        asset = self._assets.get(asset_id)
        if asset is None:
            logger.debug("Asset %s not found", asset_id)
        return asset

    def put(self, asset: ImageAsset) -> None:
        """Store an asset, replacing any asset with the same id."""
        self._assets[str(AssetId(asset.asset_id))] = asset

    def add_image(
        self,
        base64_data: str,
        mime_type: str | None,
        *,
        asset_id: str | None = None,
        width: int | None = None,
        height: int | None = None,
    ) -> str:
        """Store base64 image data and return its asset id.

        Args:
            base64_data: Base64-encoded image bytes.
            mime_type: Image mime type, if known.
            asset_id: Identifier to use. A random UUID is generated if None.
            width: Image width in pixels, if known.
            height: Image height in pixels, if known.

        Returns:
            The asset id.
        """
        asset_id = asset_id or str(uuid.uuid4())
        self.put(
            ImageAsset(
                asset_id=asset_id,
                data=ImageAssetData(base64=base64_data, mime_type=mime_type),
                width=width,
                height=height,
            )
        )
        return asset_id

    def delete(self, asset_id: str) -> bool:
        """Remove an asset. Returns True if it existed."""
        return self._assets.pop(asset_id, None) is not None

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._assets

    def __len__(self) -> int:
        return len(self._assets)


__all__ = ["InMemoryAssetStore"]
