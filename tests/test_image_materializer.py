"""
Comprehensive behavioral tests for ImageMaterializer.

Tests cover reference validation, asset lookup, mime type resolution and the
best-effort resize step. Collaborators are in-memory fakes; no mocks of
materializer internals.
"""

from unittest.mock import AsyncMock

import pytest

from chat_request.application.image_materializer import ImageMaterializer
from chat_request.domain.entities import InlineImagePart, ResizedImage, ResizeOutcome
from chat_request.domain.exceptions import (
    ConversionError,
    ImageAssetNotFoundError,
    ImageMimeTypeUnknownError,
    UnsupportedImageReferenceError,
)
from chat_request.domain.fragments import DBlobDataRef, ImageRefPart, OpaqueDataRef, UrlDataRef
from chat_request.domain.value_objects import ImageResizePolicy
from tests.helpers import FakeResizer


def dblob_part(asset_id: str, mime_type: str = "image/png") -> ImageRefPart:
    return ImageRefPart(data_ref=DBlobDataRef(dblob_asset_id=asset_id, mime_type=mime_type))


@pytest.mark.asyncio
class TestReferenceValidation:
    """Behavioral tests for unsupported image references."""

    async def test_url_reference_is_unsupported(self, materializer, asset_store):
        """Test that non-dblob references fail before any lookup."""
        part = ImageRefPart(data_ref=UrlDataRef(url="https://example.com/cat.png", mime_type="image/png"))

        with pytest.raises(UnsupportedImageReferenceError, match="Image reference is not supported"):
            await materializer.materialize(part)
        assert asset_store.lookups == []

    async def test_opaque_reference_is_unsupported(self, materializer):
        part = ImageRefPart(data_ref=OpaqueDataRef(raw_reftype="s3"))
        with pytest.raises(UnsupportedImageReferenceError):
            await materializer.materialize(part)

    async def test_dblob_without_asset_id_is_unsupported(self, materializer, asset_store):
        """Test that a dblob reference with an empty id is rejected without lookup."""
        with pytest.raises(UnsupportedImageReferenceError):
            await materializer.materialize(dblob_part(""))
        assert asset_store.lookups == []

    async def test_unsupported_reference_is_conversion_error(self, materializer):
        with pytest.raises(ConversionError):
            await materializer.materialize(ImageRefPart(data_ref=UrlDataRef(url="x")))


@pytest.mark.asyncio
class TestAssetLookup:
    """Behavioral tests for asset store resolution."""

    async def test_missing_asset_raises_not_found(self, materializer, asset_store):
        """Test that an unknown asset id fails the materialization."""
        with pytest.raises(ImageAssetNotFoundError, match="Image asset not found") as exc_info:
            await materializer.materialize(dblob_part("missing"))

        assert exc_info.value.asset_id == "missing"
        assert asset_store.lookups == ["missing"]

    async def test_found_asset_without_resize(self, materializer, asset_store, fake_resizer):
        """Test that the stored bytes are used verbatim when no policy is given."""
        asset_store.add_image("AAA", "image/png", asset_id="a1")

        result = await materializer.materialize(dblob_part("a1"), False)

        assert result.part == InlineImagePart(mime_type="image/png", base64="AAA")
        assert result.resize is ResizeOutcome.NOT_REQUESTED
        assert fake_resizer.calls == []

    async def test_none_policy_skips_resize(self, materializer, asset_store, fake_resizer):
        asset_store.add_image("AAA", "image/png", asset_id="a1")
        result = await materializer.materialize(dblob_part("a1"), None)
        assert result.resize is ResizeOutcome.NOT_REQUESTED
        assert fake_resizer.calls == []


@pytest.mark.asyncio
class TestMimeTypeResolution:
    """Behavioral tests for mime type priority."""

    async def test_asset_mime_type_wins_over_reference(self, materializer, asset_store):
        asset_store.add_image("AAA", "image/jpeg", asset_id="a1")
        result = await materializer.materialize(dblob_part("a1", mime_type="image/png"))
        assert result.part.mime_type == "image/jpeg"

    async def test_reference_mime_type_used_when_asset_has_none(self, materializer, asset_store):
        """Test that the declared mime type is the last fallback."""
        asset_store.add_image("AAA", None, asset_id="a1")
        result = await materializer.materialize(dblob_part("a1", mime_type="image/gif"))
        assert result.part.mime_type == "image/gif"

    async def test_no_mime_type_anywhere_is_a_distinct_failure(self, materializer, asset_store):
        """Test that an asset without any mime type fails after lookup, not as an unsupported reference."""
        asset_store.add_image("AAA", None, asset_id="a1")

        with pytest.raises(ImageMimeTypeUnknownError, match="mime type is unknown") as exc_info:
            await materializer.materialize(dblob_part("a1", mime_type=""))

        assert not isinstance(exc_info.value, UnsupportedImageReferenceError)
        assert isinstance(exc_info.value, ConversionError)
        assert exc_info.value.asset_id == "a1"
        assert asset_store.lookups == ["a1"]

    async def test_resized_mime_type_wins(self, asset_store):
        """Test that a successful resize replaces both bytes and mime type."""
        asset_store.add_image("AAA", "image/png", asset_id="a1")
        resizer = FakeResizer(result=ResizedImage(mime_type="image/webp", base64="BBB"))
        materializer = ImageMaterializer(asset_store, resizer)

        result = await materializer.materialize(dblob_part("a1"), ImageResizePolicy.OPENAI_LOW_RES)

        assert result.part == InlineImagePart(mime_type="image/webp", base64="BBB")
        assert result.resize is ResizeOutcome.RESIZED


@pytest.mark.asyncio
class TestResizeStep:
    """Behavioral tests for the best-effort resize step."""

    async def test_resizer_receives_configured_target(self, asset_store):
        """Test that the resizer is called with mime, bytes, policy, target and quality."""
        asset_store.add_image("AAA", "image/png", asset_id="a1")
        resizer = FakeResizer(result=None)
        materializer = ImageMaterializer(asset_store, resizer, target_mime_type="image/jpeg", quality=0.5)

        await materializer.materialize(dblob_part("a1"), ImageResizePolicy.GOOGLE)

        assert resizer.calls == [("image/png", "AAA", ImageResizePolicy.GOOGLE, "image/jpeg", 0.5)]

    async def test_default_target_is_webp_at_090(self, asset_store):
        asset_store.add_image("AAA", "image/png", asset_id="a1")
        resizer = FakeResizer(result=None)
        await ImageMaterializer(asset_store, resizer).materialize(dblob_part("a1"), "openai-low-res")
        assert resizer.calls[0][2:] == (ImageResizePolicy.OPENAI_LOW_RES, "image/webp", 0.90)

    async def test_resize_not_needed_keeps_original(self, materializer, asset_store):
        asset_store.add_image("AAA", "image/png", asset_id="a1")

        result = await materializer.materialize(dblob_part("a1"), ImageResizePolicy.OPENAI_LOW_RES)

        assert result.part == InlineImagePart(mime_type="image/png", base64="AAA")
        assert result.resize is ResizeOutcome.NOT_NEEDED

    async def test_resize_failure_falls_back_to_original(self, asset_store, events):
        """Test that a failing resizer degrades to the original image."""
        asset_store.add_image("AAA", "image/png", asset_id="a1")
        materializer = ImageMaterializer(asset_store, FakeResizer(fail=True), events=events)

        result = await materializer.materialize(dblob_part("a1"), ImageResizePolicy.OPENAI_LOW_RES)

        assert result.part == InlineImagePart(mime_type="image/png", base64="AAA")
        assert result.resize is ResizeOutcome.FAILED
        assert result.degraded
        assert result.detail == "resize backend unavailable"
        failures = events.of_type("image_resize_failed")
        assert len(failures) == 1
        assert failures[0]["error_type"] == "ImageResizeError"

    async def test_unexpected_resizer_exception_is_also_caught(self, asset_store):
        """Test that any resizer exception is treated as a resize failure."""
        asset_store.add_image("AAA", "image/png", asset_id="a1")
        resizer = AsyncMock()
        resizer.resize.side_effect = RuntimeError("worker crashed")
        materializer = ImageMaterializer(asset_store, resizer)

        result = await materializer.materialize(dblob_part("a1"), ImageResizePolicy.ANTHROPIC)

        assert result.part.base64 == "AAA"
        assert result.resize is ResizeOutcome.FAILED

    async def test_missing_resizer_reports_failed(self, asset_store):
        """Test that a requested resize without a resizer keeps the original bytes."""
        asset_store.add_image("AAA", "image/png", asset_id="a1")
        materializer = ImageMaterializer(asset_store, None)

        result = await materializer.materialize(dblob_part("a1"), ImageResizePolicy.OPENAI_LOW_RES)

        assert result.part.base64 == "AAA"
        assert result.resize is ResizeOutcome.FAILED
        assert result.detail == "no image resizer configured"

    async def test_materialized_event_is_logged(self, materializer, asset_store, events):
        asset_store.add_image("AAA", "image/png", asset_id="a1")

        await materializer.materialize(dblob_part("a1"), ImageResizePolicy.OPENAI_LOW_RES)

        [event] = events.of_type("image_materialized")
        assert event["asset_id"] == "a1"
        assert event["mime_type"] == "image/png"
        assert event["resize_policy"] == "openai-low-res"
        assert event["resize"] == "not_needed"
