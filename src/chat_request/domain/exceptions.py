"""Domain exceptions for conversation-to-request conversion.

This module defines pure domain exceptions with no framework dependencies.

Exception Hierarchy:
    - DomainError: Base exception for all domain errors
        - ConversionError: A conversation cannot be turned into a request
            - UnsupportedImageReferenceError: Image reference kind cannot be
              resolved (or carries no asset id)
            - ImageAssetNotFoundError: Asset store has no data for the id
            - ImageMimeTypeUnknownError: Neither asset nor reference has a
              mime type
        - ImageResizeError: Resize collaborator failed (always recoverable)
        - InvalidMessageError: Stored message payload is malformed

Note:
    ConversionError subclasses abort the whole conversion. ImageResizeError is
    raised by resize collaborators and caught by the image materializer,
    which falls back to the original image bytes.
"""


class DomainError(Exception):
    """Base exception for all domain errors.

    This exception should not be raised directly. Use specific subclasses
    instead.
    """


class ConversionError(DomainError):
    """Raised when a conversation cannot be converted into a request.

    A conversion error aborts the whole conversion; no partial request is
    returned to the caller.
    """


class UnsupportedImageReferenceError(ConversionError):
    """Raised when an image reference cannot be resolved.

    Only asset store (``dblob``) references with a non-empty asset id are
    resolvable. URL references and malformed records raise this error before
    any lookup is attempted.
    """


class ImageAssetNotFoundError(ConversionError):
    """Raised when the asset store returns nothing for an asset id.

    Attributes:
        asset_id: The identifier that was looked up.
    """

    def __init__(self, message: str, asset_id: str) -> None:
        super().__init__(message)
        self.asset_id = asset_id


class ImageMimeTypeUnknownError(ConversionError):
    """Raised when a resolved image has no mime type from any source.

    Attributes:
        asset_id: The identifier of the resolved asset.
    """

    def __init__(self, message: str, asset_id: str) -> None:
        super().__init__(message)
        self.asset_id = asset_id


class ImageResizeError(DomainError):
    """Raised by resize collaborators when an image cannot be re-encoded.

    Resizing is an optimization: the materializer catches this error and keeps
    the original image.
    """


class InvalidMessageError(DomainError):
    """Raised when a stored message payload cannot be mapped to domain entities."""


__all__ = [
    "ConversionError",
    "DomainError",
    "ImageAssetNotFoundError",
    "ImageMimeTypeUnknownError",
    "ImageResizeError",
    "InvalidMessageError",
    "UnsupportedImageReferenceError",
]
