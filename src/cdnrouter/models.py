"""CDN dispatch value models.

Defines the request/response types shared by every provider:
- UploadOptions: optional filename, content type and string metadata
- UploadResult: locator of the stored object plus optional id/metadata
- DeleteResult: outcome of a deletion
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UploadOptions(BaseModel):
    """Options accompanying an upload.

    Attributes:
        filename: Suggested name for the stored object.
        content_type: MIME type of the payload. Accepts ``contentType`` on input.
        metadata: String key/value pairs to attach to the object.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    filename: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")
    metadata: dict[str, str] | None = None


class UploadResult(BaseModel):
    """Result of a successful upload.

    Attributes:
        url: Locator of the stored object. Valid input to download/exists/delete
            on the provider that produced it.
        id: Provider-specific object identifier.
        metadata: Provider-reported metadata; may differ from the request metadata.
    """

    url: str
    id: str | None = None
    metadata: dict[str, Any] | None = None


class DeleteResult(BaseModel):
    """Result of a delete call."""

    success: bool
    message: str | None = None
