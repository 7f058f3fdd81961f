from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from metalens.models import PageMetadata


class MetadataRequest(BaseModel):
    # optional so a missing url gets the API's own 400, not a validation 422
    url: Optional[str] = None


class PageMetadataSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    meta: dict[str, str] = {}
    open_graph: dict[str, str] = Field(default_factory=dict, alias="openGraph")
    twitter: dict[str, str] = {}


class MetadataResponse(BaseModel):
    title: str
    description: str = ""       # og:description, falling back to meta description
    image: str = ""             # og:image
    url: str                    # og:url, falling back to the requested url
    metadata: PageMetadataSchema

    @classmethod
    def from_metadata(cls, metadata: PageMetadata, requested_url: str) -> "MetadataResponse":
        og = metadata.open_graph
        return cls(
            title=metadata.title,
            description=og.get("og:description") or metadata.meta.get("description") or "",
            image=og.get("og:image") or "",
            url=og.get("og:url") or requested_url,
            metadata=PageMetadataSchema(**metadata.to_dict()),
        )


class ErrorResponse(BaseModel):
    error: str
    errorType: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
