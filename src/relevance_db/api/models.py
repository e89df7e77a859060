"""
API request and response models.
"""

from pydantic import BaseModel, Field

from relevance_db.search.criteria import ContentFilter, MatchMode


class DocumentRequest(BaseModel):
    """Body for PUT /v1/indexes/{index}/documents/{document_id}."""

    fields: dict[str, str] = Field(
        ..., description="Field name → raw text to index for this document"
    )
    replace: bool = Field(
        True, description="Flush the document's existing postings before indexing"
    )


class DocumentResponse(BaseModel):
    """Result of indexing one document."""

    index: str = Field(..., description="Index name")
    document_id: int = Field(..., description="Document ID")
    postings_written: int = Field(0, description="Postings inserted or replaced")
    postings_removed: int = Field(0, description="Postings removed by the flush")
    fields_failed: int = Field(0, description="Fields whose postings failed to save")


class FlushResponse(BaseModel):
    """Result of DELETE /v1/indexes/{index}/documents/{document_id}."""

    index: str = Field(..., description="Index name")
    document_id: int = Field(..., description="Document ID")
    postings_removed: int = Field(..., description="Rows removed across all fields")


class SearchRequest(BaseModel):
    """Body for POST /v1/indexes/{index}/search."""

    fields: list[str] = Field(default_factory=list, description="Field names to match")
    terms: list[str] = Field(default_factory=list, description="Terms to match")
    document_ids: list[int] = Field(
        default_factory=list, description="Restrict results to these documents"
    )
    fields_mode: MatchMode | None = Field(None, description="ALL or ANY (config default)")
    terms_mode: MatchMode | None = Field(None, description="ALL or ANY (config default)")
    content_filter: ContentFilter | None = Field(
        None, description="ON, OFF or UNRESTRICTED (config default)"
    )
    offset: int = Field(0, ge=0, description="Offset for pagination")
    limit: int = Field(
        1000, ge=1, description="Maximum number of documents to return (<= max_limit)"
    )


class SearchHit(BaseModel):
    """A single ranked document."""

    document_id: int = Field(..., description="Document ID")
    relevance: int = Field(..., description="Relevance score")


class SearchResponse(BaseModel):
    """Response for POST /v1/indexes/{index}/search."""

    index: str = Field(..., description="Index name")
    total: int = Field(..., description="Number of matching documents")
    items: list[SearchHit] = Field(
        default_factory=list, description="Ranked documents for current page"
    )
    next_offset: int | None = Field(
        None, description="Offset for next page (null if no more results)"
    )


class SensitivityRequest(BaseModel):
    """Body for PUT /v1/terms/{term}/sensitivity."""

    sensitive: int = Field(..., ge=0, le=1, description="1 for flagged content")


class TermResponse(BaseModel):
    """A term catalog entry."""

    term: str = Field(..., description="Normalized term")
    term_id: int = Field(..., description="Term ID")
    sensitive: int = Field(..., description="Content sensitivity flag")
