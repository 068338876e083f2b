"""Schemas for search results and the standalone search endpoint."""

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """One search hit. Only snippet is guaranteed; the rest may be missing when parsed from free text."""

    title: str | None = Field(None, description="Result title.")
    url: str | None = Field(None, description="Result URL.")
    snippet: str = Field(..., min_length=1, description="Text of the result.")
    source: str | None = Field(None, description="Publisher or host name.")


class SearchMetadata(BaseModel):
    """Out-of-band payload describing the search behind an answer."""

    query: str = Field(..., description="Query that triggered the search.")
    results: list[SearchResult] = Field(default_factory=list, description="Results returned by the provider.")


class SearchRequest(BaseModel):
    """Request body for POST /api/search."""

    query: str = Field("", description="Search query.")
    focus: str | None = Field(None, description="Provider focus hint (technical, general, news, writing).")


class SearchResponse(BaseModel):
    """Response for POST /api/search."""

    results: list[SearchResult] = Field(default_factory=list)
