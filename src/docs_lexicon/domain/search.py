"""Domain models for search functionality.

Following Cosmic Python principles:
- Value Objects are immutable (frozen=True)
- No infrastructure dependencies

Field names here double as the persisted cache format, so renaming a field
breaks every cache written by an earlier release. Older caches used ``id``,
``url`` and ``content``; those names are still accepted on input.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


CACHE_FORMAT_VERSION = 1


class Document(BaseModel):
    """Value object for one corpus entry.

    ``location`` is the dedup key: the engine keeps at most one document per
    location. Unknown fields are ignored and missing fields default to empty
    so caches written by newer or older releases still load.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    identifier: str = Field(default="", validation_alias=AliasChoices("identifier", "id"))
    title: str = ""
    location: str = Field(default="", validation_alias=AliasChoices("location", "url"))
    body: str = Field(default="", validation_alias=AliasChoices("body", "content"))
    tags: list[str] = Field(default_factory=list)

    @field_validator("identifier", "title", "location", "body", mode="before")
    @classmethod
    def _none_as_empty_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _none_as_empty_tags(cls, value: Any) -> Any:
        return [] if value is None else value

    def indexable_text(self) -> str:
        """Text whose terms feed the postings lists."""
        return f"{self.title} {self.body} {' '.join(self.tags)}"

    def scoring_text(self) -> str:
        """Text used for term frequency and document length."""
        return f"{self.body} {self.title}"


class SearchResult(BaseModel):
    """Value object for a single ranked hit.

    ``score`` is normalized so the best hit of the query scores 1.0.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    location: str
    excerpt: str
    score: float = Field(ge=0.0, le=1.0)


class CacheFile(BaseModel):
    """On-disk snapshot of the ordered document list.

    Postings are never stored; they are rebuilt by replaying the documents.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    version: int = CACHE_FORMAT_VERSION
    documents: list[Document] = Field(default_factory=list, validation_alias=AliasChoices("documents", "docs"))

    @field_validator("documents", mode="before")
    @classmethod
    def _none_as_empty_documents(cls, value: Any) -> Any:
        return [] if value is None else value
