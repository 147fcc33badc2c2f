from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

ArticleStatus = Literal["draft", "published", "archived"]
TopicMatchMode = Literal["any", "all"]

class ArticleRecord(BaseModel):
    """Index entry for one document; rebuilt wholesale on every scan, never mutated."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(
        description="Display title; falls back to the slug",
        json_schema_extra={"example": "Network upgrade ships"}
    )
    description: str = Field(
        default="",
        description="Short summary shown in listings",
        json_schema_extra={"example": "What changes for validators."}
    )
    slug: str = Field(
        description="Identifier within a locale; frontmatter slug or filename stem",
        json_schema_extra={"example": "network-upgrade-ships"}
    )
    date: str = Field(
        default="",
        description="Publication date as written in the document (best-effort parseable)",
        json_schema_extra={"example": "2024-02-01"}
    )
    locale: str = Field(
        description="Language directory the document was found in",
        json_schema_extra={"example": "en"}
    )
    audiences: List[str] = Field(default_factory=list, json_schema_extra={"example": ["developers"]})
    topics: List[str] = Field(default_factory=list, json_schema_extra={"example": ["consensus"]})
    hero_image: Optional[str] = Field(default=None, alias="heroImage")
    status: Optional[ArticleStatus] = None
    section: Optional[str] = None
    simd_number: Optional[int] = Field(default=None, alias="simdNumber")
    path: str = Field(
        description="Source file path",
        json_schema_extra={"example": "content/news/en/network-upgrade-ships.mdx"}
    )

class ReadingTime(BaseModel):
    words: int = Field(description="Whitespace-separated tokens in the body", json_schema_extra={"example": 640})
    minutes: float = Field(description="words / words-per-minute", json_schema_extra={"example": 3.2})
    time: int = Field(description="Estimate in milliseconds", json_schema_extra={"example": 192000})
    text: str = Field(description="Rounded-up label", json_schema_extra={"example": "4 min read"})

class LoadedContent(BaseModel):
    frontmatter: Dict[str, Any] = Field(default_factory=dict)
    reading_time: ReadingTime = Field(alias="readingTime")
    body: str
    locale: str = Field(description="Locale actually served (may be a fallback)")

    model_config = ConfigDict(populate_by_name=True)

class ArticleResponse(LoadedContent):
    html: str = Field(description="Body rendered through the component registry")

class RevalidateResponse(BaseModel):
    revalidated: bool
    tag: str = Field(json_schema_extra={"example": "news-index"})
