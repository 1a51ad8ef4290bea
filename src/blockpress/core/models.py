"""Block document model, media references and presentation nodes"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from blockpress.core.errors import MalformedBlock, UnknownBlockType


class AccessTier(str, Enum):
    """Restrict a post's access classification (and a reader's plan) to a fixed set"""
    free = "free"
    paid = "paid"


class BlockType(str, Enum):
    """Block type tags the editor emits and the renderer understands"""
    header = "header"
    paragraph = "paragraph"
    list = "list"
    image = "image"
    code = "code"
    quote = "quote"
    checklist = "checklist"


class RawBlock(BaseModel):
    """A block exactly as stored. Nothing about it is checked until parse_block,
    so one broken block cannot stop the rest of a stored document from loading."""
    model_config = ConfigDict(extra="allow")
    id:   Any = None
    type: Any = None
    data: Any = Field(default_factory=dict)


class Document(BaseModel):
    """Ordered block sequence produced by the editor. Unknown top-level keys are kept verbatim."""
    model_config = ConfigDict(extra="allow")
    time: Optional[int] = None
    version: Optional[str] = None
    blocks: list[RawBlock] = Field(default_factory=list)

    def dump(self) -> dict[str, Any]:
        """Serialisable form that round-trips to an equal Document."""
        return self.model_dump(mode="json", exclude_unset=True)


# --- typed block data ---

class _Data(BaseModel):
    model_config = ConfigDict(extra="allow")


class HeaderData(_Data):
    text: str
    level: int = Field(default=2, ge=2, le=4)


class ParagraphData(_Data):
    text: str


class ListData(_Data):
    style: Literal["ordered", "unordered"] = "unordered"
    items: list[str]

    @field_validator("items", mode="before")
    @classmethod
    def _flatten_items(cls, value):
        # newer list tools emit {"content": ..., "items": [...]} objects
        if isinstance(value, list):
            return [v.get("content", "") if isinstance(v, dict) else v for v in value]
        return value


class ImageFile(_Data):
    url: str = Field(..., min_length=1)


class ImageData(_Data):
    file: ImageFile
    caption: Optional[str] = None


class CodeData(_Data):
    code: str


class QuoteData(_Data):
    text: str
    caption: Optional[str] = None


class ChecklistItem(_Data):
    text: str
    checked: bool = False


class ChecklistData(_Data):
    items: list[ChecklistItem]


class HeaderBlock(BaseModel):
    type: Literal["header"]
    data: HeaderData


class ParagraphBlock(BaseModel):
    type: Literal["paragraph"]
    data: ParagraphData


class ListBlock(BaseModel):
    type: Literal["list"]
    data: ListData


class ImageBlock(BaseModel):
    type: Literal["image"]
    data: ImageData


class CodeBlock(BaseModel):
    type: Literal["code"]
    data: CodeData


class QuoteBlock(BaseModel):
    type: Literal["quote"]
    data: QuoteData


class ChecklistBlock(BaseModel):
    type: Literal["checklist"]
    data: ChecklistData


Block = Annotated[
    Union[HeaderBlock, ParagraphBlock, ListBlock, ImageBlock, CodeBlock, QuoteBlock, ChecklistBlock],
    Field(discriminator="type"),
]

_BLOCK_ADAPTER = TypeAdapter(Block)
_KNOWN_TYPES = {t.value for t in BlockType}


def parse_block(raw: RawBlock) -> Block:
    """Validate a stored block against its type. Raises UnknownBlockType or MalformedBlock."""
    if not isinstance(raw.type, str) or not raw.type:
        raise MalformedBlock(f"Block has no type tag: {raw.type!r}")
    if raw.type not in _KNOWN_TYPES:
        raise UnknownBlockType(raw.type)
    if not isinstance(raw.data, dict):
        raise MalformedBlock(f"Malformed {raw.type} block: data is {type(raw.data).__name__}, not an object")
    try:
        return _BLOCK_ADAPTER.validate_python({"type": raw.type, "data": raw.data})
    except ValidationError as e:
        raise MalformedBlock(f"Malformed {raw.type} block: {e.error_count()} error(s)") from e


# --- media ---

class UrlStrategy(str, Enum):
    """How an uploaded object is addressed from inside a document"""
    public = "public"   # the backend's permanent public URL
    proxy = "proxy"     # a URL on the authenticated proxy endpoint


@dataclass(frozen=True)
class StoragePlacement:
    namespace: str
    strategy:  UrlStrategy


class MediaReference(BaseModel):
    """Where an upload landed and the URL to embed in an image block."""
    url:       str
    namespace: str
    path:      str
    tier:      AccessTier


@dataclass(frozen=True)
class Identity:
    """An authenticated caller as reported by the identity provider."""
    user_id: str
    plan:    AccessTier = AccessTier.free


@dataclass(frozen=True)
class StoredObject:
    content:      bytes
    content_type: Optional[str] = None


@dataclass(frozen=True)
class ResolvedObject:
    """Proxy response payload: bytes plus the headers to send with them."""
    content:       bytes
    content_type:  str
    cache_control: str


# --- presentation ---

class Node(BaseModel):
    """One element of the rendered presentation tree.

    `text` is plain text and is escaped on output; `html` holds inline markup
    that has already been through the sanitiser and is emitted as-is.
    """
    tag:      str
    attrs:    dict[str, str] = Field(default_factory=dict)
    children: list["Node"] = Field(default_factory=list)
    text:     Optional[str] = None
    html:     Optional[str] = None
