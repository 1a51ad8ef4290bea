"""Save-time validation of posts and their block documents"""

from typing import Any

from pydantic import ValidationError

from blockpress.core.errors import InvalidDocument, MalformedBlock, UnknownBlockType
from blockpress.core.models import Document, parse_block


def coerce_document(value: Any) -> Document:
    """Accept a Document or its dict form; anything else is an InvalidDocument."""
    if isinstance(value, Document):
        return value
    try:
        return Document.model_validate(value)
    except ValidationError as e:
        raise InvalidDocument(f"Not a block document: {e.error_count()} error(s)") from e


def validate_document(document: Document) -> None:
    """Reject empty documents and any block the renderer could not draw.

    Rendering tolerates such blocks for documents already stored; saving does not.
    """
    if not document.blocks:
        raise InvalidDocument("Content empty")
    for position, raw in enumerate(document.blocks):
        try:
            parse_block(raw)
        except (UnknownBlockType, MalformedBlock) as e:
            raise InvalidDocument(f"Block {position}: {e}") from e


def validate_title(title: str) -> str:
    if not title or not title.strip():
        raise InvalidDocument("Please enter a title")
    return title.strip()
