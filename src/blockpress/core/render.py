"""Block renderer: document -> presentation nodes, one rule per block type"""

import logging
from html import escape
from typing import Callable, Optional

from blockpress.core.errors import MalformedBlock, UnknownBlockType
from blockpress.core.inline import safe_url, sanitize_inline, strip_tags
from blockpress.core.models import (
    Block, BlockType, ChecklistBlock, CodeBlock, Document, HeaderBlock, ImageBlock,
    ListBlock, Node, ParagraphBlock, QuoteBlock, parse_block,
)


logger = logging.getLogger(__name__)

EXCERPT_FALLBACK = "Click to read more about this post..."


def _header(block: HeaderBlock) -> Node:
    return Node(tag=f"h{block.data.level}", text=block.data.text)


def _paragraph(block: ParagraphBlock) -> Node:
    return Node(tag="p", html=sanitize_inline(block.data.text))


def _list(block: ListBlock) -> Node:
    tag = "ol" if block.data.style == "ordered" else "ul"
    return Node(tag=tag, children=[Node(tag="li", html=sanitize_inline(item)) for item in block.data.items])


def _image(block: ImageBlock) -> Node:
    if not safe_url(block.data.file.url):
        raise MalformedBlock(f"Refusing image source {block.data.file.url!r}")
    caption = block.data.caption or ""
    children = [Node(tag="img", attrs={"src": block.data.file.url, "alt": strip_tags(caption)})]
    if caption:
        children.append(Node(tag="figcaption", text=strip_tags(caption)))
    return Node(tag="figure", children=children)


def _code(block: CodeBlock) -> Node:
    return Node(tag="pre", children=[Node(tag="code", text=block.data.code)])


def _quote(block: QuoteBlock) -> Node:
    children = [Node(tag="p", text=block.data.text)]
    if block.data.caption:
        children.append(Node(tag="cite", text=f"— {block.data.caption}"))
    return Node(tag="blockquote", children=children)


def _checklist(block: ChecklistBlock) -> Node:
    items = []
    for item in block.data.items:
        box = Node(tag="input", attrs={"type": "checkbox", "disabled": "disabled"})
        if item.checked:
            box.attrs["checked"] = "checked"
        items.append(Node(
            tag="li",
            attrs={"class": "checked" if item.checked else "unchecked"},
            children=[box, Node(tag="span", text=item.text)],
        ))
    return Node(tag="ul", attrs={"class": "checklist"}, children=items)


RULES: dict[BlockType, Callable[..., Node]] = {
    BlockType.header:    _header,
    BlockType.paragraph: _paragraph,
    BlockType.list:      _list,
    BlockType.image:     _image,
    BlockType.code:      _code,
    BlockType.quote:     _quote,
    BlockType.checklist: _checklist,
}


def render_block(block: Block) -> Node:
    return RULES[BlockType(block.type)](block)


def render(document: Optional[Document]) -> list[Node]:
    """Render every recognisable block in order; unknown or malformed blocks are logged and skipped."""
    if document is None:
        return []
    nodes: list[Node] = []
    for position, raw in enumerate(document.blocks):
        try:
            nodes.append(render_block(parse_block(raw)))
        except (UnknownBlockType, MalformedBlock) as e:
            logger.warning("Skipping block %d: %s", position, e)
    return nodes


# --- serialisation ---

VOID_TAGS = {"img", "input", "br", "hr"}


def _attrs(attrs: dict[str, str]) -> str:
    return "".join(f' {k}="{escape(v, quote=True)}"' for k, v in attrs.items())


def node_to_html(node: Node) -> str:
    if node.tag in VOID_TAGS:
        return f"<{node.tag}{_attrs(node.attrs)}>"
    inner = ""
    if node.text is not None:
        inner += escape(node.text, quote=False)
    if node.html is not None:
        inner += node.html
    inner += "".join(node_to_html(c) for c in node.children)
    return f"<{node.tag}{_attrs(node.attrs)}>{inner}</{node.tag}>"


def to_html(nodes: list[Node]) -> str:
    """Serialise rendered nodes to an HTML fragment, one top-level element per line."""
    return "\n".join(node_to_html(n) for n in nodes)


def excerpt(document: Optional[Document], limit: int = 120) -> str:
    """Plain-text preview from the first paragraph, truncated to limit characters."""
    if document is not None:
        for raw in document.blocks:
            if raw.type != BlockType.paragraph.value or not isinstance(raw.data, dict):
                continue
            text = strip_tags(str(raw.data.get("text") or "")).strip()
            if text:
                return text[:limit] + "..." if len(text) > limit else text
    return EXCERPT_FALLBACK
