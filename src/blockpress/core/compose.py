"""Markdown import: frontmatter extraction and markdown-it tokens -> block document"""

import logging
import re
from typing import Any

import yaml
from markdown_it import MarkdownIt

from blockpress.core.models import BlockType, Document, RawBlock


logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)
TASK_RE = re.compile(r'^\[([ xX])\]\s+')

MIN_LEVEL, MAX_LEVEL = 2, 4


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def _close_index(tokens: list, i: int) -> int:
    """Index of the token closing tokens[i] (same level, nesting -1)."""
    opener = tokens[i]
    for j in range(i + 1, len(tokens)):
        if tokens[j].nesting == -1 and tokens[j].level == opener.level:
            return j
    return len(tokens) - 1


def _heading_level(token) -> int:
    """Heading level from the h1..h6 tag, clamped to the levels the editor offers."""
    level = int(token.tag[1:]) if token.tag[1:].isdigit() else MIN_LEVEL
    return max(MIN_LEVEL, min(MAX_LEVEL, level))


def _paragraph(md: MarkdownIt, inline) -> RawBlock:
    """Image-only paragraphs become image blocks; everything else keeps its inline markup."""
    children = [c for c in (inline.children or []) if c.type not in ('softbreak', 'hardbreak')]
    if len(children) == 1 and children[0].type == 'image':
        image = children[0]
        data = {"file": {"url": image.attrGet('src') or ""}, "caption": image.content or ""}
        return RawBlock(type=BlockType.image.value, data=data)
    text = md.renderer.renderInline(inline.children or [], md.options, {})
    return RawBlock(type=BlockType.paragraph.value, data={"text": text})


def _list(md: MarkdownIt, tokens: list, start: int, end: int) -> RawBlock:
    """Top-level items only; nested lists contribute through their parent item's first line."""
    opener = tokens[start]
    items = []
    for j in range(start + 1, end):
        tok = tokens[j]
        if tok.type != 'list_item_open' or tok.level != opener.level + 1:
            continue
        inline = next((t for t in tokens[j + 1:end] if t.type == 'inline'), None)
        items.append(inline)

    contents = [i.content if i is not None else "" for i in items]
    if contents and all(TASK_RE.match(c) for c in contents):
        return RawBlock(type=BlockType.checklist.value, data={"items": [
            {"text": TASK_RE.sub("", c), "checked": TASK_RE.match(c).group(1) != " "}
            for c in contents
        ]})

    style = "ordered" if opener.type == 'ordered_list_open' else "unordered"
    rendered = [md.renderer.renderInline(i.children or [], md.options, {}) if i is not None else "" for i in items]
    return RawBlock(type=BlockType.list.value, data={"style": style, "items": rendered})


def tokens_to_blocks(md: MarkdownIt, tokens: list) -> list[RawBlock]:
    """Convert a markdown-it token stream to editor blocks, in source order."""
    blocks: list[RawBlock] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]

        if tok.type == 'heading_open':
            end = _close_index(tokens, i)
            text = tokens[i + 1].content if i + 1 < end else ""
            blocks.append(RawBlock(type=BlockType.header.value, data={"text": text, "level": _heading_level(tok)}))
            i = end + 1
        elif tok.type == 'paragraph_open':
            end = _close_index(tokens, i)
            if i + 1 < end:
                blocks.append(_paragraph(md, tokens[i + 1]))
            i = end + 1
        elif tok.type in ('bullet_list_open', 'ordered_list_open'):
            end = _close_index(tokens, i)
            blocks.append(_list(md, tokens, i, end))
            i = end + 1
        elif tok.type in ('fence', 'code_block'):
            blocks.append(RawBlock(type=BlockType.code.value, data={"code": tok.content.rstrip("\n")}))
            i += 1
        elif tok.type == 'blockquote_open':
            end = _close_index(tokens, i)
            lines = [t.content for t in tokens[i + 1:end] if t.type == 'inline']
            blocks.append(RawBlock(type=BlockType.quote.value, data={"text": "\n".join(lines), "caption": ""}))
            i = end + 1
        else:
            if tok.nesting == 1:
                logger.debug("No block type for %s; skipping", tok.type)
                i = _close_index(tokens, i) + 1
            else:
                i += 1

    return blocks


def markdown_to_document(text: str, preset: str = 'gfm-like') -> tuple[dict[str, Any], Document]:
    """Parse markdown (with optional YAML frontmatter) into (frontmatter, Document)."""
    frontmatter, body = strip_frontmatter(text)
    md = _make_parser(preset)
    blocks = tokens_to_blocks(md, md.parse(body))
    return frontmatter, Document(blocks=blocks)
