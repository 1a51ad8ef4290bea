"""Shared fixtures for core unit tests"""

import pytest

from blockpress.core.models import Document


SAMPLE_MD = """\
---
title: Field Notes
tier: paid
---

# Field Notes

A paragraph with **bold** and [a link](https://example.com).

![A heron](https://cdn.test/heron.png)

- item one
- item two

1. first
2. second

- [x] packed
- [ ] shipped

```python
print("hello")
```

> Stay curious.
"""


def sample_blocks() -> list[dict]:
    """One block of every known type, in editor output shape."""
    return [
        {"id": "h1", "type": "header", "data": {"text": "Title", "level": 2}},
        {"id": "p1", "type": "paragraph", "data": {"text": "Some <b>bold</b> text"}},
        {"id": "l1", "type": "list", "data": {"style": "ordered", "items": ["one", "<i>two</i>"]}},
        {"id": "i1", "type": "image", "data": {"file": {"url": "https://cdn.test/a.png"}, "caption": "A cat"}},
        {"id": "c1", "type": "code", "data": {"code": "<script>x()</script>"}},
        {"id": "q1", "type": "quote", "data": {"text": "Be brief.", "caption": "Anon"}},
        {"id": "k1", "type": "checklist", "data": {"items": [
            {"text": "write", "checked": True},
            {"text": "edit", "checked": False},
        ]}},
    ]


@pytest.fixture(name="document")
def document_fixture():
    return Document.model_validate({"time": 1700000000000, "version": "2.28.2", "blocks": sample_blocks()})


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD
