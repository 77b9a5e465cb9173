"""Shared fixtures for core unit tests"""

import pytest

from mdblocks.core.models import ComponentCatalog


SAMPLE_PAGE = """\
# Learning Rust

<CoverImage src="/img/rust.png" alt="Rust" />

Rust is a systems language.
It focuses on safety.

## Ownership

- Each value has an owner
- Only one owner at a time
  continued detail

> Borrowing lets you reference data
> without taking ownership.

```rust
fn main() {}
```

| Concept | Meaning |
|---------|---------|
| Move | Transfer ownership |

<PageCard
  title="Lifetimes"
  description="How long references live"
/>

<Toggle label="Quiz">
What does `&mut` mean?
</Toggle>

---

Thanks for reading.
"""

SAMPLE_KINDS = [
    "heading", "component", "paragraph", "paragraph", "heading", "list",
    "blockquote", "code", "table", "component", "component", "hr", "paragraph",
]


@pytest.fixture(name="catalog")
def catalog_fixture():
    return ComponentCatalog()


@pytest.fixture(name="sample_page")
def sample_page_fixture():
    return SAMPLE_PAGE


@pytest.fixture(name="sample_kinds")
def sample_kinds_fixture():
    return list(SAMPLE_KINDS)
