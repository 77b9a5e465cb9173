"""Page persistence: save reassembled content by document id, load it back"""

from datetime import datetime

from sqlmodel import Session, select

from mdblocks.core.utils.hashing import sha256
from mdblocks.crud.models import Page
from mdblocks.crud.versioning import save_version


def get_page(session: Session, doc_id: str) -> Page | None:
    """Return the Page stored under doc_id, or None if not found."""
    return session.exec(select(Page).where(Page.doc_id == doc_id)).one_or_none()


def list_pages(session: Session) -> list[Page]:
    return list(session.exec(select(Page).order_by(Page.doc_id)).all())


def load_content(session: Session, doc_id: str) -> str | None:
    page = get_page(session, doc_id)
    return page.content if page else None


def save_content(session: Session, doc_id: str, content: str, max_versions: int = 10) -> tuple[Page, str]:
    """Create or update a page. Returns (page, status) with status created/updated/unchanged.

    The previous content is snapshotted as a PageVersion before an update.
    Flushes but does not commit; caller controls the transaction.
    """
    digest = sha256(content)
    page = get_page(session, doc_id)

    if page is None:
        page = Page(doc_id=doc_id, content=content, hash=digest)
        session.add(page)
        session.flush()
        return page, "created"

    if page.hash == digest:
        return page, "unchanged"

    save_version(session, page, max_versions=max_versions)
    page.content = content
    page.hash = digest
    page.updated_at = datetime.now()
    session.add(page)
    session.flush()
    return page, "updated"
