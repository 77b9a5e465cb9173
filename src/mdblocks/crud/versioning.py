"""Page version history: save, prune, list, and diff"""

from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from mdblocks.core.utils.diff import unified_diff
from mdblocks.crud.models import Page, PageVersion


def _get_version(session: Session, page_id: UUID, num: int) -> PageVersion:
    v = session.exec(
        select(PageVersion)
        .where(PageVersion.page_id == page_id)
        .where(PageVersion.version_num == num)
    ).one_or_none()
    if v is None:
        raise ValueError(f"Version {num} not found for page {page_id}")
    return v


def list_versions(session: Session, page_id: UUID) -> list[PageVersion]:
    """Return all versions for a page ordered by version_num ascending."""
    return list(
        session.exec(
            select(PageVersion)
            .where(PageVersion.page_id == page_id)
            .order_by(PageVersion.version_num.asc())
        ).all()
    )


def diff_versions(session: Session, page_id: UUID, from_num: int, to_num: int, context: int = 3) -> list[str]:
    """Unified diff lines between two stored versions. Raises ValueError if either is missing."""
    v_from, v_to = _get_version(session, page_id, from_num), _get_version(session, page_id, to_num)
    return unified_diff(v_from.content, v_to.content, f"v{from_num}", f"v{to_num}", context)


def prune_versions(session: Session, page_id: UUID, max_versions: int) -> int:
    """Delete oldest versions beyond max_versions. Returns count deleted. No-op if max_versions=0."""
    if max_versions == 0:
        return 0

    versions = list_versions(session, page_id)
    excess = len(versions) - max_versions
    if excess <= 0:
        return 0

    for v in versions[:excess]:
        session.delete(v)
    session.flush()
    return excess


def save_version(session: Session, page: Page, max_versions: int = 10) -> PageVersion:
    """Snapshot the page's current content as version MAX(version_num)+1, then prune."""
    latest = session.exec(
        select(func.max(PageVersion.version_num))
        .where(PageVersion.page_id == page.id)
    ).one()

    version = PageVersion(
        page_id=page.id,
        version_num=(latest or 0) + 1,
        content=page.content,
        hash=page.hash,
    )
    session.add(version)
    session.flush()

    if max_versions > 0:
        prune_versions(session, page.id, max_versions)
    return version
