from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsboard.core.errors import StorageError
from newsboard.core.logging import log
from newsboard.core.settings import settings
from newsboard.models import Site, SITE_ID


@dataclass
class SiteSettings:
    title: str
    description: str
    gravity: float


async def get_site(db: AsyncSession) -> SiteSettings:
    try:
        site = await db.get(Site, SITE_ID)
    except SQLAlchemyError as e:
        log.error("get_site: database error ({err})", err=e)
        raise StorageError("get_site", e) from e
    if site is None:
        return SiteSettings(title="newsboard", description="", gravity=settings.default_gravity)
    return SiteSettings(title=site.title, description=site.description, gravity=max(0.0, site.gravity))


async def update_site(db: AsyncSession, title: str, description: str, gravity: float) -> SiteSettings:
    gravity = max(0.0, gravity)
    try:
        site = await db.get(Site, SITE_ID)
        if site is None:
            site = Site(id=SITE_ID)
            db.add(site)
        site.title = title
        site.description = description
        site.gravity = gravity
        await db.commit()
    except SQLAlchemyError as e:
        log.error("update_site: database error ({err})", err=e)
        await db.rollback()
        raise StorageError("update_site", e) from e
    log.info("site settings updated (gravity={g})", g=gravity)
    return SiteSettings(title=title, description=description, gravity=gravity)
