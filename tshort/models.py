"""SQLAlchemy ORM model for link records.

Data Model Layout
=================
::
    links table
    ├─ id (VARCHAR(64) PRIMARY KEY)
    ├─ url (TEXT NOT NULL)
    ├─ url_hash (VARCHAR(64) NOT NULL, UNIQUE uq_links_url_hash)
    ├─ origin (VARCHAR(64) NULL)
    └─ created_at (TIMESTAMPTZ, DEFAULT NOW())

How to Use
===========
**Step 1 — Import**::
    from tshort.models import Link

**Step 2 — Query links**::
    result = await session.execute(select(Link).where(Link.id == "Vx3eYt"))
    link = result.scalar_one_or_none()

Key Behaviours
===============
- ``id`` and ``url_hash`` (hex SHA-256 of ``url``) are both unique; the store
  relies on these constraints to make concurrent inserts of the same URL
  converge on one row. Uniqueness sits on the digest because a btree index
  entry cannot hold an arbitrarily long URL.
- Rows are written once and never updated.
- ``origin`` is the submitter's address, kept for information only.

Classes:
    Link:  One identifier to URL mapping.
"""

import datetime

from sqlalchemy import DateTime, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from tshort.database import Base

__all__ = ["Link"]


class Link(Base):
    __tablename__ = "links"
    __table_args__ = (UniqueConstraint("url_hash", name="uq_links_url_hash"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    url_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    origin: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Link(id='{self.id}', url='{self.url}')>"
