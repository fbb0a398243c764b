"""Contact model module."""

from __future__ import annotations

from sqlalchemy import Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studio_quotes.models.base import AuditMixin, Base, StudioScopedMixin
from studio_quotes.models.enums import ContactStatus


class Contact(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "contacts"
    __table_args__ = (Index("idx_contacts_studio_status", "studio_id", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(40))
    email: Mapped[str | None] = mapped_column(String(320))
    address: Mapped[str | None] = mapped_column(Text)
    status: Mapped[ContactStatus] = mapped_column(Enum(ContactStatus), default=ContactStatus.PROSPECT, nullable=False)
