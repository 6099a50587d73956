from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Table, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiftdesk.db.base import Base


class ActorStatus(str, enum.Enum):
    ACTIVE = "active"
    RETIRED = "retired"
    # Shared accounts (e.g. a front-desk tablet) can sign in like active ones.
    SHARED = "shared"


actor_roles = Table(
    "actor_roles",
    Base.metadata,
    Column("actor_id", ForeignKey("actors.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


role_capabilities = Table(
    "role_capabilities",
    Base.metadata,
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("capability_id", ForeignKey("capabilities.id", ondelete="CASCADE"), primary_key=True),
)


class Capability(Base):
    __tablename__ = "capabilities"
    __table_args__ = (UniqueConstraint("name", "guard_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # `<resource>.<action>`, e.g. "shift.view" or "properties.reorder".
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    guard_name: Mapped[str] = mapped_column(String(50), default="web", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    roles: Mapped[list["Role"]] = relationship(
        secondary=role_capabilities,
        back_populates="capabilities",
    )


class Role(Base):
    __tablename__ = "roles"
    __table_args__ = (UniqueConstraint("name", "guard_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    guard_name: Mapped[str] = mapped_column(String(50), default="web", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    capabilities: Mapped[list[Capability]] = relationship(
        secondary=role_capabilities,
        back_populates="roles",
    )
    actors: Mapped[list["Actor"]] = relationship(
        secondary=actor_roles,
        back_populates="roles",
    )


class Actor(Base):
    __tablename__ = "actors"
    __table_args__ = (UniqueConstraint("email"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[ActorStatus] = mapped_column(
        Enum(ActorStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        default=ActorStatus.ACTIVE,
        nullable=False,
    )
    must_change_password: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    roles: Mapped[list[Role]] = relationship(
        secondary=actor_roles,
        back_populates="actors",
    )

    @property
    def is_retired(self) -> bool:
        return self.status == ActorStatus.RETIRED
