from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, JSON, String, Text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.geoprocessing.domain.models.task_status import GeoprocessingTaskStatus
from src.setup.store_config import get_task_store_settings


class Base(DeclarativeBase):
    pass


class GeoprocessingTaskRow(Base):
    __tablename__ = get_task_store_settings().TASKS_TABLE

    service: Mapped[str] = mapped_column(String(128), primary_key=True)
    id: Mapped[str] = mapped_column(String(256), primary_key=True)
    location: Mapped[str] = mapped_column(String(512), nullable=False)
    status: Mapped[GeoprocessingTaskStatus] = mapped_column(
        Enum(GeoprocessingTaskStatus, name="gp_task_status"), nullable=False
    )
    request_id: Mapped[str | None] = mapped_column(String(128))
    wss: Mapped[str | None] = mapped_column(Text)
    geometry_uri: Mapped[str | None] = mapped_column(Text)
    data: Mapped[dict | None] = mapped_column(JSON)
    error: Mapped[str | None] = mapped_column(Text)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    duration: Mapped[int | None] = mapped_column(Integer)
    estimate: Mapped[int | None] = mapped_column(Integer)


class PostgresOrm:
    """
    SQLAlchemy async ORM holder. Create once and inject where needed.
    """

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        self._engine: AsyncEngine = create_async_engine(database_url, echo=echo)
        self._session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self._engine, expire_on_commit=False
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory

    async def create_all(self) -> None:
        async with self._engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()
