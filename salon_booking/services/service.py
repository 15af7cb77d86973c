from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salon_booking.models.service import Service
from salon_booking.schemas.scheduling import ServiceSnapshot
from salon_booking.schemas.service import ServiceCreate


class ServiceCatalogService:
    """Business logic for the service catalog."""

    @staticmethod
    async def get_services(
        db: AsyncSession, include_inactive: bool = False
    ) -> list[Service]:
        """Get catalog services, active ones only by default."""
        stmt = select(Service)
        if not include_inactive:
            stmt = stmt.filter(Service.is_active.is_(True))
        stmt = stmt.order_by(Service.name)

        result = await db.execute(stmt)
        return result.scalars().all()

    @staticmethod
    async def get_service(db: AsyncSession, service_id: int) -> Optional[Service]:
        """Get a single service."""
        result = await db.execute(select(Service).filter(Service.id == service_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_service(db: AsyncSession, service_data: ServiceCreate) -> Service:
        """Create a new service."""
        db_service = Service(**service_data.model_dump())
        db.add(db_service)
        await db.commit()
        await db.refresh(db_service)
        return db_service

    @staticmethod
    async def get_snapshot(
        db: AsyncSession, service_id: int
    ) -> Optional[ServiceSnapshot]:
        """Duration and name of an active service, frozen for one booking attempt."""
        service = await ServiceCatalogService.get_service(db, service_id)
        if not service or not service.is_active:
            return None
        return ServiceSnapshot(
            id=service.id, name=service.name, duration_minutes=service.duration_minutes
        )
