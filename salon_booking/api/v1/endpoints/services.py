from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from salon_booking.api.deps.database import get_db
from salon_booking.schemas.service import Service, ServiceCreate
from salon_booking.services.service import ServiceCatalogService

router = APIRouter()


@router.get("/", response_model=list[Service])
async def get_services(
    include_inactive: bool = False, db: AsyncSession = Depends(get_db)
):
    """Get catalog services."""
    return await ServiceCatalogService.get_services(db, include_inactive)


@router.post("/", response_model=Service, status_code=status.HTTP_201_CREATED)
async def create_service(service_data: ServiceCreate, db: AsyncSession = Depends(get_db)):
    """Create service."""
    return await ServiceCatalogService.create_service(db, service_data)


@router.get("/{service_id}", response_model=Service)
async def get_service(service_id: int, db: AsyncSession = Depends(get_db)):
    """Get service by ID."""
    service = await ServiceCatalogService.get_service(db, service_id)
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service
