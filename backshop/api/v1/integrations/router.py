"""
Integration API router
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from backshop.core.database import get_db
from backshop.models.integration import IntegrationType
from backshop.schemas.integration import (
    IntegrationCreate,
    IntegrationUpdate,
    IntegrationResponse,
    IntegrationStatistics,
)
from backshop.services.integration_service import IntegrationService

router = APIRouter()


@router.post(
    "/",
    response_model=IntegrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create integration"
)
async def create_integration(data: IntegrationCreate, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).create(data.model_dump())


@router.get("/", response_model=List[IntegrationResponse], summary="List integrations")
async def list_integrations(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db)
):
    return await IntegrationService(db).find_all(include_inactive=include_inactive)


@router.get("/statistics", response_model=IntegrationStatistics, summary="Integration statistics")
async def get_integration_statistics(db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).get_statistics()


@router.get("/type/{integration_type}", response_model=List[IntegrationResponse], summary="List by type")
async def list_integrations_by_type(
    integration_type: IntegrationType,
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db)
):
    return await IntegrationService(db).find_by_type(integration_type, include_inactive=include_inactive)


@router.get("/{integration_id}", response_model=IntegrationResponse, summary="Get integration")
async def get_integration(integration_id: str, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).find_one(integration_id)


@router.patch("/{integration_id}", response_model=IntegrationResponse, summary="Update integration")
async def update_integration(
    integration_id: str,
    data: IntegrationUpdate,
    db: AsyncSession = Depends(get_db)
):
    return await IntegrationService(db).update(integration_id, data.model_dump(exclude_unset=True))


@router.post("/{integration_id}/activate", response_model=IntegrationResponse, summary="Activate integration")
async def activate_integration(integration_id: str, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).activate(integration_id)


@router.post("/{integration_id}/deactivate", response_model=IntegrationResponse, summary="Deactivate integration")
async def deactivate_integration(integration_id: str, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).deactivate(integration_id)


@router.delete("/{integration_id}", response_model=IntegrationResponse, summary="Delete integration")
async def delete_integration(integration_id: str, db: AsyncSession = Depends(get_db)):
    return await IntegrationService(db).remove(integration_id)
