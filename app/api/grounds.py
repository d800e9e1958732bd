"""Ground endpoints."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.ground import Ground
from app.schemas.ground import GroundCreate, GroundUpdate, GroundInDB

router = APIRouter(prefix="/grounds", tags=["grounds"])


@router.post("", response_model=GroundInDB, status_code=201)
async def create_ground(
    ground: GroundCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a bookable ground.

    Args:
        ground: Ground data
        db: Database session

    Returns:
        Created ground
    """
    db_ground = Ground(**ground.model_dump())
    db.add(db_ground)
    await db.commit()
    await db.refresh(db_ground)

    return db_ground


@router.get("", response_model=List[GroundInDB])
async def list_grounds(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
):
    """
    List grounds.

    Args:
        skip: Number of records to skip
        limit: Maximum number of records to return
        db: Database session

    Returns:
        List of grounds
    """
    result = await db.execute(
        select(Ground).order_by(Ground.id).offset(skip).limit(limit)
    )
    return result.scalars().all()


@router.get("/{ground_id}", response_model=GroundInDB)
async def get_ground(
    ground_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific ground by ID."""
    ground = await db.get(Ground, ground_id)

    if not ground:
        raise HTTPException(status_code=404, detail="Ground not found")

    return ground


@router.patch("/{ground_id}", response_model=GroundInDB)
async def update_ground(
    ground_id: int,
    ground_update: GroundUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a ground's information.

    Args:
        ground_id: Ground ID
        ground_update: Fields to update
        db: Database session

    Returns:
        Updated ground
    """
    ground = await db.get(Ground, ground_id)

    if not ground:
        raise HTTPException(status_code=404, detail="Ground not found")

    update_data = ground_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(ground, field, value)

    await db.commit()
    await db.refresh(ground)

    return ground
