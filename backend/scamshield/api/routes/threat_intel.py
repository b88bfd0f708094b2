"""
ScamShield Threat Intel API Routes

Threat category taxonomy and the local IOC table.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from scamshield.api.dependencies import get_engine
from scamshield.models import IOC, IOCType, Severity, ThreatCategory, ThreatCategoryKey
from scamshield.services import ThreatScoringEngine
from scamshield.utils.exceptions import InvalidIOCError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/threat-intel", tags=["threat-intel"])


class IOCCreate(BaseModel):
    """Request model for adding an IOC."""
    type: IOCType
    value: str = Field(..., min_length=1, max_length=500)
    category: ThreatCategoryKey
    severity: Severity = Severity.HIGH
    source: str = Field("LOCAL", max_length=50)
    description: Optional[str] = Field(None, max_length=500)


@router.get("/categories", response_model=List[ThreatCategory])
async def list_categories(engine: ThreatScoringEngine = Depends(get_engine)):
    return engine.list_categories()


@router.get("/categories/{key}", response_model=ThreatCategory)
async def get_category(
    key: str,
    engine: ThreatScoringEngine = Depends(get_engine),
):
    try:
        return engine.get_category(key)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown threat category: {key}")


@router.get("/iocs", response_model=List[IOC])
async def list_iocs(engine: ThreatScoringEngine = Depends(get_engine)):
    return engine.list_iocs()


@router.post("/iocs", response_model=IOC)
async def add_ioc(
    ioc: IOCCreate,
    engine: ThreatScoringEngine = Depends(get_engine),
):
    """Add or replace a known-bad indicator."""
    try:
        added = engine.add_ioc(ioc.model_dump())
    except InvalidIOCError as e:
        raise HTTPException(status_code=422, detail=e.message)

    logger.info(f"IOC added: {added.type.value}={added.value} ({added.category.value})")
    return added
