from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from swarm.database import get_db
from swarm.schemas.system_configuration import SystemConfigurationResponse
from swarm.services import system

router = APIRouter()


@router.get("", response_model=dict[str, list[SystemConfigurationResponse]])
def list_configurations(category: Optional[str] = None, db: Session = Depends(get_db)):
    """Configurations grouped by category, keys in alphabetical order."""
    return system.configurations_by_category(db, category)


@router.get("/{key}", response_model=SystemConfigurationResponse)
def get_configuration(key: str, db: Session = Depends(get_db)):
    return system.get_configuration(db, key)
