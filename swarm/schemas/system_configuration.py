from datetime import datetime
from uuid import UUID
from typing import ClassVar, Optional
from pydantic import BaseModel, Field
from swarm.changeset import ChangesetSchema, unique_constraint
from swarm.models.system_configuration import SystemConfiguration, ConfigCategory


class SystemConfigurationChanges(ChangesetSchema):
    """Rule table for system configuration writes."""
    orm_model: ClassVar[type] = SystemConfiguration
    required_fields: ClassVar[tuple[str, ...]] = ("key", "value")
    constraints: ClassVar[tuple] = (
        unique_constraint("key", "uq_system_configurations_key", "system_configurations.key"),
    )

    key: Optional[str] = Field(default=None, min_length=1, max_length=255)
    value: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[ConfigCategory] = ConfigCategory.GENERAL
    encrypted: Optional[bool] = False


class SystemConfigurationResponse(BaseModel):
    id: UUID
    key: str
    value: str
    description: Optional[str] = None
    category: ConfigCategory
    encrypted: bool
    updated_at: datetime

    class Config:
        from_attributes = True
