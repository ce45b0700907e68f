"""
System configuration registry.
"""

import logging
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from swarm.changeset import cast
from swarm.errors import NotFound
from swarm.models.system_configuration import SystemConfiguration
from swarm.schemas.system_configuration import SystemConfigurationChanges
from swarm.services.persistence import delete, persist

logger = logging.getLogger(__name__)


def list_configurations(db: Session, category: Optional[str] = None) -> list[SystemConfiguration]:
    query = db.query(SystemConfiguration)
    if category:
        query = query.filter(SystemConfiguration.category == category)
    return query.order_by(SystemConfiguration.key.asc()).all()


def find_configuration(db: Session, key: str) -> Optional[SystemConfiguration]:
    return db.query(SystemConfiguration).filter(SystemConfiguration.key == key).first()


def get_configuration(db: Session, key: str) -> SystemConfiguration:
    config = find_configuration(db, key)
    if not config:
        raise NotFound("SystemConfiguration", key)
    return config


def get_config_value(db: Session, key: str, default: Optional[str] = None) -> Optional[str]:
    """Stored value for `key`, or `default` when no such configuration exists."""
    config = find_configuration(db, key)
    if not config:
        return default
    return config.get_value()


def create_configuration(db: Session, attrs: Mapping[str, Any]) -> SystemConfiguration:
    config = persist(db, cast(SystemConfigurationChanges, None, attrs))
    logger.info(f"Created configuration {config.key} ({config.category})")
    return config


def update_configuration(db: Session, config: SystemConfiguration, attrs: Mapping[str, Any]) -> SystemConfiguration:
    config = persist(db, cast(SystemConfigurationChanges, config, attrs))
    logger.info(f"Updated configuration {config.key}")
    return config


def delete_configuration(db: Session, config: SystemConfiguration) -> None:
    delete(db, config)
    logger.info(f"Deleted configuration {config.key}")


def configurations_by_category(
    db: Session,
    category: Optional[str] = None,
) -> dict[str, list[SystemConfiguration]]:
    return SystemConfiguration.by_category(list_configurations(db, category))
