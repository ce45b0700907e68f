import logging
import uuid
from enum import Enum as PyEnum
from typing import Iterable
from sqlalchemy import Column, String, Text, Boolean, DateTime, Uuid, UniqueConstraint, Index
from swarm.database import Base
from swarm.utils.clock import utcnow

logger = logging.getLogger(__name__)


class ConfigCategory(str, PyEnum):
    GENERAL = "general"
    TRADING = "trading"
    RISK_MANAGEMENT = "risk_management"
    API = "api"
    MARKET_DATA = "market_data"
    NOTIFICATIONS = "notifications"


class SystemConfiguration(Base):
    """
    Runtime-tunable key/value system parameter.

    Values are stored as text; callers parse them. The `encrypted` flag is
    recorded but no cipher is wired in, so flagged values are stored and
    returned as given.
    """
    __tablename__ = "system_configurations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    key = Column(String(255), nullable=False)
    value = Column(Text, nullable=False)
    description = Column(String(500), nullable=True)
    category = Column(String(50), default=ConfigCategory.GENERAL.value)
    encrypted = Column(Boolean, default=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("key", name="uq_system_configurations_key"),
        Index("ix_system_configurations_category", "category"),
    )

    @property
    def is_encrypted(self) -> bool:
        return bool(self.encrypted)

    def get_value(self) -> str:
        if self.encrypted:
            logger.warning(
                f"Configuration '{self.key}' is flagged encrypted but encryption is not supported; "
                f"returning the stored value"
            )
        return self.value

    @staticmethod
    def by_category(configs: Iterable["SystemConfiguration"]) -> dict[str, list["SystemConfiguration"]]:
        """Group configurations by category, keeping their order within each group."""
        grouped: dict[str, list["SystemConfiguration"]] = {}
        for config in configs:
            grouped.setdefault(config.category, []).append(config)
        return grouped

    def __repr__(self):
        return f"<SystemConfiguration {self.key} ({self.category})>"
