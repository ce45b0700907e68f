from datetime import datetime
from typing import Annotated
from pydantic import AfterValidator, BaseModel
from swarm.utils.clock import as_naive_utc


# Timestamps are stored as naive UTC; aware input is converted on the way in
UtcDateTime = Annotated[datetime, AfterValidator(as_naive_utc)]


class PaginationMeta(BaseModel):
    current_page: int
    per_page: int
    total_entries: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool
