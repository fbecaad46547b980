"""Domain entities for paged client queries."""

from dataclasses import dataclass, field
from enum import Enum

from .client import ClientRecord


class FilterMode(str, Enum):
    """Which client fields a free-text query is matched against."""

    ALL = "all"
    NAME = "name"
    PHONE = "phone"
    ID = "id"


@dataclass
class ClientPage:
    """One page of the filtered, sorted client list."""

    items: list[ClientRecord] = field(default_factory=list)
    total: int = 0        # post-filter count
    has_more: bool = False
    offset: int = 0
    limit: int = 20
