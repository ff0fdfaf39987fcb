"""Plain records returned by the DAO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class CustomerEntity:
    """A row of the Customer table, as seen by the DAO."""

    customer_id: int
    name: str
    address: str
    city: Optional[str] = None
