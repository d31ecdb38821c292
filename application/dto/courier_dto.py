from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional

@dataclass
class CourierMetricsDTO:
    phone: str
    courier: str
    delivered: int = 0
    returned: int = 0
    cancelled: int = 0
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return asdict(self)
