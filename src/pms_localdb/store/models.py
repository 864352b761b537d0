from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional


@dataclass
class Customer:
    mobile_no: str
    customer_name: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class ParcelSubmission:
    """Fields of a submitted parcel that feed the suggestion store."""

    sender_name: str
    sender_mobile: str
    receiver_name: str
    receiver_mobile: str
    description: str
    remark: Optional[str] = None
