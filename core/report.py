import hashlib
import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Tuple

AWS = "AWS"
AZURE = "Azure"
GCP = "GCP"
RESOURCES = (AWS, AZURE, GCP)


def compute_identity(fields: Iterable[Tuple[str, Any]], region: str) -> str:
    """
    Fingerprint a raw record plus the region it was collected for.

    Fields are hashed in declaration order as JSON-encoded ``[name, value]``
    pairs, so neither a value moving between columns nor separator characters
    inside a value can make two records collide.
    """
    parts = [[name, "" if value is None else str(value)] for name, value in fields]
    parts.append(["region", region or ""])
    raw = json.dumps(parts, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Report:
    id: str
    account_number: str
    account_name: str
    day: int
    month: str
    year: int
    service_type: str
    usage_quantity: float
    cost: float
    region: str
    unit_of_measure: str
    resource: str

    def grouping_key(self) -> Tuple:
        return (
            self.account_number,
            self.account_name,
            self.service_type,
            self.day,
            self.month,
            self.year,
            self.region,
            self.unit_of_measure,
            self.resource,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
