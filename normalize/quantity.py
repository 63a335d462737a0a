import logging
from typing import Any, Dict, Mapping, Optional

from kubernetes.utils import parse_quantity

logger = logging.getLogger(__name__)


def quantity_to_float(value: Any) -> float:
    """Convert a Kubernetes quantity ('100m', '2Gi', 4) to a float.

    CPU comes back in cores and memory in bytes. Raises ValueError for
    strings that are not valid quantities.
    """
    return float(parse_quantity(value))


def resource_map(raw: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """Convert a resource list from the API into ResourceName -> float.

    Entries that fail to parse are dropped with a warning; the rest still count.
    """
    parsed: Dict[str, float] = {}
    if not raw:
        return parsed
    for name, value in raw.items():
        try:
            parsed[name] = quantity_to_float(value)
        except (ValueError, TypeError) as e:
            logger.warning(f"Ignoring malformed quantity {name}={value!r}: {e}")
    return parsed
