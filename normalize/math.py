from typing import Dict, Iterable, Mapping, Optional


def aggregate_resources(specs: Iterable[Optional[Mapping[str, float]]]) -> Dict[str, float]:
    """Sum resource quantities across a sequence of per-container resource maps.

    Names absent from every map are absent from the result (not present as 0).
    `None` entries stand for containers that declare nothing and are skipped.
    Quantities are accepted as-is, including negative values.
    """
    totals: Dict[str, float] = {}
    for spec in specs:
        if not spec:
            continue
        for name, quantity in spec.items():
            totals[name] = totals.get(name, 0.0) + quantity
    return totals


def occupancy(requested: float, allocatable: float) -> Optional[float]:
    """Requested share of allocatable capacity, in percent.

    Returns None when allocatable is zero or negative. Values above 100 mean
    the node is over-committed and are not clamped.
    """
    if allocatable <= 0:
        return None
    return 100.0 * requested / allocatable
