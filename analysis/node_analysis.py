"""
Node reporting - one node's share of a sampling pass.
Aggregates running pods' requests and limits, computes occupancy against
allocatable, and feeds the cumulative score.
"""
import logging
from typing import List, Dict, Any, Sequence, Tuple

from config import RUNNING_POD_PHASE
from metrics.discovery import node_label_values
from metrics.exposition import NodeResourceMetrics
from normalize.math import aggregate_resources, occupancy
from tracker import ScoreTracker

logger = logging.getLogger(__name__)


def running_workloads(workloads: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [w for w in workloads if w.get('phase') == RUNNING_POD_PHASE]


def node_totals(workloads: List[Dict[str, Any]]) -> Tuple[Dict[str, float], Dict[str, float]]:
    """Requested and limit totals over the running workloads' containers.

    The two dicts are built independently on every call.
    """
    containers = [c for w in running_workloads(workloads) for c in w.get('containers', [])]
    requests = aggregate_resources(c.get('requests') for c in containers)
    limits = aggregate_resources(c.get('limits') for c in containers)
    return requests, limits


def report_node(node: Dict[str, Any],
                workloads: List[Dict[str, Any]],
                resources: Sequence[str],
                sinks: NodeResourceMetrics,
                tracker: ScoreTracker) -> None:
    """Emit request, limit, occupancy and score gauges for one node.

    Occupancy and score are left at their previous values when the node
    reports no positive allocatable quantity for a resource.
    """
    name = node['name']
    label_values = node_label_values(node, sinks.node_label_names)
    allocatable = node.get('allocatable') or {}

    requests, limits = node_totals(workloads)
    logger.info(f"Total requests on node {name}: {requests}")
    logger.info(f"Total limits on node {name}: {limits}")

    for resource in resources:
        score_labels = [resource] + label_values
        labels = [name] + score_labels

        requested = requests.get(resource, 0.0)
        sinks.requests.labels(*labels).set(requested)
        sinks.limits.labels(*labels).set(limits.get(resource, 0.0))

        if resource not in allocatable:
            continue
        occ = occupancy(requested, allocatable[resource])
        if occ is None:
            continue
        logger.debug(f"{resource} occupancy on node {name}: {occ:.2f}%")
        sinks.occupancy.labels(*labels).set(occ)
        sinks.score.labels(*score_labels).set(tracker.score(resource, occ / 100.0))
