from typing import List, Dict, Any

from normalize.quantity import resource_map
from metrics.cluster_client import ClusterClient


def node_snapshot(node: Any) -> Dict[str, Any]:
    """Reduce a V1Node to the fields the exporter reads.

    Returns dict with keys: name, labels, allocatable (ResourceName -> float).
    """
    metadata = node.metadata
    status = node.status
    return {
        'name': metadata.name,
        'labels': dict(metadata.labels or {}),
        'allocatable': resource_map(status.allocatable if status else None),
    }


def workload_snapshot(pod: Any) -> Dict[str, Any]:
    """Reduce a V1Pod to its phase and per-container requests/limits."""
    containers = []
    for container in (pod.spec.containers if pod.spec else None) or []:
        resources = container.resources
        containers.append({
            'requests': resource_map(resources.requests if resources else None),
            'limits': resource_map(resources.limits if resources else None),
        })
    return {
        'name': pod.metadata.name,
        'namespace': pod.metadata.namespace,
        'phase': pod.status.phase if pod.status else None,
        'containers': containers,
    }


def discover_nodes(cluster: ClusterClient) -> List[Dict[str, Any]]:
    """List every node in the cluster. Raises ClusterError if the list fails."""
    return [node_snapshot(n) for n in cluster.list_nodes()]


def discover_node_workloads(cluster: ClusterClient, node_name: str) -> List[Dict[str, Any]]:
    """List the pods scheduled to `node_name`. Raises ClusterError if the list fails."""
    return [workload_snapshot(p) for p in cluster.list_pods_on_node(node_name)]


def node_label_values(node: Dict[str, Any], label_names: List[str]) -> List[str]:
    """Positional label values for the configured label names; missing labels are ''."""
    labels = node.get('labels') or {}
    return [labels.get(name, '') for name in label_names]
