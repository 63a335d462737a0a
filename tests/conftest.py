"""
Test fixtures and configuration for pytest
"""
import pytest
from kubernetes import client as k8s

from metrics.cluster_client import ClusterError
from metrics.exposition import NodeResourceMetrics
from tracker import ScoreTracker


def make_node(name, allocatable=None, labels=None):
    """Build a V1Node the way list_node() returns it"""
    return k8s.V1Node(
        metadata=k8s.V1ObjectMeta(name=name, labels=labels),
        status=k8s.V1NodeStatus(allocatable=allocatable),
    )


def make_pod(name, phase='Running', containers=None, namespace='default'):
    """Build a V1Pod; `containers` is a list of (requests, limits) dict pairs"""
    specs = []
    for i, (requests, limits) in enumerate(containers or []):
        specs.append(k8s.V1Container(
            name=f"c{i}",
            resources=k8s.V1ResourceRequirements(requests=requests, limits=limits),
        ))
    return k8s.V1Pod(
        metadata=k8s.V1ObjectMeta(name=name, namespace=namespace),
        spec=k8s.V1PodSpec(containers=specs),
        status=k8s.V1PodStatus(phase=phase),
    )


class FakeCluster:
    """In-memory stand-in for ClusterClient.

    `nodes` is a list of V1Node; `pods` maps node name -> list of V1Pod.
    Failures are injected via `fail_nodes` (int count of failing list_nodes
    calls) and `fail_pods_for` (set of node names).
    """

    def __init__(self, nodes=None, pods=None):
        self.nodes = nodes or []
        self.pods = pods or {}
        self.fail_nodes = 0
        self.fail_pods_for = set()
        self.list_nodes_calls = 0

    def list_nodes(self):
        self.list_nodes_calls += 1
        if self.fail_nodes > 0:
            self.fail_nodes -= 1
            raise ClusterError("failed to list the nodes: connection refused")
        return self.nodes

    def list_pods_on_node(self, node_name):
        if node_name in self.fail_pods_for:
            raise ClusterError(f"failed to get pods for node {node_name}: timeout")
        return self.pods.get(node_name, [])


@pytest.fixture
def sinks():
    """Gauges on a private registry so tests do not share state"""
    return NodeResourceMetrics()


@pytest.fixture
def tracker():
    return ScoreTracker()


@pytest.fixture
def single_node_cluster():
    """Node n1 with cpu=4 allocatable and one running pod (req cpu=1, lim cpu=2)"""
    return FakeCluster(
        nodes=[make_node('n1', allocatable={'cpu': '4', 'memory': '8Gi'})],
        pods={'n1': [make_pod('app-1', containers=[({'cpu': '1'}, {'cpu': '2'})])]},
    )
