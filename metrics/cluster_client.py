import logging
from typing import List, Optional, Any

import urllib3
from kubernetes import client
from kubernetes import config as kube_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from config import KUBE_REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class ClusterError(Exception):
    pass


class ClusterConfigError(ClusterError):
    """Raised when cluster credentials cannot be resolved at startup."""
    pass


def load_cluster_config(kubeconfig: Optional[str] = None, context: Optional[str] = None) -> str:
    """Load in-cluster credentials, falling back to a kubeconfig file.

    Returns which source was used ("in-cluster" or "kubeconfig").
    """
    try:
        kube_config.load_incluster_config()
        return "in-cluster"
    except ConfigException as e:
        logger.debug(f"In-cluster config unavailable: {e}")

    try:
        kube_config.load_kube_config(config_file=kubeconfig, context=context)
        return "kubeconfig"
    except (ConfigException, OSError, TypeError) as e:
        raise ClusterConfigError(f"unable to load cluster credentials: {e}")


class ClusterClient:
    """Thin wrapper over CoreV1Api that turns API failures into ClusterError."""

    def __init__(self, api: Any = None, request_timeout: Optional[int] = None):
        self.api = api if api is not None else client.CoreV1Api()
        self.request_timeout = request_timeout or KUBE_REQUEST_TIMEOUT_SECONDS

    @classmethod
    def from_config(cls, kubeconfig: Optional[str] = None, context: Optional[str] = None) -> "ClusterClient":
        source = load_cluster_config(kubeconfig, context)
        logger.info(f"Loaded cluster credentials from {source}")
        return cls()

    def list_nodes(self) -> List[Any]:
        try:
            return self.api.list_node(_request_timeout=self.request_timeout).items
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            raise ClusterError(f"failed to list the nodes: {e}")

    def list_pods_on_node(self, node_name: str) -> List[Any]:
        try:
            return self.api.list_pod_for_all_namespaces(
                field_selector=f"spec.nodeName={node_name}",
                _request_timeout=self.request_timeout,
            ).items
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            raise ClusterError(f"failed to get pods for node {node_name}: {e}")
