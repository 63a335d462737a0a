"""Orchestrator: sample nodes -> aggregate -> occupancy/score -> gauges, every tick.
Runs the sampling loop, the metrics endpoint and the signal handler as one actor group.
"""
import logging
import threading
from typing import List, Optional, Sequence, Tuple

from config import (
    setup_logging, parse_args, validate_settings, ConfigValidationError,
)
from metrics import discovery as discovery_mod
from metrics.cluster_client import ClusterClient, ClusterError
from metrics.exposition import NodeResourceMetrics, MetricsServer, create_app
from analysis.node_analysis import report_node
from lifecycle import Group, SignalActor, is_clean_exit
from tracker import ScoreTracker

# Configure logging
logger = logging.getLogger(__name__)


def run_pass(cluster: ClusterClient,
             resources: Sequence[str],
             sinks: NodeResourceMetrics,
             tracker: ScoreTracker,
             stop_event: Optional[threading.Event] = None) -> int:
    """Sample every node once and publish its gauges.

    A node whose pods cannot be listed is skipped for this pass; failing to
    list the nodes skips the whole pass. Once `stop_event` is set the
    remaining nodes are abandoned. Returns the number of nodes reported.
    """
    try:
        nodes = discovery_mod.discover_nodes(cluster)
    except ClusterError as e:
        logger.error(f"Skipping sampling pass: {e}")
        return 0

    reported = 0
    for node in nodes:
        if stop_event is not None and stop_event.is_set():
            logger.info(f"Stop requested, abandoning pass after {reported} of {len(nodes)} nodes")
            break
        try:
            workloads = discovery_mod.discover_node_workloads(cluster, node['name'])
        except ClusterError as e:
            logger.error(f"Skipping node {node['name']}: {e}")
            continue
        report_node(node, workloads, resources, sinks, tracker)
        reported += 1
    logger.debug(f"Scores after pass: {tracker.snapshot()}")
    return reported


def sampling_loop(stop_event: threading.Event,
                  interval: float,
                  cluster: ClusterClient,
                  resources: Sequence[str],
                  sinks: NodeResourceMetrics,
                  tracker: ScoreTracker) -> None:
    """Run a pass every `interval` seconds until `stop_event` is set."""
    logger.info(f"Starting sampling loop (interval={interval}s, resources={list(resources)})")
    try:
        while not stop_event.wait(interval):
            try:
                run_pass(cluster, resources, sinks, tracker, stop_event)
            except Exception:
                logger.exception("Sampling pass failed")
    finally:
        logger.info("Exited sampling loop")


def build_group(settings, cluster: ClusterClient, sinks: NodeResourceMetrics,
                tracker: ScoreTracker, signals: Optional[SignalActor] = None) -> Tuple[Group, MetricsServer]:
    """Wire the signal, serving and sampling actors into one group.

    Returns the group and its metrics server, whose port is resolved once it binds.
    """
    group = Group(grace=settings['shutdown_timeout'])
    stop_sampling = threading.Event()
    server = MetricsServer(create_app(sinks.registry), port=settings['port'])

    if signals is not None:
        group.add('signal', signals.execute, signals.interrupt)

    def stop_server(err):
        logger.info(f"Stopping metrics server: {err}")
        server.shutdown(settings['shutdown_timeout'])
        logger.info("Stopped metrics server")

    group.add('metrics-server', server.serve, stop_server)

    def stop_loop(err):
        logger.info(f"Stopping sampling loop: {err}")
        stop_sampling.set()

    group.add(
        'sampling-loop',
        lambda: sampling_loop(stop_sampling, settings['interval'], cluster,
                              settings['resources'], sinks, tracker),
        stop_loop,
    )
    return group, server


def main(argv: Optional[List[str]] = None) -> int:
    # Setup logging first
    setup_logging()

    settings = parse_args(argv)
    try:
        validate_settings(settings)
    except ConfigValidationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        cluster = ClusterClient.from_config(settings['kubeconfig'], settings['context'])
    except ClusterError as e:
        logger.error(f"Cluster client error: {e}")
        return 1

    if not settings['resources']:
        logger.warning("No tracked resources configured; only empty passes will run")

    try:
        sinks = NodeResourceMetrics(settings['node_labels'])
    except ValueError as e:
        logger.error(f"Configuration error: invalid node labels: {e}")
        return 1
    tracker = ScoreTracker()
    signals = SignalActor()
    signals.install()
    try:
        logger.info(f"Starting Node Resource Exporter on port {settings['port']}")
        group, _ = build_group(settings, cluster, sinks, tracker, signals)
        err = group.run()
    finally:
        signals.restore()

    if is_clean_exit(err):
        logger.info(f"Node Resource Exporter stopped: {err or 'shutdown'}")
        return 0
    logger.error(f"Node Resource Exporter failed: {err}")
    return 1


if __name__ == '__main__':
    raise SystemExit(main())
