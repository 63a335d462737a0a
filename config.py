import argparse
import logging
import os
import sys
from typing import Optional, List, Dict, Any, Sequence, Tuple


# =============================================================================
# Logging Configuration
# =============================================================================
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = os.getenv(
    "LOG_FORMAT",
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def setup_logging():
    """Configure application-wide logging"""
    level = getattr(logging, LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    try:
        return int(v)
    except ValueError:
        logging.warning("Invalid %s=%r, using default %s", name, v, default)
        return default


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    try:
        return float(v)
    except ValueError:
        logging.warning("Invalid %s=%r, using default %s", name, v, default)
        return default


def parse_csv(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated flag value, dropping blank items."""
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


# =============================================================================
# Exporter Configuration
# =============================================================================
EXPORTER_PORT: int = _env_int("EXPORTER_PORT", 8080)
# No default: an empty list means nothing is tracked
TRACKED_RESOURCES: str = os.getenv("TRACKED_RESOURCES", "")
NODE_LABELS: str = os.getenv("NODE_LABELS", "")
SAMPLING_INTERVAL_SECONDS: float = _env_float("SAMPLING_INTERVAL_SECONDS", 10.0)
SHUTDOWN_TIMEOUT_SECONDS: float = _env_float("SHUTDOWN_TIMEOUT_SECONDS", 300.0)

# =============================================================================
# Kubernetes API Configuration
# =============================================================================
KUBECONFIG: Optional[str] = os.getenv("KUBECONFIG") or None
KUBE_CONTEXT: Optional[str] = os.getenv("KUBE_CONTEXT") or None
KUBE_REQUEST_TIMEOUT_SECONDS: int = _env_int("KUBE_REQUEST_TIMEOUT_SECONDS", 30)

RUNNING_POD_PHASE: str = "Running"


__all__ = [
    "LOG_LEVEL",
    "LOG_FORMAT",
    "setup_logging",
    "parse_csv",
    "EXPORTER_PORT",
    "TRACKED_RESOURCES",
    "NODE_LABELS",
    "SAMPLING_INTERVAL_SECONDS",
    "SHUTDOWN_TIMEOUT_SECONDS",
    "KUBECONFIG",
    "KUBE_CONTEXT",
    "KUBE_REQUEST_TIMEOUT_SECONDS",
    "RUNNING_POD_PHASE",
    "parse_args",
    "validate_settings",
    "ConfigValidationError",
]


def parse_args(argv: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    """Parse command-line flags into a settings dict.

    Flags default to the environment-derived values above, so either source
    can configure the exporter.
    """
    parser = argparse.ArgumentParser(
        prog="node-resource-exporter",
        description="Export per-node resource requests, limits and occupancy as Prometheus metrics",
    )
    parser.add_argument("-p", "--port", type=int, default=EXPORTER_PORT,
                        help="Prometheus target port")
    parser.add_argument("-r", "--resources", default=TRACKED_RESOURCES,
                        help="Comma-separated list of tracked resource names")
    parser.add_argument("-l", "--node-labels", default=NODE_LABELS,
                        help="Comma-separated list of node labels to attach to metrics")
    parser.add_argument("--interval", type=float, default=SAMPLING_INTERVAL_SECONDS,
                        help="Seconds between sampling passes")
    parser.add_argument("--shutdown-timeout", type=float, default=SHUTDOWN_TIMEOUT_SECONDS,
                        help="Grace period in seconds for stopping the metrics server")
    parser.add_argument("--kubeconfig", default=KUBECONFIG,
                        help="Kubeconfig file, used when not running in-cluster")
    parser.add_argument("--context", default=KUBE_CONTEXT,
                        help="Kubeconfig context, used when not running in-cluster")
    args = parser.parse_args(argv)

    return {
        "port": args.port,
        "resources": parse_csv(args.resources),
        "node_labels": parse_csv(args.node_labels),
        "interval": args.interval,
        "shutdown_timeout": args.shutdown_timeout,
        "kubeconfig": args.kubeconfig,
        "context": args.context,
    }


# =============================================================================
# Configuration Validation
# =============================================================================
class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""
    pass


def _validate_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name} must be positive, got {value}")


def _validate_port(value: int) -> None:
    # 0 asks the OS for an ephemeral port
    if not (0 <= value <= 65535):
        raise ConfigValidationError(f"port must be between 0 and 65535, got {value}")


def validate_settings(settings: Dict[str, Any]) -> None:
    """Validate settings on startup

    Raises:
        ConfigValidationError: If any configuration value is invalid
    """
    errors: List[str] = []

    try:
        _validate_port(settings["port"])
    except ConfigValidationError as e:
        errors.append(str(e))

    try:
        _validate_positive("interval", settings["interval"])
    except ConfigValidationError as e:
        errors.append(str(e))

    try:
        _validate_positive("shutdown_timeout", settings["shutdown_timeout"])
    except ConfigValidationError as e:
        errors.append(str(e))

    try:
        _validate_positive("KUBE_REQUEST_TIMEOUT_SECONDS", KUBE_REQUEST_TIMEOUT_SECONDS)
    except ConfigValidationError as e:
        errors.append(str(e))

    if errors:
        raise ConfigValidationError(
            "Configuration validation failed:\n  - " + "\n  - ".join(errors)
        )
