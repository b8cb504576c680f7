"""Kubernetes node watcher that applies EC2 tags to new nodes."""

import threading

from kubernetes import client, config, watch
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError, ProtocolError, ReadTimeoutError

from node_labeler.config import LabelerConfig
from node_labeler.ec2 import EC2InstanceLookup, instance_id_from_provider_id
from node_labeler.exceptions import (
    ConfigurationError,
    KubernetesError,
    MissingRegionError,
    NodeLabelerError,
)
from node_labeler.logging_config import get_logger, node_logger
from node_labeler.models.node import NodeMetadataSnapshot, NodeTaint, ReconciliationResult
from node_labeler.reconciler import reconcile

logger = get_logger(__name__)


def load_core_api(cfg: LabelerConfig) -> client.CoreV1Api:
    """Create a CoreV1Api client from the in-cluster config or a kubeconfig.

    Raises:
        ConfigurationError: If no usable configuration can be loaded
    """
    try:
        if cfg.in_cluster:
            config.load_incluster_config()
            logger.info("Using in-cluster Kubernetes configuration")
        else:
            config.load_kube_config(config_file=cfg.kubeconfig)
            logger.info(f"Using kubeconfig {cfg.kubeconfig or '~/.kube/config'}")
    except (ConfigException, OSError) as e:
        raise ConfigurationError(
            f"Failed to load Kubernetes configuration: {e}",
            "Set KUBECONFIG or pass --kubeconfig, or use --in-cluster when running in a pod",
        ) from e

    host = client.Configuration.get_default_copy().host
    logger.info(f"Kubernetes targeted: {host}")
    return client.CoreV1Api()


class NodeWriter:
    """Replaces the labels and taints of a node."""

    def __init__(self, core_api: client.CoreV1Api):
        self.core_api = core_api

    def write(self, node_name: str, labels: dict[str, str], taints: list[NodeTaint]) -> None:
        """Fetch the node fresh and replace its label map and taint list.

        Raises:
            KubernetesError: If the node cannot be read or updated
        """
        try:
            node = self.core_api.read_node(node_name)
            node.metadata.labels = dict(labels)
            node.spec.taints = [t.to_kubernetes() for t in taints] or None
            self.core_api.replace_node(node_name, node)
        except ApiException as e:
            raise KubernetesError(
                f"Failed to update node {node_name}: {e.status} {e.reason}",
                "Check the service account can get and update nodes",
            ) from e
        except HTTPError as e:
            raise KubernetesError(
                f"Failed to update node {node_name}: {e}",
                "The Kubernetes API server could not be reached",
            ) from e


class NodeLabeler:
    """Runs reconciliation passes for nodes."""

    def __init__(
        self,
        core_api: client.CoreV1Api,
        lookup: EC2InstanceLookup,
        cfg: LabelerConfig | None = None,
    ):
        self.core_api = core_api
        self.lookup = lookup
        self.config = cfg or LabelerConfig()
        self.writer = NodeWriter(core_api)
        self._stop_event = threading.Event()
        self._watch = None

    def region_for_node(self, node) -> str:
        """Read the node's AWS region from its labels.

        Raises:
            MissingRegionError: If none of the configured region labels is set
        """
        labels = node.metadata.labels or {}
        for key in self.config.region_labels:
            if labels.get(key):
                return labels[key]
        raise MissingRegionError(
            f"Region not found on node {node.metadata.name}",
            f"Looked for labels: {', '.join(self.config.region_labels)}",
        )

    def sync_node(self, node) -> ReconciliationResult:
        """Run one reconciliation pass for a node.

        Args:
            node: kubernetes.client.V1Node as delivered by the watch

        Returns:
            The reconciliation result, written back when it reports a change

        Raises:
            NodeLabelerError: If the instance cannot be found or the node
                cannot be written
        """
        node_name = node.metadata.name
        log = node_logger(logger, node_name)
        provider_id = node.spec.provider_id if node.spec else None
        instance_id = instance_id_from_provider_id(provider_id)
        region = self.region_for_node(node)

        tags = self.lookup.get_instance_tags(region, instance_id)
        result = reconcile(NodeMetadataSnapshot.from_kubernetes_node(node), tags)

        if not result.changed:
            log.debug("Node metadata already up to date")
            return result

        if self.config.dry_run:
            log.info(
                f"Dry run, would set {len(result.labels)} labels and {len(result.taints)} taints"
            )
            return result

        self.writer.write(node_name, result.labels, result.taints)
        log.info("Added new kubernetes labels and taints")
        return result

    def handle_added(self, node) -> ReconciliationResult | None:
        """Process a node ADDED event, logging instead of raising on failure."""
        log = node_logger(logger, node.metadata.name)
        try:
            return self.sync_node(node)
        except NodeLabelerError as e:
            log.error(e.message)
            if e.details:
                log.debug(e.details)
            return None

    def sync_node_by_name(self, node_name: str) -> ReconciliationResult:
        """Fetch a node by name and run one pass for it.

        Raises:
            KubernetesError: If the node cannot be read
            NodeLabelerError: As raised by sync_node
        """
        try:
            node = self.core_api.read_node(node_name)
        except ApiException as e:
            raise KubernetesError(f"Failed to read node {node_name}: {e.status} {e.reason}") from e
        except HTTPError as e:
            raise KubernetesError(f"Failed to read node {node_name}: {e}") from e
        return self.sync_node(node)

    def stop(self) -> None:
        """Ask a running watch loop to exit.

        Safe to call from a signal handler. The open watch connection is
        closed once its current read returns, at the latest after
        watch_timeout_seconds.
        """
        self._stop_event.set()
        if self._watch is not None:
            self._watch.stop()

    def run(self, stop_event: threading.Event | None = None) -> None:
        """Watch nodes and process every ADDED event until stopped.

        The watch is restarted from the last seen resourceVersion when it
        times out or the connection drops, and from scratch when that
        version has expired.
        """
        if stop_event is not None:
            self._stop_event = stop_event
        stop_event = self._stop_event
        resource_version = ""
        logger.info("Watching nodes")

        while not stop_event.is_set():
            self._watch = watch.Watch()
            try:
                for event in self._watch.stream(
                    self.core_api.list_node,
                    resource_version=resource_version,
                    timeout_seconds=self.config.watch_timeout_seconds,
                ):
                    node = event["object"]
                    resource_version = node.metadata.resource_version
                    if event["type"] == "ADDED":
                        self.handle_added(node)
                    if stop_event.is_set():
                        self._watch.stop()
                        break
            except ApiException as e:
                if e.status == 410:
                    logger.info("Watch resourceVersion expired, relisting nodes")
                    resource_version = ""
                    continue
                raise KubernetesError(f"Node watch failed: {e.status} {e.reason}") from e
            except (ProtocolError, ReadTimeoutError) as e:
                logger.warning(f"Node watch connection dropped, reconnecting: {e}")
                continue
            except HTTPError as e:
                raise KubernetesError(
                    f"Node watch failed: {e}", "The Kubernetes API server could not be reached"
                ) from e
            finally:
                self._watch = None

        logger.info("Node watch stopped")
