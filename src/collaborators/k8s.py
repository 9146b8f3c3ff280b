# src/collaborators/k8s.py
from typing import Any, Optional

from kubernetes import client, config as k8s_config
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from src.autoscaler.exceptions import ReplicaReadError, ReplicaWriteError, StartupError
from src.log_handler.logging_config import get_logger
from .base import ReplicaController

logger = get_logger(__name__)


def load_kubernetes_api() -> client.AppsV1Api:
    """Loads in-cluster config, falling back to the local kubeconfig."""
    try:
        k8s_config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except k8s_config.ConfigException:
        try:
            k8s_config.load_kube_config()
            logger.info("Loaded local kubeconfig")
        except (k8s_config.ConfigException, OSError) as e:
            raise StartupError(f"Failed to configure Kubernetes client: {str(e)}") from e
    return client.AppsV1Api()


class KubernetesReplicaController(ReplicaController):
    """Scales a Deployment by patching ``spec.replicas``."""

    def __init__(
        self,
        deployment: str,
        namespace: str = "default",
        min_replicas: int = 1,
        max_replicas: int = 5,
        api: Optional[Any] = None,
        request_timeout: float = 10.0,
    ):
        self.deployment = deployment
        self.namespace = namespace
        self.min_replicas = min_replicas
        self.max_replicas = max_replicas
        self.request_timeout = request_timeout
        self.api = api or load_kubernetes_api()

    def current_replicas(self) -> int:
        try:
            deployment = self.api.read_namespaced_deployment(
                self.deployment, self.namespace, _request_timeout=self.request_timeout
            )
        except ApiException as e:
            raise ReplicaReadError(
                f"Failed to get deployment {self.namespace}/{self.deployment}: {e.reason}"
            ) from e
        except HTTPError as e:
            raise ReplicaReadError(
                f"Failed to get deployment {self.namespace}/{self.deployment}: {str(e)}"
            ) from e
        return deployment.status.available_replicas or 0

    def set_replicas(self, target: int) -> int:
        if target < 0:
            target = self.min_replicas
        target = max(self.min_replicas, min(self.max_replicas, target))

        try:
            patched = self.api.patch_namespaced_deployment(
                self.deployment,
                self.namespace,
                {"spec": {"replicas": target}},
                _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            raise ReplicaWriteError(
                f"Failed to scale {self.namespace}/{self.deployment} to {target}: {e.reason}"
            ) from e
        except HTTPError as e:
            raise ReplicaWriteError(
                f"Failed to scale {self.namespace}/{self.deployment} to {target}: {str(e)}"
            ) from e

        replicas = patched.spec.replicas if patched.spec.replicas is not None else target
        logger.info(f"Scale successful. Replicas: {replicas}")
        return replicas
