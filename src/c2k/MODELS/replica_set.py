"""
Models for the Kubernetes ReplicaSet descriptors produced by the converter.

Attribute names are snake_case; the serialized names follow the
extensions/v1beta1 API schema through field aliases.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

REPLICA_SET_KIND = "ReplicaSet"
REPLICA_SET_API_VERSION = "extensions/v1beta1"


class KubeModel(BaseModel):
    """
    Base for descriptor parts: immutable, populated by attribute name.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class RestartPolicy(str, Enum):
    """
    Pod restart policies understood by Kubernetes.
    """
    ALWAYS = "Always"
    NEVER = "Never"
    ON_FAILURE = "OnFailure"


class ContainerPort(KubeModel):
    container_port: int = Field(alias="containerPort")


class EnvVar(KubeModel):
    name: str
    value: str


class VolumeMount(KubeModel):
    """
    Where a pod volume is mounted inside the container.
    """
    name: str
    mount_path: str = Field(alias="mountPath")
    read_only: bool = Field(default=False, alias="readOnly")


class HostPathVolumeSource(KubeModel):
    path: str


class Volume(KubeModel):
    """
    A pod volume backed by a directory on the node.
    """
    name: str
    host_path: HostPathVolumeSource = Field(alias="hostPath")


class Container(KubeModel):
    name: str
    image: str
    command: Optional[List[str]] = None
    ports: Optional[List[ContainerPort]] = None
    env: Optional[List[EnvVar]] = None
    volume_mounts: Optional[List[VolumeMount]] = Field(default=None, alias="volumeMounts")


class PodSpec(KubeModel):
    volumes: Optional[List[Volume]] = None
    containers: List[Container]
    restart_policy: RestartPolicy = Field(alias="restartPolicy")


class ObjectMeta(KubeModel):
    name: Optional[str] = None
    labels: Dict[str, str] = {}


class PodTemplateSpec(KubeModel):
    metadata: ObjectMeta
    spec: PodSpec


class ReplicaSetSpec(KubeModel):
    replicas: int = 1
    template: PodTemplateSpec


class ReplicaSetStatus(KubeModel):
    replicas: int = 0


class ReplicaSet(KubeModel):
    """
    A ReplicaSet running a single container, one per compose service.
    """
    kind: str = REPLICA_SET_KIND
    api_version: str = Field(default=REPLICA_SET_API_VERSION, alias="apiVersion")
    metadata: ObjectMeta
    spec: ReplicaSetSpec
    status: ReplicaSetStatus = Field(default_factory=ReplicaSetStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def container(self) -> Container:
        """The only container of the pod template."""
        return self.spec.template.spec.containers[0]

    def to_dict(self) -> Dict[str, Any]:
        """
        Returns the descriptor as plain data keyed by API field names.
        Unset optional fields are left out.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
