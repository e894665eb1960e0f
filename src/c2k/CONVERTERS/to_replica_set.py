# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Converters for generating Kubernetes ReplicaSets from Docker Compose services.

Translation is a pure function of the service definition: nothing here
touches the filesystem.
"""
import logging
import re
from typing import List, Tuple
from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.service_definition import ServiceDefinition
from ..MODELS.replica_set import (
    Container,
    ContainerPort,
    EnvVar,
    HostPathVolumeSource,
    ObjectMeta,
    PodSpec,
    PodTemplateSpec,
    ReplicaSet,
    ReplicaSetSpec,
    RestartPolicy,
    Volume,
    VolumeMount,
)
from ..exceptions import (
    InvalidPortError,
    InvalidVolumeError,
    TranslationError,
    TranslationErrorGroup,
    UnknownRestartPolicyError,
)

logger = logging.getLogger(__name__)

_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1
_DECIMAL = re.compile(r'[+-]?[0-9]+')

RESTART_POLICIES = {
    "": RestartPolicy.ALWAYS,
    "always": RestartPolicy.ALWAYS,
    "no": RestartPolicy.NEVER,
    "on-failure": RestartPolicy.ON_FAILURE,
}


def map_ports(service: str, ports: List[str]) -> List[ContainerPort]:
    """
    Resolves compose port entries to container ports.

    "80" and "8080:80" both give 80; the host side of a mapping is dropped.

    :raises InvalidPortError: If an entry is not a 32-bit integer.
    """
    container_ports = []
    for raw in ports:
        port = raw.strip().strip('"').strip()
        if ':' in port:
            port = port.split(':')[1]
        if not _DECIMAL.fullmatch(port):
            raise InvalidPortError(service, raw)
        number = int(port)
        if not _INT32_MIN <= number <= _INT32_MAX:
            raise InvalidPortError(service, raw)
        container_ports.append(ContainerPort(container_port=number))
    return container_ports


def map_environment(entries: List[str]) -> List[EnvVar]:
    """
    Turns KEY=VALUE entries into env vars, skipping entries without '='.

    Only the text up to a second '=' is kept as the value.
    """
    env = []
    for entry in entries:
        if '=' not in entry:
            logger.debug("Skipping environment entry without a value: %s", entry)
            continue
        parts = entry.split('=')
        env.append(EnvVar(name=parts[0], value=parts[1]))
    return env


def volume_name(host_path: str) -> str:
    """
    Name shared by a volume and its mount: the host path with every '/' removed.
    """
    return host_path.replace('/', '')


def map_volumes(service: str, volumes: List[str]) -> Tuple[List[VolumeMount], List[Volume]]:
    """
    Splits HOST:CONTAINER[:MODE] entries into container mounts and hostPath volumes.

    Mounts and volumes come back in source order, paired by index.

    :raises InvalidVolumeError: If an entry has no container path.
    """
    mounts = []
    pod_volumes = []
    for raw in volumes:
        parts = raw.split(':')
        if len(parts) < 2:
            raise InvalidVolumeError(service, raw)
        host_path, container_path = parts[0], parts[1]

        read_only = False
        for option in parts[2:]:
            if option == 'ro':
                read_only = True
            elif option == 'rw':
                read_only = False

        name = volume_name(host_path)
        if any(v.name == name for v in pod_volumes):
            logger.warning("Service %s has more than one volume named %s", service, name)

        mounts.append(VolumeMount(name=name, mount_path=container_path, read_only=read_only))
        pod_volumes.append(Volume(name=name, host_path=HostPathVolumeSource(path=host_path)))
    return mounts, pod_volumes


def map_restart_policy(service: str, restart: str) -> RestartPolicy:
    """
    :raises UnknownRestartPolicyError: For anything but "", always, no and on-failure.
    """
    try:
        return RESTART_POLICIES[restart]
    except KeyError:
        raise UnknownRestartPolicyError(service, restart) from None


def translate(name: str, service: ServiceDefinition) -> ReplicaSet:
    """
    Builds the ReplicaSet for one compose service.

    :param name: The service name; used for the ReplicaSet, its labels and its container.
    :param service: The parsed service definition.
    :return: A fully populated ReplicaSet.
    :raises TranslationError: On the first field that cannot be translated.
    """
    labels = {"service": name}

    ports = map_ports(name, service.ports)
    env = map_environment(service.environment)
    mounts, volumes = map_volumes(name, service.volumes)
    restart_policy = map_restart_policy(name, service.restart)

    container = Container(
        name=name,
        image=service.image,
        command=list(service.command) or None,
        ports=ports or None,
        env=env or None,
        volume_mounts=mounts or None,
    )
    template = PodTemplateSpec(
        metadata=ObjectMeta(labels=labels),
        spec=PodSpec(
            volumes=volumes or None,
            containers=[container],
            restart_policy=restart_policy,
        ),
    )
    return ReplicaSet(
        metadata=ObjectMeta(name=name, labels=labels),
        spec=ReplicaSetSpec(replicas=1, template=template),
    )


class ReplicaSetConverter:
    """
    Converts a Docker Compose configuration into ReplicaSets.
    """

    def __init__(self, config: OrchestrationConfig):
        """
        Initializes the ReplicaSet converter.

        :param config: The parsed orchestration configuration.
        """
        self.config = config

    def translate_all(self, collect_errors: bool = False) -> List[ReplicaSet]:
        """
        Translates every service, ordered by service name.

        :param collect_errors: Keep going after a failure and report every
            failing service at the end instead of stopping at the first one.
        :return: One ReplicaSet per service.
        :raises TranslationError: The first failure, or a TranslationErrorGroup
            of all failures when collecting.
        """
        replica_sets = []
        errors = []
        for name in self.config.service_names():
            try:
                replica_sets.append(translate(name, self.config.services[name]))
            except TranslationError as e:
                if not collect_errors:
                    raise
                logger.error("%s", e)
                errors.append(e)
                continue
            logger.info("Translated service %s", name)

        if errors:
            raise TranslationErrorGroup(errors)
        return replica_sets
