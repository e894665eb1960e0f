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
Parsers for Docker Compose YAML files.
"""
import logging
import os
import shlex
import yaml
from dotenv import dotenv_values
from typing import Dict, Any, List, Optional
from ..MODELS.orchestration_config import OrchestrationConfig
from ..MODELS.service_definition import ServiceDefinition
from ..UTILS.string_interpolation import EnvironmentInterpolator
from ..exceptions import ComposeLoadError

logger = logging.getLogger(__name__)

class ComposeParser:
    """
    Parser for docker-compose.yml files.

    Only reshapes the file into ServiceDefinition string lists; the text of
    ports, environment entries and volumes is left for the converter.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional environment context for interpolation.

        :param context: A dictionary of environment variables for interpolation.
        """
        self.context = dict(os.environ) if context is None else context

    @classmethod
    def from_env_file(cls, env_path: str) -> "ComposeParser":
        """
        Creates a parser whose context is a .env file overlaid by the process environment.

        :param env_path: Path to the .env file.
        :raises ComposeLoadError: If the file does not exist.
        """
        if not os.path.isfile(env_path):
            raise ComposeLoadError(f"Environment file {env_path} not found")
        values = dotenv_values(env_path)
        logger.debug("Loaded %d variable(s) from %s", len(values), env_path)
        context = {k: v for k, v in values.items() if v is not None}
        context.update(os.environ)
        return cls(context)

    def parse(self, compose_path: str) -> OrchestrationConfig:
        """
        Parses a compose file from a path.

        :param compose_path: Path to the compose file.
        :return: Parsed configuration.
        :raises ComposeLoadError: If the file cannot be read or parsed.
        """
        try:
            with open(compose_path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise ComposeLoadError(
                f"Failed to read the compose project from {compose_path}: {e}"
            ) from e
        logger.info("Parsing compose file %s", compose_path)
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> OrchestrationConfig:
        """
        Parses a compose file from a string.

        :param content: YAML content of the compose file.
        :return: Parsed configuration.
        :raises ComposeLoadError: If the content is not a usable compose document.
        """
        content = EnvironmentInterpolator.interpolate(content, self.context)

        try:
            data = yaml.safe_load(content)
        except (yaml.YAMLError, ValueError) as e:
            raise ComposeLoadError(f"Failed to parse the compose project: {e}") from e

        if not isinstance(data, dict):
            raise ComposeLoadError("Compose file must be a mapping at the top level")

        if 'services' in data:
            service_specs = data['services']
        elif 'version' in data:
            service_specs = None
        else:
            # Version 1 format: services live at the top level
            service_specs = data

        if not service_specs:
            raise ComposeLoadError("No service config found, aborting")
        if not isinstance(service_specs, dict):
            raise ComposeLoadError("'services' must be a mapping of service names")

        services = {}
        for name, spec in service_specs.items():
            name = str(name)
            if spec is None:
                spec = {}
            if not isinstance(spec, dict):
                raise ComposeLoadError(f"Service {name} must be a mapping")
            services[name] = self._parse_service(name, spec)
            logger.debug("Parsed service %s", name)

        return OrchestrationConfig(services=services)

    def _parse_service(self, name: str, spec: Dict[str, Any]) -> ServiceDefinition:
        """
        Parses a single service definition from a compose file.

        :param name: The name of the service.
        :param spec: The service specification dictionary.
        :return: A ServiceDefinition instance.
        """
        # Ports
        ports = []
        for p in self._to_list(spec.get('ports')):
            if isinstance(p, dict):
                target = p.get('target', '')
                published = p.get('published')
                ports.append(f"{published}:{target}" if published is not None else str(target))
            else:
                ports.append(str(p))

        # Environment
        environment = []
        env_spec = spec.get('environment') or []
        if isinstance(env_spec, dict):
            for k, v in env_spec.items():
                environment.append(str(k) if v is None else f"{k}={self._scalar(v)}")
        else:
            environment = [str(e) for e in self._to_list(env_spec)]

        # Volumes
        volumes = []
        for v in self._to_list(spec.get('volumes')):
            if isinstance(v, dict):
                parts = [str(v[key]) for key in ('source', 'target') if v.get(key)]
                if v.get('read_only'):
                    parts.append('ro')
                volumes.append(':'.join(parts))
            else:
                volumes.append(str(v))

        command = spec.get('command')
        if isinstance(command, str):
            try:
                command = shlex.split(command)
            except ValueError as e:
                raise ComposeLoadError(f"Invalid command for service {name}: {e}") from e

        return ServiceDefinition(
            name=name,
            image=str(spec.get('image') or ''),
            command=[str(c) for c in self._to_list(command)],
            ports=ports,
            environment=environment,
            volumes=volumes,
            restart=self._restart(spec.get('restart')),
        )

    @staticmethod
    def _restart(value: Any) -> str:
        """
        Normalizes the restart value to its compose spelling.

        An unquoted `restart: no` is read by YAML as a boolean.
        """
        if value is None:
            return ''
        if isinstance(value, bool):
            return 'yes' if value else 'no'
        return str(value)

    @staticmethod
    def _scalar(value: Any) -> str:
        if isinstance(value, bool):
            return 'true' if value else 'false'
        return str(value)

    def _to_list(self, val: Any) -> List[Any]:
        """
        Helper to ensure a value is a list.

        :param val: The value to convert.
        :return: A list.
        """
        if val is None:
            return []
        if isinstance(val, (list, tuple)):
            return list(val)
        return [val]
