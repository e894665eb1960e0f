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
Typed exception hierarchy for the compose → ReplicaSet pipeline.

Every error here is fatal: they describe malformed input or an unusable
output location, never a transient condition worth retrying.
"""
from typing import List


class C2KError(Exception):
    """
    Root of all errors raised by c2k.
    """


class ComposeLoadError(C2KError):
    """
    Raised when a compose file cannot be read or does not describe services.

    Examples
    --------
    * File does not exist
    * YAML syntax error
    * Top-level document or a service entry is not a mapping
    """


class TranslationError(C2KError):
    """
    Raised when a service definition cannot be turned into a ReplicaSet.

    :param service: Name of the offending service.
    :param value: The raw field value that could not be translated.
    """

    def __init__(self, service: str, value: str, message: str):
        super().__init__(message)
        self.service = service
        self.value = value


class InvalidPortError(TranslationError):
    """A port entry is not an integer once quotes and the host part are removed."""

    def __init__(self, service: str, value: str):
        super().__init__(
            service, value, f"Invalid container port {value!r} for service {service}"
        )


class InvalidVolumeError(TranslationError):
    """A volume entry does not have the HOST:CONTAINER form."""

    def __init__(self, service: str, value: str):
        super().__init__(
            service,
            value,
            f"Invalid volume {value!r} for service {service}: expected HOST:CONTAINER[:MODE]",
        )


class UnknownRestartPolicyError(TranslationError):
    """The restart value has no Kubernetes equivalent."""

    def __init__(self, service: str, value: str):
        super().__init__(
            service, value, f"Unknown restart policy {value!r} for service {service}"
        )


class TranslationErrorGroup(TranslationError):
    """
    Every translation failure of a run, reported together.

    Only raised when the converter is asked to collect errors instead of
    stopping at the first one.
    """

    def __init__(self, errors: List[TranslationError]):
        self.errors = list(errors)
        lines = [f"{len(self.errors)} service(s) could not be translated:"]
        lines.extend(f"  - {e}" for e in self.errors)
        super().__init__(
            ", ".join(e.service for e in self.errors),
            ", ".join(e.value for e in self.errors),
            "\n".join(lines),
        )


class DescriptorWriteError(C2KError):
    """
    Raised when a rendered descriptor cannot be written to the output directory.
    """
