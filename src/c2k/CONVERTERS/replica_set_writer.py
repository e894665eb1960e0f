"""
Writes translated ReplicaSets to the output directory, one file per service.
"""
import json
import logging
import os
import yaml
from typing import Iterable, List
from ..MODELS.replica_set import ReplicaSet
from ..MODELS.run_config import OutputFormat
from ..exceptions import DescriptorWriteError

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "json": "json",
    "yaml": "yaml",
}


class ReplicaSetWriter:
    """
    Serializes ReplicaSets and saves them as <output_dir>/<name>-rs.<ext>.
    """

    def __init__(self, output_dir: str = "output", output_format: OutputFormat = "json"):
        """
        :param output_dir: Directory receiving the descriptor files.
        :param output_format: "json" (indented) or "yaml".
        """
        if output_format not in EXTENSIONS:
            raise ValueError(f"Unsupported output format: {output_format}")
        self.output_dir = output_dir
        self.output_format = output_format

    def ensure_output_dir(self):
        """
        Creates the output directory if needed; safe to call repeatedly.
        """
        try:
            os.makedirs(self.output_dir, exist_ok=True)
        except OSError as e:
            raise DescriptorWriteError(
                f"Failed to create the output directory {self.output_dir}: {e}"
            ) from e

    def path_for(self, replica_set: ReplicaSet) -> str:
        return os.path.join(
            self.output_dir, f"{replica_set.name}-rs.{EXTENSIONS[self.output_format]}"
        )

    def render(self, replica_set: ReplicaSet) -> str:
        """
        Renders a ReplicaSet in the configured format.
        """
        data = replica_set.to_dict()
        if self.output_format == "yaml":
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        return json.dumps(data, indent=2) + "\n"

    def write_all(self, replica_sets: List[ReplicaSet]) -> List[str]:
        """
        Writes every ReplicaSet, in order.

        Each descriptor is first staged next to its target as <file>.tmp;
        targets are only replaced once every file has been staged. If
        staging fails, the staged files are removed and existing
        descriptors from an earlier run are left as they were. A failure
        while renaming can still leave the targets renamed so far in place.

        :return: Paths of the written files.
        :raises DescriptorWriteError: If the directory or a file cannot be written.
        """
        self.ensure_output_dir()

        staged = []
        for replica_set in replica_sets:
            path = self.path_for(replica_set)
            tmp_path = path + ".tmp"
            try:
                with open(tmp_path, "w") as f:
                    f.write(self.render(replica_set))
            except OSError as e:
                self._remove(staged_tmp for _, staged_tmp in staged)
                raise DescriptorWriteError(
                    f"Failed to write replica set {os.path.basename(path)}: {e}"
                ) from e
            staged.append((path, tmp_path))

        written = []
        for index, (path, tmp_path) in enumerate(staged):
            try:
                os.replace(tmp_path, path)
            except OSError as e:
                self._remove(staged_tmp for _, staged_tmp in staged[index:])
                raise DescriptorWriteError(
                    f"Failed to write replica set {os.path.basename(path)}: {e}"
                ) from e
            logger.debug("Wrote %s", path)
            written.append(path)
        return written

    @staticmethod
    def _remove(paths: Iterable[str]):
        for path in paths:
            try:
                os.remove(path)
            except OSError as e:
                logger.warning("Could not remove staged file %s: %s", path, e)
            else:
                logger.debug("Removed staged file %s", path)
