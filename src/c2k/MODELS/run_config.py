"""
Settings for one conversion run.
"""
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict

OutputFormat = Literal["json", "yaml"]

class RunConfig(BaseModel):
    """
    Everything a conversion run needs, built once by the CLI and passed down.
    """
    model_config = ConfigDict(frozen=True)

    compose_file: str = "docker-compose.yml"
    output_dir: str = "output"
    output_format: OutputFormat = "json"
    env_file: Optional[str] = None
    collect_errors: bool = False
