"""
Model for a single compose service, as handed from the parser to the converter.
"""
from typing import List
from pydantic import BaseModel, ConfigDict

class ServiceDefinition(BaseModel):
    """
    One service of a compose file, normalized to plain string lists.

    Ports, environment and volumes keep their raw compose text; making
    sense of it is the converter's job.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    image: str = ""
    command: List[str] = []

    # Raw "CONTAINER" or "HOST:CONTAINER" strings
    ports: List[str] = []
    # Raw "KEY=VALUE" strings
    environment: List[str] = []
    # Raw "HOST:CONTAINER[:MODE]" strings
    volumes: List[str] = []

    restart: str = ""
