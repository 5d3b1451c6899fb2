"""Configuration for the Cucumber JSON report source."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel


class CucumberJsonConfig(BaseModel):
    """Configuration for the Cucumber JSON report source."""

    path: Path
    worker_id: str = "cucumber"
    # cucumber-js >= 7 reports nanoseconds; older formatters used milliseconds
    duration_unit: Literal["ns", "ms"] = "ns"
