"""Run settings for report generation."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReportFormat(str, Enum):
    """Formats available for the dependency report."""

    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


class ReportConfig(BaseModel):
    """Settings for one reporting run, built from CLI arguments."""

    model_config = ConfigDict(frozen=True)

    source: str
    output_dir: str
    warehouse: Optional[str] = None
    conn_file: Optional[str] = None
    overwrite: bool = False
    detector: str = "regex"
    dialect: Optional[str] = None
    formats: List[ReportFormat] = Field(default_factory=lambda: [ReportFormat.TEXT])
