"""JSON output rendering for dependency reports."""
import json  # pylint: disable=import-self
from typing import List

from sqlexplorer.output.dependencies import DependencyEntry


def render_json(database_name: str, entries: List[DependencyEntry]) -> str:
    """Render the dependency report as a JSON string."""
    # pylint: disable=no-member
    return json.dumps({
        "database": database_name,
        "tables": [entry.model_dump(exclude_none=True) for entry in entries],
    }, indent=2)
