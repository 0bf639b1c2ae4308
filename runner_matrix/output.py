"""GitHub Actions output for the runner matrix."""

import json
import logging
from pathlib import Path
from typing import List, Sequence, Union

from .matrix.runner_spec import RunnerSpec

logger = logging.getLogger(__name__)


def runners_json(runners: Sequence[RunnerSpec]) -> str:
    """Compact JSON list, as consumed by `fromJSON()` in a workflow matrix."""
    return json.dumps([r.to_dict() for r in runners], separators=(",", ":"))


def output_lines(runners: Sequence[RunnerSpec]) -> List[str]:
    return [
        f"runners={runners_json(runners)}",
        f"runners_present={'true' if runners else 'false'}",
    ]


def write_github_output(path: Union[str, Path], runners: Sequence[RunnerSpec]) -> None:
    """Append `runners` and `runners_present` to a GITHUB_OUTPUT file."""
    path = Path(path)
    with open(path, "a") as f:
        for line in output_lines(runners):
            f.write(f"{line}\n")
    logger.info(f"Wrote {len(runners)} runners to {path}")
