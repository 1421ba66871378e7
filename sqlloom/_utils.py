from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from typing import Any, Iterable, Literal, Sequence

logger = logging.getLogger(__name__)


def run_logged(
    cmd: Iterable[str],
    *,
    input: str | None = None,
    check: bool = True,
    echo: Literal["always", "on_error", "never"] = "on_error",
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """
    Run a subprocess in text mode, capturing stdout/stderr.
    stderr is replayed when echo="always", or on failure when echo="on_error".
    """
    cmd_list: Sequence[str] = list(cmd)
    logger.debug(f"Running: {' '.join(cmd_list)}")

    result = subprocess.run(
        cmd_list,
        input=input,
        capture_output=True,
        text=True,
        **kwargs,
    )

    if result.stderr and (
        echo == "always" or (echo == "on_error" and result.returncode != 0)
    ):
        sys.stderr.write(result.stderr)
        sys.stderr.flush()

    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode,
            result.args,
            output=result.stdout,
            stderr=result.stderr,
        )
    return result


def missing_commands(commands: Iterable[str]) -> list[str]:
    return [name for name in commands if shutil.which(name) is None]
