from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from loguru import logger

from buildgate.config import BuildConfig

# Each script receives the target as process.argv[1]. Handles the module opens
# at load time (timers, servers) must not keep the process alive, so exit once
# stdout and stderr are flushed.
EXIT_WHEN_FLUSHED = "process.stdout.write('', () => process.stderr.write('', () => process.exit(0)));"
REQUIRE_SCRIPT = "require(process.argv[1]); " + EXIT_WHEN_FLUSHED
IMPORT_SCRIPT = "await import(process.argv[1]); " + EXIT_WHEN_FLUSHED


class NodeLaunchError(RuntimeError):
    pass


class NodeNotFound(NodeLaunchError):
    pass


@dataclass(frozen=True)
class NodeResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def output(self) -> str:
        return self.stderr.strip() or self.stdout.strip() or f"node exited with code {self.returncode}"


async def run_node(
    config: BuildConfig,
    args: List[str],
    cwd: Optional[str] = None,
) -> NodeResult:
    """
    Run node with args in a child process and wait for it.

    There is no timeout: a script that never finishes blocks the run.
    """
    workdir = cwd or config.root_dir
    if not os.path.isdir(workdir):
        raise NodeLaunchError(f"working directory for node does not exist: {workdir}")

    try:
        proc = await asyncio.create_subprocess_exec(
            config.node_bin,
            *args,
            cwd=workdir,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise NodeNotFound(f"node executable not found: {config.node_bin}") from e

    out, err = await proc.communicate()
    return NodeResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=out.decode("utf-8", errors="replace"),
        stderr=err.decode("utf-8", errors="replace"),
    )


async def require_module(config: BuildConfig, path: str) -> NodeResult:
    """Load a CommonJS file with require() in a fresh node process."""
    logger.bind(path=path).debug("require {}", path)
    return await run_node(config, ["-e", REQUIRE_SCRIPT, path])


async def import_module(config: BuildConfig, path: str) -> NodeResult:
    """Dynamically import an ES module in a fresh node process."""
    logger.bind(path=path).debug("import {}", path)
    return await run_node(
        config,
        ["--input-type=module", "-e", IMPORT_SCRIPT, Path(path).as_uri()],
    )
