"""
Security utilities for transcript-chain.
- Safe subprocess execution (argument arrays only, never a shell)
- Secret masking for logs
"""

import asyncio
import logging
import subprocess

logger = logging.getLogger(__name__)


# ── Subprocess safety ─────────────────────────────────────────────────

def _check_args(args) -> list[str]:
    if not isinstance(args, (list, tuple)):
        raise TypeError("Subprocess args must be a list/tuple, not a string")
    return [str(a) for a in args]


async def run_subprocess_capture(args: list[str], timeout: float = 300) -> subprocess.CompletedProcess:
    """
    Run an external tool without a shell and capture stdout/stderr as text.
    The child is killed and subprocess.TimeoutExpired raised on timeout.
    """
    args = _check_args(args)
    logger.debug("Running subprocess: %s", ' '.join(args))

    proc = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise subprocess.TimeoutExpired(args, timeout)

    return subprocess.CompletedProcess(
        args,
        proc.returncode,
        stdout=stdout.decode('utf-8', errors='replace'),
        stderr=stderr.decode('utf-8', errors='replace'),
    )


# ── Secrets ───────────────────────────────────────────────────────────

def mask_secret(value: str | None) -> str:
    """Render a secret for logs: last 4 characters only."""
    if not value:
        return "<unset>"
    if len(value) <= 4:
        return "****"
    return "****" + value[-4:]
