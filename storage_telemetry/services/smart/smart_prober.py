"""smartctl invocation for a single device path."""

import asyncio
import logging

from .smartctl_parser import parse_health, parse_temperature
from ...core.exceptions import ProbeError
from ...models import SmartRecord


class SmartProber:
    """Runs smartctl attribute dump and health self-assessment for one device."""

    def __init__(self, smartctl_path: str = "smartctl", timeout_seconds: float = 10.0):
        self._smartctl_path = smartctl_path
        self._timeout_seconds = timeout_seconds

    async def probe(self, device_path: str) -> SmartRecord:
        """
        Probe a device and return its SMART record.

        Both smartctl modes run concurrently. Raises ProbeError if either
        invocation cannot start, exits non-zero or times out; the other
        invocation is then cancelled and its process killed.
        """
        try:
            async with asyncio.TaskGroup() as group:
                attributes_task = group.create_task(self._run_smartctl("-A", device_path))
                health_task = group.create_task(self._run_smartctl("-H", device_path))
        except ExceptionGroup as eg:
            raise eg.exceptions[0] from None

        attributes_out, health_out = attributes_task.result(), health_task.result()

        health = parse_health(health_out)
        record = SmartRecord(
            temperature=parse_temperature(attributes_out),
            overall_status=health.overall_status,
            healthy=health.healthy,
        )
        logging.debug(
            f"SMART probe {device_path}: temperature={record.temperature} "
            f"status={record.overall_status}"
        )
        return record

    async def _run_smartctl(self, mode: str, device_path: str) -> str:
        cmd = [self._smartctl_path, mode, device_path]

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise ProbeError(device_path, f"cannot run {self._smartctl_path}: {e}") from e

        try:
            stdout, _ = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout_seconds
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            raise ProbeError(
                device_path, f"smartctl {mode} timed out after {self._timeout_seconds}s"
            )
        except asyncio.CancelledError:
            # Abandoned poll cycle or failed sibling invocation
            await self._kill(process)
            raise

        # smartctl also sets exit status bits for a failing disk; any non-zero
        # exit is still reported as unknown rather than read as FAILED
        if process.returncode != 0:
            raise ProbeError(
                device_path, f"smartctl {mode} exited with code {process.returncode}"
            )

        return stdout.decode(errors="replace")

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()
