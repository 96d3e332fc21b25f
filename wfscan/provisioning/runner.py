"""
Provisioning Runner

Triggers the external provisioning script for an uploaded workflow and
turns its output into a stream of events:

    log      one per stdout line (plus two start lines); overlong lines
             and an unterminated tail arrive in pieces
    error    one per stderr line, or a spawn / exit failure
    success  script exited with code 0
    done     final event, carries the exit code

Events render as Server-Sent Events ("data: {json}\\n\\n") for the HTTP API
and are printed directly by the CLI.
"""

from __future__ import annotations

import asyncio
import codecs
import json
import logging
import os
from pathlib import Path
from typing import AsyncIterator, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config.settings import StorageConfig, WFScanConfig, get_config

logger = logging.getLogger(__name__)

EventType = Literal["log", "error", "success", "done"]

READ_CHUNK_SIZE = 64 * 1024


class ProvisioningEvent(BaseModel):
    """One line of provisioning progress."""
    model_config = ConfigDict(populate_by_name=True)

    type: EventType
    message: Optional[str] = None
    exit_code: Optional[int] = Field(default=None, alias="exitCode")

    def to_dict(self) -> Dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_sse(self) -> str:
        return f"data: {json.dumps(self.to_dict())}\n\n"


def scaleway_script_env(storage: StorageConfig) -> Dict[str, str]:
    """SCALEWAY_* settings under the SCW_* names the script expects."""
    mapping = {
        "SCW_ACCESS_KEY": storage.access_key_id,
        "SCW_SECRET_KEY": storage.secret_access_key,
        "SCW_BUCKET_NAME": storage.bucket_name,
        "SCW_REGION": storage.region,
    }
    return {key: value for key, value in mapping.items() if value}


class ProvisioningRunner:
    """Spawns the provisioning script and streams its output."""

    def __init__(
        self,
        script_path: Path,
        interpreter: str = "bash",
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ):
        self.script_path = Path(script_path)
        self.interpreter = interpreter
        self.extra_env = dict(env or {})
        self.cwd = cwd

    @classmethod
    def from_config(cls, config: Optional[WFScanConfig] = None) -> ProvisioningRunner:
        config = config or get_config()
        return cls(
            script_path=config.provisioning.script_path,
            interpreter=config.provisioning.interpreter,
            env=scaleway_script_env(config.storage),
        )

    def build_command(
        self,
        workflow_name: str,
        overwrite: bool = False,
        comfyui_version: Optional[str] = None,
    ) -> List[str]:
        argv = [self.interpreter, str(self.script_path), workflow_name]
        if overwrite:
            argv.append("--overwrite")
        if comfyui_version:
            argv.extend(["--comfyui-version", comfyui_version])
        return argv

    def build_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(self.extra_env)
        return env

    async def stream(
        self,
        workflow_name: str,
        overwrite: bool = False,
        comfyui_version: Optional[str] = None,
    ) -> AsyncIterator[ProvisioningEvent]:
        """Run the script and yield events until it exits."""
        yield ProvisioningEvent(
            type="log",
            message=f"Starting download process for workflow: {workflow_name}\n",
        )
        yield ProvisioningEvent(type="log", message=f"Script: {self.script_path}\n")

        argv = self.build_command(workflow_name, overwrite, comfyui_version)
        logger.info(f"[Provisioner] Running: {' '.join(argv)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.build_env(),
                cwd=str(self.cwd) if self.cwd else None,
            )
        except OSError as e:
            logger.error(f"[Provisioner] Error spawning process: {e}")
            yield ProvisioningEvent(type="error", message=f"Error spawning process: {e}\n")
            return

        queue: asyncio.Queue = asyncio.Queue()

        async def pump(reader: asyncio.StreamReader, event_type: EventType) -> None:
            # One event per line. A partial line is flushed once it reaches
            # READ_CHUNK_SIZE, and an unterminated tail is flushed at EOF.
            decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
            pending = b""
            try:
                while True:
                    chunk = await reader.read(READ_CHUNK_SIZE)
                    if not chunk:
                        break
                    *lines, pending = (pending + chunk).split(b"\n")
                    for line in lines:
                        await queue.put(
                            ProvisioningEvent(type=event_type, message=decoder.decode(line + b"\n"))
                        )
                    if len(pending) >= READ_CHUNK_SIZE:
                        await queue.put(ProvisioningEvent(type=event_type, message=decoder.decode(pending)))
                        pending = b""
                tail = decoder.decode(pending, final=True)
                if tail:
                    await queue.put(ProvisioningEvent(type=event_type, message=tail))
            finally:
                await queue.put(None)

        readers = [
            asyncio.create_task(pump(proc.stdout, "log")),
            asyncio.create_task(pump(proc.stderr, "error")),
        ]

        try:
            open_streams = len(readers)
            while open_streams:
                event = await queue.get()
                if event is None:
                    open_streams -= 1
                    continue
                yield event

            await asyncio.gather(*readers)
            exit_code = await proc.wait()
        finally:
            for task in readers:
                if not task.done():
                    task.cancel()
            if proc.returncode is None:
                logger.warning("[Provisioner] Stream closed early, killing process")
                proc.kill()
                await proc.wait()

        if exit_code == 0:
            logger.info(f"[Provisioner] {workflow_name} provisioned")
            yield ProvisioningEvent(
                type="success", message="Download process completed successfully!\n"
            )
        else:
            logger.error(f"[Provisioner] {workflow_name} failed with exit code {exit_code}")
            yield ProvisioningEvent(
                type="error", message=f"Download process failed with exit code: {exit_code}\n"
            )
        yield ProvisioningEvent(type="done", exit_code=exit_code)
