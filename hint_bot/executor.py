"""Claude CLI executor — one subprocess per prompt, bounded in time and output."""

import asyncio
import os
from typing import Dict, List, Optional, Sequence

from hint_bot.config import DEFAULT_TIMEOUT_SECONDS
from hint_bot.domain.errors import (
    NonZeroExit,
    OutputLimitExceeded,
    RunnerTimeout,
    SpawnError,
)
from hint_bot.log import log


MAX_OUTPUT_BYTES = 1024 * 1024
KILL_GRACE_SECONDS = 5.0
_READ_CHUNK = 64 * 1024
_PASSTHROUGH_ENV = ("PATH", "HOME")


def _log(msg: str, level: str = "info", **fields):
    log("Executor", msg, level, **fields)


def docker_command(image: str) -> List[str]:
    """Command prefix that runs the CLI inside ``image``.

    ``-e ANTHROPIC_API_KEY`` without a value makes docker copy the variable
    from our (minimal) environment, so the key never shows up in argv.
    """
    return ["docker", "run", "--rm", "-e", "ANTHROPIC_API_KEY", image]


class ClaudeExecutor:
    """Runs ``<command> -p --output-format json <prompt>`` and returns stdout."""

    def __init__(
        self,
        api_key: str = "",
        command: Optional[Sequence[str]] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_output_bytes: int = MAX_OUTPUT_BYTES,
        kill_grace: float = KILL_GRACE_SECONDS,
    ):
        self.command = list(command) if command else ["claude"]
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes
        self.kill_grace = kill_grace
        self._api_key = api_key

    @classmethod
    def from_config(cls, config: Dict) -> "ClaudeExecutor":
        if config.get("claude_runner_image"):
            command = docker_command(config["claude_runner_image"])
        else:
            command = [config.get("claude_binary") or "claude"]
        return cls(
            api_key=config.get("anthropic_api_key", ""),
            command=command,
            timeout=config.get("claude_timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
        )

    def build_args(self, prompt: str) -> List[str]:
        return [*self.command, "-p", "--output-format", "json", prompt]

    def build_env(self) -> Dict[str, str]:
        env = {name: os.environ[name] for name in _PASSTHROUGH_ENV if name in os.environ}
        if self._api_key:
            env["ANTHROPIC_API_KEY"] = self._api_key
        return env

    async def execute(self, prompt: str) -> str:
        """Run the CLI once. Raises SpawnError, RunnerTimeout, NonZeroExit or OutputLimitExceeded."""
        args = self.build_args(prompt)
        _log("Starting generation subprocess", command=self.command[0], prompt_chars=len(prompt))

        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.build_env(),
            )
        except OSError as e:
            _log("Failed to spawn generation subprocess", "error", command=self.command[0], error=str(e))
            raise SpawnError(self.command[0], str(e)) from e

        stdout = bytearray()
        stderr = bytearray()
        tasks = [
            asyncio.ensure_future(self._drain(proc.stdout, stdout)),
            asyncio.ensure_future(self._drain(proc.stderr, stderr)),
            asyncio.ensure_future(proc.wait()),
        ]
        try:
            await asyncio.wait_for(asyncio.gather(*tasks), timeout=self.timeout)
        except asyncio.TimeoutError:
            _log("Generation subprocess timed out, terminating", "warn", pid=proc.pid, timeout=self.timeout)
            await self._terminate(proc)
            raise RunnerTimeout(self.timeout)
        except OutputLimitExceeded:
            _log("Generation subprocess output too large, terminating", "warn", pid=proc.pid)
            await self._terminate(proc)
            raise
        finally:
            for task in tasks:
                task.cancel()

        err_text = stderr.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            error = NonZeroExit(proc.returncode, err_text)
            _log("Generation subprocess failed", "error", returncode=proc.returncode, stderr=error.stderr_excerpt)
            raise error

        _log("Generation subprocess finished", stdout_bytes=len(stdout))
        return stdout.decode("utf-8", errors="replace")

    async def _drain(self, stream: asyncio.StreamReader, sink: bytearray) -> None:
        while True:
            chunk = await stream.read(_READ_CHUNK)
            if not chunk:
                return
            if len(sink) + len(chunk) > self.max_output_bytes:
                raise OutputLimitExceeded(self.max_output_bytes)
            sink.extend(chunk)

    async def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        """SIGTERM, then SIGKILL once the grace period runs out."""
        if proc.returncode is not None:
            return
        try:
            proc.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=self.kill_grace)
        except asyncio.TimeoutError:
            _log("Subprocess ignored SIGTERM, killing", "warn", pid=proc.pid)
            try:
                proc.kill()
            except ProcessLookupError:
                return
            await proc.wait()
