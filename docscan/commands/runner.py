import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass

from docscan.commands.exceptions import CommandNotFoundError, CommandTimeoutError
from docscan.logging.logger import Log


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a finished external command."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(ABC):
    """Contract for invoking scanner, OCR and PDF binaries."""

    @abstractmethod
    def run(self, command: list[str], timeout: float) -> CommandResult:
        """Run *command* (argv list, no shell) and wait at most *timeout* seconds.

        Raises:
            CommandNotFoundError: if the executable does not exist.
            CommandTimeoutError: if the timeout elapses.
        """


class SubprocessCommandRunner(CommandRunner):
    """Runs commands with :func:`subprocess.run`."""

    def run(self, command: list[str], timeout: float) -> CommandResult:
        Log.debug(f"Running command: {' '.join(command)}")
        try:
            proc = subprocess.run(
                command,
                check=False,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(f"'{command[0]}' not found on PATH") from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(
                f"'{command[0]}' timed out after {timeout}s"
            ) from exc
        return CommandResult(
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            exit_code=proc.returncode,
        )
