from __future__ import annotations

import json
import logging
import os
import shlex
import subprocess
from typing import Any, Mapping

from op_export.config.settings import get_settings
from op_export.services.op_errors import FetchError, ListError

logger = logging.getLogger(__name__)

_MAX_CAPTURE = 2000


def _describe_exit(returncode: int) -> str:
    if returncode < 0:
        return f"killed by signal {-returncode}"
    return f"exit {returncode}"


def _preview(raw: bytes) -> str:
    return raw[:_MAX_CAPTURE].decode("utf-8", errors="replace")


class OpClient:
    """
    CLI-based 1Password client.

    Every call runs the `op` binary once. The session is whatever the
    environment carries (`OP_SESSION_*` from a prior `op signin`); this
    client never signs in itself.
    """

    def __init__(
        self,
        command: str | None = None,
        timeout_seconds: float | None = None,
        id_field: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        s = get_settings()
        self.command = command or s.op_path
        self.timeout_seconds = timeout_seconds or s.timeout_seconds
        self.id_field = id_field or s.id_field
        self.env = dict(env) if env is not None else None

    def _run(self, args: list[str]) -> tuple[int, bytes, str]:
        """
        Runs op with `args` and returns (returncode, raw stdout, stderr text).
        stdout stays bytes: it is only JSON if it is also valid UTF-8.
        """
        cmd = [self.command, *args]
        logger.debug("Running: %s", " ".join(shlex.quote(x) for x in cmd))

        proc = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=False,
            timeout=self.timeout_seconds,
            env={**os.environ, **self.env} if self.env is not None else None,
        )

        stderr = proc.stderr.decode("utf-8", errors="replace") if proc.stderr else ""
        return proc.returncode, proc.stdout or b"", stderr

    def list_item_ids(self) -> list[str]:
        args = ["items", "list", "--format=json"]
        try:
            code, stdout, stderr = self._run(args)
        except subprocess.TimeoutExpired as e:
            raise ListError(f"op items list timed out after {e.timeout}s") from e
        # ValueError: arguments subprocess refuses, e.g. an embedded NUL
        except (OSError, ValueError) as e:
            raise ListError(f"could not run {self.command!r}: {e}") from e

        if code != 0:
            raise ListError(
                f"op items list failed ({_describe_exit(code)}).\n"
                f"STDERR:\n{stderr[:_MAX_CAPTURE]}\nSTDOUT:\n{_preview(stdout)}"
            )

        try:
            data = json.loads(stdout.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise ListError(f"op items list output is not valid UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise ListError(
                f"op items list did not return JSON: {e}\nRaw output:\n{_preview(stdout)}"
            ) from e

        if not isinstance(data, list):
            raise ListError(
                f"expected a JSON list from 'items list', got {type(data).__name__}"
            )

        ids: list[str] = []
        for pos, entry in enumerate(data):
            if not isinstance(entry, dict):
                raise ListError(f"listing entry {pos} is not an object")
            if self.id_field not in entry:
                raise ListError(f"listing entry {pos} has no {self.id_field!r} key")
            item_id = entry[self.id_field]
            if not isinstance(item_id, str):
                raise ListError(
                    f"listing entry {pos}: {self.id_field!r} is not a string"
                )
            ids.append(item_id)

        logger.debug("op items list returned %d ids", len(ids))
        return ids

    def get_item(self, item_id: str) -> Any:
        """
        Fetches one item. Whatever parses as JSON is accepted, even if op
        exited non-zero: op's failure modes are too inconsistent to read
        anything else into. This can hide a JSON error body, so we warn.
        """
        args = ["items", "get", "--format=json", item_id]
        try:
            code, stdout, stderr = self._run(args)
        except subprocess.TimeoutExpired as e:
            raise FetchError(item_id, f"timed out after {e.timeout}s") from e
        except (OSError, ValueError) as e:
            raise FetchError(item_id, f"could not run {self.command!r}: {e}") from e

        try:
            value = json.loads(stdout.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            if code != 0:
                detail = stderr.strip()[:_MAX_CAPTURE] or "no output"
                raise FetchError(item_id, f"{_describe_exit(code)}: {detail}") from e
            kind = "invalid UTF-8" if isinstance(e, UnicodeDecodeError) else "invalid JSON"
            raise FetchError(item_id, f"{kind}: {e}") from e

        if code != 0:
            logger.warning(
                "Accepting JSON for %s although op returned %s", item_id, _describe_exit(code)
            )
        return value
