from __future__ import annotations

import json
import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable

from op_export.models.schemas import ExportResult, FetchFailure
from op_export.services.base import VaultClient
from op_export.services.op_errors import ExportWriteError, OpError
from op_export.tools.progress import ProgressReporter

logger = logging.getLogger(__name__)


def _fetch_one(client: VaultClient, item_id: str) -> tuple[Any, FetchFailure | None]:
    try:
        return client.get_item(item_id), None
    except OpError as e:
        reason = getattr(e, "reason", None) or str(e)
        logger.warning("Fetch failed for %s: %s", item_id, reason)
        return None, FetchFailure(item_id=item_id, reason=reason)


def fetch_all_items(
    client: VaultClient,
    item_ids: list[str],
    workers: int = 1,
    progress: ProgressReporter | None = None,
) -> ExportResult:
    """
    Fetch every id once. Each id ends up in exactly one of `items` / `failures`.
    Output order is listing order regardless of `workers`.
    """
    def task(item_id: str) -> tuple[Any, FetchFailure | None]:
        outcome = _fetch_one(client, item_id)
        if progress is not None:
            progress.done()
        return outcome

    if workers > 1 and len(item_ids) > 1:
        pool = ThreadPoolExecutor(max_workers=workers)
        try:
            # map() yields in submission order, not completion order
            outcomes = list(pool.map(task, item_ids))
        except BaseException:
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        pool.shutdown()
    else:
        outcomes = [task(item_id) for item_id in item_ids]

    result = ExportResult(item_ids=list(item_ids))
    for detail, failure in outcomes:
        if failure is not None:
            result.failures.append(failure)
        else:
            result.items.append(detail)
    return result


def _sort_key(detail: Any, id_field: str) -> tuple[int, str]:
    value = detail.get(id_field) if isinstance(detail, dict) else None
    if isinstance(value, str):
        return (0, value)
    # details without a usable id go last, keeping their relative order
    return (1, "")


def render_export(items: list[Any]) -> str:
    return json.dumps(items, indent=2, ensure_ascii=False) + "\n"


def write_export(items: list[Any], output_path: str | Path) -> Path:
    """
    Write atomically: a temp file next to the target, then os.replace.
    A failure leaves any existing file at `output_path` untouched.
    """
    out = Path(output_path)
    text = render_export(items)
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{out.name}.", suffix=".tmp", dir=out.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, out)
        tmp_name = None
    except OSError as e:
        raise ExportWriteError(f"could not write {out}: {e}") from e
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
    return out


def run_export(
    client: VaultClient,
    output_path: str | Path,
    workers: int = 1,
    sort_by_id: bool = False,
    id_field: str = "id",
    on_fetched: Callable[[ExportResult], None] | None = None,
) -> ExportResult:
    """
    List, fetch, then write. `on_fetched` sees the result before the file is
    written, so the failure summary survives a failed write.
    """
    logger.info("Listing items to export")
    item_ids = client.list_item_ids()

    logger.info("%d total items - initiating fetch", len(item_ids))
    result = fetch_all_items(
        client, item_ids, workers=workers, progress=ProgressReporter(len(item_ids))
    )

    logger.info(
        "%d attempted, %d succeeded, %d failed",
        result.attempted, result.succeeded, len(result.failures),
    )
    if on_fetched is not None:
        on_fetched(result)

    items = result.items
    if sort_by_id:
        items = sorted(items, key=lambda d: _sort_key(d, id_field))

    out = write_export(items, output_path)
    logger.info(
        "%d items written to %s%s",
        len(items), out, " (sorted by id)" if sort_by_id else "",
    )
    return result
