"""Sync runner with parallel fetching, a shared deadline and failure isolation."""

import time
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from newsbrew.adapters.base import AdapterResult, FetchContext
from newsbrew.adapters.errors import AdapterErrorClass
from newsbrew.adapters.registry import SourceBinding
from newsbrew.data_model import CanonicalItem, SourceRef
from newsbrew.fetch import FetchMetrics
from newsbrew.store import ItemEventType, StateStore
from newsbrew.sync.convert import convert_item
from newsbrew.sync.metrics import SyncMetrics
from newsbrew.sync.models import SourceSyncResult, SyncReport


logger = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass
class _FetchOutcome:
    """What a worker hands back to the persisting thread."""

    result: AdapterResult
    items: list[CanonicalItem] = field(default_factory=list)
    conversion_failures: int = 0
    duration_ms: float = 0.0


class SyncRunner:
    """Runs source adapters and persists their items.

    Workers only fetch and convert. Once every fetch has returned or the
    shared deadline has passed, the calling thread persists the finished
    sources one at a time, so store writes are serialized and a timed-out
    adapter never commits partial items. Sources disabled in the store are
    not fetched.
    """

    def __init__(
        self,
        store: StateStore,
        run_id: str,
        max_workers: int = 4,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the runner.

        Args:
            store: Connected state store.
            run_id: Unique run identifier.
            max_workers: Maximum parallel fetches.
            timeout_seconds: Shared deadline for the whole cycle.
        """
        self._store = store
        self._run_id = run_id
        self._max_workers = max(1, max_workers)
        self._timeout_seconds = timeout_seconds
        self._metrics = SyncMetrics.get_instance()
        self._log = logger.bind(component="sync", run_id=run_id)

    def run(
        self,
        bindings: Sequence[SourceBinding],
        now: datetime | None = None,
    ) -> SyncReport:
        """Run one sync cycle over all bindings.

        Args:
            bindings: Sources to sync.
            now: Fetch timestamp for the cycle (defaults to now).

        Returns:
            SyncReport with one result per fetched binding, in binding order.
        """
        now = now or datetime.now(UTC)
        started_at = datetime.now(UTC)
        ctx = FetchContext.with_timeout(self._timeout_seconds, now=now)

        self._log.info(
            "sync_started",
            source_count=len(bindings),
            max_workers=self._max_workers,
            timeout_seconds=self._timeout_seconds,
        )

        results: dict[str, SourceSyncResult] = {}
        active = [b for b in bindings if self._is_active(b)]
        if active:
            executor = ThreadPoolExecutor(
                max_workers=min(self._max_workers, len(active)),
                thread_name_prefix="newsbrew-sync",
            )
            future_to_binding: dict[Future[_FetchOutcome], SourceBinding] = {
                executor.submit(self._fetch_source, binding, ctx): binding
                for binding in active
            }
            done, not_done = wait(list(future_to_binding), timeout=ctx.remaining())
            try:
                if not_done:
                    ctx.cancelled.set()
                    for future in not_done:
                        future.cancel()
                # store writes do not count against the fetch deadline
                for future, binding in future_to_binding.items():
                    if future in done:
                        results[binding.key] = self._complete(binding, future)
                    else:
                        results[binding.key] = self._record_timeout(binding)
            finally:
                executor.shutdown(wait=not not_done, cancel_futures=True)

        finished_at = datetime.now(UTC)
        report = SyncReport(
            run_id=self._run_id,
            started_at=started_at,
            finished_at=finished_at,
            results=[results[b.key] for b in active],
        )
        self._metrics.record_cycle()

        self._log.info(
            "sync_complete",
            duration_ms=round(report.duration_ms, 2),
            total_inserted=report.total_inserted,
            total_updated=report.total_updated,
            total_failed_items=report.total_failed_items,
            sources_succeeded=report.sources_succeeded,
            sources_failed=report.sources_failed,
        )
        self._log.debug("sync_http_summary", sources=FetchMetrics.get_instance().to_dict())
        return report

    def _fetch_source(self, binding: SourceBinding, ctx: FetchContext) -> _FetchOutcome:
        """Fetch and convert one source. Runs on a worker thread."""
        start_ns = time.perf_counter_ns()
        adapter = binding.adapter
        result = adapter.fetch(ctx, binding.config)

        outcome = _FetchOutcome(result=result)
        if result.success:
            source_ref = SourceRef(name=adapter.name, icon=adapter.icon)
            for raw in result.items:
                try:
                    outcome.items.append(convert_item(raw, source_ref, ctx.now))
                except Exception as e:  # noqa: BLE001
                    outcome.conversion_failures += 1
                    self._log.warning(
                        "item_conversion_failed",
                        source=adapter.name,
                        title=raw.title[:80],
                        error=str(e),
                    )
        outcome.duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        return outcome

    def _complete(
        self, binding: SourceBinding, future: "Future[_FetchOutcome]"
    ) -> SourceSyncResult:
        """Persist a finished fetch, isolating any failure to this source."""
        try:
            outcome = future.result()
        except Exception as e:  # noqa: BLE001
            self._log.error(
                "source_execution_error", source_key=binding.key, error=str(e)
            )
            return self._record_failure(
                binding, f"Execution error: {e}", AdapterErrorClass.FETCH.value, 0.0
            )

        if outcome.result.error is not None:
            error = outcome.result.error
            return self._record_failure(
                binding, error.message, error.error_class.value, outcome.duration_ms
            )

        try:
            return self._persist(binding, outcome)
        except Exception as e:  # noqa: BLE001
            self._log.error(
                "source_persist_failed", source_key=binding.key, error=str(e)
            )
            return SourceSyncResult(
                name=binding.adapter.name,
                key=binding.key,
                items_fetched=len(outcome.items),
                error=f"Persist error: {e}",
                error_class="store",
                duration_ms=outcome.duration_ms,
            )

    def _is_active(self, binding: SourceBinding) -> bool:
        record = self._store.get_source(binding.adapter.name, binding.adapter.kind)
        if record is not None and not record.enabled:
            self._log.info("source_skipped_disabled", source_key=binding.key)
            return False
        return True

    def _register_source(self, binding: SourceBinding) -> int:
        """Look up or create the source row, applying a configured weight."""
        adapter = binding.adapter
        record = self._store.get_or_create_source(
            adapter.name,
            adapter.kind,
            url=getattr(adapter, "url", ""),
            icon=adapter.icon,
            weight=1.0 if binding.weight is None else binding.weight,
        )
        if binding.weight is not None and record.weight != binding.weight:
            self._store.update_source_weight(record.id, binding.weight)
            self._log.info(
                "source_weight_updated",
                source=adapter.name,
                old_weight=record.weight,
                new_weight=binding.weight,
            )
        return record.id

    def _persist(self, binding: SourceBinding, outcome: _FetchOutcome) -> SourceSyncResult:
        """Upsert a successful fetch and stamp the source as synced."""
        name = binding.adapter.name
        log = self._log.bind(source_key=binding.key, source=name)
        source_id = self._register_source(binding)

        result = SourceSyncResult(
            name=name,
            key=binding.key,
            items_fetched=len(outcome.items) + outcome.conversion_failures,
            items_failed=outcome.conversion_failures,
            duration_ms=outcome.duration_ms,
        )
        for item in outcome.items:
            try:
                upsert = self._store.upsert_item(item, source_id)
            except Exception as e:  # noqa: BLE001
                result.items_failed += 1
                log.warning("item_upsert_failed", item_id=item.id, error=str(e))
                continue

            if upsert.event_type == ItemEventType.NEW:
                result.items_inserted += 1
            elif upsert.event_type == ItemEventType.UPDATED:
                result.items_updated += 1
            else:
                result.items_unchanged += 1

        self._store.mark_sync_success(source_id)
        self._metrics.record_items(name, result.items_inserted + result.items_updated)
        self._metrics.record_duration(name, outcome.duration_ms)

        log.info(
            "source_synced",
            items_fetched=result.items_fetched,
            items_inserted=result.items_inserted,
            items_updated=result.items_updated,
            items_unchanged=result.items_unchanged,
            items_failed=result.items_failed,
            warnings_count=len(outcome.result.warnings),
            duration_ms=round(outcome.duration_ms, 2),
        )
        return result

    def _record_failure(
        self,
        binding: SourceBinding,
        message: str,
        error_class: str,
        duration_ms: float,
    ) -> SourceSyncResult:
        """Count a failed fetch against the source."""
        name = binding.adapter.name
        self._metrics.record_failure(name, error_class)
        self._metrics.record_duration(name, duration_ms)
        try:
            self._store.increment_sync_errors(self._register_source(binding))
        except Exception as e:  # noqa: BLE001
            self._log.error("source_error_tracking_failed", source=name, error=str(e))

        self._log.warning(
            "source_failed",
            source_key=binding.key,
            source=name,
            error_class=error_class,
            error=message,
            duration_ms=round(duration_ms, 2),
        )
        return SourceSyncResult(
            name=name,
            key=binding.key,
            error=message,
            error_class=error_class,
            duration_ms=duration_ms,
        )

    def _record_timeout(self, binding: SourceBinding) -> SourceSyncResult:
        return self._record_failure(
            binding,
            f"Timed out after {self._timeout_seconds:g}s",
            AdapterErrorClass.TIMEOUT.value,
            self._timeout_seconds * 1000,
        )
