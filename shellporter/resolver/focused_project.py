"""
Resolve the project directory of the focused IDE window.

Pipeline: classify the app -> check accessibility trust -> run the family's live
strategies in order on a worker thread -> first success wins and is cached -> on
exhaustion fall back to the cache. The result always carries every attempt made.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from ..cache import ResolutionCacheStore
from ..exceptions import WindowInspectionError
from .family import classify
from .models import EditorFamily, ResolvedContext, ResolverAttempt, WindowSnapshot
from .strategies import Strategy, StrategyName, build_live_strategies, strategy_sequence

logger = logging.getLogger(__name__)

ACCESSIBILITY_STRATEGY = "Accessibility"
ACCESSIBILITY_MISSING = "Accessibility permission missing."


class FocusedProjectResolver:
    """Runs the per-family strategy chain and manages cache write-back."""

    def __init__(
        self,
        cache_store: Optional[ResolutionCacheStore] = None,
        strategies: Optional[Dict[StrategyName, Strategy]] = None,
    ):
        """
        Args:
            cache_store: Resolution cache; None disables the cache fallback
            strategies: Live strategy table (defaults to build_live_strategies())
        """
        self.cache_store = cache_store
        self.strategies = strategies if strategies is not None else build_live_strategies()
        # Strategies do blocking file I/O; they run strictly in sequence on one worker.
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="shellporter-resolver")

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def resolve(self, app_name: str, bundle_identifier: str, snapshot: WindowSnapshot) -> ResolvedContext:
        """
        Resolve the project directory for one window snapshot.

        Never raises for strategy failures; an unresolved context is returned instead.

        Args:
            app_name: Display name of the application
            bundle_identifier: Application bundle identifier
            snapshot: Attributes of the selected window

        Returns:
            ResolvedContext with the winning path (if any) and all attempts
        """
        family = classify(bundle_identifier)
        attempts: List[ResolverAttempt] = []

        if not snapshot.trusted:
            attempts.append(ResolverAttempt(
                strategy=ACCESSIBILITY_STRATEGY,
                success=False,
                details=ACCESSIBILITY_MISSING,
            ))
            return self._finish(self._unresolved(app_name, bundle_identifier, family, ACCESSIBILITY_MISSING, attempts, snapshot))

        order = strategy_sequence(family)
        live_order = tuple(name for name in order if name is not StrategyName.CACHED_RESOLUTION)

        live_attempts, winner = self._executor.submit(self._run_live_chain, live_order, snapshot, family).result()
        attempts.extend(live_attempts)

        if winner is not None:
            winning_attempt = attempts[-1]
            # Every live success is remembered so the cache can cover later transient failures.
            self._record(bundle_identifier, snapshot.title, winning_attempt.candidate_path)
            return self._finish(ResolvedContext(
                app_name=app_name,
                bundle_identifier=bundle_identifier,
                family=family,
                project_path=winning_attempt.candidate_path,
                source=winner.value,
                details=winning_attempt.details,
                attempts=tuple(attempts),
                window_title=snapshot.title,
                document_value=snapshot.document,
                window_source=snapshot.window_source,
            ))

        if StrategyName.CACHED_RESOLUTION in order:
            cached_attempt = self._cached_attempt(bundle_identifier, snapshot.title)
            attempts.append(cached_attempt)
            if cached_attempt.success:
                self._record(bundle_identifier, snapshot.title, cached_attempt.candidate_path)
                return self._finish(ResolvedContext(
                    app_name=app_name,
                    bundle_identifier=bundle_identifier,
                    family=family,
                    project_path=cached_attempt.candidate_path,
                    source=StrategyName.CACHED_RESOLUTION.value,
                    details=cached_attempt.details,
                    attempts=tuple(attempts),
                    window_title=snapshot.title,
                    document_value=snapshot.document,
                    window_source=snapshot.window_source,
                ))

        return self._finish(self._unresolved(
            app_name, bundle_identifier, family,
            "No resolver strategy produced a valid path.", attempts, snapshot,
        ))

    def resolve_frontmost(self) -> ResolvedContext:
        """
        Inspect the frontmost application and resolve its selected window.

        Raises:
            WindowInspectionError: If no frontmost application could be identified
        """
        # Imported here; monitoring depends on resolver.models.
        from ..monitoring import get_frontmost_app, snapshot_window

        app = get_frontmost_app()
        if app is None:
            raise WindowInspectionError("Could not identify the frontmost application")
        snapshot = snapshot_window(app.pid)
        return self.resolve(app.name, app.bundle_identifier, snapshot)

    def _run_live_chain(
        self,
        order: Tuple[StrategyName, ...],
        snapshot: WindowSnapshot,
        family: EditorFamily,
    ) -> Tuple[List[ResolverAttempt], Optional[StrategyName]]:
        attempts: List[ResolverAttempt] = []
        for name in order:
            strategy = self.strategies.get(name)
            if strategy is None:
                attempts.append(ResolverAttempt(name.value, False, "Skipped: strategy not configured."))
                continue
            try:
                attempt = strategy.run(snapshot, family)
            except Exception as e:
                logger.exception("Strategy %s raised", name.value)
                attempt = ResolverAttempt(name.value, False, f"{name.value} raised: {e}")
            attempts.append(attempt)
            if attempt.success and attempt.candidate_path:
                return attempts, name
        return attempts, None

    def _cached_attempt(self, bundle_identifier: str, window_title: Optional[str]) -> ResolverAttempt:
        name = StrategyName.CACHED_RESOLUTION.value
        if self.cache_store is None:
            return ResolverAttempt(name, False, "Resolution cache is disabled.")
        path = self.cache_store.lookup(bundle_identifier, window_title)
        if path is None:
            return ResolverAttempt(name, False, "No cached path for this app/window signature.")
        return ResolverAttempt(name, True, "Resolved using cached path from previous successful launch.", path)

    def _record(self, bundle_identifier: str, window_title: Optional[str], path: Optional[str]) -> None:
        if self.cache_store is None or not path:
            return
        self.cache_store.record(bundle_identifier, window_title, path)

    @staticmethod
    def _unresolved(
        app_name: str,
        bundle_identifier: str,
        family: EditorFamily,
        details: str,
        attempts: List[ResolverAttempt],
        snapshot: WindowSnapshot,
    ) -> ResolvedContext:
        return ResolvedContext(
            app_name=app_name,
            bundle_identifier=bundle_identifier,
            family=family,
            project_path=None,
            source="none",
            details=details,
            attempts=tuple(attempts),
            window_title=snapshot.title,
            document_value=snapshot.document,
            window_source=snapshot.window_source,
        )

    @staticmethod
    def _finish(context: ResolvedContext) -> ResolvedContext:
        title_suffix = f' title="{context.window_title}"' if context.window_title is not None else ""
        logger.info(
            "Resolver[%s] %s -> %s via %s windowSource=%s%s",
            context.family.value,
            context.bundle_identifier,
            context.project_path or "unresolved",
            context.source,
            context.window_source or "-",
            title_suffix,
        )
        for attempt in context.attempts:
            logger.info(
                "  attempt[%s] success=%s path=%s details=%s",
                attempt.strategy, attempt.success, attempt.candidate_path or "-", attempt.details,
            )
        return context
