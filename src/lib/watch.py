"""
Watch mode: debounced, single-flight rebuilds on file changes

A WatchSession runs on one asyncio event loop. File notifications, the
debounce timer and build continuations are all callbacks on that loop, so
the session's state needs no locks.

Lifecycle (see models.build.WATCH_TRANSITIONS):

    IDLE --change--> DEBOUNCE_PENDING --timer--> REBUILDING --finished--> IDLE
      any --stop--> STOPPED

Rules:
    - Every qualifying change is added to the pending set and re-arms the
      single debounce timer.
    - A timer firing while REBUILDING is dropped. The pending set is kept
      and feeds the next rebuild.
    - A rebuild snapshots and clears the pending set, reloads templates if
      any pending path is a template file, then rebuilds everything.
    - stop() cancels the timer and releases the subscription once; a
      rebuild in flight is allowed to finish.

Usage:
    session = await session_start(WatchConfig(
        input_abs=..., template_abs=..., out_abs=..., build=rebuild,
    ))
    signals_connect(session)
    await session.wait()
"""

import asyncio
import signal
from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Set,
    Tuple,
)

from ..config import appsettings
from ..models.build import BuildResult, WatchPhase, WatchTrigger, phase_next
from .io import path_hasIgnoredPart
from .log import ERROR, LOG
from .templates import TemplateRegistry, templateKey_fromFilename, templates_load

RawChanges = Set[Tuple[Any, str]]
WatchFilter = Callable[[Any, str], bool]
ChangesSource = Callable[[List[Path], asyncio.Event, WatchFilter], AsyncIterator[RawChanges]]


@dataclass
class WatchConfig:
    """
    Configuration of one watch session

    Attributes:
        input_abs: Content file or directory to watch (recursively)
        template_abs: Template directory (only direct children count)
        out_abs: Output directory, never watched
        build: Coroutine function running a full build with a registry
        templates_loader: Loads a registry from template_abs
        registry: Initial registry (loaded at start when None)
        debounce_ms: Quiet period before a rebuild
        once: Build once immediately, then stop
        changes_source: Event source factory (watchfiles when None)
        on_result: Called with each successful build's result
        ignored_dirs: Directory names whose contents are ignored
    """
    input_abs: Path
    template_abs: Path
    out_abs: Path
    build: Callable[[TemplateRegistry], Awaitable[BuildResult]]
    templates_loader: Callable[[Path], TemplateRegistry] = templates_load
    registry: Optional[TemplateRegistry] = None
    debounce_ms: int = field(default_factory=lambda: appsettings.debounce_ms)
    once: bool = False
    changes_source: Optional[ChangesSource] = None
    on_result: Optional[Callable[[BuildResult], None]] = None
    ignored_dirs: List[str] = field(default_factory=lambda: list(appsettings.ignored_dirs))


def path_isUnder(path: Path, directory: Path) -> bool:
    """True when path is directory itself or inside it"""
    return path == directory or directory in path.parents


def path_isIgnored(
    path: Path,
    out_abs: Path,
    roots: Iterable[Path] = (),
    ignored_dirs: Optional[Iterable[str]] = None,
) -> bool:
    """
    Check whether a changed path should never reach the session

    Paths inside the output directory are ignored, as are paths with an
    ignored directory component. Components are checked relative to the
    watched root containing the path, so a project that itself lives
    under e.g. a "dist" directory is still watched.
    """
    path = Path(path)
    if path_isUnder(path, Path(out_abs)):
        return True
    for root in roots:
        if path_isUnder(path, Path(root)):
            return path_hasIgnoredPart(path.relative_to(root), ignored_dirs)
    return path_hasIgnoredPart(path, ignored_dirs)


def watchFilter_make(
    out_abs: Path,
    roots: Iterable[Path] = (),
    ignored_dirs: Optional[Iterable[str]] = None,
) -> WatchFilter:
    """Build a watchfiles filter (True keeps the change)"""
    roots = [Path(r) for r in roots]
    ignored = list(ignored_dirs) if ignored_dirs is not None else None

    def watch_filter(change: Any, path: str) -> bool:
        return not path_isIgnored(Path(path), out_abs, roots, ignored)

    return watch_filter


def watchfiles_source(
    paths: List[Path],
    stop_event: asyncio.Event,
    watch_filter: WatchFilter,
) -> AsyncIterator[RawChanges]:
    """
    Subscribe to filesystem changes with watchfiles.awatch()

    The awatch debounce doubles as the grace period for writes to settle.
    """
    import watchfiles

    return watchfiles.awatch(
        *paths,
        watch_filter=watch_filter,
        debounce=appsettings.stability_ms,
        step=appsettings.poll_interval_ms,
        stop_event=stop_event,
    )


class WatchSession:
    """
    Debounced single-flight rebuild coordinator

    Attributes:
        config: Session configuration
        phase: Current lifecycle phase
        pending: Changed paths not yet consumed by a rebuild
        registry: Registry used by the next rebuild
        rebuild_count: Rebuilds started so far
        last_result: Result of the most recent successful build
    """

    def __init__(self, config: WatchConfig) -> None:
        self.config = config
        self.phase = WatchPhase.IDLE
        self.pending: Set[Path] = set()
        self.registry: Optional[TemplateRegistry] = config.registry
        self.rebuild_count = 0
        self.last_result: Optional[BuildResult] = None
        self.subscription_releases = 0

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._rebuild_task: Optional["asyncio.Task[None]"] = None
        self._consumer: Optional["asyncio.Task[None]"] = None
        self._subscription_open = False
        self._stop_event = asyncio.Event()
        self._stopped = asyncio.Event()
        self._failure: Optional[BaseException] = None

    # ------------------------------------------------------------------
    # Phase handling

    def phase_advance(self, trigger: WatchTrigger) -> WatchPhase:
        """Apply a trigger; illegal moves raise WatchTransitionError"""
        new_phase = phase_next(self.phase, trigger)
        if new_phase is not self.phase:
            LOG(f"[watch] {self.phase.value} -> {new_phase.value}", level=3)
        self.phase = new_phase
        return new_phase

    @property
    def debounce_isArmed(self) -> bool:
        return self._timer is not None

    # ------------------------------------------------------------------
    # Lifecycle

    async def start(self) -> None:
        """
        Load templates if needed, then subscribe or run the single build

        Raises:
            TemplateError: If the initial template load fails
            Exception: Whatever the change source raises while subscribing
        """
        self._loop = asyncio.get_running_loop()

        if self.registry is None:
            self.registry = self.config.templates_loader(self.config.template_abs)

        if self.config.once:
            self.phase_advance(WatchTrigger.RUN_ONCE)
            self.rebuild_begin()
            return

        source = self.config.changes_source or watchfiles_source
        roots = [self.config.input_abs, self.config.template_abs]
        watch_filter = watchFilter_make(self.config.out_abs, roots, self.config.ignored_dirs)
        changes = source(roots, self._stop_event, watch_filter)
        self._subscription_open = True
        self._consumer = self._loop.create_task(self.changes_consume(changes))
        LOG("[watch] watching for changes...", level=2)

    def stop(self) -> None:
        """
        Stop the session; safe to call in any phase and more than once

        A pending debounce timer is cancelled. A rebuild in flight finishes.
        """
        if self.phase is not WatchPhase.STOPPED:
            LOG("[watch] shutting down...", level=2)
        self.phase_advance(WatchTrigger.STOP)

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        self.subscription_release()
        self._stopped.set()

    def subscription_release(self) -> None:
        """Release the change subscription exactly once"""
        if not self._subscription_open:
            return
        self._subscription_open = False
        self.subscription_releases += 1
        self._stop_event.set()
        consumer = self._consumer
        if consumer is not None and not consumer.done() and consumer is not asyncio.current_task():
            consumer.cancel()

    async def wait(self) -> Optional[BuildResult]:
        """
        Wait until the session is stopped and any rebuild has finished

        Returns:
            The last build result, if any

        Raises:
            Exception: The change source's failure, if the subscription broke
        """
        await self._stopped.wait()
        if self._rebuild_task is not None and not self._rebuild_task.done():
            await self._rebuild_task
        if self._consumer is not None:
            await asyncio.gather(self._consumer, return_exceptions=True)
        if self._failure is not None:
            raise self._failure
        return self.last_result

    # ------------------------------------------------------------------
    # Events

    def path_isTemplate(self, path: Path) -> bool:
        """Template file directly inside the template directory"""
        return (
            path.parent == self.config.template_abs
            and templateKey_fromFilename(path.name) is not None
        )

    def path_isContent(self, path: Path) -> bool:
        """Content file under the input path"""
        return (
            appsettings.contentSuffix_matches(path.name)
            and path_isUnder(path, self.config.input_abs)
        )

    def path_qualifies(self, path: Path) -> bool:
        """Check if a change to path should trigger a rebuild"""
        if path_isIgnored(
            path,
            self.config.out_abs,
            [self.config.input_abs, self.config.template_abs],
            self.config.ignored_dirs,
        ):
            return False
        return self.path_isTemplate(path) or self.path_isContent(path)

    def change_record(self, path: Path, kind: str = "change") -> bool:
        """
        Record a file notification

        Args:
            path: Changed path
            kind: Notification kind, for logging (add, change, unlink)

        Returns:
            True if the change qualified and (re)armed the debounce timer
        """
        if self.phase is WatchPhase.STOPPED:
            return False
        path = Path(path)
        if not self.path_qualifies(path):
            return False

        LOG(f"[watch] {kind}: {path}", level=2)
        self.pending.add(path)
        self.phase_advance(WatchTrigger.CHANGE)
        self.timer_arm()
        return True

    def timer_arm(self) -> None:
        """(Re)start the single debounce timer"""
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._loop.call_later(self.config.debounce_ms / 1000, self.timer_fire)

    def timer_fire(self) -> None:
        """Debounce timer elapsed: rebuild unless one is in flight"""
        self._timer = None
        if self.phase is WatchPhase.STOPPED:
            return
        if self.phase is WatchPhase.REBUILDING:
            LOG("[watch] build already in progress, skipping", level=2)
            self.phase_advance(WatchTrigger.TIMER)
            return
        self.phase_advance(WatchTrigger.TIMER)
        self.rebuild_begin()

    async def changes_consume(self, changes: AsyncIterator[RawChanges]) -> None:
        """Feed notifications from the change source into the session"""
        try:
            async for batch in changes:
                for change, raw_path in sorted(batch, key=lambda c: str(c[1])):
                    self.change_record(Path(raw_path), kind=str(getattr(change, 'name', change)))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._failure = e
            ERROR(f"[watch] watcher error: {e}", exc=e)
        finally:
            self.stop()

    # ------------------------------------------------------------------
    # Rebuilds

    def rebuild_begin(self) -> None:
        """Snapshot and clear the pending set, then start the rebuild task"""
        loop = self._loop or asyncio.get_running_loop()
        changed = frozenset(self.pending)
        self.pending.clear()
        self.rebuild_count += 1
        self._rebuild_task = loop.create_task(self.rebuild_run(changed))

    async def rebuild_run(self, changed: FrozenSet[Path]) -> None:
        """
        Run one full rebuild

        Build errors are logged and the session returns to idle; the next
        change retries.
        """
        try:
            if self.registry is None or any(self.path_isTemplate(p) for p in changed):
                LOG("[watch] reloading templates", level=2)
                self.registry = self.config.templates_loader(self.config.template_abs)

            LOG("[watch] rebuilding...", level=2)
            result = await self.config.build(self.registry)
            self.last_result = result
            LOG(f"[watch] rebuild complete: ok={result.succeeded} failed={result.failed}", level=2)
            if self.config.on_result is not None:
                self.config.on_result(result)
        except Exception as e:
            ERROR(f"[watch] build error (will retry on next change): {e}", exc=e)
        finally:
            if self.phase is not WatchPhase.STOPPED:
                if self._timer is not None:
                    self.phase_advance(WatchTrigger.REBUILD_FINISHED_ARMED)
                else:
                    self.phase_advance(WatchTrigger.REBUILD_FINISHED)
            if self.config.once:
                self.stop()


async def session_start(config: WatchConfig) -> WatchSession:
    """
    Create and start a watch session on the running loop

    Raises:
        Exception: Subscription or initial template load failures
    """
    session = WatchSession(config)
    await session.start()
    return session


def signals_connect(session: WatchSession) -> None:
    """Stop the session on SIGINT/SIGTERM"""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, session.stop)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform/loop; KeyboardInterrupt still ends the run
            LOG(f"[watch] cannot install handler for {sig.name}", level=3)
