"""Per-root coordination of regeneration passes and change notifications."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from .config import NXQueryConfig
from .logging import get_logger
from .models import MANIFEST_FILENAME, NAMESPACE_KEYS_FILENAME, ROOT_KEYS_FILENAME
from .renderer import Renderer
from .scheduler import ChangeScheduler
from .seeder import TemplateSeeder
from .walker import TreeWalker
from .writer import ArtifactWriter


class ChangeEvent(str, Enum):
    """Raw notification kinds delivered by the host's file watcher."""

    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"
    ADD_DIR = "addDir"
    UNLINK_DIR = "unlinkDir"


ChangeListener = Callable[[str, Path], None]
ReloadListener = Callable[[], None]


class Engine:
    """Owns the walker, renderer, writer, seeder and scheduler for one scanned root."""

    def __init__(
        self,
        root: Path,
        *,
        exclude_dirs: Iterable[str] = (),
        seed_templates: bool = True,
        walker: TreeWalker | None = None,
        renderer: Renderer | None = None,
        writer: ArtifactWriter | None = None,
        seeder: TemplateSeeder | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        exclude = tuple(exclude_dirs)
        self.walker = walker or TreeWalker(self.root, exclude_dirs=exclude)
        self.renderer = renderer or Renderer(self.root)
        self.writer = writer or ArtifactWriter(self.root, exclude_dirs=exclude)
        self.seeder = seeder or TemplateSeeder(self.root)
        self.seed_templates = seed_templates
        self.scheduler = ChangeScheduler(self._run_scheduled_pass)
        self.logger = get_logger("engine")
        self._listeners: List[ChangeListener] = []
        self._reload_listeners: List[ReloadListener] = []
        self._reload_lock = threading.Lock()
        self._pass_lock = threading.Lock()
        self._reload_requested = False

    @classmethod
    def from_config(cls, config: NXQueryConfig) -> "Engine":
        return cls(
            config.root,
            exclude_dirs=config.exclude_dirs,
            seed_templates=config.seed_templates,
        )

    # ------------------------------------------------------------------
    # Passes

    def initialize(self) -> List[Path]:
        """Run the startup pass synchronously, creating the base structure first."""
        self.logger.debug("Initializing query root %s", self.root)
        return self.sync()

    def sync(self) -> List[Path]:
        """Run one full regeneration pass and return the files it rewrote.

        Direct calls and scheduled passes share one lock, so passes never overlap.
        """
        with self._pass_lock:
            self.writer.ensure_base_structure()
            namespaces = self.walker.collect_namespaces()
            outputs = self.renderer.render_all(namespaces)
            written = [path for path, content in outputs.items() if self.writer.write_if_changed(path, content)]
        self.logger.debug(
            "Sync finished for %d namespace(s); %d file(s) rewritten", len(namespaces), len(written)
        )
        return written

    def schedule_sync(self, *, reload: bool = False) -> Optional[Future]:
        if reload:
            with self._reload_lock:
                self._reload_requested = True
        return self.scheduler.schedule()

    def flush(self, timeout: Optional[float] = None) -> bool:
        return self.scheduler.flush(timeout)

    def close(self) -> None:
        self.scheduler.close()

    def _run_scheduled_pass(self) -> None:
        with self._reload_lock:
            reload = self._reload_requested
            self._reload_requested = False
        self.sync()
        if reload:
            for listener in list(self._reload_listeners):
                listener()

    # ------------------------------------------------------------------
    # Change notifications

    def handle_event(self, event: Union[ChangeEvent, str], path: Union[Path, str]) -> bool:
        """Route one watcher notification; return False when it was filtered out."""
        event = ChangeEvent(event)
        target = Path(path).expanduser().resolve()

        if event is ChangeEvent.ADD_DIR:
            if not self.is_in_root(target):
                return False
            self.writer.ensure_namespace_skeleton(target)
            self.schedule_sync()
            return True
        if event is ChangeEvent.UNLINK_DIR:
            if not self.is_in_root(target):
                return False
            self.schedule_sync()
            return True

        if not self.should_process(target):
            return False
        if event is ChangeEvent.ADD and self.seed_templates:
            self.seeder.maybe_seed(target)
        self._emit(event.value, target)
        self.schedule_sync(reload=True)
        return True

    def should_process(self, path: Path) -> bool:
        return self.is_in_root(path) and not self.is_managed_artifact(path)

    def is_in_root(self, path: Path) -> bool:
        path = Path(path).resolve()
        return path == self.root or self.root in path.parents

    def is_managed_artifact(self, path: Path) -> bool:
        try:
            parts = Path(path).resolve().relative_to(self.root).parts
        except ValueError:
            return False
        if parts in {(MANIFEST_FILENAME,), (ROOT_KEYS_FILENAME,)}:
            return True
        return len(parts) == 2 and parts[1] == NAMESPACE_KEYS_FILENAME

    # ------------------------------------------------------------------
    # Subscribers

    def on(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def off(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def on_reload(self, listener: ReloadListener) -> None:
        self._reload_listeners.append(listener)

    def _emit(self, event: str, path: Path) -> None:
        for listener in list(self._listeners):
            listener(event, path)


__all__ = ["ChangeEvent", "Engine"]
