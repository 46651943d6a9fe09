"""Bridges watchdog filesystem events into an Engine's change feed."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .engine import ChangeEvent, Engine
from .logging import get_logger


def _path(raw: object) -> Path:
    return Path(os.fsdecode(raw))


class EngineEventHandler(FileSystemEventHandler):
    """Translates watchdog callbacks into add/change/unlink notifications."""

    def __init__(self, engine: Engine) -> None:
        super().__init__()
        self.engine = engine
        self.logger = get_logger("watch")

    def on_created(self, event: FileSystemEvent) -> None:
        kind = ChangeEvent.ADD_DIR if event.is_directory else ChangeEvent.ADD
        self._dispatch(kind, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._dispatch(ChangeEvent.CHANGE, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        kind = ChangeEvent.UNLINK_DIR if event.is_directory else ChangeEvent.UNLINK
        self._dispatch(kind, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            self._dispatch(ChangeEvent.UNLINK_DIR, event.src_path)
            self._dispatch(ChangeEvent.ADD_DIR, event.dest_path)
        else:
            self._dispatch(ChangeEvent.UNLINK, event.src_path)
            self._dispatch(ChangeEvent.ADD, event.dest_path)

    def _dispatch(self, kind: ChangeEvent, raw_path: object) -> None:
        path = _path(raw_path)
        if self.engine.handle_event(kind, path):
            self.logger.debug("%s %s", kind.value, path)


class TreeWatcher:
    """Runs a watchdog observer over the engine root until stopped."""

    def __init__(
        self,
        engine: Engine,
        *,
        recursive: bool = True,
        observer_factory: Callable[[], Observer] = Observer,
    ) -> None:
        self.engine = engine
        self.recursive = recursive
        self._observer_factory = observer_factory
        self._observer: Optional[Observer] = None
        self.handler = EngineEventHandler(engine)
        self.logger = get_logger("watch")

    def start(self) -> None:
        if self._observer is not None:
            return
        self.engine.root.mkdir(parents=True, exist_ok=True)
        observer = self._observer_factory()
        observer.schedule(self.handler, str(self.engine.root), recursive=self.recursive)
        observer.start()
        self._observer = observer
        self.logger.info("Watching %s", self.engine.root)

    def stop(self) -> None:
        observer = self._observer
        if observer is None:
            return
        self._observer = None
        observer.stop()
        observer.join()

    def __enter__(self) -> "TreeWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


__all__ = ["EngineEventHandler", "TreeWatcher"]
