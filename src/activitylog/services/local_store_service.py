"""
Local durable storage for the ActivityLog application.

This module provides the string-keyed key-value store that survives process
restarts, and the TimerStore view the stopwatch uses to keep its shadow copy.
All storage failures are reported as PersistenceError.

Classes:
    KeyValueStore: Protocol for string key-value stores
    InMemoryKeyValueStore: Process-local store, mainly for tests
    FileKeyValueStore: JSON file backed store
    TimerStore: Namespaced timer keys on top of a KeyValueStore
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from ..exceptions import PersistenceError
from ..models.timer_state import TimerState, TimerStatus

TIMER_START_KEY = "timerStart"
TIMER_ELAPSED_KEY = "timerElapsed"
TIMER_RUNNING_KEY = "timerRunning"

DEFAULT_STORE_PATH = Path.home() / ".activitylog" / "timer_store.json"


class KeyValueStore(Protocol):
    """String-keyed persistent key-value store."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """
    Key-value store held in process memory.

    Data does not survive the process, but the same instance can be handed to
    a fresh stopwatch to simulate a relaunch.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileKeyValueStore:
    """
    Key-value store persisted as a JSON object in a single file.

    Each write rewrites the whole file through a temporary file and an atomic
    rename, so a crash mid-write leaves the previous contents intact.

    Attributes:
        path: Location of the JSON file

    Example:
        >>> store = FileKeyValueStore("/tmp/timer.json")
        >>> store.set("timerRunning", "true")
        >>> store.get("timerRunning")
        'true'
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Initialize the file store.

        Args:
            path: Optional file path, uses TIMER_STORE_PATH env var or
                ~/.activitylog/timer_store.json if not provided
        """
        self.path = Path(path or os.getenv("TIMER_STORE_PATH") or DEFAULT_STORE_PATH)

    def _read(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read store {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Store {self.path} does not contain a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise PersistenceError(f"Could not write store {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class TimerStore:
    """
    Shadow copy of one stopwatch's state in a KeyValueStore.

    Keys are timerStart (epoch ms), timerElapsed (seconds) and timerRunning
    ("true"/"false"). With a namespace, every key is prefixed with
    "<namespace>:" so that two logging flows sharing a store do not overwrite
    each other's anchor.

    Attributes:
        store: Underlying key-value store
        namespace: Optional key prefix for this timer
    """

    def __init__(self, store: KeyValueStore, namespace: Optional[str] = None):
        self.store = store
        self.namespace = namespace

    def key(self, name: str) -> str:
        """Return the stored key for a timer field name."""
        if self.namespace:
            return f"{self.namespace}:{name}"
        return name

    def _get(self, name: str) -> Optional[str]:
        try:
            return self.store.get(self.key(name))
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Could not read '{self.key(name)}': {e}") from e

    def _set(self, name: str, value: str) -> None:
        try:
            self.store.set(self.key(name), value)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Could not write '{self.key(name)}': {e}") from e

    def _remove(self, name: str) -> None:
        try:
            self.store.remove(self.key(name))
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Could not remove '{self.key(name)}': {e}") from e

    def save(self, state: TimerState) -> None:
        """
        Write the shadow copy of state.

        Idle states clear the keys; running states write all three keys;
        paused states write the accumulated seconds and drop the anchor.

        Keys are written one at a time, ordered so that a record left behind
        by a failed write never restores more time than was recorded, nor a
        session that was already stopped. timerRunning="true" is written
        last; when leaving the running state it is overwritten first.

        Args:
            state: State to persist

        Raises:
            PersistenceError: If any write fails
        """
        if state.status == TimerStatus.IDLE:
            self.clear()
            return

        if state.is_running:
            self._set(TIMER_ELAPSED_KEY, str(state.accumulated_seconds))
            self._set(TIMER_START_KEY, str(state.run_anchor_epoch_millis))
            self._set(TIMER_RUNNING_KEY, "true")
        else:
            self._set(TIMER_RUNNING_KEY, "false")
            self._set(TIMER_ELAPSED_KEY, str(state.accumulated_seconds))
            self._remove(TIMER_START_KEY)

    def load(self) -> TimerState:
        """
        Rebuild a TimerState from the stored keys.

        A running flag without an anchor is an inconsistent record and loads
        as idle. Only a record explicitly marked timerRunning="false" with
        accumulated time loads as paused; seconds without the flag are the
        remains of a partial clear and load as idle.

        Returns:
            Reconstructed TimerState

        Raises:
            PersistenceError: If the store cannot be read or holds values
                that are not integers
        """
        start = self._get(TIMER_START_KEY)
        elapsed = self._get(TIMER_ELAPSED_KEY)
        running = self._get(TIMER_RUNNING_KEY)

        try:
            accumulated = max(0, int(elapsed)) if elapsed else 0
            anchor = int(start) if start else None
        except ValueError as e:
            raise PersistenceError(f"Corrupt timer record: {e}") from e

        if running == "true":
            if anchor is None:
                return TimerState.idle()
            return TimerState(
                accumulated_seconds=accumulated,
                run_anchor_epoch_millis=anchor,
                status=TimerStatus.RUNNING,
            )

        if running == "false" and accumulated > 0:
            return TimerState(accumulated_seconds=accumulated, status=TimerStatus.PAUSED)
        return TimerState.idle()

    def clear(self) -> None:
        """
        Remove every key belonging to this timer.

        The running flag goes first, after which any leftover keys load as idle.
        """
        for name in (TIMER_RUNNING_KEY, TIMER_START_KEY, TIMER_ELAPSED_KEY):
            self._remove(name)
