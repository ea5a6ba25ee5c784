"""
Step Executor — routes sequencer steps to the pet's effects

Say -> speak(content), Animate -> animate(name), PlayPlugin -> plugin(params).
Plugins are looked up by id in a registry owned by the executor. With a
plugin pool (concurrent.futures.Executor) plugin calls run off the GUI
thread and a Future is handed back to the sequencer.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future
from typing import Callable, Dict, List, Mapping, Optional

from saintgrid.model.steps import Animate, PlayPlugin, Say, Step, StepKind
from saintgrid.utils.logger import logger

PluginFn = Callable[[Optional[Mapping]], object]


class StepExecutionError(RuntimeError):
    """Raised when a step cannot be executed (unknown plugin, misrouted wait)."""
    pass


class StepExecutor:
    """Callable executor for RhythmSequencer."""

    def __init__(
        self,
        speak: Callable[[str], object],
        animate: Callable[[str], object],
        plugins: Optional[Dict[str, PluginFn]] = None,
        plugin_pool: Optional[Executor] = None,
    ):
        """
        Args:
            speak: Shows/speaks an utterance
            animate: Plays a named animation
            plugins: Initial plugin registry {plugin_id: fn(params)}
            plugin_pool: Optional worker pool for plugin calls
        """
        self._speak = speak
        self._animate = animate
        self._plugins: Dict[str, PluginFn] = dict(plugins or {})
        self._plugin_pool = plugin_pool
        self._lock = threading.Lock()

    # =========================================================================
    # PLUGIN REGISTRY
    # =========================================================================

    def register_plugin(self, plugin_id: str, fn: PluginFn):
        with self._lock:
            replaced = plugin_id in self._plugins
            self._plugins[plugin_id] = fn
        logger.debug(
            f"StepExecutor: {'replaced' if replaced else 'registered'} plugin '{plugin_id}'",
            component="EXEC"
        )

    def unregister_plugin(self, plugin_id: str) -> bool:
        with self._lock:
            removed = self._plugins.pop(plugin_id, None) is not None
        if removed:
            logger.debug(f"StepExecutor: unregistered plugin '{plugin_id}'", component="EXEC")
        return removed

    def plugin_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._plugins)

    # =========================================================================
    # EXECUTION
    # =========================================================================

    def __call__(self, step: Step) -> Optional[Future]:
        if isinstance(step, Say):
            self._speak(step.content)
            return None

        if isinstance(step, Animate):
            self._animate(step.name)
            return None

        if isinstance(step, PlayPlugin):
            return self._play_plugin(step)

        if step.kind is StepKind.WAIT:
            raise StepExecutionError("Wait steps are timed by the sequencer, not executed")

        raise StepExecutionError(f"Unsupported step: {step!r}")

    def _play_plugin(self, step: PlayPlugin) -> Optional[Future]:
        with self._lock:
            fn = self._plugins.get(step.plugin_id)
        if fn is None:
            raise StepExecutionError(f"Unknown plugin: '{step.plugin_id}'")

        logger.debug(f"StepExecutor: plugin '{step.plugin_id}'", component="EXEC")
        if self._plugin_pool is not None:
            return self._plugin_pool.submit(fn, step.params)
        fn(step.params)
        return None
