"""Self-refreshing configuration holder.

Purpose
-------
Keep a layered :class:`~lib_yaml_config.application.config.Config` current
for long-running services. Observers are called with the new configuration
whenever it is (re)loaded; an optional daemon thread polls the resources.

Control keys
------------
The loaded configuration controls its own polling:

* ``.config.autoupdate.enabled`` – ``true`` starts the background thread,
* ``.config.autoupdate.intervalms`` – polling interval in milliseconds.

Contents
--------
* :class:`AutoConfig` – holder with observer registration and polling.
* :class:`_AutoUpdater` – daemon thread polling its owner for changes.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from .application.config import Config
from .core import resolve_layered_configs
from .domain.errors import YAMLConfigError
from .observability import log_debug, log_error, log_info

Observer = Callable[[Config], None]
"""Callback receiving the freshly assigned configuration."""

ConfigLoader = Callable[[str], Config]
"""Callable loading the configuration for a resource pattern."""

AUTO_UPDATE_KEY = ".config.autoupdate.enabled"
AUTO_UPDATE_MS_KEY = ".config.autoupdate.intervalms"

_JOIN_TIMEOUT_S = 5.0


class AutoConfig:
    """Hold the current configuration and notify observers on change.

    Why
    ----
    Services want to pick up edited configuration files without a restart,
    and components want a push notification instead of re-reading paths.

    What
    ----
    Loads *resource* with :func:`~lib_yaml_config.core.resolve_layered_configs`
    (or the injected *loader*), enables extrapolation on the result, informs
    observers and starts or stops polling according to the control keys.
    Reloads only notify when the raw tree actually changed.

    Parameters
    ----------
    resource:
        Resource pattern to load immediately; ``None`` defers to
        :meth:`initialize`.
    auto_update_default:
        Polling state used when the configuration lacks the enabled key.
    interval_ms_default:
        Interval used when the configuration lacks the interval key.
    loader:
        Replacement for the layered loader (tests, custom resolvers).

    Examples
    --------
    >>> seen = []
    >>> holder = AutoConfig("demo", loader=lambda _: Config({"port": 80}))
    >>> holder.register_observer(lambda cfg: seen.append(cfg.get("port")))
    >>> seen, holder.is_auto_updating
    ([80], False)
    """

    def __init__(
        self,
        resource: str | None = None,
        *,
        auto_update_default: bool = False,
        interval_ms_default: int = 60_000,
        loader: ConfigLoader | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._observers: list[Observer] = []
        self._config: Optional[Config] = None
        self._resource: Optional[str] = None
        self._updater: Optional[_AutoUpdater] = None
        self._auto_update = False
        self._auto_update_default = auto_update_default
        self._interval_ms_default = interval_ms_default
        self._load: ConfigLoader = loader or (lambda pattern: resolve_layered_configs(pattern))
        if resource is not None:
            self.initialize(resource)

    def initialize(self, resource: str) -> None:
        """Load *resource* and make it the current configuration."""

        with self._lock:
            self._resource = resource
            self._assign(self._load(resource))

    @property
    def config(self) -> Config:
        """The current configuration.

        Raises
        ------
        RuntimeError
            When nothing has been loaded yet.
        """

        if self._config is None:
            raise RuntimeError("The configuration should have been loaded, but was not")
        return self._config

    @property
    def is_auto_updating(self) -> bool:
        return self._auto_update

    def register_observer(self, observer: Observer) -> None:
        """Add *observer*; it is called at once when a configuration is loaded."""

        with self._lock:
            self._observers.append(observer)
            log_debug("observer_registered", resource=self._resource, path=None, observers=len(self._observers))
            if self._config is not None:
                observer(self._config)

    def unregister_observer(self, observer: Observer) -> bool:
        """Remove *observer*; returns ``False`` when it was not registered."""

        with self._lock:
            try:
                self._observers.remove(observer)
            except ValueError:
                return False
            return True

    def check_for_change(self) -> bool:
        """Reload the resource and assign it when it differs from the current tree.

        Returns ``True`` when a new configuration was assigned. Load errors
        propagate to the caller.
        """

        with self._lock:
            if self._resource is None:
                raise RuntimeError("No configuration resource has been initialised")
            candidate = self._load(self._resource)
            if self._config is not None and candidate.as_dict(extrapolate=False) == self._config.as_dict(
                extrapolate=False
            ):
                return False
            log_info("config_reloaded", resource=self._resource, path=None)
            self._assign(candidate)
            return True

    def shutdown(self) -> None:
        """Stop the polling thread, if any, and wait for it to finish.

        Called from an observer running on the polling thread itself, the
        thread is only signalled.
        """

        with self._lock:
            log_info("auto_update_shutdown", resource=self._resource, path=None)
            updater = self._stop_updater()
            self._auto_update = False
        if updater is not None and updater is not threading.current_thread():
            updater.join(_JOIN_TIMEOUT_S)

    def _assign(self, config: Config) -> None:
        config.extrapolate = True
        self._config = config
        for observer in list(self._observers):
            observer(config)
        self._setup_auto_update(config)

    def _setup_auto_update(self, config: Config) -> None:
        self._auto_update = config.get_boolean(AUTO_UPDATE_KEY, self._auto_update_default)
        interval_ms = config.get_integer(AUTO_UPDATE_MS_KEY, self._interval_ms_default)
        self._stop_updater()
        if self._auto_update:
            self._updater = _AutoUpdater(self, interval_ms)
            self._updater.start()

    def _stop_updater(self) -> Optional[_AutoUpdater]:
        updater, self._updater = self._updater, None
        if updater is not None:
            updater.stop()
        return updater

    def _poll(self, updater: _AutoUpdater) -> None:
        with self._lock:
            # superseded updaters may still wake up once
            if updater is not self._updater:
                return
            try:
                self.check_for_change()
            except (YAMLConfigError, OSError) as exc:
                log_error("config_reload_failed", resource=self._resource, path=None, error=str(exc))


class _AutoUpdater(threading.Thread):
    """Daemon thread that polls the owner every *interval_ms* milliseconds."""

    def __init__(self, owner: AutoConfig, interval_ms: int) -> None:
        super().__init__(name=f"ConfigUpdate_{int(time.time() * 1000)}", daemon=True)
        self._owner = owner
        self._interval = max(interval_ms, 1) / 1000.0
        self._stopped = threading.Event()
        log_info("auto_update_started", resource=owner._resource, path=None, interval_ms=interval_ms)

    def run(self) -> None:
        while not self._stopped.wait(self._interval):
            self._owner._poll(self)
        log_debug("auto_update_stopped", resource=self._owner._resource, path=None)

    def stop(self) -> None:
        self._stopped.set()
