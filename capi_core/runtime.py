"""Registry of middleware bindings and creation of proxies and stubs through them."""

from __future__ import annotations

import configparser
import logging
import os
import re
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Mapping, Optional

from capi_core.types import DEFAULT_SEND_TIMEOUT_MS, Timeout

DEFAULT_BINDING = "dbus"
DEFAULT_FOLDER = "/usr/local/lib/commonapi"
DEFAULT_CONFIG_FILE = "commonapi.ini"
DEFAULT_CONFIG_FOLDER = "/etc"

_log = logging.getLogger("capi_core")

_properties: dict[str, str] = {}

_LOG_LEVELS = {
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "verbose": logging.DEBUG,
}

LibraryLoader = Callable[["Runtime"], Any]


def get_property(name: str) -> str:
    """Return a runtime property, or the empty string if it is not set."""
    return _properties.get(name, "")


def set_property(name: str, value: str) -> None:
    """Set a runtime property."""
    _properties[name] = value


def normalize_library_name(library: str) -> str:
    """Append ``.so`` unless the name already ends in ``.so`` plus an optional version."""
    so_start = library.rfind(".so")
    if so_start == -1:
        return library + ".so"
    if so_start < len(library) - 3:
        suffix = library[so_start + 3:]
        if any(c != "." and c not in "0123456789" for c in suffix):
            return library + ".so"
    return library


class Factory(ABC):
    """A middleware binding that creates proxies and hosts stubs.

    ``connection`` is either a connection id (a string) or a main loop
    context object.
    """

    @abstractmethod
    def init(self) -> None:
        """Prepare the binding for use."""

    @abstractmethod
    def create_proxy(self, domain: str, interface: str, instance: str, connection: Any) -> Any:
        """Return a proxy for the address, or None if this binding cannot provide one."""

    @abstractmethod
    def register_stub(
        self, domain: str, interface: str, instance: str, stub: Any, connection: Any
    ) -> bool:
        """Offer ``stub`` at the address; return whether it was registered."""

    @abstractmethod
    def unregister_stub(self, domain: str, interface: str, instance: str) -> bool:
        """Withdraw the stub at the address; return whether one was removed."""


@dataclass(frozen=True)
class LoggingSettings:
    """Logging options read from the configuration."""

    console: bool = True
    file: str = ""
    dlt: bool = False
    level: str = "info"


class _IniFile:
    def __init__(self) -> None:
        self.sections: dict[str, dict[str, str]] = {}

    def load(self, path: str) -> bool:
        parser = configparser.ConfigParser(
            delimiters=("=",),
            comment_prefixes=("#", ";"),
            interpolation=None,
            strict=False,
            default_section="\0",
        )
        parser.optionxform = str  # type: ignore[assignment]
        try:
            with open(path, encoding="utf-8") as handle:
                parser.read_file(handle)
        except (OSError, configparser.Error, UnicodeDecodeError):
            return False
        self.sections = {
            name: {key: value.strip() for key, value in parser.items(name)}
            for name in parser.sections()
        }
        return True

    def section(self, name: str) -> Optional[dict[str, str]]:
        return self.sections.get(name)


def _parse_int(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    if not match:
        raise ValueError(f"invalid integer {text!r}")
    return int(match.group(1))


class Runtime:
    """Holds the registered bindings and dispatches proxy and stub requests to them.

    Libraries are provided through ``library_loaders``: a mapping from library
    name to a callable that receives the runtime and registers its factories.
    """

    _instance: ClassVar[Optional["Runtime"]] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, library_loaders: Optional[Mapping[str, LibraryLoader]] = None):
        self.default_binding: str = DEFAULT_BINDING
        self.default_folder: str = DEFAULT_FOLDER
        self.default_config: str = f"{DEFAULT_CONFIG_FOLDER}/{DEFAULT_CONFIG_FILE}"
        self.used_config: str = ""
        self.logging_settings = LoggingSettings()
        self.library_loaders: dict[str, LibraryLoader] = dict(library_loaders or {})
        self._default_call_timeout: Timeout = DEFAULT_SEND_TIMEOUT_MS
        self._libraries: dict[str, dict[bool, str]] = {}
        self._loaded_libraries: set[str] = set()
        self._default_factory: Optional[Factory] = None
        self._factories: dict[str, Factory] = {}
        self._is_configured = False
        self._is_initialized = False
        self._mutex = threading.Lock()
        self._factories_mutex = threading.RLock()
        self._load_mutex = threading.RLock()

    @classmethod
    def get(cls) -> "Runtime":
        """Return the process-wide runtime, creating and configuring it on first use."""
        with cls._instance_lock:
            if cls._instance is None:
                instance = cls()
                instance._configure()
                cls._instance = instance
            return cls._instance

    @property
    def default_factory(self) -> Optional[Factory]:
        return self._default_factory

    @property
    def factories(self) -> dict[str, Factory]:
        """The non-default factories by binding name."""
        with self._factories_mutex:
            return dict(self._factories)

    @property
    def libraries(self) -> dict[str, dict[bool, str]]:
        """Configured libraries per address; True keys proxies, False keys stubs."""
        return {address: dict(kinds) for address, kinds in self._libraries.items()}

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def default_call_timeout(self) -> Timeout:
        return self._default_call_timeout

    def _configure(self) -> None:
        with self._mutex:
            if self._is_configured:
                return
            self.default_config = os.environ.get(
                "COMMONAPI_CONFIG", f"{DEFAULT_CONFIG_FOLDER}/{DEFAULT_CONFIG_FILE}"
            )
            self.read_configuration()
            binding = os.environ.get("COMMONAPI_DEFAULT_BINDING")
            if binding is not None:
                self.default_binding = binding
            folder = os.environ.get("COMMONAPI_DEFAULT_FOLDER")
            if folder is not None:
                self.default_folder = folder
            self._is_configured = True

    def register_factory(self, binding: str, factory: Factory) -> bool:
        """Register ``factory`` for ``binding``; return whether it was accepted."""
        with self._factories_mutex:
            registered = False
            if binding == self.default_binding:
                self._default_factory = factory
                registered = True
            elif binding not in self._factories:
                self._factories[binding] = factory
                registered = True
            if registered and self._is_initialized:
                factory.init()
            return registered

    def unregister_factory(self, binding: str) -> bool:
        """Remove the factory registered for ``binding``."""
        with self._factories_mutex:
            if binding == self.default_binding:
                self._default_factory = None
            else:
                self._factories.pop(binding, None)
            return True

    def init_factories(self) -> None:
        """Initialise every registered factory, once."""
        with self._factories_mutex:
            if self._is_initialized:
                return
            _log.info("Loading configuration file '%s'", self.used_config)
            _log.info("Using default binding '%s'", self.default_binding)
            _log.info("Using default shared library folder '%s'", self.default_folder)
            if self._default_factory is not None:
                self._default_factory.init()
            for _, factory in sorted(self._factories.items()):
                factory.init()
            self._is_initialized = True

    def read_configuration(self) -> bool:
        """Read the configuration file; return False if it exists but cannot be read."""
        try_load = True
        self.used_config = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
        if not os.path.exists(self.used_config):
            self.used_config = self.default_config
            if not os.path.exists(self.used_config):
                try_load = False

        reader = _IniFile()
        if try_load and not reader.load(self.used_config):
            return False

        console, file, dlt, level = "true", "", "false", "info"
        section = reader.section("logging")
        if section is not None:
            console = section.get("console", "")
            file = section.get("file", "")
            dlt = section.get("dlt", "")
            level = section.get("level", "")
        self.logging_settings = LoggingSettings(
            console=console == "true", file=file, dlt=dlt == "true", level=level
        )
        if level in _LOG_LEVELS:
            _log.setLevel(_LOG_LEVELS[level])

        section = reader.section("default")
        if section is not None:
            binding = section.get("binding", "")
            if binding:
                self.default_binding = binding
            folder = section.get("folder", "")
            if folder:
                self.default_folder = folder
            call_timeout = section.get("callTimeout", "")
            if call_timeout:
                self._default_call_timeout = _parse_int(call_timeout)

        for name, is_proxy in (("proxy", True), ("stub", False)):
            section = reader.section(name)
            if section is None:
                continue
            for address, library in sorted(section.items()):
                _log.debug("Adding %s mapping: %s --> %s", name, address, library)
                self._libraries.setdefault(address, {})[is_proxy] = library
        return True

    def create_proxy(self, domain: str, interface: str, instance: str, connection: Any = "") -> Any:
        """Create a proxy for the address, loading its library if needed; None if impossible."""
        if not self._is_initialized:
            self.init_factories()
        proxy = self._create_proxy_helper(domain, interface, instance, connection, False)
        if proxy is None:
            with self._load_mutex:
                library = self.library_for(domain, interface, instance, True)
                if self.load_library(library) or self._default_factory is not None:
                    proxy = self._create_proxy_helper(domain, interface, instance, connection, True)
        return proxy

    def register_stub(
        self, domain: str, interface: str, instance: str, stub: Any, connection: Any = ""
    ) -> bool:
        """Register ``stub`` at the address, loading its library if needed."""
        if stub is None:
            return False
        if not self._is_initialized:
            self.init_factories()
        registered = self._register_stub_helper(domain, interface, instance, stub, connection, False)
        if not registered:
            library = self.library_for(domain, interface, instance, False)
            with self._load_mutex:
                if self.load_library(library) or self._default_factory is not None:
                    registered = self._register_stub_helper(
                        domain, interface, instance, stub, connection, True
                    )
        return registered

    def unregister_stub(self, domain: str, interface: str, instance: str) -> bool:
        """Withdraw the stub at the address from the first binding that has it."""
        for _, factory in sorted(self.factories.items()):
            if factory.unregister_stub(domain, interface, instance):
                return True
        default = self._default_factory
        return default.unregister_stub(domain, interface, instance) if default else False

    def library_for(self, domain: str, interface: str, instance: str, is_proxy: bool) -> str:
        """Name of the library that provides a proxy or stub for the address."""
        address = f"{domain}:{interface}:{instance}"
        _log.debug("Loading library for %s%s", address, " proxy." if is_proxy else " stub.")
        configured = self._libraries.get(address, {}).get(is_proxy)
        if configured is not None:
            return configured
        base = get_property("LibraryBase")
        if base:
            return f"lib{base}-{self.default_binding}"
        return f"lib{domain}__{interface}__{instance}".replace(".", "_")

    def load_library(self, library: str) -> bool:
        """Load ``library`` once through its registered loader; return whether it is loaded."""
        name = normalize_library_name(library)
        if name in self._loaded_libraries:
            return True
        loader = next(
            (
                candidate
                for key, candidate in self.library_loaders.items()
                if normalize_library_name(key) == name
            ),
            None,
        )
        if loader is None:
            _log.debug('Loading interface library "%s" failed (not available)', name)
            return False
        try:
            loader(self)
        except Exception as error:  # a failing loader means the library is not loaded
            _log.debug('Loading interface library "%s" failed (%s)', name, error)
            return False
        self._loaded_libraries.add(name)
        _log.debug('Loading interface library "%s" succeeded.', name)
        return True

    def _create_proxy_helper(
        self, domain: str, interface: str, instance: str, connection: Any, use_default: bool
    ) -> Any:
        with self._factories_mutex:
            for _, factory in sorted(self._factories.items()):
                proxy = factory.create_proxy(domain, interface, instance, connection)
                if proxy is not None:
                    return proxy
            if use_default and self._default_factory is not None:
                return self._default_factory.create_proxy(domain, interface, instance, connection)
            return None

    def _register_stub_helper(
        self, domain: str, interface: str, instance: str, stub: Any, connection: Any,
        use_default: bool,
    ) -> bool:
        with self._factories_mutex:
            for _, factory in sorted(self._factories.items()):
                if factory.register_stub(domain, interface, instance, stub, connection):
                    return True
            if use_default and self._default_factory is not None:
                return bool(
                    self._default_factory.register_stub(domain, interface, instance, stub, connection)
                )
            return False


class ProxyManager:
    """Creates proxies through a runtime, the process-wide one by default."""

    def __init__(self, runtime: Optional[Runtime] = None):
        self._runtime = runtime

    def create_proxy(self, domain: str, interface: str, instance: str, connection: Any = "") -> Any:
        """Create a proxy for the address through the runtime."""
        runtime = self._runtime if self._runtime is not None else Runtime.get()
        return runtime.create_proxy(domain, interface, instance, connection)