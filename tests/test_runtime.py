import pytest

from capi_core.runtime import (
    DEFAULT_BINDING,
    Factory,
    ProxyManager,
    Runtime,
    get_property,
    normalize_library_name,
    set_property,
)
from capi_core.types import DEFAULT_SEND_TIMEOUT_MS


class FakeFactory(Factory):
    def __init__(self, proxies=None, stubs=True, unregisters=False):
        self.proxies = proxies or {}
        self.accept_stubs = stubs
        self.unregisters = unregisters
        self.init_calls = 0
        self.stubs = []
        self.proxy_requests = []

    def init(self):
        self.init_calls += 1

    def create_proxy(self, domain, interface, instance, connection):
        self.proxy_requests.append((domain, interface, instance, connection))
        return self.proxies.get((domain, interface, instance))

    def register_stub(self, domain, interface, instance, stub, connection):
        if self.accept_stubs:
            self.stubs.append((domain, interface, instance, stub))
        return self.accept_stubs

    def unregister_stub(self, domain, interface, instance):
        return self.unregisters


ADDR = ("local", "commonapi.examples.HelloWorld", "test")


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_property_defaults_to_empty_and_can_be_set():
    assert get_property("NoSuchProperty") == ""
    set_property("SomeProperty", "value")
    assert get_property("SomeProperty") == "value"


@pytest.mark.parametrize("name", ["libfoo.so", "libfoo.so.1", "libfoo.so.1.2.3"])
def test_normalize_keeps_versioned_names(name):
    assert normalize_library_name(name) == name


@pytest.mark.parametrize("name", ["libfoo", "libfoo.so.1a", "libfoo.sox"])
def test_normalize_appends_suffix(name):
    assert normalize_library_name(name) == name + ".so"


def test_library_for_builds_default_name():
    rt = Runtime()
    assert rt.library_for(*ADDR, True) == "liblocal__commonapi_examples_HelloWorld__test"


def test_library_for_uses_library_base():
    rt = Runtime()
    set_property("LibraryBase", "Hello")
    try:
        assert rt.library_for(*ADDR, True) == "libHello-" + DEFAULT_BINDING
    finally:
        set_property("LibraryBase", "")


def test_register_factory_default_and_duplicates():
    rt = Runtime()
    default = FakeFactory()
    other = FakeFactory()
    assert rt.register_factory(DEFAULT_BINDING, default)
    assert rt.default_factory is default
    assert rt.register_factory("someip", other)
    assert not rt.register_factory("someip", FakeFactory())
    assert rt.factories == {"someip": other}
    assert rt.unregister_factory("someip")
    assert rt.factories == {}


def test_init_factories_initialises_once_and_late_registrations():
    rt = Runtime()
    first = FakeFactory()
    rt.register_factory("a", first)
    rt.init_factories()
    rt.init_factories()
    assert first.init_calls == 1
    late = FakeFactory()
    rt.register_factory("b", late)
    assert late.init_calls == 1


def test_create_proxy_from_named_factory():
    rt = Runtime()
    proxy = object()
    rt.register_factory("someip", FakeFactory(proxies={ADDR: proxy}))
    assert rt.create_proxy(*ADDR, "conn") is proxy
    assert rt.is_initialized


def test_create_proxy_falls_back_to_default_factory():
    rt = Runtime()
    proxy = object()
    named = FakeFactory()
    rt.register_factory("someip", named)
    rt.register_factory(DEFAULT_BINDING, FakeFactory(proxies={ADDR: proxy}))
    assert rt.create_proxy(*ADDR) is proxy
    assert len(named.proxy_requests) == 2


def test_create_proxy_none_without_factories():
    rt = Runtime()
    assert rt.create_proxy(*ADDR) is None


def test_create_proxy_loads_library():
    proxy = object()
    loaded = []

    def loader(runtime):
        loaded.append(runtime)
        runtime.register_factory("plugin", FakeFactory(proxies={ADDR: proxy}))

    rt = Runtime(library_loaders={"liblocal__commonapi_examples_HelloWorld__test": loader})
    assert rt.create_proxy(*ADDR) is proxy
    assert loaded == [rt]
    assert rt.load_library("liblocal__commonapi_examples_HelloWorld__test.so")
    assert len(loaded) == 1


def test_load_library_failure():
    def broken(runtime):
        raise RuntimeError("boom")

    rt = Runtime(library_loaders={"libbroken": broken})
    assert not rt.load_library("libbroken")
    assert not rt.load_library("libmissing")


def test_register_stub():
    rt = Runtime()
    assert not rt.register_stub(*ADDR, None)
    assert not rt.register_stub(*ADDR, object())
    factory = FakeFactory()
    rt.register_factory(DEFAULT_BINDING, factory)
    stub = object()
    assert rt.register_stub(*ADDR, stub)
    assert factory.stubs == [ADDR + (stub,)]


def test_unregister_stub():
    rt = Runtime()
    assert not rt.unregister_stub(*ADDR)
    rt.register_factory("x", FakeFactory(unregisters=False))
    rt.register_factory(DEFAULT_BINDING, FakeFactory(unregisters=True))
    assert rt.unregister_stub(*ADDR)


def test_read_configuration_without_file(isolated):
    rt = Runtime()
    rt.default_config = str(isolated / "missing.ini")
    assert rt.read_configuration()
    assert rt.default_binding == DEFAULT_BINDING
    assert rt.default_call_timeout == DEFAULT_SEND_TIMEOUT_MS
    assert rt.logging_settings.console is True


def test_read_configuration_from_working_directory(isolated):
    (isolated / "commonapi.ini").write_text(
        "[logging]\n"
        "console=false\n"
        "level=debug\n"
        "[default]\n"
        "binding=someip\n"
        "folder=/opt/libs\n"
        "callTimeout=1234\n"
        "[proxy]\n"
        "local:commonapi.examples.HelloWorld:test=libHelloProxy.so\n"
        "[stub]\n"
        "local:commonapi.examples.HelloWorld:test=libHelloStub.so\n"
    )
    rt = Runtime()
    assert rt.read_configuration()
    assert rt.default_binding == "someip"
    assert rt.default_folder == "/opt/libs"
    assert rt.default_call_timeout == 1234
    assert rt.logging_settings.console is False
    assert rt.logging_settings.level == "debug"
    assert rt.library_for(*ADDR, True) == "libHelloProxy.so"
    assert rt.library_for(*ADDR, False) == "libHelloStub.so"


def test_read_configuration_from_default_config(isolated):
    config = isolated / "sub" / "other.ini"
    config.parent.mkdir()
    config.write_text("[default]\nbinding=someip\n")
    rt = Runtime()
    rt.default_config = str(config)
    assert rt.read_configuration()
    assert rt.used_config == str(config)
    assert rt.default_binding == "someip"


def test_read_configuration_unreadable(isolated):
    (isolated / "commonapi.ini").write_text("no section header here\n")
    rt = Runtime()
    assert not rt.read_configuration()


def test_runtime_get_is_singleton():
    runtime = Runtime.get()
    factory = FakeFactory()
    assert runtime.register_factory("singleton-check", factory)
    try:
        assert Runtime.get().factories["singleton-check"] is factory
    finally:
        runtime.unregister_factory("singleton-check")
    assert "singleton-check" not in Runtime.get().factories


def test_proxy_manager_uses_runtime():
    rt = Runtime()
    proxy = object()
    rt.register_factory("x", FakeFactory(proxies={ADDR: proxy}))
    manager = ProxyManager(rt)
    assert manager.create_proxy(*ADDR, "conn") is proxy