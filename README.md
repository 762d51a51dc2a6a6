# capi_core

Building blocks for middleware in which clients reach remote services
through proxies and services are offered through stubs. The package has no
third-party dependencies.

- `capi_core.types`: `CallStatus`, `AvailabilityStatus`, the abstract
  `ClientId`, `enum_hash`, and `DEFAULT_SEND_TIMEOUT_MS` (5000).
- `capi_core.utils`: `split(s, delim)` and `trim(s)`.
- `capi_core.ranged`: `RangedInteger` and `ranged_integer_type(minimum, maximum)`.
- `capi_core.enumeration`: `Enumeration`, the abstract base for enumeration types.
- `capi_core.deployable`: `Deployable`, a value paired with its deployment.
- `capi_core.variant`: `Variant`, a tagged union over a fixed list of types.
- `capi_core.streams`: the `InputStream` and `OutputStream` base classes.
- `capi_core.serializable`: `serialize`, `deserialize` and `SerializationError`.
- `capi_core.attribute`: the attribute interfaces, `is_observable` and
  `AttributeCacheExtension`.
- `capi_core.runtime`: `Runtime`, `Factory`, `ProxyManager`, `get_property`,
  `set_property` and `normalize_library_name`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Value types

A `RangedInteger` accepts any integer. Its `validate()` method reports
whether the value lies within the bounds. `ranged_integer_type(0, 10)`
returns the subclass for those bounds, and calling it with the same bounds
again returns the same class. If you build one with no value, it starts at
`minimum`. Ranged integers compare with each other and with plain ints.

`Enumeration` holds an underlying value. Subclasses implement `validate()`.
Enumerations compare with each other and with ints.

### Variants

Give a `Variant` its types, then create an instance:

```python
from capi_core.variant import Variant

IntOrStr = Variant[int, str]

v = IntOrStr("hello")
v.is_type(str)      # True
v.get(str)          # "hello"
v.get(int)          # raises TypeError
v.set(42)
v.value_type        # 2: indices count from the end of the type list
v.type_index(str)   # 1

IntOrStr().value    # 0, a default value of the first type
```

## Streams and argument serialization

A concrete stream writes hooks for the kinds of value its format supports.

On the output side, a stream defines hooks such as `_write_bool`,
`_write_int`, `_write_float`, `_write_str`, `_write_list`, `_write_dict`,
`_write_variant` and `_write_object`. Each hook takes `(value, deployment)`.

On the input side, the matching `_read_*` hooks take `(type_, deployment)`
and return the value they read.

Enumerations and ranged integers go through the integer hooks by default.
If a needed hook is missing, the stream raises `TypeError`.

```python
from capi_core.deployable import Deployable
from capi_core.serializable import serialize
from capi_core.streams import OutputStream

class ListOutput(OutputStream):
    def __init__(self):
        self.items = []

    def _write_int(self, value, deployment):
        self.items.append((value, deployment))

    def _write_str(self, value, deployment):
        self.items.append((value, deployment))

out = ListOutput()
serialize(out, 1, "a", Deployable(2, "wide"))
# out.items == [(1, None), ("a", None), (2, "wide")]
```

`serialize` stops at the first argument after which the stream's
`has_error` is set, and raises `SerializationError`. The error's `index`
attribute gives the argument's position.

`deserialize(input, *targets)` reads one value per target and returns them
as a tuple. A target is either a type or a `Deployable`. When it is a
`Deployable`, the value read is also stored in it.

## Attributes

`ReadonlyAttribute`, `Attribute`, `ObservableReadonlyAttribute` and
`ObservableAttribute` are abstract interfaces.

`AttributeCacheExtension` wraps an attribute. If the attribute is
observable, the extension subscribes to its `changed_event`. From then on,
`cached_value(default)` returns the last value announced, or `default` if
none has arrived yet. If the attribute is not observable, `cached_value`
raises `TypeError`.

## Runtime

`Runtime.get()` returns the process-wide runtime, configuring it on first
use. It reads its configuration file from one of these places, in order:

1. `commonapi.ini` in the current directory.
2. The file named by the `COMMONAPI_CONFIG` environment variable.
3. `/etc/commonapi.ini`.

The file may have these sections:

- `[logging]`: `console`, `file`, `dlt`, `level`.
- `[default]`: `binding`, `folder`, `callTimeout`.
- `[proxy]` and `[stub]`: map `domain:interface:instance` addresses to
  library names.

After the file is read, the environment variables
`COMMONAPI_DEFAULT_BINDING` and `COMMONAPI_DEFAULT_FOLDER` override the
binding and folder. The built-in defaults are `dbus` and
`/usr/local/lib/commonapi`.

A binding supplies a `Factory`:

```python
from capi_core.runtime import Factory, Runtime

class MyFactory(Factory):
    def init(self):
        pass

    def create_proxy(self, domain, interface, instance, connection):
        return (domain, interface, instance)

    def register_stub(self, domain, interface, instance, stub, connection):
        return True

    def unregister_stub(self, domain, interface, instance):
        return True

runtime = Runtime()
runtime.register_factory("mybinding", MyFactory())
proxy = runtime.create_proxy("local", "example.Echo", "echo", "client")
```

The factory registered under the default binding becomes the default
factory. The runtime asks the other factories first, in order of binding
name, and falls back to the default factory.

`library_for(domain, interface, instance, is_proxy)` names the library for
an address. It checks these sources, in order:

1. The `[proxy]` or `[stub]` mapping.
2. `lib<LibraryBase>-<binding>`, when the `LibraryBase` property is set
   (see `set_property`).
3. `lib<domain>__<interface>__<instance>`, with dots replaced by
   underscores.

`ProxyManager` creates proxies through a given runtime, or through
`Runtime.get()` if no runtime is given.

## What the package does not do

- It contains no binding and no wire format. Proxies, stubs, factories and
  concrete streams come from the code that uses it.
- `load_library` never opens shared libraries. A library counts as loaded
  once its callable in `Runtime(library_loaders=...)` has run. That callable
  receives the runtime and registers the library's factories. Library names
  are compared after `normalize_library_name`.
- The `[logging]` settings are stored in `Runtime.logging_settings`, and
  `level` sets the level of the `capi_core` logger. No console, file or
  other log output is set up.
- There is no command-line program.