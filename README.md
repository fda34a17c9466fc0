# trojango

The core of a proxy program. It reads a JSON or YAML configuration, looks up
the proxy creator registered for the configured run type and lets the
resulting proxy relay connections and packets from inbound tunnels to an
outbound tunnel. Around that core it provides:

- `trojango.config`: a registry of per-module settings, all filled from one
  JSON or YAML document and carried in a cancellable `Context`;
- `trojango.log`: a levelled logging front end with pluggable backends, the
  coloured, timestamped `trojango.golog.Logger` and the plain
  `trojango.simplelog.SimpleLogger`;
- `trojango.geodata`: extraction of a single entry from geoip/geosite `.dat`
  files without parsing the whole file;
- `trojango.redirector`: a background relay that forwards inbound connections
  to a fallback address;
- small utilities: `RewindReader`, `RewindConn` and `StickyWriter`
  (`trojango.rewind`), a coalescing `Notifier` (`trojango.notifier`), and
  SHA-224 password hashing, traffic formatting, free-port picking and HTTP
  fetching (`trojango.netutil`).

## What it does not do

No tunnel protocols and no proxy creators come with this package: there is
no TLS, WebSocket, SOCKS, HTTP, mux or trojan tunnel, and no `client`,
`server`, `forward` or `nat` run type is registered. Until a creator is
registered with `trojango.proxy.register_proxy_creator`, every configuration
ends with the error `unknown proxy type: <run_type>`, so the `trojango`
command on its own parses options and configuration but relays no traffic.
There is likewise no API server and no user or traffic accounting;
`trojango.api.run_service` only runs handlers that have been registered with
`trojango.api.register_handler`.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## The command

`trojango` builds three option handlers and tries them from the highest
priority down, stopping at the first that applies. Options may be written
with one dash or two (`-config` or `--config`).

1. Easy mode (`--client` or `--server`). A configuration is generated from
   the command line instead of being read from a file:

   ```
   trojango --client --password password --local 127.0.0.1:1080 --remote example.com:443
   trojango --server --password password --local 0.0.0.0:443 --remote 127.0.0.1:80 --cert server.crt --key server.key
   ```

   A client without `--local` uses `127.0.0.1:1080`; a server without
   `--local` uses `0.0.0.0:443` and without `--remote` uses `127.0.0.1:80`.
   `--cert` and `--key` default to `server.crt` and `server.key`. An empty
   password is refused. The same configurations can be built in code with
   `trojango.easy.generate_client_config` and `generate_server_config`.

2. Standard input (`--stdin-format json` or `--stdin-format yaml`). A short
   banner is printed before reading unless `--stdin-suppress-hint` is given.

3. A configuration file:

   ```
   trojango --config config.yaml
   ```

   Only names ending in `.json`, `.yaml` or `.yml` are accepted. Without
   `--config`, `config.json`, `config.yml` and `config.yaml` in the working
   directory are tried in that order.

Handlers can also be driven directly: `trojango.option.register_handler`
takes any `OptionHandler` (with `name()`, `handle()` and `priority()`), and
`pop_option_handler()` removes and returns the one with the highest priority.

## Configuration

Each module registers a factory for its settings with
`register_config_creator(name, creator)`; `with_json_config` and
`with_yaml_config` fill every registered settings object from the same
document and attach them to a `Context`, from which `from_context(ctx, name)`
reads them back. Dataclass fields declared with `setting(json_key, yaml_key,
...)` are read from different keys in the two formats; a value of the wrong
type raises `TrojanError`.

Importing `trojango.proxy` registers the proxy's own settings, `ProxyConfig`:

| JSON key    | YAML key    | Meaning                                                    |
|-------------|-------------|------------------------------------------------------------|
| `run_type`  | `run-type`  | which registered proxy creator to use (case-insensitive)   |
| `log_level` | `log-level` | 0 all, 1 info (default), 2 warn, 3 error, 4 fatal, 5 off   |
| `log_file`  | `log-file`  | append log output to this file                             |

```python
from dataclasses import dataclass

from trojango.config import Context, from_context, register_config_creator, setting, with_yaml_config
from trojango.proxy import NAME

@dataclass
class MuxSettings:
    enabled: bool = setting("mux_enabled", "mux-enabled", default=False)

register_config_creator("MUX", MuxSettings)

ctx = with_yaml_config(Context(), b"run-type: client\nlog-level: 2\nmux-enabled: true\n")
assert from_context(ctx, NAME).run_type == "client"
assert from_context(ctx, "MUX").enabled is True
```

`trojango.proxy.new_proxy_from_config_data(data, is_json)` does the same
parsing, applies the log level and log file, and calls the creator registered
for the run type with the context. A creator typically returns
`Proxy(ctx.with_cancel(), sources, sink)`, where sources provide
`accept_conn()`, `accept_packet()` and `close()` and the sink provides
`dial_conn(address)`, `dial_packet()` and `close()`. `Proxy.run()` blocks
until `Proxy.close()` cancels it.

## Logging

The module-level functions in `trojango.log` (`info`, `warnf`, `error`, ...)
forward to the backend set with `register_logger`. The default backend,
`EmptyLogger`, drops every message, though `fatal` still ends the process.
The `trojango` command installs `trojango.golog.Logger` on standard output;
it colours its level tags on a terminal and adds the caller's function, file
and line to fatal, error and debug messages.

## Geodata

```python
from trojango.geodata import CodeNotFoundError, decode
from trojango.netutil import get_asset_location

try:
    entry = decode(get_asset_location("geoip.dat"), "private")
except CodeNotFoundError:
    entry = None
```

`decode` returns the raw bytes of the matching GeoIP or GeoSite entry; the
code is matched case-insensitively. A malformed file raises `GeodataError`.
`get_asset_location` returns absolute paths unchanged and resolves relative
ones under `$TROJAN_GO_LOCATION_ASSET`, or else the program's directory.

## Redirecting connections

```python
from trojango.config import Context
from trojango.redirector import Redirection, Redirector

ctx = Context().with_cancel()
redirector = Redirector(ctx)
redirector.redirect(Redirection(redirect_to=("127.0.0.1", 80), inbound_conn=sock))
```

Each redirection is relayed in both directions on a background thread until
one side closes or `ctx.cancel()` is called. Without a `dial` function the
target is reached with `socket.create_connection`.