"""Configuration parsing into registered config objects, carried in a Context."""

from __future__ import annotations

import dataclasses
import inspect
import json
import threading
import types
import typing
from typing import Any, Callable, Union

import yaml

from trojango.errors import TrojanError

_NO_KEY = object()


class _CancelScope:
    def __init__(self, parent: "_CancelScope | None" = None) -> None:
        self.event = threading.Event()
        self._children: list[_CancelScope] = []
        self._lock = threading.Lock()
        if parent is not None:
            parent._adopt(self)

    def _adopt(self, child: "_CancelScope") -> None:
        with self._lock:
            if not self.event.is_set():
                self._children.append(child)
                return
        child.cancel()

    def cancel(self) -> None:
        with self._lock:
            if self.event.is_set():
                return
            self.event.set()
            children, self._children = self._children, []
        for child in children:
            child.cancel()


class Context:
    """An immutable chain of key/value pairs with cooperative cancellation."""

    def __init__(self) -> None:
        self._parent: Context | None = None
        self._key: Any = _NO_KEY
        self._val: Any = None
        self._scope = _CancelScope()

    def _child(self, key: Any = _NO_KEY, value: Any = None,
               scope: _CancelScope | None = None) -> "Context":
        child = Context.__new__(Context)
        child._parent = self
        child._key = key
        child._val = value
        child._scope = scope if scope is not None else self._scope
        return child

    def with_value(self, key: Any, value: Any) -> "Context":
        """Return a child context in which ``key`` maps to ``value``."""
        return self._child(key, value)

    def value(self, key: Any) -> Any:
        """Look ``key`` up along the chain; None if absent."""
        ctx: Context | None = self
        while ctx is not None:
            if ctx._key is not _NO_KEY and ctx._key == key:
                return ctx._val
            ctx = ctx._parent
        return None

    def with_cancel(self) -> "Context":
        """Return a child that is cancelled by its own cancel() or by this context's."""
        return self._child(scope=_CancelScope(self._scope))

    def cancel(self) -> None:
        self._scope.cancel()

    def done(self) -> bool:
        return self._scope.event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled; False if ``timeout`` elapsed first."""
        return self._scope.event.wait(timeout)


Creator = Callable[[], Any]

_creators: dict[str, Creator] = {}


def setting(json_key: str, yaml_key: str, **kwargs: Any) -> Any:
    """A dataclass field read from ``json_key`` in JSON and ``yaml_key`` in YAML."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata.update(json=json_key, yaml=yaml_key)
    return dataclasses.field(metadata=metadata, **kwargs)


def register_config_creator(name: str, creator: Creator) -> None:
    """Register a factory for the default config object of a module."""
    _creators[name + "_CONFIG"] = creator


_NAMED_TYPES: dict[str, Any] = {
    "str": str,
    "int": int,
    "bool": bool,
    "float": float,
    "bytes": bytes,
    "object": object,
    "list": list,
    "dict": dict,
    "Any": Any,
    "None": type(None),
}

_MISSING = object()


def _split_top(text: str, sep: str) -> list[str]:
    parts = []
    depth = 0
    start = 0
    for pos, ch in enumerate(text):
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(text[start:pos].strip())
            start = pos + 1
    parts.append(text[start:].strip())
    return parts


def _lookup(name: str, owner: type) -> Any:
    head, *rest = name.split(".")
    module = inspect.getmodule(owner)
    found = getattr(module, head, _MISSING) if module is not None else _MISSING
    if found is _MISSING:
        found = _NAMED_TYPES.get(head, _MISSING)
    if found is _MISSING:
        return Any
    for part in rest:
        found = getattr(found, part, _MISSING)
        if found is _MISSING:
            return Any
    return found


def _parse_annotation(text: str, owner: type) -> Any:
    text = text.strip().strip("'\"")
    alternatives = _split_top(text, "|")
    if len(alternatives) > 1:
        return Union[tuple(_parse_annotation(a, owner) for a in alternatives)]
    if text.endswith("]") and "[" in text:
        head, inner = text[:-1].split("[", 1)
        head = head.strip().rsplit(".", 1)[-1]
        args = [_parse_annotation(a, owner) for a in _split_top(inner, ",")]
        if head == "Optional":
            return Union[args[0], None]
        if head == "Union":
            return Union[tuple(args)]
        if head in ("list", "List"):
            return list[args[0]]
        if head in ("dict", "Dict") and len(args) == 2:
            return dict[args[0], args[1]]
        return _lookup(head, owner)
    return _lookup(text, owner)


def _field_type(f: dataclasses.Field, owner: type) -> Any:
    if isinstance(f.type, str):
        return _parse_annotation(f.type, owner)
    return f.type


def _mismatch(key: str, expected: str, raw: Any) -> TrojanError:
    return TrojanError(f"cannot decode {key!r}: expected {expected}, got {type(raw).__name__}")


def _decode(raw: Any, tp: Any, current: Any, fmt: str, key: str) -> Any:
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        if not isinstance(raw, dict):
            raise _mismatch(key, "a mapping", raw)
        target = current if isinstance(current, tp) else tp()
        _fill(target, raw, fmt)
        return target

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is Union or origin is types.UnionType:
        options = [a for a in args if a is not type(None)]
        if len(options) == 1:
            return _decode(raw, options[0], current, fmt, key)
        return raw
    if origin is list:
        if not isinstance(raw, list):
            raise _mismatch(key, "a list", raw)
        item = args[0] if args else Any
        return [_decode(v, item, None, fmt, key) for v in raw]
    if origin is dict:
        if not isinstance(raw, dict):
            raise _mismatch(key, "a mapping", raw)
        value_type = args[1] if len(args) == 2 else Any
        return {k: _decode(v, value_type, None, fmt, key) for k, v in raw.items()}

    if tp is bool:
        if not isinstance(raw, bool):
            raise _mismatch(key, "a boolean", raw)
        return raw
    if tp is int:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise _mismatch(key, "an integer", raw)
        return raw
    if tp is float:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise _mismatch(key, "a number", raw)
        return float(raw)
    if tp is str:
        if isinstance(raw, str):
            return raw
        if fmt == "yaml":
            if isinstance(raw, bool):
                return "true" if raw else "false"
            if isinstance(raw, (int, float)):
                return str(raw)
        raise _mismatch(key, "a string", raw)
    return raw


def _fill(instance: Any, mapping: dict, fmt: str) -> None:
    owner = type(instance)
    for f in dataclasses.fields(instance):
        key = f.metadata.get(fmt, f.name)
        if key not in mapping:
            continue
        raw = mapping[key]
        if raw is None:
            continue
        current = getattr(instance, f.name)
        setattr(instance, f.name, _decode(raw, _field_type(f, owner), current, fmt, key))


def _apply(cfg: Any, doc: Any, fmt: str) -> None:
    if doc is None:
        return
    if not isinstance(doc, dict):
        raise TrojanError(f"invalid {fmt} config: top level must be a mapping")
    if dataclasses.is_dataclass(cfg) and not isinstance(cfg, type):
        _fill(cfg, doc, fmt)
    elif isinstance(cfg, dict):
        cfg.update(doc)


def _parse(doc: Any, fmt: str) -> dict[str, Any]:
    result = {}
    for name, creator in _creators.items():
        cfg = creator()
        _apply(cfg, doc, fmt)
        result[name] = cfg
    return result


def _text(data: bytes | str) -> str:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8")
    return data


def with_json_config(ctx: Context, data: bytes | str) -> Context:
    """Parse JSON into every registered config and attach them to ``ctx``."""
    try:
        doc = json.loads(_text(data))
    except ValueError as exc:
        raise TrojanError("invalid json config").base(exc) from exc
    for name, cfg in _parse(doc, "json").items():
        ctx = ctx.with_value(name, cfg)
    return ctx


def with_yaml_config(ctx: Context, data: bytes | str) -> Context:
    """Parse YAML into every registered config and attach them to ``ctx``."""
    try:
        doc = yaml.safe_load(_text(data))
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        raise TrojanError("invalid yaml config").base(exc) from exc
    for name, cfg in _parse(doc, "yaml").items():
        ctx = ctx.with_value(name, cfg)
    return ctx


def with_config(ctx: Context, name: str, cfg: Any) -> Context:
    """Attach ``cfg`` to ``ctx`` as the config of module ``name``."""
    return ctx.with_value(name + "_CONFIG", cfg)


def from_context(ctx: Context, name: str) -> Any:
    """The config of module ``name`` carried by ``ctx``, or None."""
    return ctx.value(name + "_CONFIG")