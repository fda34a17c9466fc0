from __future__ import annotations

import dataclasses
import threading
import time

import pytest

from trojango import config
from trojango.config import (
    Context,
    from_context,
    register_config_creator,
    setting,
    with_config,
    with_json_config,
    with_yaml_config,
)
from trojango.errors import TrojanError


@dataclasses.dataclass
class Foo:
    field1: str = setting("field1", "field1", default="")
    field2: bool = setting("field2", "field2", default=False)


@dataclasses.dataclass
class TestStruct:
    field1: str = setting("field1", "field1", default="")
    field2: bool = setting("field2", "field2", default=False)
    field3: list[Foo] = setting("field3", "field3", default_factory=list)


@pytest.fixture
def registered():
    register_config_creator("test", TestStruct)
    yield
    config._creators.pop("test_CONFIG", None)


def test_json_config(registered):
    data = b"""
    {
        "field1": "test1",
        "field2": true,
        "field3": [
            {
                "field1": "aaaa",
                "field2": true
            }
        ]
    }
    """
    ctx = with_json_config(Context(), data)
    c = from_context(ctx, "test")
    assert c.field1 == "test1"
    assert c.field2 is True
    assert c.field3[0].field1 == "aaaa"


def test_yaml_config(registered):
    data = b"""
field1: 012345678
field2: true
field3:
  - field1: test
    field2: true
"""
    ctx = with_yaml_config(Context(), data)
    c = from_context(ctx, "test")
    assert c.field1 == "012345678"
    assert c.field2 is True
    assert c.field3[0].field1 == "test"


def test_missing_keys_keep_defaults(registered):
    ctx = with_json_config(Context(), '{"field2": true}')
    c = from_context(ctx, "test")
    assert c.field1 == ""
    assert c.field3 == []


def test_invalid_json_raises(registered):
    with pytest.raises(TrojanError):
        with_json_config(Context(), b"{not json")


def test_json_type_mismatch_raises(registered):
    with pytest.raises(TrojanError):
        with_json_config(Context(), '{"field2": "yes"}')


def test_with_config_and_from_context():
    cfg = TestStruct(field1="x")
    ctx = with_config(Context(), "manual", cfg)
    assert from_context(ctx, "manual") is cfg
    assert from_context(ctx, "other") is None


def test_context_values_shadow_and_chain():
    root = Context()
    a = root.with_value("k", 1)
    b = a.with_value("k", 2).with_value("j", 3)
    assert a.value("k") == 1
    assert b.value("k") == 2
    assert b.value("j") == 3
    assert root.value("k") is None


def test_cancel_propagates_down_not_up():
    parent = Context().with_cancel()
    child = parent.with_value("x", 1).with_cancel()
    child.cancel()
    assert child.done() is True
    assert parent.done() is False
    other = parent.with_cancel()
    parent.cancel()
    assert other.done() is True
    assert parent.with_cancel().done() is True


def test_wait_wakes_on_cancel():
    ctx = Context().with_cancel()
    assert ctx.wait(timeout=0.01) is False

    def cancel_later():
        time.sleep(0.05)
        ctx.cancel()

    t = threading.Thread(target=cancel_later)
    t.start()
    assert ctx.wait(timeout=5) is True
    t.join()