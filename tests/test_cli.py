"""
Tests for the shopcore CLI.
"""

import json

import pytest

from shopcore.cli import main
from shopcore.events import EventKind


def test_catalog_lists_every_kind(capsys):
    assert main(["catalog"]) == 0

    out = capsys.readouterr().out
    for kind in EventKind:
        assert kind.value in out
    assert "ProductLowStock(product_id: str, stock: int)" in out


def test_catalog_json_for_domain(capsys):
    assert main(["catalog", "--domain", "discount", "--json"]) == 0

    entries = json.loads(capsys.readouterr().out)
    assert [e["kind"] for e in entries] == [
        "discount.created",
        "discount.updated",
        "discount.deleted",
        "discount.applied",
    ]
    created = entries[0]
    assert created["payload"] == "DiscountCreated"
    assert {f["name"]: f["required"] for f in created["fields"]} == {
        "discount_id": True,
        "code": True,
        "user_id": False,
    }


def test_catalog_unknown_domain():
    with pytest.raises(SystemExit, match="Unknown domain"):
        main(["catalog", "--domain", "shipping"])


def test_describe(capsys):
    assert main(["describe", "order.created"]) == 0
    out = capsys.readouterr().out
    assert "order.created" in out
    assert "customer_id?: str | None" in out


def test_describe_unknown_kind(capsys):
    assert main(["describe", "order.refunded"]) == 2
    captured = capsys.readouterr()
    assert "Unknown event kind" in captured.err
    assert captured.out == ""


def test_config(capsys, tmp_path, monkeypatch):
    monkeypatch.setenv("SHOPCORE_BASE_DIR", str(tmp_path))
    monkeypatch.setenv("SHOPCORE_MAX_LISTENERS", "8")

    assert main(["config"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["max_listeners"] == 8
    assert data["base_dir"] == str(tmp_path)
