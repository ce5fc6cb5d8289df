# test_toppings.py
from decimal import Decimal

import pytest

import schemas
from toppings import ToppingLimitExceeded, ToppingSelection, validate_topping_selection


def topping(topping_id, category, price="0.00"):
    return schemas.Topping(id=topping_id, name=topping_id.title(), category=category, price=Decimal(price))


def test_third_fruit_is_ignored():
    selection = ToppingSelection()
    assert selection.select(topping("morango", "fruit"))
    assert selection.select(topping("banana", "fruit"))
    assert not selection.select(topping("kiwi", "fruit"))

    assert [s.id for s in selection.snapshots()] == ["morango", "banana"]
    assert not selection.is_selected("kiwi")
    assert not selection.can_add_more("fruit")


def test_deselect_frees_a_slot():
    selection = ToppingSelection()
    selection.select(topping("morango", "fruit"))
    selection.select(topping("banana", "fruit"))

    assert not selection.select(topping("morango", "fruit"))
    assert selection.can_add_more("fruit")
    assert selection.select(topping("kiwi", "fruit"))
    assert [s.id for s in selection.snapshots()] == ["banana", "kiwi"]


def test_categories_are_capped_independently():
    selection = ToppingSelection()
    assert selection.select(topping("granola", "topping"))
    assert not selection.select(topping("chocolate", "topping"))
    for name in ("leite", "mel", "pacoca", "nutella"):
        assert selection.select(topping(name, "extra", "2.50"))
    assert not selection.select(topping("ovomaltine", "extra"))

    assert selection.category_count("extra") == 4
    assert len(selection) == 5
    assert selection.total() == Decimal("10.00")


def test_unknown_category_is_rejected():
    selection = ToppingSelection()
    bogus = schemas.Topping.model_construct(id="x", name="X", category="sauce", price=Decimal("0"))
    with pytest.raises(ValueError):
        selection.select(bogus)


def test_validate_submitted_selection():
    ok = [
        schemas.ToppingSnapshot(id="a", name="A", category="fruit"),
        schemas.ToppingSnapshot(id="b", name="B", category="fruit"),
        schemas.ToppingSnapshot(id="c", name="C", category="topping"),
    ]
    validate_topping_selection(ok)

    too_many = ok + [schemas.ToppingSnapshot(id="d", name="D", category="fruit")]
    with pytest.raises(ToppingLimitExceeded) as exc_info:
        validate_topping_selection(too_many)
    assert exc_info.value.category == "fruit"
    assert exc_info.value.count == 3
