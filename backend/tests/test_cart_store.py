import json

from utils.cart_store import CART_KEY, CartStore, ClientStateStorage, MemoryStorage, cart_for_user, line_qty


def test_add_same_product_twice_bumps_quantity():
    cart = CartStore(MemoryStorage())

    cart.add_to_cart("p1", {"name": "Tomates", "price": 40.0})
    cart.add_to_cart("p1", {"name": "Tomates", "price": 40.0})
    cart.add_to_cart("p2", {"name": "Oignons", "price": 30.0})

    assert cart.get_count() == 3
    lines = cart.lines()
    assert len(lines) == 2
    assert lines[0] == {"productId": "p1", "qty": 2, "name": "Tomates", "price": 40.0}
    assert lines[1]["qty"] == 1


def test_product_ids_compare_by_string_value():
    cart = CartStore(MemoryStorage())
    cart.add_to_cart(7, {"name": "Dattes", "price": 120.0})
    cart.add_to_cart("7")

    assert len(cart.lines()) == 1
    assert cart.get_count() == 2


def test_snapshot_is_taken_at_first_add():
    cart = CartStore(MemoryStorage())
    cart.add_to_cart(1, {"name": "Mil", "price": 20.0})
    cart.add_to_cart(1, {"name": "Mil bio", "price": 25.0})

    line = cart.lines()[0]
    assert line["name"] == "Mil"
    assert line["price"] == 20.0


def test_cart_is_persisted_as_json_array():
    storage = MemoryStorage()
    CartStore(storage).add_to_cart(3, {"name": "Riz paddy", "price": 22.0})

    stored = json.loads(storage.get_item(CART_KEY))
    assert stored == [{"productId": 3, "qty": 1, "name": "Riz paddy", "price": 22.0}]

    reloaded = CartStore(storage)
    assert reloaded.get_count() == 1


def test_missing_cart_is_empty():
    assert CartStore(MemoryStorage()).get_count() == 0


def test_malformed_json_yields_empty_cart():
    cart = CartStore(MemoryStorage({CART_KEY: "{not json"}))
    assert cart.get_count() == 0
    assert cart.lines() == []

    # Still usable afterwards
    cart.add_to_cart("p1")
    assert cart.get_count() == 1


def test_non_array_value_yields_empty_cart():
    cart = CartStore(MemoryStorage({CART_KEY: json.dumps({"productId": 1, "qty": 3})}))
    assert cart.get_count() == 0


def test_junk_entries_are_dropped_on_load():
    raw = json.dumps([
        {"productId": 1, "qty": 2},
        {"productId": 2, "qty": "three"},
        {"productId": 3, "qty": True},
        {"productId": 4, "qty": 0},
        {"productId": None, "qty": 1},
        {"qty": 5},
        "garbage",
    ])
    cart = CartStore(MemoryStorage({CART_KEY: raw}))

    assert cart.get_count() == 2
    assert [line["productId"] for line in cart.lines()] == [1]


def test_stored_lines_are_normalised():
    raw = json.dumps([
        {"productId": 1, "qty": 2.7, "name": 12, "price": True},
        {"productId": "2", "qty": 1, "name": "Mil", "price": "cheap"},
    ])
    cart = CartStore(MemoryStorage({CART_KEY: raw}))

    assert cart.lines() == [
        {"productId": 1, "qty": 2, "name": None, "price": None},
        {"productId": "2", "qty": 1, "name": "Mil", "price": None},
    ]
    assert cart.total() == 0.0


def test_line_qty_rejects_non_numbers():
    assert line_qty({"qty": 4}) == 4
    assert line_qty({"qty": None}) == 0
    assert line_qty({"qty": "2"}) == 0
    assert line_qty({"qty": float("inf")}) == 0
    assert line_qty({"qty": float("nan")}) == 0
    assert line_qty({}) == 0


def test_total_sums_price_times_quantity():
    cart = CartStore(MemoryStorage())
    cart.add_to_cart(1, {"name": "Tomates", "price": 40.0})
    cart.add_to_cart(1, {"name": "Tomates", "price": 40.0})
    cart.add_to_cart(2, {"name": "Pastèques", "price": 25.5})
    cart.add_to_cart(3, {"name": "Sans prix"})

    assert cart.total() == 105.5


def test_clear_removes_the_stored_key():
    storage = MemoryStorage()
    cart = CartStore(storage)
    cart.add_to_cart(1)
    cart.clear()

    assert storage.get_item(CART_KEY) is None
    assert cart.get_count() == 0


def test_lines_returns_copies():
    cart = CartStore(MemoryStorage())
    cart.add_to_cart(1)
    cart.lines()[0]["qty"] = 99

    assert cart.get_count() == 1


def test_database_storage_is_per_user(db, farmer, buyer):
    cart_for_user(db, buyer["id"]).add_to_cart(10, {"name": "Oignons", "price": 30.0})
    cart_for_user(db, buyer["id"]).add_to_cart(10, {"name": "Oignons", "price": 30.0})

    assert cart_for_user(db, buyer["id"]).get_count() == 2
    assert cart_for_user(db, farmer["id"]).get_count() == 0

    storage = ClientStateStorage(db, buyer["id"])
    storage.remove_item(CART_KEY)
    assert storage.get_item(CART_KEY) is None
