import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from digital_menu.core.exceptions import NotFoundError, ValidationError
from digital_menu.models import Order
from digital_menu.services import registry
from digital_menu.services.cart import DatabaseCartStore


@pytest.fixture
def store(db):
    return DatabaseCartStore(db)


async def test_open_cart_issues_token(store, restaurant):
    cart = await store.open_cart(restaurant.id, customer_name="Asha", table_number="7")

    assert len(cart.token) >= 24
    assert cart.items == []
    assert cart.total == 0
    assert (await store.get_cart(cart.token)).customer_name == "Asha"


async def test_open_cart_unknown_restaurant(store):
    with pytest.raises(NotFoundError):
        await store.open_cart(999)


async def test_set_update_and_remove_items(store, db, restaurant, starters, paneer_tikka):
    naan = await registry.create_dish(
        db, restaurant_id=restaurant.id, category_id=starters.id, name="Butter Naan", price=45
    )
    cart = await store.open_cart(restaurant.id)

    cart = await store.set_item(cart.token, paneer_tikka.id, 1)
    cart = await store.set_item(cart.token, naan.id, 2)
    cart = await store.set_item(cart.token, paneer_tikka.id, 3)
    assert [(line.dish_id, line.quantity) for line in cart.items] == [
        (paneer_tikka.id, 3),
        (naan.id, 2),
    ]
    assert cart.total == 3 * 180 + 2 * 45

    cart = await store.remove_item(cart.token, paneer_tikka.id)
    assert [line.dish_id for line in cart.items] == [naan.id]

    cart = await store.clear(cart.token)
    assert cart.items == []


async def test_cart_shows_current_price(store, db, restaurant, paneer_tikka):
    cart = await store.open_cart(restaurant.id)
    await store.set_item(cart.token, paneer_tikka.id, 1)

    await registry.update_dish(db, paneer_tikka.id, price=200)

    assert (await store.get_cart(cart.token)).total == 200


async def test_cart_rejects_foreign_dish(store, db, owner, paneer_tikka):
    other = await registry.create_restaurant(db, owner.id, "Curry Corner", "Mumbai")
    cart = await store.open_cart(other.id)

    with pytest.raises(ValidationError):
        await store.set_item(cart.token, paneer_tikka.id, 1)


async def test_unknown_token(store):
    with pytest.raises(NotFoundError):
        await store.get_cart("nope")


async def test_checkout_places_order_and_empties_cart(store, restaurant, paneer_tikka):
    cart = await store.open_cart(restaurant.id, customer_name="Asha", table_number="7")
    await store.set_item(cart.token, paneer_tikka.id, 2)

    order_id = await store.checkout(cart.token)

    cart = await store.get_cart(cart.token)
    assert cart.items == []
    assert cart.last_order_id == order_id


async def test_failed_checkout_leaves_no_order_and_keeps_cart(
    store, db, restaurant, paneer_tikka, monkeypatch
):
    cart = await store.open_cart(restaurant.id, customer_name="Asha", table_number="7")
    await store.set_item(cart.token, paneer_tikka.id, 2)

    async def lost_connection():
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(db, "commit", lost_connection)
    with pytest.raises(SQLAlchemyError):
        await store.checkout(cart.token)
    monkeypatch.undo()
    await db.rollback()

    assert (await db.execute(select(func.count(Order.id)))).scalar_one() == 0
    cart = await store.get_cart(cart.token)
    assert [(line.dish_id, line.quantity) for line in cart.items] == [(paneer_tikka.id, 2)]
    assert cart.last_order_id is None


async def test_checkout_requires_items_and_details(store, restaurant, paneer_tikka):
    cart = await store.open_cart(restaurant.id)

    with pytest.raises(ValidationError):
        await store.checkout(cart.token)

    await store.set_item(cart.token, paneer_tikka.id, 1)
    with pytest.raises(ValidationError):
        await store.checkout(cart.token)

    await store.update_details(cart.token, customer_name="Asha", table_number="7")
    assert await store.checkout(cart.token)


async def test_deleted_dish_leaves_cart(store, db, restaurant, paneer_tikka):
    cart = await store.open_cart(restaurant.id)
    await store.set_item(cart.token, paneer_tikka.id, 1)

    await registry.delete_dish(db, paneer_tikka.id)

    assert (await store.get_cart(cart.token)).items == []


# =============================================================================
# HTTP
# =============================================================================

async def test_cart_checkout_over_http(client, restaurant, paneer_tikka):
    response = await client.post("/carts", json={"restaurant_id": restaurant.id})
    assert response.status_code == 201
    token = response.json()["token"]

    response = await client.put(f"/carts/{token}/items/{paneer_tikka.id}", json={"quantity": 2})
    assert response.json()["total"] == 360

    response = await client.patch(
        f"/carts/{token}", json={"customer_name": "Asha", "table_number": "7"}
    )
    assert response.json()["table_number"] == "7"

    response = await client.post(f"/carts/{token}/checkout")
    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "pending"
    assert order["total"] == 360
    assert order["customer_name"] == "Asha"

    response = await client.get(f"/carts/{token}")
    assert response.json()["items"] == []
    assert response.json()["last_order_id"] == order["id"]

    response = await client.post(f"/carts/{token}/checkout")
    assert response.status_code == 400


async def test_cart_quantity_limits_over_http(client, restaurant, paneer_tikka):
    token = (await client.post("/carts", json={"restaurant_id": restaurant.id})).json()["token"]

    response = await client.put(f"/carts/{token}/items/{paneer_tikka.id}", json={"quantity": 100})
    assert response.status_code == 422

    response = await client.get("/carts/missing-token")
    assert response.status_code == 404
