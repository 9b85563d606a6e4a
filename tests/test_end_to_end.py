"""
Owner signs up, builds a menu, a customer orders from it and the kitchen
walks the order through to completion.
"""

from datetime import timedelta

from digital_menu.services import identity
from digital_menu.services.notifications import get_notification_service


async def login(client, email, name, country):
    await client.post("/auth/otp/send", json={"email": email})
    code = get_notification_service().last_code_for(email)
    response = await client.post(
        "/auth/otp/verify",
        json={"email": email, "otp": code, "name": name, "country": country},
    )
    assert response.json()["success"] is True
    return response.json()["user"]


async def test_owner_to_customer_flow(client):
    user = await login(client, "priya@spicehub.in", "Priya", "India")

    restaurant = (await client.post(
        "/restaurants",
        json={"owner_id": user["id"], "name": "Spice Hub", "location": "Pune"},
    )).json()
    category = (await client.post(
        "/categories",
        json={"restaurant_id": restaurant["id"], "name": "Starters"},
    )).json()
    dish = (await client.post(
        "/dishes",
        json={
            "restaurant_id": restaurant["id"],
            "category_id": category["id"],
            "name": "Paneer Tikka",
            "price": 180,
        },
    )).json()

    menu = (await client.get(f"/restaurants/{restaurant['id']}/menu")).json()
    assert menu["groups"][0]["category"] == "Starters"
    assert menu["groups"][0]["dishes"][0]["name"] == "Paneer Tikka"

    response = await client.post(
        "/orders",
        json={
            "restaurant_id": restaurant["id"],
            "customer_name": "Asha",
            "table_number": "7",
            "items": [{"dish_id": dish["id"], "quantity": 2}],
        },
    )
    order = response.json()
    assert response.status_code == 201
    assert order["total"] == 360
    assert order["status"] == "pending"

    listed = (await client.get("/orders", params={"owner_id": user["id"]})).json()
    assert [o["id"] for o in listed] == [order["id"]]

    for status in ("preparing", "ready", "completed"):
        response = await client.patch(f"/orders/{order['id']}", json={"status": status})
        assert response.json()["status"] == status

    response = await client.patch(f"/orders/{order['id']}", json={"status": "pending"})
    assert response.status_code == 409


async def test_returning_owner_logs_straight_in(client, monkeypatch):
    await login(client, "priya@spicehub.in", "Priya", "India")

    # Second login needs a fresh code, so skip past the resend window
    later = identity.utcnow() + timedelta(minutes=2)
    monkeypatch.setattr(identity, "utcnow", lambda: later)

    await client.post("/auth/otp/send", json={"email": "priya@spicehub.in"})
    code = get_notification_service().last_code_for("priya@spicehub.in")
    response = await client.post(
        "/auth/otp/verify", json={"email": "priya@spicehub.in", "otp": code}
    )

    body = response.json()
    assert body["success"] is True
    assert body["existing_user"] is True


async def test_health_and_root(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["database"] == "healthy"
    assert body["storage_service"] == "mock"
    assert body["notification_service"] == "mock"
    assert body["status"] in ("operational", "degraded")

    response = await client.get("/")
    assert response.json()["health"] == "/health"
