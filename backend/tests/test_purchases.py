"""
Tests for checkout: inventory decrement, pricing, rejection paths and
purchase history.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

SERVICE_FEE = Decimal("5.99")


def _cart(event_id: int, *lines, total=None) -> dict:
    header = {"event_id": event_id}
    if total is not None:
        header["total_amount"] = str(total)
    return {
        "purchase": header,
        "items": [
            {"ticket_type_id": ticket_type_id, "quantity": quantity, **extra}
            for ticket_type_id, quantity, extra in lines
        ],
    }


@pytest.mark.asyncio
async def test_purchase_decrements_inventory(client: AsyncClient, auth_headers, storage, test_event, vip_tickets):
    """150 available, buy 5: 145 left, one purchase with one line item."""
    total = Decimal("199.00") * 5 + SERVICE_FEE
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 5, {"price": "199.00"}), total=total),
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "completed"
    assert data["event"]["id"] == test_event.id
    assert Decimal(data["total_amount"]) == Decimal("1000.99")
    assert len(data["items"]) == 1
    item = data["items"][0]
    assert item["quantity"] == 5
    assert Decimal(item["price"]) == Decimal("199.00")
    assert item["ticket_type"]["name"] == "VIP Package"

    assert (await storage.get_ticket_type(vip_tickets.id)).available == 145


@pytest.mark.asyncio
async def test_purchase_several_ticket_types(
    client: AsyncClient, auth_headers, storage, test_event, vip_tickets, general_tickets
):
    """Service fee is charged once per purchase, not per line."""
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 2, {}), (general_tickets.id, 3, {})),
        headers=auth_headers,
    )
    assert response.status_code == 201
    expected = Decimal("199.00") * 2 + Decimal("99.00") * 3 + SERVICE_FEE
    assert Decimal(response.json()["total_amount"]) == expected
    assert (await storage.get_ticket_type(vip_tickets.id)).available == 148
    assert (await storage.get_ticket_type(general_tickets.id)).available == 997


@pytest.mark.asyncio
async def test_purchase_keeps_seat_selection(client: AsyncClient, auth_headers, test_event, vip_tickets):
    seat_info = {"seats": [[0, 1], [0, 2]]}
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 2, {"seat_info": seat_info})),
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["items"][0]["seat_info"] == seat_info


@pytest.mark.asyncio
async def test_purchase_insufficient_inventory(
    client: AsyncClient, auth_headers, test_user, storage, test_event, vip_tickets
):
    """Asking for more than is left returns 409 and changes nothing."""
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 151, {})),
        headers=auth_headers,
    )
    assert response.status_code == 409
    assert response.json()["code"] == "INSUFFICIENT_INVENTORY"
    assert (await storage.get_ticket_type(vip_tickets.id)).available == 150
    assert await storage.list_purchases_by_user(test_user.id) == []


@pytest.mark.asyncio
async def test_purchase_sold_out(client: AsyncClient, auth_headers, test_event, sold_out_tickets):
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (sold_out_tickets.id, 1, {})),
        headers=auth_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_purchase_lines_for_same_ticket_type_are_summed(
    client: AsyncClient, auth_headers, storage, test_event, vip_tickets
):
    """Two lines of 100 each exceed 150 together even though each fits alone."""
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 100, {}), (vip_tickets.id, 100, {})),
        headers=auth_headers,
    )
    assert response.status_code == 409
    assert (await storage.get_ticket_type(vip_tickets.id)).available == 150


@pytest.mark.asyncio
async def test_rejected_line_leaves_other_lines_untouched(
    client: AsyncClient, auth_headers, storage, test_event, vip_tickets, sold_out_tickets
):
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 2, {}), (sold_out_tickets.id, 1, {})),
        headers=auth_headers,
    )
    assert response.status_code == 409
    assert (await storage.get_ticket_type(vip_tickets.id)).available == 150


@pytest.mark.asyncio
async def test_purchase_unknown_ticket_type(client: AsyncClient, auth_headers, test_event):
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (99999, 1, {})),
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json()["code"] == "TICKET_TYPE_NOT_FOUND"


@pytest.mark.asyncio
async def test_purchase_ticket_type_of_another_event(
    client: AsyncClient, auth_headers, storage, test_event, other_event_tickets
):
    """A ticket type only counts for the event it belongs to."""
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (other_event_tickets.id, 1, {})),
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert (await storage.get_ticket_type(other_event_tickets.id)).available == 20


@pytest.mark.asyncio
async def test_purchase_unknown_event(client: AsyncClient, auth_headers, vip_tickets):
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(99999, (vip_tickets.id, 1, {})),
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json()["code"] == "EVENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_purchase_stale_unit_price(client: AsyncClient, auth_headers, storage, test_event, vip_tickets):
    """A client that shows an outdated price is told so instead of being charged silently."""
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 1, {"price": "149.00"})),
        headers=auth_headers,
    )
    assert response.status_code == 422
    assert response.json()["code"] == "PRICE_MISMATCH"
    assert (await storage.get_ticket_type(vip_tickets.id)).available == 150


@pytest.mark.asyncio
async def test_purchase_wrong_total(client: AsyncClient, auth_headers, test_event, vip_tickets):
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 1, {}), total=Decimal("199.00")),
        headers=auth_headers,
    )
    assert response.status_code == 422
    assert response.json()["code"] == "PRICE_MISMATCH"


@pytest.mark.asyncio
async def test_purchase_empty_cart(client: AsyncClient, auth_headers, test_event):
    response = await client.post(
        "/api/v1/purchases/",
        json={"purchase": {"event_id": test_event.id}, "items": []},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_purchase_zero_quantity(client: AsyncClient, auth_headers, test_event, vip_tickets):
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 0, {})),
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_purchase_unauthenticated(client: AsyncClient, test_event, vip_tickets):
    """Unauthenticated checkout returns 401."""
    response = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 1, {})),
    )
    assert response.status_code == 401
    assert response.json()["code"] == "NOT_AUTHENTICATED"


@pytest.mark.asyncio
async def test_my_purchases_newest_first(client: AsyncClient, auth_headers, test_event, vip_tickets, general_tickets):
    first = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 1, {})),
        headers=auth_headers,
    )
    second = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (general_tickets.id, 2, {})),
        headers=auth_headers,
    )

    response = await client.get("/api/v1/purchases/me", headers=auth_headers)
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [second.json()["id"], first.json()["id"]]


@pytest.mark.asyncio
async def test_get_purchase(client: AsyncClient, auth_headers, test_event, vip_tickets):
    created = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 1, {})),
        headers=auth_headers,
    )
    purchase_id = created.json()["id"]

    response = await client.get(f"/api/v1/purchases/{purchase_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["items"][0]["ticket_type"]["id"] == vip_tickets.id


@pytest.mark.asyncio
async def test_get_purchase_of_another_user(client: AsyncClient, auth_headers, other_headers, test_event, vip_tickets):
    created = await client.post(
        "/api/v1/purchases/",
        json=_cart(test_event.id, (vip_tickets.id, 1, {})),
        headers=auth_headers,
    )

    response = await client.get(f"/api/v1/purchases/{created.json()['id']}", headers=other_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_missing_purchase(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/purchases/99999", headers=auth_headers)
    assert response.status_code == 404
