import pytest

from marketplace.core.exceptions import ConflictError, NotFoundError, ValidationError
from marketplace.models import Fee, FeeDetail, FeeLocation
from marketplace.schemas.fees import FeeUpdate
from marketplace.services import fees as fees_service
from tests.helpers import side


def _ids(fee):
    pairing = fee.pairings[0]
    return pairing.vendor_detail_id, pairing.consumer_detail_id


def _update(db, **body):
    return fees_service.update_fee_tree(db, FeeUpdate.model_validate(body))


def test_update_fee_fields_and_charges(client, db, admin_headers, create_fee):
    fee = create_fee()
    vendor_id, _ = _ids(fee)

    r = client.patch(
        "/fees",
        json={
            "feeId": fee.id,
            "name": "Shipping Fee v2",
            "detailPairs": [{"vendor": {"feeDetailId": vendor_id, "isGlobal": True, "vat": 7}}],
        },
        headers=admin_headers,
    )
    body = r.json()
    assert body["status"] is True
    assert body["message"] == "Fee updated successfully."
    assert body["data"]["fee"]["name"] == "Shipping Fee v2"
    # consumer side was not sent
    assert body["data"]["skippedSides"] == 1

    vendor = db.get(FeeDetail, vendor_id)
    assert vendor.vat == 7
    assert vendor.percentage == 2.5
    refreshed = db.get(Fee, fee.id)
    assert refreshed.description == "Charged on every order"
    assert refreshed.menu_id == 7


def test_sides_without_detail_id_are_skipped(db, create_fee):
    fee = create_fee()
    _, skipped = _update(
        db,
        feeId=fee.id,
        detailPairs=[{"vendor": side(True, vat=50), "consumer": side(True, vat=50)}],
    )
    assert skipped == 2
    assert all(d.vat == 5 for d in db.query(FeeDetail))


def test_update_menu_conflict(client, db, admin_headers, create_fee):
    create_fee(name="Store fee", menu_id=7)
    other = create_fee(name="RFQ fee", menu_id=8)

    r = client.patch("/fees", json={"feeId": other.id, "menuId": 7}, headers=admin_headers)
    body = r.json()
    assert body["status"] is False
    assert body["message"] == "Fees already assigned with the Menu"
    assert db.get(Fee, other.id).menu_id == 8


def test_update_keeps_own_menu(db, create_fee):
    fee = create_fee(menu_id=8)
    updated, _ = _update(db, feeId=fee.id, menuId=8, description="Same menu")
    assert updated.menu_id == 8
    assert updated.description == "Same menu"


def test_update_can_clear_menu(db, create_fee):
    fee = create_fee(menu_id=7)
    updated, _ = _update(db, feeId=fee.id, menuId=None)
    assert updated.menu_id is None


def test_scoped_to_global_removes_location(db, create_fee):
    fee = create_fee()
    _, consumer_id = _ids(fee)
    assert db.query(FeeLocation).count() == 1

    _update(db, feeId=fee.id, detailPairs=[{"consumer": {"feeDetailId": consumer_id, "isGlobal": True}}])

    consumer = db.get(FeeDetail, consumer_id)
    assert consumer.is_global is True
    assert consumer.location_id is None
    assert db.query(FeeLocation).count() == 0


def test_global_to_scoped_creates_location(db, create_fee):
    fee = create_fee()
    vendor_id, _ = _ids(fee)

    _update(
        db,
        feeId=fee.id,
        detailPairs=[
            {
                "vendor": {
                    "feeDetailId": vendor_id,
                    "isGlobal": False,
                    "location": {"countryId": 1, "town": "Marina"},
                }
            }
        ],
    )

    vendor = db.get(FeeDetail, vendor_id)
    assert vendor.is_global is False
    assert vendor.location.town == "Marina"
    assert vendor.location.fee_id == fee.id
    assert db.query(FeeLocation).count() == 2


def test_scoped_location_updated_in_place(db, create_fee):
    fee = create_fee()
    _, consumer_id = _ids(fee)
    location_id = db.get(FeeDetail, consumer_id).location_id

    _update(
        db,
        feeId=fee.id,
        detailPairs=[{"consumer": {"feeDetailId": consumer_id, "location": {"town": "Karama"}}}],
    )

    consumer = db.get(FeeDetail, consumer_id)
    assert consumer.location_id == location_id
    assert consumer.location.town == "Karama"
    assert consumer.location.country_id == 1
    assert db.query(FeeLocation).count() == 1


def test_scoping_without_location_is_rejected(db, create_fee):
    fee = create_fee()
    vendor_id, _ = _ids(fee)

    with pytest.raises(ValidationError):
        _update(
            db,
            feeId=fee.id,
            name="Renamed",
            detailPairs=[{"vendor": {"feeDetailId": vendor_id, "isGlobal": False}}],
        )

    # rolled back as a whole
    assert db.get(Fee, fee.id).name == "Shipping Fee"
    assert db.get(FeeDetail, vendor_id).is_global is True


def test_detail_of_another_fee_is_not_found(db, create_fee):
    fee = create_fee(name="A", menu_id=7)
    other = create_fee(name="B", menu_id=8)
    other_vendor_id, _ = _ids(other)

    with pytest.raises(NotFoundError):
        _update(db, feeId=fee.id, detailPairs=[{"vendor": {"feeDetailId": other_vendor_id, "isGlobal": True}}])


def test_detail_on_wrong_side_is_rejected(db, create_fee):
    fee = create_fee()
    _, consumer_id = _ids(fee)

    with pytest.raises(ValidationError):
        _update(db, feeId=fee.id, detailPairs=[{"vendor": {"feeDetailId": consumer_id, "isGlobal": True}}])


def test_update_requires_fee_id(client, admin_headers, reference_data):
    r = client.patch("/fees", json={"name": "No id"}, headers=admin_headers)
    body = r.json()
    assert body["status"] is False
    assert body["message"] == "feeId is required."


def test_update_unknown_fee(client, admin_headers, reference_data):
    r = client.patch("/fees", json={"feeId": 999, "name": "Ghost"}, headers=admin_headers)
    body = r.json()
    assert body["status"] is False
    assert body["message"] == "Fee with ID 999 not found."


def test_update_blank_name_rejected(db, create_fee):
    fee = create_fee()
    with pytest.raises(ValidationError):
        _update(db, feeId=fee.id, name="  ")


def test_update_conflict_from_service(db, create_fee):
    create_fee(name="A", menu_id=7)
    other = create_fee(name="B", menu_id=None)
    with pytest.raises(ConflictError):
        _update(db, feeId=other.id, menuId=7)


def test_charge_only_update_keeps_global_side(client, db, admin_headers, create_fee):
    fee = create_fee()
    vendor_id, _ = _ids(fee)

    r = client.patch(
        "/fees",
        json={"feeId": fee.id, "detailPairs": [{"vendor": {"feeDetailId": vendor_id, "vat": 7}}]},
        headers=admin_headers,
    )
    assert r.json()["status"] is True

    vendor = db.get(FeeDetail, vendor_id)
    assert vendor.vat == 7
    assert vendor.is_global is True
    assert vendor.location_id is None


def test_charge_only_update_keeps_location(db, create_fee):
    fee = create_fee()
    _, consumer_id = _ids(fee)
    location_id = db.get(FeeDetail, consumer_id).location_id

    _update(db, feeId=fee.id, detailPairs=[{"consumer": {"feeDetailId": consumer_id, "fixFee": 0}}])

    consumer = db.get(FeeDetail, consumer_id)
    assert consumer.fix_fee == 0
    assert consumer.is_global is False
    assert consumer.location_id == location_id
    assert consumer.location.town == "Deira"


def test_update_rejects_empty_location(client, db, admin_headers, create_fee):
    fee = create_fee()
    vendor_id, _ = _ids(fee)

    r = client.patch(
        "/fees",
        json={"feeId": fee.id, "detailPairs": [{"vendor": {"feeDetailId": vendor_id, "location": {}}}]},
        headers=admin_headers,
    )
    body = r.json()
    assert body["status"] is False
    assert body["message"] == "Invalid request"
    assert "at least one of" in body["error"]
    assert db.get(FeeDetail, vendor_id).is_global is True
    assert db.query(FeeLocation).count() == 1
