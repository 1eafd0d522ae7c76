from marketplace.models import FeeDetail, FeeLocation


def _ids(fee):
    pairing = fee.pairings[0]
    return pairing.vendor_detail_id, pairing.consumer_detail_id


def test_partial_patch_keeps_other_fields(client, db, admin_headers, create_fee):
    vendor_id, _ = _ids(create_fee())

    r = client.patch(
        "/fees/detail",
        json={"feeDetailId": vendor_id, "vendorFields": {"vat": 0, "fixFee": 3}},
        headers=admin_headers,
    )
    body = r.json()
    assert body["status"] is True
    assert body["message"] == "FeesDetail updated successfully."
    assert body["data"]["vat"] == 0
    assert body["data"]["fixFee"] == 3
    assert body["data"]["percentage"] == 2.5
    assert body["data"]["isGlobal"] is True

    vendor = db.get(FeeDetail, vendor_id)
    assert vendor.vat == 0
    assert vendor.max_cap_per_month == 1000


def test_fields_for_other_side_are_ignored(client, db, admin_headers, create_fee):
    vendor_id, consumer_id = _ids(create_fee())

    r = client.patch(
        "/fees/detail",
        json={
            "feeDetailId": vendor_id,
            "vendorFields": {"percentage": 4},
            "consumerFields": {"percentage": 99},
        },
        headers=admin_headers,
    )
    assert r.json()["status"] is True
    assert db.get(FeeDetail, vendor_id).percentage == 4
    assert db.get(FeeDetail, consumer_id).percentage == 2.5


def test_patch_without_matching_side_fields(client, admin_headers, create_fee):
    vendor_id, _ = _ids(create_fee())

    r = client.patch(
        "/fees/detail",
        json={"feeDetailId": vendor_id, "consumerFields": {"vat": 1}},
        headers=admin_headers,
    )
    body = r.json()
    assert body["status"] is False
    assert body["message"] == f"No fields supplied for VENDOR detail {vendor_id}."


def test_patch_to_global_removes_location(client, db, admin_headers, create_fee):
    _, consumer_id = _ids(create_fee())

    r = client.patch(
        "/fees/detail",
        json={"feeDetailId": consumer_id, "consumerFields": {"isGlobal": True}},
        headers=admin_headers,
    )
    body = r.json()
    assert body["status"] is True
    assert body["data"]["isGlobal"] is True
    assert body["data"]["location"] is None
    assert db.query(FeeLocation).count() == 0


def test_patch_location_alone_scopes_detail(client, db, admin_headers, create_fee):
    vendor_id, _ = _ids(create_fee())

    r = client.patch(
        "/fees/detail",
        json={"feeDetailId": vendor_id, "vendorFields": {"location": {"countryId": 1, "cityId": 1}}},
        headers=admin_headers,
    )
    body = r.json()
    assert body["status"] is True
    assert body["data"]["isGlobal"] is False
    assert body["data"]["location"]["countryId"] == 1
    assert body["data"]["location"]["side"] == "VENDOR"
    assert db.query(FeeLocation).count() == 2


def test_patch_unknown_detail(client, admin_headers, reference_data):
    r = client.patch(
        "/fees/detail",
        json={"feeDetailId": 404, "vendorFields": {"vat": 1}},
        headers=admin_headers,
    )
    body = r.json()
    assert body["status"] is False
    assert body["message"] == "FeeDetail with ID 404 not found."


def test_patch_requires_detail_id(client, admin_headers, reference_data):
    r = client.patch("/fees/detail", json={"vendorFields": {"vat": 1}}, headers=admin_headers)
    assert r.json()["message"] == "feeDetailId is required."
