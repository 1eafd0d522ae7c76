"""Request payload builders shared by the fee tests."""


def side(is_global=True, **overrides):
    data = {
        "isGlobal": is_global,
        "percentage": 2.5,
        "maxCapPerDeal": 100,
        "maxCapPerMonth": 1000,
        "fixFee": 1,
        "vat": 5,
        "paymentGatewayFee": 0.5,
    }
    if not is_global:
        data["location"] = {"countryId": 1, "stateId": 1, "cityId": 1, "town": "Deira"}
    data.update(overrides)
    return data


def fee_payload(name="Shipping Fee", menu_id=7, pairs=None, **overrides):
    data = {
        "name": name,
        "description": "Charged on every order",
        "policy": 1,
        "menuId": menu_id,
        "detailPairs": pairs if pairs is not None else [{"vendor": side(True), "consumer": side(False)}],
    }
    data.update(overrides)
    return data
