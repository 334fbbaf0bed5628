from services.audience_service import AudienceService
from services.segment_rules import compile_rules


def test_high_spender_example(make_customer):
    make_customer(orders=[(12000, 5)])
    make_customer(orders=[(500, 5)])

    audience = AudienceService.resolve_audience([{"field": "totalSpend", "operator": ">", "value": "10000"}])

    assert audience["size"] == 1
    assert audience["breakdown"]["highSpenders"] == 1


def test_empty_rules_resolve_to_nobody(make_customer):
    make_customer(orders=[(100, 1)])
    audience = AudienceService.resolve_audience([])
    assert audience == {"matches": [], "size": 0, "breakdown": {"highSpenders": 0, "lowFrequency": 0, "inactive": 0}}


def test_sql_clause_agrees_with_predicate(make_customer):
    customers = [
        make_customer(segment="vip", orders=[(9000, 200), (3000, 120)]),
        make_customer(segment="regular", orders=[(50, 10)]),
        make_customer(segment="new"),
        make_customer(segment="regular", orders=[(400, 100), (400, 95), (400, 92), (400, 91)]),
    ]
    rules = [
        {"field": "lastOrderDate", "operator": ">", "value": "90", "connector": "AND"},
        {"field": "visitCount", "operator": "<=", "value": "3", "connector": "OR"},
        {"field": "segment", "operator": "=", "value": "vip"},
    ]

    matched_ids = {c.id for c in AudienceService.resolve_audience(rules)["matches"]}
    segment = compile_rules(rules)

    assert matched_ids == {c.id for c in customers if segment.matches(c)}
    assert matched_ids == {customers[0].id, customers[2].id}


def test_breakdown_describes_matched_set(make_customer):
    make_customer(segment="vip", orders=[(15000, 200)])
    make_customer(segment="vip", orders=[(100, 1), (100, 2), (100, 3), (100, 4)])
    make_customer(segment="regular", orders=[(20000, 1)])

    audience = AudienceService.resolve_audience([{"field": "segment", "operator": "=", "value": "vip"}])

    assert audience["size"] == 2
    assert audience["breakdown"] == {"highSpenders": 1, "lowFrequency": 1, "inactive": 1}


def test_preview_endpoint_returns_first_ten(client, auth, make_customer):
    for _ in range(12):
        make_customer(orders=[(11000, 3)])

    response = client.post("/api/campaigns/preview-audience", headers=auth, json={
        "rules": [{"field": "totalSpend", "operator": ">=", "value": "11000"}]
    })

    body = response.get_json()
    assert response.status_code == 200
    assert body["size"] == 12
    assert len(body["customers"]) == 10
    assert body["breakdown"]["highSpenders"] == 12


def test_preview_rejects_malformed_rules(client, auth):
    response = client.post("/api/campaigns/preview-audience", headers=auth, json={"rules": "everyone"})
    assert response.status_code == 400


def test_out_of_range_numbers_are_dropped_not_bound(client, auth, make_customer):
    make_customer(orders=[(12000, 3)])
    make_customer(orders=[(50, 3)])
    rules = [
        {"field": "visitCount", "operator": "<", "value": "1e20", "connector": "AND"},
        {"field": "totalSpend", "operator": ">", "value": "10000"},
    ]

    preview = client.post("/api/campaigns/preview-audience", headers=auth, json={"rules": rules})
    created = client.post("/api/campaigns", headers=auth, json={
        "name": "Huge", "type": "promotional", "message": "Hi {{name}}", "rules": rules,
    })

    assert preview.status_code == 200
    assert preview.get_json()["size"] == 1
    assert created.status_code == 201
    assert created.get_json()["audience_size"] == 1


def test_preview_keeps_entity_and_aggregate_key_casing(client, auth, make_customer):
    make_customer(orders=[(12000, 3)])

    body = client.post("/api/campaigns/preview-audience", headers=auth, json={
        "rules": [{"field": "totalSpend", "operator": ">", "value": "10000"}]
    }).get_json()

    assert set(body["breakdown"]) == {"highSpenders", "lowFrequency", "inactive"}
    assert {"total_spend", "visit_count", "last_order_date"} <= set(body["customers"][0])
