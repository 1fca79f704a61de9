from fastapi import status

from perfpay.models.performance import BonusRecord

MONTH = "2026-03"

STRUCTURE = {
    "basic": 20000, "hra": 8000, "da": 0, "ta": 0, "special_allow": 2000,
    "pf": 2400, "esi": 0, "tax": 1500, "other_deduct": 0,
    "effective_from": "2026-01-01",
}


def _generate(client, auth_headers, admin_user, user):
    response = client.post(
        "/api/salary/structure",
        json={"user_id": user.id, **STRUCTURE},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["net_salary"] == 26100

    response = client.post(
        "/api/salary/slips/generate",
        json={"user_id": user.id, "month": MONTH},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == status.HTTP_200_OK
    return response.json()


def test_slip_reconciliation_flow(client, db_session, auth_headers, admin_user, staff_user):
    db_session.add(BonusRecord(
        user_id=staff_user.id, period=MONTH, total_score=45.0,
        bonus_percentage=10, tier="Below Average",
    ))
    db_session.commit()

    slip = _generate(client, auth_headers, admin_user, staff_user)
    assert slip["system_net"] == 28710
    assert slip["bonus_amount"] == 2610
    assert slip["status"] == "GENERATED"

    response = client.patch(
        f"/api/salary/slips/{slip['id']}",
        json={"employee_net": 28000, "discrepancy_notes": "missing allowance"},
        headers=auth_headers(staff_user),
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["discrepancy"] == 710
    assert data["status"] == "COMPARED"

    response = client.patch(
        f"/api/salary/slips/{slip['id']}",
        json={"status": "FINALIZED"},
        headers=auth_headers(admin_user),
    )
    assert response.json()["status"] == "FINALIZED"
    assert response.json()["finalized_at"] is not None


def test_staff_cannot_finalize(client, auth_headers, admin_user, staff_user):
    slip = _generate(client, auth_headers, admin_user, staff_user)

    response = client.patch(
        f"/api/salary/slips/{slip['id']}",
        json={"status": "FINALIZED"},
        headers=auth_headers(staff_user),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["errors"][0]["code"] == "PERMISSION_DENIED"


def test_finalized_slip_returns_conflict(client, auth_headers, admin_user, staff_user):
    slip = _generate(client, auth_headers, admin_user, staff_user)
    client.patch(f"/api/salary/slips/{slip['id']}", json={"status": "FINALIZED"}, headers=auth_headers(admin_user))

    response = client.patch(
        f"/api/salary/slips/{slip['id']}",
        json={"employee_net": 1},
        headers=auth_headers(staff_user),
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["errors"][0]["code"] == "ALREADY_FINALIZED"


def test_generate_without_structure_is_precondition_failure(client, auth_headers, admin_user, staff_user):
    response = client.post(
        "/api/salary/slips/generate",
        json={"user_id": staff_user.id, "month": MONTH},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == status.HTTP_412_PRECONDITION_FAILED


def test_slip_of_other_company_is_not_found(client, auth_headers, admin_user, staff_user, outsider_user):
    slip = _generate(client, auth_headers, admin_user, staff_user)

    response = client.get(f"/api/salary/slips/{slip['id']}", headers=auth_headers(outsider_user))
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["errors"][0]["msg"] == "Salary slip not found"


def test_slip_list_is_paginated_envelope(client, auth_headers, admin_user, staff_user):
    _generate(client, auth_headers, admin_user, staff_user)

    response = client.get("/api/salary/slips", headers=auth_headers(staff_user))
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert len(body["data"]) == 1
    assert body["metadata"]["total"] == 1
    assert body["metadata"]["page"] == 1


def test_negative_structure_amount_is_rejected(client, auth_headers, admin_user, staff_user):
    response = client.post(
        "/api/salary/structure",
        json={"user_id": staff_user.id, **STRUCTURE, "basic": -5},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 422
    assert response.json()["success"] is False
