"""
Organization membership tests: invitations, roles, removal and sample data.
"""
import pytest

from fencemark.models.component import Component
from fencemark.models.discount import DiscountRule
from fencemark.models.fence_type import FenceType, GateType
from fencemark.models.pricing import PricingConfig, TaxRegion

from conftest import PASSWORD, bearer


def members_url(auth):
    return f"/api/organizations/{auth['organization_id']}/members"


def invite(client, auth, email, role="Member"):
    return client.post(
        f"/api/organizations/{auth['organization_id']}/invite",
        json={"email": email, "role": role},
        headers=bearer(auth),
    )


def accept(client, token, password=PASSWORD):
    response = client.post(
        "/api/organizations/accept-invitation",
        json={"token": token, "password": password},
    )
    client.cookies.clear()
    return response


@pytest.fixture
def crew_member(client, org_a):
    """An accepted Member of Acme Fencing."""
    token = invite(client, org_a, "crew@acme-fencing.com").json()["invitation_token"]
    return accept(client, token).json()


def test_list_members(client, org_a, headers_a):
    response = client.get(members_url(org_a), headers=headers_a)
    assert response.status_code == 200
    members = response.json()
    assert len(members) == 1
    assert members[0]["email"] == "owner@acme-fencing.com"
    assert members[0]["role"] == "Owner"
    assert members[0]["is_accepted"] is True


def test_other_organization_members_are_forbidden(client, org_a, headers_b):
    response = client.get(members_url(org_a), headers=headers_b)
    assert response.status_code == 403


def test_invitation_flow(client, org_a, headers_a):
    response = invite(client, org_a, "crew@acme-fencing.com", role="member")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Invitation sent successfully"
    token = body["invitation_token"]

    pending = client.get(members_url(org_a), headers=headers_a).json()
    invited = next(member for member in pending if member["email"] == "crew@acme-fencing.com")
    assert invited["is_accepted"] is False
    assert invited["is_guest"] is True

    accepted = accept(client, token)
    assert accepted.status_code == 200
    auth = accepted.json()
    assert auth["organization_id"] == org_a["organization_id"]
    assert auth["is_guest"] is False

    me = client.get("/api/auth/me", headers=bearer(auth)).json()
    assert me["organization_id"] == org_a["organization_id"]
    assert me["role"] == "Member"

    # The invitee can now sign in with the password they chose
    login = client.post("/api/auth/login", json={"email": "crew@acme-fencing.com", "password": PASSWORD})
    assert login.status_code == 200


def test_pending_invitation_grants_no_access(client, org_a):
    invite(client, org_a, "crew@acme-fencing.com")
    # No password yet, so the placeholder account cannot sign in
    login = client.post("/api/auth/login", json={"email": "crew@acme-fencing.com", "password": PASSWORD})
    assert login.status_code == 401


def test_token_cannot_be_used_twice(client, org_a):
    token = invite(client, org_a, "crew@acme-fencing.com").json()["invitation_token"]
    assert accept(client, token).status_code == 200

    response = accept(client, token)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid invitation token"


def test_invalid_role(client, org_a):
    response = invite(client, org_a, "crew@acme-fencing.com", role="Foreman")
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid role specified"


def test_cannot_invite_owner(client, org_a):
    response = invite(client, org_a, "crew@acme-fencing.com", role="Owner")
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot invite another owner. Only one owner per organization is allowed."


def test_cannot_invite_existing_member(client, org_a):
    response = invite(client, org_a, "owner@acme-fencing.com")
    assert response.status_code == 400
    assert response.json()["error"] == "User is already a member of this organization"


def test_invite_existing_user_requires_their_password(client, org_a, org_b):
    token = invite(client, org_a, "dana@birchwood-fence.com", role="ReadOnly").json()["invitation_token"]

    response = accept(client, token, password="attacker-guess-xx")
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid password for existing account"
    assert "access_token" not in response.json()
    assert "set-cookie" not in response.headers

    # Still pending; the real owner of the account can redeem it
    response = accept(client, token, password=PASSWORD)
    assert response.status_code == 200
    assert response.json()["user_id"] == org_b["user_id"]

    login = client.post("/api/auth/login", json={"email": "dana@birchwood-fence.com", "password": PASSWORD})
    assert login.status_code == 200


def test_inviting_organization_cannot_take_over_invited_account(client, org_a, org_b):
    token = invite(client, org_a, "dana@birchwood-fence.com").json()["invitation_token"]
    response = client.post(
        "/api/organizations/accept-invitation",
        json={"token": token, "password": "attacker-guess-xx"},
    )
    assert response.status_code == 400

    # No cookie was set, so the client holds no session for the account
    assert client.get("/api/auth/me").status_code == 401
    assert client.delete("/api/auth/account").status_code == 401

    me = client.get("/api/auth/me", headers=bearer(org_b))
    assert me.status_code == 200
    assert me.json()["organization_id"] == org_b["organization_id"]

    members = client.get(f"/api/organizations/{org_a['organization_id']}/members", headers=bearer(org_a)).json()
    dana = next(member for member in members if member["user_id"] == org_b["user_id"])
    assert dana["is_accepted"] is False


def test_invite_into_other_organization_is_forbidden(client, org_a, org_b, headers_b):
    response = client.post(
        f"/api/organizations/{org_a['organization_id']}/invite",
        json={"email": "intruder@birchwood-fence.com", "role": "Admin"},
        headers=headers_b,
    )
    assert response.status_code == 403


def test_member_cannot_manage_members(client, org_a, crew_member):
    response = invite(client, crew_member, "friend@acme-fencing.com")
    assert response.status_code == 403


def test_update_role(client, org_a, headers_a, crew_member):
    response = client.put(
        f"{members_url(org_a)}/role",
        json={"user_id": crew_member["user_id"], "role": "Admin"},
        headers=headers_a,
    )
    assert response.status_code == 200

    me = client.get("/api/auth/me", headers=bearer(crew_member)).json()
    assert me["role"] == "Admin"


@pytest.mark.parametrize("role", ["Owner", "Superuser"])
def test_update_role_rejects_owner_and_unknown_roles(client, org_a, headers_a, crew_member, role):
    response = client.put(
        f"{members_url(org_a)}/role",
        json={"user_id": crew_member["user_id"], "role": role},
        headers=headers_a,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Failed to update role"


def test_owner_role_cannot_change(client, org_a, headers_a):
    response = client.put(
        f"{members_url(org_a)}/role",
        json={"user_id": org_a["user_id"], "role": "Member"},
        headers=headers_a,
    )
    assert response.status_code == 400


def test_remove_member(client, org_a, headers_a, crew_member):
    response = client.delete(f"{members_url(org_a)}/{crew_member['user_id']}", headers=headers_a)
    assert response.status_code == 200

    # The removed user no longer has an organization
    assert client.get("/api/jobs", headers=bearer(crew_member)).status_code == 401


def test_cannot_remove_owner(client, org_a, headers_a):
    response = client.delete(f"{members_url(org_a)}/{org_a['user_id']}", headers=headers_a)
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot remove the organization owner"


def test_remove_unknown_member(client, org_a, headers_a):
    response = client.delete(f"{members_url(org_a)}/no-such-user", headers=headers_a)
    assert response.status_code == 404


def test_seed_sample_data(client, org_a, headers_a, db_session):
    response = client.post("/api/organizations/seed-sample-data", headers=headers_a)
    assert response.status_code == 200
    assert response.json()["message"] == "Sample data seeded successfully"

    organization_id = org_a["organization_id"]
    assert db_session.query(Component).filter_by(organization_id=organization_id).count() == 5
    assert db_session.query(FenceType).filter_by(organization_id=organization_id).count() == 2
    assert db_session.query(GateType).filter_by(organization_id=organization_id).count() == 2
    assert db_session.query(TaxRegion).filter_by(organization_id=organization_id).count() == 2
    assert db_session.query(DiscountRule).filter_by(organization_id=organization_id).count() == 2

    config = db_session.query(PricingConfig).filter_by(organization_id=organization_id).one()
    assert config.is_default is True
    assert len(config.height_tiers) == 3

    privacy = db_session.query(FenceType).filter_by(name="6ft Privacy Fence").one()
    assert {link.component.sku for link in privacy.components} == {"POST-6X6-PT", "RAIL-2X4-PT", "PANEL-6FT-CEDAR"}


def test_seed_sample_data_only_once(client, headers_a):
    assert client.post("/api/organizations/seed-sample-data", headers=headers_a).status_code == 200

    response = client.post("/api/organizations/seed-sample-data", headers=headers_a)
    assert response.status_code == 400
    assert response.json()["error"] == "Sample data already exists for this organization"


def test_seed_keeps_existing_defaults(client, org_a, headers_a, db_session):
    client.post("/api/tax-regions", json={"name": "Oregon", "code": "OR", "is_default": True}, headers=headers_a)
    client.post("/api/discounts", json={"name": "Mine", "promo_code": "EARLY2024"}, headers=headers_a)

    assert client.post("/api/organizations/seed-sample-data", headers=headers_a).status_code == 200

    default_regions = db_session.query(TaxRegion).filter_by(
        organization_id=org_a["organization_id"], is_default=True
    ).all()
    assert [region.code for region in default_regions] == ["OR"]


def test_seed_requires_organization(client):
    assert client.post("/api/organizations/seed-sample-data").status_code == 401
