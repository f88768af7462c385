"""
Authentication and organization clients.

AuthClient keeps the session on its httpx.Client: the auth cookie is
stored by httpx, and the bearer header is set after register/login so
non-browser callers work too.
"""
from typing import Optional

from fencemark.clients.base import BaseClient
from fencemark.schemas.auth import AuthResponse, CurrentUserResponse, LoginRequest, RegisterRequest
from fencemark.schemas.organization import (
    AcceptInvitationRequest,
    InviteRequest,
    InviteResponse,
    MemberResponse,
    UpdateRoleRequest,
)


class AuthClient(BaseClient):

    def _signed_in(self, response) -> Optional[AuthResponse]:
        auth = self._parse(response, AuthResponse)
        if auth is not None:
            self.http.headers["Authorization"] = f"Bearer {auth.access_token}"
        return auth

    def register(self, email: str, password: str, organization_name: str) -> Optional[AuthResponse]:
        request = RegisterRequest(email=email, password=password, organization_name=organization_name)
        return self._signed_in(
            self._request("POST", "/api/auth/register", json=request.model_dump(mode="json"))
        )

    def login(self, email: str, password: str) -> Optional[AuthResponse]:
        request = LoginRequest(email=email, password=password)
        return self._signed_in(
            self._request("POST", "/api/auth/login", json=request.model_dump(mode="json"))
        )

    def logout(self) -> bool:
        ok = self._request("POST", "/api/auth/logout") is not None
        self.http.headers.pop("Authorization", None)
        self.http.cookies.clear()
        return ok

    def me(self) -> Optional[CurrentUserResponse]:
        return self._parse(self._request("GET", "/api/auth/me"), CurrentUserResponse)


class OrganizationClient(BaseClient):

    def get_members(self, organization_id: str) -> Optional[list[MemberResponse]]:
        return self._parse(
            self._request("GET", f"/api/organizations/{organization_id}/members"),
            list[MemberResponse]
        )

    def invite(self, organization_id: str, email: str, role: str) -> Optional[InviteResponse]:
        request = InviteRequest(email=email, role=role)
        response = self._request(
            "POST", f"/api/organizations/{organization_id}/invite", json=request.model_dump(mode="json")
        )
        return self._parse(response, InviteResponse)

    def accept_invitation(self, token: str, password: str) -> Optional[AuthResponse]:
        request = AcceptInvitationRequest(token=token, password=password)
        response = self._request(
            "POST", "/api/organizations/accept-invitation", json=request.model_dump(mode="json")
        )
        return self._parse(response, AuthResponse)

    def update_role(self, organization_id: str, user_id: str, role: str) -> bool:
        request = UpdateRoleRequest(user_id=user_id, role=role)
        response = self._request(
            "PUT", f"/api/organizations/{organization_id}/members/role", json=request.model_dump(mode="json")
        )
        return response is not None

    def remove_member(self, organization_id: str, user_id: str) -> bool:
        response = self._request("DELETE", f"/api/organizations/{organization_id}/members/{user_id}")
        return response is not None

    def seed_sample_data(self) -> bool:
        return self._request("POST", "/api/organizations/seed-sample-data") is not None
