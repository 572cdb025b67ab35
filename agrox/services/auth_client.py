"""
Auth service (GoTrue) REST client
Handles password sign-in, sign-up, sign-out and the admin user listing
"""
import httpx
from typing import Optional, Dict, List, Any
from ..config import settings


class AuthClient:
    """Client for the hosted auth service"""

    def __init__(self, base_url: Optional[str] = None, anon_key: Optional[str] = None, service_key: Optional[str] = None):
        self.base_url = f"{(base_url or settings.supabase_url).rstrip('/')}/auth/v1"
        self.anon_key = anon_key or settings.supabase_anon_key or ""
        self.service_key = service_key or settings.supabase_service_role_key

    def _request(self, method: str, endpoint: str, token: Optional[str] = None, admin: bool = False, **kwargs) -> Any:
        """Make HTTP request to the auth API"""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        key = self.service_key if admin else self.anon_key
        headers = {"apikey": key or ""}
        if token or admin:
            headers["Authorization"] = f"Bearer {token or key}"
        headers.update(kwargs.pop("headers", {}))

        with httpx.Client(timeout=30.0) as client:
            response = client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()

    def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Returns the session payload (access_token, refresh_token, user)."""
        return self._request(
            "POST", "token", params={"grant_type": "password"}, json={"email": email, "password": password}
        )

    def sign_up(self, email: str, password: str, first_name: Optional[str] = None, last_name: Optional[str] = None) -> Dict[str, Any]:
        return self._request(
            "POST",
            "signup",
            json={
                "email": email,
                "password": password,
                "data": {"first_name": first_name or "", "last_name": last_name or ""},
            },
        )

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "logout", token=access_token)

    def admin_list_users(self, page: int = 1, per_page: int = 200) -> List[Dict[str, Any]]:
        if not self.service_key:
            raise ValueError("SUPABASE_SERVICE_ROLE_KEY is required")
        data = self._request("GET", "admin/users", admin=True, params={"page": page, "per_page": per_page})
        return (data or {}).get("users", [])


def get_auth_client() -> AuthClient:
    return AuthClient()
