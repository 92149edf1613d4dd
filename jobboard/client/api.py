"""HTTP client for the job board API, used by the persona and thread state."""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API, carrying its structured error body."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            error = response.json().get("error", {})
        except ValueError:
            error = {}
        return cls(
            response.status_code,
            error.get("code", "http_error"),
            error.get("message", response.reason_phrase),
            error.get("details"),
        )


class JobBoardClient:
    """
    One method per endpoint. Pass ``base_url`` to talk to a running server or
    ``http`` to reuse an existing ``httpx.Client`` (a FastAPI ``TestClient``
    works too).
    """

    def __init__(self, base_url: str = "http://localhost:8000", http: Optional[httpx.Client] = None):
        self.http = http or httpx.Client(base_url=base_url)

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        params = kwargs.pop("params", None)
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        response = self.http.request(method, path, **kwargs)
        if response.is_error:
            error = ApiError.from_response(response)
            logger.warning("%s %s failed: %s", method, path, error)
            raise error
        return response.json()

    # Personas
    def list_personas(self) -> Dict[str, Any]:
        return self._request("GET", "/personas")

    def create_persona(self, **fields) -> Dict[str, Any]:
        return self._request("POST", "/personas", json=fields)

    # Companies
    def list_companies(self, hiring_manager_id: Optional[int] = None) -> Dict[str, Any]:
        return self._request("GET", "/companies", params={"hiring_manager_id": hiring_manager_id})

    def create_company(self, **fields) -> Dict[str, Any]:
        return self._request("POST", "/companies", json=fields)

    # Roles
    def list_roles(self, **filters) -> Dict[str, Any]:
        return self._request("GET", "/roles", params=filters)

    def get_role(self, role_id: int, for_hm: bool = False) -> Dict[str, Any]:
        return self._request("GET", f"/roles/{role_id}", params={"for_hm": for_hm or None})

    def create_role(self, **fields) -> Dict[str, Any]:
        return self._request("POST", "/roles", json=fields)

    def update_role_status(self, role_id: int, status: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/roles/{role_id}", json={"status": status})

    # Applications
    def list_applications(self, **filters) -> Dict[str, Any]:
        return self._request("GET", "/applications", params=filters)

    def apply(self, role_id: int, candidate_id: int, cover_note: Optional[str] = None) -> Dict[str, Any]:
        payload = {"role_id": role_id, "candidate_id": candidate_id}
        if cover_note:
            payload["cover_note"] = cover_note
        return self._request("POST", "/applications", json=payload)

    def update_application_status(self, application_id: int, status: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/applications/{application_id}", json={"status": status})

    # Messages
    def get_thread(self, application_id: int) -> Dict[str, Any]:
        return self._request("GET", "/messages", params={"application_id": application_id})

    def list_threads(self, hiring_manager_id: Optional[int] = None, candidate_id: Optional[int] = None) -> Dict[str, Any]:
        return self._request(
            "GET",
            "/messages",
            params={"hiring_manager_id": hiring_manager_id, "candidate_id": candidate_id},
        )

    def send_message(self, application_id: int, content: str, sender_type: str, sender_id: int,
                     client_token: Optional[str] = None) -> Dict[str, Any]:
        payload = {"application_id": application_id, "content": content}
        if sender_type == "hiring-manager":
            payload["hiring_manager_id"] = sender_id
        else:
            payload["candidate_id"] = sender_id
        if client_token:
            payload["client_token"] = client_token
        return self._request("POST", "/messages", json=payload)

    # Candidates
    def get_candidate(self, candidate_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/candidates/{candidate_id}")

    def update_candidate(self, candidate_id: int, **fields) -> Dict[str, Any]:
        return self._request("PATCH", f"/candidates/{candidate_id}", json=fields)
