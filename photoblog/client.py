from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Optional

import requests

from photoblog.dates import is_display_date, to_display_date, weekday_for


class ApiError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _display_date(value: str) -> str:
    """Normalize to "15/May/2024", as the admin form does before sending."""
    shown = to_display_date(value)
    if not is_display_date(shown):
        raise ValueError(
            "Date must be in format: dd/month/yyyy (e.g., 15/May/2024)"
        )
    return shown


@dataclass(frozen=True)
class ApiSettings:
    base_url: str
    timeout_s: float = 10.0
    token: Optional[str] = None


class PhotoBlogClient:
    """HTTP client for the photo blog API (the frontend's data layer)."""

    def __init__(
        self,
        settings: ApiSettings,
        session: requests.Session | None = None,
    ):
        self.settings = settings
        self._session = session or requests.Session()
        self._log = logging.getLogger("client")
        self._token: Optional[str] = None
        if settings.token:
            self.set_token(settings.token)

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token.strip() if token else None
        if self._token:
            self._session.headers.update(
                {"Authorization": f"Bearer {self._token}"}
            )
        else:
            self._session.headers.pop("Authorization", None)

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return self.settings.base_url.rstrip("/") + path

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        try:
            resp = self._session.request(
                method, url, timeout=self.settings.timeout_s, **kwargs
            )
        except requests.RequestException as e:
            raise ApiError(f"API request failed: {method} {url}: {e}") from e

        if resp.status_code >= 400:
            try:
                message = resp.json().get("message") or resp.text
            except ValueError:
                message = resp.text
            self._log.warning(
                "API %s %s failed: %s %s",
                method,
                path,
                resp.status_code,
                message,
            )
            raise ApiError(message, status_code=resp.status_code)
        return resp.json()

    # ---- Auth ----

    def init_admin(self, username: str, password: str, secret_key: str) -> int:
        data = self._request(
            "POST",
            "/api/init-admin",
            json={
                "username": username,
                "password": password,
                "secretKey": secret_key,
            },
        )
        return int(data["adminId"])

    def login(self, username: str, password: str) -> dict:
        data = self._request(
            "POST",
            "/api/login",
            json={"username": username, "password": password},
        )
        self.set_token(data["token"])
        return data["admin"]

    def logout(self) -> None:
        self.set_token(None)

    def verify_token(self) -> bool:
        if not self._token:
            return False
        try:
            self._request("GET", "/api/me")
        except ApiError as e:
            if e.status_code == 401:
                self.set_token(None)
                return False
            raise
        return True

    # ---- Photos ----

    def list_photos(self) -> list[dict]:
        return self._request("GET", "/api/photos")

    def get_photo(self, photo_id: int) -> dict:
        return self._request("GET", f"/api/photos/{int(photo_id)}")

    def upload_photo(
        self,
        photo: str | Path | BinaryIO,
        *,
        title: str,
        description: str,
        date: str,
        day: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> dict:
        date = _display_date(date)
        form = {
            "title": title,
            "description": description,
            "date": date,
            "day": day or weekday_for(date),
        }
        if isinstance(photo, (str, Path)):
            path = Path(photo)
            with path.open("rb") as fh:
                files = {"photo": (filename or path.name, fh)}
                data = self._request(
                    "POST", "/api/photos", data=form, files=files
                )
        else:
            name = filename or Path(getattr(photo, "name", "photo.jpg")).name
            files = {"photo": (name, photo)}
            data = self._request("POST", "/api/photos", data=form, files=files)
        return data["photo"]

    def update_photo(
        self,
        photo_id: int,
        *,
        title: str,
        description: str,
        date: str,
        day: Optional[str] = None,
    ) -> dict:
        # The server stores a missing day as null, so the whole form is sent.
        date = _display_date(date)
        day = day or weekday_for(date)
        data = self._request(
            "PUT",
            f"/api/photos/{int(photo_id)}",
            json={
                "title": title,
                "description": description,
                "date": date,
                "day": day,
            },
        )
        return data["photo"]

    def delete_photo(self, photo_id: int) -> str:
        data = self._request("DELETE", f"/api/photos/{int(photo_id)}")
        return data["message"]
