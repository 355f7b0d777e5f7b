from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any, Iterable, Mapping
from urllib.parse import quote

from .base import BaseClient
from .errors import ApiError, BEditaClientError, FileError, ProtocolError, ValidationError
from .tokens import TokenPair

log = logging.getLogger(__name__)


def _join_ids(ids: Iterable[Any]) -> str:
    return ",".join(str(i) for i in ids)


def _resource_id(response: Mapping[str, Any] | None, what: str) -> str:
    data = (response or {}).get("data")
    if isinstance(data, dict) and data.get("id"):
        return str(data["id"])
    raise ProtocolError(f"Invalid response from {what}")


class BEditaClient(BaseClient):
    # --- auth ---
    def authenticate(self, username: str, password: str) -> dict[str, Any] | None:
        """Classic authentication via ``POST /auth``; tokens are in ``meta.jwt``/``meta.renew``."""
        # a stale bearer token must not travel with fresh credentials
        self.unset_authorization()
        body = {"username": username, "password": password, "grant_type": "password"}
        return self.post("/auth", body, {"Content-Type": "application/json"})

    def login(self, username: str, password: str) -> TokenPair:
        data = self.authenticate(username, password)
        meta = (data or {}).get("meta")
        if not isinstance(meta, dict) or not meta.get("jwt"):
            raise ProtocolError("Invalid response from server")
        self.set_tokens(TokenPair.from_meta(meta))
        return self.get_tokens()

    def logout(self) -> None:
        self.set_tokens(None)

    def auth_user(self) -> dict[str, Any] | None:
        return self.get("/auth/user")

    # --- objects ---
    def get_objects(
            self,
            type: str = "objects",
            query: Mapping[str, Any] | None = None,
            headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any] | None:
        return self.get(f"/{type}", query, headers)

    def get_object(
            self,
            id: int | str,
            type: str = "objects",
            query: Mapping[str, Any] | None = None,
            headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any] | None:
        return self.get(f"/{type}/{id}", query, headers)

    def save(self, type: str, data: Mapping[str, Any], headers: Mapping[str, str] | None = None):
        """Create an object (POST) or modify it (PATCH) when ``data`` holds an ``id``."""
        attributes = dict(data)
        id = attributes.pop("id", None)
        body: dict[str, Any] = {"data": {"type": type, "attributes": attributes}}
        if not id:
            return self.post(f"/{type}", body, headers)
        body["data"]["id"] = id
        return self.patch(f"/{type}/{id}", body, headers)

    def clone(
            self,
            type: str,
            id: int | str,
            attributes: Mapping[str, Any] | None = None,
            headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any] | None:
        body = {"data": {"type": type, "attributes": dict(attributes or {})}}
        return self.post(f"/{type}/{id}/actions/clone", body, headers)

    def bulk_edit(self, type: str, ids: Iterable[Any], attributes: Mapping[str, Any]) -> dict[str, list]:
        """Apply ``attributes`` to every object in ``ids``.

        Servers without ``/bulk/edit`` are handled by saving objects one by one;
        the result lists saved ids and per-id errors.
        """
        ids = [str(i) for i in ids]
        body = {"data": {"type": type, "ids": ids, "attributes": dict(attributes)}}
        try:
            self.post("/bulk/edit", body)
            return {"saved": ids, "errors": []}
        except BEditaClientError as exc:
            log.warning("bulk edit failed (%s), saving %d objects one by one", exc, len(ids))

        saved: list[str] = []
        errors: list[dict[str, Any]] = []
        for id in ids:
            try:
                self.save(type, {**attributes, "id": id})
            except ApiError as exc:
                errors.append({"id": id, "status": exc.status_code, "message": str(exc)})
                continue
            saved.append(id)
        return {"saved": saved, "errors": errors}

    # --- trash ---
    def delete_object(self, id: int | str, type: str = "objects") -> dict[str, Any] | None:
        """Move an object to the trashcan."""
        return self.delete(f"/{type}/{id}")

    def delete_objects(self, ids: Iterable[Any], type: str = "objects") -> dict[str, Any] | None:
        ids = list(ids)
        try:
            return self.delete(f"/{type}?ids={_join_ids(ids)}")
        except BEditaClientError as exc:
            log.warning("multiple delete failed (%s), deleting one by one", exc)
        response = None
        for id in ids:
            response = self.delete_object(id, type)
        return response

    def remove(self, id: int | str) -> dict[str, Any] | None:
        """Permanently remove an object from the trashcan."""
        return self.delete(f"/trash/{id}")

    def remove_objects(self, ids: Iterable[Any]) -> dict[str, Any] | None:
        ids = list(ids)
        try:
            return self.delete(f"/trash?ids={_join_ids(ids)}")
        except BEditaClientError as exc:
            log.warning("multiple remove failed (%s), removing one by one", exc)
        response = None
        for id in ids:
            response = self.remove(id)
        return response

    def restore_object(self, id: int | str, type: str = "objects") -> dict[str, Any] | None:
        body = {"data": {"id": id, "type": type}}
        return self.patch(f"/trash/{id}", body)

    def restore_objects(self, ids: Iterable[Any], type: str = "objects") -> dict[str, Any] | None:
        response = None
        for id in ids:
            response = self.restore_object(id, type)
        return response

    # --- relations ---
    def get_related(
            self,
            id: int | str,
            type: str,
            relation: str,
            query: Mapping[str, Any] | None = None,
            headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any] | None:
        return self.get(f"/{type}/{id}/{relation}", query, headers)

    def add_related(self, id: int | str, type: str, relation: str, data: list[dict[str, Any]],
                    headers: Mapping[str, str] | None = None) -> dict[str, Any] | None:
        return self.post(f"/{type}/{id}/relationships/{relation}", {"data": data}, headers)

    def remove_related(self, id: int | str, type: str, relation: str, data: list[dict[str, Any]],
                       headers: Mapping[str, str] | None = None) -> dict[str, Any] | None:
        return self.delete(f"/{type}/{id}/relationships/{relation}", {"data": data}, headers)

    def replace_related(self, id: int | str, type: str, relation: str, data: list[dict[str, Any]],
                        headers: Mapping[str, str] | None = None) -> dict[str, Any] | None:
        return self.patch(f"/{type}/{id}/relationships/{relation}", {"data": data}, headers)

    def relation_data(self, name: str) -> dict[str, Any] | None:
        query = {"include": "left_object_types,right_object_types"}
        return self.get(f"/model/relations/{name}", query)

    # --- model ---
    def schema(self, type: str) -> dict[str, Any] | None:
        return self.get(f"/model/schema/{type}", None, {"Accept": "application/schema+json"})

    # --- media ---
    def upload(self, filename: str, filepath: str | Path, headers: Mapping[str, str] | None = None):
        """Upload a local file as a new stream."""
        try:
            content = Path(filepath).read_bytes()
        except FileNotFoundError as exc:
            raise FileError("File not found") from exc
        except OSError as exc:
            raise FileError("File get contents failed") from exc

        headers = dict(headers or {})
        if not any(k.lower() == "content-type" for k in headers):
            mime, _ = mimetypes.guess_type(str(filepath))
            headers["Content-Type"] = mime or "application/octet-stream"
        return self.post(f"/streams/upload/{quote(filename)}", content, headers)

    def add_stream_to_media(self, stream_id: int | str, id: int | str, type: str) -> dict[str, Any]:
        path = f"/streams/{stream_id}/relationships/object"
        response = self.patch(path, {"data": {"id": id, "type": type}})
        if not response:
            raise ProtocolError(f"Invalid response from PATCH {path}")
        return response

    def create_media_from_stream(self, stream_id: int | str, type: str, body: Mapping[str, Any]):
        """Create a media object from ``body``, link the stream to it and return the media."""
        response = self.post(f"/{type}", dict(body))
        if not response:
            raise ProtocolError(f"Invalid response from POST /{type}")
        id = _resource_id(response, f"POST /{type}")
        self.add_stream_to_media(stream_id, id, type)
        return self.get_object(id, type)

    def create_media(self, filepath: str | Path, type: str, body: Mapping[str, Any]):
        filename = Path(filepath).name
        response = self.upload(filename, filepath)
        stream_id = _resource_id(response, f"POST /streams/upload/{filename}")
        return self.create_media_from_stream(stream_id, type, body)

    def thumbs(self, id: int | str | None = None, query: Mapping[str, Any] | None = None):
        query = dict(query or {})
        ids = query.get("ids")
        if isinstance(ids, (list, tuple)):
            query["ids"] = _join_ids(ids)
        if not id and not query.get("ids"):
            raise ValidationError("Invalid empty id|ids for thumbs")
        path = f"/media/thumbs/{id}" if id else "/media/thumbs"
        return self.get(path, query)
