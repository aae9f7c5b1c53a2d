"""Google Drive backed remote store."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Optional, Sequence

import httplib2
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gdrivesync.errors import (
    AuthError,
    BucketNotFoundError,
    HttpErrorInfo,
    ObjectNotFoundError,
    map_http_error,
)
from gdrivesync.util.context import SyncContext, call_with_deadline

from .credentials import load_credentials
from .fields import DEFAULT_SCOPES, EXISTS_FIELDS, PROBE_FIELDS, ROOT_FIELDS

logger = logging.getLogger(__name__)

class DriveObjectStore:
    """
    Remote store whose object keys are Drive file ids.

    Notes:
        - A trashed file counts as absent.
        - With root_folder_id set, the connectivity probe also checks that
          the folder is reachable; without it, the probe reads about().get.
        - httplib2 transports are not thread-safe. With http_factory set, each
          worker thread executes requests on its own transport, so a hung
          request never blocks the others.
    """

    def __init__(
        self,
        service: Any,
        *,
        root_folder_id: Optional[str] = None,
        supports_all_drives: bool = True,
        http_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self._service = service
        self._root_folder_id = root_folder_id
        self._supports_all_drives = supports_all_drives
        self._http_factory = http_factory
        self._local = threading.local()

    @classmethod
    def from_token_file(
        cls,
        token_file: str,
        *,
        scopes: Optional[Sequence[str]] = None,
        root_folder_id: Optional[str] = None,
        supports_all_drives: bool = True,
        http_timeout_sec: float = 60.0,
    ) -> DriveObjectStore:
        """
        Build the Drive v3 service from an authorized-user token file.

        Every worker thread gets its own authorized httplib2 transport.
        """
        use_scopes = list(scopes) if scopes is not None else list(DEFAULT_SCOPES)
        creds = load_credentials(token_file, use_scopes)
        try:
            service = build("drive", "v3", credentials=creds, cache_discovery=False)
        except Exception as exc:
            raise AuthError("Failed to build Drive service", cause=exc) from exc
        return cls(
            service,
            root_folder_id=root_folder_id,
            supports_all_drives=supports_all_drives,
            http_factory=lambda: AuthorizedHttp(
                creds, http=httplib2.Http(timeout=http_timeout_sec)
            ),
        )

    @property
    def root_folder_id(self) -> Optional[str]:
        return self._root_folder_id

    # ----------------------------
    # RemoteStore
    # ----------------------------
    def check_exists(self, ctx: SyncContext, key: str) -> bool:
        req = self._service.files().get(
            fileId=key,
            fields=EXISTS_FIELDS,
            supportsAllDrives=self._supports_all_drives,
        )
        try:
            data = self._execute(ctx, req)
        except ObjectNotFoundError:
            logger.debug("Object %s not found", key)
            return False

        if data.get("trashed"):
            logger.debug("Object %s is trashed", key)
            return False
        return True

    def test_connectivity(self, ctx: SyncContext) -> None:
        if self._root_folder_id is None:
            req = self._service.about().get(fields=PROBE_FIELDS)
            self._execute(ctx, req)
            return

        req = self._service.files().get(
            fileId=self._root_folder_id,
            fields=ROOT_FIELDS,
            supportsAllDrives=self._supports_all_drives,
        )
        try:
            data = self._execute(ctx, req)
        except ObjectNotFoundError as exc:
            raise BucketNotFoundError(
                "Root folder not found",
                details={"root_folder_id": self._root_folder_id},
                cause=exc,
            ) from exc

        if data.get("trashed"):
            raise BucketNotFoundError(
                "Root folder is trashed",
                details={"root_folder_id": self._root_folder_id},
            )

    # ----------------------------
    # Internals
    # ----------------------------
    def _execute(self, ctx: SyncContext, req: Any) -> Any:
        try:
            return call_with_deadline(ctx, self._run, req)
        except HttpError as exc:
            raise map_http_error(_http_error_to_info(exc), cause=exc) from exc

    def _run(self, req: Any) -> Any:
        # Runs on a remote pool worker; the transport is per worker thread.
        http = self._thread_http()
        if http is None:
            return req.execute()
        return req.execute(http=http)

    def _thread_http(self) -> Any:
        if self._http_factory is None:
            return None
        http = getattr(self._local, "http", None)
        if http is None:
            http = self._http_factory()
            self._local.http = http
        return http


def _http_error_to_info(exc: HttpError) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None
        err = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if isinstance(status_code, str) and status_code.isdigit():
        status_code = int(status_code)
    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
