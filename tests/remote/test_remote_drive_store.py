import json
import threading
import unittest
from unittest.mock import Mock, patch

from googleapiclient.errors import HttpError

from gdrivesync.errors import (
    AccessDeniedError,
    AuthError,
    BucketNotFoundError,
    DeadlineExceeded,
    RateLimitError,
    ServiceError,
)
from gdrivesync.remote import DriveObjectStore, RemoteStore
from gdrivesync.remote.drive_store import _http_error_to_info
from gdrivesync.util.context import SyncContext


def _http_error(status: int, reason: str = "", message: str = "") -> HttpError:
    resp = Mock()
    resp.status = status
    resp.reason = reason or "error"
    body = {"error": {"message": message or f"HTTP {status}"}}
    if reason:
        body["error"]["errors"] = [{"domain": "global", "reason": reason}]
    return HttpError(resp=resp, content=json.dumps(body).encode("utf-8"))


def _service_with_get(result=None, side_effect=None):
    service = Mock()
    files_resource = Mock()
    request = Mock()
    service.files.return_value = files_resource
    files_resource.get.return_value = request
    if side_effect is not None:
        request.execute.side_effect = side_effect
    else:
        request.execute.return_value = result
    return service, files_resource, request


class TestHttpErrorToInfo(unittest.TestCase):
    def test_reason_from_payload(self) -> None:
        info = _http_error_to_info(_http_error(403, "rateLimitExceeded", "slow down"))
        self.assertEqual(info.status_code, 403)
        self.assertEqual(info.reason, "rateLimitExceeded")
        self.assertEqual(info.message, "slow down")
        self.assertEqual(info.details, {"domain": "global"})

    def test_non_json_content(self) -> None:
        resp = Mock()
        resp.status = 500
        resp.reason = "Internal Server Error"
        info = _http_error_to_info(HttpError(resp=resp, content=b"<html>oops</html>"))
        self.assertEqual(info.status_code, 500)
        self.assertEqual(info.reason, "Internal Server Error")
        self.assertIsNone(info.message)


class TestDriveObjectStore(unittest.TestCase):
    def setUp(self) -> None:
        self.ctx = SyncContext.background()

    def test_satisfies_protocol(self) -> None:
        self.assertIsInstance(DriveObjectStore(Mock()), RemoteStore)

    def test_check_exists_true(self) -> None:
        service, files_resource, _ = _service_with_get({"id": "F1", "trashed": False})
        store = DriveObjectStore(service)

        self.assertTrue(store.check_exists(self.ctx, "F1"))

        kwargs = files_resource.get.call_args.kwargs
        self.assertEqual(kwargs["fileId"], "F1")
        self.assertEqual(kwargs["fields"], "id,trashed")
        self.assertTrue(kwargs["supportsAllDrives"])

    def test_check_exists_404_is_false(self) -> None:
        service, _, _ = _service_with_get(side_effect=_http_error(404, "notFound"))
        self.assertFalse(DriveObjectStore(service).check_exists(self.ctx, "F1"))

    def test_check_exists_trashed_is_false(self) -> None:
        service, _, _ = _service_with_get({"id": "F1", "trashed": True})
        self.assertFalse(DriveObjectStore(service).check_exists(self.ctx, "F1"))

    def test_check_exists_maps_other_http_errors(self) -> None:
        cases = [
            (_http_error(401), AuthError),
            (_http_error(403, "insufficientPermissions"), AccessDeniedError),
            (_http_error(403, "userRateLimitExceeded"), RateLimitError),
            (_http_error(429), RateLimitError),
            (_http_error(503), ServiceError),
        ]
        for err, expected in cases:
            with self.subTest(expected=expected.__name__):
                service, _, _ = _service_with_get(side_effect=err)
                with self.assertRaises(expected) as cm:
                    DriveObjectStore(service).check_exists(self.ctx, "F1")
                self.assertIs(cm.exception.cause, err)

    def test_network_errors_propagate_unmapped(self) -> None:
        service, _, _ = _service_with_get(side_effect=ConnectionResetError("reset"))
        with self.assertRaises(ConnectionResetError):
            DriveObjectStore(service).check_exists(self.ctx, "F1")

    def test_hung_request_is_bounded_by_context(self) -> None:
        release = threading.Event()
        service, _, _ = _service_with_get(side_effect=lambda: release.wait(30))
        ctx = SyncContext.background().with_timeout(0.05)
        try:
            with self.assertRaises(DeadlineExceeded):
                DriveObjectStore(service).check_exists(ctx, "F1")
        finally:
            release.set()

    def test_hung_request_does_not_block_other_keys(self) -> None:
        release = threading.Event()
        service = Mock()
        files_resource = Mock()
        service.files.return_value = files_resource

        def get(fileId, **kwargs):
            request = Mock()
            if fileId == "SLOW":
                request.execute.side_effect = lambda: release.wait(30)
            else:
                request.execute.return_value = {"id": fileId, "trashed": False}
            return request

        files_resource.get.side_effect = get
        store = DriveObjectStore(service)
        try:
            with self.assertRaises(DeadlineExceeded):
                store.check_exists(SyncContext.background().with_timeout(0.05), "SLOW")
            ctx = SyncContext.background().with_timeout(5)
            self.assertTrue(store.check_exists(ctx, "F1"))
        finally:
            release.set()

    def test_http_factory_gives_each_thread_its_own_transport(self) -> None:
        service, _, request = _service_with_get({"id": "F1", "trashed": False})
        created = []
        lock = threading.Lock()

        def factory():
            http = object()
            with lock:
                created.append(http)
            return http

        store = DriveObjectStore(service, http_factory=factory)
        seen = []

        def call():
            store._run(request)
            seen.append(request.execute.call_args.kwargs["http"])

        for _ in range(2):
            call()
        worker = threading.Thread(target=call)
        worker.start()
        worker.join(5)

        self.assertEqual(len(created), 2)
        self.assertIs(seen[0], seen[1])
        self.assertIsNot(seen[0], seen[2])

    def test_check_exists_executes_on_factory_transport(self) -> None:
        service, _, request = _service_with_get({"id": "F1", "trashed": False})
        http = object()
        store = DriveObjectStore(service, http_factory=lambda: http)

        self.assertTrue(store.check_exists(self.ctx, "F1"))
        request.execute.assert_called_once_with(http=http)

    def test_connectivity_without_root_uses_about(self) -> None:
        service = Mock()
        about_resource = Mock()
        request = Mock()
        service.about.return_value = about_resource
        about_resource.get.return_value = request
        request.execute.return_value = {"user": {"emailAddress": "a@example.com"}}

        DriveObjectStore(service).test_connectivity(self.ctx)

        about_resource.get.assert_called_once_with(fields="user(emailAddress)")
        service.files.assert_not_called()

    def test_connectivity_with_root_checks_folder(self) -> None:
        service, files_resource, _ = _service_with_get({"id": "ROOT", "trashed": False})
        DriveObjectStore(service, root_folder_id="ROOT").test_connectivity(self.ctx)
        self.assertEqual(files_resource.get.call_args.kwargs["fileId"], "ROOT")

    def test_connectivity_missing_root_is_bucket_not_found(self) -> None:
        service, _, _ = _service_with_get(side_effect=_http_error(404))
        with self.assertRaises(BucketNotFoundError):
            DriveObjectStore(service, root_folder_id="ROOT").test_connectivity(self.ctx)

    def test_connectivity_trashed_root_is_bucket_not_found(self) -> None:
        service, _, _ = _service_with_get({"id": "ROOT", "trashed": True})
        with self.assertRaises(BucketNotFoundError):
            DriveObjectStore(service, root_folder_id="ROOT").test_connectivity(self.ctx)

    def test_from_token_file_builds_v3_service(self) -> None:
        creds = object()
        with patch("gdrivesync.remote.drive_store.load_credentials", return_value=creds) as load, \
                patch("gdrivesync.remote.drive_store.build", return_value="svc") as build:
            store = DriveObjectStore.from_token_file("token.json", root_folder_id="ROOT")

        load.assert_called_once_with("token.json", ["https://www.googleapis.com/auth/drive.readonly"])
        build.assert_called_once_with("drive", "v3", credentials=creds, cache_discovery=False)
        self.assertEqual(store.root_folder_id, "ROOT")

    def test_from_token_file_uses_authorized_http_per_thread(self) -> None:
        creds = object()
        with patch("gdrivesync.remote.drive_store.load_credentials", return_value=creds), \
                patch("gdrivesync.remote.drive_store.build", return_value=Mock()), \
                patch("gdrivesync.remote.drive_store.AuthorizedHttp") as authorized, \
                patch("gdrivesync.remote.drive_store.httplib2.Http") as raw_http:
            store = DriveObjectStore.from_token_file("token.json", http_timeout_sec=12)
            http = store._thread_http()

        raw_http.assert_called_once_with(timeout=12)
        authorized.assert_called_once_with(creds, http=raw_http.return_value)
        self.assertIs(http, authorized.return_value)

    def test_from_token_file_wraps_build_failure(self) -> None:
        with patch("gdrivesync.remote.drive_store.load_credentials", return_value=object()), \
                patch("gdrivesync.remote.drive_store.build", side_effect=RuntimeError("boom")):
            with self.assertRaises(AuthError):
                DriveObjectStore.from_token_file("token.json")


if __name__ == "__main__":
    unittest.main()
