import uuid
from decimal import Decimal

import pytest
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient

from api.dependencies import get_attachment_repository
from core.exceptions import business_code_to_http_status, register_exception_handlers
from domain.common.exceptions import (
    DuplicateResourceException,
    FileStorageException,
    InvalidOperationException,
    ResourceNotFoundException,
    SegmentAmountExceedsExpenseException,
)
from infrastructure.repositories.attachment_repository import InMemoryAttachmentRepository
from main import create_app
from shared.codes import BusinessCode


@pytest.fixture
def client(upload_root):
    app = create_app(str(upload_root))
    repository = InMemoryAttachmentRepository()
    app.dependency_overrides[get_attachment_repository] = lambda: repository
    with TestClient(app) as c:
        yield c


def _upload(client, expense_id="exp-1", name="invoice.pdf", body=b"%PDF-1.4 data", ctype="application/pdf"):
    return client.post(
        f"/api/v1/expenses/{expense_id}/attachments",
        files={"file": (name, body, ctype)},
    )


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "healthy"


def test_upload_list_download_delete(client, upload_root):
    resp = _upload(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["code"] == BusinessCode.SUCCESS
    attachment = body["data"]
    assert attachment["original_filename"] == "invoice.pdf"
    assert attachment["file_size"] == len(b"%PDF-1.4 data")
    assert attachment["uploaded_at"].endswith("Z")
    assert len(list((upload_root / "exp-1").iterdir())) == 1

    listing = client.get("/api/v1/expenses/exp-1/attachments").json()["data"]
    assert [a["id"] for a in listing] == [attachment["id"]]

    download = client.get(f"/api/v1/expenses/exp-1/attachments/{attachment['id']}")
    assert download.status_code == 200
    assert download.content == b"%PDF-1.4 data"
    assert download.headers["content-type"] == "application/pdf"
    assert download.headers["content-disposition"] == 'attachment; filename="invoice.pdf"'

    deleted = client.delete(f"/api/v1/expenses/exp-1/attachments/{attachment['id']}")
    assert deleted.status_code == 204
    assert list((upload_root / "exp-1").iterdir()) == []
    assert client.get("/api/v1/expenses/exp-1/attachments").json()["data"] == []


def test_download_unknown_attachment_is_404(client):
    missing = uuid.uuid4()
    resp = client.get(f"/api/v1/expenses/exp-1/attachments/{missing}")
    assert resp.status_code == 404
    body = resp.json()
    assert body["message"] == f"Attachment not found with id: {missing}"
    assert body["error"]["type"] == "ResourceNotFound"
    assert body["error"]["status"] == 404
    assert body["error"]["path"] == f"/api/v1/expenses/exp-1/attachments/{missing}"


def test_rejected_upload_is_400(client):
    resp = _upload(client, name="virus.exe", ctype="application/x-msdownload")
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("File type not allowed")


def test_missing_file_field_is_400(client):
    resp = client.post("/api/v1/expenses/exp-1/attachments", data={"other": "x"})
    assert resp.status_code == 400
    assert resp.json()["error"]["type"] == "ValidationError"


def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert resp.headers["X-Request-ID"] == "req-42"


def test_error_envelope_carries_request_id(client):
    resp = client.get(f"/api/v1/expenses/exp-1/attachments/{uuid.uuid4()}", headers={"X-Request-ID": "req-7"})
    assert resp.status_code == 404
    assert resp.json()["error"]["request_id"] == "req-7"


def test_nul_byte_in_expense_id_is_400(client, upload_root):
    resp = _upload(client, expense_id="exp%00")
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("Invalid expense id")
    assert list(upload_root.iterdir()) == []


@pytest.mark.parametrize(
    "code, status",
    [
        (BusinessCode.RESOURCE_ALREADY_EXISTS, 409),
        (BusinessCode.NOT_FOUND, 404),
        (BusinessCode.INVALID_OPERATION, 400),
        (BusinessCode.SEGMENT_VALIDATION_ERROR, 400),
        (BusinessCode.STORAGE_ERROR, 400),
        (BusinessCode.SYSTEM_ERROR, 500),
        (99999, 400),
    ],
)
def test_business_code_to_http_status(code, status):
    assert business_code_to_http_status(code) == status


def _raising_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    router = APIRouter()

    errors = {
        "duplicate": DuplicateResourceException("Category", "name", "Travel"),
        "missing": ResourceNotFoundException("Expense", "abc-123"),
        "invalid": InvalidOperationException("Expense already approved"),
        "segment": SegmentAmountExceedsExpenseException(Decimal("150.00"), Decimal("100.00")),
        "storage": FileStorageException("Could not store file: a.pdf"),
    }

    @router.get("/raise/{kind}")
    async def raise_kind(kind: str):
        if kind == "boom":
            raise RuntimeError("boom")
        raise errors[kind]

    app.include_router(router)
    return app


@pytest.mark.parametrize(
    "kind, status, message",
    [
        ("duplicate", 409, "Category with name 'Travel' already exists"),
        ("missing", 404, "Expense not found with id: abc-123"),
        ("invalid", 400, "Expense already approved"),
        ("segment", 400, "Segment amount (150.00) exceeds expense amount (100.00)"),
        ("storage", 400, "Could not store file: a.pdf"),
    ],
)
def test_business_exceptions_are_translated_once(kind, status, message):
    client = TestClient(_raising_app())
    resp = client.get(f"/raise/{kind}")
    assert resp.status_code == status
    assert resp.json()["message"] == message
    assert resp.json()["data"] is None


def test_unhandled_exception_is_500():
    client = TestClient(_raising_app(), raise_server_exceptions=False)
    resp = client.get("/raise/boom")
    assert resp.status_code == 500
    assert resp.json()["message"] == "An unexpected error occurred"
