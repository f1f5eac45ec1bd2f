import pytest
from fastapi.testclient import TestClient

from account_verifier.banks import BankDirectory, get_bank_directory
from account_verifier.codec import tokenize_row
from account_verifier.errors import VerificationServiceError
from account_verifier.main import app, get_verifier
from account_verifier.models import AccountDetails, BankData, VerificationResult

HEADER = "beneficiaryName,bankName,accountNumber,bvn"

client = TestClient(app)


async def fake_verifier(details: AccountDetails) -> VerificationResult:
    if details.bvn.startswith("9"):
        raise VerificationServiceError("The verification service is currently unavailable. Please try again later.")
    if details.accountNumber.startswith("1"):
        return VerificationResult(success=False, message="Invalid account number.", data=details)
    return VerificationResult(success=True, message="Account details verified successfully.", data=details)


async def fake_banks():
    return [BankData(name="Zenith Bank", sortCode="057150013"), BankData(name="Access Bank", sortCode="044150149")]


@pytest.fixture(autouse=True)
def overrides():
    app.dependency_overrides[get_verifier] = lambda: fake_verifier
    app.dependency_overrides[get_bank_directory] = lambda: BankDirectory(loader=fake_banks)
    yield
    app.dependency_overrides.clear()


def upload(text, filename="accounts.csv", encoding="utf-8"):
    files = {"file": (filename, text.encode(encoding), "text/csv")}
    return client.post("/verify/bulk", files=files)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_banks_sorted_by_name():
    r = client.get("/banks")
    assert r.status_code == 200
    assert [b["name"] for b in r.json()] == ["Access Bank", "Zenith Bank"]


def test_bank_statuses_cover_every_bank():
    r = client.get("/banks/status")
    assert r.status_code == 200
    data = r.json()
    assert [s["name"] for s in data] == ["Access Bank", "Zenith Bank"]
    assert {s["status"] for s in data} <= {"Operational", "Degraded Performance", "Offline"}


def test_verify_single_success():
    body = {"beneficiaryName": "Ada Obi", "bankName": "Zenith Bank", "accountNumber": "0123456789", "bvn": "22345678901"}
    r = client.post("/verify", json=body)
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["data"]["accountNumber"] == "0123456789"


def test_verify_single_service_failure_keeps_submitted_details():
    body = {"beneficiaryName": "Ada Obi", "bankName": "Zenith Bank", "accountNumber": "0123456789", "bvn": "92345678901"}
    r = client.post("/verify", json=body)
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is False
    assert "unavailable" in data["message"]
    assert data["data"]["bvn"] == "92345678901"


@pytest.mark.parametrize("error, message", [
    (RuntimeError("upstream timed out"), "upstream timed out"),
    (RuntimeError(), "An unknown error occurred during verification."),
])
def test_verify_single_unexpected_error_becomes_failed_result(error, message):
    async def broken_verifier(details):
        raise error

    app.dependency_overrides[get_verifier] = lambda: broken_verifier
    body = {"beneficiaryName": "Ada Obi", "bankName": "Zenith Bank", "accountNumber": "0123456789", "bvn": "22345678901"}
    r = client.post("/verify", json=body)
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is False
    assert data["message"] == message
    assert data["data"]["accountNumber"] == "0123456789"


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("accountNumber", "12345", "Account number must be 10 digits."),
        ("bvn", "1234567890a", "BVN must be 11 digits."),
        ("beneficiaryName", "   ", "Beneficiary name is required."),
    ],
)
def test_verify_single_form_validation(field, value, message):
    body = {"beneficiaryName": "Ada Obi", "bankName": "Zenith Bank", "accountNumber": "0123456789", "bvn": "22345678901"}
    body[field] = value
    r = client.post("/verify", json=body)
    assert r.status_code == 422
    assert message in r.text


def test_bulk_verify_keeps_input_order_and_isolates_failures():
    text = "\n".join([
        HEADER,
        "Ada Obi,Zenith Bank,0123456789,22345678901",
        "Bola Ade,Access Bank,1123456789,22345678901",
        "Chi Eze,Wema Bank,0223456789,92345678901",
    ])
    r = upload(text)
    assert r.status_code == 200
    data = r.json()
    assert data["summary"] == {"total": 3, "succeeded": 1, "failed": 2}
    assert [res["data"]["beneficiaryName"] for res in data["results"]] == ["Ada Obi", "Bola Ade", "Chi Eze"]
    assert [res["success"] for res in data["results"]] == [True, False, False]
    assert "unavailable" in data["results"][2]["message"]


def test_bulk_verify_strips_utf8_bom():
    text = HEADER + "\nAda Obi,Zenith Bank,0123456789,22345678901\n"
    r = upload(text, encoding="utf-8-sig")
    assert r.status_code == 200
    assert r.json()["summary"]["total"] == 1


def test_bulk_rejects_non_csv():
    r = upload(HEADER, filename="accounts.txt")
    assert r.status_code == 422


def test_bulk_rejects_undecodable_bytes():
    files = {"file": ("accounts.csv", bytes(range(256)) * 4, "text/csv")}
    r = client.post("/verify/bulk", files=files)
    assert r.status_code == 422
    assert r.json() == {"detail": "Failed to read the file."}


def test_bulk_rejects_empty_file():
    files = {"file": ("accounts.csv", b"", "text/csv")}
    r = client.post("/verify/bulk", files=files)
    assert r.status_code == 422
    assert r.json() == {"detail": "Could not read the file."}


def test_bulk_rejects_header_only():
    r = upload(HEADER + "\n\n")
    assert r.status_code == 422
    assert r.json()["detail"] == "CSV file is empty or contains only a header."


def test_bulk_rejects_duplicates():
    text = "\n".join([
        HEADER,
        "Ada Obi,Zenith Bank,0123456789,22345678901",
        "Someone Else,ZENITH BANK ,0123456789,23345678901",
    ])
    r = upload(text)
    assert r.status_code == 422
    assert "Account 0123456789 at Zenith Bank" in r.json()["detail"]


def test_export_all_quotes_message_with_comma():
    results = [
        {"success": False, "message": "Invalid account number, please check.", "data": {
            "beneficiaryName": "Ada Obi", "bankName": "Zenith Bank", "accountNumber": "0123456789", "bvn": "22345678901"}},
    ]
    r = client.post("/export/all", json={"results": results})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert 'filename="all_verification_results.csv"' in r.headers["content-disposition"]

    lines = r.text.split("\n")
    assert lines[0] == "beneficiaryName,bankName,accountNumber,bvn,status,message"
    assert tokenize_row(lines[1])[-2:] == ["Failed", "Invalid account number, please check."]


def test_export_successful_only_includes_verified_records():
    results = [
        {"success": True, "message": "ok", "data": {
            "beneficiaryName": "Obi, Ada", "bankName": "Zenith Bank", "accountNumber": "0123456789", "bvn": "22345678901"}},
        {"success": False, "message": "Invalid account number.", "data": {
            "beneficiaryName": "Bola Ade", "bankName": "Access Bank", "accountNumber": "1123456789", "bvn": "22345678901"}},
    ]
    r = client.post("/export/successful", json={"results": results})
    assert r.status_code == 200
    assert 'filename="successful_verifications.csv"' in r.headers["content-disposition"]
    assert r.text == HEADER + "\nObi, Ada,Zenith Bank,0123456789,22345678901"


def test_export_with_nothing_to_export():
    r = client.post("/export/successful", json={"results": [{"success": False, "message": "no", "data": None}]})
    assert r.status_code == 404
    r = client.post("/export/all", json={"results": []})
    assert r.status_code == 404
