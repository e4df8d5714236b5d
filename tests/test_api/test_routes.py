"""Tests for the HTTP API.

Runs the real application lifespan (ledger database in a temp directory)
through FastAPI's TestClient.
"""

import zipfile
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from stakeledger.api.app import create_app
from stakeledger.config import AppSettings
from stakeledger.data.spreadsheet import read_sheet_rows, write_sheet_rows
from stakeledger.main import lifespan

ROWS = [
    ["Tx", "Block", "Wallet", "Token", "Side", "Date", "Amount"],
    ["t1", 1, "0xaaa", "RUNE", "buy", "2024-05-01 10:00:00", 100],
    ["t2", 2, "0xaaa", "RUNE", "buy", "2024-05-02 10:00:00", 200],
    ["t3", 3, "0xbbb", "RUNE", "sell", 45505, "12.5"],
    ["t4", 4, "0xccc", "RUNE", "sell", "2024-05-02 10:00:00", "N/A"],
]


@pytest.fixture
def client(app_settings: AppSettings) -> Iterator[TestClient]:
    """TestClient with the lifespan wired to temp-directory settings."""
    app = create_app(lifespan=lifespan)
    app.state.settings = app_settings
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def input_workbook(app_settings: AppSettings) -> str:
    write_sheet_rows(app_settings.batch.input_path, ROWS)
    return app_settings.batch.input_path


class TestProcessWallets:
    def test_runs_batch_and_writes_export(
        self, client: TestClient, input_workbook: str, app_settings: AppSettings
    ) -> None:
        response = client.get("/get-wallets")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Wallets processed and saved successfully"
        assert body["wallets"] == [
            ["0xaaa", "150.00", "300.00", "soldBeforeJune17"],
            ["0xbbb", "6.25", "12.50", "purchasedAfterJuly22"],
        ]

        exported = read_sheet_rows(body["excelFilePath"])
        assert len(exported) == 3
        assert exported[0][0] == "Wallet Address"

    def test_missing_input_returns_500(self, client: TestClient) -> None:
        response = client.get("/get-wallets")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process wallets"}

    def test_unrepresentable_amount_returns_500(
        self, client: TestClient, app_settings: AppSettings
    ) -> None:
        write_sheet_rows(app_settings.batch.input_path, [
            ROWS[0],
            ["t1", 1, "0xaaa", "RUNE", "buy", "2024-05-01 10:00:00", "1e100"],
            ["t2", 2, "0xaaa", "RUNE", "buy", "2024-05-01 10:00:00", "1e-100"],
        ])

        response = client.get("/get-wallets")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process wallets"}
        assert client.get("/api/wallets").json() == []

    def test_corrupt_worksheet_returns_500(
        self, client: TestClient, input_workbook: str
    ) -> None:
        with zipfile.ZipFile(input_workbook) as archive:
            parts = {name: archive.read(name) for name in archive.namelist()}
        parts["xl/worksheets/sheet1.xml"] = b"<worksheet><sheetData><row"
        with zipfile.ZipFile(input_workbook, "w") as archive:
            for name, data in parts.items():
                archive.writestr(name, data)

        response = client.get("/get-wallets")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process wallets"}


class TestWalletEndpoints:
    def test_list_wallets(self, client: TestClient, input_workbook: str) -> None:
        client.get("/get-wallets")
        response = client.get("/api/wallets")

        assert response.status_code == 200
        wallets = {w["walletAddress"]: w for w in response.json()}
        assert set(wallets) == {"0xaaa", "0xbbb"}
        assert wallets["0xaaa"]["rewardAmount"] == "300"
        assert wallets["0xaaa"]["stakingAmount"] == "150.00"
        assert wallets["0xaaa"]["staking"] == []

    def test_list_wallets_empty(self, client: TestClient) -> None:
        response = client.get("/api/wallets")
        assert response.status_code == 200
        assert response.json() == []

    def test_wallet_category(self, client: TestClient, input_workbook: str) -> None:
        client.get("/get-wallets")
        client.get("/get-wallets")

        response = client.get("/api/wallet-category/0xbbb")
        assert response.status_code == 200
        body = response.json()
        assert body["category"] == "purchasedAfterJuly22"
        assert body["rewardAmount"] == "25.0"
        assert len(body["staking"]) == 1
        entry = body["staking"][0]
        assert entry["kind"] == "derived"
        assert entry["ruleApplied"] == "Rule 3: purchasedAfterJuly22"
        assert entry["stakingAmount"] == "6.25"

    def test_wallet_category_not_found(self, client: TestClient) -> None:
        response = client.get("/api/wallet-category/0xnope")
        assert response.status_code == 404
        assert response.json() == {"error": "Wallet not found"}


class TestManualStaking:
    def test_add_staking(self, client: TestClient, input_workbook: str) -> None:
        client.get("/get-wallets")

        response = client.post("/api/wallet-staking/0xaaa", json={
            "stakedAmount": 1000,
            "APR": "0.12",
            "LockDate": "2024-09-01",
            "MaxUnlockDate": "2025-09-01",
            "RewardsNow": "3",
            "RewardsMUD": "4",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Staking details added successfully"
        entry = body["wallet"]["staking"][-1]
        assert entry == {
            "kind": "manual",
            "stakedAmount": "1000",
            "APR": "0.12",
            "LockDate": "2024-09-01",
            "MaxUnlockDate": "2025-09-01",
            "RewardsNow": "3",
            "RewardsMUD": "4",
        }

        records = client.get("/api/staking-data").json()
        assert len(records) == 1
        assert records[0]["walletAddress"] == "0xaaa"
        assert records[0]["aprDaily"] == "0.12"
        assert records[0]["stakedAmount"] == "1000"

    def test_add_staking_unknown_wallet(self, client: TestClient) -> None:
        response = client.post("/api/wallet-staking/0xnope", json={"stakedAmount": "1"})
        assert response.status_code == 404
        assert client.get("/api/staking-data").json() == []

    def test_invalid_json(self, client: TestClient, input_workbook: str) -> None:
        client.get("/get-wallets")
        response = client.post(
            "/api/wallet-staking/0xaaa",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400

    def test_non_object_body(self, client: TestClient, input_workbook: str) -> None:
        client.get("/get-wallets")
        response = client.post("/api/wallet-staking/0xaaa", json=["1000"])
        assert response.status_code == 400
