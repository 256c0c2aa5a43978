import sys
import os
import random
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from engine import LedgerEngine
from ledger import Ledger
from models import Transaction, TransactionType


class TestLedgerEngineLargeScale:
    def test_1000_accounts_6000_transactions(self, tmp_path):
        """Test with 1000 accounts and 6000 transactions."""
        num_clients = 1000
        rows = ["type, client, tx, amount"]
        tx_id = 1

        # Each client gets: 3 deposits (100, 200, 300) and 2 withdrawals (50, 100)
        # Expected per client: 100 + 200 + 300 - 50 - 100 = 450, plus 50 more below = 500

        for client_id in range(1, num_clients + 1):
            rows.append(f"deposit, {client_id}, {tx_id}, 100")
            tx_id += 1
            rows.append(f"deposit, {client_id}, {tx_id}, 200")
            tx_id += 1
            rows.append(f"deposit, {client_id}, {tx_id}, 300")
            tx_id += 1
            rows.append(f"withdrawal, {client_id}, {tx_id}, 50")
            tx_id += 1
            rows.append(f"withdrawal, {client_id}, {tx_id}, 100")
            tx_id += 1

        # Extra deposit for each client
        for client_id in range(1, num_clients + 1):
            rows.append(f"deposit, {client_id}, {tx_id}, 50")
            tx_id += 1

        expected_balance = Decimal("500")

        csv_file = tmp_path / "large_test.csv"
        csv_file.write_text('\n'.join(rows))

        engine = LedgerEngine()
        ledger = engine.process_file(str(csv_file))

        assert len(ledger) == num_clients
        assert engine.stats.processed == 6 * num_clients

        for client_id in range(1, num_clients + 1):
            account = ledger.get_account(client_id)
            assert account.available == expected_balance, \
                f"Client {client_id}: expected {expected_balance}, got {account.available}"
            assert account.held == Decimal("0")
            assert account.locked is False

    def test_with_disputes_resolves_chargebacks(self, tmp_path):
        """Test with disputes, resolves, and chargebacks across 50 accounts."""
        rows = ["type, client, tx, amount"]

        # Client 1-10: Normal deposits only
        # Expected: 500 each (100 + 150 + 250)
        for client_id in range(1, 11):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 1}, 100")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 2}, 150")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 3}, 250")

        # Client 11-20: Deposit -> Dispute -> Resolve
        # Expected: 500 each, held=0, locked=False
        for client_id in range(11, 21):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 1}, 100")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 2}, 150")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 3}, 250")
        for client_id in range(11, 21):
            rows.append(f"dispute, {client_id}, {client_id * 100 + 1},")
        for client_id in range(11, 21):
            rows.append(f"resolve, {client_id}, {client_id * 100 + 1},")

        # Client 21-30: Deposit -> Dispute -> Chargeback
        # Expected: 400 each (500 - 100 charged back), locked=True
        for client_id in range(21, 31):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 1}, 100")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 2}, 150")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 3}, 250")
        for client_id in range(21, 31):
            rows.append(f"dispute, {client_id}, {client_id * 100 + 1},")
        for client_id in range(21, 31):
            rows.append(f"chargeback, {client_id}, {client_id * 100 + 1},")

        # Client 31-40: Deposit -> Withdrawal -> Dispute (on withdrawal)
        # Expected: available=200 (300 - 100 held), held=100, total=300
        for client_id in range(31, 41):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 1}, 150")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 2}, 250")
            rows.append(f"withdrawal, {client_id}, {client_id * 100 + 3}, 100")
        for client_id in range(31, 41):
            rows.append(f"dispute, {client_id}, {client_id * 100 + 3},")

        # Client 41-50: Multiple deposits, dispute middle one, resolve
        # Expected: 600 each, held=0
        for client_id in range(41, 51):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 1}, 100")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 2}, 200")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 3}, 300")
        for client_id in range(41, 51):
            rows.append(f"dispute, {client_id}, {client_id * 100 + 2},")
        for client_id in range(41, 51):
            rows.append(f"resolve, {client_id}, {client_id * 100 + 2},")

        csv_file = tmp_path / "disputes_test.csv"
        csv_file.write_text('\n'.join(rows))

        ledger = LedgerEngine().process_file(str(csv_file))

        # Verify Client 1-10: Normal
        for client_id in range(1, 11):
            account = ledger.get_account(client_id)
            assert account.available == Decimal("500"), f"Client {client_id}"
            assert account.held == Decimal("0")
            assert account.locked is False

        # Verify Client 11-20: Disputed then resolved
        for client_id in range(11, 21):
            account = ledger.get_account(client_id)
            assert account.available == Decimal("500"), f"Client {client_id}"
            assert account.held == Decimal("0")
            assert account.locked is False

        # Verify Client 21-30: Charged back
        for client_id in range(21, 31):
            account = ledger.get_account(client_id)
            assert account.available == Decimal("400"), f"Client {client_id}"
            assert account.held == Decimal("0")
            assert account.total == Decimal("400")
            assert account.locked is True

        # Verify Client 31-40: Disputed (held)
        for client_id in range(31, 41):
            account = ledger.get_account(client_id)
            assert account.available == Decimal("200"), f"Client {client_id}"
            assert account.held == Decimal("100")
            assert account.total == Decimal("300")
            assert account.locked is False

        # Verify Client 41-50: Disputed then resolved
        for client_id in range(41, 51):
            account = ledger.get_account(client_id)
            assert account.available == Decimal("600"), f"Client {client_id}"
            assert account.held == Decimal("0")
            assert account.locked is False


class TestLedgerInvariants:
    def test_deposits_and_withdrawals_never_overdraw(self):
        rng = random.Random(7)
        ledger = Ledger()

        for tx_id in range(1, 5001):
            transaction_type = rng.choice([TransactionType.DEPOSIT, TransactionType.WITHDRAWAL])
            amount = Decimal(rng.randint(0, 100000)) / 10000
            ledger.apply(Transaction(transaction_type, rng.randint(1, 20), rng.randint(1, 2000), amount))

            for snapshot in ledger.snapshot():
                assert snapshot.available >= 0
                assert snapshot.held == 0

    def test_total_is_available_plus_held(self):
        rng = random.Random(11)
        ledger = Ledger()
        types = list(TransactionType)

        for _ in range(5000):
            transaction_type = rng.choice(types)
            amount = None
            if transaction_type.is_monetary:
                amount = Decimal(rng.randint(-1000, 100000)) / 10000
            ledger.apply(Transaction(transaction_type, rng.randint(1, 10), rng.randint(1, 300), amount))

        for snapshot in ledger.snapshot():
            assert snapshot.total == snapshot.available + snapshot.held
