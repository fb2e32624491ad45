# test_blockchain_service.py
# Tests for the simulated certificate registry contract.

import random
import unittest
from datetime import datetime, timezone

from certchain.services.blockchain_service import (
    BlockchainSimulator,
    CERTIFICATE_CONTRACT_ABI,
    CONTRACT_ADDRESS,
    NETWORK_ID,
    create_blockchain_simulator,
    format_wei,
    shorten_address,
)
from certchain.config import TestingConfig


def make_simulator(seed=42, sleeps=None):
    return BlockchainSimulator(
        rng=random.Random(seed),
        sleep=(sleeps.append if sleeps is not None else (lambda seconds: None)),
        clock=lambda: datetime(2024, 1, 16, 10, 0, tzinfo=timezone.utc),
    )


class TestBlockchainSimulator(unittest.TestCase):

    def test_connected_on_construction(self):
        simulator = make_simulator()
        self.assertTrue(simulator.is_wallet_connected())
        self.assertRegex(simulator.account, r"^0x[0-9a-f]{40}$")
        self.assertEqual(simulator.contract_address, CONTRACT_ADDRESS)
        self.assertEqual(simulator.network_id, NETWORK_ID)

    def test_issue_waits_and_returns_transaction_hash(self):
        sleeps = []
        simulator = make_simulator(sleeps=sleeps)
        tx_hash = simulator.issue_certificate_on_chain("CERT-2024-SAMPLE1", "0x" + "0" * 64, "Tech Academy")
        self.assertRegex(tx_hash, r"^0x[0-9a-f]{64}$")
        self.assertEqual(sleeps, [3.0])

    def test_verify_fabricates_fresh_data_each_call(self):
        sleeps = []
        simulator = make_simulator(sleeps=sleeps)
        first = simulator.verify_certificate_on_chain("CERT-2024-SAMPLE1")
        second = simulator.verify_certificate_on_chain("CERT-2024-SAMPLE1")
        self.assertEqual(first.certificate_id, "CERT-2024-SAMPLE1")
        self.assertEqual(first.issuer, "Verified Issuer")
        self.assertTrue(first.is_valid)
        self.assertEqual(first.timestamp, 1705399200000)
        self.assertNotEqual(first.hash, second.hash)
        self.assertEqual(sleeps, [1.5, 1.5])

    def test_verify_is_not_linked_to_issue(self):
        simulator = make_simulator()
        tx_hash = simulator.issue_certificate_on_chain("CERT-2025-LINKED", "0xdata", "Issuer")
        self.assertNotEqual(simulator.verify_certificate_on_chain("CERT-2025-LINKED").hash, tx_hash)

    def test_pinned_rng_reproduces_outputs(self):
        a, b = make_simulator(seed=7), make_simulator(seed=7)
        self.assertEqual(a.account, b.account)
        self.assertEqual(
            a.verify_certificate_on_chain("CERT-2025-PINNED").to_dict(),
            b.verify_certificate_on_chain("CERT-2025-PINNED").to_dict(),
        )

    def test_gas_estimates(self):
        simulator = make_simulator()
        self.assertEqual(simulator.get_gas_estimate("issueCertificate"), 150000)
        self.assertEqual(simulator.get_gas_estimate("verifyCertificate"), 50000)
        self.assertEqual(simulator.get_gas_estimate("revokeCertificate"), 100000)

    def test_gas_price_range(self):
        simulator = make_simulator()
        for _ in range(100):
            gwei = int(simulator.get_current_gas_price()) // 10 ** 9
            self.assertGreaterEqual(gwei, 10)
            self.assertLess(gwei, 60)

    def test_zero_delay_skips_sleep(self):
        sleeps = []
        simulator = BlockchainSimulator(issue_delay=0, verify_delay=0, sleep=sleeps.append)
        simulator.issue_certificate_on_chain("CERT-2025-NODLAY", "0x", "Issuer")
        simulator.verify_certificate_on_chain("CERT-2025-NODLAY")
        self.assertEqual(sleeps, [])

    def test_factory_reads_configured_delays(self):
        simulator = create_blockchain_simulator(TestingConfig)
        self.assertEqual(simulator.issue_delay, 0.0)
        self.assertEqual(simulator.verify_delay, 0.0)


class TestUtilities(unittest.TestCase):

    def test_format_wei(self):
        self.assertEqual(format_wei("1000000000000000000"), "1.000000")
        self.assertEqual(format_wei(150000 * 20 * 10 ** 9), "0.003000")

    def test_shorten_address(self):
        self.assertEqual(shorten_address(CONTRACT_ADDRESS), "0x742d...B43e")
        self.assertEqual(shorten_address(""), "")
        self.assertEqual(shorten_address(None), "")

    def test_abi_lists_contract_functions(self):
        self.assertEqual(
            [entry["name"] for entry in CERTIFICATE_CONTRACT_ABI],
            ["issueCertificate", "verifyCertificate"],
        )


if __name__ == '__main__':
    unittest.main()
