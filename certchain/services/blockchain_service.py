# services/blockchain_service.py
"""
A stand-in for a smart-contract client.

Nothing here talks to a chain. The simulator sleeps to imitate transaction
and query latency, then fabricates plausible responses. Verification results
are invented on every call and are unrelated to earlier issue calls.
"""
import logging
import random
import time
from decimal import Decimal
from typing import Callable, Optional

from certchain.config import config_getter
from certchain.records import OnChainCertificate
from certchain.services import hash_service

logger = logging.getLogger(__name__)

CONTRACT_ADDRESS = "0x742d35Cc6634C0532925a3b8D45C3C9E7a07B43e"
NETWORK_ID = 1337  # Local Hardhat network

GAS_ESTIMATES = {
    "issueCertificate": 150000,
    "verifyCertificate": 50000,
}
DEFAULT_GAS_ESTIMATE = 100000

WEI_PER_GWEI = 10 ** 9
WEI_PER_ETHER = 10 ** 18

# Reference ABI of the CertificateRegistry contract. Never executed.
CERTIFICATE_CONTRACT_ABI = [
    {
        "inputs": [
            {"internalType": "string", "name": "certificateId", "type": "string"},
            {"internalType": "string", "name": "dataHash", "type": "string"},
            {"internalType": "string", "name": "issuer", "type": "string"},
        ],
        "name": "issueCertificate",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "string", "name": "certificateId", "type": "string"}],
        "name": "verifyCertificate",
        "outputs": [
            {"internalType": "bool", "name": "isValid", "type": "bool"},
            {"internalType": "string", "name": "dataHash", "type": "string"},
            {"internalType": "uint256", "name": "timestamp", "type": "uint256"},
            {"internalType": "string", "name": "issuer", "type": "string"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

CONTRACT_SOURCE = """
// SPDX-License-Identifier: MIT
pragma solidity ^0.8.19;

contract CertificateRegistry {
    struct Certificate {
        string dataHash;
        uint256 timestamp;
        string issuer;
        bool isValid;
    }

    mapping(string => Certificate) public certificates;
    address public owner;

    event CertificateIssued(string indexed certificateId, string dataHash, string issuer);
    event CertificateRevoked(string indexed certificateId);

    constructor() {
        owner = msg.sender;
    }

    modifier onlyOwner() {
        require(msg.sender == owner, "Only owner can perform this action");
        _;
    }

    function issueCertificate(
        string memory certificateId,
        string memory dataHash,
        string memory issuer
    ) public onlyOwner {
        require(bytes(certificateId).length > 0, "Certificate ID cannot be empty");
        require(certificates[certificateId].timestamp == 0, "Certificate already exists");

        certificates[certificateId] = Certificate({
            dataHash: dataHash,
            timestamp: block.timestamp,
            issuer: issuer,
            isValid: true
        });

        emit CertificateIssued(certificateId, dataHash, issuer);
    }

    function verifyCertificate(string memory certificateId)
        public
        view
        returns (bool isValid, string memory dataHash, uint256 timestamp, string memory issuer)
    {
        Certificate memory cert = certificates[certificateId];
        return (cert.isValid, cert.dataHash, cert.timestamp, cert.issuer);
    }

    function revokeCertificate(string memory certificateId) public onlyOwner {
        require(certificates[certificateId].timestamp != 0, "Certificate does not exist");
        certificates[certificateId].isValid = false;
        emit CertificateRevoked(certificateId);
    }
}
"""


class BlockchainSimulator:
    def __init__(
        self,
        issue_delay: float = 3.0,
        verify_delay: float = 1.5,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable = hash_service.utc_now,
        contract_address: str = CONTRACT_ADDRESS,
        network_id: int = NETWORK_ID,
    ):
        self.issue_delay = issue_delay
        self.verify_delay = verify_delay
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.clock = clock
        self.contract_address = contract_address
        self.network_id = network_id
        self._connected = False
        self.account = None
        self._connect()

    def _connect(self):
        self._connected = True
        self.account = hash_service.generate_account_address(self.rng)
        logger.info(f"Simulated wallet connected: {self.account}")

    def is_wallet_connected(self) -> bool:
        return self._connected

    def _wait(self, seconds: float) -> None:
        if seconds > 0:
            self.sleep(seconds)

    def issue_certificate_on_chain(self, certificate_id: str, data_hash: str, issuer: str) -> str:
        """Pretends to submit an issueCertificate transaction and returns its hash."""
        logger.info(f"Issuing certificate on blockchain: certificate_id={certificate_id} data_hash={data_hash} issuer={issuer}")
        self._wait(self.issue_delay)
        tx_hash = hash_service.generate_transaction_hash(self.rng)
        logger.info(f"Certificate issued on blockchain. Transaction hash: {tx_hash}")
        return tx_hash

    def verify_certificate_on_chain(self, certificate_id: str) -> OnChainCertificate:
        """
        Pretends to call verifyCertificate.

        The returned hash and timestamp are fabricated fresh on each call, so
        two verifications of the same id disagree unless the RNG is pinned.
        """
        logger.info(f"Verifying certificate on blockchain: {certificate_id}")
        self._wait(self.verify_delay)
        return OnChainCertificate(
            certificate_id=certificate_id,
            hash=hash_service.generate_transaction_hash(self.rng),
            timestamp=int(self.clock().timestamp() * 1000),
            issuer="Verified Issuer",
            is_valid=True,
        )

    def get_gas_estimate(self, function_name: str) -> int:
        return GAS_ESTIMATES.get(function_name, DEFAULT_GAS_ESTIMATE)

    def get_current_gas_price(self) -> str:
        """Current gas price in wei, somewhere between 10 and 59 gwei."""
        gas_price_gwei = self.rng.randint(10, 59)
        return str(gas_price_gwei * WEI_PER_GWEI)


def format_wei(wei) -> str:
    """Converts a wei amount to ether with six decimal places."""
    ether = Decimal(str(wei)) / Decimal(WEI_PER_ETHER)
    return f"{ether:.6f}"


def shorten_address(address: Optional[str]) -> str:
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"


def create_blockchain_simulator(cfg, sleep=time.sleep) -> BlockchainSimulator:
    get = config_getter(cfg)
    return BlockchainSimulator(
        issue_delay=get('CERTCHAIN_CHAIN_ISSUE_DELAY', 3.0),
        verify_delay=get('CERTCHAIN_CHAIN_VERIFY_DELAY', 1.5),
        sleep=sleep,
    )
