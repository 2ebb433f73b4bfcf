"""
Server configuration for the compliance bot.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Set

from ..models import canonical


@dataclass
class ServerConfig:
    """Configuration for the compliance server."""

    host: str = "0.0.0.0"
    port: int = 3000

    database_url: Optional[str] = None

    api_keys: Set[str] = field(default_factory=lambda: {"dev-api-key"})

    cors_origins: list = field(default_factory=lambda: ["*"])

    debug: bool = False

    log_level: str = "info"

    compliance_officer_address: Optional[str] = None
    manager_address: Optional[str] = None

    gemini_api_key: Optional[str] = None
    gemini_model: str = "models/gemini-2.0-flash-lite"

    attestation_url: Optional[str] = None
    attestation_api_key: Optional[str] = None
    attestation_schema_id: str = "0x65a"
    attestation_signer: Optional[str] = None

    # Seconds allowed for each attestation or AI call.
    external_timeout: float = 30.0

    ipfs_gateway_url: str = "https://ipfs.infura.io/ipfs/"
    attestation_explorer_url: str = (
        "https://testnet-scan.sign.global/attestation/onchain_evm_534351_"
    )
    tx_explorer_url: str = "https://sepolia.scrollscan.com/tx/"

    def __post_init__(self):
        if self.database_url is None:
            self.database_url = os.environ.get(
                "DATABASE_URL", "sqlite:///./compliancebot.db"
            )

        env_keys = os.environ.get("API_KEY")
        if env_keys:
            self.api_keys = {k.strip() for k in env_keys.split(",") if k.strip()}

        if self.compliance_officer_address is None:
            self.compliance_officer_address = os.environ.get("COMPLIANCE_OFFICER_ADDRESS")
        if self.manager_address is None:
            self.manager_address = os.environ.get("MANAGER_ADDRESS")
        self.compliance_officer_address = canonical(self.compliance_officer_address)
        self.manager_address = canonical(self.manager_address)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create configuration from environment variables."""
        return cls(
            host=os.environ.get("COMPLIANCE_HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "3000")),
            database_url=os.environ.get("DATABASE_URL"),
            debug=os.environ.get("COMPLIANCE_DEBUG", "").lower() == "true",
            log_level=os.environ.get("COMPLIANCE_LOG_LEVEL", "info"),
            gemini_api_key=os.environ.get("GOOGLE_API_KEY"),
            gemini_model=os.environ.get("GEMINI_MODEL", "models/gemini-2.0-flash-lite"),
            attestation_url=os.environ.get("ATTESTATION_URL"),
            attestation_api_key=os.environ.get("ATTESTATION_API_KEY"),
            attestation_schema_id=os.environ.get("ATTESTATION_SCHEMA_ID", "0x65a"),
            attestation_signer=os.environ.get("ATTESTATION_SIGNER"),
            external_timeout=float(os.environ.get("EXTERNAL_TIMEOUT", "30")),
        )
