"""
Command-line interface for the compliance bot server.
"""

import argparse
import logging
import sys


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="compliancebot-server",
        description="Compliance Bot Server - document review, attestation and reporting API",
    )

    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port to bind to (default: 3000)",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL (default: $DATABASE_URL or sqlite:///./compliancebot.db)",
    )
    parser.add_argument(
        "--api-keys",
        default=None,
        help="Comma-separated list of bearer tokens (default: $API_KEY or dev-api-key)",
    )
    parser.add_argument(
        "--officer-address",
        default=None,
        help="Compliance officer address (default: $COMPLIANCE_OFFICER_ADDRESS)",
    )
    parser.add_argument(
        "--manager-address",
        default=None,
        help="Manager address (default: $MANAGER_ADDRESS)",
    )
    parser.add_argument(
        "--attestation-url",
        default=None,
        help="Base URL of the attestation signer service (default: $ATTESTATION_URL)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: info)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    api_keys = None
    if args.api_keys:
        api_keys = set(args.api_keys.split(","))

    from .app import ComplianceServer
    from .config import ServerConfig

    env_config = ServerConfig.from_env()

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║                   Compliance Bot Server v0.1.0               ║
╠══════════════════════════════════════════════════════════════╣
║  Host: {args.host:<54}║
║  Port: {args.port:<54}║
║  Database: {(args.database_url or env_config.database_url)[:50]:<50}║
╚══════════════════════════════════════════════════════════════╝

📖 API Documentation: http://{args.host}:{args.port}/docs

Press Ctrl+C to stop the server.
""")

    try:
        server = ComplianceServer(
            host=args.host,
            port=args.port,
            database_url=args.database_url or env_config.database_url,
            api_keys=api_keys,
            debug=args.debug,
            log_level=args.log_level,
            compliance_officer_address=args.officer_address,
            manager_address=args.manager_address,
            gemini_api_key=env_config.gemini_api_key,
            gemini_model=env_config.gemini_model,
            attestation_url=args.attestation_url or env_config.attestation_url,
            attestation_api_key=env_config.attestation_api_key,
            attestation_schema_id=env_config.attestation_schema_id,
            attestation_signer=env_config.attestation_signer,
            external_timeout=env_config.external_timeout,
        )
        server.run()
    except KeyboardInterrupt:
        print("\nServer stopped.")
        sys.exit(0)


if __name__ == "__main__":
    main()
