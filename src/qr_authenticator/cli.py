"""Command-line interface for qr_authenticator."""

import logging
import sys

from qr_authenticator import __version__


def main() -> int:
    """CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if len(sys.argv) > 1 and sys.argv[1] in ("--version", "-v"):
        print(f"qr-authenticator version {__version__}")
        return 0

    if len(sys.argv) > 1 and sys.argv[1] in ("--help", "-h"):
        print("qr-authenticator - TOTP codes from a pasted or dropped QR image")
        print(f"Version: {__version__}")
        print("\nUsage: qr-authenticator [options]")
        print("\nOptions:")
        print("  --version, -v    Show version")
        print("  --help, -h       Show this help message")
        print("\nEnvironment:")
        print("  QR_AUTH_SERVICE_URL      Account service base URL (default http://localhost:7071)")
        print("  QR_AUTH_REQUEST_TIMEOUT  Request timeout in seconds (default 10)")
        print("  QR_AUTH_LOG_LEVEL        Log level (default WARNING)")
        return 0

    from textual.logging import TextualHandler

    from qr_authenticator.config import ConfigError, get_settings
    from qr_authenticator.ui import AuthenticatorApp

    try:
        settings = get_settings()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=settings.log_level, handlers=[TextualHandler()])

    app = AuthenticatorApp(settings=settings)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
