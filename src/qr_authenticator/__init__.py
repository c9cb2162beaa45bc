"""qr_authenticator package.

Paste or drop a TOTP provisioning QR code and watch the current one-time code
refresh, with codes served by an external account service.
"""

__version__ = "0.1.0"

from qr_authenticator.session import AuthenticatorSession
from qr_authenticator.state import Account, SessionState, TokenState

__all__ = ["Account", "AuthenticatorSession", "SessionState", "TokenState", "__version__"]
