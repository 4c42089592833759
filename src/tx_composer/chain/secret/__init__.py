"""Secret Network support — LCD queries and client-side message encryption."""

from tx_composer.chain.secret.client import SecretLCDClient, normalize_code_hash
from tx_composer.chain.secret.encryption import EncryptionUtils

__all__ = ["EncryptionUtils", "SecretLCDClient", "normalize_code_hash"]
