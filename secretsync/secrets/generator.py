"""Secure value and keypair generation for managed secrets."""

import logging
import secrets
import string
from typing import Optional, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from ..config.settings import (
    KEYPAIR_TYPES,
    SUPPORTED_CURVES,
    TYPE_BYTES,
    TYPE_STRING,
)
from ..utils.errors import GenerationError

logger = logging.getLogger(__name__)

ALPHANUMERIC_CHARSET = string.ascii_lowercase + string.ascii_uppercase + string.digits

MIN_RSA_BITS = 1024

_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}


class SecretGenerator:
    """Generates secret material from the operating system's CSPRNG."""

    def __init__(self, charset: Optional[str] = None):
        """
        Initialize secret generator.

        Args:
            charset: Default character set for string values
        """
        self.default_charset = charset if charset is not None else ALPHANUMERIC_CHARSET

    def generate_string(self, length: int) -> str:
        """Generate a random string using the default charset."""
        return self.generate_string_with_charset(length, self.default_charset)

    def generate_string_with_charset(self, length: int, charset: str) -> str:
        """
        Generate a random string from a character set.

        Each random byte is mapped onto the charset by modulo.

        Args:
            length: Number of characters
            charset: Characters to sample from

        Returns:
            str: Random string

        Raises:
            GenerationError: If length is not positive or charset is empty
        """
        if length <= 0:
            raise GenerationError(f"length must be positive, got {length}")
        if not charset:
            raise GenerationError("charset must not be empty")

        random_bytes = secrets.token_bytes(length)
        return "".join(charset[b % len(charset)] for b in random_bytes)

    def generate_bytes(self, length: int) -> bytes:
        """
        Generate raw random bytes.

        Raises:
            GenerationError: If length is not positive
        """
        if length <= 0:
            raise GenerationError(f"length must be positive, got {length}")

        return secrets.token_bytes(length)

    def generate(self, gen_type: str, length: int) -> bytes:
        """Generate a value of a non-keypair type using the default charset."""
        return self.generate_with_charset(gen_type, length, self.default_charset)

    def generate_with_charset(self, gen_type: str, length: int, charset: str) -> bytes:
        """
        Generate a value of the given type, ready to store as secret data.

        Args:
            gen_type: "string" (or empty) or "bytes"
            length: Number of characters or bytes
            charset: Characters to sample from for strings

        Returns:
            bytes: Encoded value

        Raises:
            GenerationError: For keypair types and unknown types
        """
        if gen_type in (TYPE_STRING, ""):
            return self.generate_string_with_charset(length, charset).encode("utf-8")
        if gen_type == TYPE_BYTES:
            return self.generate_bytes(length)
        if gen_type in KEYPAIR_TYPES:
            raise GenerationError(
                "keypair types must be generated using the dedicated keypair methods, "
                "not generate_with_charset"
            )
        raise GenerationError(f"unknown generation type: {gen_type}")

    def generate_rsa_keypair(self, bits: int) -> Tuple[str, str]:
        """
        Generate an RSA keypair.

        Args:
            bits: Modulus size, at least 1024

        Returns:
            Tuple[str, str]: Private and public key, both PKCS#1 PEM
        """
        if bits < MIN_RSA_BITS:
            raise GenerationError(f"RSA key size must be at least {MIN_RSA_BITS} bits, got {bits}")

        try:
            private_key = rsa.generate_private_key(public_exponent=65537, key_size=bits)

            private_pem = private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )
            public_pem = private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.PKCS1,
            )

            logger.debug("Generated %d-bit RSA keypair", bits)
            return private_pem.decode("ascii"), public_pem.decode("ascii")

        except Exception as e:
            raise GenerationError(f"Failed to generate RSA key: {e}") from e

    def generate_ecdsa_keypair(self, curve_name: str) -> Tuple[str, str]:
        """
        Generate an ECDSA keypair.

        Args:
            curve_name: One of P-256, P-384, P-521 (case-sensitive)

        Returns:
            Tuple[str, str]: Private key as SEC1 "EC PRIVATE KEY" PEM and
            public key as SubjectPublicKeyInfo PEM
        """
        curve = parse_curve(curve_name)

        try:
            private_key = ec.generate_private_key(curve)

            private_pem = private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )
            public_pem = private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )

            logger.debug("Generated ECDSA keypair on %s", curve_name)
            return private_pem.decode("ascii"), public_pem.decode("ascii")

        except Exception as e:
            raise GenerationError(f"Failed to generate ECDSA key: {e}") from e

    def generate_ed25519_keypair(self) -> Tuple[str, str]:
        """
        Generate an Ed25519 keypair.

        Returns:
            Tuple[str, str]: Private key as PKCS#8 PEM and public key as
            SubjectPublicKeyInfo PEM
        """
        try:
            private_key = ed25519.Ed25519PrivateKey.generate()

            private_pem = private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
            public_pem = private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )

            logger.debug("Generated Ed25519 keypair")
            return private_pem.decode("ascii"), public_pem.decode("ascii")

        except Exception as e:
            raise GenerationError(f"Failed to generate Ed25519 key: {e}") from e


def parse_curve(curve_name: str) -> ec.EllipticCurve:
    """
    Map a curve name onto a curve instance.

    Raises:
        GenerationError: For unknown, empty or mis-cased names
    """
    curve_class = _CURVES.get(curve_name)
    if curve_class is None:
        raise GenerationError(
            f"unsupported ECDSA curve: {curve_name!r}, must be "
            + ", ".join(f"'{c}'" for c in SUPPORTED_CURVES)
        )
    return curve_class()
