import logging
from typing import Annotated

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from fastapi import Depends, Header, HTTPException, Request, status

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


def verify_signature(public_key: str, signature: str, timestamp: str, body: bytes) -> bool:
    """Check an Ed25519 request signature over `timestamp + body`."""
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key))
        key.verify(bytes.fromhex(signature), timestamp.encode() + body)
    except (InvalidSignature, ValueError):
        return False
    return True


async def verified_body(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    x_signature_ed25519: Annotated[str | None, Header()] = None,
    x_signature_timestamp: Annotated[str | None, Header()] = None,
) -> bytes:
    """Return the raw request body once its signature has been verified.

    Raises HTTPException 401 if the signature headers are missing or invalid.
    """
    if not x_signature_ed25519 or not x_signature_timestamp:
        logger.warning("Rejected interaction: missing signature headers")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing request signature",
        )

    body = await request.body()
    if not verify_signature(settings.DISCORD_PUBLIC_KEY, x_signature_ed25519, x_signature_timestamp, body):
        logger.warning("Rejected interaction: bad request signature")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bad request signature",
        )

    logger.debug("Request signature verified")
    return body


VerifiedBody = Annotated[bytes, Depends(verified_body)]
