# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/adfs_signed_assertion

"""
Best-effort, unverified decoding of JWT payloads.

AD FS access tokens are JWTs. Their signature is verified by the cloud identity provider
that receives the assertion, so the payload is only read here for the expiry and for log diagnostics.
"""

from authlib.common.encoding import json_loads, to_bytes, urlsafe_b64decode

from adfs_signed_assertion.models import JwtClaims


def decode_jwt_claims(token: str) -> JwtClaims | None:
    """
    Decodes the payload segment of a JWT without verifying it.

    Never raises: anything that is not a dot-separated token with a base64url JSON object
    in its second segment yields None.

    Args:
        token: The raw token string.

    Returns:
        JwtClaims | None: The claims, or None if the payload could not be decoded.
    """
    parts = token.split(".")
    if len(parts) < 2 or not parts[1]:
        return None

    try:
        payload = json_loads(urlsafe_b64decode(to_bytes(parts[1], "ascii")).decode("utf-8"))
    except ValueError:
        # binascii.Error, UnicodeError and JSONDecodeError are all ValueErrors
        return None

    if not isinstance(payload, dict):
        return None

    return JwtClaims.model_validate(payload)
