# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
from datetime import datetime, timedelta
from jose import JWTError, jwt
from fastapi import HTTPException, status  # ✅ For raising clean auth errors

if os.getenv("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()

# 🔐 Verification key of the identity provider (HS secret or PEM public key)
SECRET_KEY = os.getenv("AUTH_JWT_SECRET")
if not SECRET_KEY:
    raise RuntimeError("AUTH_JWT_SECRET environment variable is not set.")

ALGORITHM = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE") or None
ISSUER = os.getenv("AUTH_JWT_ISSUER") or None
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24  # 1 day


# ✅ Signed token for local development and tests (HS algorithms only)
def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    if AUDIENCE:
        to_encode.setdefault("aud", AUDIENCE)
    if ISSUER:
        to_encode.setdefault("iss", ISSUER)
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


# ✅ Verify and decode a provider token
def verify_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            audience=AUDIENCE,
            issuer=ISSUER,
            options={"verify_aud": AUDIENCE is not None},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload
