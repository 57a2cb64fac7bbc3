"""
Google ID Token 校验 - 调用 Google tokeninfo 接口
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from campus_hub.config import settings
from campus_hub.errors import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass
class GoogleIdentity:
    """校验通过的 Google 账号信息"""
    email: str
    name: str
    picture: Optional[str] = None
    sub: Optional[str] = None


class GoogleTokenVerifier:
    """Google ID Token 校验器"""

    def __init__(
        self,
        tokeninfo_url: Optional[str] = None,
        client_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.tokeninfo_url = tokeninfo_url or settings.GOOGLE_TOKENINFO_URL
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.timeout = timeout or settings.GOOGLE_VERIFY_TIMEOUT

    def verify(self, credential: str) -> GoogleIdentity:
        """校验 ID Token，失败抛出 AuthenticationError"""
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.get(self.tokeninfo_url, params={"id_token": credential})
        except httpx.HTTPError as e:
            logger.error(f"Google token verification request failed: {e}")
            raise AuthenticationError("Google authentication failed") from e

        if resp.status_code != 200:
            logger.warning(f"Google tokeninfo returned {resp.status_code}")
            raise AuthenticationError("Invalid Google token")

        payload = resp.json()
        if "error_description" in payload:
            logger.warning(f"Google tokeninfo error: {payload['error_description']}")
            raise AuthenticationError("Invalid Google token")

        if self.client_id and payload.get("aud") != self.client_id:
            logger.warning(f"Google token audience mismatch: {payload.get('aud')}")
            raise AuthenticationError("Invalid Google token")

        email = payload.get("email")
        if not email:
            raise AuthenticationError("Google token has no email")

        return GoogleIdentity(
            email=email,
            name=payload.get("name") or email.split("@")[0],
            picture=payload.get("picture"),
            sub=payload.get("sub"),
        )
