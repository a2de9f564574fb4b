"""
간단한 Redis 기반 레이트 리밋 유틸리티
"""

from __future__ import annotations

import logging
import time

from dndspace.core.config import settings
from dndspace.core.database import redis_client
from dndspace.core.exceptions import RateLimitedError

logger = logging.getLogger(__name__)


async def check_rate_limit(bucket: str, max_requests: int, window_seconds: int = 60) -> tuple[bool, int]:
    """
    고정 윈도우 방식 레이트리밋.
    반환: (허용 여부, 남은 횟수)
    """
    if not settings.RATE_LIMIT_ENABLED:
        return (True, max_requests)

    window = int(time.time()) // window_seconds
    key = f"rl:{bucket}:{window}"
    try:
        count = await redis_client.incr(key)
        if count == 1:
            await redis_client.expire(key, window_seconds)
        remaining = max(0, max_requests - count)
        return (count <= max_requests, remaining)
    except Exception as e:
        # Redis 장애 시 리밋을 우회(가용성 우선)
        logger.warning(f"레이트 리밋 확인 실패, 제한 없이 통과: {e}")
        return (True, max_requests)


async def enforce_upload_rate_limit(user_id) -> None:
    """업로드 엔드포인트 공용 제한. 초과 시 RateLimitedError."""
    allowed, _ = await check_rate_limit(f"upload:{user_id}", settings.UPLOAD_RATE_LIMIT_PER_MINUTE)
    if not allowed:
        raise RateLimitedError()
