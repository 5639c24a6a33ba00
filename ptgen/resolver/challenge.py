"""
Douban anti-automation gate solver.

The gate page embeds a token and a challenge string. Passing it requires a
SHA-512 proof-of-work nonce posted to ``sec.douban.com``, which answers with a
session cookie that unlocks the real page.
"""
from __future__ import annotations

import asyncio
import hashlib
import logging
import re
from dataclasses import replace
from urllib.parse import urljoin

from .errors import ChallengeSubmissionFailed, ChallengeTimeout
from .fetcher import PageFetcher
from .models import ChallengeResult, ChallengeState, RawPage

logger = logging.getLogger(__name__)

GATE_HOOK = "process(cha)"
GATE_FIELD = 'id="cha"'
SOLVE_ENDPOINT = "https://sec.douban.com/c"
SOLVE_ORIGIN = "https://sec.douban.com"
DEFAULT_REDIRECT = "https://movie.douban.com/"
DEFAULT_DIFFICULTY = 4
DEFAULT_MAX_ATTEMPTS = 500_000
_YIELD_EVERY = 10_000


def _input_value_patterns(field_id: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    return (
        re.compile(rf"""id=["']{field_id}["'][^>]*value=["']([^"']+)["']""", re.IGNORECASE),
        re.compile(rf"""value=["']([^"']+)["'][^>]*id=["']{field_id}["']""", re.IGNORECASE),
    )


_FIELD_PATTERNS = {name: _input_value_patterns(name) for name in ("tok", "cha", "red")}


def _find_input_value(text: str, field_id: str) -> str | None:
    for pattern in _FIELD_PATTERNS[field_id]:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def is_gate(text: str) -> bool:
    """Return True when the body is the challenge interstitial."""

    return GATE_HOOK in text and GATE_FIELD in text


def extract_state(text: str, default_redirect: str = DEFAULT_REDIRECT) -> ChallengeState | None:
    token = _find_input_value(text, "tok")
    challenge = _find_input_value(text, "cha")
    if not token or not challenge:
        return None
    redirect = _find_input_value(text, "red") or default_redirect
    return ChallengeState(token=token, challenge=challenge, redirect_target=redirect)


def _meets_difficulty(challenge: str, nonce: int, prefix: str) -> bool:
    digest = hashlib.sha512(f"{challenge}{nonce}".encode("utf-8")).hexdigest()
    return digest.startswith(prefix)


def find_nonce(
    challenge: str,
    difficulty: int = DEFAULT_DIFFICULTY,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> int:
    """Return the first nonce whose SHA-512 hex digest starts with ``difficulty`` zeros."""

    prefix = "0" * difficulty
    for nonce in range(max_attempts):
        if _meets_difficulty(challenge, nonce, prefix):
            return nonce
    raise ChallengeTimeout()


def cookie_header(set_cookie_values: list[str]) -> str:
    """Collapse ``Set-Cookie`` values into a ``Cookie`` request header."""

    pairs = []
    for value in set_cookie_values:
        pair = value.split(";", 1)[0].strip()
        if pair and "=" in pair:
            pairs.append(pair)
    return "; ".join(pairs)


class ChallengeSolver:
    """Detects, solves and replays the Douban proof-of-work gate."""

    def __init__(
        self,
        fetcher: PageFetcher,
        *,
        difficulty: int = DEFAULT_DIFFICULTY,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        solve_endpoint: str = SOLVE_ENDPOINT,
        default_redirect: str = DEFAULT_REDIRECT,
    ) -> None:
        self._fetcher = fetcher
        self.difficulty = difficulty
        self.max_attempts = max_attempts
        self.solve_endpoint = solve_endpoint
        self.default_redirect = default_redirect

    async def solve_nonce(self, challenge: str) -> int:
        """Async variant of :func:`find_nonce` that periodically yields to the loop."""

        prefix = "0" * self.difficulty
        for nonce in range(self.max_attempts):
            if _meets_difficulty(challenge, nonce, prefix):
                return nonce
            if nonce and nonce % _YIELD_EVERY == 0:
                await asyncio.sleep(0)
        raise ChallengeTimeout()

    async def solve(self, page: RawPage) -> ChallengeResult:
        if not is_gate(page.text):
            return ChallengeResult(solved=False, text=page.text, url=page.url)

        logger.info("Douban challenge detected on %s, solving", page.url)
        state = extract_state(page.text, self.default_redirect)
        if state is None:
            logger.warning("Challenge parameters missing on %s", page.url)
            return ChallengeResult(solved=False, text=page.text, url=page.url, error="parameters missing")

        state = replace(state, solution=await self.solve_nonce(state.challenge))
        logger.info("Challenge solved with nonce %s", state.solution)

        submit = await self._fetcher.fetch(
            self.solve_endpoint,
            method="POST",
            data={
                "tok": state.token,
                "cha": state.challenge,
                "sol": str(state.solution),
                "red": state.redirect_target,
            },
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Referer": page.url,
                "Origin": SOLVE_ORIGIN,
            },
            follow_redirects=False,
        )
        cookies = cookie_header(submit.header_values("set-cookie"))
        if not cookies:
            raise ChallengeSubmissionFailed(debug={"status": submit.status_code, "url": submit.url})
        state = replace(state, session_cookie=cookies)

        target = urljoin(submit.url, submit.headers.get("location") or state.redirect_target)
        final = await self._fetcher.fetch(
            target,
            headers={"Cookie": cookies, "Referer": f"{SOLVE_ORIGIN}/"},
        )
        return ChallengeResult(solved=True, text=final.text, url=final.url, session_cookie=state.session_cookie)
