"""
robots.txt support for export jobs.

Only consulted when a job sets respect_robots. Rules are scoped to the job's
origin and evaluated against URL paths.
"""

import asyncio
import re
from typing import List, Optional
from urllib.parse import urlparse

import aiohttp

from .constants import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from .log import get_logger


class RobotsHandler:
    """
    Parsed robots.txt rules for one origin.

    Until rules are loaded every URL is allowed, so an unreachable
    robots.txt never blocks an export.
    """

    def __init__(self, origin: str, user_agent: str = "*"):
        """
        Args:
            origin: Job origin (scheme://host[:port])
            user_agent: Agent token whose rule group applies besides '*'
        """
        self.origin = origin
        self.user_agent = user_agent
        self.robots_url = f"{origin}/robots.txt"
        self.logger = get_logger("robots")

        self.allow_rules: List[str] = []
        self.disallow_rules: List[str] = []
        self.crawl_delay: Optional[float] = None
        self.sitemaps: List[str] = []
        self._loaded = False

    async def load(self) -> bool:
        """
        Fetch and parse robots.txt.

        Returns:
            True if rules are in effect; a 404 counts, with no rules
        """
        try:
            status, body = await self._fetch()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.warning(f"Could not fetch {self.robots_url}: {e}")
            return False

        if status == 200:
            self.parse(body)
            self.logger.info(
                f"robots.txt: {len(self.disallow_rules)} disallow, "
                f"{len(self.allow_rules)} allow rules"
            )
            return True
        if status == 404:
            self._loaded = True
            self.logger.info(f"No robots.txt on {self.origin}")
            return True

        self.logger.warning(f"Ignoring robots.txt: HTTP {status}")
        return False

    async def _fetch(self):
        timeout = aiohttp.ClientTimeout(total=DEFAULT_TIMEOUT)
        headers = {"User-Agent": DEFAULT_USER_AGENT}
        async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
            async with session.get(self.robots_url, allow_redirects=True) as response:
                body = await response.text() if response.status == 200 else ""
                return response.status, body

    def parse(self, content: str) -> None:
        """Parse robots.txt content and put its rules into effect."""
        in_group = False
        collecting_agents = True

        for raw_line in content.splitlines():
            line = raw_line.split('#', 1)[0].strip()
            if ':' not in line:
                continue

            key, value = (part.strip() for part in line.split(':', 1))
            key = key.lower()

            if key == 'user-agent':
                if not collecting_agents:
                    # First agent line after a group's rules opens a new group
                    collecting_agents = True
                    in_group = False
                in_group = in_group or value == '*' or value.lower() == self.user_agent.lower()
                continue

            if key == 'sitemap':
                self.sitemaps.append(value)
                continue

            collecting_agents = False
            if not in_group:
                continue

            if key == 'disallow' and value:
                self.disallow_rules.append(value)
            elif key == 'allow' and value:
                self.allow_rules.append(value)
            elif key == 'crawl-delay':
                try:
                    self.crawl_delay = float(value)
                except ValueError:
                    self.logger.debug(f"Ignoring bad crawl-delay: {value}")

        self._loaded = True

    def is_allowed(self, url: str) -> bool:
        """Allow rules win over disallow rules."""
        if not self._loaded:
            return True

        path = urlparse(url).path or '/'
        if any(self._matches_pattern(path, rule) for rule in self.allow_rules):
            return True
        if any(self._matches_pattern(path, rule) for rule in self.disallow_rules):
            self.logger.debug(f"Disallowed by robots.txt: {url}")
            return False
        return True

    @staticmethod
    def _matches_pattern(path: str, pattern: str) -> bool:
        """Match a path against a rule supporting '*' and a trailing '$'."""
        if '*' not in pattern and not pattern.endswith('$'):
            return path.startswith(pattern)

        anchored = pattern.endswith('$')
        body = pattern[:-1] if anchored else pattern
        regex = '.*'.join(re.escape(part) for part in body.split('*'))
        return re.match(regex + ('$' if anchored else ''), path) is not None

    def get_crawl_delay(self, default: float = 0.0) -> float:
        """Crawl-delay in seconds, or the default when none was given."""
        return self.crawl_delay if self.crawl_delay is not None else default
