"""
Bot/server classifier models.
"""

from __future__ import annotations

from dataclasses import dataclass

# --- Configuration ---


@dataclass(frozen=True)
class ClassifierConfig:
    """User-agent substring patterns. All patterns are lower-case."""

    # Crawlers, link-preview fetchers, headless browsers
    bot_patterns: tuple[str, ...] = (
        "bot",
        "crawl",
        "spider",
        "slurp",
        "bingpreview",
        "mediapartners",
        "facebookexternalhit",
        "twitterbot",
        "linkedinbot",
        "whatsapp",
        "telegrambot",
        "applebot",
        "google",
        "yandex",
        "baidu",
        "semrush",
        "ahrefs",
        "mj12bot",
        "dotbot",
        "petalbot",
        "headless",
        "phantom",
        "puppeteer",
        "playwright",
        "selenium",
    )

    # HTTP clients, scripting runtimes, uptime monitors, cloud runtimes
    server_patterns: tuple[str, ...] = (
        "curl",
        "wget",
        "httpie",
        "python-requests",
        "python-urllib",
        "node-fetch",
        "axios",
        "got/",
        "undici",
        "java/",
        "apache-httpclient",
        "go-http-client",
        "ruby",
        "perl",
        "php/",
        "libwww",
        "mechanize",
        "scrapy",
        "httpclient",
        "okhttp",
        "cron",
        "monitor",
        "uptime",
        "pingdom",
        "newrelic",
        "datadog",
        "statuspage",
        "uptimerobot",
        "site24x7",
        "nagios",
        "zabbix",
        "munin",
        "healthcheck",
        "vercel",
        "netlify",
        "cloudflare-worker",
        "aws-sdk",
        "google-cloud",
        "azure",
        "render",
        "railway",
    )


DEFAULT_CONFIG = ClassifierConfig()


# --- Output ---


@dataclass(frozen=True)
class UAFlags:
    """Independent traffic flags derived from one user agent."""

    is_bot: bool
    is_server: bool
