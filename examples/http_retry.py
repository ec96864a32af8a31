"""Retry a flaky HTTP call with retry-mini"""

import asyncio
import logging

import requests

from retry_mini import execute, is_transient_error, log_retry

logger = logging.getLogger("examples.http_retry")


def fetch_status(url: str) -> int:
    """Fetch a URL, retrying network errors, 429 and 5xx with backoff"""

    def _request(attempt: int) -> int:
        logger.info(f"GET {url} (attempt {attempt})")
        response = requests.get(url, timeout=5)
        response.raise_for_status()
        return response.status_code

    return asyncio.run(
        execute(
            _request,
            max_retries=4,
            base_delay=200,
            backoff_factor=2,
            jitter=0.2,
            max_delay=5_000,
            should_retry=is_transient_error,
            on_retry=log_retry(logger),
        )
    )


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    print(fetch_status("https://httpbin.org/status/503,200"))
