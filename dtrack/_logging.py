"""Debug logging for requests, responses and version-gated decisions."""

import logging

logger = logging.getLogger("dtrack")

def log_request(method: str, url: str):
    logger.debug("dtrack → %s %s", method, url)

def log_response(status: int, url: str, elapsed_ms: float):
    logger.debug("dtrack ← %d %s (%.0fms)", status, url, elapsed_ms)

def log_version_gate(operation: str, threshold: str, current, passed: bool):
    logger.debug(
        "dtrack %s: server version %s %s %s",
        operation, current or "unknown", ">=" if passed else "<", threshold,
    )
