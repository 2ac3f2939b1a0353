"""
Diagnostics

Turns a session summary into likely causes and next steps.
"""

from __future__ import annotations

HTTP2_ERROR_SIGNATURE = "ERR_HTTP2_PROTOCOL_ERROR"

ISSUE_ANTI_BOT = "HTTP/2 Protocol Errors detected - likely anti-bot protection"
ISSUE_NO_RESPONSES = "No API responses intercepted"

RECOMMEND_FORM = "Try using the form interaction method instead of URL navigation"


def troubleshoot(summary: dict) -> dict:
    """
    Build troubleshooting info from a session summary.

    `summary` is the dict produced by SearchSession.summary().
    """
    result = {
        "summary": summary,
        "possible_issues": [],
        "recommendations": [],
    }

    failed = summary.get("failed_requests", [])
    http2_errors = [f for f in failed if HTTP2_ERROR_SIGNATURE in (f.get("error") or "")]
    if http2_errors:
        result["possible_issues"].append(ISSUE_ANTI_BOT)
        result["recommendations"].extend([
            RECOMMEND_FORM,
            "Consider adding longer delays between requests",
            "Try using a residential proxy or VPN",
        ])

    if summary.get("total_responses", 0) == 0:
        result["possible_issues"].append(ISSUE_NO_RESPONSES)
        result["recommendations"].extend([
            "Check if United website structure has changed",
            "Verify the search URL is correct",
            "Try running with headless=False to see what's happening",
        ])

    return result
