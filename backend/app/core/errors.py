"""
Error message constants and utilities for user-friendly error handling.
"""
from typing import Dict, Optional

# Error codes
class ErrorCodes:
    TOO_MANY_RECORDS = "TOO_MANY_RECORDS"
    INVALID_REQUEST = "INVALID_REQUEST"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Titles of the empty-state chart specifications returned instead of raising
class PlaceholderTitles:
    NO_DATA = "No data available"
    NO_CHART_TYPE = "No chart type selected"
    INVALID_SELECTION = "Please select a valid combination of dimensions"
    UNSUPPORTED_CHART = "{chart_type} chart is not available for the selected dimensions"
    MISSING_DIMENSION = "Missing {dimension} dimension for {chart_type} chart"
    INSUFFICIENT_MULTI_AXIS = "Insufficient data for multi-axis chart"
    INSUFFICIENT_BOXPLOT = "Insufficient data for boxplot (need at least {min_samples} data points per category)"
    NO_MATCHING_CHART = "No matching chart configuration"
    ERROR = "Error generating chart"


ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.TOO_MANY_RECORDS: {
        "message": "That's a lot of traffic events!",
        "detail": "The request carries more event records than we chart in a single pass.",
        "suggestion": "💡 Narrow the date range or pick fewer locations, then try again."
    },
    ErrorCodes.INVALID_REQUEST: {
        "message": "We couldn't understand that chart request",
        "detail": "Some of the dimensions or the chart type in the request are not valid.",
        "suggestion": "💡 Check the selected dimensions and chart type, then try again."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Whoa there! Slow down a bit",
        "detail": "You're requesting charts faster than we can keep up! We limit requests to keep the service fast for everyone.",
        "suggestion": "💡 Wait about a minute and try again."
    },
    ErrorCodes.TIMEOUT: {
        "message": "This is taking longer than expected",
        "detail": "Building this chart took too long. This usually happens with very large event sets.",
        "suggestion": "💡 Try a shorter date range or a coarser time granularity."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Hmm, something unexpected happened",
        "detail": "We encountered an issue we weren't expecting. Don't worry - it's not your fault!",
        "suggestion": "💡 Give it another try in a moment."
    }
}

def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Get user-friendly error response for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional additional detail to append

    Returns:
        Dictionary with code, message, detail, and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response
