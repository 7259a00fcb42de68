"""Response envelope returned to the orchestrator"""

import json
from typing import Any, Dict, Optional

STATUS_SUCCESS = 'Success'
STATUS_FAILURE = 'Failure'
STATUS_NOT_SUPPORTED = 'Not supported'


def format_result(fields: Optional[Dict[str, Any]] = None,
                  error: Optional[BaseException] = None) -> Dict[str, Any]:
    """
    Create the standardized response envelope.

    Args:
        fields: Extra fields returned by a handler, merged in on success
        error: Error raised by a handler, partial fields are discarded

    Returns:
        Response dictionary
    """
    if error is not None:
        return {
            'status': STATUS_FAILURE,
            'message': str(error)
        }

    data = {'status': STATUS_SUCCESS}
    if fields:
        data.update(fields)
    return data


def render_envelope(envelope: Dict[str, Any]) -> str:
    """
    Render an envelope as a single line of JSON.

    Serialization errors propagate: once the envelope itself cannot be
    rendered there is nothing meaningful left to report.
    """
    return json.dumps(envelope) + '\n'


def render_result(fields: Optional[Dict[str, Any]] = None,
                  error: Optional[BaseException] = None) -> str:
    """Format and render a result-or-error pair."""
    return render_envelope(format_result(fields, error))
