"""Helpers for API Gateway proxy handlers."""
import base64
import binascii
import functools
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar, cast
from urllib.parse import unquote

import eventhub.common.db as db
from eventhub.common import encoding
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models.errors import ConflictError, ForbiddenError, \
    ModelError, NotFoundError, ValidationError
from eventhub.common.types.lambd import ProxyEvent, ProxyResponse


_log = get_logger(__name__)

_Handler = TypeVar('_Handler', bound=Callable[..., ProxyResponse])

# Most specific first.
_STATUS_CODES = (
    (ValidationError, 400),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def get_response(status: int, body: Optional[Any] = None) -> ProxyResponse:
    """Get a JSON response.

    Args:
        status: The HTTP status code.
        body: Optional JSON serializable body.

    Returns:
        The proxy response.

    """
    res: ProxyResponse = {
        'statusCode': status,
        'headers': {
            'Access-Control-Allow-Origin': config.website_origin,
            'Content-Type': 'application/json',
        }
    }
    if body is not None:
        res['body'] = encoding.dumps(body)
    return res


def get_error_response(status: int, message: str,
                       details: Optional[Mapping[str, Any]] = None) \
        -> ProxyResponse:
    """Get a JSON error response with an `error` message."""
    body: Dict[str, Any] = {'error': message}
    if details:
        body.update(details)
    return get_response(status, body)


def get_status_code(error: ModelError) -> int:
    """Get the HTTP status code for a model error."""
    for error_type, status in _STATUS_CODES:
        if isinstance(error, error_type):
            return status
    return 500


def handle_errors(failure_message: str) -> Callable[[_Handler], _Handler]:
    """Decorator that converts errors to JSON error responses.

    Model errors get the status code of their type, database errors are logged
    and result in a 500 response with `failure_message`.

    Args:
        failure_message: The error message of unexpected failures, eg.
            'Failed to fetch events'.

    Returns:
        The decorator.

    """
    def decorator(fn: _Handler) -> _Handler:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> ProxyResponse:
            try:
                return fn(*args, **kwargs)
            except ModelError as e:
                return get_error_response(get_status_code(e), e.message,
                                          e.details)
            except db.DatabaseError as e:
                _log.error(f'{failure_message} in {fn.__module__}:\n{e}')
                return get_error_response(500, failure_message)
        return cast(_Handler, wrapper)
    return decorator


def parse_body(event: ProxyEvent) -> Dict[str, Any]:
    """Parse the JSON object body of a request.

    The keys of the returned object are PascalCase.

    Raises:
        `ValidationError` if the body is missing or it's not a JSON object.

    """
    body = event.get('body')
    if not body:
        raise ValidationError('Missing request body')
    if event.get('isBase64Encoded'):
        try:
            body = base64.b64decode(body).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError):
            raise ValidationError('Malformed request body')
    try:
        res = encoding.loads(body)
    except ValueError:
        raise ValidationError('Malformed JSON body')
    if not isinstance(res, dict):
        raise ValidationError('Expected a JSON object body')
    return encoding.pascalize(res)


def get_path_param(event: ProxyEvent, name: str) -> str:
    """Get a url-decoded path parameter.

    Raises:
        `ValidationError` if the parameter is missing.

    """
    params = event.get('pathParameters') or {}
    value = params.get(name)
    if not value:
        raise ValidationError(f'{name} is required')
    return unquote(value)


def get_query_param(event: ProxyEvent, name: str) -> Optional[str]:
    """Get a query string parameter if it's provided."""
    params = event.get('queryStringParameters') or {}
    value = params.get(name)
    if value == '':
        return None
    return value


def get_int_query_param(event: ProxyEvent, name: str, default: int,
                        minimum: int = 1) -> int:
    """Get an integer query string parameter.

    Raises:
        `ValidationError` if the value is not an integer or it's less than
            the minimum.

    """
    value = get_query_param(event, name)
    if value is None:
        return default
    try:
        res = int(value)
    except ValueError:
        raise ValidationError(f'{name} must be an integer')
    if res < minimum:
        raise ValidationError(f'{name} must be at least {minimum}')
    return res
