from typing import Any, Dict, Tuple

import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Event, Registration, User
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


def _fetch(database: db.Database, event: ProxyEvent) \
        -> Tuple[Dict[str, Any], Dict[str, Any]]:
    found = Event.fetch(database, http.get_path_param(event, 'id'))
    user = User.fetch(database, http.get_path_param(event, 'userId'))
    return found, user


@http.handle_errors('Failed to check attendance')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    found, user = _fetch(database, event)
    status = Registration.get_status(database, found['Id'], user['Id'])
    return http.get_response(200, encoding.camelize(status))


@http.handle_errors('Failed to check in attendee')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    found, user = _fetch(database, event)
    checked_in_time = Registration.check_in(database, found['Id'], user['Id'])
    _log.info(f'User {user["Id"]} checked in for {found["Id"]}')
    return http.get_response(200, {
        'message': 'Attendee checked in successfully',
        'checkedInTime': checked_in_time
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Get the check-in status of an attendee or check them in."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
