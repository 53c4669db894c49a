import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Event
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to delete event')
def _delete_handler(database: db.Database, event: ProxyEvent) \
        -> ProxyResponse:
    event_id = http.get_path_param(event, 'id')
    user_id = http.get_query_param(event, 'userId')
    Event.delete(database, event_id, user_id)
    _log.info(f'Event {event_id} deleted by {user_id}')
    return http.get_response(200, {
        'status': 'success',
        'message': 'Event deleted successfully'
    })


@http.handle_errors('Failed to fetch event')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    found = Event.fetch(database, http.get_path_param(event, 'id'))
    return http.get_response(200, encoding.camelize(found))


@http.handle_errors('Failed to update event')
def _patch_handler(database: db.Database, event: ProxyEvent) \
        -> ProxyResponse:
    event_id = http.get_path_param(event, 'id')
    body = http.parse_body(event)
    user_id = body.pop('UserId', None)
    updated = Event.update(database, event_id, user_id, body)
    return http.get_response(200, {
        'status': 'success',
        'event': encoding.camelize(updated)
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Get, update or delete an event."""
    http_method = event['httpMethod']

    if http_method == 'DELETE':
        return _delete_handler(_database, event)
    elif http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'PATCH':
        return _patch_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
