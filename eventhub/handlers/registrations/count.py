import eventhub.common.db as db
from eventhub.common import http
from eventhub.common.config import config
from eventhub.common.models import Event, Registration
from eventhub.common.models.errors import ValidationError
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch registration count')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    # Served on both `/registrations?eventId=` and `/registrations/{id}`.
    params = event.get('pathParameters') or {}
    if params.get('id'):
        event_id = http.get_path_param(event, 'id')
    else:
        event_id = http.get_query_param(event, 'eventId')
    if not event_id:
        raise ValidationError('Invalid event ID')
    found = Event.fetch(database, event_id)
    return http.get_response(200, {
        'count': Registration.count(database, found['Id'])
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Count the registrations for an event."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
