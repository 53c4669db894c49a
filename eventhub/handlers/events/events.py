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


@http.handle_errors('Failed to fetch events')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    query = Event.EventQuery(
        organization_id=http.get_query_param(event, 'organizationId'),
        partner_organization=http.get_query_param(event,
                                                  'partnerOrganizations'))
    events = Event.fetch_all(database, query)
    return http.get_response(200, {
        'status': 'success',
        'count': len(events),
        'events': encoding.camelize(events)
    })


@http.handle_errors('Failed to create event')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    body = http.parse_body(event)
    external_id = body.pop('Id', None)
    created = Event.create(database, body, external_id=external_id)
    _log.info(f'Created event {created["Id"]}')
    return http.get_response(201, {
        'status': 'success',
        'event': encoding.camelize(created)
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """List or create events."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
