import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.models import Event, Registration
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch attendees')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    found = Event.fetch(database, http.get_path_param(event, 'id'))
    attendees = Registration.fetch_attendees(database, found['Id'])
    return http.get_response(200, {'attendees': encoding.camelize(attendees)})


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """List the registered attendees of an event."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
