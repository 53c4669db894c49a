import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Connection, User
from eventhub.common.models.errors import ConflictError, ValidationError
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch connections')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    user_id = http.get_query_param(event, 'userId')
    if not user_id:
        raise ValidationError('User ID is required')
    user = User.fetch(database, user_id)
    query = Connection.ConnectionQuery(
        user_id=user['Id'],
        status=http.get_query_param(event, 'status'))
    connections = Connection.fetch_all(database, query)
    return http.get_response(200, {
        'status': 'success',
        'connections': encoding.camelize(connections)
    })


@http.handle_errors('Failed to send connection request')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    body = http.parse_body(event)
    requester_id = body.get('RequesterId')
    recipient_id = body.get('RecipientId')
    if not requester_id or not recipient_id:
        raise ValidationError('Both requester and recipient IDs are required')
    requester = User.fetch(database, requester_id)
    recipient = User.fetch(database, recipient_id)
    try:
        connection = Connection.create(database, requester['Id'],
                                       recipient['Id'])
    except ConflictError as e:
        # Clients expect 400 with the status of the existing connection.
        return http.get_error_response(400, e.message, e.details)
    _log.info(f'Connection requested {connection["Id"]}')
    return http.get_response(201, {
        'status': 'success',
        'message': 'Connection request sent successfully',
        'connection': encoding.camelize(connection)
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """List the connections of a user or send a connection request."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
