import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Connection, User
from eventhub.common.models.errors import ValidationError
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to remove connection')
def _delete_handler(database: db.Database, event: ProxyEvent) \
        -> ProxyResponse:
    connection_id = http.get_path_param(event, 'id')
    user_id = http.get_query_param(event, 'userId')
    if not user_id:
        raise ValidationError('User ID is required')
    user = User.fetch(database, user_id)
    Connection.delete(database, connection_id, user['Id'])
    _log.info(f'Connection {connection_id} removed by {user["Id"]}')
    return http.get_response(200, {
        'status': 'success',
        'message': 'Connection removed successfully'
    })


@http.handle_errors('Failed to fetch connection')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    connection = Connection.fetch(database, http.get_path_param(event, 'id'))
    return http.get_response(200, {
        'status': 'success',
        'connection': encoding.camelize(connection)
    })


@http.handle_errors('Failed to update connection')
def _patch_handler(database: db.Database, event: ProxyEvent) \
        -> ProxyResponse:
    connection_id = http.get_path_param(event, 'id')
    body = http.parse_body(event)
    status = body.get('Status')
    user_id = body.get('UserId')
    if not user_id:
        raise ValidationError('User ID is required')
    user = User.fetch(database, user_id)
    connection = Connection.update_status(database, connection_id, status,
                                          user['Id'])
    return http.get_response(200, {
        'status': 'success',
        'message': f'Connection {status.lower()} successfully',
        'connection': encoding.camelize(connection)
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Get, update the status of or remove a connection."""
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
