import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import User
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch users')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    users = User.fetch_all(database)
    return http.get_response(200, {'users': encoding.camelize(users)})


@http.handle_errors('Failed to create user')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    body = http.parse_body(event)
    external_id = body.pop('Id', None)
    user = User.create(database, body, external_id=external_id)
    _log.info(f'Created user {user["Id"]}')
    return http.get_response(201, {
        'status': 'success',
        'user': encoding.camelize(user)
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """List or create users."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
