import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.models import User
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch user')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    user_id = http.get_path_param(event, 'id')
    user = User.fetch(database, user_id)
    user['Organizations'] = User.fetch_organization_ids(database, user['Id'])
    return http.get_response(200, {
        'status': 'success',
        'user': encoding.camelize(user)
    })


@http.handle_errors('Failed to update user')
def _patch_handler(database: db.Database, event: ProxyEvent) \
        -> ProxyResponse:
    user_id = http.get_path_param(event, 'id')
    body = http.parse_body(event)
    user = User.update(database, user_id, body)
    return http.get_response(200, {
        'status': 'success',
        'message': 'Profile updated successfully',
        'user': encoding.camelize(user)
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Get or update the profile of a user."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'PATCH':
        return _patch_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
