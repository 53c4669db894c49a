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
    email = http.get_path_param(event, 'email')
    user = User.fetch_by_email(database, email)
    return http.get_response(200, {
        'status': 'success',
        'user': encoding.camelize(user)
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Look up a user by email address."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
