import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.models import Notification
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch notifications')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    user_id = http.get_path_param(event, 'id')
    # Clients poll with the `timestamp` of the previous response.
    timestamp = db.iso_now()
    query = Notification.NotificationQuery(
        user_id=user_id,
        since=http.get_query_param(event, 'since'),
        limit=http.get_int_query_param(event, 'limit',
                                       config.notification_limit))
    notifications = Notification.fetch_all(database, query)
    return http.get_response(200, {
        'notifications': encoding.camelize(notifications),
        'timestamp': timestamp
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """List the notifications of a user, newest first."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
