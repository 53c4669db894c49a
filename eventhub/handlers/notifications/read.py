import eventhub.common.db as db
from eventhub.common import http
from eventhub.common.config import config
from eventhub.common.models import Notification
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to mark notification as read')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    Notification.mark_read(database, http.get_path_param(event, 'id'))
    return http.get_response(200, {'success': True})


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Mark a notification as read."""
    http_method = event['httpMethod']

    if http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
