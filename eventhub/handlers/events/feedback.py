import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Event, Feedback, User
from eventhub.common.models.errors import ValidationError
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch feedback')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    found = Event.fetch(database, http.get_path_param(event, 'id'))
    feedback = Feedback.fetch_all(database, found['Id'])
    return http.get_response(200, {'feedback': encoding.camelize(feedback)})


@http.handle_errors('Failed to submit feedback')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    user_id = http.get_query_param(event, 'userId')
    if not user_id:
        raise ValidationError('userId is required')
    body = http.parse_body(event)
    found = Event.fetch(database, http.get_path_param(event, 'id'))
    user = User.fetch(database, user_id)
    Feedback.create(database, found['Id'], user['Id'],
                    rating=body.get('Rating'),
                    comment=body.get('Comment'),
                    anonymous=bool(body.get('Anonymous', False)))
    _log.info(f'Feedback from {user["Id"]} on {found["Id"]}')
    return http.get_response(201, {
        'message': 'Feedback submitted successfully'
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """List or submit feedback on an event."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
