import eventhub.common.db as db
from eventhub.common import http
from eventhub.common.config import config
from eventhub.common.logging import get_logger
from eventhub.common.models import Event, Registration, User
from eventhub.common.models.errors import ValidationError
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_log = get_logger(__name__)

_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to process registration')
def _post_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    found = Event.fetch(database, http.get_path_param(event, 'id'))
    body = http.parse_body(event)
    user_id = body.pop('UserId', None)
    if not user_id or not body.get('RegistrationFormId'):
        raise ValidationError('Missing required fields')
    user = User.fetch(database, user_id)
    registration_id = Registration.create(database, found, user['Id'], body)
    _log.info(f'User {user["Id"]} registered for {found["Id"]}')
    return http.get_response(201, {
        'success': True,
        'message': 'Registration successful',
        'registrationId': registration_id
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Register a user for an event."""
    http_method = event['httpMethod']

    if http_method == 'POST':
        return _post_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
