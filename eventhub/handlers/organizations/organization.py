import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.models import Organization
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch organization')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    org = Organization.fetch(database, http.get_path_param(event, 'id'))
    return http.get_response(200, {
        'status': 'success',
        'organization': encoding.camelize(org)
    })


@http.handle_errors('Failed to update organization')
def _patch_handler(database: db.Database, event: ProxyEvent) \
        -> ProxyResponse:
    organization_id = http.get_path_param(event, 'id')
    body = http.parse_body(event)
    org = Organization.update(database, organization_id, body)
    return http.get_response(200, {
        'status': 'success',
        'message': 'Organization updated successfully',
        'organization': encoding.camelize(org)
    })


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Get or update an organization."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    elif http_method == 'PATCH':
        return _patch_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
