import eventhub.common.db as db
from eventhub.common import encoding, http
from eventhub.common.config import config
from eventhub.common.models import Organization, Stats
from eventhub.common.types.lambd import LambdaContext, ProxyEvent, \
    ProxyResponse


_database = db.Database(config.main_table, config.inverse_index,
                        region_name=config.aws_region)


@http.handle_errors('Failed to fetch organization stats')
def _get_handler(database: db.Database, event: ProxyEvent) -> ProxyResponse:
    org = Organization.fetch(database, http.get_path_param(event, 'id'))
    stats = Stats.get_organization_stats(database, org)
    return http.get_response(200, encoding.camelize(stats, deep=True))


def handler(event: ProxyEvent, context: LambdaContext) -> ProxyResponse:
    """Get the dashboard statistics of an organization."""
    http_method = event['httpMethod']

    if http_method == 'GET':
        return _get_handler(_database, event)
    else:
        # If an unsupported method is allowed to invoke this handler, that's a
        # misconfiguration in the Cloudformation template.
        raise RuntimeError(f'Method not allowed: {http_method}')
