"""Build the aggregator clients held on ``app.state``."""

from budget_api.aggregators.base import AggregatorClient
from budget_api.aggregators.plaid import PlaidClient
from budget_api.aggregators.teller import TellerClient, load_client_certificate
from budget_api.config import Settings
from budget_api.models.budget import AggregatorProvider


def build_aggregator_clients(settings: Settings) -> dict[AggregatorProvider, AggregatorClient]:
    return {
        AggregatorProvider.PLAID: PlaidClient(
            client_id=settings.plaid_client_id,
            secret=settings.plaid_secret,
            environment=settings.plaid_env,
            timeout=settings.aggregator_timeout_seconds,
        ),
        AggregatorProvider.TELLER: TellerClient(
            app_id=settings.teller_app_id,
            api_base=settings.teller_api_base,
            environment=settings.teller_environment,
            ssl_context=load_client_certificate(settings.teller_cert_path, settings.teller_key_path),
            currency=settings.currency,
            timeout=settings.aggregator_timeout_seconds,
        ),
    }
