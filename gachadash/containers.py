from dependency_injector import containers, providers

from gachadash.config import settings
from gachadash.services.gacha_client import GachaApiClient
from gachadash.services.leaderboard_service import LeaderboardService
from gachadash.services.profile_store import ProfileStore
from gachadash.services.redis_service import RedisService
from gachadash.services.report_service import ReportService
from gachadash.services.wallet_service import WalletService
from gachadash.utils.sequencer import RequestSequencer


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Object(settings)


class ClientModule(containers.DeclarativeContainer):
    """Long-lived clients shared across requests."""

    config = providers.DependenciesContainer()

    gacha_client = providers.Singleton(GachaApiClient, settings=config.config)
    redis_service = providers.Singleton(RedisService, settings=config.config)
    profile_store = providers.Singleton(ProfileStore, settings=config.config)
    sequencer = providers.Singleton(RequestSequencer)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies."""

    config = providers.DependenciesContainer()
    clients = providers.DependenciesContainer()

    leaderboard_service = providers.Factory(
        LeaderboardService,
        settings=config.config,
        client=clients.gacha_client,
        redis_service=clients.redis_service,
    )
    report_service = providers.Factory(
        ReportService,
        settings=config.config,
        client=clients.gacha_client,
        redis_service=clients.redis_service,
    )
    wallet_service = providers.Factory(
        WalletService,
        settings=config.config,
        client=clients.gacha_client,
        leaderboard_service=leaderboard_service,
        profile_store=clients.profile_store,
        sequencer=clients.sequencer,
    )


class Container(containers.DeclarativeContainer):
    """Application container."""

    config = providers.Container(ConfigModule)
    clients = providers.Container(ClientModule, config=config)
    services = providers.Container(ServiceModule, config=config, clients=clients)
