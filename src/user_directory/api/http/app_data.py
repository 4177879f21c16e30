from dataclasses import dataclass

from loguru import logger

from src.user_directory.core.cache.cache_store import create_cache_store
from src.user_directory.core.cache.search_cache import SearchCache
from src.user_directory.core.events.dispatcher import EventDispatcher, UserUpdated
from src.user_directory.core.repositories.user_directory import UserDirectoryRepository
from src.user_directory.core.services.database.db_manage import DbManageService
from src.user_directory.core.services.database.db_session import DbSessionService
from src.user_directory.core.services.notification import (
    NotificationService,
    UserUpdateNotifier,
)
from src.user_directory.core.services.redis_service import RedisService
from src.user_directory.core.services.search.search_service import UserSearchService
from src.user_directory.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    search_service: UserSearchService
    notification_service: NotificationService
    user_directory: UserDirectoryRepository
    dispatcher: EventDispatcher
    cache: SearchCache | None = None
    redis_service: RedisService | None = None

    async def close(self) -> None:
        if self.redis_service is not None:
            await self.redis_service.close()
        self.database_service.dispose()


def wire_services(
    config: ConfigData,
    database_service: DbSessionService,
    cache: SearchCache | None,
    redis_service: RedisService | None = None,
) -> ApplicationDependencies:
    """Assemble the service graph around an existing database and cache."""
    dispatcher = EventDispatcher()
    dispatcher.subscribe(UserUpdated, UserUpdateNotifier(database_service))

    search_service = UserSearchService(database_service, cache, config.search)
    notification_service = NotificationService(database_service, config.notifications)
    user_directory = UserDirectoryRepository(
        database_service, search_service, notification_service, dispatcher
    )
    return ApplicationDependencies(
        database_service=database_service,
        search_service=search_service,
        notification_service=notification_service,
        user_directory=user_directory,
        dispatcher=dispatcher,
        cache=cache,
        redis_service=redis_service,
    )


async def build_dependencies(config: ConfigData) -> ApplicationDependencies:
    """Create every application-wide service from configuration."""
    database_service = DbSessionService()
    if config.database.is_sqlite:
        DbManageService(database_service.engine).create_all()

    redis_service = RedisService(config.redis, config.app.environment)

    cache = None
    if config.cache.enabled:
        store = await create_cache_store(
            config.redis, redis_service.get_client(), config.cache.memory_maxsize
        )
        cache = SearchCache.from_config(store, config.cache)
    else:
        logger.info("Search cache disabled by configuration")

    return wire_services(config, database_service, cache, redis_service)
