#  Latam Site - Dependency Injection Container
#
#  DeclarativeContainer wiring the gate stores and the downstream
#  collaborators (email, AI proxy).
#
#  Depends on: config.py, rate_limit.py, services/*
#  Used by:    app.py, routes/*, middleware/gate.py

import httpx
from dependency_injector import containers, providers

from latam_site.config import (
    AI_CHAT_MODEL,
    AI_CHAT_TIMEOUT,
    AI_CHAT_URL,
    CSRF_TOKEN_TTL,
    EMAIL_HOST,
    EMAIL_PASSWORD,
    EMAIL_PORT,
    EMAIL_SERVICE,
    EMAIL_TIMEOUT,
    EMAIL_TO,
    EMAIL_USER,
    HF_TOKEN,
)
from latam_site.rate_limit import RateLimiter, default_policies, limiter
from latam_site.services.ai_chat import AIChatService
from latam_site.services.contact import ContactService
from latam_site.services.csrf import TokenStore
from latam_site.services.email import EmailService
from latam_site.services.store import MemoryStore


class Container(containers.DeclarativeContainer):
    """DI container for the site backend.

    Stores and collaborators are Singletons, one instance per process.
    Routes access them via @inject + Depends(Provide[Container.xxx]).
    Tests override them via container.xxx.override(providers.Object(mock)).
    """

    wiring_config = containers.WiringConfiguration(
        modules=[
            "latam_site.routes.csrf",
            "latam_site.routes.contact",
            "latam_site.routes.chat",
            "latam_site.middleware.gate",
        ]
    )

    # --- Core ---
    http_client = providers.Singleton(httpx.AsyncClient, timeout=AI_CHAT_TIMEOUT)
    kv_store = providers.Singleton(MemoryStore)

    # --- Gate ---
    token_store = providers.Singleton(TokenStore, store=kv_store, ttl_seconds=CSRF_TOKEN_TTL)
    rate_limiter = providers.Singleton(
        RateLimiter,
        strategy=limiter.limiter,
        policies=providers.Callable(default_policies),
    )

    # --- Collaborators ---
    email = providers.Singleton(
        EmailService,
        user=EMAIL_USER,
        password=EMAIL_PASSWORD,
        service=EMAIL_SERVICE,
        to=EMAIL_TO,
        host=EMAIL_HOST,
        port=EMAIL_PORT,
        timeout=EMAIL_TIMEOUT,
    )
    ai_chat = providers.Singleton(
        AIChatService,
        http_client=http_client,
        token=HF_TOKEN,
        url=AI_CHAT_URL,
        model=AI_CHAT_MODEL,
        timeout=AI_CHAT_TIMEOUT,
    )

    # --- Handlers ---
    contact = providers.Factory(ContactService, email=email)
