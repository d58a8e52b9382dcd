"""
STUDYHUB Access Core - Store Call

Borne chaque aller-retour vers un collaborateur externe par un timeout.
L'annulation de l'appelant (CancelledError) est propagée telle quelle.
"""

import asyncio
from typing import Awaitable, TypeVar

from .interfaces import StoreUnavailableError

T = TypeVar("T")


async def call_store(awaitable: Awaitable[T], operation: str, timeout: float) -> T:
    """
    Exécute un appel store avec timeout.

    Args:
        awaitable: Appel store à attendre
        operation: Nom de l'opération (diagnostic)
        timeout: Délai max en secondes

    Returns:
        Résultat de l'appel

    Raises:
        StoreUnavailableError: Timeout ou erreur de connexion
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except StoreUnavailableError:
        raise
    except asyncio.TimeoutError as e:
        raise StoreUnavailableError(operation, e) from e
    except (ConnectionError, OSError) as e:
        raise StoreUnavailableError(operation, e) from e
