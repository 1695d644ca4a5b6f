"""Use the operating system certificate store for HTTPS.

Self-hosted CalDAV servers (Nextcloud, Radicale, Baikal behind a corporate
proxy) are often signed by a CA that only the OS trust store knows about.
The optional ``truststore`` package makes ``requests`` verify against it.
"""

import logging

logger = logging.getLogger(__name__)

_ssl_initialized = False


def init_ssl(enabled: bool = True) -> bool:
    """
    Inject the OS trust store into Python's SSL context once.

    Args:
        enabled: Set to False to keep the certifi bundle

    Returns:
        True if the OS trust store is in use
    """
    global _ssl_initialized

    if not enabled:
        logger.debug("System truststore disabled, using default certificates")
        return False
    if _ssl_initialized:
        return True

    try:
        import truststore
    except ImportError:
        logger.debug("truststore not installed, using default certificates")
        return False

    truststore.inject_into_ssl()
    _ssl_initialized = True
    logger.debug("SSL truststore injected")
    return True
