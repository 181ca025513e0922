from talentdesk.backend.api import BackendAPI
_client = None

def get_backend_client():
    '''
    Returns a singleton instance of the BackendAPI class
    '''
    global _client
    if _client is None:
        from talentdesk.config import get_config
        cfg = get_config()
        _client = BackendAPI(cfg.BACKEND_BASE_URL, cfg.BACKEND_API_TOKEN, cfg.BACKEND_TIMEOUT_SECONDS)
    return _client


def reset_backend_client():
    '''Drop the cached client so the next call rebuilds it from config.'''
    global _client
    _client = None
