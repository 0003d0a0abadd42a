from fitclient.config.settings import DEFAULT_CACHE_TTL_SECONDS, Settings


def test_defaults():
    config = Settings()

    assert config.cache_ttl_seconds == DEFAULT_CACHE_TTL_SECONDS
    assert config.cache_ttl_millis == 60 * 60 * 1000
    assert config.reachability_url == config.api_url


def test_invalid_log_level_defaults_to_info():
    assert Settings(LOG_LEVEL="chatty").log_level == "INFO"
    assert Settings(LOG_LEVEL="debug").log_level == "DEBUG"


def test_explicit_reachability_url():
    config = Settings(API_URL="https://api.example.com", REACHABILITY_URL="https://status.example.com")

    assert config.reachability_url == "https://status.example.com"
