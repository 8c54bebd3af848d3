"""Tests for CORS origin parsing and policy decisions."""
import pytest

from wellsense_hardening.security.domains.cors_configurator import (
    DEVELOPMENT_ORIGINS,
    CORSOriginError,
    get_cors_options,
    has_wildcard,
    is_origin_allowed,
    parse_allowed_origins,
    policy_allows,
)


def _decide(policy, origin):
    calls = []
    policy.origin(origin, lambda *args: calls.append(args))
    assert len(calls) == 1
    return calls[0]


class TestParseAllowedOrigins:
    """Test suite for parse_allowed_origins."""

    def test_splits_and_trims(self):
        """Test that entries are trimmed and empty segments dropped."""
        raw = " https://a.example.com , ,https://b.example.com,"
        assert parse_allowed_origins(raw) == ["https://a.example.com", "https://b.example.com"]

    @pytest.mark.parametrize("raw", [None, "", 42, ["https://a.example.com"]])
    def test_invalid_input_returns_empty_list(self, raw):
        """Test that empty or non-string input yields no origins."""
        assert parse_allowed_origins(raw) == []


class TestIsOriginAllowed:
    """Test suite for is_origin_allowed."""

    def test_exact_match(self):
        """Test that an exact match is allowed."""
        assert is_origin_allowed("https://app.example.com", ["https://app.example.com"])

    @pytest.mark.parametrize("origin", [
        "https://APP.example.com",
        "http://app.example.com",
        "https://app.example.com:8443",
        "https://app.example.com/",
    ])
    def test_match_is_case_scheme_and_port_sensitive(self, origin):
        """Test that near-misses are rejected."""
        assert not is_origin_allowed(origin, ["https://app.example.com"])

    def test_missing_origin_or_list(self):
        """Test that absent or malformed inputs are rejected."""
        assert not is_origin_allowed(None, ["https://app.example.com"])
        assert not is_origin_allowed("https://app.example.com", None)
        assert not is_origin_allowed("https://app.example.com", "https://app.example.com")


class TestHasWildcard:
    """Test suite for has_wildcard."""

    @pytest.mark.parametrize("raw", [
        "*",
        "https://*.example.com",
        "https://a.example.com,*,https://b.example.com",
    ])
    def test_detects_wildcard_anywhere(self, raw):
        """Test that any asterisk is a wildcard."""
        assert has_wildcard(raw)

    @pytest.mark.parametrize("raw", [None, "", "https://a.example.com,https://b.example.com"])
    def test_no_wildcard(self, raw):
        """Test plain origin lists and empty input."""
        assert not has_wildcard(raw)


class TestGetCORSOptions:
    """Test suite for get_cors_options."""

    def test_fixed_fields(self):
        """Test the environment-independent policy fields."""
        policy = get_cors_options({"CORS_ORIGIN": "https://app.example.com"}, "production")
        assert policy.credentials is True
        assert policy.methods == ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS")
        assert policy.allowed_headers == ("Content-Type", "Authorization", "X-Requested-With")
        assert policy.max_age == 600

    def test_production_allows_only_configured_origins(self):
        """Test production decisions for allowed and rejected origins."""
        policy = get_cors_options({"CORS_ORIGIN": "https://app.example.com"}, "production")

        assert _decide(policy, "https://app.example.com") == (None, True)

        (error,) = _decide(policy, "https://evil.example.com")
        assert isinstance(error, CORSOriginError)
        assert str(error) == "Origin not allowed by CORS"

        (error,) = _decide(policy, "http://localhost:3000")
        assert isinstance(error, CORSOriginError)

    @pytest.mark.parametrize("origin", [None, ""])
    def test_requests_without_origin_allowed(self, origin):
        """Test that non-browser clients are always allowed."""
        policy = get_cors_options({}, "production")
        assert _decide(policy, origin) == (None, True)

    @pytest.mark.parametrize("node_env", ["development", None, ""])
    def test_development_adds_localhost_origins(self, node_env):
        """Test that the local dev-server origins are unioned in."""
        policy = get_cors_options({"CORS_ORIGIN": "https://app.example.com"}, node_env)
        assert policy.allowed_origins == ("https://app.example.com",) + DEVELOPMENT_ORIGINS

    def test_development_does_not_duplicate_origins(self):
        """Test that configured localhost origins are not added twice."""
        policy = get_cors_options({"CORS_ORIGIN": "http://localhost:3000"}, "development")
        assert policy.allowed_origins.count("http://localhost:3000") == 1
        assert len(policy.allowed_origins) == 4

    def test_test_environment_has_no_localhost_origins(self):
        """Test that only development gets the localhost origins."""
        policy = get_cors_options({}, "test")
        assert policy.allowed_origins == ()

    def test_decision_matches_is_origin_allowed(self):
        """Test that the policy agrees with is_origin_allowed for every origin."""
        allowed = ["https://a.example.com", "https://b.example.com:8443"]
        policy = get_cors_options({"CORS_ORIGIN": ",".join(allowed)}, "production")

        candidates = allowed + ["https://c.example.com", "https://A.example.com", "http://a.example.com"]
        for origin in candidates:
            decision = _decide(policy, origin)
            if is_origin_allowed(origin, allowed):
                assert decision == (None, True)
            else:
                assert isinstance(decision[0], CORSOriginError)

    def test_to_dict_and_policy_allows(self):
        """Test the diagnostic views of a policy."""
        policy = get_cors_options({"CORS_ORIGIN": "https://app.example.com"}, "production")
        assert policy.to_dict()["origins"] == ["https://app.example.com"]
        assert policy_allows(policy, ["https://app.example.com", "https://x.example.com"]) == {
            "https://app.example.com": True,
            "https://x.example.com": False,
        }
