from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from j_artifact_resolver.config import (
    CENTRAL_ID,
    CENTRAL_URL,
    DEFAULT_LOCAL_REPOSITORY,
    Credentials,
    ProxySettings,
    RepositoryConfig,
    UpdatePolicy,
    parse_remote_repositories,
)


def test_credentials_present_only_with_both_fields() -> None:
    assert Credentials(username="u", password="p").present
    assert not Credentials(username="u").present
    assert not Credentials(password="p").present
    assert not Credentials(username="", password="p").present


def test_proxy_enabled_requires_host_and_port() -> None:
    assert ProxySettings(host="proxy", port=3128).enabled
    assert not ProxySettings(host="proxy", port=0).enabled
    assert not ProxySettings(host="", port=3128).enabled
    assert ProxySettings().protocol == "http"


def test_defaults() -> None:
    config = RepositoryConfig()
    assert config.local_repository == DEFAULT_LOCAL_REPOSITORY
    assert Path(DEFAULT_LOCAL_REPOSITORY).parts[-2:] == (".m2", "repository")
    assert config.remote_repositories == {}
    assert config.offline is False
    assert config.resolve_descriptor is False
    assert config.connect_timeout is None
    assert config.request_timeout is None


def test_from_env_defaults_to_central() -> None:
    config = RepositoryConfig.from_env({})
    assert config.repository_names == [CENTRAL_ID]
    assert config.remote_repositories[CENTRAL_ID].url == CENTRAL_URL
    assert config.proxy is None


def test_from_env_reads_everything() -> None:
    env = {
        "JRES_LOCAL_REPOSITORY": "/tmp/m2",
        "JRES_REMOTE_REPOSITORIES": (
            "spring=https://repo.spring.io/libs, internal-repo=https://nexus/x"
        ),
        "JRES_REPO_INTERNAL_REPO_USERNAME": "bob",
        "JRES_REPO_INTERNAL_REPO_PASSWORD": "secret",
        "JRES_OFFLINE": "true",
        "JRES_PROXY_HOST": "proxy.corp",
        "JRES_PROXY_PORT": "3128",
        "JRES_PROXY_NON_PROXY_HOSTS": "localhost|*.corp",
        "JRES_PROXY_USERNAME": "p",
        "JRES_PROXY_PASSWORD": "q",
        "JRES_CONNECT_TIMEOUT": "500",
        "JRES_REQUEST_TIMEOUT": "2000",
        "JRES_RESOLVE_DESCRIPTOR": "1",
        "JRES_SNAPSHOT_UPDATE_POLICY": "always",
    }
    config = RepositoryConfig.from_env(env)

    assert config.local_repository == "/tmp/m2"
    assert config.repository_names == ["spring", "internal-repo"]
    assert config.remote_repositories["spring"].credentials is None
    creds = config.remote_repositories["internal-repo"].credentials
    assert creds is not None and (creds.username, creds.password) == ("bob", "secret")
    assert config.offline is True
    assert config.proxy_enabled
    assert config.proxy.non_proxy_hosts == "localhost|*.corp"
    assert config.proxy.has_credentials
    assert (config.connect_timeout, config.request_timeout) == (500, 2000)
    assert config.resolve_descriptor is True
    assert config.snapshot_update_policy == "always"


def test_from_env_drops_incomplete_proxy_credentials() -> None:
    config = RepositoryConfig.from_env(
        {"JRES_PROXY_HOST": "proxy", "JRES_PROXY_PORT": "8080", "JRES_PROXY_USERNAME": "u"}
    )
    assert config.proxy_enabled
    assert config.proxy.credentials is None


def test_parse_remote_repositories_keeps_order() -> None:
    repos = parse_remote_repositories("b=http://b, a=http://a,,c=file:///c")
    assert list(repos) == ["b", "a", "c"]


def test_parse_remote_repositories_rejects_missing_url() -> None:
    with pytest.raises(ValueError, match="name=url"):
        parse_remote_repositories("central")


@pytest.mark.parametrize("policy", ["always", "never", "interval:30", "Daily"])
def test_update_policy_is_accepted(policy: str) -> None:
    config = RepositoryConfig(snapshot_update_policy=policy)
    assert UpdatePolicy.parse(config.snapshot_update_policy).name == policy.lower()


def test_unknown_update_policy_is_rejected_on_construction() -> None:
    with pytest.raises(ValidationError, match="Unsupported update policy"):
        RepositoryConfig(snapshot_update_policy="weekly")


def test_from_env_rejects_unknown_update_policy() -> None:
    with pytest.raises(ValueError, match="Unsupported update policy"):
        RepositoryConfig.from_env({"JRES_SNAPSHOT_UPDATE_POLICY": "weekly"})


def test_zero_timeouts_are_allowed() -> None:
    config = RepositoryConfig(connect_timeout=0, request_timeout=0)
    assert (config.connect_timeout, config.request_timeout) == (0, 0)


@pytest.mark.parametrize("field", ["connect_timeout", "request_timeout"])
def test_negative_timeouts_are_rejected(field: str) -> None:
    with pytest.raises(ValidationError):
        RepositoryConfig(**{field: -1})
