import jwt
import pytest

from conftest import InMemoryDeploymentRepository, RecordingNotifier, make_deployment
from oidc_login.lti.errors import DeploymentNotFoundError, InvalidPlatformError, MissingParameterError
from oidc_login.lti.platforms import CANVAS, SCHOOLOGY
from oidc_login.lti.resolver import DeploymentResolver, extract_domain_hint, normalize_platform_id

P = "https://lms.example.com"


def _resolver(*deployments, registration_url="https://register.example.com"):
    repo = InMemoryDeploymentRepository(*deployments)
    notifier = RecordingNotifier()
    return DeploymentResolver(repo, notifier, registration_url=registration_url), repo, notifier


def test_normalize_strips_one_trailing_slash():
    assert normalize_platform_id("https://x.com/") == "https://x.com"
    assert normalize_platform_id("https://x.com") == "https://x.com"


@pytest.mark.parametrize("platform_id", ["http://x.com", "ftp://x.com", "x.com", "https://"])
def test_normalize_rejects_insecure_platform(platform_id):
    with pytest.raises(InvalidPlatformError):
        normalize_platform_id(platform_id)


def test_resolve_rejects_insecure_platform_before_lookup():
    resolver, repo, notifier = _resolver(make_deployment(platform_id=P))
    with pytest.raises(InvalidPlatformError):
        resolver.resolve("http://lms.example.com", "d1", None, {})
    assert notifier.sent == []


def test_trailing_slash_resolves_identically():
    d = make_deployment(platform_id=P, deployment_id="d1")
    resolver, _, _ = _resolver(d, make_deployment(platform_id=P, deployment_id="d2"))
    assert resolver.resolve(P + "/", "d1", None, {}) is resolver.resolve(P, "d1", None, {})


def test_exact_match_wins_over_single_tenant_fallback():
    d1 = make_deployment(platform_id=P, deployment_id="D1")
    d2 = make_deployment(platform_id=P, deployment_id="D2")
    resolver, repo, notifier = _resolver(d1, d2)
    assert resolver.resolve(P, "D1", None, {}) is d1
    assert resolver.resolve(P, "D2", None, {}) is d2
    assert repo.puts == 0
    assert notifier.sent == []


def test_single_tenant_fallback_ignores_wrong_discriminator():
    only = make_deployment(platform_id=P, deployment_id="real")
    resolver, repo, notifier = _resolver(only)
    assert resolver.resolve(P, "something-else", None, {}) is only
    assert resolver.resolve(P, None, None, {}) is only
    assert repo.puts == 0
    assert notifier.sent == []


def test_single_tenant_fallback_is_scoped_to_platform_prefix():
    other = make_deployment(platform_id="https://lms.example.com.evil", deployment_id="x")
    resolver, _, _ = _resolver(other)
    with pytest.raises(DeploymentNotFoundError):
        resolver.resolve(P, "x", None, {})


def test_ambiguous_tenants_for_unknown_platform_is_not_found():
    resolver, repo, notifier = _resolver(
        make_deployment(platform_id=P, deployment_id="d1"),
        make_deployment(platform_id=P, deployment_id="d2"),
    )
    params = {"iss": P, "login_hint": "u1", "deployment_id": "d3"}
    with pytest.raises(DeploymentNotFoundError) as excinfo:
        resolver.resolve(P, "d3", None, params)
    assert "https://register.example.com" in str(excinfo.value)
    assert repo.puts == 0
    subject, message = notifier.sent[0]
    assert subject == "AuthToken Request Failure (Production)"
    assert "deployment_id=d3" in message
    assert "login_hint=u1" in message


def test_canvas_first_contact_auto_registers():
    resolver, repo, notifier = _resolver()
    params = {"iss": CANVAS.platform_id, "deployment_id": "dep1", "client_id": "cid1"}
    d = resolver.resolve(CANVAS.platform_id, "dep1", "cid1", params)

    assert repo.puts == 1
    assert repo.get_exact("https://canvas.instructure.com/dep1") is d
    assert d.status == "auto"
    assert d.licenses_remaining == 0
    assert d.deployment_id == "dep1"
    assert d.client_id == "cid1"
    assert d.oidc_auth_url == CANVAS.oidc_auth_url
    assert d.oauth_access_token_url == CANVAS.oauth_access_token_url
    assert d.well_known_jwks_url == CANVAS.well_known_jwks_url
    assert d.lms_type == "canvas"
    assert (d.contact_name, d.email, d.organization, d.org_url) == (None, None, None, None)

    subject, message = notifier.sent[0]
    assert subject == "Automatic Canvas Registration"
    assert "client_id=cid1" in message


def test_second_contact_after_auto_registration_hits_exact_match():
    resolver, repo, notifier = _resolver()
    first = resolver.resolve(SCHOOLOGY.platform_id, "hint-7", "cid", {})
    again = resolver.resolve(SCHOOLOGY.platform_id, "hint-7", "cid", {})
    assert again is first
    assert repo.puts == 1
    assert len(notifier.sent) == 1


def test_auto_registration_requires_client_id():
    resolver, repo, notifier = _resolver()
    with pytest.raises(MissingParameterError) as excinfo:
        resolver.resolve(CANVAS.platform_id, "dep1", None, {"lti_deployment_id": "dep1"})
    assert excinfo.value.parameter == "client_id"
    assert repo.puts == 0
    assert len(notifier.sent) == 1
    subject, message = notifier.sent[0]
    assert subject == "AuthToken Request Failure (Production)"
    assert "lti_deployment_id=dep1" in message


def test_auto_registration_notice_includes_canvas_domain():
    hint = jwt.encode({"canvas_domain": "school.instructure.com"}, "platform-key", algorithm="HS256")
    resolver, _, notifier = _resolver()
    params = {"client_id": "cid1", "lti_message_hint": hint}
    resolver.resolve(CANVAS.platform_id, "dep1", "cid1", params)
    assert "Platform domain: school.instructure.com" in notifier.sent[0][1]


def test_unreadable_message_hint_does_not_block_registration():
    resolver, repo, notifier = _resolver()
    params = {"client_id": "cid1", "lti_message_hint": "not-a-jwt"}
    d = resolver.resolve(CANVAS.platform_id, "dep1", "cid1", params)
    assert d.status == "auto"
    assert "Platform domain" not in notifier.sent[0][1]


def test_extract_domain_hint_only_for_profiles_with_claim():
    hint = jwt.encode({"canvas_domain": "a.example.com"}, "k", algorithm="HS256")
    assert extract_domain_hint(CANVAS, hint) == "a.example.com"
    assert extract_domain_hint(SCHOOLOGY, hint) is None
    assert extract_domain_hint(CANVAS, None) is None


def test_repository_failure_propagates():
    class BrokenRepository(InMemoryDeploymentRepository):
        def put(self, deployment):
            raise RuntimeError("datastore unavailable")

    resolver = DeploymentResolver(BrokenRepository(), RecordingNotifier())
    with pytest.raises(RuntimeError, match="datastore unavailable"):
        resolver.resolve(CANVAS.platform_id, "dep1", "cid1", {})
