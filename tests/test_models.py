# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
# pyright: reportMissingParameterType=false
import pytest

from callconf.builder import RequestBuilder
from callconf.errors import CallAbortedError, UnknownDataSourceError
from callconf.models import DataSource, StaticDataSourceResolver, model_method
from callconf.registry import GlobalRegistry
from callconf.types import Abort

ENDPOINT = "user.getDetails"


class RecordingTransport:
    def __init__(self, response="ok"):
        self.response = response
        self.calls = []

    async def __call__(self, config):
        self.calls.append(config)
        return self.response


@pytest.fixture
def registry():
    return GlobalRegistry()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def resolver(transport):
    return StaticDataSourceResolver(
        {ENDPOINT: DataSource("https://users.example.com", transport)}
    )


@pytest.fixture
def get_user_details(resolver, registry):
    @model_method(ENDPOINT, resolver=resolver, registry=registry)
    def get_user_details(builder, user_id):
        """Fetch one user's profile."""
        builder.add_url_params("users", user_id)
        builder.add_headers({"Accept": "application/json"})

    return get_user_details


def test_decorating_registers_endpoint(get_user_details, registry):
    assert ENDPOINT in registry
    assert get_user_details.endpoint_key == ENDPOINT
    assert get_user_details.__name__ == "get_user_details"
    assert get_user_details.__doc__ == "Fetch one user's profile."


def test_each_call_returns_a_fresh_seeded_builder(get_user_details):
    first = get_user_details(1)
    second = get_user_details(2)

    assert isinstance(first, RequestBuilder)
    assert first is not second
    assert first.endpoint_key == ENDPOINT
    assert first.base_url == "https://users.example.com"
    assert first.preview().url == "https://users.example.com/users/1"
    assert second.preview().url == "https://users.example.com/users/2"


@pytest.mark.asyncio
async def test_call_site_override_does_not_leak(get_user_details, transport):
    await get_user_details(1).add_headers({"Accept": "text/csv"}).execute()
    await get_user_details(2).execute()

    assert transport.calls[0].headers["Accept"] == "text/csv"
    assert transport.calls[1].headers["Accept"] == "application/json"


@pytest.mark.asyncio
async def test_model_builders_use_global_registry(
    get_user_details, registry, transport
):
    registry.set_global_defaults(ENDPOINT, headers={"Authority": "token1"})
    registry.add_global_interceptor(
        ENDPOINT,
        pre_call=lambda config: Abort("blocked")
        if config.url_params[-1] == "0"
        else None,
    )

    await get_user_details(7).execute()
    with pytest.raises(CallAbortedError, match="blocked"):
        await get_user_details(0).execute()

    assert len(transport.calls) == 1
    assert transport.calls[0].headers["Authority"] == "token1"


def test_model_method_without_registry(resolver):
    @model_method(ENDPOINT, resolver=resolver)
    def ping(builder):
        builder.set_method("HEAD")

    assert ping().preview().method == "HEAD"


def test_resolver_falls_back_to_default(transport):
    fallback = DataSource("https://fallback.example.com", transport)
    resolver = StaticDataSourceResolver(default=fallback)

    assert resolver.resolve("anything") is fallback


def test_resolver_raises_for_unknown_endpoint(transport):
    resolver = StaticDataSourceResolver(
        {ENDPOINT: DataSource("https://users.example.com", transport)}
    )

    with pytest.raises(UnknownDataSourceError, match="user.list"):
        resolver.resolve("user.list")


def test_unknown_data_source_surfaces_at_call_time():
    @model_method("user.list", resolver=StaticDataSourceResolver())
    def list_users(builder):
        pass

    with pytest.raises(UnknownDataSourceError):
        list_users()


def test_data_source_validates_fields(transport):
    with pytest.raises(ValueError):
        DataSource("", transport)
    with pytest.raises(TypeError):
        DataSource("https://users.example.com", None)  # type: ignore[arg-type]


def test_model_method_with_fixed_backend(registry, transport):
    @model_method(
        "user.list",
        base_url="https://users.example.com",
        transport=transport,
        registry=registry,
    )
    def list_users(builder, page):
        builder.add_url_params("users").add_query_params({"page": page})

    merged = list_users(2).preview()

    assert merged.url == "https://users.example.com/users"
    assert merged.query_params["page"] == 2
    assert "user.list" in registry


def test_model_method_requires_a_backend(transport):
    with pytest.raises(TypeError):
        model_method("user.list")
    with pytest.raises(TypeError):
        model_method("user.list", base_url="https://users.example.com")
    with pytest.raises(TypeError):
        model_method("user.list", transport=transport)


def test_model_method_rejects_resolver_and_fixed_backend(resolver, transport):
    with pytest.raises(TypeError):
        model_method(
            ENDPOINT,
            resolver=resolver,
            base_url="https://users.example.com",
            transport=transport,
        )
