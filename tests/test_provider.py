import pytest

from schemastore.provider import (
    UNKNOWN,
    ConfigurationError,
    Diagnostic,
    ProviderConfig,
    SchemaProvider,
)


class _Recorder:
    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result if result is not None else object()
        self.error = error

    def __call__(self, *args):
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        return self.result


def _config(**overrides):
    values = {
        "profile": "dev-profile",
        "region": "us-west-2",
        "table_name": "rows",
        "kms_key_arn": "arn:aws:kms:us-west-2:000000000000:key/placeholder",
    }
    values.update(overrides)
    return ProviderConfig(**values)


def test_metadata_joins_version_and_commit():
    provider = SchemaProvider("dev", "unknown", _Recorder())
    assert provider.metadata() == {"type_name": "schema", "version": "dev-unknown"}


def test_schema_requires_every_attribute():
    attributes = SchemaProvider("1", "abc", _Recorder()).schema()["attributes"]
    assert set(attributes) == {"profile", "region", "table_name", "kms_key_arn"}
    assert all(attr["required"] for attr in attributes.values())


def test_configure_passes_values_to_factory_and_returns_client():
    factory = _Recorder()
    provider = SchemaProvider("1", "abc", factory)
    config = _config()
    client = provider.configure(config)
    assert client is factory.result
    assert factory.calls == [
        (config.profile, config.region, config.table_name, config.kms_key_arn)
    ]


def test_unknown_profile_is_reported():
    factory = _Recorder()
    provider = SchemaProvider("1", "abc", factory)
    with pytest.raises(ConfigurationError) as info:
        provider.configure(_config(profile=UNKNOWN))
    assert info.value.diagnostics == [
        Diagnostic(
            summary="Unknown profile",
            detail="Cannot configure the provider client with an unknown profile.",
            attribute="profile",
        )
    ]
    assert factory.calls == []


def test_all_unknown_values_reported_in_order():
    provider = SchemaProvider("1", "abc", _Recorder())
    config = ProviderConfig(UNKNOWN, UNKNOWN, UNKNOWN, UNKNOWN)
    with pytest.raises(ConfigurationError) as info:
        provider.configure(config)
    assert [d.attribute for d in info.value.diagnostics] == [
        "profile",
        "region",
        "table_name",
        "kms_key_arn",
    ]
    assert {d.severity for d in info.value.diagnostics} == {"error"}


def test_factory_failure_becomes_configuration_error():
    provider = SchemaProvider("1", "abc", _Recorder(error=RuntimeError("no credentials")))
    with pytest.raises(ConfigurationError) as info:
        provider.configure(_config())
    (diag,) = info.value.diagnostics
    assert diag.summary == "Unable to create provider client"
    assert diag.detail.endswith("\n\nno credentials")
    assert diag.attribute is None


def test_provider_offers_no_data_sources_or_resources():
    provider = SchemaProvider("1", "abc", _Recorder())
    assert provider.data_sources() == []
    assert provider.resources() == []