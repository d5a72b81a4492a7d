"""
Unit tests for catalog models.
"""

import pytest
from pydantic import ValidationError

from service_catalog.app.catalog.models import ModelInfo, dump_catalog, load_catalog


class TestModelInfoFromUpstream:
    """Test cases for ModelInfo.from_upstream."""

    def test_full_item(self):
        item = {
            "id": "openai/gpt-4o",
            "canonical_slug": "openai/gpt-4o-2024-05-13",
            "slug": "ignored",
            "name": "GPT-4o",
            "description": "Omni model",
            "context_length": 128000,
            "pricing": {"prompt": "0.000005", "completion": 0.000015, "request": 0},
            "architecture": {"modality": "text->text"},
        }

        model = ModelInfo.from_upstream(item)

        assert model.id == "openai/gpt-4o"
        assert model.slug == "openai/gpt-4o-2024-05-13"
        assert model.name == "GPT-4o"
        assert model.description == "Omni model"
        assert model.context_length == 128000
        assert model.pricing == {"prompt": "0.000005", "completion": "1.5e-05", "request": "0"}

    def test_minimal_item_defaults_name_to_id(self):
        model = ModelInfo.from_upstream({"id": "a"})

        assert model == ModelInfo(id="a", name="a")
        assert model.slug is None
        assert model.pricing is None

    def test_slug_fallback(self):
        assert ModelInfo.from_upstream({"id": "a", "slug": "a-slug"}).slug == "a-slug"

    @pytest.mark.parametrize("item", [{}, {"name": "x"}, {"id": 42}, {"id": None}, "a", None, ["a"]])
    def test_unparsable_items(self, item):
        assert ModelInfo.from_upstream(item) is None

    @pytest.mark.parametrize("raw,expected", [(4096.0, 4096), (8192.9, 8192), ("4096", None), (True, None)])
    def test_context_length_coercion(self, raw, expected):
        assert ModelInfo.from_upstream({"id": "a", "context_length": raw}).context_length == expected

    def test_wrongly_typed_optional_fields_are_ignored(self):
        model = ModelInfo.from_upstream({"id": "a", "name": 5, "description": [], "pricing": "free"})

        assert model.name == "a"
        assert model.description is None
        assert model.pricing is None

    def test_non_numeric_pricing_values_are_json_encoded(self):
        model = ModelInfo.from_upstream({"id": "a", "pricing": {"discount": None, "flag": True}})

        assert model.pricing == {"discount": "null", "flag": "true"}

    def test_unencodable_strings_are_discarded(self):
        model = ModelInfo.from_upstream({
            "id": "a",
            "name": "bad \ud800",
            "canonical_slug": "\udfff",
            "slug": "a-slug",
            "description": "\ud800",
            "pricing": {"prompt": "\ud800", "\udc00": "1", "completion": "2"},
        })

        assert model.name == "a"
        assert model.slug == "a-slug"
        assert model.description is None
        assert model.pricing == {"completion": "2"}
        assert load_catalog(dump_catalog([model])) == [model]

    def test_unencodable_id_is_unparsable(self):
        assert ModelInfo.from_upstream({"id": "bad \ud800"}) is None

    def test_instances_are_frozen(self):
        model = ModelInfo.from_upstream({"id": "a"})

        with pytest.raises(ValidationError):
            model.name = "b"


class TestCatalogSerialization:
    """Test cases for dump_catalog / load_catalog."""

    def test_restores_cached_list(self):
        models = [
            ModelInfo(id="a", name="A", context_length=10, pricing={"prompt": "1"}),
            ModelInfo(id="b", name="b"),
        ]

        assert load_catalog(dump_catalog(models)) == models

    @pytest.mark.parametrize("payload", [b"not json", b'{"id": "a"}', b'[{"name": "no id"}]', b"\xff\xfe"])
    def test_corrupt_payload_raises(self, payload):
        with pytest.raises(ValidationError):
            load_catalog(payload)
