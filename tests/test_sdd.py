"""SDD 검증 테스트"""

import json

import pytest

from sitefeed.config import FetchDefaults
from sitefeed.errors import ConfigError
from sitefeed.models import (
    AttributeField,
    FetchMode,
    ImageField,
    PageVariableField,
    TextField,
)
from sitefeed.sdd import parse_sdd, validate


class TestValidate:
    """validate() 테스트"""

    def test_valid_sdd(self, sdd_raw):
        """예제 SDD가 태그 유니온으로 변환됨"""
        sdd = validate(sdd_raw)

        assert sdd.url == "https://example.com"
        assert sdd.title == "Example Site"
        assert sdd.item_list.selector == ".article"
        assert sdd.item_list.subtract == (".advert",)
        assert sdd.field_specs["title"] == TextField(selector=".article h2")
        assert sdd.field_specs["link"] == AttributeField(
            selector=".article a", attribute="href"
        )
        assert sdd.field_specs["summary"].subtract == (".read-more",)
        assert isinstance(sdd.field_specs["image"], ImageField)
        assert sdd.field_specs["author"] == PageVariableField(path="meta.author")
        assert sdd.page_metadata["author"] == TextField(selector=".byline")
        assert sdd.output_mapping.link == "link"
        assert sdd.output_mapping.guid is None
        assert sdd.channel.title == "Example Feed"

    def test_default_fetch_config(self, sdd_raw):
        """수집 설정 기본값"""
        fetch = validate(sdd_raw).fetch
        assert fetch.url == "https://example.com"
        assert fetch.mode == FetchMode.PLAIN
        assert fetch.timeout_ms == 30000
        assert fetch.encodings == ()
        assert fetch.wait_until == "networkidle"

    def test_headless_fetch_config(self, sdd_raw):
        """headless 수집과 브라우저 옵션"""
        sdd_raw.update(
            {
                "suggest_fetch_method": "headless",
                "user_agent": "Custom/1.0",
                "timeout": 5000,
                "encoding": ["gbk", "utf-8"],
                "viewport": {"width": 390, "height": 844},
                "waitUntil": "domcontentloaded",
            }
        )
        fetch = validate(sdd_raw).fetch
        assert fetch.mode == FetchMode.HEADLESS
        assert fetch.user_agent == "Custom/1.0"
        assert fetch.timeout_ms == 5000
        assert fetch.encodings == ("gbk", "utf-8")
        assert (fetch.viewport.width, fetch.viewport.height) == (390, 844)
        assert fetch.wait_until == "domcontentloaded"

    def test_single_encoding_string(self, sdd_raw):
        sdd_raw["encoding"] = "gb2312"
        assert validate(sdd_raw).fetch.encodings == ("gb2312",)

    def test_fetch_defaults_from_settings(self, sdd_raw):
        """SDD에 값이 없으면 설정의 기본값 사용"""
        defaults = FetchDefaults(user_agent="Settings/2.0", timeout_seconds=7)
        fetch = validate(sdd_raw, defaults).fetch
        assert fetch.user_agent == "Settings/2.0"
        assert fetch.timeout_ms == 7000

    def test_attribute_alias(self, sdd_raw):
        """attribute/pageVariable 타입 이름도 허용"""
        sdd_raw["data_list_elements"]["link"]["type"] = "attribute"
        sdd_raw["data_list_elements"]["author"]["type"] = "pageVariable"
        sdd = validate(sdd_raw)
        assert isinstance(sdd.field_specs["link"], AttributeField)
        assert isinstance(sdd.field_specs["author"], PageVariableField)

    @pytest.mark.parametrize(
        "missing", ["version", "url", "title", "data_list", "data_list_elements", "rss"]
    )
    def test_missing_required_field(self, sdd_raw, missing):
        """필수 필드 누락"""
        del sdd_raw[missing]
        with pytest.raises(ConfigError, match="필수 필드 누락"):
            validate(sdd_raw)

    def test_not_an_object(self):
        with pytest.raises(ConfigError):
            validate(["not", "a", "dict"])

    def test_unknown_field_type(self, sdd_raw):
        sdd_raw["data_list_elements"]["title"]["type"] = "xpath"
        with pytest.raises(ConfigError, match="알 수 없는 필드 타입"):
            validate(sdd_raw)

    def test_attr_without_attribute_name(self, sdd_raw):
        del sdd_raw["data_list_elements"]["link"]["value"]
        with pytest.raises(ConfigError):
            validate(sdd_raw)

    def test_mapping_references_unknown_field(self, sdd_raw):
        """출력 매핑이 없는 필드를 참조하면 거부"""
        sdd_raw["rss"]["items"]["guid"] = "missing_field"
        with pytest.raises(ConfigError, match="missing_field"):
            validate(sdd_raw)

    def test_mapping_slot_must_be_string(self, sdd_raw):
        sdd_raw["rss"]["items"]["guid"] = ["link"]
        with pytest.raises(ConfigError, match="rss.items.guid"):
            validate(sdd_raw)

    def test_channel_must_be_object(self, sdd_raw):
        sdd_raw["rss"]["channel"] = "oops"
        with pytest.raises(ConfigError, match="rss.channel"):
            validate(sdd_raw)

    @pytest.mark.parametrize("key", ["title", "language", "generator"])
    def test_channel_fields_must_be_strings(self, sdd_raw, key):
        sdd_raw["rss"]["channel"][key] = 5
        with pytest.raises(ConfigError, match=f"rss.channel.{key}"):
            validate(sdd_raw)

    def test_favicon_must_be_string(self, sdd_raw):
        sdd_raw["favicon"] = 5
        with pytest.raises(ConfigError, match="favicon"):
            validate(sdd_raw)

    def test_optional_channel_fields_may_be_absent(self, sdd_raw):
        del sdd_raw["favicon"]
        sdd_raw["rss"]["channel"] = {}
        sdd = validate(sdd_raw)
        assert sdd.favicon is None
        assert sdd.channel.title is None

    def test_page_variable_requires_defined_meta(self, sdd_raw):
        sdd_raw["data_list_elements"]["author"]["value"] = "meta.editor"
        with pytest.raises(ConfigError, match="meta.editor"):
            validate(sdd_raw)

    def test_page_variable_path_format(self, sdd_raw):
        sdd_raw["data_list_elements"]["author"]["value"] = "author"
        with pytest.raises(ConfigError):
            validate(sdd_raw)

    def test_missing_item_selector(self, sdd_raw):
        sdd_raw["data_list"] = {"selector": {}}
        with pytest.raises(ConfigError, match="selector.css"):
            validate(sdd_raw)

    def test_empty_elements(self, sdd_raw):
        sdd_raw["data_list_elements"] = {}
        sdd_raw["rss"]["items"] = {}
        with pytest.raises(ConfigError):
            validate(sdd_raw)

    def test_unknown_wait_until(self, sdd_raw):
        sdd_raw["waitUntil"] = "whenever"
        with pytest.raises(ConfigError, match="waitUntil"):
            validate(sdd_raw)

    def test_bad_timeout(self, sdd_raw):
        sdd_raw["timeout"] = "soon"
        with pytest.raises(ConfigError):
            validate(sdd_raw)


class TestParseSdd:
    """parse_sdd() 테스트"""

    def test_parse_bytes(self, sdd_raw):
        sdd = parse_sdd(json.dumps(sdd_raw).encode("utf-8"))
        assert sdd.title == "Example Site"

    def test_invalid_json(self):
        with pytest.raises(ConfigError, match="JSON"):
            parse_sdd("{not json")
