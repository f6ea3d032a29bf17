"""필드 추출기 테스트"""

from sitefeed.extractor.fields import extract, resolve_page_metadata
from sitefeed.extractor.selector import parse_document, select
from sitefeed.models import (
    AttributeField,
    ImageField,
    PageVariableField,
    TextField,
)

ITEM_HTML = """
<div class="item">
  <h3> Title <em class="tag">[ad]</em> </h3>
  <a class="more" href="/post/1" rel="nofollow noopener">more</a>
  <img src="/cover.jpg">
</div>
"""


def _item():
    return select(parse_document(ITEM_HTML), ".item")[0]


class TestExtract:
    """extract() 테스트"""

    def test_text_is_trimmed(self):
        assert extract(_item(), TextField(selector="h3"), {}) == "Title [ad]"

    def test_text_with_subtract(self):
        """제거 선택자는 결과에서만 빠지고 원본 트리는 그대로"""
        item = _item()
        spec = TextField(selector="h3", subtract=(".tag",))
        assert extract(item, spec, {}) == "Title"
        assert item.select_one(".tag") is not None

    def test_attribute(self):
        spec = AttributeField(selector="a.more", attribute="href")
        assert extract(_item(), spec, {}) == "/post/1"

    def test_multi_valued_attribute(self):
        spec = AttributeField(selector="a.more", attribute="rel")
        assert extract(_item(), spec, {}) == "nofollow noopener"

    def test_missing_attribute(self):
        spec = AttributeField(selector="a.more", attribute="title")
        assert extract(_item(), spec, {}) is None

    def test_image(self):
        assert extract(_item(), ImageField(selector="img"), {}) == "/cover.jpg"

    def test_no_match_is_none(self):
        assert extract(_item(), TextField(selector=".missing"), {}) is None

    def test_page_variable(self):
        """pageVariable은 항목 마크업과 무관하게 메타데이터 값"""
        spec = PageVariableField(path="meta.author")
        assert extract(_item(), spec, {"author": "Jane Doe"}) == "Jane Doe"
        assert extract(_item(), spec, {}) is None


class TestResolvePageMetadata:
    """resolve_page_metadata() 테스트"""

    def test_resolves_against_document(self):
        doc = parse_document(
            "<meta property='og:site_name' content='Site'><div class='by'>Jane</div>"
        )
        specs = {
            "author": TextField(selector=".by"),
            "site": AttributeField(selector="meta[property='og:site_name']", attribute="content"),
            "missing": TextField(selector=".nope"),
        }
        assert resolve_page_metadata(doc, specs) == {
            "author": "Jane",
            "site": "Site",
            "missing": None,
        }
