"""공용 테스트 픽스처 - 예제 SDD와 HTML"""

import pytest

SAMPLE_HTML = """
<html>
<head><title>Example</title></head>
<body>
  <div class="byline">Jane Doe</div>
  <div class="article">
    <h2>First</h2>
    <a href="/a">read</a>
    <p class="summary">Summary A <span class="read-more">more</span></p>
    <time>2024-01-02 10:00</time>
    <img src="/img/a.png">
    <span class="author">Someone Else</span>
  </div>
  <div class="article">
    <h2>Second</h2>
    <a href="/b">read</a>
    <p class="summary">Summary B</p>
    <div class="advert"><h2>Advert</h2></div>
  </div>
</body>
</html>
"""


@pytest.fixture
def sample_html():
    """두 개의 .article 항목이 있는 페이지"""
    return SAMPLE_HTML


@pytest.fixture
def sdd_raw():
    """저장 포맷 그대로의 예제 SDD"""
    return {
        "version": "1.0",
        "url": "https://example.com",
        "title": "Example Site",
        "favicon": "/favicon.ico",
        "meta": {
            "author": {"type": "text", "selector": {"css": ".byline"}},
        },
        "data_list": {
            "selector": {"css": ".article"},
            "un_selectors": [".advert"],
        },
        "data_list_elements": {
            "title": {"type": "text", "selector": {"css": ".article h2"}},
            "link": {"type": "attr", "selector": {"css": ".article a"}, "value": "href"},
            "summary": {
                "type": "text",
                "selector": {"css": ".summary"},
                "un_selectors": [".read-more"],
            },
            "date": {"type": "text", "selector": {"css": "time"}},
            "image": {"type": "image", "selector": {"css": "img"}},
            "author": {"type": "var", "value": "meta.author"},
        },
        "rss": {
            "channel": {"title": "Example Feed", "language": "en"},
            "items": {
                "title": "title",
                "link": "link",
                "description": "summary",
                "date": "date",
                "cover": "image",
            },
        },
    }
