import httpx
import pytest
from bs4 import BeautifulSoup

from promokit.brand.colors import darken
from promokit.brand.scraper import (
    css_hex_colors,
    find_logo_candidate,
    rehost_logo,
    scrape_brand,
)
from promokit.core.exceptions import ScrapeError
from promokit.core.http import resolve_url
from promokit.products.scraper import extract_product, scrape_product

SITE = "https://acme.example.com/"

HOMEPAGE = """
<html>
<head>
  <title>Acme Building Supply</title>
  <meta name="theme-color" content="#FFCC00">
  <link rel="stylesheet" href="/css/site.css">
  <link rel="stylesheet" href="/css/print.css">
  <link rel="icon" type="image/png" href="/icon-32.png">
  <link rel="apple-touch-icon" href="/apple-touch-icon.png">
  <meta property="og:image" content="https://cdn.example.com/og.jpg">
</head>
<body>
  <img src="/img/hero.jpg" alt="Yard">
  <img src="/img/acme-mark.svg" alt="Acme Logo">
</body>
</html>
"""


def soup(html):
    return BeautifulSoup(html, "html.parser")


class TestResolveUrl:
    def test_relative_and_absolute(self):
        assert resolve_url("/a.png", SITE) == "https://acme.example.com/a.png"
        assert resolve_url("b.png", "https://acme.example.com/shop/") == "https://acme.example.com/shop/b.png"
        assert resolve_url("//cdn.example.com/c.png", SITE) == "https://cdn.example.com/c.png"
        assert resolve_url("https://x.example.com/d.png", SITE) == "https://x.example.com/d.png"

    def test_blank(self):
        assert resolve_url("  ", SITE) is None
        assert resolve_url(None, SITE) is None


class TestLogoPriority:
    def test_logo_image_first(self):
        assert find_logo_candidate(soup(HOMEPAGE), SITE) == ("https://acme.example.com/img/acme-mark.svg", "logo")

    def test_png_icon_second(self):
        html = HOMEPAGE.replace('alt="Acme Logo"', 'alt="Acme"')
        assert find_logo_candidate(soup(html), SITE) == ("https://acme.example.com/icon-32.png", "icon")

    def test_og_image_third(self):
        html = '<meta property="og:image" content="/og.jpg"><link rel="apple-touch-icon" href="/t.png">'
        assert find_logo_candidate(soup(html), SITE) == ("https://acme.example.com/og.jpg", "og-image")

    def test_apple_touch_icon_fourth(self):
        html = '<link rel="apple-touch-icon" href="/t.png"><link rel="icon" type="image/x-icon" href="/f.ico">'
        assert find_logo_candidate(soup(html), SITE) == ("https://acme.example.com/t.png", "apple-touch-icon")

    def test_nothing_in_markup(self):
        assert find_logo_candidate(soup("<p>hello</p>"), SITE) is None


class TestCssColors:
    def test_six_digit_only_deduplicated_lowercase(self):
        css = "body{color:#1A1A2E} a{color:#e94560} .x{background:#1a1a2e} .y{color:#fff} .z{color:#1234567}"
        assert css_hex_colors(css) == ["#1a1a2e", "#e94560"]

    def test_capped(self):
        css = " ".join(f"#00000{i}" for i in range(9))
        assert len(css_hex_colors(css)) == 5


class TestScrapeBrand:
    def test_full_page(self, http_client, http_routes):
        http_routes[("GET", SITE)] = httpx.Response(200, text=HOMEPAGE)
        http_routes[("GET", "https://acme.example.com/css/site.css")] = httpx.Response(
            200, text="h1{color:#1a1a2e} .btn{background:#E94560}"
        )

        signals = scrape_brand(http_client, SITE, timeout=10, secondary_timeout=5)

        assert signals.logo_url == "https://acme.example.com/img/acme-mark.svg"
        assert signals.logo_label == "logo"
        assert signals.colors == [darken("#ffcc00"), "#1a1a2e", "#e94560"]

    def test_stylesheet_failure_is_skipped(self, http_client, http_routes):
        http_routes[("GET", SITE)] = httpx.Response(200, text=HOMEPAGE)

        signals = scrape_brand(http_client, SITE, timeout=10, secondary_timeout=5)

        assert signals.colors == [darken("#ffcc00")]

    def test_colors_capped_at_five(self, http_client, http_routes):
        http_routes[("GET", SITE)] = httpx.Response(200, text=HOMEPAGE)
        http_routes[("GET", "https://acme.example.com/css/site.css")] = httpx.Response(
            200, text="#111111 #222222 #333333 #444444 #555555 #666666"
        )

        signals = scrape_brand(http_client, SITE, timeout=10, secondary_timeout=5)

        assert len(signals.colors) == 5

    def test_invalid_theme_color_ignored(self, http_client, http_routes):
        http_routes[("GET", SITE)] = httpx.Response(200, text='<meta name="theme-color" content="teal">')

        signals = scrape_brand(http_client, SITE, timeout=10, secondary_timeout=5)

        assert signals.colors == []

    def test_favicon_probe(self, http_client, http_routes):
        http_routes[("GET", SITE)] = httpx.Response(200, text="<p>no logo here</p>")
        http_routes[("HEAD", "https://acme.example.com/favicon.ico")] = httpx.Response(
            200, headers={"content-type": "image/x-icon"}
        )

        signals = scrape_brand(http_client, SITE, timeout=10, secondary_timeout=5)

        assert signals.logo_url == "https://acme.example.com/favicon.ico"
        assert signals.logo_label == "favicon"

    def test_favicon_must_be_an_image(self, http_client, http_routes):
        http_routes[("GET", SITE)] = httpx.Response(200, text="<p>no logo here</p>")
        http_routes[("HEAD", "https://acme.example.com/favicon.ico")] = httpx.Response(
            200, headers={"content-type": "text/html"}
        )

        assert scrape_brand(http_client, SITE, timeout=10, secondary_timeout=5).logo_url is None

    def test_homepage_error_raises(self, http_client, http_routes):
        http_routes[("GET", SITE)] = httpx.Response(503, text="down")

        with pytest.raises(ScrapeError):
            scrape_brand(http_client, SITE, timeout=10, secondary_timeout=5)

    def test_homepage_timeout_raises(self, http_client, http_routes):
        http_routes[("GET", SITE)] = httpx.ReadTimeout("timed out")

        with pytest.raises(ScrapeError, match="Timed out"):
            scrape_brand(http_client, SITE, timeout=10, secondary_timeout=5)


class TestRehostLogo:
    def test_uploads_with_extension_from_content_type(self, http_client, http_routes, storage):
        logo = "https://acme.example.com/img/acme-mark.svg"
        http_routes[("GET", logo)] = httpx.Response(
            200, content=b"<svg/>", headers={"content-type": "image/svg+xml; charset=utf-8"}
        )

        key = rehost_logo(http_client, storage, "acct-1", logo, "logo", timeout=5)

        assert key.startswith("brand-logos/acct-1/logo-")
        assert key.endswith(".svg")
        assert storage.objects[(storage.assets_bucket, key)] == b"<svg/>"
        assert storage.content_types[(storage.assets_bucket, key)] == "image/svg+xml"

    def test_failure_returns_none(self, http_client, storage):
        assert rehost_logo(http_client, storage, "acct-1", "https://gone.example.com/l.png", "logo", timeout=5) is None
        assert storage.objects == {}


PRODUCT_URL = "https://shop.example.com/p/123"


class TestProductExtraction:
    def test_open_graph(self):
        html = """
        <meta property="og:title" content="  DeWalt 20V Drill  ">
        <meta property="og:image" content="/images/drill.jpg">
        <meta property="product:price:amount" content="149.00">
        <title>Ignored</title>
        """
        signals = extract_product(html, PRODUCT_URL)

        assert signals.title == "DeWalt 20V Drill"
        assert signals.image_url == "https://shop.example.com/images/drill.jpg"
        assert signals.price == 149.0

    def test_title_then_h1(self):
        assert extract_product("<title> Page Title </title><h1>Heading</h1>", PRODUCT_URL).title == "Page Title"
        assert extract_product("<h1>Heading <b>Bold</b></h1>", PRODUCT_URL).title == "Heading Bold"

    def test_og_price_fallback_and_non_positive(self):
        assert extract_product('<meta property="og:price:amount" content="12.5">', PRODUCT_URL).price == 12.5
        assert extract_product('<meta property="product:price:amount" content="0">', PRODUCT_URL).price is None
        assert extract_product('<meta property="product:price:amount" content="call">', PRODUCT_URL).price is None

    def test_nothing_found(self):
        signals = extract_product("<p>empty</p>", PRODUCT_URL)
        assert signals.title == ""
        assert signals.image_url is None
        assert signals.price is None

    def test_scrape_product_fetches(self, http_client, http_routes):
        http_routes[("GET", PRODUCT_URL)] = httpx.Response(200, text="<h1>Tape</h1>")
        assert scrape_product(http_client, PRODUCT_URL, timeout=10).title == "Tape"
