from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from app.core.config import Settings
from app.models.metadata.schemas import ParsedMetadata
from app.services.extractors.base import merge_metadata
from app.services.extractors.blocked import PLATFORM_DEFAULT_IMAGES, BlockedExtractor
from app.services.extractors.commerce import (
    BlinkitExtractor,
    FlipkartExtractor,
    SwiggyExtractor,
    restaurant_metadata_from_path,
)
from app.services.extractors.default import DefaultExtractor
from app.services.extractors.oembed import (
    SPOTIFY,
    YOUTUBE,
    OEmbedExtractor,
    describe_oembed,
)
from app.services.extractors.reddit import (
    RedditExtractor,
    json_endpoint,
    metadata_from_path,
    parse_listing,
)
from app.services.extractors.registry import ExtractorRegistry, build_registry
from app.services.extractors.social import (
    FacebookExtractor,
    InstagramExtractor,
    facebook_metadata_from_path,
    instagram_metadata_from_path,
)
from app.utils.platforms import Platform
from app.workers.fetcher import HttpStatusError, NetworkError
from tests.helpers import og_html, page


# ---------------------------------------------------------------------------
# Chain behaviour
# ---------------------------------------------------------------------------


class TestChainedExtractor:
    async def test_default_failure_inside_chain_yields_empty_metadata(self, fetcher, default_extractor):
        fetcher.fetch_json.side_effect = HttpStatusError(500, "oembed")
        fetcher.fetch_html.side_effect = HttpStatusError(404, "page")
        extractor = OEmbedExtractor(YOUTUBE, fetcher, default_extractor)

        result = await extractor.extract("https://www.youtube.com/watch?v=abc")

        assert result == ParsedMetadata(url="https://www.youtube.com/watch?v=abc")

    async def test_unexpected_strategy_error_moves_on(self, fetcher, default_extractor):
        fetcher.fetch_json.side_effect = KeyError("boom")
        fetcher.fetch_html.return_value = page(og_html(title="From page"))
        extractor = OEmbedExtractor(YOUTUBE, fetcher, default_extractor)

        result = await extractor.extract("https://www.youtube.com/watch?v=abc")

        assert result.title == "From page"

    async def test_each_strategy_runs_once(self, fetcher, default_extractor):
        fetcher.fetch_html.side_effect = NetworkError("offline")
        fetcher.fetch_json.side_effect = NetworkError("offline")
        extractor = RedditExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://www.reddit.com/r/python/")

        assert result.title == "r/python"
        assert fetcher.fetch_html.await_count == 1
        assert fetcher.fetch_json.await_count == 1

    async def test_default_extractor_raises(self, fetcher):
        fetcher.fetch_html.side_effect = HttpStatusError(404, "https://example.com/")

        with pytest.raises(HttpStatusError):
            await DefaultExtractor(fetcher).extract("https://example.com/")


def test_merge_metadata_prefers_primary():
    primary = ParsedMetadata(title=None, description="d", url="https://a/")
    secondary = ParsedMetadata(title="t", description="other", image="i", url="https://b/")
    assert merge_metadata(primary, secondary) == ParsedMetadata(
        title="t", description="d", image="i", url="https://a/"
    )


# ---------------------------------------------------------------------------
# oEmbed
# ---------------------------------------------------------------------------


class TestOEmbed:
    async def test_request_and_mapping(self, fetcher, default_extractor):
        fetcher.fetch_json.return_value = {
            "title": "Song",
            "author_name": "Artist",
            "provider_name": "Spotify",
            "thumbnail_url": "https://i.scdn.co/image/1",
        }
        extractor = OEmbedExtractor(SPOTIFY, fetcher, default_extractor, timeout=5.0)

        result = await extractor.extract("https://open.spotify.com/track/1?si=abc&utm_source=copy")

        requested, kwargs = fetcher.fetch_json.await_args
        assert requested[0].startswith("https://open.spotify.com/oembed?url=")
        assert "utm_source" not in requested[0]
        assert kwargs["timeout"] == 5.0
        assert result.title == "Song"
        assert result.description == "By Artist on Spotify"
        assert result.image == "https://i.scdn.co/image/1"

    def test_youtube_requests_json_format(self):
        assert "format=json" in YOUTUBE.request_url("https://youtu.be/x")

    def test_describe_prefers_provider_description(self):
        assert describe_oembed({"description": "Own", "author_name": "A"}) == "Own"
        assert describe_oembed({}) is None

    async def test_non_dict_payload_falls_back(self, fetcher, default_extractor):
        fetcher.fetch_json.return_value = ["unexpected"]
        fetcher.fetch_html.return_value = page(og_html(title="Scraped"))
        extractor = OEmbedExtractor(YOUTUBE, fetcher, default_extractor)

        assert (await extractor.extract("https://youtu.be/x")).title == "Scraped"

    def test_name_follows_platform(self, fetcher, default_extractor):
        assert OEmbedExtractor(SPOTIFY, fetcher, default_extractor).name == "spotify"


# ---------------------------------------------------------------------------
# Reddit
# ---------------------------------------------------------------------------


class TestReddit:
    def test_json_endpoint(self):
        assert json_endpoint("https://www.reddit.com/r/x/comments/1/t/?a=b") == (
            "https://www.reddit.com/r/x/comments/1/t.json"
        )

    def test_parse_listing_image_is_unescaped(self):
        payload = [
            {
                "data": {
                    "children": [
                        {
                            "data": {
                                "title": "Post",
                                "subreddit": "pics",
                                "selftext": "Body",
                                "preview": {
                                    "images": [
                                        {"source": {"url": "https://preview.redd.it/a.jpg?w=1&amp;s=2"}}
                                    ]
                                },
                            }
                        }
                    ]
                }
            }
        ]
        result = parse_listing(payload, "https://www.reddit.com/r/pics/comments/1/post/")
        assert result.title == "r/pics: Post"
        assert result.description == "Body"
        assert result.image == "https://preview.redd.it/a.jpg?w=1&s=2"

    def test_parse_listing_empty(self):
        assert parse_listing([], "https://www.reddit.com/") is None
        assert parse_listing({"data": {"children": []}}, "https://www.reddit.com/") is None

    def test_metadata_from_path_subreddit_only(self):
        result = metadata_from_path("https://www.reddit.com/r/python/")
        assert result.title == "r/python"
        assert result.description == "Post from r/python"

    async def test_html_title_used_when_not_landing(self, fetcher, default_extractor):
        fetcher.fetch_html.return_value = page(
            og_html(title="Interesting post", image="/i.png"),
            url="https://www.reddit.com/r/x/comments/1/t/",
        )
        extractor = RedditExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://www.reddit.com/r/x/comments/1/t/")

        assert result.title == "Interesting post"
        assert result.image == "https://www.reddit.com/i.png"
        fetcher.fetch_json.assert_not_awaited()


# ---------------------------------------------------------------------------
# Instagram / Facebook
# ---------------------------------------------------------------------------


class TestSocial:
    async def test_instagram_caption_cleanup(self, fetcher, default_extractor):
        fetcher.fetch_html.return_value = page(
            og_html(
                title="farmhousehub on Instagram: &quot;Sunset&quot;",
                description="10 likes, 2 comments - farmhousehub on March 3, 2024: &quot;Sunset.&quot;",
                image="https://cdn.example.com/p.jpg?a=1&amp;b=2",
            )
        )
        extractor = InstagramExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://www.instagram.com/p/abc/")

        assert result.title == "Sunset"
        assert result.description == "Sunset."
        assert result.image == "https://cdn.example.com/p.jpg?a=1&b=2"

    async def test_instagram_url_inference_when_blocked(self, fetcher, default_extractor):
        fetcher.fetch_html.side_effect = HttpStatusError(429, "instagram")
        extractor = InstagramExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://www.instagram.com/reel/xyz/")

        assert result.title == "Instagram Reel"
        assert fetcher.fetch_html.await_count == 1

    @pytest.mark.parametrize(
        ("url", "title"),
        [
            ("https://www.instagram.com/p/abc/", "Instagram Post"),
            ("https://www.instagram.com/stories/someone/123/", "Story by @someone"),
            ("https://www.instagram.com/someone/", "@someone"),
        ],
    )
    def test_instagram_paths(self, url, title):
        assert instagram_metadata_from_path(url).title == title

    def test_instagram_reserved_path(self):
        assert instagram_metadata_from_path("https://www.instagram.com/explore/") is None

    @pytest.mark.parametrize(
        ("url", "title"),
        [
            ("https://www.facebook.com/pages/x/1", "Facebook Page"),
            ("https://www.facebook.com/groups/123/", "Facebook Group"),
            ("https://www.facebook.com/events/9/", "Facebook Event"),
            ("https://www.facebook.com/jane.doe/posts/1", "Facebook Post by Jane.doe"),
            ("https://www.facebook.com/some-brand", "Some Brand"),
        ],
    )
    def test_facebook_paths(self, url, title):
        assert facebook_metadata_from_path(url).title == title

    async def test_facebook_falls_back_to_title_tag(self, fetcher, default_extractor):
        html = "<html><head><title>Cafe Luna | Facebook</title></head></html>"
        fetcher.fetch_html.return_value = page(html)
        extractor = FacebookExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://www.facebook.com/cafeluna")

        assert result.title == "Cafe Luna"

    async def test_facebook_login_wall_uses_url(self, fetcher, default_extractor):
        fetcher.fetch_html.return_value = page(og_html(title="Facebook"))
        extractor = FacebookExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://www.facebook.com/groups/123/")

        assert result.title == "Facebook Group"


# ---------------------------------------------------------------------------
# Commerce
# ---------------------------------------------------------------------------


class TestCommerce:
    async def test_flipkart_html_selectors(self, fetcher, default_extractor):
        html = """<html><body>
        <h1 class="product-title">boAt Soundbar</h1>
        <img class="product-image" src="/img/bar.jpg">
        </body></html>"""
        fetcher.fetch_html.return_value = page(html, url="https://www.flipkart.com/p/item")
        extractor = FlipkartExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://www.flipkart.com/p/item?text=ignored")

        assert result.title == "boAt Soundbar"
        assert result.image == "https://www.flipkart.com/img/bar.jpg"
        assert result.url == "https://www.flipkart.com/p/item?text=ignored"

    async def test_flipkart_text_parameter(self, fetcher, default_extractor):
        fetcher.fetch_html.side_effect = NetworkError("offline")
        extractor = FlipkartExtractor(fetcher, default_extractor)

        result = await extractor.extract(
            "https://www.flipkart.com/p/item?text=I%20love%20this%20Soundbar"
        )

        assert result == ParsedMetadata(
            title="I love this Soundbar",
            url="https://www.flipkart.com/p/item?text=I%20love%20this%20Soundbar",
        )

    async def test_blinkit_merges_url_title(self, fetcher, default_extractor):
        fetcher.fetch_html.return_value = page(
            og_html(description="Fresh and creamy", image="https://cdn.blinkit.com/m.jpg")
        )
        extractor = BlinkitExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://blinkit.com/prn/amul-taaza-milk/prid/19512")

        assert result.title == "Amul Taaza Milk"
        assert result.description == "Fresh and creamy"
        assert result.image == "https://cdn.blinkit.com/m.jpg"

    async def test_blinkit_url_only(self, fetcher, default_extractor):
        fetcher.fetch_html.side_effect = HttpStatusError(403, "blinkit")
        extractor = BlinkitExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://blinkit.com/prn/amul-taaza-milk/prid/19512")

        assert result.title == "Amul Taaza Milk"
        assert result.description is None

    async def test_instamart_item(self, fetcher, default_extractor):
        fetcher.fetch_html.side_effect = HttpStatusError(403, "swiggy")
        extractor = SwiggyExtractor(fetcher, default_extractor)

        result = await extractor.extract("https://www.swiggy.com/instamart/item/ABC")

        assert result.title == "Instamart Item"

    async def test_swiggy_html_keeps_page_title(self, fetcher, default_extractor):
        fetcher.fetch_html.return_value = page(og_html(title="Meghana Foods"))
        extractor = SwiggyExtractor(fetcher, default_extractor)

        result = await extractor.extract(
            "https://www.swiggy.com/restaurants/meghana-foods-residency-road-12345"
        )

        assert result.title == "Meghana Foods"
        assert result.description is None

    @pytest.mark.parametrize(
        ("url", "title"),
        [
            ("https://www.swiggy.com/restaurants/meghana-foods-12345", "Meghana Foods"),
            ("https://www.swiggy.com/city/bangalore/truffles-koramangala-rest6789", "Truffles Koramangala"),
        ],
    )
    def test_restaurant_slugs(self, url, title):
        assert restaurant_metadata_from_path(url).title == title

    def test_swiggy_handles_both_platforms(self, fetcher, default_extractor):
        extractor = SwiggyExtractor(fetcher, default_extractor)
        assert extractor.can_handle("https://www.swiggy.com/instamart/item/1")
        assert extractor.can_handle("https://www.swiggy.com/restaurants/x-1")


# ---------------------------------------------------------------------------
# Blocked platforms
# ---------------------------------------------------------------------------


class TestBlocked:
    async def test_static_label_when_everything_fails(self, fetcher, default_extractor):
        fetcher.fetch_html.side_effect = HttpStatusError(403, "netflix")
        extractor = BlockedExtractor(Platform.NETFLIX, fetcher, default_extractor)

        result = await extractor.extract("https://www.netflix.com/browse")

        assert result.title == "Netflix Content"
        assert result.description == "Content from Netflix"
        assert result.image == PLATFORM_DEFAULT_IMAGES[Platform.NETFLIX]
        # the default extractor is never used for blocked platforms
        assert fetcher.fetch_html.await_count == 1

    async def test_title_path(self, fetcher, default_extractor):
        fetcher.fetch_html.side_effect = HttpStatusError(403, "netflix")
        extractor = BlockedExtractor(Platform.NETFLIX, fetcher, default_extractor)

        result = await extractor.extract("https://www.netflix.com/in/title/80100172")

        assert result.title == "Netflix Title 80100172"

    async def test_scraped_page_wins(self, fetcher, default_extractor):
        fetcher.fetch_html.return_value = page(og_html(title="Stranger Things"))
        extractor = BlockedExtractor(Platform.NETFLIX, fetcher, default_extractor)

        result = await extractor.extract("https://www.netflix.com/title/80057281")

        assert result.title == "Stranger Things"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_build_registry_covers_platforms(self, fetcher):
        registry = build_registry(fetcher, Settings(mongo_uri=None))

        assert len(registry) == len(Platform)
        assert registry.get(Platform.SWIGGY) is registry.get(Platform.INSTAMART)
        assert isinstance(registry.select("https://www.instagram.com/p/1/"), InstagramExtractor)
        assert isinstance(registry.select("https://youtu.be/x"), OEmbedExtractor)

    def test_unknown_host_uses_default(self, fetcher, default_extractor):
        registry = ExtractorRegistry({}, default_extractor)
        assert registry.select("https://example.com/") is default_extractor

    def test_refusing_extractor_falls_back_to_default(self, fetcher, default_extractor):
        picky = AsyncMock()
        picky.can_handle = lambda url: False
        registry = ExtractorRegistry({Platform.REDDIT: picky}, default_extractor)

        assert registry.select("https://www.reddit.com/r/x") is default_extractor

    def test_registry_is_read_only(self, fetcher, default_extractor):
        registry = ExtractorRegistry({}, default_extractor)
        with pytest.raises(TypeError):
            registry._extractors[Platform.REDDIT] = default_extractor
