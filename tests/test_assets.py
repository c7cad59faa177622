"""Tests for image URL resolution."""
from ebook_library.assets import AssetUrlResolver

resolver = AssetUrlResolver("proj", "production")


def test_image_field_resolves_to_cdn_url():
    image = {"_type": "image", "asset": {"_ref": "image-Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000-jpg"}}

    assert resolver.url_for(image) == (
        "https://cdn.sanity.io/images/proj/production/Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000.jpg"
    )


def test_size_parameters():
    url = resolver.url_for("image-abc-64x64-png", width=32, height=32)

    assert url == "https://cdn.sanity.io/images/proj/production/abc-64x64.png?w=32&h=32"


def test_absolute_url_passes_through():
    assert resolver.url_for({"asset": {"url": "https://example.com/a.png"}}) == "https://example.com/a.png"


def test_unresolvable_references_return_none():
    assert resolver.url_for(None) is None
    assert resolver.url_for({}) is None
    assert resolver.url_for({"asset": {}}) is None
    assert resolver.url_for("file-abc-pdf") is None
    assert resolver.url_for(12) is None
