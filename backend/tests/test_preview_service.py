"""Tests for feed preview projection."""

from uuid import uuid4

from src.shared.models import Item, ItemType
from src.shared.services.preview_service import PreviewExtractor, build_preview_item


class FakeItems:
    def __init__(self, items_by_anchor):
        self.items_by_anchor = items_by_anchor
        self.calls = []

    async def get_leading_items(self, anchor_ids, per_anchor):
        self.calls.append((list(anchor_ids), per_anchor))
        return {
            anchor_id: items[:per_anchor]
            for anchor_id, items in self.items_by_anchor.items()
            if anchor_id in anchor_ids
        }


class TestBuildPreviewItem:
    def test_url_prefers_favicon_and_truncates_title(self):
        item = Item(
            type=ItemType.URL,
            url_data={"title": "x" * 80, "favicon": "https://f/icon.png", "thumbnail": "https://f/t.png"},
        )
        preview = build_preview_item(item)

        assert preview.thumbnail == "https://f/icon.png"
        assert preview.title == "x" * 50

    def test_url_falls_back_to_thumbnail(self):
        preview = build_preview_item(Item(type=ItemType.URL, url_data={"thumbnail": "https://f/t.png"}))

        assert preview.thumbnail == "https://f/t.png"
        assert preview.title is None

    def test_image_uses_stored_url(self):
        preview = build_preview_item(Item(type=ItemType.IMAGE, image_data={"url": "https://cdn/img.jpg"}))

        assert preview.thumbnail == "https://cdn/img.jpg"

    def test_short_text_is_kept_whole(self):
        preview = build_preview_item(Item(type=ItemType.TEXT, text_data={"content": "hello"}))

        assert preview.snippet == "hello"

    def test_long_text_is_cut_with_ellipsis(self):
        preview = build_preview_item(Item(type=ItemType.TEXT, text_data={"content": "a" * 150}))

        assert preview.snippet == "a" * 100 + "..."

    def test_audio_carries_type_only(self):
        preview = build_preview_item(Item(type=ItemType.AUDIO, audio_data={"url": "https://a.mp3"}))

        assert preview.type == ItemType.AUDIO
        assert (preview.thumbnail, preview.title, preview.snippet) == (None, None, None)


class TestPreviewExtractor:
    async def test_every_anchor_gets_a_list(self):
        with_items, without_items = uuid4(), uuid4()
        items = FakeItems(
            {
                with_items: [
                    Item(type=ItemType.TEXT, text_data={"content": "one"}),
                    Item(type=ItemType.FILE),
                ]
            }
        )

        previews = await PreviewExtractor(items, per_anchor=3).get_previews([with_items, without_items])

        assert [p.type for p in previews[with_items]] == [ItemType.TEXT, ItemType.FILE]
        assert previews[without_items] == []

    async def test_single_batched_lookup(self):
        items = FakeItems({})
        anchor_ids = [uuid4() for _ in range(5)]

        await PreviewExtractor(items, per_anchor=3).get_previews(anchor_ids)

        assert items.calls == [(anchor_ids, 3)]

    async def test_empty_page_makes_no_lookup(self):
        items = FakeItems({})

        assert await PreviewExtractor(items).get_previews([]) == {}
        assert items.calls == []
