import pytest
from fastapi import HTTPException

from conftest import OTHER_ID, PEER_ID, VIEWER_ID
from pulse.modules.media.schemas import MediaFile
from pulse.modules.posts.ranking import interest_score, rank_by_interests
from pulse.modules.posts.schemas import Post, PostCreate
from pulse.modules.posts.store import PostStore


def _post(post_id, created_at, caption=None, location=None):
    return Post(id=post_id, user_id=VIEWER_ID, caption=caption, location=location, created_at=created_at)


class TestFetchPosts:
    @pytest.mark.asyncio
    async def test_newest_first_with_authors(self, fake_supabase):
        fake_supabase.seed(
            "posts",
            {"user_id": PEER_ID, "caption": "older", "created_at": "2024-02-01T10:00:00+00:00"},
            {"user_id": OTHER_ID, "caption": "newer", "created_at": "2024-02-02T10:00:00+00:00"},
            {"user_id": "user-deleted", "caption": "orphan", "created_at": "2024-01-15T10:00:00+00:00"},
        )
        store = PostStore(fake_supabase, VIEWER_ID)

        posts = await store.fetch_posts()

        assert [p.caption for p in posts] == ["newer", "older", "orphan"]
        assert posts[0].profiles.username == "other"
        assert posts[1].profiles.username == "peer"
        assert posts[2].profiles is None
        assert store.loading is False

    @pytest.mark.asyncio
    async def test_author_lookup_failure_keeps_posts(self, fake_supabase):
        fake_supabase.seed("posts", {"user_id": PEER_ID, "caption": "hi"})
        fake_supabase.fail("profiles", "select")
        store = PostStore(fake_supabase, VIEWER_ID)

        posts = await store.fetch_posts()

        assert len(posts) == 1
        assert posts[0].profiles is None

    @pytest.mark.asyncio
    async def test_platform_error_raises_and_keeps_state(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)
        store.posts = [_post("p-1", "2024-01-01T00:00:00+00:00", caption="cached")]
        fake_supabase.fail("posts", "select")

        with pytest.raises(HTTPException) as exc:
            await store.fetch_posts()

        assert exc.value.status_code == 500
        assert [p.id for p in store.posts] == ["p-1"]


class TestCreatePost:
    @pytest.mark.asyncio
    async def test_caption_only_post(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)

        post = await store.create_post(PostCreate(caption="hello"))

        assert post.caption == "hello"
        assert post.image_url is None
        assert post.video_url is None
        assert post.likes_count == 0
        assert post.comments_count == 0
        assert post.profiles.username == "viewer"
        assert store.posts[0].id == post.id

    @pytest.mark.asyncio
    async def test_new_post_is_prepended_without_refetch(self, fake_supabase):
        fake_supabase.seed("posts", {"user_id": PEER_ID, "caption": "existing"})
        store = PostStore(fake_supabase, VIEWER_ID)
        await store.fetch_posts()
        selects_before = fake_supabase.calls_to("posts").count("select")

        await store.create_post(PostCreate(caption="fresh"))

        assert [p.caption for p in store.posts] == ["fresh", "existing"]
        assert fake_supabase.calls_to("posts").count("select") == selects_before

    @pytest.mark.asyncio
    async def test_empty_post_rejected_before_network(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)

        with pytest.raises(HTTPException) as exc:
            await store.create_post(PostCreate(caption="   "))

        assert exc.value.status_code == 400
        assert fake_supabase.calls_to("posts") == []
        assert fake_supabase.tables.get("posts", []) == []

    def test_both_media_urls_rejected_by_schema(self):
        with pytest.raises(ValueError):
            PostCreate(image_url="https://x/a.png", video_url="https://x/a.mp4")

    @pytest.mark.asyncio
    async def test_both_media_urls_rejected_by_store(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)
        data = PostCreate.model_construct(caption="x", image_url="https://x/a.png", video_url="https://x/a.mp4",
                                          location=None, mood=None, is_disappearing=False)

        with pytest.raises(HTTPException) as exc:
            await store.create_post(data)

        assert exc.value.status_code == 400
        assert fake_supabase.calls_to("posts") == []

    @pytest.mark.asyncio
    async def test_image_upload_sets_image_url_only(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)
        media = MediaFile(filename="sunset.PNG", content=b"\x89PNG...", content_type="image/png")

        post = await store.create_post(PostCreate(caption=None), media)

        assert post.video_url is None
        assert post.image_url.startswith("https://fake.supabase.co/storage/v1/object/public/posts/user-viewer/")
        assert post.image_url.endswith(".png")
        assert fake_supabase.calls_to("storage:posts") == ["upload"]

    @pytest.mark.asyncio
    async def test_video_upload_goes_to_videos_bucket(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)
        media = MediaFile(filename="clip.mp4", content=b"\x00\x00", content_type="video/mp4")

        post = await store.create_post(PostCreate(caption="watch"), media)

        assert post.image_url is None
        assert "/public/videos/" in post.video_url

    @pytest.mark.asyncio
    async def test_wrong_file_type_rejected_before_upload(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)
        media = MediaFile(filename="notes.pdf", content=b"%PDF", content_type="application/pdf")

        with pytest.raises(HTTPException) as exc:
            await store.create_post(PostCreate(caption="doc"), media)

        assert exc.value.status_code == 400
        assert fake_supabase.calls == []

    @pytest.mark.asyncio
    async def test_oversized_file_rejected_before_upload(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)
        media = MediaFile(filename="big.jpg", content=b"0" * (10 * 1024 * 1024 + 1), content_type="image/jpeg")

        with pytest.raises(HTTPException) as exc:
            await store.create_post(PostCreate(caption="big"), media)

        assert exc.value.status_code == 400
        assert fake_supabase.calls == []

    @pytest.mark.asyncio
    async def test_insert_failure_leaves_uploaded_object(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)
        fake_supabase.fail("posts", "insert")
        media = MediaFile(filename="a.jpg", content=b"jpeg", content_type="image/jpeg")

        with pytest.raises(HTTPException) as exc:
            await store.create_post(PostCreate(caption="x"), media)

        assert exc.value.status_code == 500
        assert len(fake_supabase.objects) == 1
        assert store.posts == []

    @pytest.mark.asyncio
    async def test_disappearing_post_carries_expiry_hint(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)

        post = await store.create_post(PostCreate(caption="brief", is_disappearing=True))

        assert (post.expires_at - post.created_at).total_seconds() == 24 * 3600
        assert post.model_dump()["expires_at"] == post.expires_at

    @pytest.mark.asyncio
    async def test_posts_by_author(self, fake_supabase):
        fake_supabase.seed("posts", {"user_id": PEER_ID, "caption": "a"}, {"user_id": OTHER_ID, "caption": "b"})
        store = PostStore(fake_supabase, VIEWER_ID)
        await store.fetch_posts()

        assert [p.caption for p in store.posts_by_author(PEER_ID)] == ["a"]


class TestRanking:
    def test_score_counts_interests_in_caption_or_location(self):
        post = _post("p", "2024-01-01T00:00:00+00:00", caption="Morning HIKING trip", location="Coffee Lab")

        assert interest_score(post, ["hiking", "coffee", "jazz"]) == 2

    def test_higher_score_first_ties_newest_first(self):
        a = _post("a", "2024-01-01T00:00:00+00:00", caption="hiking")
        b = _post("b", "2024-01-03T00:00:00+00:00", caption="nothing")
        c = _post("c", "2024-01-02T00:00:00+00:00", caption="more hiking")
        d = _post("d", "2024-01-04T00:00:00+00:00", caption="hiking with coffee")

        ranked = rank_by_interests([a, b, c, d], ["hiking", "coffee"])

        assert [p.id for p in ranked] == ["d", "c", "a", "b"]

    def test_no_interests_is_newest_first(self):
        a = _post("a", "2024-01-01T00:00:00+00:00")
        b = _post("b", "2024-01-02T00:00:00+00:00")

        assert [p.id for p in rank_by_interests([a, b], None)] == ["b", "a"]

    def test_ranking_does_not_mutate_store(self, fake_supabase):
        store = PostStore(fake_supabase, VIEWER_ID)
        store.posts = [
            _post("a", "2024-01-02T00:00:00+00:00", caption="plain"),
            _post("b", "2024-01-01T00:00:00+00:00", caption="hiking"),
        ]

        ranked = store.personalized_feed(["hiking"])

        assert [p.id for p in ranked] == ["b", "a"]
        assert [p.id for p in store.posts] == ["a", "b"]
