import pytest

from fakes import FakeSupabase

VIEWER_ID = "user-viewer"
PEER_ID = "user-peer"
OTHER_ID = "user-other"


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    """Supabase stand-in seeded with three profiles."""
    fake = FakeSupabase()
    fake.seed(
        "profiles",
        {"id": VIEWER_ID, "username": "viewer", "display_name": "Viewer", "bio": "coffee and hiking",
         "avatar_url": None, "interests": ["hiking", "Coffee"], "followers_count": 3},
        {"id": PEER_ID, "username": "peer", "display_name": "Peer Person", "bio": "photographer",
         "avatar_url": "https://example.com/peer.jpg", "interests": [], "followers_count": 10},
        {"id": OTHER_ID, "username": "other", "display_name": "Someone Else", "bio": None,
         "avatar_url": None, "interests": None, "followers_count": 1},
    )
    return fake


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
