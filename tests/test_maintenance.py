"""Ограничитель частоты запросов и CLI-команды обслуживания."""

from conftest import ADMIN_PASSWORD
from extensions import db
from models import Category, DEFAULT_CATEGORY_NAME, Painting
from utils.rate_limit import InMemoryRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_rate_limiter_sliding_window():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(clock=clock)

    assert limiter.is_allowed("login:1.2.3.4", limit=2, window_seconds=60)
    assert limiter.is_allowed("login:1.2.3.4", limit=2, window_seconds=60)
    assert not limiter.is_allowed("login:1.2.3.4", limit=2, window_seconds=60)
    assert limiter.is_allowed("login:5.6.7.8", limit=2, window_seconds=60)

    clock.now += 61
    assert limiter.is_allowed("login:1.2.3.4", limit=2, window_seconds=60)


def test_rate_limiter_rejects_nonsense_limits():
    limiter = InMemoryRateLimiter()
    assert not limiter.is_allowed("key", limit=0, window_seconds=60)
    assert not limiter.is_allowed("key", limit=5, window_seconds=0)


def test_repair_categories_command(app):
    with app.app_context():
        db.session.add(Category(name="Oil"))
        db.session.add(Painting(title="stale", category="Gone", image_filename="a.png"))
        db.session.add(Painting(title="variant", category="oil", image_filename="b.png"))
        db.session.add(Painting(title="fine", category="Oil", image_filename="c.png"))
        db.session.commit()

    result = app.test_cli_runner().invoke(args=["repair-categories"])

    assert result.exit_code == 0
    assert "2" in result.output
    with app.app_context():
        categories = {p.title: p.category for p in Painting.query.all()}
    assert categories == {"stale": DEFAULT_CATEGORY_NAME, "variant": "Oil", "fine": "Oil"}


def test_cleanup_sessions_command(app):
    client = app.test_client()
    token = client.get("/api/session").get_json()["csrf_token"]
    headers = {"X-CSRF-Token": token}
    client.post("/api/login", json={"password": ADMIN_PASSWORD}, headers=headers)
    client.post("/api/logout", headers=headers)

    result = app.test_cli_runner().invoke(args=["cleanup-sessions"])

    assert result.exit_code == 0
    assert "1" in result.output


def test_rate_limiter_forgets_idle_clients():
    clock = FakeClock()
    limiter = InMemoryRateLimiter(clock=clock, sweep_interval=30)
    for index in range(50):
        limiter.is_allowed(f"login:10.0.0.{index}", limit=5, window_seconds=60)
    assert limiter.tracked_keys() == 50

    clock.now += 61
    assert limiter.is_allowed("login:1.2.3.4", limit=5, window_seconds=60)

    assert limiter.tracked_keys() == 1
