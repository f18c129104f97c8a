"""End-to-end tests of the HTML routes through FastAPI's TestClient."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from movewiki.models.listing import ListingForm
from movewiki.services import listings as listing_service
from movewiki.services import moves as move_service

from conftest import VALID_DEFINITION


def _post_move(client: TestClient, **fields):
    data = {"condition": "Turn Someone On", "definition": VALID_DEFINITION, "tags": "sexy basic"}
    data.update(fields)
    return client.post("/moves", data=data, follow_redirects=False)


class TestMoveRoutes:
    def test_root_redirects_to_moves(self, client: TestClient) -> None:
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/moves"

    def test_index_empty(self, client: TestClient) -> None:
        response = client.get("/moves")
        assert response.status_code == 200
        assert "No moves yet" in response.text

    def test_create_redirects_to_move(self, client: TestClient, db: Session) -> None:
        response = _post_move(client)
        assert response.status_code == 303
        assert response.headers["location"] == "/moves/turn-someone-on"
        [move] = move_service.find_by_slug(db, "turn-someone-on")
        assert move.tags == ["sexy", "basic"]

    def test_invalid_create_redirects_to_form(self, client: TestClient, db: Session) -> None:
        response = _post_move(client, definition="roll +hot. On a 7-9, something.")
        assert response.status_code == 303
        assert response.headers["location"] == "/moves/new"
        assert move_service.list_moves(db).moves == []

    def test_new_condition_rejected(self, client: TestClient) -> None:
        response = _post_move(client, condition="new")
        assert response.headers["location"] == "/moves/new"

    def test_conditions_without_a_slug_are_rejected(self, client: TestClient, db: Session) -> None:
        for condition in ("___", "日本語"):
            response = _post_move(client, condition=condition)
            assert response.headers["location"] == "/moves/new"
        assert move_service.list_moves(db).moves == []

    def test_tagged_condition_rejected(self, client: TestClient, db: Session) -> None:
        response = _post_move(client, condition="Tagged")
        assert response.headers["location"] == "/moves/new"
        assert move_service.find_by_slug(db, "tagged") == []

    def test_new_form(self, client: TestClient) -> None:
        response = client.get("/moves/new")
        assert response.status_code == 200
        assert 'action="/moves"' in response.text

    def test_show_renders_markdown(self, client: TestClient, make_move) -> None:
        make_move()
        response = client.get("/moves/turn-someone-on")
        assert response.status_code == 200
        assert "<strong>turn someone on</strong>" in response.text

    def test_show_unknown_slug_is_404(self, client: TestClient) -> None:
        response = client.get("/moves/no-such-move")
        assert response.status_code == 404
        assert "There is no move called no-such-move." in response.text

    def test_unknown_id_404_names_the_id(self, client: TestClient) -> None:
        response = client.get("/moves/abc123/edit")
        assert response.status_code == 404
        assert "No move has the id abc123." in response.text
        assert "no move called" not in response.text

    def test_unknown_path_404(self, client: TestClient) -> None:
        response = client.get("/nowhere")
        assert response.status_code == 404
        assert "Nothing lives at /nowhere." in response.text

    def test_page_number_is_bounded(self, client: TestClient) -> None:
        assert client.get("/moves", params={"page": 10**19}).status_code == 422
        assert client.get("/moves", params={"page": 0}).status_code == 422
        assert client.get("/moves/tagged/aw", params={"page": 10**19}).status_code == 422
        assert client.get("/moves", params={"page": 10_000}).status_code == 200

    def test_show_definition(self, client: TestClient, make_move) -> None:
        move = make_move()
        assert client.get(move.definition_url).status_code == 200
        assert client.get(f"/moves/other-slug/{move.id}").status_code == 404
        assert client.get(f"/moves/{move.slug}/missing").status_code == 404

    def test_index_paginates_and_caps_page_size(self, client: TestClient, make_move) -> None:
        for i in range(3):
            make_move(f"Move {i}")
        first = client.get("/moves", params={"per_page": 2})
        assert "Move 2" in first.text and "Move 1" in first.text
        assert "Move 0" not in first.text
        assert "?page=2&amp;" in first.text
        second = client.get("/moves", params={"page": 2, "per_page": 2})
        assert "Move 0" in second.text
        assert client.get("/moves", params={"per_page": 1000}).status_code == 200

    def test_tagged(self, client: TestClient, make_move) -> None:
        make_move("Tagged Both", tags="aw basic")
        make_move("Tagged One", tags="aw")
        response = client.get("/moves/tagged/AW+basic")
        assert response.status_code == 200
        assert "Tagged Both" in response.text
        assert "Tagged One" not in response.text

    def test_edit_form_shows_raw_markdown(self, client: TestClient, make_move) -> None:
        move = make_move()
        response = client.get(move.edit_url)
        assert response.status_code == 200
        assert "**turn someone on**" in response.text

    def test_edit_unknown_is_404(self, client: TestClient) -> None:
        assert client.get("/moves/missing/edit").status_code == 404

    def test_update_merges_fields(self, client: TestClient, db: Session, make_move) -> None:
        move = make_move(tags="basic")
        response = client.post(move.id_url, data={"condition": "Turn Them On"}, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/moves/turn-them-on"
        db.expire_all()
        updated = move_service.get_move(db, move.id)
        assert updated.slug == "turn-them-on"
        assert updated.tags == ["basic"]

    def test_invalid_update_redirects_to_edit(self, client: TestClient, make_move) -> None:
        move = make_move()
        response = client.post(move.id_url, data={"condition": "new"}, follow_redirects=False)
        assert response.headers["location"] == move.edit_url

    def test_vote_redirects_to_referer(self, client: TestClient, db: Session, make_move) -> None:
        move = make_move()
        response = client.get(
            f"{move.id_url}/up", headers={"referer": "/moves?page=1"}, follow_redirects=False
        )
        assert response.headers["location"] == "/moves?page=1"
        response = client.get(f"{move.id_url}/down", follow_redirects=False)
        assert response.headers["location"] == move.url
        db.expire_all()
        voted = move_service.get_move(db, move.id)
        assert (voted.upvotes, voted.downvotes) == (1, 1)

    def test_vote_unknown_move_is_404(self, client: TestClient) -> None:
        assert client.get("/moves/missing/up").status_code == 404

    def test_preview_shows_html_and_errors(self, client: TestClient, db: Session) -> None:
        response = client.post("/preview", data={"definition": "roll +hot, *gently*."})
        assert response.status_code == 200
        assert "<em>gently</em>" in response.text
        assert "what happens on a 10+" in response.text
        assert move_service.list_moves(db).moves == []

    def test_rss_feed(self, client: TestClient, make_move) -> None:
        move = make_move(tags="basic")
        response = client.get("/moves/rss")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/rss+xml")
        channel = ET.fromstring(response.content).find("channel")
        item = channel.find("item")
        assert item.findtext("title") == "Turn Someone On"
        assert item.findtext("link").endswith(move.definition_url)
        assert item.findtext("category") == "basic"
        assert "<strong>" in item.findtext("description")


class TestListingRoutes:
    def test_new_listing_form(self, client: TestClient, make_move) -> None:
        make_move()
        response = client.get("/moves/turn-someone-on/listings/new")
        assert response.status_code == 200
        assert 'action="/moves/turn-someone-on/listings"' in response.text

    def test_listing_pages_for_unknown_slug_are_404(self, client: TestClient) -> None:
        assert client.get("/moves/nobody/listings/new").status_code == 404
        assert client.get("/moves/nobody/listings").status_code == 404
        response = client.post("/moves/nobody/listings", data={"description": "x"})
        assert response.status_code == 404

    def test_create_listing(self, client: TestClient, db: Session, make_move) -> None:
        move = make_move()
        response = client.post(
            "/moves/turn-someone-on/listings",
            data={"description": "At the party.", "success": "Took a String."},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == move.url
        [listing] = listing_service.listings_for(db, move.slug)
        assert listing.success == "Took a String."
        db.refresh(move)
        assert move.top_listing_id == listing.id

    def test_blank_listing_redirects_back(self, client: TestClient, make_move) -> None:
        make_move()
        response = client.post(
            "/moves/turn-someone-on/listings", data={"description": " "}, follow_redirects=False
        )
        assert response.headers["location"] == "/moves/turn-someone-on/listings/new"

    def test_listings_index(self, client: TestClient, db: Session, make_move) -> None:
        move = make_move()
        listing_service.create_listing(db, move, ListingForm(description="Under the bleachers."))
        response = client.get("/moves/turn-someone-on/listings")
        assert response.status_code == 200
        assert "Under the bleachers." in response.text

    def test_vote_listing_updates_top_listing(self, client: TestClient, db: Session, make_move) -> None:
        move = make_move()
        listing_service.create_listing(db, move, ListingForm(description="First."))
        second = listing_service.create_listing(db, move, ListingForm(description="Second."))

        response = client.get(f"{second.url}/up", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == move.url

        db.expire_all()
        assert listing_service.get_listing(db, second.id).upvotes == 1
        assert move_service.get_move(db, move.id).top_listing_id == second.id

    def test_downvote_listing(self, client: TestClient, db: Session, make_move) -> None:
        listing = listing_service.create_listing(db, make_move(), ListingForm(description="Meh."))
        client.get(f"{listing.url}/down", follow_redirects=False)
        db.expire_all()
        assert listing_service.get_listing(db, listing.id).downvotes == 1

    def test_vote_unknown_listing_is_404(self, client: TestClient) -> None:
        response = client.get("/listings/missing/up")
        assert response.status_code == 404
        assert "No listing has the id missing." in response.text

    def test_listing_permalink_redirects_to_move(self, client: TestClient, db: Session, make_move) -> None:
        listing = listing_service.create_listing(db, make_move(), ListingForm(description="Hi."))
        response = client.get(listing.url, follow_redirects=False)
        assert response.headers["location"] == f"/moves/turn-someone-on#listing-{listing.id}"

    def test_show_displays_top_listing(self, client: TestClient, db: Session, make_move) -> None:
        move = make_move()
        listing_service.create_listing(db, move, ListingForm(description="Kissed at prom."))
        response = client.get(move.url)
        assert "Top listing" in response.text
        assert "Kissed at prom." in response.text
