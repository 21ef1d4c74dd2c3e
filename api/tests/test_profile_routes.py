from __future__ import annotations

import logging
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from conftest import (
    ADMIN_ID,
    AGENCY_ID,
    EMPLOYER_ID,
    OTHER_PRO_ID,
    OWNER_ID,
    PENDING_ID,
    FakeVisibilityRepository,
    bearer,
)
from talent_registry.core.headers import ROBOTS_TAG


def test_anonymous_visitor_gets_fully_redacted_profile(client: TestClient) -> None:
    response = client.get("/professionals/jordan-avery")
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["firstName"] == "J.A."
    assert user["lastName"] == ""
    assert user["email"] == ""
    assert user["phoneNumber"] is None
    assert user["image"] is None
    assert user["isAnonymous"] is True
    assert response.json()["resumeUrl"] is None
    assert response.json()["bio"] == "Estate manager with hospitality background."


def test_profile_responses_are_private_and_unindexed(client: TestClient) -> None:
    response = client.get("/professionals/jordan-avery")
    assert response.headers["cache-control"] == "private, max-age=30, must-revalidate"
    assert response.headers["pragma"] == "no-cache"
    assert response.headers["surrogate-control"] == "no-store"
    assert response.headers["x-robots-tag"] == ROBOTS_TAG


def test_repeat_anonymous_visits_count_once(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    first = client.get("/professionals/jordan-avery")
    second = client.get("/professionals/jordan-avery")
    assert first.json()["profileViews"] == 8
    assert second.json()["profileViews"] == 8
    assert len(fake_repo.view_events) == 1
    assert fake_repo.view_events[0]["viewer_key"].startswith("anon:")


def test_session_cookie_separates_anonymous_visitors(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    client.get("/professionals/jordan-avery", cookies={"tr_session": "one"})
    client.get("/professionals/jordan-avery", cookies={"tr_session": "two"})
    assert len({event["viewer_key"] for event in fake_repo.view_events}) == 2


def test_owner_sees_own_profile_without_counting(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    response = client.get("/professionals/jordan-avery", headers=bearer(OWNER_ID))
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["firstName"] == "Jordan"
    assert user["email"] == "jordan@example.com"
    assert response.json()["profileViews"] == 7
    assert fake_repo.view_events == []


def test_client_with_network_access_sees_name_but_not_contact(client: TestClient) -> None:
    response = client.get("/professionals/jordan-avery", headers=bearer(EMPLOYER_ID))
    user = response.json()["user"]
    assert user["firstName"] == "Jordan"
    assert user["displayName"] == "Jordan Avery"
    assert user["email"] == ""
    assert user["image"] is None


def test_client_with_application_sees_contact(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    fake_repo.applications.add((EMPLOYER_ID, OWNER_ID))
    response = client.get("/professionals/jordan-avery", headers=bearer(EMPLOYER_ID))
    user = response.json()["user"]
    assert user["email"] == "jordan@example.com"
    assert user["phoneNumber"] == "+1-555-0100"
    assert response.json()["additionalPhotos"] == ["https://cdn.example.com/jordan-2.png"]


def test_anonymous_candidate_shows_custom_initials_to_client(client: TestClient) -> None:
    response = client.get("/professionals/riley-jones", headers=bearer(EMPLOYER_ID))
    user = response.json()["user"]
    assert user["firstName"] == "R.J.T."
    assert user["isAnonymous"] is True
    assert user["preferredAnonymity"] is True
    assert user["customInitials"] == "RJT"


def test_client_without_network_access_is_fully_redacted(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    fake_repo.applications.add((AGENCY_ID, OWNER_ID))
    user = client.get("/professionals/jordan-avery", headers=bearer(AGENCY_ID)).json()["user"]
    assert user["firstName"] == "J.A."
    assert user["email"] == ""


def test_network_access_failure_fails_closed(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    fake_repo.fail_access = True
    response = client.get("/professionals/jordan-avery", headers=bearer(EMPLOYER_ID))
    assert response.status_code == 200
    assert response.json()["user"]["firstName"] == "J.A."


def test_view_recording_failure_still_serves_profile(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    fake_repo.fail_views = True
    response = client.get("/professionals/jordan-avery")
    assert response.status_code == 200
    assert response.json()["profileViews"] == 7


def test_unknown_slug_returns_not_found(client: TestClient) -> None:
    assert client.get("/professionals/nobody").status_code == 404


def test_pending_profile_is_hidden_from_others(client: TestClient) -> None:
    assert client.get("/professionals/pending-person").status_code == 404
    assert client.get("/professionals/pending-person", headers=bearer(EMPLOYER_ID)).status_code == 404
    assert client.get("/professionals/pending-person", headers=bearer(PENDING_ID)).status_code == 200


def test_malformed_authorization_header_is_rejected(client: TestClient) -> None:
    response = client.get("/professionals/jordan-avery", headers={"Authorization": "Token abc"})
    assert response.status_code == 401


def test_dashboard_view_requires_authentication(client: TestClient) -> None:
    assert client.get(f"/dashboard/view-profile/{OWNER_ID}").status_code == 401


def test_dashboard_view_denies_unknown_roles(client: TestClient) -> None:
    assert client.get(f"/dashboard/view-profile/{OWNER_ID}", headers=bearer("stranger")).status_code == 403


def test_dashboard_view_counts_professional_viewers(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    response = client.get(f"/dashboard/view-profile/{OWNER_ID}", headers=bearer(OTHER_PRO_ID))
    assert response.status_code == 200
    assert response.json()["user"]["firstName"] == "J.A."
    assert response.json()["profileViews"] == 8
    assert fake_repo.view_events[0]["viewer_id"] == OTHER_PRO_ID


def test_dashboard_view_of_missing_profile(client: TestClient) -> None:
    assert client.get("/dashboard/view-profile/missing", headers=bearer(EMPLOYER_ID)).status_code == 404


def test_profile_view_stats_for_owner(client: TestClient) -> None:
    client.get("/professionals/jordan-avery", headers=bearer(EMPLOYER_ID))
    response = client.get("/dashboard/profile-views", headers=bearer(OWNER_ID))
    assert response.status_code == 200
    assert response.json() == {
        "totalViews": 8,
        "last7DaysViews": 1,
        "previous7DaysViews": 0,
        "percentChange": 100.0,
    }


def test_profile_view_stats_without_profile(client: TestClient) -> None:
    assert client.get("/dashboard/profile-views", headers=bearer(EMPLOYER_ID)).status_code == 404


def test_admin_review_shows_everything_without_counting(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    response = client.get(f"/admin/profiles/{PENDING_ID}", headers=bearer(ADMIN_ID))
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "jordan@example.com"
    assert response.headers["cache-control"] == "private, max-age=0, must-revalidate"
    assert fake_repo.view_events == []


def test_admin_review_denies_non_admins(client: TestClient) -> None:
    assert client.get(f"/admin/profiles/{OWNER_ID}", headers=bearer(EMPLOYER_ID)).status_code == 403


def test_dashboard_view_by_admin_is_unredacted(client: TestClient) -> None:
    response = client.get(f"/dashboard/view-profile/{PENDING_ID}", headers=bearer(ADMIN_ID))
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "jordan@example.com"


def test_professional_with_slug_candidates_is_reachable(client: TestClient, fake_repo: FakeVisibilityRepository) -> None:
    fake_repo.profiles[OTHER_PRO_ID] = replace(fake_repo.profiles[OTHER_PRO_ID], slug="candidates")
    response = client.get("/professionals/candidates")
    assert response.status_code == 200
    assert response.json()["user"]["id"] == OTHER_PRO_ID


def test_request_log_uses_route_template(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="talent_registry.main")
    client.get("/professionals/jordan-avery")
    messages = [record.getMessage() for record in caplog.records if record.name == "talent_registry.main"]
    assert any("route=/professionals/{slug}" in message for message in messages)
    assert not any("jordan-avery" in message for message in messages)
