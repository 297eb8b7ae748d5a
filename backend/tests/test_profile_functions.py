from salonhub.repositories.paths import user_profile_path


# --------------------------------------------------------------------------- #
# getAuthUserProfile
# --------------------------------------------------------------------------- #
def test_get_own_profile(call, seed_profile):
    seed_profile("user-1", role="customer", favoriteSalons=["salon-1"])

    resp = call("getAuthUserProfile", uid="user-1")

    assert resp.status_code == 200
    profile = resp.json()["result"]
    assert profile["uid"] == "user-1"
    assert profile["role"] == "customer"
    assert profile["favoriteSalons"] == ["salon-1"]


def test_get_own_profile_before_ensure_is_null(call):
    resp = call("getAuthUserProfile", uid="user-1")

    assert resp.status_code == 200
    assert resp.json() == {"result": None}


def test_get_other_profile_requires_admin(call, seed_profile):
    seed_profile("user-1", role="customer")
    seed_profile("owner-1", role="salon")

    resp = call("getAuthUserProfile", {"uid": "owner-1"}, uid="user-1")

    assert resp.status_code == 403


def test_admin_reads_other_profile(call, admin, seed_profile):
    seed_profile("owner-1", role="user")

    resp = call("getAuthUserProfile", {"uid": "owner-1"}, uid="admin-1")

    assert resp.status_code == 200
    # legacy default role is reported as customer
    assert resp.json()["result"]["role"] == "customer"


def test_get_profile_requires_authentication(call):
    resp = call("getAuthUserProfile", {"uid": "user-1"})

    assert resp.status_code == 401


# --------------------------------------------------------------------------- #
# getAllUserProfiles
# --------------------------------------------------------------------------- #
def test_list_profiles_as_admin(call, db, admin, seed_profile):
    seed_profile("user-1")
    seed_profile("owner-1", role="salon", ownedSalons=["salon-1"])
    # a document in another application instance is not listed
    db.docs[user_profile_path("other-app", "stranger")] = {"uid": "stranger", "role": "customer"}

    resp = call("getAllUserProfiles", uid="admin-1")

    assert resp.status_code == 200
    uids = sorted(p["uid"] for p in resp.json()["result"])
    assert uids == ["admin-1", "owner-1", "user-1"]


def test_list_profiles_skips_malformed_documents(call, db, admin):
    db.docs[user_profile_path("default-app-id", "broken")] = {"role": "superuser"}

    resp = call("getAllUserProfiles", uid="admin-1")

    assert resp.status_code == 200
    assert [p["uid"] for p in resp.json()["result"]] == ["admin-1"]


def test_list_profiles_by_non_admin_is_permission_denied(call, seed_profile):
    seed_profile("user-1")

    resp = call("getAllUserProfiles", uid="user-1")

    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Only administrators can perform this action."


def test_list_profiles_store_failure_is_internal(call, db, admin):
    db.fail_reads = True

    resp = call("getAllUserProfiles", uid="admin-1")

    assert resp.status_code == 500
    assert resp.json()["error"]["status"] == "INTERNAL"


# --------------------------------------------------------------------------- #
# updateAuthUserProfile
# --------------------------------------------------------------------------- #
def test_update_own_display_fields(call, db, seed_profile):
    seed_profile("user-1")

    resp = call(
        "updateAuthUserProfile",
        {"displayName": "Carla C.", "phoneNumber": "+1 555 0100", "address": {"city": "Austin"}},
        uid="user-1",
    )

    assert resp.status_code == 200
    assert resp.json()["result"]["message"] == "Profile updated successfully!"
    stored = db.profile("user-1")
    assert stored["displayName"] == "Carla C."
    assert stored["phoneNumber"] == "+1 555 0100"
    assert stored["address"]["city"] == "Austin"
    assert stored["role"] == "customer"
    assert stored["updatedAt"] is not None


def test_update_own_role_requires_admin(call, db, seed_profile):
    seed_profile("user-1")

    resp = call("updateAuthUserProfile", {"role": "admin"}, uid="user-1")

    assert resp.status_code == 403
    assert db.profile("user-1")["role"] == "customer"


def test_update_ownership_fields_is_rejected(call, db, seed_profile):
    seed_profile("user-1")

    resp = call("updateAuthUserProfile", {"ownedSalons": ["salon-1"]}, uid="user-1")

    assert resp.status_code == 400
    assert resp.json()["error"]["status"] == "INVALID_ARGUMENT"
    assert db.profile("user-1")["ownedSalons"] == []


def test_update_other_profile_requires_admin(call, db, seed_profile):
    seed_profile("user-1")
    seed_profile("owner-1")

    resp = call("updateAuthUserProfile", {"targetUid": "owner-1", "displayName": "Hijacked"}, uid="user-1")

    assert resp.status_code == 403
    assert db.profile("owner-1")["displayName"] == "Olive Owner"


def test_admin_grants_admin_role(call, db, admin, seed_profile):
    seed_profile("user-1")

    resp = call("updateAuthUserProfile", {"targetUid": "user-1", "role": "admin"}, uid="admin-1")

    assert resp.status_code == 200
    assert db.profile("user-1")["role"] == "admin"


def test_admin_cannot_grant_salon_role_directly(call, db, admin, seed_profile):
    seed_profile("user-1")

    resp = call("updateAuthUserProfile", {"targetUid": "user-1", "role": "salon"}, uid="admin-1")

    assert resp.status_code == 400
    assert db.profile("user-1")["role"] == "customer"


def test_update_without_fields_is_invalid_argument(call, seed_profile):
    seed_profile("user-1")

    resp = call("updateAuthUserProfile", {}, uid="user-1")

    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "No profile fields to update."


def test_update_missing_target_is_not_found(call, admin):
    resp = call("updateAuthUserProfile", {"targetUid": "nobody", "displayName": "X"}, uid="admin-1")

    assert resp.status_code == 404


# --------------------------------------------------------------------------- #
# searchUsersByEmail
# --------------------------------------------------------------------------- #
def test_search_by_email_prefix(call, admin, seed_profile):
    seed_profile("owner-1")
    seed_profile("owner-2")
    seed_profile("user-1")

    resp = call("searchUsersByEmail", {"searchTerm": "SEC"}, uid="admin-1")

    assert resp.status_code == 200
    hits = resp.json()["result"]
    assert hits == [{"uid": "owner-2", "email": "second@b.com", "displayName": "Sam Second", "role": "customer"}]


def test_search_results_are_sorted_and_capped(call, db, admin):
    for i in range(12):
        db.docs[user_profile_path("default-app-id", f"u{i:02d}")] = {
            "uid": f"u{i:02d}",
            "email": f"staff{11 - i:02d}@b.com",
            "role": "customer",
        }

    resp = call("searchUsersByEmail", {"searchTerm": "staff"}, uid="admin-1")

    emails = [h["email"] for h in resp.json()["result"]]
    assert len(emails) == 10
    assert emails == sorted(emails)
    assert emails[0] == "staff00@b.com"


def test_search_term_too_short(call, admin):
    resp = call("searchUsersByEmail", {"searchTerm": "a"}, uid="admin-1")

    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Search term must be at least 2 characters."


def test_search_by_non_admin_is_permission_denied(call, seed_profile):
    seed_profile("user-1")

    resp = call("searchUsersByEmail", {"searchTerm": "se"}, uid="user-1")

    assert resp.status_code == 403


def test_get_malformed_profile_is_internal(call, seed_profile):
    seed_profile("user-1", role="manager")

    resp = call("getAuthUserProfile", uid="user-1")

    assert resp.status_code == 500
    assert resp.json()["error"]["message"] == "Failed to fetch user profile."
